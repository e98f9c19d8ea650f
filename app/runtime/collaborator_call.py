import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Executor, wait
from typing import TypeVar

from app.logging.logger import Log
from app.runtime.cancellation import CancellationToken
from app.runtime.exceptions import CollaboratorTimeoutError, SubmissionCancelledError

T = TypeVar("T")


class CollaboratorCall:
    """Runs a blocking collaborator call with a deadline and cancellation.

    The call executes on *executor*; the caller waits in short slices so that
    a cancelled token or an expired deadline is noticed promptly. An abandoned
    call keeps its worker thread until the underlying client gives up, which
    is why every adapter also carries its own client-level timeout.
    """

    POLL_INTERVAL_SECONDS = 0.05

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    def run(
        self,
        collaborator: str,
        fn: Callable[[], T],
        timeout_seconds: float,
        token: CancellationToken | None = None,
    ) -> T:
        """Return fn()'s result or re-raise its exception.

        Raises:
            CollaboratorTimeoutError: if no answer arrives within *timeout_seconds*.
            SubmissionCancelledError: if *token* is cancelled while waiting.
        """
        if token is not None and token.is_cancelled():
            raise SubmissionCancelledError(f"Cancelled before calling {collaborator}")

        future = self._executor.submit(fn)
        deadline = time.monotonic() + timeout_seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                Log.warning(f"{collaborator} timed out after {timeout_seconds}s")
                raise CollaboratorTimeoutError(collaborator, timeout_seconds)
            done, _ = wait(
                [future],
                timeout=min(remaining, self.POLL_INTERVAL_SECONDS),
                return_when=FIRST_COMPLETED,
            )
            if done:
                return future.result()
            if token is not None and token.is_cancelled():
                future.cancel()
                raise SubmissionCancelledError(f"Cancelled while waiting on {collaborator}")

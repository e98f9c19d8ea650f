import threading


class CancellationToken:
    """Thread-safe flag the caller sets to abandon a submission.

    Stages check it between steps and while waiting on collaborators, so a
    cancelled submission stops at the next check instead of running on.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to *timeout* seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)

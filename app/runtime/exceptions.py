class CollaboratorUnavailableError(Exception):
    """Raised when an external collaborator cannot produce an answer."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(message)
        self.collaborator = collaborator


class CollaboratorTimeoutError(CollaboratorUnavailableError):
    """Raised when a collaborator call exceeds its time budget."""

    def __init__(self, collaborator: str, timeout_seconds: float) -> None:
        super().__init__(collaborator, f"{collaborator} did not answer within {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


class SubmissionCancelledError(Exception):
    """Raised when the caller abandons a submission mid-flight."""

from app.runtime.exceptions import CollaboratorUnavailableError

COLLABORATOR = "quality_service"


class QualityError(CollaboratorUnavailableError):
    """Raised when quality analysis fails."""

    def __init__(self, message: str) -> None:
        super().__init__(COLLABORATOR, message)


class QualityValidationError(QualityError):
    """Raised when the quality service answers with an invalid report."""


class QualityNetworkError(QualityError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class UnreadableContentError(Exception):
    """Raised when the blob itself yields no text to review.

    A property of the content, not of the quality service: resubmitting the
    same bytes fails the same way.
    """

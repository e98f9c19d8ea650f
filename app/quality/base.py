from abc import ABC, abstractmethod

from app.quality.models import QualityReport


class BaseQualityService(ABC):
    """Contract for all content-quality services."""

    @abstractmethod
    def analyze(self, blob: bytes, timeout_seconds: float) -> QualityReport:
        """Assess the quality of an uploaded blob.

        Args:
            blob: Raw content bytes, already scanned and deduplicated.
            timeout_seconds: Upper bound for any remote call made.

        Returns:
            QualityReport with a 0..1 score and any flagged reasons.

        Raises:
            UnreadableContentError: if no text can be read from the blob.
            QualityError: on any service failure.
        """

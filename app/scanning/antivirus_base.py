from abc import ABC, abstractmethod

from app.scanning.models import AntivirusResult


class BaseAntivirusScanner(ABC):
    """Contract for antivirus engine adapters."""

    @abstractmethod
    def scan(self, blob: bytes) -> AntivirusResult:
        """Scan raw bytes for malware.

        Raises:
            AntivirusUnavailableError: if the engine cannot produce a verdict.
        """

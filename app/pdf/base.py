from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    def __init__(self, max_pages: int | None = None) -> None:
        self._max_pages = max_pages

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Only the first ``max_pages`` pages are read when a limit is set, which
        keeps fingerprinting of very large uploads bounded.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """

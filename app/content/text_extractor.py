from app.content.exceptions import UnsupportedContentError
from app.content.sniffer import PDF_MIME_TYPE, TEXT_MIME_TYPE, sniff_mime_type
from app.pdf.base import BasePdfExtractor


class ContentTextExtractor:
    """Extracts plain text from an accepted content type."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def extract(self, blob: bytes, mime_type: str | None = None) -> str:
        """Return the text carried by *blob*.

        Raises:
            PdfExtractionError: if a PDF cannot be parsed.
            UnsupportedContentError: if the content type carries no text.
        """
        mime_type = mime_type or sniff_mime_type(blob)
        if mime_type == PDF_MIME_TYPE:
            return self._pdf_extractor.extract(blob)
        if mime_type == TEXT_MIME_TYPE:
            return blob.decode("utf-8", errors="replace")
        raise UnsupportedContentError(f"No text extractor for content type {mime_type!r}")

"""Magic-byte content type detection for uploaded blobs."""

PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPE = "text/plain"

_PDF_HEADER_WINDOW = 1024
_TEXT_SAMPLE_BYTES = 64 * 1024

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"\x7fELF", "application/x-executable"),
    (b"MZ", "application/x-msdownload"),
    (b"{\\rtf", "application/rtf"),
)


def sniff_mime_type(blob: bytes) -> str | None:
    """Return the MIME type implied by the blob's leading bytes.

    PDF readers accept the ``%PDF-`` header anywhere in the first kilobyte, so
    the same window is searched here. Content that is valid UTF-8 without NUL
    bytes is reported as plain text. Returns None when nothing matches.
    """
    if not blob:
        return None
    if blob.find(b"%PDF-", 0, _PDF_HEADER_WINDOW) != -1:
        return PDF_MIME_TYPE
    for signature, mime_type in _SIGNATURES:
        if blob.startswith(signature):
            return mime_type
    if _looks_like_text(blob[:_TEXT_SAMPLE_BYTES], truncated=len(blob) > _TEXT_SAMPLE_BYTES):
        return TEXT_MIME_TYPE
    return None


def _looks_like_text(sample: bytes, truncated: bool) -> bool:
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as exc:
        # a multi-byte sequence cut by the sample boundary is still text
        return truncated and exc.start >= len(sample) - 3 and exc.reason == "unexpected end of data"
    return True

class ContentError(Exception):
    """Base exception for content inspection errors."""


class UnsupportedContentError(ContentError):
    """Raised when text cannot be extracted from a content type."""

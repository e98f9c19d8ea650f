class MetadataValidationError(Exception):
    """Raised when a metadata field fails validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

class DuplicateIndexError(Exception):
    """Base exception for duplicate index errors."""


class DuplicateEntryError(DuplicateIndexError):
    """Raised when an insert would store a second entry for a hash or reference id."""


class IndexStoreError(DuplicateIndexError):
    """Raised when the checkpoint store cannot load or persist entries."""


class CorruptCheckpointError(IndexStoreError):
    """Raised when a stored checkpoint row cannot be decoded."""

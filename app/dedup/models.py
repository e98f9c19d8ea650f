from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DuplicateIndexEntry:
    """An accepted submission as remembered by the duplicate index."""

    exact_hash: str
    near_hash: int
    reference_id: str


@dataclass(frozen=True, slots=True)
class NearMatch:
    """An indexed entry confirmed within the near-duplicate threshold."""

    reference_id: str
    distance: int

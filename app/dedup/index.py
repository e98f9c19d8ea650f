"""In-memory duplicate index.

Exact duplicates are found through a hash map keyed by the SHA-256 digest.
Near duplicates are found through band buckets: the 64-bit near hash is cut
into ``band_count`` contiguous bit ranges and every entry is filed under each
(band, value) pair. Two hashes within Hamming distance ``band_count - 1``
differ in at most that many bands, so they always share at least one bucket;
candidates are then confirmed by computing the exact distance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.dedup.exceptions import DuplicateEntryError, IndexStoreError
from app.dedup.models import DuplicateIndexEntry, NearMatch
from app.dedup.rwlock import ReadWriteLock
from app.fingerprint.engine import hamming_distance
from app.fingerprint.models import NEAR_HASH_BITS
from app.logging.logger import Log

if TYPE_CHECKING:
    from app.dedup.store_base import BaseDuplicateIndexStore


def band_layout(band_count: int) -> list[tuple[int, int]]:
    """Return (shift, mask) per band, widths differing by at most one bit."""
    if not 1 <= band_count <= NEAR_HASH_BITS:
        raise ValueError(f"band_count must be between 1 and {NEAR_HASH_BITS}, got {band_count}")
    base, extra = divmod(NEAR_HASH_BITS, band_count)
    layout: list[tuple[int, int]] = []
    shift = 0
    for band in range(band_count):
        width = base + 1 if band < extra else base
        layout.append((shift, (1 << width) - 1))
        shift += width
    return layout


class DuplicateIndex:
    """Exact and near-duplicate lookup over accepted submissions."""

    def __init__(self, band_count: int) -> None:
        self._bands = band_layout(band_count)
        self._lock = ReadWriteLock()
        self._by_exact: dict[str, DuplicateIndexEntry] = {}
        self._by_reference: dict[str, DuplicateIndexEntry] = {}
        self._buckets: dict[tuple[int, int], set[str]] = {}

    @classmethod
    def for_threshold(cls, threshold: int, band_count: int | None = None) -> DuplicateIndex:
        """Build an index whose buckets cannot miss matches within *threshold*."""
        bands = band_count if band_count is not None else threshold + 1
        if bands < threshold + 1:
            Log.warning(
                f"near_duplicate_bands={bands} is below threshold+1; "
                f"some matches within distance {threshold} may be missed"
            )
        return cls(band_count=min(bands, NEAR_HASH_BITS))

    @classmethod
    def from_store(
        cls,
        store: BaseDuplicateIndexStore | None,
        threshold: int,
        band_count: int | None = None,
    ) -> DuplicateIndex:
        """Build an index and reload it from *store*.

        A store that cannot be read, or holds inconsistent rows, leaves the
        index empty; accepted content still lives in the object store and can
        be re-indexed by a reconciliation pass.
        """
        index = cls.for_threshold(threshold, band_count)
        if store is None:
            return index
        try:
            entries = store.load()
            for entry in entries:
                index.insert(entry)
        except (IndexStoreError, DuplicateEntryError) as exc:
            Log.warning(f"Duplicate index checkpoint unusable, starting empty (degraded): {exc}")
            return cls.for_threshold(threshold, band_count)
        Log.info(f"Duplicate index loaded {len(index)} entries")
        return index

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._by_reference)

    def lookup_exact(self, exact_hash: str) -> str | None:
        with self._lock.read():
            entry = self._by_exact.get(exact_hash)
        return entry.reference_id if entry is not None else None

    def lookup_near(self, near_hash: int) -> list[DuplicateIndexEntry]:
        """Candidates sharing at least one band with *near_hash*, unconfirmed."""
        with self._lock.read():
            references: set[str] = set()
            for band, key in enumerate(self._band_keys(near_hash)):
                references.update(self._buckets.get((band, key), ()))
            return [self._by_reference[ref] for ref in sorted(references)]

    def find_near(self, near_hash: int, threshold: int) -> list[NearMatch]:
        """Confirmed matches within *threshold*, closest first."""
        matches = [
            NearMatch(entry.reference_id, hamming_distance(near_hash, entry.near_hash))
            for entry in self.lookup_near(near_hash)
        ]
        confirmed = [m for m in matches if m.distance <= threshold]
        confirmed.sort(key=lambda m: (m.distance, m.reference_id))
        return confirmed

    def insert(self, entry: DuplicateIndexEntry) -> None:
        """Add an accepted entry.

        Raises:
            DuplicateEntryError: if the exact hash or reference id is already indexed.
        """
        with self._lock.write():
            existing = self._by_exact.get(entry.exact_hash)
            if existing is not None:
                raise DuplicateEntryError(
                    f"Exact hash {entry.exact_hash} already indexed as {existing.reference_id}"
                )
            self._add(entry)

    def insert_if_absent(self, entry: DuplicateIndexEntry) -> str | None:
        """Atomically insert unless the exact hash is taken.

        Returns:
            None when inserted, otherwise the reference id already holding the hash.
        """
        with self._lock.write():
            existing = self._by_exact.get(entry.exact_hash)
            if existing is not None:
                return existing.reference_id
            self._add(entry)
            return None

    def entries(self) -> list[DuplicateIndexEntry]:
        with self._lock.read():
            return list(self._by_reference.values())

    def _add(self, entry: DuplicateIndexEntry) -> None:
        if entry.reference_id in self._by_reference:
            raise DuplicateEntryError(f"Reference id {entry.reference_id} already indexed")
        self._by_exact[entry.exact_hash] = entry
        self._by_reference[entry.reference_id] = entry
        for band, key in enumerate(self._band_keys(entry.near_hash)):
            self._buckets.setdefault((band, key), set()).add(entry.reference_id)

    def _band_keys(self, near_hash: int) -> list[int]:
        return [(near_hash >> shift) & mask for shift, mask in self._bands]

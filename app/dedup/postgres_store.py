import re
from collections.abc import Iterable

import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.dedup.exceptions import CorruptCheckpointError, IndexStoreError
from app.dedup.models import DuplicateIndexEntry
from app.dedup.store_base import BaseDuplicateIndexStore

_EXACT_HASH_RE = re.compile(r"^[0-9a-f]{64}$")
_NEAR_HASH_RE = re.compile(r"^[0-9a-f]{16}$")


class PostgresDuplicateIndexStore(BaseDuplicateIndexStore):
    """Checkpoints duplicate index entries to the duplicate_index_entries table."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS duplicate_index_entries (
            reference_id TEXT PRIMARY KEY,
            exact_hash CHAR(64) NOT NULL UNIQUE,
            near_hash CHAR(16) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """

    def ensure_schema(self) -> None:
        try:
            with get_connection() as conn:
                conn.execute(self.SCHEMA)
                conn.commit()
        except psycopg.Error as exc:
            raise IndexStoreError(f"Failed to create duplicate index table: {exc}") from exc

    def load(self) -> list[DuplicateIndexEntry]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT reference_id, exact_hash, near_hash
                        FROM duplicate_index_entries
                        ORDER BY created_at, reference_id
                        """
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise IndexStoreError(f"Failed to load duplicate index: {exc}") from exc
        return [self._row_to_entry(row) for row in rows]

    def checkpoint(self, entries: Iterable[DuplicateIndexEntry]) -> None:
        params = [
            (entry.reference_id, entry.exact_hash, f"{entry.near_hash:016x}")
            for entry in entries
        ]
        if not params:
            return
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.executemany(
                        """
                        INSERT INTO duplicate_index_entries (reference_id, exact_hash, near_hash)
                        VALUES (%s, %s, %s)
                        ON CONFLICT DO NOTHING
                        """,
                        params,
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise IndexStoreError(f"Failed to checkpoint duplicate index: {exc}") from exc

    @staticmethod
    def _row_to_entry(row: dict[str, object]) -> DuplicateIndexEntry:
        reference_id = row.get("reference_id")
        exact_hash = str(row.get("exact_hash") or "").strip().lower()
        near_hash = str(row.get("near_hash") or "").strip().lower()
        if not reference_id or not isinstance(reference_id, str):
            raise CorruptCheckpointError(f"Invalid reference_id in checkpoint row: {row!r}")
        if not _EXACT_HASH_RE.match(exact_hash):
            raise CorruptCheckpointError(f"Invalid exact_hash for {reference_id}")
        if not _NEAR_HASH_RE.match(near_hash):
            raise CorruptCheckpointError(f"Invalid near_hash for {reference_id}")
        return DuplicateIndexEntry(
            exact_hash=exact_hash,
            near_hash=int(near_hash, 16),
            reference_id=reference_id,
        )

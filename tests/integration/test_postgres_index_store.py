import hashlib
import uuid

import pytest

from app.dedup.checkpointer import IndexCheckpointer
from app.dedup.exceptions import CorruptCheckpointError
from app.dedup.index import DuplicateIndex
from app.dedup.models import DuplicateIndexEntry
from app.dedup.postgres_store import PostgresDuplicateIndexStore


def _entry(ref: str, near_hash: int = 0x0123456789ABCDEF) -> DuplicateIndexEntry:
    return DuplicateIndexEntry(
        exact_hash=hashlib.sha256(ref.encode()).hexdigest(),
        near_hash=near_hash,
        reference_id=ref,
    )


@pytest.mark.integration
class TestPostgresIndexStoreCheckpoint:
    def test_checkpoint_then_load_contains_entry(
        self, index_store: PostgresDuplicateIndexStore, reference_id: str
    ) -> None:
        entry = _entry(reference_id)
        index_store.checkpoint([entry])
        loaded = {e.reference_id: e for e in index_store.load()}
        assert loaded[reference_id] == entry

    def test_checkpoint_is_idempotent(
        self, index_store: PostgresDuplicateIndexStore, reference_id: str, db_conn
    ) -> None:
        entry = _entry(reference_id)
        index_store.checkpoint([entry])
        index_store.checkpoint([entry])
        with db_conn.cursor() as cur:
            cur.execute(
                "SELECT COUNT(*) FROM duplicate_index_entries WHERE reference_id = %s",
                (reference_id,),
            )
            row = cur.fetchone()
        assert row is not None
        assert row[0] == 1

    def test_near_hash_with_high_bit_survives(
        self, index_store: PostgresDuplicateIndexStore, reference_id: str
    ) -> None:
        entry = _entry(reference_id, near_hash=0xFFFF_0000_FFFF_0001)
        index_store.checkpoint([entry])
        loaded = {e.reference_id: e for e in index_store.load()}
        assert loaded[reference_id].near_hash == 0xFFFF_0000_FFFF_0001

    def test_empty_checkpoint_is_noop(self, index_store: PostgresDuplicateIndexStore) -> None:
        index_store.checkpoint([])


@pytest.mark.integration
class TestPostgresIndexStoreRestore:
    def test_index_restored_from_store_finds_entry(
        self, index_store: PostgresDuplicateIndexStore, integration_cleanup: list[str]
    ) -> None:
        index = DuplicateIndex.for_threshold(8)
        checkpointer = IndexCheckpointer(index, index_store, every=1)
        ref = str(uuid.uuid4())
        integration_cleanup.append(ref)
        entry = _entry(ref)
        assert index.insert_if_absent(entry) is None
        checkpointer.record_insert()

        restored = DuplicateIndex.from_store(index_store, threshold=8)
        assert restored.lookup_exact(entry.exact_hash) == ref

    def test_corrupt_row_is_reported(
        self, index_store: PostgresDuplicateIndexStore, reference_id: str, db_conn
    ) -> None:
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO duplicate_index_entries (reference_id, exact_hash, near_hash)
                VALUES (%s, %s, %s)
                """,
                (reference_id, "z" * 64, "0" * 16),
            )
        db_conn.commit()
        with pytest.raises(CorruptCheckpointError):
            index_store.load()

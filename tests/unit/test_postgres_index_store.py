"""Tests for PostgresDuplicateIndexStore with a mocked connection."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from app.dedup.exceptions import CorruptCheckpointError, IndexStoreError
from app.dedup.models import DuplicateIndexEntry
from app.dedup.postgres_store import PostgresDuplicateIndexStore


def _mock_connection(rows: list[dict[str, Any]] | None = None) -> tuple[MagicMock, MagicMock]:
    conn = MagicMock()
    cur = MagicMock()
    cur.fetchall.return_value = rows or []
    conn.cursor.return_value.__enter__.return_value = cur
    return conn, cur


def _patch_connection(conn: MagicMock) -> Any:
    @contextmanager
    def _get_connection() -> Generator[MagicMock, None, None]:
        yield conn

    return patch("app.dedup.postgres_store.get_connection", _get_connection)


class TestLoad:
    def test_decodes_rows(self) -> None:
        conn, _ = _mock_connection(
            [{"reference_id": "ref-1", "exact_hash": "a" * 64, "near_hash": "00000000000000ff"}]
        )
        with _patch_connection(conn):
            entries = PostgresDuplicateIndexStore().load()
        assert entries == [DuplicateIndexEntry("a" * 64, 255, "ref-1")]

    def test_uppercase_hex_is_accepted(self) -> None:
        conn, _ = _mock_connection(
            [{"reference_id": "ref-1", "exact_hash": "A" * 64, "near_hash": "FFFFFFFFFFFFFFFF"}]
        )
        with _patch_connection(conn):
            entries = PostgresDuplicateIndexStore().load()
        assert entries[0].exact_hash == "a" * 64
        assert entries[0].near_hash == (1 << 64) - 1

    @pytest.mark.parametrize(
        "row",
        [
            {"reference_id": "", "exact_hash": "a" * 64, "near_hash": "0" * 16},
            {"reference_id": "ref", "exact_hash": "xyz", "near_hash": "0" * 16},
            {"reference_id": "ref", "exact_hash": "a" * 64, "near_hash": "not-hex"},
            {"reference_id": "ref", "exact_hash": None, "near_hash": "0" * 16},
        ],
    )
    def test_corrupt_rows_raise(self, row: dict[str, Any]) -> None:
        conn, _ = _mock_connection([row])
        with _patch_connection(conn), pytest.raises(CorruptCheckpointError):
            PostgresDuplicateIndexStore().load()

    def test_database_error_is_wrapped(self) -> None:
        conn, cur = _mock_connection()
        cur.execute.side_effect = psycopg.OperationalError("server closed the connection")
        with _patch_connection(conn), pytest.raises(IndexStoreError, match="Failed to load"):
            PostgresDuplicateIndexStore().load()


class TestCheckpoint:
    def test_writes_hex_encoded_entries(self) -> None:
        conn, cur = _mock_connection()
        with _patch_connection(conn):
            PostgresDuplicateIndexStore().checkpoint([DuplicateIndexEntry("b" * 64, 1, "ref-9")])
        params = cur.executemany.call_args.args[1]
        assert params == [("ref-9", "b" * 64, "0000000000000001")]
        assert "ON CONFLICT DO NOTHING" in cur.executemany.call_args.args[0]
        conn.commit.assert_called_once()

    def test_empty_checkpoint_skips_database(self) -> None:
        conn, _ = _mock_connection()
        with _patch_connection(conn):
            PostgresDuplicateIndexStore().checkpoint([])
        conn.cursor.assert_not_called()

    def test_database_error_is_wrapped(self) -> None:
        conn, cur = _mock_connection()
        cur.executemany.side_effect = psycopg.OperationalError("disk full")
        with _patch_connection(conn), pytest.raises(IndexStoreError, match="checkpoint"):
            PostgresDuplicateIndexStore().checkpoint([DuplicateIndexEntry("b" * 64, 1, "r")])


class TestEnsureSchema:
    def test_creates_table(self) -> None:
        conn, _ = _mock_connection()
        with _patch_connection(conn):
            PostgresDuplicateIndexStore().ensure_schema()
        assert "duplicate_index_entries" in conn.execute.call_args.args[0]
        conn.commit.assert_called_once()

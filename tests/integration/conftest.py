import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.dedup.postgres_store import PostgresDuplicateIndexStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "upload_gateway_test")
    return Settings(db_pool_timeout_seconds=2.0)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at one.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def index_store(integration_pool: None) -> PostgresDuplicateIndexStore:
    store = PostgresDuplicateIndexStore()
    store.ensure_schema()
    return store


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Collects reference ids whose checkpoint rows are deleted after the test."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(
                "DELETE FROM duplicate_index_entries WHERE reference_id = ANY(%s)",
                (cleanup,),
            )
        conn.commit()


@pytest.fixture
def reference_id(integration_cleanup: list[str]) -> str:
    ref = str(uuid.uuid4())
    integration_cleanup.append(ref)
    return ref

from app.config.settings import Settings
from app.database.connection import init_pool
from app.dedup.exceptions import IndexStoreError
from app.dedup.postgres_store import PostgresDuplicateIndexStore
from app.dedup.store_base import BaseDuplicateIndexStore
from app.logging.logger import Log


class DuplicateIndexStoreFactory:
    """Creates the configured checkpoint store, or None when checkpointing is off."""

    BACKENDS = ("none", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseDuplicateIndexStore | None:
        backend = settings.index_store.lower()
        if backend == "none":
            return None
        if backend == "postgres":
            init_pool(settings)
            store = PostgresDuplicateIndexStore()
            try:
                store.ensure_schema()
            except IndexStoreError as exc:
                Log.warning(f"Duplicate index store not ready at startup: {exc}")
            return store
        raise ValueError(
            f"Unknown index store '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )

from app.dedup.checkpointer import IndexCheckpointer
from app.dedup.index import DuplicateIndex
from app.dedup.models import DuplicateIndexEntry, NearMatch
from app.dedup.store_base import BaseDuplicateIndexStore

__all__ = [
    "BaseDuplicateIndexStore",
    "DuplicateIndex",
    "DuplicateIndexEntry",
    "IndexCheckpointer",
    "NearMatch",
]

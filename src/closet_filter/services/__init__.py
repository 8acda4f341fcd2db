"""Search, debouncing, sessions and snapshot persistence."""

from .debounce import Debouncer
from .search import ItemSearchService
from .session import FilterSession, SearchResult
from .snapshot import SnapshotStore

__all__ = [
    "Debouncer",
    "ItemSearchService",
    "FilterSession",
    "SearchResult",
    "SnapshotStore",
]

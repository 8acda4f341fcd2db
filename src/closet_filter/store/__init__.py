"""Item store: repository, live queries and result caching."""

from .repository import ItemRepository
from .live import LiveQuery
from .cache import TTLCache, make_cache_key, make_filter_key

__all__ = [
    "ItemRepository",
    "LiveQuery",
    "TTLCache",
    "make_cache_key",
    "make_filter_key",
]

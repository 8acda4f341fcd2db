"""Filter state ownership and input normalization."""

from .manager import FilterManager
from .normalize import (
    normalize_label,
    normalize_labels,
    normalize_search_text,
    normalize_sizes,
    normalize_state,
    normalize_values,
    parse_size,
)

__all__ = [
    "FilterManager",
    "normalize_label",
    "normalize_labels",
    "normalize_search_text",
    "normalize_sizes",
    "normalize_state",
    "normalize_values",
    "parse_size",
]

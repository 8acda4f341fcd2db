"""Lenient normalization of raw filter input.

Raw values come from UI controls, query strings and persisted snapshots. Anything
that cannot become a valid FilterState member is dropped here instead of raised,
so the filter engine always stays in a usable state.
"""

from typing import Any, Iterable

from closet_filter.config.logging_config import get_logger
from closet_filter.models.filter_state import (
    MAX_SEARCH_TEXT_LENGTH,
    MAX_VALUE_LENGTH,
    FilterState,
    FilterType,
)

logger = get_logger("normalize")


def parse_size(value: Any) -> int | None:
    """Parse one size value, returning None when it is not a positive integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            size = int(value.strip())
        except ValueError:
            return None
        return size if size > 0 else None
    return None


def normalize_sizes(values: Iterable[Any]) -> frozenset:
    sizes = set()
    for value in values:
        size = parse_size(value)
        if size is None:
            logger.debug("Dropping invalid size filter value %r", value)
            continue
        sizes.add(size)
    return frozenset(sizes)


def normalize_label(value: Any) -> str | None:
    """Trim a color/category value; None when blank, over-length or not text."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed or len(trimmed) > MAX_VALUE_LENGTH:
        return None
    return trimmed


def normalize_labels(values: Iterable[Any]) -> frozenset:
    labels = set()
    for value in values:
        label = normalize_label(value)
        if label is None:
            logger.debug("Dropping invalid filter value %r", value)
            continue
        labels.add(label)
    return frozenset(labels)


def normalize_search_text(text: Any) -> str:
    """Trim and truncate search text. Non-text input becomes empty."""
    if not isinstance(text, str):
        return ""
    # Truncation can expose trailing whitespace, so trim again
    return text.strip()[:MAX_SEARCH_TEXT_LENGTH].strip()


def normalize_values(filter_type: FilterType, values: Iterable[Any]) -> frozenset:
    """Normalize raw values for one axis.

    For SEARCH the first value is taken as the text; the result is a set holding
    that text, or an empty set when it is blank.
    """
    if isinstance(values, (str, bytes)):
        values = [values]
    if filter_type is FilterType.SIZE:
        return normalize_sizes(values)
    if filter_type in (FilterType.COLOR, FilterType.CATEGORY):
        return normalize_labels(values)
    text = normalize_search_text(next(iter(values), ""))
    return frozenset([text]) if text else frozenset()


def normalize_state(
    sizes: Iterable[Any] = (),
    colors: Iterable[Any] = (),
    categories: Iterable[Any] = (),
    search_text: Any = "",
) -> FilterState:
    """Build a valid FilterState from raw values, dropping invalid entries."""
    return FilterState(
        size_filters=normalize_sizes(sizes),
        color_filters=normalize_labels(colors),
        category_filters=normalize_labels(categories),
        search_text=normalize_search_text(search_text),
    )

"""Filter value objects.

FilterState is the immutable snapshot of every active filter selection. It is
replaced, never mutated: FilterManager builds a new instance for each change and
everything downstream receives it by value.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from closet_filter.errors import ValidationError

# Invariant limits shared with the normalization layer
MAX_VALUE_LENGTH = 100
MAX_SEARCH_TEXT_LENGTH = 200


class FilterType(str, Enum):
    """Filter axes. SIZE, COLOR and CATEGORY are multi-valued; SEARCH holds one text."""

    SIZE = "size"
    COLOR = "color"
    CATEGORY = "category"
    SEARCH = "search"

    @classmethod
    def parse(cls, value: "str | FilterType") -> "FilterType":
        """Accept either the enum value ('size') or its name ('SIZE')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            raise ValidationError(f"Unknown filter type: {value!r}", field="type") from None

    @property
    def is_multi_valued(self) -> bool:
        return self is not FilterType.SEARCH


def check_label(value: Any, field_name: str) -> str:
    """Return ``value`` if it is a trimmed, non-blank label of at most 100 characters."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} values must be strings: {value!r}", field=field_name)
    if not value.strip():
        raise ValidationError(f"{field_name} values must not be blank", field=field_name)
    if value != value.strip():
        raise ValidationError(f"{field_name} values must be trimmed: {value!r}", field=field_name)
    if len(value) > MAX_VALUE_LENGTH:
        raise ValidationError(
            f"{field_name} values must be at most {MAX_VALUE_LENGTH} characters",
            field=field_name,
        )
    return value


@dataclass(frozen=True)
class FilterState:
    """Immutable snapshot of the active filter selections."""

    size_filters: frozenset = field(default_factory=frozenset)
    color_filters: frozenset = field(default_factory=frozenset)
    category_filters: frozenset = field(default_factory=frozenset)
    search_text: str = ""

    def __post_init__(self):
        for name in ("size_filters", "color_filters", "category_filters"):
            # A bare string would otherwise become a set of its characters
            if isinstance(getattr(self, name), (str, bytes)):
                raise ValidationError(f"{name} must be a collection of values, not a string", field=name)
        sizes = frozenset(self.size_filters)
        for size in sizes:
            # bool is an int subclass but never a valid size
            if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
                raise ValidationError(f"Sizes must be positive integers: {size!r}", field="size_filters")
        colors = frozenset(check_label(c, "color_filters") for c in self.color_filters)
        categories = frozenset(check_label(c, "category_filters") for c in self.category_filters)

        if not isinstance(self.search_text, str):
            raise ValidationError("search_text must be a string", field="search_text")
        if self.search_text != self.search_text.strip():
            raise ValidationError("search_text must be trimmed", field="search_text")
        if len(self.search_text) > MAX_SEARCH_TEXT_LENGTH:
            raise ValidationError(
                f"search_text must be at most {MAX_SEARCH_TEXT_LENGTH} characters",
                field="search_text",
            )

        object.__setattr__(self, "size_filters", sizes)
        object.__setattr__(self, "color_filters", colors)
        object.__setattr__(self, "category_filters", categories)

    def has_active_filters(self) -> bool:
        """True if any axis is non-empty or the search text is non-blank."""
        return bool(
            self.size_filters
            or self.color_filters
            or self.category_filters
            or self.search_text.strip()
        )

    def active_filter_count(self) -> int:
        """Sum of per-axis cardinalities, plus one for a non-blank search text."""
        count = len(self.size_filters) + len(self.color_filters) + len(self.category_filters)
        if self.search_text.strip():
            count += 1
        return count

    def values_for(self, filter_type: FilterType) -> frozenset:
        """Return the selected values of one axis (SEARCH yields a 0/1 element set)."""
        if filter_type is FilterType.SIZE:
            return self.size_filters
        if filter_type is FilterType.COLOR:
            return self.color_filters
        if filter_type is FilterType.CATEGORY:
            return self.category_filters
        return frozenset([self.search_text]) if self.search_text else frozenset()

    def with_values(self, filter_type: FilterType, values: Iterable[Any]) -> "FilterState":
        """Return a copy with one axis replaced."""
        if filter_type is FilterType.SIZE:
            return replace(self, size_filters=frozenset(values))
        if filter_type is FilterType.COLOR:
            return replace(self, color_filters=frozenset(values))
        if filter_type is FilterType.CATEGORY:
            return replace(self, category_filters=frozenset(values))
        text = next(iter(values), "")
        return replace(self, search_text=text)

    def to_display_string(self) -> str:
        """Get a human-readable summary of active filters."""
        parts = []
        if self.size_filters:
            parts.append(f"Size: {', '.join(str(s) for s in sorted(self.size_filters))}")
        if self.color_filters:
            parts.append(f"Color: {', '.join(sorted(self.color_filters))}")
        if self.category_filters:
            parts.append(f"Category: {', '.join(sorted(self.category_filters))}")
        if self.search_text.strip():
            parts.append(f'Search: "{self.search_text}"')
        return " | ".join(parts)

    def to_chips(self) -> List["FilterChip"]:
        """Build selected chips for every active value, in display order."""
        chips = [FilterChip.for_size(s, True) for s in sorted(self.size_filters)]
        chips.extend(FilterChip.for_color(c, True) for c in sorted(self.color_filters))
        chips.extend(FilterChip.for_category(c, True) for c in sorted(self.category_filters))
        if self.search_text.strip():
            chips.append(FilterChip.for_search(self.search_text))
        return chips

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the flat session record."""
        return {
            "sizeFilters": sorted(self.size_filters),
            "colorFilters": sorted(self.color_filters),
            "categoryFilters": sorted(self.category_filters),
            "searchText": self.search_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterState":
        """Create from the flat session record. Values must already be normalized."""
        return cls(
            size_filters=frozenset(data.get("sizeFilters", [])),
            color_filters=frozenset(data.get("colorFilters", [])),
            category_filters=frozenset(data.get("categoryFilters", [])),
            search_text=data.get("searchText", ""),
        )


EMPTY_FILTER_STATE = FilterState()


@dataclass(frozen=True)
class FilterOptions:
    """Distinct selectable values currently present in the store."""

    available_sizes: Tuple[int, ...] = ()
    available_colors: Tuple[str, ...] = ()
    available_categories: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.available_sizes or self.available_colors or self.available_categories)

    def has_any_options(self) -> bool:
        return not self.is_empty()

    def total_options_count(self) -> int:
        return len(self.available_sizes) + len(self.available_colors) + len(self.available_categories)

    def chips(self, state: Optional[FilterState] = None) -> List["FilterChip"]:
        """Build one chip per option, marked selected when present in ``state``."""
        state = state or EMPTY_FILTER_STATE
        chips = [FilterChip.for_size(s, s in state.size_filters) for s in self.available_sizes]
        chips.extend(FilterChip.for_color(c, c in state.color_filters) for c in self.available_colors)
        chips.extend(
            FilterChip.for_category(c, c in state.category_filters) for c in self.available_categories
        )
        return chips


@dataclass(frozen=True)
class PaginationParameters:
    """Filter fields plus an offset/limit window."""

    size_filters: frozenset = field(default_factory=frozenset)
    color_filters: frozenset = field(default_factory=frozenset)
    category_filters: frozenset = field(default_factory=frozenset)
    search_text: str = ""
    offset: int = 0
    limit: int = 20

    def __post_init__(self):
        if isinstance(self.offset, bool) or not isinstance(self.offset, int) or self.offset < 0:
            raise ValidationError(f"offset must be >= 0: {self.offset!r}", field="offset")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit <= 0:
            raise ValidationError(f"limit must be > 0: {self.limit!r}", field="limit")
        # Reuse FilterState's invariant checks
        state = self.filter_state
        object.__setattr__(self, "size_filters", state.size_filters)
        object.__setattr__(self, "color_filters", state.color_filters)
        object.__setattr__(self, "category_filters", state.category_filters)

    @property
    def filter_state(self) -> FilterState:
        return FilterState(
            size_filters=self.size_filters,
            color_filters=self.color_filters,
            category_filters=self.category_filters,
            search_text=self.search_text,
        )

    @classmethod
    def from_state(cls, state: FilterState, offset: int, limit: int) -> "PaginationParameters":
        return cls(
            size_filters=state.size_filters,
            color_filters=state.color_filters,
            category_filters=state.category_filters,
            search_text=state.search_text,
            offset=offset,
            limit=limit,
        )


@dataclass(frozen=True)
class FilterChip:
    """A selectable filter control value."""

    type: FilterType
    value: str
    display_text: str
    is_selected: bool = False

    @classmethod
    def for_size(cls, size: int, is_selected: bool = False) -> "FilterChip":
        return cls(FilterType.SIZE, str(size), f"Size {size}", is_selected)

    @classmethod
    def for_color(cls, color: str, is_selected: bool = False) -> "FilterChip":
        return cls(FilterType.COLOR, color, color, is_selected)

    @classmethod
    def for_category(cls, category: str, is_selected: bool = False) -> "FilterChip":
        return cls(FilterType.CATEGORY, category, category, is_selected)

    @classmethod
    def for_search(cls, text: str) -> "FilterChip":
        return cls(FilterType.SEARCH, text, f'"{text}"', True)


@dataclass(frozen=True)
class ValueCount:
    """Grouped count for one axis value."""

    value: Any
    count: int

"""Pydantic schemas for the session snapshot record and API payloads."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from closet_filter.filters.normalize import normalize_state
from closet_filter.models.filter_state import FilterChip, FilterOptions, FilterState
from closet_filter.models.item import Item


class FilterStateSnapshot(BaseModel):
    """Flat record used to persist and restore a FilterState."""

    model_config = ConfigDict(populate_by_name=True)

    size_filters: list[Union[int, str]] = Field(default_factory=list, alias="sizeFilters")
    color_filters: list[str] = Field(default_factory=list, alias="colorFilters")
    category_filters: list[str] = Field(default_factory=list, alias="categoryFilters")
    search_text: str = Field("", alias="searchText")

    @classmethod
    def from_state(cls, state: FilterState) -> "FilterStateSnapshot":
        return cls.model_validate(state.to_dict())

    def to_state(self) -> FilterState:
        """Convert to a FilterState, dropping values that are no longer valid."""
        return normalize_state(
            sizes=self.size_filters,
            colors=self.color_filters,
            categories=self.category_filters,
            search_text=self.search_text,
        )


class FilterStateResponse(BaseModel):
    """Current filter state plus UI summary fields."""

    state: FilterStateSnapshot
    has_active_filters: bool
    active_filter_count: int
    display: str

    @classmethod
    def from_state(cls, state: FilterState) -> "FilterStateResponse":
        return cls(
            state=FilterStateSnapshot.from_state(state),
            has_active_filters=state.has_active_filters(),
            active_filter_count=state.active_filter_count(),
            display=state.to_display_string(),
        )


class FilterUpdateRequest(BaseModel):
    """Replacement values for one filter axis."""

    values: list[Union[int, str]] = Field(default_factory=list, description="Raw values for the axis")


class SearchTextRequest(BaseModel):
    """New free-text search value."""

    text: str = Field("", description="Search text (trimmed, max 200 chars)")


class FilterOptionsResponse(BaseModel):
    """Selectable values currently present in the store."""

    sizes: list[int]
    colors: list[str]
    categories: list[str]

    @classmethod
    def from_options(cls, options: FilterOptions) -> "FilterOptionsResponse":
        return cls(
            sizes=list(options.available_sizes),
            colors=list(options.available_colors),
            categories=list(options.available_categories),
        )


class ItemCreate(BaseModel):
    """Payload for adding an item to the catalog."""

    size: int = Field(..., gt=0, description="Numeric size")
    color: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    note: str = ""
    image_path: str = ""
    created_at: Optional[datetime] = None

    def to_item(self) -> Item:
        kwargs = {}
        if self.created_at is not None:
            kwargs["created_at"] = self.created_at
        return Item(
            size=self.size,
            color=self.color.strip(),
            category=self.category.strip(),
            note=self.note,
            image_path=self.image_path,
            **kwargs,
        )


class ItemResponse(BaseModel):
    """An item as returned by the API."""

    id: int
    size: int
    color: str
    category: str
    note: str
    image_path: str
    created_at: datetime

    @classmethod
    def from_item(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,
            size=item.size,
            color=item.color,
            category=item.category,
            note=item.note,
            image_path=item.image_path,
            created_at=item.created_at,
        )


class PaginationInfo(BaseModel):
    """Pagination metadata."""

    offset: int
    limit: int
    total: int


class ItemListResponse(BaseModel):
    """A window of matching items."""

    items: list[ItemResponse]
    pagination: PaginationInfo


class CountResponse(BaseModel):
    """Total number of matching items."""

    count: int


class ValueCountResponse(BaseModel):
    """Number of items sharing one size, color or category."""

    value: Union[int, str]
    count: int


class FilterChipResponse(BaseModel):
    """A selectable filter value as shown in the UI."""

    type: str
    value: str
    display_text: str
    is_selected: bool

    @classmethod
    def from_chip(cls, chip: FilterChip) -> "FilterChipResponse":
        return cls(
            type=chip.type.value,
            value=chip.value,
            display_text=chip.display_text,
            is_selected=chip.is_selected,
        )

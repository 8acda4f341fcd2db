"""Catalog item model."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

from closet_filter.errors import ValidationError
from closet_filter.models.filter_state import check_label

# Fields covered by free-text search
SEARCHABLE_FIELDS = ("color", "category", "note")


@dataclass(frozen=True)
class Item:
    """A tagged clothing item as stored in the catalog."""

    size: int
    color: str
    category: str
    note: str = ""
    image_path: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    id: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ValidationError(f"Item size must be a positive integer: {self.size!r}", field="size")
        # Labels follow the filter rules so every stored value stays selectable
        check_label(self.color, "color")
        check_label(self.category, "category")
        if self.note is None:
            object.__setattr__(self, "note", "")

    def with_id(self, item_id: int) -> "Item":
        return replace(self, id=item_id)

    def searchable_values(self) -> tuple:
        """Values checked by free-text search, in field order."""
        return tuple(getattr(self, name) for name in SEARCHABLE_FIELDS)

    def summary(self) -> str:
        return f"{self.category} ({self.color}, size {self.size})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "size": self.size,
            "color": self.color,
            "category": self.category,
            "note": self.note,
            "image_path": self.image_path,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Item":
        """Build from a row in ITEM_COLUMNS order."""
        item_id, image_path, size, color, category, note, created_at = row
        return cls(
            id=item_id,
            image_path=image_path or "",
            size=size,
            color=color,
            category=category,
            note=note or "",
            created_at=created_at,
        )

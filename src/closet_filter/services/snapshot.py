"""Persistence of the filter state between sessions.

The snapshot is the flat JSON record
``{"sizeFilters": [...], "colorFilters": [...], "categoryFilters": [...], "searchText": "..."}``.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from closet_filter.config import config
from closet_filter.config.logging_config import get_logger
from closet_filter.errors import ValidationError
from closet_filter.models.filter_state import FilterState
from closet_filter.models.schemas import FilterStateSnapshot

logger = get_logger("snapshot")


class SnapshotStore:
    """Reads and writes a single FilterState snapshot file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else config.app.snapshot_path

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, state: FilterState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = FilterStateSnapshot.from_state(state).model_dump_json(by_alias=True, indent=2)
        # One temp file per save so concurrent writers never share it
        temp_file = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        )
        try:
            with temp_file:
                temp_file.write(payload)
            os.replace(temp_file.name, self.path)
        except OSError:
            Path(temp_file.name).unlink(missing_ok=True)
            raise
        logger.debug("Saved filter snapshot to %s", self.path)

    def load(self) -> Optional[FilterState]:
        """Return the saved state, or None when nothing has been saved.

        Values that no longer pass validation are dropped.

        Raises:
            ValidationError: If the file is not a snapshot record.
        """
        if not self.path.exists():
            return None
        raw = self.path.read_text(encoding="utf-8")
        try:
            snapshot = FilterStateSnapshot.model_validate_json(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid filter snapshot in {self.path}: {e}", field="snapshot") from e
        state = snapshot.to_state()
        logger.info("Loaded filter snapshot: %s", state.to_display_string() or "(none)")
        return state

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Removed filter snapshot %s", self.path)

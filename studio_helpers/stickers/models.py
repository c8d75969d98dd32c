"""
Controller sticker layout models.

A layout is a grid of buttons addressed by zero-based (row, column). Each
position appears at most once.
"""

from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import Field, field_validator

from studio_helpers.storage.serialization import StoredRecord


DEFAULT_COLOR = "#4CAF50"
DEFAULT_GRID_SIZE = 4
DEFAULT_BUTTON_WIDTH = 20.0
DEFAULT_BUTTON_HEIGHT = 15.0
DEFAULT_UNIT = "mm"


class ControllerButton(StoredRecord):
    """One pad or key on the controller."""

    row: int = Field(ge=0)
    column: int = Field(ge=0)
    assigned_text: Optional[str] = None
    custom_name: Optional[str] = None
    color: str = DEFAULT_COLOR
    shape: Literal["square", "circle"] = "square"
    button_label: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_text and self.assigned_text.strip())

    @property
    def display_text(self) -> Optional[str]:
        """Custom name if set, else the assigned text."""
        return self.custom_name or self.assigned_text


class StoredLayout(StoredRecord):
    """A saved grid of buttons."""

    buttons: List[ControllerButton] = Field(default_factory=list)
    grid_rows: int = Field(default=DEFAULT_GRID_SIZE, ge=1)
    grid_columns: int = Field(default=DEFAULT_GRID_SIZE, ge=1)
    last_modified: Optional[datetime] = None

    @field_validator("buttons")
    @classmethod
    def validate_unique_positions(cls, v: List[ControllerButton]) -> List[ControllerButton]:
        """Each (row, column) may hold only one button."""
        seen = set()
        for button in v:
            position = (button.row, button.column)
            if position in seen:
                raise ValueError(f"Duplicate button at row {button.row}, column {button.column}")
            seen.add(position)
        return v


class ButtonSize(StoredRecord):
    """Physical size of one sticker cell."""

    width: float = Field(default=DEFAULT_BUTTON_WIDTH, gt=0)
    height: float = Field(default=DEFAULT_BUTTON_HEIGHT, gt=0)
    unit: Literal["mm", "cm"] = DEFAULT_UNIT
    last_modified: Optional[datetime] = None

    def in_mm(self) -> Tuple[float, float]:
        """(width, height) converted to millimetres."""
        factor = 10.0 if self.unit == "cm" else 1.0
        return self.width * factor, self.height * factor

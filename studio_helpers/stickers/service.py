"""
StickerLayoutService - persist controller sticker layouts and button sizes.

Both live under a single key each (StickerLayout, StickerButtonSize). Missing
or undecodable data falls back to defaults: a 4x4 blank grid and 20x15 mm
buttons.
"""

import logging
from datetime import datetime
from typing import Dict, List

from pydantic import ValidationError

from studio_helpers.errors import LayoutError
from studio_helpers.stickers.models import (
    DEFAULT_GRID_SIZE,
    ButtonSize,
    ControllerButton,
    StoredLayout,
)
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore
from studio_helpers.storage.serialization import dump_model


logger = logging.getLogger(__name__)


COLORS: Dict[str, str] = {
    "Green": "#4CAF50",
    "Red": "#F44336",
    "Pink": "#E91E63",
    "Blue": "#2196F3",
    "Yellow": "#FFEB3B",
    "Orange": "#FF9800",
    "Purple": "#9C27B0",
    "Teal": "#009688",
}


def create_default_layout(rows: int, columns: int) -> List[ControllerButton]:
    """Blank buttons for every cell, labelled 'row-column' counting from 1."""
    return [
        ControllerButton(row=row, column=column, button_label=f"{row + 1}-{column + 1}")
        for row in range(rows)
        for column in range(columns)
    ]


def default_layout() -> StoredLayout:
    return StoredLayout(
        buttons=create_default_layout(DEFAULT_GRID_SIZE, DEFAULT_GRID_SIZE),
        grid_rows=DEFAULT_GRID_SIZE,
        grid_columns=DEFAULT_GRID_SIZE,
    )


class StickerLayoutService:
    """Save and load sticker layouts."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def save_layout(self, buttons: List[ControllerButton], rows: int, columns: int) -> StoredLayout:
        """
        Store a layout, stamped with the current time.

        Raises:
            LayoutError: If positions repeat or the grid size is invalid
            StorageError: If the write fails
        """
        try:
            layout = StoredLayout(
                buttons=buttons,
                grid_rows=rows,
                grid_columns=columns,
                last_modified=datetime.now().replace(microsecond=0),
            )
        except ValidationError as e:
            raise LayoutError(f"Invalid sticker layout: {e}") from e

        self._store.set(keys.STICKER_LAYOUT, dump_model(layout))
        logger.info(f"Saved sticker layout {rows}x{columns} with {len(buttons)} buttons")
        return layout

    def load_layout(self) -> StoredLayout:
        """Stored layout, or the default 4x4 layout if absent or unreadable."""
        raw = self._store.get(keys.STICKER_LAYOUT)
        if raw and raw.strip():
            try:
                return StoredLayout.model_validate_json(raw)
            except ValidationError as e:
                logger.warning(f"Stored sticker layout unreadable, using default: {e}")
        return default_layout()

    def create_default_layout(self, rows: int, columns: int) -> List[ControllerButton]:
        return create_default_layout(rows, columns)

    @staticmethod
    def available_colors() -> Dict[str, str]:
        """Named button colours (name -> hex)."""
        return dict(COLORS)

    def has_layout(self) -> bool:
        return bool(self._store.get(keys.STICKER_LAYOUT))

    def save_button_size(self, width: float, height: float, unit: str) -> ButtonSize:
        """
        Store the preferred sticker cell size.

        Raises:
            LayoutError: If a dimension is not positive or unit is not mm/cm
        """
        try:
            size = ButtonSize(
                width=width,
                height=height,
                unit=unit,
                last_modified=datetime.now().replace(microsecond=0),
            )
        except ValidationError as e:
            raise LayoutError(f"Invalid button size: {e}") from e

        self._store.set(keys.STICKER_BUTTON_SIZE, dump_model(size))
        return size

    def load_button_size(self) -> ButtonSize:
        """Stored button size, or 20x15 mm if absent or unreadable."""
        raw = self._store.get(keys.STICKER_BUTTON_SIZE)
        if raw and raw.strip():
            try:
                return ButtonSize.model_validate_json(raw)
            except ValidationError as e:
                logger.warning(f"Stored button size unreadable, using default: {e}")
        return ButtonSize()

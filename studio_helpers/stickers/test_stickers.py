"""
Tests for sticker layouts

Validates:
- Default layout is 4x4 with one-based "row-column" labels
- is_assigned / display_text derivation
- Duplicate grid positions rejected with LayoutError
- Layout and button size persist with PascalCase JSON
- Absent or corrupt data falls back to defaults
"""

import json

import pytest

from studio_helpers.errors import LayoutError
from studio_helpers.stickers import (
    COLORS,
    ButtonSize,
    ControllerButton,
    StickerLayoutService,
    create_default_layout,
)
from studio_helpers.storage import keys


class TestControllerButton:
    """Test derived properties."""

    def test_defaults(self):
        button = ControllerButton(row=0, column=0)
        assert button.color == "#4CAF50"
        assert button.shape == "square"
        assert not button.is_assigned

    def test_blank_assignment_is_unassigned(self):
        assert not ControllerButton(row=0, column=0, assigned_text="   ").is_assigned
        assert ControllerButton(row=0, column=0, assigned_text="Undo").is_assigned

    def test_display_text_prefers_custom_name(self):
        button = ControllerButton(row=0, column=0, assigned_text="Undo", custom_name="UNDO!")
        assert button.display_text == "UNDO!"
        assert ControllerButton(row=0, column=0, assigned_text="Undo").display_text == "Undo"

    def test_unknown_shape_rejected(self):
        with pytest.raises(ValueError):
            ControllerButton(row=0, column=0, shape="hexagon")


class TestDefaultLayout:
    """Test blank layouts."""

    def test_labels_are_one_based(self):
        buttons = create_default_layout(2, 3)

        assert len(buttons) == 6
        assert [(b.row, b.column, b.button_label) for b in buttons[:4]] == [
            (0, 0, "1-1"), (0, 1, "1-2"), (0, 2, "1-3"), (1, 0, "2-1"),
        ]

    def test_load_without_data(self, memory_store):
        layout = StickerLayoutService(memory_store).load_layout()

        assert (layout.grid_rows, layout.grid_columns) == (4, 4)
        assert len(layout.buttons) == 16
        assert layout.buttons[-1].button_label == "4-4"

    def test_colors(self):
        colors = StickerLayoutService.available_colors()
        assert len(colors) == 8
        assert colors["Teal"] == "#009688"
        colors["Teal"] = "changed"
        assert COLORS["Teal"] == "#009688"


class TestStickerLayoutService:
    """Test persistence."""

    def test_save_and_load(self, memory_store):
        service = StickerLayoutService(memory_store)
        buttons = create_default_layout(2, 2)
        buttons[0] = buttons[0].model_copy(update={"assigned_text": "Play", "color": "#F44336"})

        service.save_layout(buttons, 2, 2)
        layout = service.load_layout()

        assert service.has_layout()
        assert layout.buttons == buttons
        assert (layout.grid_rows, layout.grid_columns) == (2, 2)
        assert layout.last_modified is not None

    def test_stored_json_layout(self, memory_store):
        StickerLayoutService(memory_store).save_layout(create_default_layout(1, 1), 1, 1)

        data = json.loads(memory_store.get(keys.STICKER_LAYOUT))
        assert set(data) == {"Buttons", "GridRows", "GridColumns", "LastModified"}
        assert data["Buttons"][0]["ButtonLabel"] == "1-1"

    def test_duplicate_positions_rejected(self, memory_store):
        service = StickerLayoutService(memory_store)
        buttons = [ControllerButton(row=1, column=1), ControllerButton(row=1, column=1)]

        with pytest.raises(LayoutError, match="Duplicate"):
            service.save_layout(buttons, 2, 2)
        assert not service.has_layout()

    def test_invalid_grid_rejected(self, memory_store):
        with pytest.raises(LayoutError):
            StickerLayoutService(memory_store).save_layout([], 0, 4)

    def test_reads_layout_missing_grid_size(self, memory_store):
        memory_store.set(keys.STICKER_LAYOUT, json.dumps({
            "Buttons": [{"Row": 0, "Column": 0, "AssignedText": "Rec", "Shape": "circle"}],
        }))
        layout = StickerLayoutService(memory_store).load_layout()

        assert (layout.grid_rows, layout.grid_columns) == (4, 4)
        assert layout.buttons[0].shape == "circle"
        assert layout.buttons[0].is_assigned

    def test_corrupt_layout_falls_back(self, memory_store):
        memory_store.set(keys.STICKER_LAYOUT, "{{{")
        assert len(StickerLayoutService(memory_store).load_layout().buttons) == 16


class TestButtonSize:
    """Test button size preferences."""

    def test_default(self, memory_store):
        size = StickerLayoutService(memory_store).load_button_size()
        assert (size.width, size.height, size.unit) == (20.0, 15.0, "mm")

    def test_round_trip(self, memory_store):
        service = StickerLayoutService(memory_store)
        service.save_button_size(2.5, 1.5, "cm")

        size = service.load_button_size()
        assert (size.width, size.height, size.unit) == (2.5, 1.5, "cm")
        assert size.in_mm() == (25.0, 15.0)
        assert set(json.loads(memory_store.get(keys.STICKER_BUTTON_SIZE))) == {
            "Width", "Height", "Unit", "LastModified",
        }

    @pytest.mark.parametrize("width, height, unit", [(0, 10, "mm"), (10, -1, "mm"), (10, 10, "in")])
    def test_invalid_size(self, memory_store, width, height, unit):
        with pytest.raises(LayoutError):
            StickerLayoutService(memory_store).save_button_size(width, height, unit)

    def test_in_mm_for_mm(self):
        assert ButtonSize(width=20, height=15).in_mm() == (20.0, 15.0)

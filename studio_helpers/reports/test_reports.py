"""
Tests for PDF reports and document delivery

Validates:
- Table reports carry their headers and data, paginate with A4 portrait
- Sticker sheets switch to landscape only in the overflow window
- Off-page cells are skipped, colour errors fall back
- Label wrapping shrinks text to fit
- Delivery writes into the output directory by base name only
"""

import logging
from io import BytesIO

import pytest
from pypdf import PdfReader

from studio_helpers.commands import CommandRecord, parse_commands
from studio_helpers.conftest import make_preset
from studio_helpers.plugins import parse_plugins
from studio_helpers.reports import (
    DeliveryError,
    FileDeliverySink,
    PdfReportRenderer,
    commands_report,
    needs_landscape,
    plugins_report,
    presets_report,
    stickers_report,
)
from studio_helpers.reports.renderer import base_label_size, fit_label
from studio_helpers.stickers import ButtonSize, ControllerButton, StoredLayout, create_default_layout


def _reader(data: bytes) -> PdfReader:
    assert data.startswith(b"%PDF")
    return PdfReader(BytesIO(data))


def _text(data: bytes) -> str:
    return "\n".join(page.extract_text() for page in _reader(data).pages)


def _is_landscape(data: bytes) -> bool:
    box = _reader(data).pages[0].mediabox
    return float(box.width) > float(box.height)


# =============================================================================
# Tables
# =============================================================================

class TestTableReports:
    """Test the tabular reports."""

    def test_commands_report(self, shortcuts_html):
        report = commands_report(parse_commands(shortcuts_html))

        assert report.file_name == "S1_Shortcuts.pdf"
        text = _text(report.data)
        assert "Section" in text and "Shortcut" in text
        assert "Ctrl+Z" in text
        assert not _is_landscape(report.data)

    def test_plugins_report(self, plugins_xml):
        report = plugins_report(parse_plugins(plugins_xml))

        assert report.file_name == "S1_Plugins.pdf"
        text = _text(report.data)
        assert "Mai Tai" in text
        assert "Version" in text

    def test_presets_report_name(self):
        report = presets_report([make_preset("FXChain", "Master <Bus> & Co")], "FXChain")

        assert report.file_name == "S1_FXChain_Presets.pdf"
        assert "Master <Bus> & Co" in _text(report.data)

    def test_long_table_paginates(self):
        commands = [
            CommandRecord(section_name="Bulk", command_name=f"Command {i}", shortcut=f"Ctrl+{i}")
            for i in range(300)
        ]
        data = commands_report(commands).data
        reader = _reader(data)

        assert len(reader.pages) > 1
        # Header row repeats on every page
        assert "Shortcut" in reader.pages[-1].extract_text()

    def test_empty_table(self):
        assert len(_reader(commands_report([]).data).pages) == 1


# =============================================================================
# Sticker sheets
# =============================================================================

class TestStickerSheets:
    """Test grid rendering."""

    @pytest.mark.parametrize("width_mm, expected", [
        (190.0, False),
        (190.5, True),
        (277.0, True),
        (277.5, False),
    ])
    def test_landscape_window(self, width_mm, expected):
        assert needs_landscape(width_mm) is expected

    def test_default_sheet_is_portrait(self):
        layout = StoredLayout(buttons=create_default_layout(4, 4))
        report = stickers_report(layout, ButtonSize())

        assert report.file_name == "Controller_Stickers.pdf"
        assert len(_reader(report.data).pages) == 1
        assert not _is_landscape(report.data)

    def test_wide_grid_turns_landscape(self):
        # 12 columns x 20 mm = 240 mm
        layout = StoredLayout(buttons=create_default_layout(2, 12), grid_rows=2, grid_columns=12)
        assert _is_landscape(stickers_report(layout, ButtonSize()).data)

    def test_cm_converted_before_orientation(self):
        # 10 columns x 2.2 cm = 220 mm
        layout = StoredLayout(buttons=create_default_layout(1, 10), grid_rows=1, grid_columns=10)
        assert _is_landscape(stickers_report(layout, ButtonSize(width=2.2, height=1.5, unit="cm")).data)

    def test_labels_drawn(self):
        buttons = [
            ControllerButton(row=0, column=0, assigned_text="Record"),
            ControllerButton(row=0, column=1, assigned_text="Play", custom_name="GO", shape="circle"),
            ControllerButton(row=1, column=0, assigned_text="   "),
        ]
        data = PdfReportRenderer().render_grid(buttons, 2, 2, 30, 20)

        text = _text(data)
        assert "Record" in text
        assert "GO" in text
        assert "Play" not in text

    def test_off_page_cells_skipped(self, caplog):
        buttons = [ControllerButton(row=0, column=0, assigned_text="Fits"),
                   ControllerButton(row=20, column=0, assigned_text="Gone")]

        with caplog.at_level(logging.WARNING, logger="studio_helpers.reports.renderer"):
            data = PdfReportRenderer().render_grid(buttons, 21, 1, 20, 15)

        assert "Gone" not in _text(data)
        assert "would go off page" in caplog.text

    def test_too_many_columns_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="studio_helpers.reports.renderer"):
            PdfReportRenderer().render_grid([], 1, 14, 10, 10)
        assert "Too many columns" in caplog.text

    def test_invalid_colour_falls_back(self):
        buttons = [ControllerButton(row=0, column=0, color="not-a-colour", assigned_text="X")]
        assert _reader(PdfReportRenderer().render_grid(buttons, 1, 1, 20, 15)).pages


class TestLabelFitting:
    """Test label sizing."""

    @pytest.mark.parametrize("w, h, expected", [
        (20, 15, 6.0),
        (60, 60, 10.0),
        (200, 200, 16.0),
    ])
    def test_base_size_clamped(self, w, h, expected):
        assert base_label_size(w, h) == expected

    def test_short_text_keeps_size(self):
        lines, size = fit_label("Play", 100, 100, 10)
        assert lines == ["Play"]
        assert size == 10

    def test_long_text_wraps_and_shrinks(self):
        text = "Toggle Loop Follows Selection And Also Something Else Entirely"
        lines, size = fit_label(text, 60, 40, 12)
        assert len(lines) > 1
        assert 4.0 <= size < 12


# =============================================================================
# Delivery
# =============================================================================

class TestFileDeliverySink:
    """Test writing delivered documents."""

    def test_writes_file(self, tmp_path):
        sink = FileDeliverySink(tmp_path / "out")
        path = sink.deliver("report.pdf", b"%PDF-data")

        assert path == tmp_path / "out" / "report.pdf"
        assert path.read_bytes() == b"%PDF-data"

    @pytest.mark.parametrize("name", ["../escape.pdf", "/etc/passwd.pdf", "..\\win\\evil.pdf"])
    def test_reduces_to_base_name(self, tmp_path, name):
        path = FileDeliverySink(tmp_path).deliver(name, b"x")
        assert path.parent == tmp_path

    @pytest.mark.parametrize("name", ["", "..", "/"])
    def test_rejects_empty_names(self, tmp_path, name):
        with pytest.raises(DeliveryError):
            FileDeliverySink(tmp_path).deliver(name, b"x")

    def test_replaces_existing(self, tmp_path):
        sink = FileDeliverySink(tmp_path)
        sink.deliver("a.txt", b"one")
        assert sink.deliver("a.txt", b"two").read_bytes() == b"two"

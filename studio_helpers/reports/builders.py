"""
Report builders.

Each builder turns stored records into a named PDF. File names follow the
ones Studio One users already know from the browser tool.
"""

from typing import List, NamedTuple, Optional, Sequence

from studio_helpers.commands.models import CommandRecord
from studio_helpers.plugins.models import PluginRecord
from studio_helpers.presets.models import PresetRecord
from studio_helpers.reports.renderer import PdfReportRenderer
from studio_helpers.stickers.models import ButtonSize, StoredLayout


COMMANDS_COLUMNS = ("Section", "Command", "Shortcut")
PLUGINS_COLUMNS = ("Category", "Name", "Vendor", "Version", "Folder")
PRESETS_COLUMNS = ("Vendor", "Class ID", "Title", "Creator", "SubFolder")

COMMANDS_FILE = "S1_Shortcuts.pdf"
PLUGINS_FILE = "S1_Plugins.pdf"
STICKERS_FILE = "Controller_Stickers.pdf"


class Report(NamedTuple):
    file_name: str
    data: bytes


def presets_file_name(category: str) -> str:
    return f"S1_{category}_Presets.pdf"


def _text(value: Optional[str]) -> str:
    return value or ""


def commands_report(
    commands: Sequence[CommandRecord], renderer: Optional[PdfReportRenderer] = None
) -> Report:
    renderer = renderer or PdfReportRenderer()
    rows: List[List[str]] = [
        [c.section_name, c.command_name, c.shortcut] for c in commands
    ]
    return Report(COMMANDS_FILE, renderer.render_table(COMMANDS_COLUMNS, rows, title="Studio One Shortcuts"))


def plugins_report(
    plugins: Sequence[PluginRecord], renderer: Optional[PdfReportRenderer] = None
) -> Report:
    renderer = renderer or PdfReportRenderer()
    rows = [
        [p.category, _text(p.name), p.vendor, p.version, p.folder] for p in plugins
    ]
    return Report(PLUGINS_FILE, renderer.render_table(PLUGINS_COLUMNS, rows, title="Studio One Plugins"))


def presets_report(
    presets: Sequence[PresetRecord], category: str, renderer: Optional[PdfReportRenderer] = None
) -> Report:
    """One category's presets; the category is part of the file name."""
    renderer = renderer or PdfReportRenderer()
    rows = [
        [_text(p.vendor), _text(p.class_id), _text(p.title), _text(p.creator), _text(p.sub_folder)]
        for p in presets
    ]
    data = renderer.render_table(PRESETS_COLUMNS, rows, title=f"Studio One {category} Presets")
    return Report(presets_file_name(category), data)


def stickers_report(
    layout: StoredLayout, size: ButtonSize, renderer: Optional[PdfReportRenderer] = None
) -> Report:
    renderer = renderer or PdfReportRenderer()
    data = renderer.render_grid(
        layout.buttons,
        layout.grid_rows,
        layout.grid_columns,
        size.width,
        size.height,
        size.unit,
    )
    return Report(STICKERS_FILE, data)

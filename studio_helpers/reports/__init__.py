"""
Reports and delivery: PDF tables, sticker sheets and the file sink.
"""

from .builders import (
    Report,
    commands_report,
    plugins_report,
    presets_file_name,
    presets_report,
    stickers_report,
)
from .delivery import DeliveryError, DeliverySink, FileDeliverySink
from .renderer import PdfReportRenderer, needs_landscape

__all__ = [
    "DeliveryError",
    "DeliverySink",
    "FileDeliverySink",
    "PdfReportRenderer",
    "Report",
    "commands_report",
    "needs_landscape",
    "plugins_report",
    "presets_file_name",
    "presets_report",
    "stickers_report",
]

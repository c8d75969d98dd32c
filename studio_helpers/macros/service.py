"""
MacroService - build macro documents from stored plugins and presets.

A selected preset for a plugin macro is resolved through PresetQueries, so it
is found in whichever tier currently holds that category.
"""

import logging
from pathlib import Path
from typing import Optional

from studio_helpers.macros.emitter import plan_plugin_macro, plan_preset_macro, render_macro
from studio_helpers.macros.models import MacroDocument, MacroHeader
from studio_helpers.plugins.models import PluginRecord
from studio_helpers.presets.models import PresetRecord
from studio_helpers.presets.queries import PresetQueries
from studio_helpers.reports.delivery import DeliverySink


logger = logging.getLogger(__name__)


MACRO_EXTENSION = ".studioonemacro"


def macro_file_name(title: str) -> str:
    return f"{title}{MACRO_EXTENSION}"


class MacroService:
    """Creates and exports macro documents."""

    def __init__(self, queries: PresetQueries):
        self._queries = queries

    def plugin_macro(
        self,
        plugin: PluginRecord,
        title: str,
        group: str,
        description: Optional[str] = None,
        selected_preset: Optional[str] = None,
    ) -> MacroDocument:
        """
        Macro that adds a plugin, optionally loading one of its presets.

        Args:
            plugin: Plugin to add
            title: Macro title (also the file name stem)
            group: Macro group shown in Studio One
            description: Defaults to "Macro for <plugin name>"
            selected_preset: Preset title; the Load Preset step is only added
                when a stored preset matches title, class id and category

        Returns:
            MacroDocument
        """
        preset = None
        if selected_preset:
            preset = self._queries.find_preset(selected_preset, plugin.class_id, plugin.category)
            if preset is None:
                logger.info(
                    f"Preset '{selected_preset}' not found for {plugin.class_id}; "
                    f"macro has no Load Preset step"
                )

        header = MacroHeader(title=title, group=group, description=description, subject=plugin.name)
        plan = plan_plugin_macro(plugin, group, preset)
        return MacroDocument(file_name=macro_file_name(title), content=render_macro(header, plan))

    def preset_macro(
        self,
        preset: PresetRecord,
        title: str,
        group: str,
        description: Optional[str] = None,
        mode: int = 0,
    ) -> MacroDocument:
        """Macro that applies a preset. mode is only used by FXChain presets."""
        header = MacroHeader(title=title, group=group, description=description, subject=preset.title)
        plan = plan_preset_macro(preset, mode)
        return MacroDocument(file_name=macro_file_name(title), content=render_macro(header, plan))

    @staticmethod
    def export(document: MacroDocument, sink: DeliverySink) -> Path:
        """Hand a rendered macro to a delivery sink."""
        return sink.deliver(document.file_name, document.data)

"""
StudioHelpers - the single entry point for user-initiated actions.

Every import, clear and export returns an OperationOutcome and never raises:
failures are logged and turned into a message for the user. One import runs
at a time; a second import started while the first is in flight is refused.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from studio_helpers.commands.service import CommandsService
from studio_helpers.config import DEFAULT_OUTPUT_DIR, DEFAULT_PRESET_QUERY
from studio_helpers.errors import CapacityError, ParseError, StudioHelpersError
from studio_helpers.macros.service import MacroService
from studio_helpers.plugins.lookup import PluginNameLookup
from studio_helpers.plugins.service import PluginsService
from studio_helpers.presets.extractor import SqlitePresetReader, extract_presets
from studio_helpers.presets.queries import PresetQueries
from studio_helpers.presets.tiering import PresetTieringManager
from studio_helpers.reports.builders import (
    Report,
    commands_report,
    plugins_report,
    presets_report,
    stickers_report,
)
from studio_helpers.reports.delivery import DeliverySink, FileDeliverySink
from studio_helpers.reports.renderer import PdfReportRenderer
from studio_helpers.stickers.service import StickerLayoutService
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore, probe_capacity, remove_keys
from studio_helpers.storage.timestamps import format_import_time, now_iso


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationOutcome:
    """Result of a user-initiated action."""

    ok: bool
    message: str
    count: int = 0
    path: Optional[Path] = None


@dataclass(frozen=True)
class DataStatus:
    """Import time per dataset (None when absent) and available preset categories."""

    commands: Optional[str] = None
    plugins: Optional[str] = None
    presets: Optional[str] = None
    categories: List[str] = field(default_factory=list)

    @property
    def has_any(self) -> bool:
        return any(value is not None for value in (self.commands, self.plugins, self.presets))


class StudioHelpers:
    """
    Facade over every service.

    Args:
        store: Key-value store holding all imported data
        sink: Where exported documents are delivered
        preset_reader: Reader for preset database payloads
        renderer: PDF renderer for reports
    """

    def __init__(
        self,
        store: KeyValueStore,
        sink: Optional[DeliverySink] = None,
        preset_reader: Optional[SqlitePresetReader] = None,
        renderer: Optional[PdfReportRenderer] = None,
    ):
        self.store = store
        self.sink = sink or FileDeliverySink(DEFAULT_OUTPUT_DIR)
        self.preset_reader = preset_reader or SqlitePresetReader(DEFAULT_PRESET_QUERY)
        self.renderer = renderer or PdfReportRenderer()

        self.commands = CommandsService(store)
        self.plugins = PluginsService(store)
        self.tiering = PresetTieringManager(store)
        self.queries = PresetQueries(store)
        self.macros = MacroService(self.queries)
        self.stickers = StickerLayoutService(store)
        self.plugin_names = PluginNameLookup(store)

        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    # =========================================================================
    # Imports
    # =========================================================================

    def _run_import(self, label: str, action: Callable[[], Tuple[int, str]]) -> OperationOutcome:
        if self._busy:
            return OperationOutcome(False, "Another import is already running")

        self._busy = True
        try:
            count, message = action()
            return OperationOutcome(True, message, count)
        except ParseError as e:
            logger.warning(f"{label} import rejected: {e}")
            return OperationOutcome(False, f"Error importing {label}: {e}")
        except StudioHelpersError as e:
            logger.error(f"{label} import failed: {e}")
            return OperationOutcome(False, f"Error importing {label}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error importing {label}")
            return OperationOutcome(False, f"Error importing {label}: {e}")
        finally:
            self._busy = False

    def import_commands(self, markup: Union[str, bytes]) -> OperationOutcome:
        """Import a ShortcutsExport.html document."""
        def action():
            commands = self.commands.import_commands(markup)
            return len(commands), (
                f"Commands data imported successfully! Found {len(commands)} commands."
            )
        return self._run_import("commands", action)

    def import_plugins(self, xml_text: Union[str, bytes]) -> OperationOutcome:
        """Import a plugin registry and refresh the class id lookup."""
        def action():
            plugins = self.plugins.import_plugins(xml_text)
            self.plugin_names.rebuild()
            return len(plugins), (
                f"Plugins data imported successfully! Found {len(plugins)} plugins."
            )
        return self._run_import("plugins", action)

    def import_presets(self, payload: bytes) -> OperationOutcome:
        """Import a DataStore.db payload through the tiered preset storage."""
        def action():
            if not probe_capacity(self.store):
                raise CapacityError("Storage is full. Clear data before importing presets.")

            presets = extract_presets(self.preset_reader.parse(payload))
            result = self.tiering.persist(presets)
            try:
                self.store.set(keys.PRESET_IMPORT_TIME, now_iso())
            except CapacityError as e:
                # Presets are stored; only the timestamp is lost
                logger.warning(f"Preset import time not recorded: {e}")

            message = f"Presets data imported successfully! Found {len(presets)} presets."
            if result.failed_categories:
                message += (
                    f" Stored in fallback storage: {', '.join(result.failed_categories)}."
                )
            return len(presets), message
        return self._run_import("presets", action)

    # =========================================================================
    # Status and maintenance
    # =========================================================================

    def status(self) -> DataStatus:
        """Which datasets are present, with their import times."""
        categories = self.queries.available_categories()
        return DataStatus(
            commands=self.commands.import_time() if self.commands.has_data() else None,
            plugins=self.plugins.import_time() if self.plugins.has_data() else None,
            presets=(
                format_import_time(self.store.get(keys.PRESET_IMPORT_TIME))
                if categories else None
            ),
            categories=categories,
        )

    def clear_all(self) -> OperationOutcome:
        """Remove every stored key, including sticker layouts."""
        try:
            remove_keys(self.store, keys.ALL_KEYS)
            self.plugin_names.rebuild()
        except StudioHelpersError as e:
            logger.error(f"Clear failed: {e}")
            return OperationOutcome(False, f"Error clearing data: {e}")
        logger.info("All stored data cleared")
        return OperationOutcome(True, "All imported data has been cleared successfully!")

    def split_presets(self) -> OperationOutcome:
        """Re-split combined preset data into per-category keys."""
        try:
            split = self.tiering.split_combined()
        except StudioHelpersError as e:
            return OperationOutcome(False, f"Error splitting presets: {e}")
        if not split:
            return OperationOutcome(False, "No combined preset data could be split")
        return OperationOutcome(True, "Preset data split into categories")

    def plugin_name(self, class_id: Optional[str]) -> Optional[str]:
        """Plugin name for a class id, loading the lookup on first use."""
        if not self.plugin_names.is_loaded:
            self.plugin_names.rebuild()
        return self.plugin_names.name_for(class_id)

    # =========================================================================
    # Exports
    # =========================================================================

    def _deliver(self, build: Callable[[], Optional[Report]], empty_message: str) -> OperationOutcome:
        try:
            report = build()
            if report is None:
                return OperationOutcome(False, empty_message)
            path = self.sink.deliver(report.file_name, report.data)
        except StudioHelpersError as e:
            logger.error(f"Export failed: {e}")
            return OperationOutcome(False, f"Error exporting: {e}")
        except Exception as e:
            logger.exception("Unexpected export error")
            return OperationOutcome(False, f"Error exporting: {e}")
        return OperationOutcome(True, f"Saved {path.name}", path=path)

    def export_commands_report(self) -> OperationOutcome:
        def build():
            commands = self.commands.load()
            return commands_report(commands, self.renderer) if commands else None
        return self._deliver(build, "No commands data available. Import ShortcutsExport.html first.")

    def export_plugins_report(self, vst3_only: bool = False, search: Optional[str] = None) -> OperationOutcome:
        def build():
            plugins = self.plugins.load()
            if not plugins:
                return None
            return plugins_report(PluginsService.filter(plugins, vst3_only, search), self.renderer)
        return self._deliver(build, "No plugins data available. Import the plugin settings file first.")

    def export_presets_report(
        self,
        category: str,
        search_text: Optional[str] = None,
        exact_field: Optional[str] = None,
        exact_value: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_ascending: bool = True,
    ) -> OperationOutcome:
        def build():
            presets = self.queries.select(
                category, search_text, exact_field, exact_value, sort_field, sort_ascending,
            )
            return presets_report(presets, category, self.renderer) if presets else None
        return self._deliver(build, f"No {category} presets available.")

    def export_stickers_report(self) -> OperationOutcome:
        def build():
            return stickers_report(
                self.stickers.load_layout(), self.stickers.load_button_size(), self.renderer,
            )
        return self._deliver(build, "No sticker layout available.")

    def export_plugin_macro(
        self,
        class_id: str,
        title: str,
        group: str,
        description: Optional[str] = None,
        selected_preset: Optional[str] = None,
    ) -> OperationOutcome:
        """Macro adding the stored plugin with class_id."""
        def build():
            plugins = self.plugins.load() or []
            plugin = next((p for p in plugins if p.class_id == class_id), None)
            if plugin is None:
                return None
            document = self.macros.plugin_macro(plugin, title, group, description, selected_preset)
            return Report(document.file_name, document.data)
        return self._deliver(build, f"No plugin with class id {class_id}.")

    def export_preset_macro(
        self,
        category: str,
        preset_title: str,
        title: str,
        group: str,
        description: Optional[str] = None,
        mode: int = 0,
        class_id: Optional[str] = None,
    ) -> OperationOutcome:
        """Macro applying a stored preset, found by title (and class id if given)."""
        def build():
            for preset in self.queries.load_category(category) or []:
                if (preset.title or "").lower() != preset_title.lower():
                    continue
                if class_id and (preset.class_id or "").lower() != class_id.lower():
                    continue
                document = self.macros.preset_macro(preset, title, group, description, mode)
                return Report(document.file_name, document.data)
            return None
        return self._deliver(build, f"No {category} preset titled {preset_title}.")

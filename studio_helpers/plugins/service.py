"""
PluginsService - persist, load and filter plugin registry data.

Plugins use the single combined key PluginsData; there is no per-category
split. Parsing and persisting happen in one call.
"""

import logging
from typing import List, Optional, Union

from studio_helpers.plugins.models import PluginRecord
from studio_helpers.plugins.parser import parse_plugins
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore
from studio_helpers.storage.serialization import dump_records, load_records
from studio_helpers.storage.timestamps import format_import_time, now_iso


logger = logging.getLogger(__name__)


VST3_MARKER = "VST3"

EXACT_FIELDS = {
    "Name": "name",
    "Vendor": "vendor",
    "Folder": "folder",
    "ClassId": "class_id",
}
"""Fields accepted by the exact-value filter, keyed by display name."""


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle in value.lower()


class PluginsService:
    """Import, load and filter plugin records."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def import_plugins(self, xml_text: Union[str, bytes]) -> List[PluginRecord]:
        """
        Parse a registry export and persist it under PluginsData.

        Raises:
            ParseError: If the XML is malformed (nothing is stored)
            StorageError: If the write fails
        """
        plugins = parse_plugins(xml_text)
        self._store.set(keys.PLUGINS_DATA, dump_records(plugins))
        self._store.set(keys.PLUGINS_IMPORT_TIME, now_iso())
        logger.info(f"Imported {len(plugins)} plugins")
        return plugins

    def load(self) -> Optional[List[PluginRecord]]:
        """
        Load stored plugins.

        Returns:
            Plugin list, or None when nothing is stored or the data is undecodable
        """
        raw = self._store.get(keys.PLUGINS_DATA)
        if not raw or not raw.strip():
            return None
        try:
            return load_records(PluginRecord, raw)
        except ValueError as e:
            logger.warning(f"Stored plugins could not be decoded: {e}")
            return None

    def has_data(self) -> bool:
        return bool(self._store.get(keys.PLUGINS_DATA))

    def import_time(self) -> str:
        """Display form of the last import time, or 'Unknown'."""
        return format_import_time(self._store.get(keys.PLUGINS_IMPORT_TIME))

    @staticmethod
    def filter(
        plugins: List[PluginRecord],
        vst3_only: bool = False,
        search: Optional[str] = None,
        exact_field: Optional[str] = None,
        exact_value: Optional[str] = None,
    ) -> List[PluginRecord]:
        """
        Narrow a plugin list.

        Filters apply in order and combine with AND:
        1. vst3_only keeps plugins whose sub-category mentions VST3
        2. exact_field/exact_value (Name, Vendor, Folder, ClassId) keeps exact matches
        3. search keeps plugins where any text field contains it (case-insensitive)

        An unknown exact_field matches nothing.
        """
        result = list(plugins)

        if vst3_only:
            result = [p for p in result if p.sub_category and VST3_MARKER in p.sub_category]

        if exact_field and exact_value:
            attribute = EXACT_FIELDS.get(exact_field)
            result = [
                p for p in result
                if attribute is not None and getattr(p, attribute) == exact_value
            ]

        if search and search.strip():
            needle = search.lower()
            result = [
                p for p in result
                if any(_contains(value, needle) for value in (
                    p.category, p.name, p.vendor, p.version, p.folder, p.class_id,
                ))
            ]

        return result

"""
Class id to plugin name lookup.

An explicitly owned cache: whoever needs names holds a PluginNameLookup and
calls rebuild() after plugin data changes. Nothing is shared implicitly.
"""

import logging
from typing import Dict, List, Optional

from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore
from studio_helpers.storage.serialization import load_records
from studio_helpers.plugins.models import PluginRecord


logger = logging.getLogger(__name__)


class PluginNameLookup:
    """Maps class ids to plugin names, rebuilt wholesale from PluginsData."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._names: Dict[str, str] = {}
        self._loaded = False

    def rebuild(self) -> Dict[str, str]:
        """
        Reload the mapping from the store.

        Plugins without a class id or name are skipped. Later entries win on
        duplicate class ids. Undecodable data leaves the lookup empty.

        Returns:
            A copy of the new mapping
        """
        self._names = {}
        raw = self._store.get(keys.PLUGINS_DATA)
        if raw and raw.strip():
            try:
                plugins = load_records(PluginRecord, raw)
            except ValueError as e:
                logger.warning(f"Plugin name lookup not rebuilt: {e}")
                plugins = []
            for plugin in plugins:
                if plugin.class_id and plugin.name:
                    self._names[plugin.class_id] = plugin.name

        self._loaded = True
        logger.info(f"Loaded {len(self._names)} plugin mappings into lookup")
        return dict(self._names)

    def name_for(self, class_id: Optional[str]) -> Optional[str]:
        """Plugin name for class_id, or None if unknown."""
        if not class_id:
            return None
        return self._names.get(class_id)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def count(self) -> int:
        return len(self._names)

    def class_ids(self) -> List[str]:
        return list(self._names)

    def names(self) -> List[str]:
        return list(self._names.values())

"""
Studio One Helpers - import, query and re-emit Studio One export data.

Three vendor exports are imported:
- ShortcutsExport.html  -> command shortcuts
- Plugins-en.settings   -> plugin registry (instruments and effects)
- DataStore.db          -> preset descriptors

Imported records are normalized, persisted in a local key-value store and
read back through paged queries. Macros (.studioonemacro) and PDF reports are
emitted on request.

No network. No background work. One import at a time.
"""

__version__ = "0.1.0"

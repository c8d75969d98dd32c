"""Plugin registry records."""

from typing import Optional

from studio_helpers.storage.serialization import StoredRecord


class PluginRecord(StoredRecord):
    """
    One installed plugin.

    class_id is the vendor-assigned natural key. category is always
    AudioSynth or AudioEffect; other registry entries never become records.
    """

    category: str
    class_id: Optional[str] = None
    vendor: str = ""
    name: Optional[str] = None
    version: str = ""
    folder: str = ""
    sub_category: Optional[str] = None

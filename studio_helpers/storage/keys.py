"""
Persisted key layout.

Flat namespace. Every value is UTF-8 text (JSON or an ISO-8601 timestamp).
"""

from studio_helpers.categories import ALLOWED_CATEGORIES


COMMANDS_DATA = "CommandsData"
COMMANDS_IMPORT_TIME = "CommandsData_ImportTime"

PLUGINS_DATA = "PluginsData"
PLUGINS_IMPORT_TIME = "PluginsData_ImportTime"

PRESET_DATA = "PresetData"
"""Combined fallback tier: every preset of the last import."""

PRESET_IMPORT_TIME = "PresetData_ImportTime"

PRESET_COMPRESSED = "PresetData_Compressed"
"""Compressed tier: {category: [five-field projection, ...]}."""

STICKER_LAYOUT = "StickerLayout"
STICKER_BUTTON_SIZE = "StickerButtonSize"

QUOTA_PROBE = "quota_test"


def preset_category_key(category: str) -> str:
    """Per-category tier key."""
    return f"{PRESET_DATA}_{category}"


PRESET_CATEGORY_KEYS = tuple(preset_category_key(c) for c in ALLOWED_CATEGORIES)

ALL_KEYS = (
    COMMANDS_DATA,
    COMMANDS_IMPORT_TIME,
    PLUGINS_DATA,
    PLUGINS_IMPORT_TIME,
    PRESET_DATA,
    PRESET_IMPORT_TIME,
    PRESET_COMPRESSED,
    *PRESET_CATEGORY_KEYS,
    STICKER_LAYOUT,
    STICKER_BUTTON_SIZE,
)

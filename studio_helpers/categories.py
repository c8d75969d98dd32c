"""
Category allow-lists.

Preset categories gate which extracted preset rows are retained.
Plugin categories gate which registry entries are retained.
Both are fixed; nothing outside them is ever stored.
"""

from enum import Enum
from typing import Optional


class PresetCategory(str, Enum):
    """The seven recognized preset categories, in display order."""

    ARTIST = "Artist"
    AUDIO_EFFECT = "AudioEffect"
    AUDIO_SYNTH = "AudioSynth"
    FX_CHAIN = "FXChain"
    MUSIC_EFFECT = "MusicEffect"
    PATTERN_BANK = "PatternBank"
    TRACK_PRESET = "TrackPreset"


class PluginCategory(str, Enum):
    """Plugin registry categories that are kept on import."""

    AUDIO_SYNTH = "AudioSynth"
    AUDIO_EFFECT = "AudioEffect"


ALLOWED_CATEGORIES = tuple(category.value for category in PresetCategory)

PLUGIN_CATEGORIES = tuple(category.value for category in PluginCategory)

_BY_LOWER = {name.lower(): name for name in ALLOWED_CATEGORIES}


def canonical_category(name: Optional[str]) -> Optional[str]:
    """
    Map a category name onto its allow-listed spelling.

    Matching is case-insensitive. Returns None for blank or unknown names.
    """
    if not name:
        return None
    return _BY_LOWER.get(name.strip().lower())


def is_allowed_category(name: Optional[str]) -> bool:
    """Whether name is one of the seven preset categories (case-insensitive)."""
    return canonical_category(name) is not None

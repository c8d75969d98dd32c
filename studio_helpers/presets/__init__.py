"""
Presets: DataStore.db -> PresetRecord list -> tiered storage -> paged queries.
"""

from .extractor import SqlitePresetReader, extract_presets
from .models import CompressedPreset, PresetPage, PresetRecord, compress, expand
from .queries import PresetQueries
from .tiering import PresetTieringManager, TieringResult

__all__ = [
    "CompressedPreset",
    "PresetPage",
    "PresetQueries",
    "PresetRecord",
    "PresetTieringManager",
    "SqlitePresetReader",
    "TieringResult",
    "compress",
    "expand",
    "extract_presets",
]

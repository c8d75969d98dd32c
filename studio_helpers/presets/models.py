"""
Preset records and their compressed projection.

The compressed tier stores only five fields per preset; the category is
implied by the key the list sits under. compress() and expand() convert
between the two shapes explicitly.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import TypeAdapter

from studio_helpers.categories import ALLOWED_CATEGORIES
from studio_helpers.storage.serialization import StoredRecord


__all__ = [
    "ALLOWED_CATEGORIES",
    "CompressedPreset",
    "PresetPage",
    "PresetRecord",
    "compress",
    "dump_compressed",
    "expand",
    "load_compressed",
]


class PresetRecord(StoredRecord):
    """One preset descriptor. category is always allow-listed."""

    category: str
    class_id: Optional[str] = None
    vendor: Optional[str] = None
    title: Optional[str] = None
    creator: Optional[str] = None
    sub_folder: Optional[str] = None


class CompressedPreset(StoredRecord):
    """Five-field projection of a PresetRecord (no category)."""

    class_id: Optional[str] = None
    vendor: Optional[str] = None
    title: Optional[str] = None
    creator: Optional[str] = None
    sub_folder: Optional[str] = None


def compress(record: PresetRecord) -> CompressedPreset:
    return CompressedPreset(
        class_id=record.class_id,
        vendor=record.vendor,
        title=record.title,
        creator=record.creator,
        sub_folder=record.sub_folder,
    )


def expand(projection: CompressedPreset, category: str) -> PresetRecord:
    """Rebuild a full record; category comes from the compressed tier's key."""
    return PresetRecord(
        category=category,
        class_id=projection.class_id,
        vendor=projection.vendor,
        title=projection.title,
        creator=projection.creator,
        sub_folder=projection.sub_folder,
    )


_COMPRESSED_ADAPTER = TypeAdapter(Dict[str, List[CompressedPreset]])


def dump_compressed(groups: Dict[str, List[CompressedPreset]]) -> str:
    """Serialize {category: [projection, ...]} with aliased field names."""
    return _COMPRESSED_ADAPTER.dump_json(groups, by_alias=True, indent=2).decode("utf-8")


def load_compressed(text: str) -> Dict[str, List[CompressedPreset]]:
    """
    Parse the compressed tier.

    Raises:
        ValueError: If text is not a mapping of category to projections
    """
    return _COMPRESSED_ADAPTER.validate_json(text)


@dataclass(frozen=True)
class PresetPage:
    """One page of a preset query plus the size of the filtered set."""

    items: List[PresetRecord] = field(default_factory=list)
    total_count: int = 0

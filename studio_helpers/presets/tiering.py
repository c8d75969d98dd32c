"""
PresetTieringManager - persist presets into a store that may be full.

Three redundant tiers, written in this order:

    PresetData_<Category>   one JSON list per category (preferred)
    PresetData              every preset of the import (safety net)
    PresetData_Compressed   {category: [five-field projection]} for the
                            categories whose own key could not be written

The combined and compressed tiers are only written when at least one
category failed. A capacity failure on the combined write purges the
per-category and compressed keys and retries once; a second failure aborts
the import with ImportFailedError.

Failures are isolated per category: one category that cannot be written
never prevents its siblings from being stored.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from studio_helpers.categories import canonical_category, is_allowed_category
from studio_helpers.errors import CapacityError, ImportFailedError
from studio_helpers.presets.models import (
    CompressedPreset,
    PresetRecord,
    compress,
    dump_compressed,
)
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore, remove_keys
from studio_helpers.storage.serialization import dump_records, load_records


logger = logging.getLogger(__name__)


@dataclass
class TieringResult:
    """Where an import's presets ended up."""

    stored_categories: List[str] = field(default_factory=list)
    failed_categories: List[str] = field(default_factory=list)
    combined_written: bool = False
    compressed_written: bool = False
    purged: bool = False
    total_records: int = 0


def group_by_category(records: List[PresetRecord]) -> Dict[str, List[PresetRecord]]:
    """Group records by category, categories in first-seen order."""
    groups: Dict[str, List[PresetRecord]] = {}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    return groups


class PresetTieringManager:
    """Writes preset batches across the per-category, combined and compressed tiers."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def persist(self, records: List[PresetRecord]) -> TieringResult:
        """
        Replace stored preset data with records.

        Args:
            records: Allow-listed presets from one import

        Returns:
            TieringResult describing which tiers were written

        Raises:
            ImportFailedError: If the combined write fails twice for capacity
            StorageError: If the combined write fails for any other reason
        """
        result = TieringResult(total_records=len(records))
        groups = group_by_category(records)

        # A new import replaces every tier of the previous one
        self._purge_tiers(include_combined=True)

        for category, presets in groups.items():
            logger.info(f"Storing {len(presets)} presets for category {category}")
            if self._write_category(category, presets):
                result.stored_categories.append(category)
            else:
                result.failed_categories.append(category)

        if not result.failed_categories:
            logger.info("All categories stored individually; no fallback tiers needed")
            return result

        logger.warning(
            f"Categories not stored individually: {', '.join(result.failed_categories)}; "
            f"writing combined fallback"
        )
        self._write_combined(records, result)
        result.compressed_written = self._write_compressed(
            {category: groups[category] for category in result.failed_categories}
        )
        return result

    def _write_category(self, category: str, presets: List[PresetRecord]) -> bool:
        key = keys.preset_category_key(category)
        try:
            self._store.set(key, dump_records(presets))
        except CapacityError as e:
            logger.warning(f"Category {category} not stored separately: {e}")
            return False
        except Exception as e:
            logger.error(f"Error storing category {category}: {e}")
            return False
        return True

    def _write_combined(self, records: List[PresetRecord], result: TieringResult) -> None:
        payload = dump_records(records)
        try:
            self._store.set(keys.PRESET_DATA, payload)
        except CapacityError:
            logger.warning("Combined preset write rejected; purging tiers and retrying once")
            self._purge_tiers(include_combined=False)
            result.purged = True
            result.stored_categories.clear()
            try:
                self._store.set(keys.PRESET_DATA, payload)
            except CapacityError as e:
                raise ImportFailedError(
                    f"Presets could not be stored even after freeing space: {e}"
                ) from e
        result.combined_written = True

    def _write_compressed(self, failed_groups: Dict[str, List[PresetRecord]]) -> bool:
        projections: Dict[str, List[CompressedPreset]] = {
            category: [compress(p) for p in presets]
            for category, presets in failed_groups.items()
        }
        try:
            self._store.set(keys.PRESET_COMPRESSED, dump_compressed(projections))
        except Exception as e:
            logger.error(f"Compressed preset tier not written: {e}")
            return False
        return True

    def _purge_tiers(self, include_combined: bool) -> None:
        remove_keys(self._store, keys.PRESET_CATEGORY_KEYS)
        self._store.remove(keys.PRESET_COMPRESSED)
        if include_combined:
            self._store.remove(keys.PRESET_DATA)

    def split_combined(self) -> bool:
        """
        Re-split the combined tier into per-category keys.

        Returns:
            True if at least one category was written
        """
        raw = self._store.get(keys.PRESET_DATA)
        if not raw or not raw.strip():
            logger.info("No combined preset data to split")
            return False
        try:
            records = load_records(PresetRecord, raw)
        except ValueError as e:
            logger.warning(f"Combined preset data could not be decoded: {e}")
            return False
        # Only allow-listed categories get a key of their own
        records = [
            r.model_copy(update={"category": canonical_category(r.category)})
            for r in records if is_allowed_category(r.category)
        ]
        if not records:
            return False

        groups = group_by_category(records)
        logger.info(f"Splitting {len(records)} presets into {len(groups)} categories")
        written = sum(
            1 for category, presets in groups.items() if self._write_category(category, presets)
        )
        logger.info(f"Split combined preset data into {written} categories")
        return written > 0

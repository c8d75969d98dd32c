"""
Preset Query API - read presets back from whichever tier holds them.

Resolution order for a category (first tier with data wins, tiers are never
merged):

    1. PresetData_<Category>
    2. PresetData_Compressed[<Category>], re-expanded
    3. PresetData, filtered by category (case-insensitive)

On top of that, query() composes exact-field filtering, free-text search,
sorting and pagination.
"""

import logging
from typing import Callable, List, Optional, Tuple

from studio_helpers.categories import ALLOWED_CATEGORIES, canonical_category
from studio_helpers.presets.models import PresetPage, PresetRecord, expand, load_compressed
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore
from studio_helpers.storage.serialization import load_records


logger = logging.getLogger(__name__)


# Lower-cased display name -> PresetRecord attribute
EXACT_FIELDS = {
    "category": "category",
    "classid": "class_id",
    "vendor": "vendor",
    "title": "title",
    "creator": "creator",
    "subfolder": "sub_folder",
}

SORT_FIELDS = {
    "vendor": "vendor",
    "classid": "class_id",
    "title": "title",
    "creator": "creator",
    "subfolder": "sub_folder",
}

SEARCH_FIELDS = ("category", "class_id", "vendor", "title", "creator", "sub_folder")


def _field_key(name: str) -> str:
    return name.replace("_", "").lower()


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle in value.lower()


def _sort_key(attribute: str) -> Callable[[Tuple[int, PresetRecord]], tuple]:
    # None first, then case-insensitive text, then exact text, then import order
    def key(item: Tuple[int, PresetRecord]) -> tuple:
        index, record = item
        value = getattr(record, attribute)
        if value is None:
            return (0, "", "", index)
        return (1, value.casefold(), value, index)
    return key


def filter_presets(
    presets: List[PresetRecord],
    search_text: Optional[str] = None,
    exact_field: Optional[str] = None,
    exact_value: Optional[str] = None,
) -> List[PresetRecord]:
    """
    Apply the exact-field filter, then free-text search.

    exact_field is matched case-insensitively against Category, ClassId,
    Vendor, Title, Creator and SubFolder; the value must match exactly. An
    unknown field name matches nothing. A blank search_text is ignored;
    otherwise it is matched, untrimmed, as a case-insensitive substring of
    any text field.
    """
    result = list(presets)

    if exact_field and exact_value:
        attribute = EXACT_FIELDS.get(_field_key(exact_field))
        result = [
            p for p in result
            if attribute is not None and getattr(p, attribute) == exact_value
        ]

    if search_text and search_text.strip():
        needle = search_text.lower()
        result = [
            p for p in result
            if any(_contains(getattr(p, name), needle) for name in SEARCH_FIELDS)
        ]

    return result


def sort_presets(
    presets: List[PresetRecord], sort_field: Optional[str], ascending: bool = True
) -> List[PresetRecord]:
    """
    Order presets by one field.

    The order is total: ties fall back to import order, so descending is the
    exact reverse of ascending. An unknown or empty field leaves the order
    unchanged.
    """
    if not sort_field:
        return list(presets)
    attribute = SORT_FIELDS.get(_field_key(sort_field))
    if attribute is None:
        return list(presets)

    ordered = [record for _, record in sorted(enumerate(presets), key=_sort_key(attribute))]
    if not ascending:
        ordered.reverse()
    return ordered


class PresetQueries:
    """
    Read-only queries over stored presets.

    All methods are side-effect free. Undecodable tiers are logged and
    skipped, never repaired.
    """

    def __init__(self, store: KeyValueStore):
        """
        Initialize query interface.

        Args:
            store: Store holding the preset tiers
        """
        self._store = store

    def _read(self, key: str) -> Optional[str]:
        raw = self._store.get(key)
        if not raw or not raw.strip():
            return None
        return raw

    def load_all(self) -> Optional[List[PresetRecord]]:
        """
        Every preset in the combined tier.

        Returns:
            List of presets, or None if the combined tier is absent or undecodable
        """
        raw = self._read(keys.PRESET_DATA)
        if raw is None:
            return None
        try:
            return load_records(PresetRecord, raw)
        except ValueError as e:
            logger.warning(f"Combined preset data could not be decoded: {e}")
            return None

    def load_category(self, category: str) -> Optional[List[PresetRecord]]:
        """
        Presets of one category from the highest-priority tier that has them.

        Args:
            category: Category name (case-insensitive)

        Returns:
            List of presets, or None if no tier holds data
        """
        name = canonical_category(category) or category

        raw = self._read(keys.preset_category_key(name))
        if raw is not None:
            try:
                presets = load_records(PresetRecord, raw)
                if presets:
                    return presets
            except ValueError as e:
                logger.warning(f"Category {name} could not be decoded: {e}")

        raw = self._read(keys.PRESET_COMPRESSED)
        if raw is not None:
            try:
                compressed = load_compressed(raw)
            except ValueError as e:
                logger.warning(f"Compressed preset data could not be decoded: {e}")
                compressed = {}
            for stored_category, projections in compressed.items():
                if stored_category.lower() == name.lower() and projections:
                    logger.info(f"Category {name} served from compressed tier")
                    return [expand(p, stored_category) for p in projections]

        presets = self.load_all()
        if presets is not None:
            logger.info(f"Category {name} served from combined tier")
            return [p for p in presets if p.category.lower() == name.lower()]

        return None

    def select(
        self,
        category: str,
        search_text: Optional[str] = None,
        exact_field: Optional[str] = None,
        exact_value: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_ascending: bool = True,
    ) -> List[PresetRecord]:
        """Every preset of a category after filtering and sorting (no paging)."""
        presets = self.load_category(category) or []
        filtered = filter_presets(presets, search_text, exact_field, exact_value)
        return sort_presets(filtered, sort_field, sort_ascending)

    def query(
        self,
        category: str,
        page: int,
        page_size: int,
        search_text: Optional[str] = None,
        exact_field: Optional[str] = None,
        exact_value: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_ascending: bool = True,
    ) -> PresetPage:
        """
        One page of a category's presets.

        Filtering (exact field, then search) happens before sorting, sorting
        before slicing. total_count is the size of the filtered set.

        Args:
            category: Category to read
            page: Zero-based page index
            page_size: Items per page

        Returns:
            PresetPage; pages past the end are empty

        Raises:
            ValueError: If page is negative or page_size is not positive
        """
        if page < 0:
            raise ValueError(f"page must be >= 0, got {page}")
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")

        ordered = self.select(
            category, search_text, exact_field, exact_value, sort_field, sort_ascending,
        )

        start = page * page_size
        return PresetPage(items=ordered[start:start + page_size], total_count=len(ordered))

    def available_categories(self) -> List[str]:
        """
        Categories that currently have preset data, in allow-list order.

        A category counts when load_category() would serve it from any tier,
        so categories that fell back to the compressed or combined tier are
        listed alongside those stored individually.
        """
        return [
            category for category in ALLOWED_CATEGORIES
            if self.load_category(category)
        ]

    def has_data(self) -> bool:
        return bool(self.available_categories())

    def find_preset(
        self, title: Optional[str], class_id: Optional[str], category: Optional[str]
    ) -> Optional[PresetRecord]:
        """
        First preset matching title, class id and category (case-insensitive).

        Searches whichever tier holds the category's data.

        Returns:
            Matching preset, or None if any argument is empty or nothing matches
        """
        if not title or not class_id or not category:
            return None

        for preset in self.load_category(category) or []:
            if (
                preset.title and preset.title.lower() == title.lower()
                and preset.class_id and preset.class_id.lower() == class_id.lower()
                and preset.category.lower() == category.lower()
            ):
                return preset
        return None

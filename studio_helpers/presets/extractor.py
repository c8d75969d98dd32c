"""
Preset extractor.

Two stages:
1. SqlitePresetReader runs a query against a DataStore.db payload and
   returns loosely typed rows (dicts, any column may be missing)
2. extract_presets maps rows onto PresetRecord and drops every row whose
   category is not allow-listed

The allow-list is enforced here and nowhere else.
"""

import logging
import os
import sqlite3
import tempfile
from typing import Any, Dict, Iterable, List, Mapping, Optional

from studio_helpers.categories import canonical_category
from studio_helpers.config import DEFAULT_PRESET_QUERY
from studio_helpers.errors import ParseError
from studio_helpers.presets.models import PresetRecord


logger = logging.getLogger(__name__)


SOURCE_NAME = "preset database"

# Normalized column name -> PresetRecord field
COLUMN_FIELDS = {
    "category": "category",
    "classid": "class_id",
    "vendor": "vendor",
    "title": "title",
    "creator": "creator",
    "subfolder": "sub_folder",
}


class SqlitePresetReader:
    """
    Reads preset rows out of a SQLite database payload.

    The payload is written to a temporary file for the duration of the query;
    sqlite3 cannot open an in-memory byte string directly.
    """

    def __init__(self, query: str = DEFAULT_PRESET_QUERY):
        self.query = query

    def parse(self, payload: bytes) -> List[Dict[str, Any]]:
        """
        Run the configured query against payload.

        Args:
            payload: Raw bytes of a SQLite database file

        Returns:
            One dict per result row, keyed by column name

        Raises:
            ParseError: If payload is not a SQLite database or the query fails
        """
        if not isinstance(payload, (bytes, bytearray)):
            raise ParseError(SOURCE_NAME, f"expected bytes, got {type(payload).__name__}")

        fd, temp_path = tempfile.mkstemp(suffix=".db")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)

            conn = sqlite3.connect(temp_path)
            try:
                conn.row_factory = sqlite3.Row
                rows = conn.execute(self.query).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise ParseError(SOURCE_NAME, str(e)) from e
        finally:
            os.unlink(temp_path)

        logger.debug(f"Preset query returned {len(rows)} rows")
        return [dict(row) for row in rows]


def _normalize_column(name: str) -> str:
    return name.replace("_", "").lower()


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def extract_presets(rows: Iterable[Mapping[str, Any]]) -> List[PresetRecord]:
    """
    Map raw rows to PresetRecord, keeping only allow-listed categories.

    Column names match case-insensitively (classId, ClassID, class_id).
    Missing columns become None. The category is stored in its allow-listed
    spelling.
    """
    presets: List[PresetRecord] = []
    dropped = 0

    for row in rows:
        values: Dict[str, Optional[str]] = {}
        for column, value in row.items():
            field_name = COLUMN_FIELDS.get(_normalize_column(str(column)))
            if field_name is not None:
                values[field_name] = _text(value)

        category = canonical_category(values.get("category"))
        if category is None:
            dropped += 1
            continue

        values["category"] = category
        presets.append(PresetRecord(**values))

    if dropped:
        logger.info(f"Dropped {dropped} preset rows outside the category allow-list")
    return presets

"""Import timestamps: stored as ISO-8601, displayed as 'Mon DD, YYYY HH:MM'."""

from datetime import datetime
from typing import Optional


DISPLAY_FORMAT = "%b %d, %Y %H:%M"
UNKNOWN = "Unknown"


def now_iso() -> str:
    """Local wall-clock time, seconds precision."""
    return datetime.now().replace(microsecond=0).isoformat()


def format_import_time(raw: Optional[str]) -> str:
    """Render a stored timestamp for display; 'Unknown' if absent or unparsable."""
    if not raw:
        return UNKNOWN
    try:
        return datetime.fromisoformat(raw.strip()).strftime(DISPLAY_FORMAT)
    except ValueError:
        return UNKNOWN

"""
Runtime settings.

Resolution order for every setting:
1. Environment variable
2. Module default

Settings are resolved once per call to load_settings(). Invalid values are
logged and replaced by the default.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


logger = logging.getLogger(__name__)


ENV_STORE_PATH = "STUDIO_HELPERS_STORE"
ENV_OUTPUT_DIR = "STUDIO_HELPERS_OUTPUT"
ENV_QUOTA = "STUDIO_HELPERS_QUOTA"
ENV_PRESET_QUERY = "STUDIO_HELPERS_PRESET_QUERY"
ENV_LOG_LEVEL = "STUDIO_HELPERS_LOG_LEVEL"

DEFAULT_STORE_PATH = Path.home() / ".studio_helpers" / "store.db"
DEFAULT_OUTPUT_DIR = Path("exports")

# Browser local storage allows roughly 5 MiB of UTF-16 text per origin
DEFAULT_QUOTA_CHARS = 5 * 1024 * 1024

DEFAULT_PRESET_QUERY = "SELECT * FROM PresetDescriptors"
DEFAULT_LOG_LEVEL = "WARNING"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration."""

    store_path: Path = DEFAULT_STORE_PATH
    output_dir: Path = DEFAULT_OUTPUT_DIR
    quota_chars: Optional[int] = DEFAULT_QUOTA_CHARS
    """Store capacity in characters. None disables the ceiling."""
    preset_query: str = DEFAULT_PRESET_QUERY
    log_level: str = DEFAULT_LOG_LEVEL


def _parse_quota(raw: str) -> Optional[int]:
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(
            f"Invalid {ENV_QUOTA}={raw!r}; using default {DEFAULT_QUOTA_CHARS}"
        )
        return DEFAULT_QUOTA_CHARS
    if value < 0:
        logger.warning(
            f"Negative {ENV_QUOTA}={value}; using default {DEFAULT_QUOTA_CHARS}"
        )
        return DEFAULT_QUOTA_CHARS
    # 0 means unlimited
    return value or None


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(
            f"Unknown {ENV_LOG_LEVEL}={raw!r}; using {DEFAULT_LOG_LEVEL}"
        )
        return DEFAULT_LOG_LEVEL
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Resolve settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (tests)

    Returns:
        Resolved Settings
    """
    env = os.environ if environ is None else environ

    store_path = DEFAULT_STORE_PATH
    if env.get(ENV_STORE_PATH):
        store_path = Path(env[ENV_STORE_PATH]).expanduser()

    output_dir = DEFAULT_OUTPUT_DIR
    if env.get(ENV_OUTPUT_DIR):
        output_dir = Path(env[ENV_OUTPUT_DIR]).expanduser()

    quota: Optional[int] = DEFAULT_QUOTA_CHARS
    if env.get(ENV_QUOTA) is not None and env.get(ENV_QUOTA) != "":
        quota = _parse_quota(env[ENV_QUOTA])

    preset_query = env.get(ENV_PRESET_QUERY) or DEFAULT_PRESET_QUERY

    log_level = DEFAULT_LOG_LEVEL
    if env.get(ENV_LOG_LEVEL):
        log_level = _parse_log_level(env[ENV_LOG_LEVEL])

    return Settings(
        store_path=store_path,
        output_dir=output_dir,
        quota_chars=quota,
        preset_query=preset_query,
        log_level=log_level,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging once for the CLI process."""
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format=LOG_FORMAT)

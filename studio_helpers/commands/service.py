"""
CommandsService - persist and read back command shortcuts.

Commands are stored as one JSON array under CommandsData, paired with an
import timestamp. A new import replaces the previous one wholesale.
"""

import logging
from typing import List, Union

from studio_helpers.commands.models import CommandRecord
from studio_helpers.commands.parser import parse_commands
from studio_helpers.storage import keys
from studio_helpers.storage.kv import KeyValueStore
from studio_helpers.storage.serialization import dump_records, load_records
from studio_helpers.storage.timestamps import format_import_time, now_iso


logger = logging.getLogger(__name__)


class CommandsService:
    """Import, save and load command shortcut data."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def import_commands(self, markup: Union[str, bytes]) -> List[CommandRecord]:
        """
        Parse a shortcuts export and persist the result.

        Raises:
            ParseError: If the markup cannot be parsed (nothing is stored)
            StorageError: If the write fails
        """
        commands = parse_commands(markup)
        self.save(commands)
        logger.info(f"Imported {len(commands)} commands")
        return commands

    def save(self, commands: List[CommandRecord]) -> None:
        """Store commands and stamp the import time."""
        self._store.set(keys.COMMANDS_DATA, dump_records(commands))
        self._store.set(keys.COMMANDS_IMPORT_TIME, now_iso())

    def load(self) -> List[CommandRecord]:
        """Load stored commands; empty list if absent or undecodable."""
        raw = self._store.get(keys.COMMANDS_DATA)
        if not raw or not raw.strip():
            return []
        try:
            return load_records(CommandRecord, raw)
        except ValueError as e:
            logger.warning(f"Stored commands could not be decoded: {e}")
            return []

    def has_data(self) -> bool:
        return bool(self._store.get(keys.COMMANDS_DATA))

    def import_time(self) -> str:
        """Display form of the last import time, or 'Unknown'."""
        return format_import_time(self._store.get(keys.COMMANDS_IMPORT_TIME))

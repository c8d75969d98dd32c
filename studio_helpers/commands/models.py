"""Command shortcut records extracted from a ShortcutsExport.html file."""

from studio_helpers.storage.serialization import StoredRecord


class CommandRecord(StoredRecord):
    """
    One keyboard command.

    Identity is structural: records keep document order, duplicates pass
    through unchanged.
    """

    section_name: str
    command_name: str
    shortcut: str = ""

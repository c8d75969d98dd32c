"""
Command shortcuts: ShortcutsExport.html -> CommandRecord list -> CommandsData.
"""

from .models import CommandRecord
from .parser import parse_commands
from .service import CommandsService

__all__ = ["CommandRecord", "CommandsService", "parse_commands"]

"""
Plugin registry: XML settings file -> PluginRecord list -> PluginsData.
"""

from .lookup import PluginNameLookup
from .models import PluginRecord
from .parser import parse_plugins
from .service import PluginsService

__all__ = ["PluginNameLookup", "PluginRecord", "PluginsService", "parse_plugins"]

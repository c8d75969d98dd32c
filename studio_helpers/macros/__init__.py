"""
Macro emitter: plugin or preset descriptor -> .studioonemacro XML document.
"""

from .emitter import build_commands, plan_plugin_macro, plan_preset_macro, preset_path, render_macro
from .models import (
    CommandArgument,
    CommandElement,
    EffectPluginMacro,
    EffectPresetMacro,
    EmptyMacro,
    FXChainPresetMacro,
    InstrumentPluginMacro,
    InstrumentPresetMacro,
    MacroDocument,
    MacroHeader,
    MacroPlan,
    TrackPresetMacro,
)
from .service import MacroService

__all__ = [
    "CommandArgument",
    "CommandElement",
    "EffectPluginMacro",
    "EffectPresetMacro",
    "EmptyMacro",
    "FXChainPresetMacro",
    "InstrumentPluginMacro",
    "InstrumentPresetMacro",
    "MacroDocument",
    "MacroHeader",
    "MacroPlan",
    "MacroService",
    "TrackPresetMacro",
    "build_commands",
    "plan_plugin_macro",
    "plan_preset_macro",
    "preset_path",
    "render_macro",
]

"""
Macro emitter.

Turns a plugin or preset descriptor into a Studio One macro document:

    <?xml version="1.0" encoding="UTF-8"?>
    <Macro title="..." group="..." description="...">
        <CommandElement category="Track" name="Add Instrument Track">
            <CommandArgument name="Name" value="..."/>
        </CommandElement>
        ...
    </Macro>

Three steps, each a pure function:
1. plan_plugin_macro / plan_preset_macro choose the plan variant
2. build_commands expands a plan into its ordered commands
3. render_macro serializes header + commands

No I/O happens here.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional

from studio_helpers.categories import PresetCategory, PluginCategory
from studio_helpers.macros.models import (
    CommandArgument,
    CommandElement,
    EffectPluginMacro,
    EffectPresetMacro,
    EmptyMacro,
    FXChainPresetMacro,
    InstrumentPluginMacro,
    InstrumentPresetMacro,
    MacroHeader,
    MacroPlan,
    TrackPresetMacro,
)
from studio_helpers.plugins.models import PluginRecord
from studio_helpers.presets.models import PresetRecord


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

TRACK = "Track"
CONSOLE = "Console"

ADD_INSTRUMENT_TRACK = "Add Instrument Track"
ADD_INSTRUMENT_TO_SELECTED_TRACKS = "Add Instrument to Selected Tracks"
ADD_INSERT_TO_SELECTED_CHANNELS = "Add Insert to Selected Channels"
LOAD_PRESET = "Load Preset"
LOAD_TRACK_PRESET = "Load Track Preset"
SHOW_INSTRUMENT_EDITOR = "Show Instrument Editor"
SHOW_CHANNEL_EDITOR = "Show Channel Editor"

DEFAULT_INSTRUMENT_NAME = "INSTRUMENT"
DEFAULT_EFFECT_PRESET = "default"


def preset_path(sub_folder: Optional[str], title: Optional[str]) -> str:
    """'sub_folder/title', 'title' alone, or '' without a title."""
    if sub_folder and title:
        return f"{sub_folder}/{title}"
    return title or ""


# =============================================================================
# Planning
# =============================================================================

def plan_plugin_macro(
    plugin: PluginRecord, group: str, selected_preset: Optional[PresetRecord] = None
) -> MacroPlan:
    """
    Choose the plan for a plugin.

    Categories are compared exactly. selected_preset must already be resolved
    against stored presets; when given, a Load Preset step is included.
    """
    load_preset = None
    if selected_preset is not None:
        load_preset = selected_preset.title or ""

    if plugin.category == PluginCategory.AUDIO_SYNTH.value:
        return InstrumentPluginMacro(
            name=plugin.name,
            class_id=plugin.class_id,
            group=group,
            load_preset=load_preset,
        )
    if plugin.category == PluginCategory.AUDIO_EFFECT.value:
        return EffectPluginMacro(class_id=plugin.class_id, load_preset=load_preset)
    return EmptyMacro()


def plan_preset_macro(preset: PresetRecord, mode: int = 0) -> MacroPlan:
    """
    Choose the plan for a preset.

    FXChain is matched exactly and is the only variant that uses mode.
    AudioEffect, AudioSynth and TrackPreset match case-insensitively.
    """
    category = preset.category or ""
    path = preset_path(preset.sub_folder, preset.title)

    if category == PresetCategory.FX_CHAIN.value:
        return FXChainPresetMacro(class_id=preset.class_id, preset_path=path, mode=mode)

    lowered = category.lower()
    if lowered == PresetCategory.AUDIO_EFFECT.value.lower():
        return EffectPresetMacro(class_id=preset.class_id, preset_path=path)
    if lowered == PresetCategory.AUDIO_SYNTH.value.lower():
        return InstrumentPresetMacro(title=preset.title, class_id=preset.class_id, preset_path=path)
    if lowered == PresetCategory.TRACK_PRESET.value.lower():
        return TrackPresetMacro(title=preset.title)
    return EmptyMacro()


# =============================================================================
# Commands
# =============================================================================

def _command(category: str, name: str, **arguments: str) -> CommandElement:
    return CommandElement(
        category=category,
        name=name,
        arguments=tuple(CommandArgument(key, value) for key, value in arguments.items()),
    )


def _insert(mode: int, class_id: Optional[str], preset: str) -> CommandElement:
    return _command(
        TRACK, ADD_INSERT_TO_SELECTED_CHANNELS,
        mode=str(mode), cid=class_id or "", preset=preset,
    )


def _add_instrument(class_id: Optional[str], preset: str) -> CommandElement:
    return _command(
        TRACK, ADD_INSTRUMENT_TO_SELECTED_TRACKS,
        mode="1", cid=class_id or "", preset=preset,
    )


def _load_preset(title: str) -> CommandElement:
    return _command(TRACK, LOAD_PRESET, Preset=title)


def _show(name: str) -> CommandElement:
    return _command(CONSOLE, name, State="")


def build_commands(plan: MacroPlan) -> List[CommandElement]:
    """
    Ordered commands for a plan.

    Raises:
        TypeError: If plan is not a macro plan variant
    """
    if isinstance(plan, InstrumentPluginMacro):
        commands = [
            _command(TRACK, ADD_INSTRUMENT_TRACK, Name=plan.name or DEFAULT_INSTRUMENT_NAME),
            _add_instrument(plan.class_id, f"{plan.group}/Instruments/{plan.name or ''}"),
        ]
        if plan.load_preset is not None:
            commands.append(_load_preset(plan.load_preset))
        commands.append(_show(SHOW_INSTRUMENT_EDITOR))
        return commands

    if isinstance(plan, EffectPluginMacro):
        commands = [_insert(1, plan.class_id, DEFAULT_EFFECT_PRESET)]
        if plan.load_preset is not None:
            commands.append(_load_preset(plan.load_preset))
        commands.append(_show(SHOW_CHANNEL_EDITOR))
        return commands

    if isinstance(plan, FXChainPresetMacro):
        return [_insert(plan.mode, plan.class_id, plan.preset_path)]

    if isinstance(plan, EffectPresetMacro):
        return [
            _insert(1, plan.class_id, plan.preset_path),
            _show(SHOW_CHANNEL_EDITOR),
        ]

    if isinstance(plan, InstrumentPresetMacro):
        return [
            _command(TRACK, ADD_INSTRUMENT_TRACK, Name=plan.title or DEFAULT_INSTRUMENT_NAME),
            _add_instrument(plan.class_id, plan.preset_path),
            _show(SHOW_INSTRUMENT_EDITOR),
        ]

    if isinstance(plan, TrackPresetMacro):
        return [_command(TRACK, LOAD_TRACK_PRESET, Name=plan.title or "")]

    if isinstance(plan, EmptyMacro):
        return []

    raise TypeError(f"Not a macro plan: {type(plan).__name__}")


# =============================================================================
# Rendering
# =============================================================================

def render_macro(header: MacroHeader, plan: MacroPlan) -> str:
    """Serialize a macro as a standalone XML document string."""
    root = ET.Element("Macro", {
        "title": header.title,
        "group": header.group,
        "description": header.resolved_description,
    })

    for command in build_commands(plan):
        element = ET.SubElement(root, "CommandElement", {
            "category": command.category,
            "name": command.name,
        })
        for argument in command.arguments:
            ET.SubElement(element, "CommandArgument", {
                "name": argument.name,
                "value": argument.value,
            })

    if isinstance(plan, TrackPresetMacro):
        root.append(ET.Comment(f"TrackPreset macro generated for: {plan.title or ''}"))

    return XML_DECLARATION + ET.tostring(root, encoding="unicode")

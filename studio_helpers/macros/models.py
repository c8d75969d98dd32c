"""
Macro plans.

A plan is one variant of a closed union, chosen once from the descriptor's
category. Each variant carries only what its command list needs, so the
emitter never compares category strings again.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class MacroHeader:
    """Attributes of the root Macro element."""

    title: str
    group: str
    description: Optional[str] = None
    subject: Optional[str] = None
    """Plugin name or preset title used in the default description."""

    @property
    def resolved_description(self) -> str:
        if self.description and self.description.strip():
            return self.description
        return f"Macro for {self.subject or ''}"


@dataclass(frozen=True)
class CommandArgument:
    name: str
    value: str


@dataclass(frozen=True)
class CommandElement:
    """One command of a macro: a category label, a name and its arguments."""

    category: str
    name: str
    arguments: Tuple[CommandArgument, ...] = field(default_factory=tuple)


# =============================================================================
# Plan variants
# =============================================================================

@dataclass(frozen=True)
class InstrumentPluginMacro:
    """AudioSynth plugin: new instrument track with the plugin loaded."""

    name: Optional[str]
    class_id: Optional[str]
    group: str
    load_preset: Optional[str] = None
    """Title for a Load Preset step; None omits the step."""


@dataclass(frozen=True)
class EffectPluginMacro:
    """AudioEffect plugin: insert on the selected channels."""

    class_id: Optional[str]
    load_preset: Optional[str] = None


@dataclass(frozen=True)
class FXChainPresetMacro:
    class_id: Optional[str]
    preset_path: str
    mode: int = 0


@dataclass(frozen=True)
class EffectPresetMacro:
    class_id: Optional[str]
    preset_path: str


@dataclass(frozen=True)
class InstrumentPresetMacro:
    title: Optional[str]
    class_id: Optional[str]
    preset_path: str


@dataclass(frozen=True)
class TrackPresetMacro:
    title: Optional[str]


@dataclass(frozen=True)
class EmptyMacro:
    """Category without a command shape: root element only."""


MacroPlan = Union[
    InstrumentPluginMacro,
    EffectPluginMacro,
    FXChainPresetMacro,
    EffectPresetMacro,
    InstrumentPresetMacro,
    TrackPresetMacro,
    EmptyMacro,
]


@dataclass(frozen=True)
class MacroDocument:
    """A rendered macro ready for delivery."""

    file_name: str
    content: str

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")

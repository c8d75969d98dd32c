"""
Tests for the macro emitter and MacroService

Validates:
- Plan selection per category (exact for plugins and FXChain)
- Exhaustive command shapes and argument names
- Root attributes, default description, XML declaration
- Load Preset step only when a stored preset matches
- Export goes through the delivery sink
"""

import xml.etree.ElementTree as ET

import pytest

from studio_helpers.conftest import make_preset
from studio_helpers.macros import (
    EffectPluginMacro,
    EmptyMacro,
    FXChainPresetMacro,
    InstrumentPluginMacro,
    MacroHeader,
    MacroService,
    TrackPresetMacro,
    build_commands,
    plan_plugin_macro,
    plan_preset_macro,
    preset_path,
    render_macro,
)
from studio_helpers.plugins import PluginRecord
from studio_helpers.presets import PresetQueries, PresetTieringManager, extract_presets
from studio_helpers.reports.delivery import FileDeliverySink


def _plugin(category="AudioSynth", name="Foo", class_id="X1"):
    return PluginRecord(category=category, name=name, class_id=class_id)


def _shape(commands):
    return [
        (c.category, c.name, [(a.name, a.value) for a in c.arguments])
        for c in commands
    ]


# =============================================================================
# Planning
# =============================================================================

class TestPlanning:
    """Test variant selection."""

    def test_plugin_variants(self):
        assert isinstance(plan_plugin_macro(_plugin("AudioSynth"), "G"), InstrumentPluginMacro)
        assert isinstance(plan_plugin_macro(_plugin("AudioEffect"), "G"), EffectPluginMacro)
        assert isinstance(plan_plugin_macro(_plugin("audiosynth"), "G"), EmptyMacro)

    def test_preset_variants(self):
        assert isinstance(plan_preset_macro(make_preset("FXChain", "C")), FXChainPresetMacro)
        assert isinstance(plan_preset_macro(make_preset("fxchain", "C")), EmptyMacro)
        assert isinstance(plan_preset_macro(make_preset("trackpreset", "T")), TrackPresetMacro)
        assert isinstance(plan_preset_macro(make_preset("Artist", "A")), EmptyMacro)

    @pytest.mark.parametrize("sub_folder, title, expected", [
        ("Sub", "Title", "Sub/Title"),
        (None, "Title", "Title"),
        ("", "Title", "Title"),
        ("Sub", None, ""),
        (None, None, ""),
    ])
    def test_preset_path(self, sub_folder, title, expected):
        assert preset_path(sub_folder, title) == expected


# =============================================================================
# Command shapes
# =============================================================================

class TestCommandShapes:
    """Test build_commands for every variant."""

    def test_audio_synth_plugin_without_preset(self):
        commands = build_commands(plan_plugin_macro(_plugin(), "My Group"))

        assert _shape(commands) == [
            ("Track", "Add Instrument Track", [("Name", "Foo")]),
            ("Track", "Add Instrument to Selected Tracks",
             [("mode", "1"), ("cid", "X1"), ("preset", "My Group/Instruments/Foo")]),
            ("Console", "Show Instrument Editor", [("State", "")]),
        ]

    def test_audio_synth_plugin_with_preset(self):
        preset = make_preset("AudioSynth", "Warm Pad", class_id="X1")
        commands = build_commands(plan_plugin_macro(_plugin(), "G", preset))

        assert [c.name for c in commands] == [
            "Add Instrument Track",
            "Add Instrument to Selected Tracks",
            "Load Preset",
            "Show Instrument Editor",
        ]
        assert _shape(commands)[2] == ("Track", "Load Preset", [("Preset", "Warm Pad")])

    def test_nameless_instrument(self):
        commands = build_commands(plan_plugin_macro(_plugin(name=None, class_id=None), "G"))
        assert _shape(commands)[0][2] == [("Name", "INSTRUMENT")]
        assert _shape(commands)[1][2] == [("mode", "1"), ("cid", ""), ("preset", "G/Instruments/")]

    def test_audio_effect_plugin(self):
        commands = build_commands(plan_plugin_macro(_plugin("AudioEffect", "EQ", "E1"), "G"))

        assert _shape(commands) == [
            ("Track", "Add Insert to Selected Channels",
             [("mode", "1"), ("cid", "E1"), ("preset", "default")]),
            ("Console", "Show Channel Editor", [("State", "")]),
        ]

    def test_fxchain_preset_uses_mode(self):
        preset = make_preset("FXChain", "Master", class_id="F1", sub_folder="Bus")

        assert _shape(build_commands(plan_preset_macro(preset))) == [
            ("Track", "Add Insert to Selected Channels",
             [("mode", "0"), ("cid", "F1"), ("preset", "Bus/Master")]),
        ]
        assert _shape(build_commands(plan_preset_macro(preset, mode=2)))[0][2][0] == ("mode", "2")

    def test_audio_effect_preset(self):
        preset = make_preset("audioeffect", "Vocal", class_id="E1")

        assert _shape(build_commands(plan_preset_macro(preset, mode=5))) == [
            ("Track", "Add Insert to Selected Channels",
             [("mode", "1"), ("cid", "E1"), ("preset", "Vocal")]),
            ("Console", "Show Channel Editor", [("State", "")]),
        ]

    def test_audio_synth_preset(self):
        preset = make_preset("AudioSynth", "Pad", class_id="S1", sub_folder="Pads")

        assert _shape(build_commands(plan_preset_macro(preset))) == [
            ("Track", "Add Instrument Track", [("Name", "Pad")]),
            ("Track", "Add Instrument to Selected Tracks",
             [("mode", "1"), ("cid", "S1"), ("preset", "Pads/Pad")]),
            ("Console", "Show Instrument Editor", [("State", "")]),
        ]

    def test_track_preset(self):
        preset = make_preset("TrackPreset", "Drum Bus")
        assert _shape(build_commands(plan_preset_macro(preset))) == [
            ("Track", "Load Track Preset", [("Name", "Drum Bus")]),
        ]

    def test_other_category_is_empty(self):
        assert build_commands(EmptyMacro()) == []

    def test_not_a_plan(self):
        with pytest.raises(TypeError):
            build_commands("AudioSynth")  # type: ignore[arg-type]


# =============================================================================
# Rendering
# =============================================================================

class TestRenderMacro:
    """Test XML output."""

    def test_document_structure(self):
        header = MacroHeader(title="Foo Track", group="Synths", subject="Foo")
        xml = render_macro(header, plan_plugin_macro(_plugin(), "Synths"))

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?><Macro ')
        root = ET.fromstring(xml)
        assert root.tag == "Macro"
        assert root.attrib == {"title": "Foo Track", "group": "Synths", "description": "Macro for Foo"}
        assert len(root.findall("CommandElement")) == 3
        assert root.find("CommandElement/CommandArgument").attrib == {"name": "Name", "value": "Foo"}

    def test_explicit_description(self):
        header = MacroHeader(title="T", group="G", description="Custom", subject="Foo")
        root = ET.fromstring(render_macro(header, EmptyMacro()))
        assert root.get("description") == "Custom"
        assert list(root) == []

    def test_blank_description_uses_default(self):
        header = MacroHeader(title="T", group="G", description="   ", subject="Pad")
        assert ET.fromstring(render_macro(header, EmptyMacro())).get("description") == "Macro for Pad"

    def test_track_preset_comment(self):
        header = MacroHeader(title="T", group="G", subject="Drum Bus")
        xml = render_macro(header, TrackPresetMacro(title="Drum Bus"))
        assert "<!--TrackPreset macro generated for: Drum Bus-->" in xml

    def test_attribute_escaping(self):
        header = MacroHeader(title='A "quoted" & <odd>', group="G", subject="x")
        root = ET.fromstring(render_macro(header, EmptyMacro()))
        assert root.get("title") == 'A "quoted" & <odd>'


# =============================================================================
# Service
# =============================================================================

class TestMacroService:
    """Test preset resolution and export."""

    @pytest.fixture
    def service(self, memory_store, preset_rows):
        PresetTieringManager(memory_store).persist(extract_presets(preset_rows))
        return MacroService(PresetQueries(memory_store))

    def test_selected_preset_found_in_per_category_tier(self, service):
        plugin = _plugin("AudioSynth", "Mai Tai", "{SYNTH-1}")
        document = service.plugin_macro(plugin, "Mai Tai Pad", "Synths", selected_preset="warm pad")

        root = ET.fromstring(document.content)
        names = [c.get("name") for c in root.findall("CommandElement")]
        assert "Load Preset" in names
        assert root.find("CommandElement[@name='Load Preset']/CommandArgument").get("value") == "Warm Pad"

    def test_unknown_preset_omits_step(self, service):
        plugin = _plugin("AudioSynth", "Mai Tai", "{SYNTH-1}")
        document = service.plugin_macro(plugin, "T", "G", selected_preset="Nope")
        assert "Load Preset" not in document.content

    def test_file_name(self, service):
        document = service.preset_macro(make_preset("FXChain", "Chain"), "My Chain", "G")
        assert document.file_name == "My Chain.studioonemacro"
        assert document.data.startswith(b"<?xml")

    def test_export_writes_file(self, service, tmp_path):
        document = service.preset_macro(make_preset("TrackPreset", "Bus"), "Bus Macro", "G")
        path = MacroService.export(document, FileDeliverySink(tmp_path))

        assert path == tmp_path / "Bus Macro.studioonemacro"
        assert path.read_text(encoding="utf-8") == document.content

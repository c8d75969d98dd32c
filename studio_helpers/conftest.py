"""
Shared pytest fixtures.

Synthetic exports only: a small shortcuts page, a plugin registry and a
preset database built on the fly.
"""

import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from studio_helpers.presets.models import PresetRecord
from studio_helpers.storage.kv import MemoryKeyValueStore, QuotaExceededError


SHORTCUTS_HTML = """
<html>
<head><title>Studio One Keyboard Shortcuts</title></head>
<body>
<h1>Keyboard Shortcuts</h1>
<h2> Transport </h2>
<table>
    <tr><th>Command</th><th>Key</th></tr>
    <tr><td>Start</td><td>Enter</td></tr>
    <tr><td> Stop </td><td> Space </td></tr>
    <tr><td>Record</td></tr>
</table>
<h2>Edit</h2>
<table>
    <tr><td>Undo</td><td>Ctrl+Z</td></tr>
</table>
<table>
    <tr><td>Second table ignored</td><td>X</td></tr>
</table>
<h2>Orphan Section</h2>
<p>No table follows this heading.</p>
</body>
</html>
"""


PLUGINS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Settings>
  <Section path="Plugins/VST3">
    <ClassDescription category="AudioSynth" name="Mai Tai" subCategory="Synth" classID="{SYNTH-1}">
      <PersistentAttributes>
        <Attribute id="Class:Vendor" value="PreSonus"/>
        <Attribute id="Class:Version" value="1.2.0"/>
        <Attribute id="Class:Folder" value="Instruments"/>
      </PersistentAttributes>
    </ClassDescription>
    <ClassDescription category="AudioEffect" name="Pro EQ" subCategory="Fx|EQ VST3" classID="{FX-1}">
      <PersistentAttributes>
        <Attribute id="Class:Vendor" value="PreSonus"/>
      </PersistentAttributes>
    </ClassDescription>
    <ClassDescription category="MidiEffect" name="Arpeggiator" subCategory="Note FX" classID="{MIDI-1}"/>
  </Section>
  <Section path="Plugins/AU">
    <ClassDescription category="AudioEffect" name="Room Reverb" subCategory="Reverb" classID="{FX-2}"/>
  </Section>
</Settings>
"""


PRESET_COLUMNS = ("category", "classId", "vendor", "title", "creator", "subFolder")


def build_preset_db(path: Path, rows: List[Dict[str, Optional[str]]], table: str = "PresetDescriptors") -> bytes:
    """Write a SQLite preset database and return its bytes."""
    conn = sqlite3.connect(path)
    conn.execute(
        f"CREATE TABLE {table} ("
        "category TEXT, classId TEXT, vendor TEXT, title TEXT, creator TEXT, subFolder TEXT)"
    )
    conn.executemany(
        f"INSERT INTO {table} VALUES (?, ?, ?, ?, ?, ?)",
        [tuple(row.get(column) for column in PRESET_COLUMNS) for row in rows],
    )
    conn.commit()
    conn.close()
    return path.read_bytes()


ALWAYS = 10 ** 6


class RejectingStore(MemoryKeyValueStore):
    """Memory store that rejects writes to chosen keys a set number of times."""

    def __init__(self, reject: Optional[Dict[str, int]] = None, error=None):
        super().__init__()
        self.reject = dict(reject or {})
        self.error = error

    def set(self, key: str, value: str) -> None:
        if self.reject.get(key, 0) > 0:
            self.reject[key] -= 1
            if self.error is not None:
                raise self.error
            raise QuotaExceededError(key, len(key) + len(value), 0)
        super().set(key, value)


def make_preset(category: str, title: str, **fields) -> PresetRecord:
    """PresetRecord with sensible defaults for fields not given."""
    return PresetRecord(
        category=category,
        class_id=fields.get("class_id", "{CID}"),
        vendor=fields.get("vendor", "PreSonus"),
        title=title,
        creator=fields.get("creator", "factory"),
        sub_folder=fields.get("sub_folder"),
    )


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    """Unlimited in-memory store."""
    return MemoryKeyValueStore()


@pytest.fixture
def shortcuts_html() -> str:
    return SHORTCUTS_HTML


@pytest.fixture
def plugins_xml() -> str:
    return PLUGINS_XML


@pytest.fixture
def preset_rows() -> List[Dict[str, Optional[str]]]:
    """Rows spanning allowed and disallowed categories."""
    return [
        {"category": "AudioSynth", "classId": "{SYNTH-1}", "vendor": "PreSonus",
         "title": "Warm Pad", "creator": "factory", "subFolder": "Pads"},
        {"category": "AudioSynth", "classId": "{SYNTH-1}", "vendor": "PreSonus",
         "title": "Bright Lead", "creator": "factory", "subFolder": "Leads"},
        {"category": "AudioEffect", "classId": "{FX-1}", "vendor": "PreSonus",
         "title": "Vocal EQ", "creator": "user", "subFolder": None},
        {"category": "FXChain", "classId": None, "vendor": None,
         "title": "Mastering Chain", "creator": "user", "subFolder": "Master"},
        {"category": "TrackPreset", "classId": None, "vendor": None,
         "title": "Drum Bus", "creator": "user", "subFolder": None},
        {"category": "Impulse", "classId": "{IR}", "vendor": "Acme",
         "title": "Hall IR", "creator": "factory", "subFolder": None},
        {"category": None, "classId": "{X}", "vendor": "Acme",
         "title": "No Category", "creator": None, "subFolder": None},
    ]


@pytest.fixture
def preset_db_bytes(tmp_path: Path, preset_rows) -> bytes:
    return build_preset_db(tmp_path / "DataStore.db", preset_rows)

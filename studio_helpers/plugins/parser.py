"""
Plugin registry parser.

Studio One keeps installed plugins in an XML settings file:

    <Section path="...">
        <ClassDescription category="AudioSynth" name="..." subCategory="..." classID="...">
            <PersistentAttributes>
                <Attribute id="Class:Vendor" value="..."/>
                <Attribute id="Class:Version" value="..."/>
                <Attribute id="Class:Folder" value="..."/>
            </PersistentAttributes>
        </ClassDescription>
    </Section>

Only AudioSynth and AudioEffect entries are kept. The category check happens
while walking the tree, so nothing else is ever materialized.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional, Union

from studio_helpers.categories import PLUGIN_CATEGORIES
from studio_helpers.errors import ParseError
from studio_helpers.plugins.models import PluginRecord


SOURCE_NAME = "plugin registry"

VENDOR_ATTRIBUTE = "Class:Vendor"
VERSION_ATTRIBUTE = "Class:Version"
FOLDER_ATTRIBUTE = "Class:Folder"


def _persistent_value(description: ET.Element, attribute_id: str) -> str:
    attributes = description.find(".//PersistentAttributes")
    if attributes is None:
        return ""
    for attribute in attributes.iter("Attribute"):
        if attribute.get("id") == attribute_id:
            return attribute.get("value") or ""
    return ""


def _parse_root(xml_text: Union[str, bytes]) -> ET.Element:
    if not isinstance(xml_text, (str, bytes)):
        raise ParseError(SOURCE_NAME, f"expected text, got {type(xml_text).__name__}")
    try:
        return ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ParseError(SOURCE_NAME, str(e)) from e


def parse_plugins(xml_text: Union[str, bytes]) -> List[PluginRecord]:
    """
    Extract AudioSynth and AudioEffect plugins in document order.

    Each ClassDescription yields at most one record, even when Sections are
    nested. A raw per-Section descendant walk would emit an entry once for
    every enclosing Section; this parser deliberately does not.

    Args:
        xml_text: Registry XML (text or raw bytes)

    Returns:
        List of PluginRecord

    Raises:
        ParseError: If the document is not well-formed XML
    """
    root = _parse_root(xml_text)

    plugins: List[PluginRecord] = []
    seen = set()
    for section in root.iter("Section"):
        for description in section.iter("ClassDescription"):
            # Each entry once, even inside nested sections
            if id(description) in seen:
                continue
            seen.add(id(description))

            category: Optional[str] = description.get("category")
            if category not in PLUGIN_CATEGORIES:
                continue

            plugins.append(PluginRecord(
                category=category,
                name=description.get("name"),
                sub_category=description.get("subCategory"),
                class_id=description.get("classID"),
                vendor=_persistent_value(description, VENDOR_ATTRIBUTE),
                version=_persistent_value(description, VERSION_ATTRIBUTE),
                folder=_persistent_value(description, FOLDER_ATTRIBUTE),
            ))

    return plugins

"""ENEX export parsing.

Turns the raw export XML into typed records. Every repeated element (notes,
tags, resources) becomes a tuple here, whatever its cardinality, so nothing
downstream has to guess whether it holds one item or many.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ..core.exceptions import ExportFormatError
from ..core.types import NoteRecord, ResourceRecord

EXPORT_ROOT = "en-export"


@dataclass(frozen=True)
class ExportDocument:
    """A parsed export: its notes plus root attributes (export-date, ...)."""

    notes: tuple[NoteRecord, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.notes)


def parse_export(content: str | bytes) -> ExportDocument:
    """Parse ENEX content into an ExportDocument.

    Args:
        content: Raw export XML.

    Returns:
        ExportDocument with one NoteRecord per note element.

    Raises:
        ExportFormatError: If the content is empty, not XML, or the root is
            not an en-export element.
    """
    if not content or (isinstance(content, str) and not content.strip()):
        raise ExportFormatError("Invalid ENEX format: export is empty")

    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ExportFormatError(f"Invalid ENEX format: {e}") from e

    if root.tag != EXPORT_ROOT:
        raise ExportFormatError(
            f"Invalid ENEX format: missing {EXPORT_ROOT} root (found {root.tag!r})"
        )

    notes = tuple(
        _parse_note(element, position)
        for position, element in enumerate(root.findall("note"))
    )
    logger.debug(f"Parsed export: {len(notes)} notes")
    return ExportDocument(notes=notes, attributes=dict(root.attrib))


def parse_export_file(path: Path) -> ExportDocument:
    """Read and parse an ENEX file.

    Raises:
        ExportFormatError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ExportFormatError(f"Cannot read export {path}: {e}") from e
    return parse_export(content)


def _parse_note(element: ET.Element, position: int) -> NoteRecord:
    attributes_element = element.find("note-attributes")
    attributes = _children_as_dict(attributes_element)

    tags = tuple(
        tag.text.strip()
        for tag in element.findall("tag")
        if tag.text and tag.text.strip()
    )
    resources = tuple(_parse_resource(r) for r in element.findall("resource"))

    return NoteRecord(
        title=_child_text(element, "title"),
        content=_child_text(element, "content", strip=False),
        created=_child_text(element, "created"),
        updated=_child_text(element, "updated"),
        tags=tags,
        resources=resources,
        guid=element.get("guid") or _child_text(element, "guid"),
        attributes=attributes,
        position=position,
    )


def _parse_resource(element: ET.Element) -> ResourceRecord:
    data_element = element.find("data")
    attributes = _children_as_dict(element.find("resource-attributes"))

    data = None
    encoding = "base64"
    if data_element is not None:
        data = data_element.text
        encoding = data_element.get("encoding", "base64")

    return ResourceRecord(
        mime=_child_text(element, "mime"),
        data=data,
        encoding=encoding,
        file_name=element.get("file-name") or attributes.get("file-name"),
        hash=element.get("hash"),
        recognition=_child_text(element, "recognition", strip=False),
        width=_child_text(element, "width"),
        height=_child_text(element, "height"),
        duration=_child_text(element, "duration"),
        attributes=attributes,
    )


def _child_text(element: ET.Element, tag: str, strip: bool = True) -> str | None:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip() if strip else child.text
    return text or None


def _children_as_dict(element: ET.Element | None) -> dict[str, str]:
    if element is None:
        return {}
    return {
        child.tag: child.text.strip()
        for child in element
        if child.text and child.text.strip()
    }

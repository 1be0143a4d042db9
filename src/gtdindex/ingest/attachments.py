"""Attachment extraction from note resources.

Decodes embedded resources into attachment drafts. Everything here is best
effort: a resource that cannot be decoded is skipped, and recognition (OCR)
data that cannot be read leaves ``extracted_text`` empty. Nothing raises.
"""

from __future__ import annotations

import base64
import binascii
import xml.etree.ElementTree as ET

from loguru import logger

from ..core.types import AttachmentDraft, ResourceRecord
from ..utils.hashing import md5_hex_bytes

REFERENCE_PREFIX = "enex://resource/"
DEFAULT_MIME = "application/octet-stream"


def storage_reference(content_hash: str) -> str:
    """Build the opaque storage reference for a resource content hash."""
    return f"{REFERENCE_PREFIX}{content_hash}"


class AttachmentExtractor:
    """Turns ResourceRecords into AttachmentDrafts.

    The extractor never touches the document store or blob storage; it only
    decodes. Callers persist the draft and hand ``draft.data`` to a blob store.
    """

    def extract(self, resource: ResourceRecord, document_id: int | None = None) -> AttachmentDraft | None:
        """Decode one resource.

        Args:
            resource: Resource record from the export.
            document_id: Owning document, used for log context only.

        Returns:
            AttachmentDraft, or None if the payload is missing or undecodable.
        """
        data = self._decode_payload(resource)
        if data is None:
            logger.debug(
                f"Skipping resource without decodable payload "
                f"(document={document_id}, mime={resource.mime})"
            )
            return None

        content_hash = md5_hex_bytes(data)
        if resource.hash and resource.hash.lower() != content_hash:
            logger.debug(
                f"Resource hash mismatch (declared={resource.hash}, computed={content_hash})"
            )

        filename = resource.file_name or f"attachment_{content_hash[:12]}"
        extracted_text = extract_recognition_text(resource.recognition)

        return AttachmentDraft(
            filename=filename,
            mime_type=resource.mime or DEFAULT_MIME,
            byte_size=len(data),
            storage_reference=storage_reference(content_hash),
            extracted_text=extracted_text,
            metadata={
                "hash": resource.hash or content_hash,
                "width": _to_int(resource.width),
                "height": _to_int(resource.height),
                "duration": _to_int(resource.duration),
                "recognition": resource.recognition is not None,
                "source_url": resource.attributes.get("source-url"),
            },
            data=data,
        )

    @staticmethod
    def _decode_payload(resource: ResourceRecord) -> bytes | None:
        if not resource.data:
            return None

        encoding = (resource.encoding or "base64").lower()
        if encoding != "base64":
            logger.debug(f"Unsupported resource encoding: {encoding}")
            return None

        try:
            # Export payloads are wrapped across lines; drop all whitespace
            compact = "".join(resource.data.split())
            return base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Resource payload decode failed: {e}")
            return None


def extract_recognition_text(recognition: str | None) -> str | None:
    """Extract recognized text from a recoIndex document.

    The recognition payload lists candidate words per image region; the
    highest-weight candidate of each region is kept. The payload may be raw
    XML or base64-encoded XML.

    Args:
        recognition: Recognition payload, may be None.

    Returns:
        Space-separated recognized words, or None if nothing could be read.
    """
    if not recognition or not recognition.strip():
        return None

    try:
        xml_text = recognition.strip()
        if not xml_text.startswith("<"):
            xml_text = base64.b64decode("".join(xml_text.split()), validate=True).decode("utf-8")

        root = ET.fromstring(xml_text)
        words: list[str] = []
        for item in root.iter("item"):
            best = None
            best_weight = -1
            for candidate in item.findall("t"):
                if not candidate.text:
                    continue
                weight = _to_int(candidate.get("w")) or 0
                if weight > best_weight:
                    best, best_weight = candidate.text.strip(), weight
            if best:
                words.append(best)

        return " ".join(words) or None
    except Exception as e:
        logger.debug(f"Recognition data ignored: {e}")
        return None


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None

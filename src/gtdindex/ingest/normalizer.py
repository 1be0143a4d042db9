"""Note normalization: one parsed note record to one DocumentDraft."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from loguru import logger

from ..core.exceptions import NoteStructureError
from ..core.types import UNTITLED_NOTE, DocumentDraft, NoteRecord
from ..utils.clock import utc_now
from ..utils.hashing import md5_hex
from .classify import extract_area, extract_contexts, extract_project
from .dates import parse_timestamp, parse_timestamp_strict
from .markup import enml_to_text

SOURCE_TYPE = "evernote"


class NoteNormalizer:
    """Converts export note records into document drafts.

    Recoverable problems (bad dates, no tags, no content) never raise; the
    affected field falls back to its default. Only a structurally absent
    note is an error.

    Example:
        >>> normalizer = NoteNormalizer()
        >>> draft = normalizer.normalize(note)
        >>> draft.contexts
        ['@computer']
    """

    def normalize(self, note: NoteRecord | None, now: datetime | None = None) -> DocumentDraft:
        """Normalize a single note.

        Args:
            note: Parsed note record.
            now: Instant used for missing or unparseable dates.

        Returns:
            DocumentDraft ready for upsert.

        Raises:
            NoteStructureError: If the note is None or carries no data at all.
        """
        if note is None:
            raise NoteStructureError("unknown note", "Note record is missing")
        if note.is_empty:
            raise NoteStructureError(note.label, f"{note.label} is empty")

        now = now or utc_now()
        title = (note.title or "").strip() or UNTITLED_NOTE
        content = enml_to_text(note.content)
        created = parse_timestamp(note.created, now=now)
        updated = parse_timestamp(note.updated, now=now)

        tags = list(note.tags)
        draft = DocumentDraft(
            source_id=self.derive_source_id(note, title, content),
            title=title,
            content=content,
            contexts=extract_contexts(tags),
            project=extract_project(tags),
            area=extract_area(tags),
            created_at=created,
            updated_at=updated,
            metadata=self._build_metadata(note),
            source_type=SOURCE_TYPE,
            resources=note.resources,
        )
        logger.debug(
            f"Normalized note {title!r}: source_id={draft.source_id[:12]}, "
            f"contexts={draft.contexts}, project={draft.project}, area={draft.area}"
        )
        return draft

    @staticmethod
    def derive_source_id(note: NoteRecord, title: str, content: str) -> str:
        """Derive a stable external identity for a note.

        Prefers the export GUID, then the source-guid attribute, then an MD5
        of title and creation time. When the creation time is unusable the
        content stands in for it so the identity stays stable across runs.
        """
        if note.guid:
            return note.guid
        if source_guid := note.attributes.get("source-guid"):
            return source_guid

        created = parse_timestamp_strict(note.created)
        anchor = created.isoformat() if created else content
        return md5_hex(f"{title}_{anchor}")

    @staticmethod
    def _build_metadata(note: NoteRecord) -> dict[str, Any]:
        attributes = note.attributes
        location = None
        latitude = attributes.get("latitude")
        longitude = attributes.get("longitude")
        if latitude and longitude:
            try:
                location = {"lat": float(latitude), "lng": float(longitude)}
            except ValueError:
                location = None

        return {
            "original_tags": list(note.tags),
            "source_url": attributes.get("source-url"),
            "author": attributes.get("author"),
            "location": location,
            "reminder": attributes.get("reminder-order") or attributes.get("reminder-time"),
            "evernote_attributes": dict(attributes),
        }

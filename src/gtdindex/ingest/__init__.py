"""ENEX ingestion: parsing, normalization and attachment extraction."""

from .attachments import AttachmentExtractor, extract_recognition_text, storage_reference
from .blobs import BlobStore, FsspecBlobStore
from .classify import extract_area, extract_contexts, extract_project
from .dates import parse_timestamp
from .enex import ExportDocument, parse_export, parse_export_file
from .markup import enml_to_text
from .normalizer import NoteNormalizer

__all__ = [
    "AttachmentExtractor",
    "BlobStore",
    "ExportDocument",
    "FsspecBlobStore",
    "NoteNormalizer",
    "enml_to_text",
    "extract_area",
    "extract_contexts",
    "extract_project",
    "extract_recognition_text",
    "parse_export",
    "parse_export_file",
    "parse_timestamp",
    "storage_reference",
]

"""Blob storage for attachment bytes using fsspec.

The document store only keeps opaque storage references; the bytes behind
them live wherever the blob store points (a local directory by default, any
fsspec URL otherwise).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

import fsspec
from loguru import logger


@runtime_checkable
class BlobStore(Protocol):
    """Destination for attachment bytes, keyed by storage reference."""

    async def put(self, reference: str, data: bytes) -> None:
        """Store bytes under a reference (idempotent)."""
        ...

    async def exists(self, reference: str) -> bool:
        """Check whether bytes exist for a reference."""
        ...


class FsspecBlobStore:
    """Blob store backed by an fsspec filesystem.

    References look like ``enex://resource/<md5>``; only the last path
    segment is used to name the stored object.

    Example:
        store = FsspecBlobStore(Path("~/.cache/gtdindex/blobs"))
        await store.put("enex://resource/abc123", b"...")
        # Written to ~/.cache/gtdindex/blobs/abc123
    """

    def __init__(self, base_path: Path | str, protocol: str = "file"):
        """Initialize the store.

        Args:
            base_path: Root directory (or bucket prefix) for blobs.
            protocol: fsspec protocol name.
        """
        if protocol == "file":
            self._base_path = str(Path(base_path).expanduser().resolve())
        else:
            self._base_path = str(base_path).rstrip("/")
        self._fs = fsspec.filesystem(protocol)

    @property
    def base_path(self) -> str:
        """Root location for stored blobs."""
        return self._base_path

    def path_for(self, reference: str) -> str:
        """Map a storage reference to its location in the filesystem."""
        key = reference.rstrip("/").rsplit("/", 1)[-1]
        if not key or key in (".", ".."):
            raise ValueError(f"Invalid storage reference: {reference!r}")
        return f"{self._base_path}/{key}"

    async def put(self, reference: str, data: bytes) -> None:
        """Write bytes for a reference unless they are already stored."""
        await asyncio.to_thread(self._put_sync, reference, data)

    async def exists(self, reference: str) -> bool:
        """Check whether bytes exist for a reference."""
        return await asyncio.to_thread(self._fs.exists, self.path_for(reference))

    def _put_sync(self, reference: str, data: bytes) -> None:
        target = self.path_for(reference)
        if self._fs.exists(target):
            logger.debug(f"Blob already stored: {reference}")
            return

        self._fs.makedirs(self._base_path, exist_ok=True)
        with self._fs.open(target, "wb") as f:
            f.write(data)
        logger.debug(f"Stored blob: {reference} ({len(data)} bytes)")

"""In-memory blob store."""


class InMemoryBlobStore:
    """BlobStore keeping bytes in a dict, with an optional failing reference."""

    def __init__(self, fail_on: str | None = None):
        self.blobs: dict[str, bytes] = {}
        self.fail_on = fail_on

    async def put(self, reference: str, data: bytes) -> None:
        if reference == self.fail_on:
            raise OSError(f"disk full while writing {reference}")
        self.blobs.setdefault(reference, data)

    async def exists(self, reference: str) -> bool:
        return reference in self.blobs

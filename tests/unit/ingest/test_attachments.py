"""Tests for attachment extraction."""

import base64
import hashlib

import pytest

from gtdindex.core.types import ResourceRecord
from gtdindex.ingest.attachments import (
    DEFAULT_MIME,
    AttachmentExtractor,
    extract_recognition_text,
    storage_reference,
)

RECO_XML = (
    '<recoIndex docType="handwritten" objType="image">'
    '<item x="1" y="2" w="3" h="4"><t w="31">lnvoice</t><t w="87">Invoice</t></item>'
    '<item x="5" y="6" w="7" h="8"><t w="50">2024</t></item>'
    "</recoIndex>"
)


@pytest.fixture
def extractor() -> AttachmentExtractor:
    return AttachmentExtractor()


def resource(data: bytes = b"\x89PNG fake", **kwargs) -> ResourceRecord:
    payload = base64.b64encode(data).decode("ascii")
    return ResourceRecord(data=kwargs.pop("payload", payload), **kwargs)


class TestExtract:
    """Tests for AttachmentExtractor.extract."""

    def test_decodes_payload(self, extractor):
        data = b"\x89PNG fake image bytes"
        digest = hashlib.md5(data).hexdigest()

        draft = extractor.extract(
            resource(data, mime="image/png", file_name="scan.png", width="640", height="480")
        )

        assert draft is not None
        assert draft.data == data
        assert draft.byte_size == len(data)
        assert draft.filename == "scan.png"
        assert draft.mime_type == "image/png"
        assert draft.storage_reference == storage_reference(digest)
        assert draft.metadata["width"] == 640
        assert draft.metadata["height"] == 480
        assert draft.metadata["hash"] == digest
        assert draft.metadata["recognition"] is False

    def test_wrapped_payload_is_accepted(self, extractor):
        data = bytes(range(200))
        encoded = base64.b64encode(data).decode("ascii")
        wrapped = "\n".join(encoded[i : i + 76] for i in range(0, len(encoded), 76))

        draft = extractor.extract(resource(payload=f"\n  {wrapped}\n"))

        assert draft is not None
        assert draft.data == data

    def test_filename_and_mime_fallbacks(self, extractor):
        data = b"payload"
        draft = extractor.extract(resource(data))

        assert draft.filename == f"attachment_{hashlib.md5(data).hexdigest()[:12]}"
        assert draft.mime_type == DEFAULT_MIME

    def test_missing_payload_is_skipped(self, extractor):
        assert extractor.extract(ResourceRecord(mime="image/png")) is None

    def test_invalid_base64_is_skipped(self, extractor):
        assert extractor.extract(resource(payload="not*base64!")) is None

    def test_unsupported_encoding_is_skipped(self, extractor):
        assert extractor.extract(resource(encoding="hex")) is None

    def test_declared_hash_is_kept_on_mismatch(self, extractor):
        draft = extractor.extract(resource(b"abc", hash="0" * 32))
        assert draft.metadata["hash"] == "0" * 32
        assert draft.storage_reference == storage_reference(hashlib.md5(b"abc").hexdigest())

    def test_recognition_text_is_extracted(self, extractor):
        draft = extractor.extract(resource(recognition=RECO_XML))
        assert draft.extracted_text == "Invoice 2024"
        assert draft.metadata["recognition"] is True


class TestExtractRecognitionText:
    """Tests for extract_recognition_text."""

    def test_raw_xml(self):
        assert extract_recognition_text(RECO_XML) == "Invoice 2024"

    def test_base64_xml(self):
        encoded = base64.b64encode(RECO_XML.encode("utf-8")).decode("ascii")
        assert extract_recognition_text(encoded) == "Invoice 2024"

    @pytest.mark.parametrize("value", [None, "", "   ", "<recoIndex><item>", "%%%"])
    def test_unreadable_gives_none(self, value):
        assert extract_recognition_text(value) is None

    def test_no_items_gives_none(self):
        assert extract_recognition_text("<recoIndex/>") is None

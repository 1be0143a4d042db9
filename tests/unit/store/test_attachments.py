"""Tests for AttachmentRepository."""

from gtdindex.core.types import AttachmentDraft
from gtdindex.store.repositories import AttachmentRepository, DocumentRepository
from tests.fakes import make_draft


def attachment(reference: str = "enex://resource/abc", filename: str = "scan.png") -> AttachmentDraft:
    return AttachmentDraft(
        filename=filename,
        mime_type="image/png",
        byte_size=10,
        storage_reference=reference,
        extracted_text="Invoice",
        metadata={"width": 640},
    )


class TestAttachmentRepository:
    """Tests for attachment records."""

    def test_add_and_list(self, attachment_repo: AttachmentRepository, document_repo: DocumentRepository):
        doc, _ = document_repo.upsert(make_draft())

        stored, is_new = attachment_repo.add(doc.id, attachment())

        assert is_new
        assert stored.document_id == doc.id
        assert stored.extracted_text == "Invoice"
        assert stored.metadata == {"width": 640}
        assert [a.id for a in attachment_repo.list_for_document(doc.id)] == [stored.id]

    def test_same_reference_is_ignored(self, attachment_repo: AttachmentRepository, document_repo: DocumentRepository):
        doc, _ = document_repo.upsert(make_draft())

        first, _ = attachment_repo.add(doc.id, attachment())
        second, is_new = attachment_repo.add(doc.id, attachment(filename="renamed.png"))

        assert not is_new
        assert second.id == first.id
        assert attachment_repo.count() == 1

    def test_count_by_document(self, attachment_repo: AttachmentRepository, document_repo: DocumentRepository):
        a, _ = document_repo.upsert(make_draft(source_id="a"))
        b, _ = document_repo.upsert(make_draft(source_id="b"))
        attachment_repo.add(a.id, attachment("enex://resource/1"))
        attachment_repo.add(a.id, attachment("enex://resource/2"))

        assert attachment_repo.count_by_document([a.id, b.id]) == {a.id: 2}
        assert attachment_repo.count_by_document([]) == {}

"""Tests for ENML to plain text conversion."""

from gtdindex.ingest.markup import ATTACHMENT_MARKER, enml_to_text


class TestEnmlToText:
    """Tests for enml_to_text."""

    def test_none_and_empty_give_empty_string(self):
        assert enml_to_text(None) == ""
        assert enml_to_text("") == ""

    def test_strips_declaration_and_root(self):
        markup = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<!DOCTYPE en-note SYSTEM "http://xml.evernote.com/pub/enml2.dtd">'
            "<en-note><div>Call the bank</div></en-note>"
        )
        assert enml_to_text(markup) == "Call the bank"

    def test_media_becomes_attachment_marker(self):
        markup = '<en-note><div>Receipt</div><en-media type="image/png" hash="abc"/></en-note>'
        assert enml_to_text(markup) == f"Receipt {ATTACHMENT_MARKER}"

    def test_checkboxes_become_glyphs(self):
        markup = (
            '<en-note><div><en-todo checked="true"/>Done</div>'
            '<div><en-todo checked="false"/>Open</div><div><en-todo/>Also open</div></en-note>'
        )
        assert enml_to_text(markup) == "☑ Done ☐ Open ☐ Also open"

    def test_block_tags_separate_words_and_inline_tags_do_not(self):
        markup = "<en-note><div>first</div><div>second <b>bo</b>ld</div></en-note>"
        assert enml_to_text(markup) == "first second bold"

    def test_entities_are_unescaped_and_whitespace_collapsed(self):
        markup = "<en-note><p>Tom &amp;   Jerry\n\n</p>  <p>&lt;3</p></en-note>"
        assert enml_to_text(markup) == "Tom & Jerry <3"

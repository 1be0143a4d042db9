"""ENML (Evernote markup) to plain text conversion."""

import html
import re

ATTACHMENT_MARKER = "[Attachment]"
UNCHECKED_BOX = "☐ "
CHECKED_BOX = "☑ "

_XML_DECL = re.compile(r"<\?xml[^>]*\?>", re.IGNORECASE)
_DOCTYPE = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_NOTE_OPEN = re.compile(r"<en-note[^>]*>", re.IGNORECASE)
_NOTE_CLOSE = re.compile(r"</en-note\s*>", re.IGNORECASE)
_MEDIA = re.compile(r"<en-media[^>]*?(?:/>|>\s*</en-media\s*>|>)", re.IGNORECASE)
_TODO_CHECKED = re.compile(
    r"<en-todo[^>]*checked\s*=\s*[\"']true[\"'][^>]*?(?:/>|>\s*</en-todo\s*>|>)",
    re.IGNORECASE,
)
_TODO = re.compile(r"<en-todo[^>]*?(?:/>|>\s*</en-todo\s*>|>)", re.IGNORECASE)
_BLOCK_TAG = re.compile(
    r"</?(div|p|br|li|ul|ol|tr|td|th|table|h[1-6]|blockquote|pre|hr)\b[^>]*>",
    re.IGNORECASE,
)
_ANY_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def enml_to_text(markup: str | None) -> str:
    """Convert ENML note content to a single line of plain text.

    The root en-note element becomes a generic container, embedded media
    becomes an attachment marker, checkboxes become glyphs, and every other
    tag is dropped before whitespace is collapsed.

    Args:
        markup: ENML content (the CDATA body of a note), may be None.

    Returns:
        Plain text, or an empty string when there is no content.
    """
    if not markup:
        return ""

    text = _XML_DECL.sub("", markup)
    text = _DOCTYPE.sub("", text)
    text = _COMMENT.sub("", text)
    text = _NOTE_OPEN.sub("<div>", text)
    text = _NOTE_CLOSE.sub("</div>", text)
    text = _MEDIA.sub(f" {ATTACHMENT_MARKER} ", text)
    # Checked boxes first, the unchecked pattern would also match them
    text = _TODO_CHECKED.sub(CHECKED_BOX, text)
    text = _TODO.sub(UNCHECKED_BOX, text)

    # Block elements separate words, inline ones do not
    text = _BLOCK_TAG.sub(" ", text)
    text = _ANY_TAG.sub("", text)

    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()

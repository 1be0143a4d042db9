"""GTD classification of note tags into contexts, project and area.

Classification is deterministic and order-sensitive: for project and area
the first matching tag wins.
"""

import re
from typing import Sequence

from ..core.types import DEFAULT_CONTEXT

CONTEXT_WORDS = ("computer", "phone", "office", "home", "errands", "waiting", "someday")
AREA_WORDS = ("personal", "work", "health", "finance", "family", "learning")

_CONTEXT_WORD = re.compile(rf"^({'|'.join(CONTEXT_WORDS)})", re.IGNORECASE)
_PROJECT_PATTERN = re.compile(r"^[A-Z][A-Za-z\s]+Project$")
_PROJECT_PREFIX = re.compile(r"^(project[:\s-]*|p:)", re.IGNORECASE)
_PROJECT_SUFFIX = re.compile(r"[\s-]+project$", re.IGNORECASE)
_AREA_PREFIX = re.compile(r"^(area[:\s-]*|a:)", re.IGNORECASE)


def extract_contexts(tags: Sequence[str]) -> list[str]:
    """Fold context-like tags into @-prefixed contexts.

    Tags starting with ``@`` are kept as-is; bare context words are
    lowercased and prefixed. Returns ``["@inbox"]`` when nothing matches.
    """
    contexts: list[str] = []
    for tag in tags:
        if tag.startswith("@"):
            context = tag
        elif _CONTEXT_WORD.match(tag):
            context = f"@{tag.lower()}"
        else:
            continue
        if context not in contexts:
            contexts.append(context)

    return contexts or [DEFAULT_CONTEXT]


def is_project_tag(tag: str) -> bool:
    """Check whether a tag names a project."""
    return (
        "project" in tag.lower()
        or tag.startswith("p:")
        or _PROJECT_PATTERN.match(tag) is not None
    )


def extract_project(tags: Sequence[str]) -> str | None:
    """Return the project named by the first project tag, label stripped.

    ``project-apollo``, ``Project: Apollo``, ``p:apollo`` and
    ``Apollo Project`` all yield the bare name.
    """
    for tag in tags:
        if not is_project_tag(tag):
            continue
        name = _PROJECT_PREFIX.sub("", tag).strip()
        if name and _PROJECT_PATTERN.match(tag):
            name = _PROJECT_SUFFIX.sub("", name).strip()
        return name or None
    return None


def is_area_tag(tag: str) -> bool:
    """Check whether a tag names an area of responsibility."""
    lowered = tag.lower()
    return "area" in lowered or tag.startswith("a:") or lowered in AREA_WORDS


def extract_area(tags: Sequence[str]) -> str | None:
    """Return the area named by the first area tag, label stripped."""
    for tag in tags:
        if is_area_tag(tag):
            name = _AREA_PREFIX.sub("", tag).strip()
            return name or None
    return None

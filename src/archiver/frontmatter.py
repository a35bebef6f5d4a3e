"""Frontmatter extraction: normalises a note's metadata into flat fields.

The metadata cache reports a parsed frontmatter mapping plus the inline
``#tags`` found in the body.  :func:`extract_frontmatter_fields` flattens the
pieces the archive templates care about into plain strings.

Coercion rules
--------------
- strings pass through; numbers are stringified; booleans become
  ``true``/``false``
- dates and datetimes become an ISO-8601 UTC timestamp
- anything else (mappings, lists, ``None``) becomes ``""``

Tags may be declared as a YAML sequence or as a comma separated string.
Every tag is trimmed and loses one leading ``#``; empty tags are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from archiver.clock import iso_timestamp

if TYPE_CHECKING:
    from archiver.note import NoteRef
    from archiver.store import MetadataCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontmatterFields:
    project: str = ""
    status: str = ""
    due: str = ""
    tags: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "project": self.project,
            "status": self.status,
            "due": self.due,
            "tags": self.tags,
        }


def coerce_string(value: Any) -> str:
    """Flatten a single frontmatter value to a string (see module docs)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, date):
        return iso_timestamp(value)
    return ""


def normalize_tag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("#"):
        tag = tag[1:].strip()
    return tag


def coerce_tags(value: Any) -> list[str]:
    """Turn a frontmatter ``tags`` value into a list of normalised tags."""
    if isinstance(value, (list, tuple)):
        pieces = [coerce_string(item) for item in value]
    elif isinstance(value, str):
        pieces = value.split(",")
    else:
        return []
    return [tag for tag in (normalize_tag(p) for p in pieces) if tag]


def merge_tags(*groups: list[str]) -> list[str]:
    """Ordered union of normalised tags, first occurrence wins."""
    result: list[str] = []
    for group in groups:
        for tag in group:
            tag = normalize_tag(tag)
            if tag and tag not in result:
                result.append(tag)
    return result


def extract_frontmatter_fields(note: "NoteRef", cache: "MetadataCache") -> FrontmatterFields:
    """Return the template fields for *note*; all empty when it has no metadata."""
    metadata = cache.get_metadata(note)
    if metadata is None:
        logger.debug("No metadata for %s", note.path)
        return FrontmatterFields()

    frontmatter = metadata.frontmatter or {}
    tags = merge_tags(coerce_tags(frontmatter.get("tags")), list(metadata.inline_tags))

    return FrontmatterFields(
        project=coerce_string(frontmatter.get("project")),
        status=coerce_string(frontmatter.get("status")),
        due=coerce_string(frontmatter.get("due")),
        tags=", ".join(tags),
    )

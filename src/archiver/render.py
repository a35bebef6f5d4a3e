"""Placeholder substitution for archive templates and file names.

Templates are plain Markdown with ``{{token}}`` placeholders.  This is not a
template language: each recognised token is replaced literally, in one pass,
and text inserted for one token is never expanded again.  Unknown tokens are
left as they are.

Body placeholders
-----------------
``{{date}}`` ``{{datetime}}`` ``{{title}}`` ``{{path}}`` ``{{link}}``
``{{content}}`` ``{{project}}`` ``{{status}}`` ``{{due}}`` ``{{tags}}``
``{{completed_tasks}}`` ``{{completed_tasks_count}}``

File-name placeholders
----------------------
``{{date}}`` ``{{datetime}}`` ``{{title}}``
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from archiver.clock import iso_date, iso_timestamp, utc_now
from archiver.frontmatter import FrontmatterFields
from archiver.note import NoteRef
from archiver.tasks import clean_task_lines

# Characters the host file system refuses in a file name
_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class RenderContext:
    """Everything a template can refer to, assembled once per archival."""

    source: NoteRef
    source_content: str
    include_original_content: bool
    fields: FrontmatterFields = field(default_factory=FrontmatterFields)
    completed_tasks: list[str] = field(default_factory=list)

    @property
    def completed_tasks_count(self) -> str:
        return str(len(self.completed_tasks))


def _substitute(text: str, replacements: dict[str, str]) -> str:
    if not replacements:
        return text
    # One alternation, so inserted values are never rescanned.
    pattern = re.compile("|".join(re.escape(token) for token in replacements))
    return pattern.sub(lambda m: replacements[m.group(0)], text)


def template_replacements(context: RenderContext, now: datetime) -> dict[str, str]:
    """Ordered token table for archive bodies."""
    source = context.source
    return {
        "{{date}}": iso_date(now),
        "{{datetime}}": iso_timestamp(now),
        "{{title}}": source.basename,
        "{{path}}": source.path,
        "{{link}}": f"[[{source.path}|{source.basename}]]",
        "{{content}}": context.source_content if context.include_original_content else "",
        "{{project}}": context.fields.project,
        "{{status}}": context.fields.status,
        "{{due}}": context.fields.due,
        "{{tags}}": context.fields.tags,
        "{{completed_tasks}}": "\n".join(clean_task_lines(context.completed_tasks)),
        "{{completed_tasks_count}}": context.completed_tasks_count,
    }


def render_template(template_text: str, context: RenderContext, now: datetime | None = None) -> str:
    """Substitute every recognised placeholder in *template_text*."""
    now = now or utc_now()
    return _substitute(template_text, template_replacements(context, now))


def sanitize_file_name(value: str) -> str:
    value = _UNSAFE_FILENAME_RE.sub("-", value)
    return _WHITESPACE_RE.sub(" ", value).strip()


def render_file_name(pattern: str, note: NoteRef, now: datetime | None = None) -> str:
    """Render an archive file name (without extension) from *pattern*.

    Falls back to the note's base name when nothing usable is left.
    """
    now = now or utc_now()
    replacements = {
        "{{date}}": iso_date(now),
        "{{datetime}}": re.sub(r"[:.]", "-", iso_timestamp(now)),
        "{{title}}": note.basename,
    }
    name = sanitize_file_name(_substitute(pattern, replacements))
    return name or note.basename

"""YAML-frontmatter and inline tag parsing for vault notes.

Frontmatter is read with PyYAML but never dumped back wholesale:
:func:`rewrite_frontmatter` splices only the keys a mutation touched into the
original block, so every other line (comments, ``12:30``, ``1.10``, ``no``)
keeps its exact text.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable
from typing import Any

import yaml

from archiver.errors import ArchiverError

logger = logging.getLogger(__name__)

# Inline #tags (not inside code-spans or URLs)
_TAG_RE = re.compile(r"(?<![`\w/#])#([\w/-]+)")
# Code fence openers/closers; tags inside fenced blocks are ignored
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
# YAML front-matter block; the closing fence may end the file
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|$)", re.DOTALL)
# A top-level "key:" line (not indented, not a list item or comment)
_KEY_LINE_RE = re.compile(r"""^(?![-#\s?])("[^"]*"|'[^']*'|[^:]+?)[ \t]*:(?:[ \t]|$)""")


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split *content* into ``(raw_yaml, body)``.

    ``raw_yaml`` is ``None`` when the note has no front-matter block.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content
    return match.group(1) or "", content[match.end() :]


def detect_newline(content: str) -> str:
    """``\\r\\n`` when the first line of *content* ends that way, else ``\\n``."""
    first, sep, _ = content.partition("\n")
    return "\r\n" if sep and first.endswith("\r") else "\n"


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block or the block is not a valid YAML mapping.
    """
    raw, body = split_frontmatter(content)
    if raw is None:
        return {}, content
    try:
        meta = yaml.safe_load(raw) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, body


def load_frontmatter_strict(content: str) -> tuple[dict[str, Any], str]:
    """Like :func:`parse_frontmatter` but raise instead of discarding bad YAML.

    Used before rewriting a note so that an unparseable block is never
    replaced by an empty one.
    """
    raw, body = split_frontmatter(content)
    if raw is None:
        return {}, content
    try:
        meta = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ArchiverError(f"Invalid frontmatter: {exc}") from exc
    if not isinstance(meta, dict):
        raise ArchiverError("Frontmatter is not a key/value mapping")
    return meta, body


def _dump_lines(meta: dict[str, Any]) -> list[str]:
    dumped = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return dumped.rstrip("\n").split("\n")


def render_frontmatter(meta: dict[str, Any], body: str, newline: str = "\n") -> str:
    """Join *meta* and *body* back into note text; no block when *meta* is empty."""
    if not meta:
        return body
    block = newline.join(_dump_lines(meta))
    return f"---{newline}{block}{newline}---{newline}{body}"


# ---------------------------------------------------------------------------
# Key-level rewriting
# ---------------------------------------------------------------------------


def _load_key(text: str) -> Any:
    try:
        loaded = yaml.safe_load(f"{text}: null")
    except yaml.YAMLError:
        return text
    if isinstance(loaded, dict) and len(loaded) == 1:
        return next(iter(loaded))
    return text


def _key_spans(lines: list[str]) -> dict[Any, tuple[int, int]]:
    """Map each top-level key to the ``[start, end)`` line range of its entry.

    An entry runs on through indented lines and column-0 ``- item`` lines;
    trailing blank lines and column-0 comments belong to whatever follows.
    """
    spans: dict[Any, tuple[int, int]] = {}
    i = 0
    while i < len(lines):
        match = _KEY_LINE_RE.match(lines[i])
        if not match:
            i += 1
            continue
        last = i
        j = i + 1
        while j < len(lines):
            line = lines[j]
            if line[:1] in (" ", "\t") and line.strip() or line == "-" or line.startswith("- "):
                last = j
            elif line.strip():
                break
            j += 1
        spans[_load_key(match.group(1))] = (i, last + 1)
        i = last + 1
    return spans


def _splice(lines: list[str], before: dict[Any, Any], after: dict[Any, Any]) -> list[str] | None:
    """Rewrite only changed, added and removed keys; ``None`` if a key can't be located."""
    spans = _key_spans(lines)
    edits: list[tuple[int, int, list[str]]] = []
    appended: list[str] = []

    for key in before:
        if key not in after:
            if key not in spans:
                return None
            edits.append((*spans[key], []))
    for key, value in after.items():
        if key in before and before[key] == value:
            continue
        dumped = _dump_lines({key: value})
        if key in before:
            if key not in spans:
                return None
            edits.append((*spans[key], dumped))
        else:
            appended.extend(dumped)

    result = list(lines)
    for start, end, replacement in sorted(edits, reverse=True):
        result[start:end] = replacement
    return result + appended


def rewrite_frontmatter(content: str, fn: Callable[[dict[str, Any]], None]) -> str:
    """Let *fn* mutate the note's frontmatter and return the updated note text.

    Only the keys *fn* adds, changes or removes are re-serialised; all other
    lines of the block, the body and the note's line endings are kept as is.
    Raises :class:`ArchiverError` when the existing block is not valid YAML.
    """
    meta, body = load_frontmatter_strict(content)
    before = copy.deepcopy(meta)
    fn(meta)
    if meta == before:
        return content

    newline = detect_newline(content)
    match = _FRONTMATTER_RE.match(content)
    if not meta:
        return body
    if match is None:
        return render_frontmatter(meta, body, newline)

    raw = match.group(1) or ""
    lines = [line.rstrip("\r") for line in raw.split("\n")] if raw else []
    spliced = _splice(lines, before, meta)
    if spliced is None:
        logger.warning("Could not locate frontmatter keys, rewriting the whole block")
        return render_frontmatter(meta, body, newline)

    block = newline.join(spliced)
    if match.group(1) is None:
        # "---\n---\n": the block had no content lines at all
        fence_end = content.index("\n") + 1
        return content[:fence_end] + block + newline + content[fence_end:]
    return content[: match.start(1)] + block + content[match.end(1) :]


# ---------------------------------------------------------------------------
# Inline tags
# ---------------------------------------------------------------------------


def strip_code_fences(text: str) -> str:
    """Blank out fenced code blocks (fence lines included), keeping line count."""
    kept: list[str] = []
    in_fence = False
    for line in text.split("\n"):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            kept.append("")
            continue
        kept.append("" if in_fence else line)
    return "\n".join(kept)


def parse_tags(text: str) -> list[str]:
    """Return all ``#tag`` values outside code fences in *text* (de-duped, ordered, no ``#``)."""
    seen: set[str] = set()
    result: list[str] = []
    for m in _TAG_RE.finditer(strip_code_fences(text)):
        tag = m.group(1)
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result

"""Collaborator interfaces consumed by the archiver.

The archiver never touches files directly.  It talks to a note store, a
metadata cache, a frontmatter mutator, a chooser and a notifier, so that a
host application (or a test) can supply its own implementations.
:class:`archiver.vault.FileSystemVault` implements the first three over a
directory on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable

from archiver.note import NoteRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class NoteMetadata:
    """Parsed frontmatter (``None`` when absent) and inline tags of a note."""

    frontmatter: dict[str, Any] | None = None
    inline_tags: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class NoteStore(Protocol):
    """Read/write access to notes and folders by vault-relative path."""

    def list_markdown_notes(self) -> list[NoteRef]: ...
    def read(self, note: NoteRef) -> str: ...
    def create(self, path: str, content: str) -> NoteRef: ...
    def modify(self, note: NoteRef, content: str) -> None: ...
    def move(self, note: NoteRef, new_path: str) -> NoteRef: ...
    def exists(self, path: str) -> bool: ...
    def folder_exists(self, path: str) -> bool: ...
    def create_folder(self, path: str) -> None: ...


@runtime_checkable
class MetadataCache(Protocol):
    def get_metadata(self, note: NoteRef) -> NoteMetadata | None: ...


@runtime_checkable
class FrontmatterMutator(Protocol):
    def update_frontmatter(self, note: NoteRef, fn: Callable[[dict[str, Any]], None]) -> None:
        """Read the note's frontmatter, let *fn* mutate it in place, write it back."""
        ...


class Chooser(Protocol):
    def choose(self, items: Sequence[T], describe: Callable[[T], str]) -> T | None:
        """Return the user's pick, or ``None`` when they cancel."""
        ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


# ---------------------------------------------------------------------------
# Simple implementations
# ---------------------------------------------------------------------------


class PresetChooser:
    """Picks the item whose label equals a label decided up front."""

    def __init__(self, label: str | None) -> None:
        self.label = label

    def choose(self, items: Sequence[T], describe: Callable[[T], str]) -> T | None:
        if self.label is None:
            return None
        for item in items:
            if describe(item) == self.label:
                return item
        logger.debug("No item labelled %r among %d", self.label, len(items))
        return None


class FirstChooser:
    """Always picks the first item."""

    def choose(self, items: Sequence[T], describe: Callable[[T], str]) -> T | None:
        return items[0] if items else None


class CollectingNotifier:
    """Keeps every message so a front-end can show them."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        logger.info("%s", message)
        self.messages.append(message)

    @property
    def last(self) -> str | None:
        return self.messages[-1] if self.messages else None

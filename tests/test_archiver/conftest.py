"""Shared fixtures: an in-memory vault and a fixed clock."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from archiver.note import NoteRef
from archiver.parser import parse_frontmatter, parse_tags, rewrite_frontmatter, split_frontmatter
from archiver.paths import ROOT, normalize_path
from archiver.store import NoteMetadata

FIXED_NOW = datetime(2024, 1, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


class MemoryVault:
    """Dict-backed note store, metadata cache and frontmatter mutator.

    Records every folder it is asked to create, in order.
    """

    def __init__(self) -> None:
        self.notes: dict[str, str] = {}
        self.folders: set[str] = set()
        self.created_folders: list[str] = []
        self.metadata_overrides: dict[str, NoteMetadata] = {}

    def add(self, path: str, content: str = "") -> NoteRef:
        path = normalize_path(path)
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:i]))
        self.notes[path] = content
        return NoteRef(path)

    # note store

    def list_markdown_notes(self) -> list[NoteRef]:
        return [NoteRef(p) for p in sorted(self.notes) if p.endswith(".md")]

    def read(self, note: NoteRef) -> str:
        if note.path not in self.notes:
            raise FileNotFoundError(note.path)
        return self.notes[note.path]

    def create(self, path: str, content: str) -> NoteRef:
        path = normalize_path(path)
        if self.exists(path):
            raise FileExistsError(path)
        self.notes[path] = content
        return NoteRef(path)

    def modify(self, note: NoteRef, content: str) -> None:
        if note.path not in self.notes:
            raise FileNotFoundError(note.path)
        self.notes[note.path] = content

    def move(self, note: NoteRef, new_path: str) -> NoteRef:
        new_path = normalize_path(new_path)
        if self.exists(new_path):
            raise FileExistsError(new_path)
        self.notes[new_path] = self.notes.pop(note.path)
        return NoteRef(new_path)

    def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path == ROOT or path in self.notes or path in self.folders

    def folder_exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path == ROOT or path in self.folders

    def create_folder(self, path: str) -> None:
        path = normalize_path(path)
        if self.exists(path):
            raise FileExistsError(path)
        self.folders.add(path)
        self.created_folders.append(path)

    # metadata cache

    def get_metadata(self, note: NoteRef) -> NoteMetadata | None:
        if note.path in self.metadata_overrides:
            return self.metadata_overrides[note.path]
        if note.path not in self.notes:
            return None
        content = self.notes[note.path]
        raw, _ = split_frontmatter(content)
        meta, body = parse_frontmatter(content)
        return NoteMetadata(
            frontmatter=meta if raw is not None else None,
            inline_tags=[f"#{t}" for t in parse_tags(body)],
        )

    # frontmatter mutator

    def update_frontmatter(self, note: NoteRef, fn: Callable[[dict[str, Any]], None]) -> None:
        self.modify(note, rewrite_frontmatter(self.read(note), fn))


@pytest.fixture()
def memory_vault() -> MemoryVault:
    return MemoryVault()


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW

"""FileSystemVault: a note store backed by a directory of markdown files."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from archiver.errors import ArchiverError
from archiver.note import NoteRef
from archiver.parser import parse_frontmatter, parse_tags, rewrite_frontmatter, split_frontmatter
from archiver.paths import ROOT, normalize_path
from archiver.store import NoteMetadata

logger = logging.getLogger(__name__)


class FileSystemVault:
    """Implements the note store, metadata cache and frontmatter mutator.

    Paths are vault-relative and use ``/``.  Files are read and written as
    UTF-8 without newline translation, so CRLF notes keep their endings.
    Folders whose name starts with a dot (``.obsidian``, ``.git``) are not
    part of the vault.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _abs(self, path: str) -> Path:
        path = normalize_path(path)
        if path == ROOT:
            return self.root
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ArchiverError(f"{path} points outside the vault")
        return target

    def _write(self, target: Path, content: str, mode: str) -> None:
        with target.open(mode, encoding="utf-8", newline="") as fh:
            fh.write(content)

    # ------------------------------------------------------------------
    # Note store
    # ------------------------------------------------------------------

    def list_markdown_notes(self) -> list[NoteRef]:
        notes: list[NoteRef] = []
        for path in sorted(self.root.glob("**/*.md")):
            rel = path.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts) or not path.is_file():
                continue
            notes.append(NoteRef(rel.as_posix()))
        return notes

    def read(self, note: NoteRef) -> str:
        with self._abs(note.path).open(encoding="utf-8", newline="") as fh:
            return fh.read()

    def create(self, path: str, content: str) -> NoteRef:
        path = normalize_path(path)
        # "x" refuses to clobber an existing file.
        self._write(self._abs(path), content, "x")
        logger.debug("Created %s", path)
        return NoteRef(path)

    def modify(self, note: NoteRef, content: str) -> None:
        target = self._abs(note.path)
        if not target.is_file():
            raise FileNotFoundError(note.path)
        self._write(target, content, "w")

    def move(self, note: NoteRef, new_path: str) -> NoteRef:
        new_path = normalize_path(new_path)
        target = self._abs(new_path)
        if target.exists():
            raise FileExistsError(new_path)
        self._abs(note.path).rename(target)
        logger.debug("Moved %s to %s", note.path, new_path)
        return NoteRef(new_path)

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def folder_exists(self, path: str) -> bool:
        return self._abs(path).is_dir()

    def create_folder(self, path: str) -> None:
        self._abs(path).mkdir()

    # ------------------------------------------------------------------
    # Metadata cache
    # ------------------------------------------------------------------

    def get_metadata(self, note: NoteRef) -> NoteMetadata | None:
        target = self._abs(note.path)
        if not target.is_file():
            return None
        content = self.read(note)
        raw, _ = split_frontmatter(content)
        meta, body = parse_frontmatter(content)
        return NoteMetadata(
            frontmatter=meta if raw is not None else None,
            inline_tags=[f"#{tag}" for tag in parse_tags(body)],
        )

    # ------------------------------------------------------------------
    # Frontmatter mutator
    # ------------------------------------------------------------------

    def update_frontmatter(self, note: NoteRef, fn: Callable[[dict[str, Any]], None]) -> None:
        self.modify(note, rewrite_frontmatter(self.read(note), fn))

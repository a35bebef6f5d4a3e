"""Note references and archive templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


@dataclass(frozen=True)
class NoteRef:
    """A markdown note in the vault, identified by its vault-relative path."""

    path: str

    @property
    def name(self) -> str:
        """File name including the extension."""
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        """File name without the extension."""
        return PurePosixPath(self.path).stem

    @property
    def parent(self) -> str:
        """Folder holding the note; ``/`` for the vault root."""
        parent = str(PurePosixPath(self.path).parent)
        return "/" if parent == "." else parent

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "name": self.name, "basename": self.basename}


@dataclass(frozen=True)
class Template:
    """An archive template: a note from the template folder and its raw text."""

    note: NoteRef
    content: str

    @property
    def label(self) -> str:
        return self.note.basename

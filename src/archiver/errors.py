"""Exceptions raised by the archiver."""

from __future__ import annotations


class ArchiverError(Exception):
    """Base class for archiver failures."""


class PathConflictError(ArchiverError):
    """A vault path is occupied by an entry of the wrong kind."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason

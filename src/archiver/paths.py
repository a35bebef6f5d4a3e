"""Vault path normalisation and collision-free allocation."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import TYPE_CHECKING

from archiver.errors import PathConflictError

if TYPE_CHECKING:
    from archiver.store import NoteStore

logger = logging.getLogger(__name__)

ROOT = "/"

_SLASHES_RE = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Canonical vault-relative form of *path*; ``/`` stands for the root."""
    path = path.replace("\\", "/").replace("\u00a0", " ").replace("\u202f", " ")
    path = _SLASHES_RE.sub("/", path).strip().strip("/").strip()
    path = unicodedata.normalize("NFC", path)
    return path or ROOT


def join_path(folder: str, name: str) -> str:
    folder = normalize_path(folder)
    if folder == ROOT:
        return normalize_path(name)
    return normalize_path(f"{folder}/{name}")


def next_available_path(store: "NoteStore", desired: str) -> str:
    """Return *desired*, or the first ``<stem> (n).md`` variant that is free.

    The check and the caller's subsequent create are not atomic.
    """
    candidate = normalize_path(desired)
    stem = candidate[: -len(".md")] if candidate.endswith(".md") else candidate
    index = 1
    while store.exists(candidate):
        candidate = f"{stem} ({index}).md"
        index += 1
    if index > 1:
        logger.debug("%s is taken, using %s", desired, candidate)
    return candidate


def ensure_folder_exists(store: "NoteStore", path: str) -> None:
    """Create every missing folder along *path*, root first."""
    path = normalize_path(path)
    if path == ROOT or store.folder_exists(path):
        return

    current = ""
    for segment in path.split("/"):
        current = f"{current}/{segment}" if current else segment
        if store.folder_exists(current):
            continue
        if store.exists(current):
            raise PathConflictError(current, "a file occupies this folder path")
        logger.debug("Creating folder %s", current)
        store.create_folder(current)

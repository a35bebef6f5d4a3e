"""Archiver settings: defaults, normalisation and JSON persistence.

Settings are a flat JSON object.  On load it is merged over the defaults, so
unknown keys are ignored and missing or wrongly-typed keys keep their default
value.  Folder settings are always stored normalised; the file name pattern
and processed tag fall back to their defaults when set to blank text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from archiver.paths import normalize_path

logger = logging.getLogger(__name__)

_FOLDER_KEYS = {"template_folder", "archive_folder", "processed_folder"}


@dataclass(frozen=True)
class ArchiverSettings:
    template_folder: str = "Templates/Archive"
    archive_folder: str = "Archive"
    archive_file_name_pattern: str = "{{date}} - {{title}}"
    include_original_content: bool = True
    #: Where archived sources are moved by "archive and move"
    processed_folder: str = "Archive/Processed"
    #: Tag added to a source before it is moved
    processed_tag: str = "archived"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArchiverSettings":
        settings = cls()
        for key, value in data.items():
            try:
                settings = settings.update(key, value)
            except (KeyError, TypeError) as exc:
                logger.warning("Ignoring setting %r: %s", key, exc)
        return settings

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def update(self, key: str, value: Any) -> "ArchiverSettings":
        """Return a copy with *key* set to *value*.

        Blank folder, pattern and tag values revert to the default.
        """
        defaults = ArchiverSettings()
        if key not in {f.name for f in fields(self)}:
            raise KeyError(f"unknown setting {key!r}")

        if key == "include_original_content":
            if not isinstance(value, bool):
                raise TypeError(f"{key} must be a boolean")
            return replace(self, include_original_content=value)

        if not isinstance(value, str):
            raise TypeError(f"{key} must be a string")
        value = value.strip() or getattr(defaults, key)
        if key in _FOLDER_KEYS:
            value = normalize_path(value)
        return replace(self, **{key: value})


def load_settings(path: Path) -> ArchiverSettings:
    """Read settings from *path*; defaults when absent or unreadable."""
    path = Path(path)
    if not path.exists():
        return ArchiverSettings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read settings from %s: %s", path, exc)
        return ArchiverSettings()
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not hold an object", path)
        return ArchiverSettings()
    return ArchiverSettings.from_dict(data)


def save_settings(settings: ArchiverSettings, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")

"""Unit tests for archiver.settings."""

import json
from pathlib import Path

import pytest

from archiver.settings import ArchiverSettings, load_settings, save_settings


class TestDefaults:
    def test_default_values(self):
        s = ArchiverSettings()
        assert s.template_folder == "Templates/Archive"
        assert s.archive_folder == "Archive"
        assert s.archive_file_name_pattern == "{{date}} - {{title}}"
        assert s.include_original_content is True
        assert s.processed_folder == "Archive/Processed"
        assert s.processed_tag == "archived"


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_folder_is_normalised(self):
        s = ArchiverSettings().update("archive_folder", " /Old//Archive/ ")
        assert s.archive_folder == "Old/Archive"

    @pytest.mark.parametrize(
        "key", ["template_folder", "archive_folder", "processed_folder", "archive_file_name_pattern", "processed_tag"]
    )
    def test_blank_falls_back_to_default(self, key):
        changed = ArchiverSettings().update(key, "something")
        reverted = changed.update(key, "   ")
        assert getattr(reverted, key) == getattr(ArchiverSettings(), key)

    def test_pattern_is_trimmed(self):
        s = ArchiverSettings().update("archive_file_name_pattern", "  {{title}}  ")
        assert s.archive_file_name_pattern == "{{title}}"

    def test_toggle(self):
        assert ArchiverSettings().update("include_original_content", False).include_original_content is False

    def test_original_unchanged(self):
        s = ArchiverSettings()
        s.update("archive_folder", "Elsewhere")
        assert s.archive_folder == "Archive"

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            ArchiverSettings().update("colour", "blue")

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            ArchiverSettings().update("include_original_content", "yes")
        with pytest.raises(TypeError):
            ArchiverSettings().update("archive_folder", 3)


# ---------------------------------------------------------------------------
# from_dict / persistence
# ---------------------------------------------------------------------------


class TestFromDict:
    def test_merges_over_defaults(self):
        s = ArchiverSettings.from_dict({"archive_folder": "Done/"})
        assert s.archive_folder == "Done"
        assert s.template_folder == "Templates/Archive"

    def test_unknown_and_bad_keys_ignored(self):
        s = ArchiverSettings.from_dict({"colour": "blue", "include_original_content": "no"})
        assert s == ArchiverSettings()

    def test_round_trip_dict(self):
        s = ArchiverSettings(processed_tag="done")
        assert ArchiverSettings.from_dict(s.to_dict()) == s


class TestPersistence:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_settings(tmp_path / "nope.json") == ArchiverSettings()

    def test_save_then_load(self, tmp_path: Path):
        path = tmp_path / "config" / "archiver.json"
        settings = ArchiverSettings().update("archive_folder", "Vault/Archive").update("include_original_content", False)
        save_settings(settings, path)
        assert json.loads(path.read_text())["archive_folder"] == "Vault/Archive"
        assert load_settings(path) == settings

    def test_corrupt_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "archiver.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_settings(path) == ArchiverSettings()

    def test_non_object_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "archiver.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_settings(path) == ArchiverSettings()

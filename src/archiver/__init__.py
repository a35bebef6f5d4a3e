"""Smart Archiver: template-driven note archival for markdown vaults."""

from archiver.archive import COMMANDS, Archiver, ArchiveResult, TaskArchiveResult
from archiver.frontmatter import FrontmatterFields, extract_frontmatter_fields
from archiver.note import NoteRef, Template
from archiver.paths import ensure_folder_exists, next_available_path, normalize_path
from archiver.render import RenderContext, render_file_name, render_template
from archiver.settings import ArchiverSettings, load_settings, save_settings
from archiver.tasks import CompletedTaskExtraction, extract_completed_tasks
from archiver.vault import FileSystemVault

__all__ = [
    "Archiver",
    "ArchiveResult",
    "TaskArchiveResult",
    "COMMANDS",
    "NoteRef",
    "Template",
    "FrontmatterFields",
    "extract_frontmatter_fields",
    "CompletedTaskExtraction",
    "extract_completed_tasks",
    "RenderContext",
    "render_template",
    "render_file_name",
    "next_available_path",
    "ensure_folder_exists",
    "normalize_path",
    "ArchiverSettings",
    "load_settings",
    "save_settings",
    "FileSystemVault",
]

"""Archival orchestration: the commands a user triggers on the active note.

Each command is a short linear pipeline:

``archive_note``
    choose a template, render it against the note, create the archive note in
    the archive folder and stamp its ``archive-time``.
``archive_and_move``
    the same, then tag the source with the processed tag and move it into the
    processed folder.
``archive_completed_tasks``
    move the note's ticked checklist lines into a running
    ``<name> - completed-tasks.md`` archive, appending a new section when that
    archive already exists.

Unmet preconditions (no active note, no templates, nothing to archive) and
path conflicts are reported through the notifier and abort the command
before anything is written.  A cancelled template choice aborts silently.
Exceptions raised by the store propagate; steps already completed are not
rolled back, so an archive that was created stays in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from archiver.clock import Clock, iso_timestamp, utc_now
from archiver.errors import PathConflictError
from archiver.frontmatter import coerce_tags, extract_frontmatter_fields, normalize_tag
from archiver.note import NoteRef, Template
from archiver.paths import ensure_folder_exists, join_path, next_available_path, normalize_path
from archiver.render import RenderContext, render_file_name, render_template
from archiver.settings import ArchiverSettings
from archiver.store import Chooser, FrontmatterMutator, MetadataCache, NoteStore, Notifier
from archiver.tasks import append_task_section, build_task_section, extract_completed_tasks

logger = logging.getLogger(__name__)

ARCHIVE_TIME_KEY = "archive-time"
TASK_ARCHIVE_SUFFIX = " - completed-tasks.md"

NO_ACTIVE_NOTE = "No active note to archive."
NO_TEMPLATES = "No templates found in the configured template folder."
NO_COMPLETED_TASKS = "No completed tasks found in the active note."

#: command id -> (display name, Archiver method)
COMMANDS: dict[str, tuple[str, str]] = {
    "archive-active-note-with-template": ("Archive active note with template", "archive_note"),
    "archive-and-move-active-note": ("Archive active note and move it to the processed folder", "archive_and_move"),
    "archive-completed-tasks": ("Archive completed tasks from active note", "archive_completed_tasks"),
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ArchiveResult:
    archive: NoteRef
    template: Template
    #: Where the source ended up, ``None`` when it was not moved
    moved_to: NoteRef | None = None
    tagged: bool = False


@dataclass
class TaskArchiveResult:
    archive: NoteRef
    count: int
    appended: bool


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Archiver:
    """Runs archival commands against a note store.

    *metadata* and *mutator* default to *store*, which suits stores such as
    :class:`archiver.vault.FileSystemVault` that implement all three roles.
    """

    def __init__(
        self,
        store: NoteStore,
        chooser: Chooser,
        notifier: Notifier,
        settings: ArchiverSettings | None = None,
        metadata: MetadataCache | None = None,
        mutator: FrontmatterMutator | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.chooser = chooser
        self.notifier = notifier
        self.settings = settings or ArchiverSettings()
        self.metadata: MetadataCache = metadata or store  # type: ignore[assignment]
        self.mutator: FrontmatterMutator = mutator or store  # type: ignore[assignment]
        self.clock = clock

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def read_templates(self) -> list[Template]:
        """Load every note in the template folder, freshly read."""
        folder = normalize_path(self.settings.template_folder)
        prefix = "" if folder == "/" else f"{folder}/"
        return [
            Template(note, self.store.read(note))
            for note in self.store.list_markdown_notes()
            if note.path.startswith(prefix)
        ]

    def _pick_template(self) -> Template | None:
        templates = self.read_templates()
        if not templates:
            self.notifier.notify(NO_TEMPLATES)
            return None
        template = self.chooser.choose(templates, lambda t: t.label)
        if template is None:
            logger.debug("Template choice cancelled")
        return template

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def run(self, command_id: str, source: NoteRef | None) -> Any:
        """Dispatch *command_id* (a key of :data:`COMMANDS`) on *source*."""
        _, method = COMMANDS[command_id]
        return getattr(self, method)(source)

    def archive_and_move(self, source: NoteRef | None) -> ArchiveResult | None:
        return self.archive_note(source, move_source=True)

    def archive_note(self, source: NoteRef | None, move_source: bool = False) -> ArchiveResult | None:
        """Render a chosen template against *source* into a new archive note."""
        if source is None:
            self.notifier.notify(NO_ACTIVE_NOTE)
            return None
        template = self._pick_template()
        if template is None:
            return None

        now = self.clock()
        context = RenderContext(
            source=source,
            source_content=self.store.read(source),
            include_original_content=self.settings.include_original_content,
            fields=extract_frontmatter_fields(source, self.metadata),
        )
        content = render_template(template.content, context, now)
        file_name = render_file_name(self.settings.archive_file_name_pattern, source, now)

        archive_folder = normalize_path(self.settings.archive_folder)
        try:
            ensure_folder_exists(self.store, archive_folder)
        except PathConflictError as exc:
            self.notifier.notify(f"Cannot archive: {exc}")
            return None
        archive_path = next_available_path(self.store, join_path(archive_folder, f"{file_name}.md"))
        archive = self.store.create(archive_path, content)
        self._stamp_archive_time(archive, now)
        logger.info("Archived %s to %s using %s", source.path, archive.path, template.label)

        result = ArchiveResult(archive=archive, template=template)
        if not move_source:
            self.notifier.notify(f"Archived: {archive.path}")
            return result

        result.tagged = self._tag_source(source)
        try:
            result.moved_to = self._move_source(source)
        except PathConflictError as exc:
            self.notifier.notify(f"Archived: {archive.path}; could not move source: {exc}")
            return result

        if result.moved_to is None:
            self.notifier.notify(
                f"Archived: {archive.path}; source already in {normalize_path(self.settings.processed_folder)}"
            )
        else:
            self.notifier.notify(f"Archived: {archive.path}; moved source to {result.moved_to.path}")
        return result

    def archive_completed_tasks(self, source: NoteRef | None) -> TaskArchiveResult | None:
        """Move the ticked checklist lines of *source* into its task archive."""
        if source is None:
            self.notifier.notify(NO_ACTIVE_NOTE)
            return None

        extraction = extract_completed_tasks(self.store.read(source))
        if not extraction.completed_tasks:
            self.notifier.notify(NO_COMPLETED_TASKS)
            return None
        template = self._pick_template()
        if template is None:
            return None

        now = self.clock()
        context = RenderContext(
            source=source,
            source_content="\n".join(extraction.completed_tasks),
            include_original_content=self.settings.include_original_content,
            fields=extract_frontmatter_fields(source, self.metadata),
            completed_tasks=extraction.completed_tasks,
        )
        base_name = render_file_name(self.settings.archive_file_name_pattern, source, now)
        archive_folder = normalize_path(self.settings.archive_folder)
        target = join_path(archive_folder, f"{base_name}{TASK_ARCHIVE_SUFFIX}")

        if self.store.folder_exists(target):
            self.notifier.notify(f"Cannot archive tasks: {target} is a folder.")
            return None

        appended = self.store.exists(target)
        if appended:
            archive = NoteRef(target)
            section = build_task_section(extraction.completed_tasks, iso_timestamp(now))
            self.store.modify(archive, append_task_section(self.store.read(archive), section))
        else:
            try:
                ensure_folder_exists(self.store, archive_folder)
            except PathConflictError as exc:
                self.notifier.notify(f"Cannot archive tasks: {exc}")
                return None
            archive = self.store.create(target, render_template(template.content, context, now))
        self._stamp_archive_time(archive, now)

        self.store.modify(source, extraction.remaining_content)
        logger.info("Archived %d completed task(s) from %s to %s", extraction.count, source.path, archive.path)
        self.notifier.notify(f"Archived {extraction.count} completed task(s) to {archive.path}")
        return TaskArchiveResult(archive=archive, count=extraction.count, appended=appended)

    # ------------------------------------------------------------------
    # Source / archive mutation
    # ------------------------------------------------------------------

    def _stamp_archive_time(self, note: NoteRef, now: datetime) -> None:
        stamp = iso_timestamp(now)

        def _set(frontmatter: dict[str, Any]) -> None:
            frontmatter[ARCHIVE_TIME_KEY] = stamp

        self.mutator.update_frontmatter(note, _set)

    def _tag_source(self, source: NoteRef) -> bool:
        """Add the processed tag to *source*; ``False`` when nothing changed."""
        tag = normalize_tag(self.settings.processed_tag)
        if not tag:
            logger.warning("Processed tag is empty, not tagging %s", source.path)
            return False

        metadata = self.metadata.get_metadata(source)
        if metadata is not None and tag in coerce_tags((metadata.frontmatter or {}).get("tags")):
            return False

        def _add(frontmatter: dict[str, Any]) -> None:
            tags = coerce_tags(frontmatter.get("tags"))
            if tag not in tags:
                tags.append(tag)
            frontmatter["tags"] = tags

        self.mutator.update_frontmatter(source, _add)
        return True

    def _move_source(self, source: NoteRef) -> NoteRef | None:
        folder = normalize_path(self.settings.processed_folder)
        if source.parent == folder:
            logger.warning("%s is already in %s, not moving it", source.path, folder)
            return None
        ensure_folder_exists(self.store, folder)
        destination = next_available_path(self.store, join_path(folder, source.name))
        return self.store.move(source, destination)

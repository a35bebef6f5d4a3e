"""Completed checklist extraction.

A *completed task* is a Markdown checklist line whose box is ticked::

    - [x] ship the release
      * [X] nested items count too

:func:`extract_completed_tasks` splits a note into those lines and
everything else.  Lines are split on ``\\n`` only; a ``\\r`` left by CRLF
line endings stays attached to its line, so re-inserting the completed lines
at their old positions reproduces the input exactly.  The ``\\r`` is dropped
only when completed lines are rendered into an archive
(:func:`clean_task_lines`).

When the running task archive already exists, a new section is appended to
it with :func:`build_task_section` / :func:`append_task_section` instead of
overwriting it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# "- [x] content" / "* [X] content", optionally indented
_COMPLETED_RE = re.compile(r"^\s*[-*] +\[[xX]\] +\S")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class CompletedTaskExtraction:
    completed_tasks: list[str] = field(default_factory=list)
    remaining_content: str = ""

    @property
    def count(self) -> int:
        return len(self.completed_tasks)


def is_completed_task(line: str) -> bool:
    return _COMPLETED_RE.match(line) is not None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_completed_tasks(body: str) -> CompletedTaskExtraction:
    """Partition *body* into completed task lines and the remaining text."""
    completed: list[str] = []
    remaining: list[str] = []
    for line in body.split("\n"):
        if is_completed_task(line):
            completed.append(line)
        else:
            remaining.append(line)
    return CompletedTaskExtraction(completed, "\n".join(remaining))


def clean_task_lines(tasks: list[str]) -> list[str]:
    """Strip carriage returns kept from CRLF bodies."""
    return [task.rstrip("\r") for task in tasks]


# ---------------------------------------------------------------------------
# Running archive sections
# ---------------------------------------------------------------------------


def build_task_section(tasks: list[str], stamp: str) -> str:
    """Format a section listing *tasks* under a heading stamped with *stamp*."""
    lines = "\n".join(clean_task_lines(tasks))
    return f"## Completed tasks archived {stamp}\n\n{lines}\n"


def append_task_section(existing: str, section: str) -> str:
    """Append *section* after *existing*, separated by one blank line."""
    if not existing.strip():
        return existing + section
    if not existing.endswith("\n"):
        existing += "\n"
    return f"{existing}\n{section}"

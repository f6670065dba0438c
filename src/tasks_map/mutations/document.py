"""
Document mutator.

Main API:
    apply_operation(text, task, op, resolve=None) → new text
    locate_task_line(lines, task)                 → line index or None

``apply_operation`` is a pure function over the full document text and never
raises for a task it cannot find: a missing line, a missing or unterminated
frontmatter block, or an operation that is already satisfied all return the
input unchanged. Only the task's own line (inline tasks) or its frontmatter
block (note tasks) is ever edited, and the document's newline style is kept.

Inline tasks are located by, in order:
    1. their embedded ``🆔`` id
    2. their ``[[id:: ]]`` field
    3. a checklist line containing the stored task text (the recorded line
       number wins when several lines contain it)
    4. a checklist line whose text equals the stored text once every marker
       is stripped from both

The last two steps are heuristics. When several tasks share near-identical
text the first match wins and may be the wrong line.
"""

import logging
import re
from typing import List, Optional

from tasks_map.links import codec, note_links
from tasks_map.links.note_links import Resolver
from tasks_map.models.task import Task
from tasks_map.mutations import inline, note
from tasks_map.mutations.operations import (
    AddDependency,
    AddOwnId,
    AddStar,
    AddTag,
    Operation,
    RemoveDependency,
    RemoveOwnId,
    RemoveStar,
    RemoveTag,
    SetStatus,
)
from tasks_map.parsers.task_parser import NOTE_STATUS_NAMES, STATUS_SYMBOLS, parse_checklist_line
from tasks_map.utils.frontmatter import join_lines, split_lines
from tasks_map.utils.markers import strip_markers

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Line locator
# ---------------------------------------------------------------------------

def _find_pattern(lines: List[str], pattern: "re.Pattern[str]") -> Optional[int]:
    for i, line in enumerate(lines):
        if pattern.search(line):
            return i
    return None


def locate_task_line(lines: List[str], task: Task) -> Optional[int]:
    if not task.is_positional:
        escaped = re.escape(task.id)
        for pattern in (
            re.compile(rf"🆔\s*{escaped}(?![A-Za-z0-9])"),
            re.compile(rf"\[\[id::\s*{escaped}\s*\]\]"),
        ):
            idx = _find_pattern(lines, pattern)
            if idx is not None:
                return idx

    checklist = [(i, parsed[1]) for i, parsed in
                 ((i, parse_checklist_line(line)) for i, line in enumerate(lines))
                 if parsed is not None]

    if task.text:
        candidates = [i for i, _ in checklist if task.text in lines[i]]
        if candidates:
            if task.line in candidates:
                return task.line
            if len(candidates) > 1:
                log.debug("Text of %s matches %d lines; using the first", task.id, len(candidates))
            return candidates[0]

    core = strip_markers(task.text)
    if core:
        for i, content in checklist:
            if strip_markers(content) == core:
                return i

    log.debug("Could not locate line for task %s", task.id)
    return None


# ---------------------------------------------------------------------------
# Inline tasks
# ---------------------------------------------------------------------------

def _edit_line(line: str, op: Operation) -> str:
    if isinstance(op, SetStatus):
        return inline.set_status(line, STATUS_SYMBOLS[op.status])
    if isinstance(op, AddTag):
        return inline.add_tag(line, op.tag)
    if isinstance(op, RemoveTag):
        return inline.remove_tag(line, op.tag)
    if isinstance(op, AddStar):
        return inline.add_star(line)
    if isinstance(op, RemoveStar):
        return inline.remove_star(line)
    if isinstance(op, AddDependency):
        return codec.add_dependency(line, op.dep_id, op.style)
    if isinstance(op, RemoveDependency):
        return codec.remove_dependency(line, op.dep_id)
    if isinstance(op, AddOwnId):
        return codec.add_own_id(line, op.own_id, op.style)
    if isinstance(op, RemoveOwnId):
        return codec.remove_own_id(line, op.own_id)
    raise TypeError(f"Unknown operation: {op!r}")


def _apply_inline(lines: List[str], task: Task, op: Operation) -> List[str]:
    idx = locate_task_line(lines, task)
    if idx is None:
        return lines
    edited = _edit_line(lines[idx], op)
    if edited == lines[idx]:
        return lines
    lines = list(lines)
    lines[idx] = edited
    return lines


# ---------------------------------------------------------------------------
# Note tasks
# ---------------------------------------------------------------------------

def _apply_note(lines: List[str], op: Operation, resolve: Optional[Resolver]) -> List[str]:
    if isinstance(op, SetStatus):
        return note.set_status(lines, NOTE_STATUS_NAMES[op.status])
    if isinstance(op, AddTag):
        return note.add_tag(lines, op.tag)
    if isinstance(op, RemoveTag):
        return note.remove_tag(lines, op.tag)
    if isinstance(op, AddStar):
        return note.set_starred(lines, True)
    if isinstance(op, RemoveStar):
        return note.set_starred(lines, False)
    if isinstance(op, AddDependency):
        title = op.title or note_links.note_title(op.dep_id)
        return note_links.add_blocked_by(lines, title)
    if isinstance(op, RemoveDependency):
        return note_links.remove_blocked_by(lines, op.dep_id, resolve)
    if isinstance(op, (AddOwnId, RemoveOwnId)):
        # A note's id is its path
        return lines
    raise TypeError(f"Unknown operation: {op!r}")


# ---------------------------------------------------------------------------
# Main API
# ---------------------------------------------------------------------------

def apply_operation(
    text: str,
    task: Task,
    op: Operation,
    resolve: Optional[Resolver] = None,
) -> str:
    """
    Apply one operation to the document holding ``task``.

    Args:
        text: Full document text
        task: The task being edited (its type selects inline or note rules)
        op: The operation
        resolve: Maps a wikilink name to a document path (note dependencies)

    Returns:
        The new document text, or ``text`` itself when nothing changed.
    """
    lines, newline = split_lines(text)
    if task.type == "note":
        new_lines = _apply_note(lines, op, resolve)
    else:
        new_lines = _apply_inline(lines, task, op)
    if new_lines is lines or new_lines == lines:
        return text
    return join_lines(new_lines, newline)

"""
Parser for task records.

Main API:
    parse(raw, kind)          → Task
    parse_document(path, text) → List[Task]   (inline tasks of one document)
    parse_note(path, attributes, resolve) → Task
    is_empty_task(task)       → bool

Two shapes are understood:

- inline: one checklist line, ``- [x] Ship it ⏫ 🆔 abc123 ⛔ def456 #work``.
  Status comes from the checkbox character; priority, star, own id,
  dependencies and tags are all markers somewhere in the text, in any order.
- note: a whole document whose frontmatter carries ``status``, ``tags``,
  ``priority``, ``starred`` and ``blockedBy``. The document path is the id.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from tasks_map.links.codec import dependency_ids
from tasks_map.links.note_links import BLOCKED_BY_KEY, DEPENDS_ON_KEY, note_title
from tasks_map.models.task import Task
from tasks_map.utils.frontmatter import wikilink_target
from tasks_map.utils.markers import (
    CHECKLIST_RE,
    HIGH_PRIORITY,
    LOW_PRIORITY,
    STAR,
    find_own_id,
    find_priority,
    find_tags,
    strip_markers,
)

log = logging.getLogger(__name__)

# Checkbox char → status
_CHECKBOX_STATUS = {
    " ": "todo",
    "/": "in_progress",
    "-": "canceled",
    "x": "done",
    "X": "done",
}

# Status → checkbox char
STATUS_SYMBOLS = {
    "todo": " ",
    "in_progress": "/",
    "canceled": "-",
    "done": "x",
}

# Frontmatter status values used by note tasks
NOTE_STATUS_NAMES = {
    "todo": "open",
    "in_progress": "in-progress",
    "done": "done",
    "canceled": "canceled",
}

_NOTE_STATUS = {
    "open": "todo",
    "todo": "todo",
    "in-progress": "in_progress",
    "in_progress": "in_progress",
    "done": "done",
    "canceled": "canceled",
    "cancelled": "canceled",
}

_NOTE_PRIORITY = {
    "high": HIGH_PRIORITY,
    "low": LOW_PRIORITY,
    "normal": "",
    "none": "",
}

Resolver = Callable[[str], Optional[str]]


@dataclass
class RawTask:
    """An inline task as found in a document, before interpretation."""

    status: str
    text: str
    path: str
    line: Optional[int] = None


# ---------------------------------------------------------------------------
# Low-level parsers
# ---------------------------------------------------------------------------

def parse_checkbox(char: str) -> str:
    return _CHECKBOX_STATUS.get(char, "todo")


def parse_note_status(value: Any) -> str:
    if not isinstance(value, str):
        return "todo"
    value = value.strip()
    if value in _CHECKBOX_STATUS:
        return _CHECKBOX_STATUS[value]
    return _NOTE_STATUS.get(value.lower(), "todo")


def normalize_note_priority(value: Any) -> str:
    """Map note priorities (High/Normal/Low/None) onto the inline glyphs."""
    if not isinstance(value, str):
        return ""
    return _NOTE_PRIORITY.get(value.strip().lower(), "")


def parse_checklist_line(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(checkbox_char, content)`` or None if line is not a task."""
    m = CHECKLIST_RE.match(line)
    if not m:
        return None
    return m.group(2), m.group(4)


# ---------------------------------------------------------------------------
# Inline tasks
# ---------------------------------------------------------------------------

def parse_inline(raw: RawTask) -> Task:
    text = raw.text
    own_id = find_own_id(text)
    if own_id:
        task_id = own_id
    elif raw.line is not None:
        task_id = f"{raw.path}:{raw.line}"
    else:
        task_id = raw.path

    return Task(
        id=task_id,
        type="inline",
        text=text,
        summary=strip_markers(text),
        tags=find_tags(text),
        status=parse_checkbox(raw.status),
        priority=find_priority(text),
        link=raw.path,
        incoming_links=dependency_ids(text),
        starred=STAR in text,
        line=raw.line,
    )


def parse_document(path: str, content: str) -> List[Task]:
    """Parse every checklist line of a document into inline tasks."""
    tasks: List[Task] = []
    for line_num, line in enumerate(content.splitlines()):
        parsed = parse_checklist_line(line)
        if parsed is None:
            continue
        status, text = parsed
        tasks.append(parse_inline(RawTask(status=status, text=text, path=path, line=line_num)))
    return tasks


# ---------------------------------------------------------------------------
# Note tasks
# ---------------------------------------------------------------------------

def is_note_task(attributes: Optional[Dict[str, Any]]) -> bool:
    """True if frontmatter tags include ``task`` or ``#task``."""
    if not attributes:
        return False
    tags = attributes.get("tags")
    if isinstance(tags, list):
        return any(tag in ("task", "#task") for tag in tags)
    return tags in ("task", "#task")


def _note_tags(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    tags: List[str] = []
    for tag in value:
        if not isinstance(tag, str):
            continue
        tag = tag.lstrip("#")
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _blocked_by_links(value: Any, resolve: Optional[Resolver]) -> List[str]:
    """
    Resolve ``blockedBy`` entries to document paths.

    Entries are either ``"[[Title]]"`` or ``{uid: "[[Title]]", relation: ...}``.
    Entries that do not resolve are dropped.
    """
    if not isinstance(value, list):
        return []
    links: List[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("uid")
        if not isinstance(item, str):
            continue
        name = wikilink_target(item)
        if not name or resolve is None:
            continue
        path = resolve(name)
        if path is None:
            log.debug("Unresolved blockedBy reference: %s", name)
            continue
        links.append(path)
    return links


def _depends_on_links(value: Any, resolve: Optional[Resolver]) -> List[str]:
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    links: List[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        name = wikilink_target(item)
        resolved = resolve(name) if (name and resolve) else None
        links.append(resolved or item)
    return links


def parse_note(
    path: str,
    attributes: Optional[Dict[str, Any]],
    resolve: Optional[Resolver] = None,
) -> Task:
    attributes = attributes or {}
    title = note_title(path)

    starred = attributes.get("starred")
    links = _blocked_by_links(attributes.get(BLOCKED_BY_KEY), resolve)
    links += _depends_on_links(attributes.get(DEPENDS_ON_KEY), resolve)

    return Task(
        id=path,
        type="note",
        text=title,
        summary=title,
        tags=_note_tags(attributes.get("tags")),
        status=parse_note_status(attributes.get("status")),
        priority=normalize_note_priority(attributes.get("priority")),
        link=path,
        incoming_links=list(dict.fromkeys(links)),
        starred=starred if isinstance(starred, bool) else False,
    )


# ---------------------------------------------------------------------------
# Main API
# ---------------------------------------------------------------------------

def parse(
    raw: RawTask,
    kind: Literal["inline", "note"] = "inline",
    attributes: Optional[Dict[str, Any]] = None,
    resolve: Optional[Resolver] = None,
) -> Task:
    """Turn a raw record into a canonical Task."""
    if kind == "note":
        return parse_note(raw.path, attributes, resolve)
    return parse_inline(raw)


def is_empty_task(task: Task) -> bool:
    """True if nothing but markers and whitespace remains in the task text."""
    return not strip_markers(task.text)

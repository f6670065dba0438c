"""
Dependency link codec for inline tasks.

A dependency is recorded on the *blocked* task as a marker naming the short
id of the task it waits on. Three dialects exist:

    individual  ⛔ abc123 ⛔ def456
    csv         ⛔ abc123,def456
    dataview    [[dependsOn:: abc123, def456]]

Decoding tries the dialects in a fixed order (dataview, csv, individual) and
the first that finds markers wins. Encoding follows the configured linking
style, except that a line already carrying dependency markers is extended in
place rather than given a second, competing marker.

The blocking task declares its own id with ``🆔 abc123`` or
``[[id:: abc123]]``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from tasks_map.models.task import Task
from tasks_map.utils.markers import (
    DATAVIEW_DEPENDS_RE,
    DATAVIEW_ID_RE,
    DEPENDENCY_EMOJI,
    DEPENDENCY_RE,
    ID_EMOJI,
    find_own_id,
)
from tasks_map.utils.ids import generate_short_id

log = logging.getLogger(__name__)


class LinkDialect(str, Enum):
    INDIVIDUAL = "individual"
    CSV = "csv"
    DATAVIEW = "dataview"


@dataclass(frozen=True)
class DecodedLinks:
    """Dependency ids found on a line and the dialect they were written in."""

    dialect: LinkDialect
    ids: Tuple[str, ...]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _split_ids(payload: str) -> List[str]:
    return [part.strip() for part in payload.split(",") if part.strip()]


def _decode_dataview(line: str) -> Optional[DecodedLinks]:
    m = DATAVIEW_DEPENDS_RE.search(line)
    if not m:
        return None
    return DecodedLinks(LinkDialect.DATAVIEW, tuple(_split_ids(m.group(1))))


def _decode_csv(line: str) -> Optional[DecodedLinks]:
    for m in DEPENDENCY_RE.finditer(line):
        if "," in m.group(1):
            return DecodedLinks(LinkDialect.CSV, tuple(_split_ids(m.group(1))))
    return None


def _decode_individual(line: str) -> Optional[DecodedLinks]:
    ids: List[str] = []
    for m in DEPENDENCY_RE.finditer(line):
        for dep in _split_ids(m.group(1)):
            if dep not in ids:
                ids.append(dep)
    if not ids:
        return None
    return DecodedLinks(LinkDialect.INDIVIDUAL, tuple(ids))


# Priority order for dialect sniffing
_DECODERS: Tuple[Callable[[str], Optional[DecodedLinks]], ...] = (
    _decode_dataview,
    _decode_csv,
    _decode_individual,
)


def decode(line: str) -> Optional[DecodedLinks]:
    """Detect the dependency dialect used on a line; None if there is none."""
    for decoder in _DECODERS:
        found = decoder(line)
        if found is not None:
            return found
    return None


def dependency_ids(line: str) -> List[str]:
    """
    All dependency ids on a line across every dialect, in order of
    appearance, without duplicates.
    """
    hits: List[Tuple[int, str]] = []
    for m in DATAVIEW_DEPENDS_RE.finditer(line):
        hits.extend((m.start(), dep) for dep in _split_ids(m.group(1)))
    for m in DEPENDENCY_RE.finditer(line):
        hits.extend((m.start(), dep) for dep in _split_ids(m.group(1)))
    ids: List[str] = []
    for _, dep in sorted(hits, key=lambda h: h[0]):
        if dep not in ids:
            ids.append(dep)
    return ids


def encode(ids: Iterable[str], dialect: LinkDialect) -> str:
    """Render dependency ids as marker text in the given dialect."""
    ids = list(ids)
    dialect = LinkDialect(dialect)
    if dialect is LinkDialect.DATAVIEW:
        return f"[[dependsOn:: {', '.join(ids)}]]"
    if dialect is LinkDialect.CSV:
        return f"{DEPENDENCY_EMOJI} {','.join(ids)}"
    return " ".join(f"{DEPENDENCY_EMOJI} {dep}" for dep in ids)


# ---------------------------------------------------------------------------
# Line editing
# ---------------------------------------------------------------------------

def _append(line: str, marker: str) -> str:
    base = line.rstrip()
    return f"{base} {marker}" if base else marker


def _remove_span(line: str, start: int, end: int) -> str:
    """Cut ``line[start:end]`` along with the whitespace before it."""
    return (line[:start].rstrip() + line[end:]).rstrip()


def _replace_span(line: str, start: int, end: int, text: str) -> str:
    return line[:start] + text + line[end:]


def add_dependency(line: str, dep_id: str, style: str = LinkDialect.INDIVIDUAL) -> str:
    """
    Record that the task on ``line`` depends on ``dep_id``.

    Idempotent: if ``dep_id`` already appears in any dialect the line is
    returned unchanged.
    """
    style = LinkDialect(style)
    if dep_id in dependency_ids(line):
        return line

    dv = DATAVIEW_DEPENDS_RE.search(line)
    if dv:
        ids = _split_ids(dv.group(1)) + [dep_id]
        return _replace_span(line, dv.start(), dv.end(), encode(ids, LinkDialect.DATAVIEW))

    markers = list(DEPENDENCY_RE.finditer(line))
    # A dataview-id task with no emoji markers gets a dataview marker
    if style is LinkDialect.DATAVIEW or (not markers and DATAVIEW_ID_RE.search(line)):
        return _append(line, encode([dep_id], LinkDialect.DATAVIEW))

    if not markers:
        return _append(line, encode([dep_id], style))

    csv_marker = next((m for m in markers if "," in m.group(1)), None)
    if style is LinkDialect.INDIVIDUAL and csv_marker is None:
        return _append(line, encode([dep_id], LinkDialect.INDIVIDUAL))

    if style is LinkDialect.INDIVIDUAL or len(markers) == 1:
        m = csv_marker or markers[0]
        ids = _split_ids(m.group(1)) + [dep_id]
        return _replace_span(line, m.start(), m.end(), encode(ids, LinkDialect.CSV))

    # Several markers: fold them into one csv marker
    merged: List[str] = []
    for m in markers:
        for dep in _split_ids(m.group(1)):
            if dep not in merged:
                merged.append(dep)
    merged.append(dep_id)
    for m in reversed(markers):
        line = _remove_span(line, m.start(), m.end())
    return _append(line, encode(merged, LinkDialect.CSV))


def remove_dependency(line: str, dep_id: str) -> str:
    """Remove ``dep_id`` from every dependency marker on the line."""
    dv = DATAVIEW_DEPENDS_RE.search(line)
    if dv:
        ids = _split_ids(dv.group(1))
        if dep_id in ids:
            remaining = [i for i in ids if i != dep_id]
            if remaining:
                line = _replace_span(line, dv.start(), dv.end(), encode(remaining, LinkDialect.DATAVIEW))
            else:
                line = _remove_span(line, dv.start(), dv.end())

    for m in reversed(list(DEPENDENCY_RE.finditer(line))):
        ids = _split_ids(m.group(1))
        if dep_id not in ids:
            continue
        remaining = [i for i in ids if i != dep_id]
        if remaining:
            line = _replace_span(line, m.start(), m.end(), encode(remaining, LinkDialect.CSV))
        else:
            line = _remove_span(line, m.start(), m.end())
    return line


def add_own_id(line: str, own_id: str, style: str = LinkDialect.INDIVIDUAL) -> str:
    """Declare the task's own id unless it already has one."""
    if find_own_id(line):
        return line
    if LinkDialect(style) is LinkDialect.DATAVIEW:
        return _append(line, f"[[id:: {own_id}]]")
    return _append(line, f"{ID_EMOJI} {own_id}")


def remove_own_id(line: str, own_id: str) -> str:
    escaped = re.escape(own_id)
    for pattern in (rf"{ID_EMOJI}\s*{escaped}(?![A-Za-z0-9])", rf"\[\[id::\s*{escaped}\s*\]\]"):
        m = re.search(pattern, line)
        if m:
            return _remove_span(line, m.start(), m.end())
    return line


def link_id_for(task: Task) -> str:
    """
    The short id other tasks use to reference ``task``.

    Positional (``path:line``) and note-path ids cannot appear in a marker,
    so an embedded ``🆔`` token is used instead, or a fresh id is generated.
    """
    if not task.is_positional:
        return task.id
    existing = find_own_id(task.text)
    if existing:
        return existing
    new_id = generate_short_id()
    log.debug("Generated link id %s for %s", new_id, task.id)
    return new_id

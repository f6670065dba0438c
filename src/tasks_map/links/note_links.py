"""
Dependencies between note tasks.

Note tasks record what blocks them in a ``blockedBy`` frontmatter list:

    blockedBy:
      - uid: "[[Write outline]]"
        relation: FINISHTOSTART

Entries reference the blocking note by title; matching an entry against a
task id (a document path) resolves the title back to a path.
"""

import logging
from pathlib import PurePosixPath
from typing import Callable, List, Optional

from tasks_map.utils.frontmatter import (
    find_block,
    find_key,
    item_indent,
    item_value,
    key_value,
    list_item_spans,
    wikilink_target,
)

log = logging.getLogger(__name__)

BLOCKED_BY_KEY = "blockedBy"
DEPENDS_ON_KEY = "dependsOn"
RELATION_KEY = "relation"
FINISH_TO_START = "FINISHTOSTART"

Resolver = Callable[[str], Optional[str]]


def note_title(path: str) -> str:
    """Document title as used in wikilinks: the basename without ``.md``."""
    name = PurePosixPath(path).name
    return name[:-3] if name.endswith(".md") else name


def add_blocked_by(lines: List[str], title: str) -> List[str]:
    """
    Add a FINISHTOSTART entry for ``title`` to the ``blockedBy`` list.

    Returns the lines unchanged when there is no frontmatter block or the
    entry already exists.
    """
    block = find_block(lines)
    if block is None:
        return lines

    ref = f"[[{title}]]"
    for i in block.body():
        if "uid:" in lines[i] and ref in lines[i]:
            return lines

    lines = list(lines)
    key_idx = find_key(lines, block, BLOCKED_BY_KEY)
    if key_idx == -1:
        indent = "  "
        lines[block.end:block.end] = [
            f"{BLOCKED_BY_KEY}:",
            f'{indent}- uid: "{ref}"',
            f"{indent}  {RELATION_KEY}: {FINISH_TO_START}",
        ]
        return lines

    if key_value(lines[key_idx]) in ("[]", "~", "null"):
        lines[key_idx] = f"{BLOCKED_BY_KEY}:"
    spans = list_item_spans(lines, block, key_idx)
    indent = item_indent(lines, spans)
    insert_at = spans[-1][1] if spans else key_idx + 1
    lines[insert_at:insert_at] = [
        f'{indent}- uid: "{ref}"',
        f"{indent}  {RELATION_KEY}: {FINISH_TO_START}",
    ]
    return lines


def _entry_matches(value: str, dep_path: str, resolve: Optional[Resolver]) -> bool:
    if value == dep_path:
        return True
    name = wikilink_target(value)
    if name is None:
        return False
    if resolve is not None:
        resolved = resolve(name)
        if resolved is not None:
            return resolved == dep_path
    return name == note_title(dep_path)


def _entry_value(lines: List[str], first: int, last: int) -> str:
    """The reference carried by a list item: its ``uid`` or the bare scalar."""
    head = item_value(lines[first])
    if head.startswith("uid:"):
        return head[len("uid:"):].strip().strip("\"'")
    for i in range(first + 1, last):
        stripped = lines[i].strip()
        if stripped.startswith("uid:"):
            return stripped[len("uid:"):].strip().strip("\"'")
    return head


def remove_blocked_by(
    lines: List[str], dep_path: str, resolve: Optional[Resolver] = None
) -> List[str]:
    """
    Remove every ``blockedBy`` / ``dependsOn`` entry referring to ``dep_path``.

    Args:
        lines: Document lines
        dep_path: Path of the blocking note (its task id)
        resolve: Maps a wikilink name to a document path; when it cannot
            resolve a name, the name is compared with the path's basename
    """
    block = find_block(lines)
    if block is None:
        return lines

    doomed: List[range] = []
    for key in (BLOCKED_BY_KEY, DEPENDS_ON_KEY):
        key_idx = find_key(lines, block, key)
        if key_idx == -1:
            continue
        for first, last in list_item_spans(lines, block, key_idx):
            if _entry_matches(_entry_value(lines, first, last), dep_path, resolve):
                doomed.append(range(first, last))

    if not doomed:
        return lines
    drop = {i for span in doomed for i in span}
    log.debug("Removing %d dependency entries for %s", len(doomed), dep_path)
    return [line for i, line in enumerate(lines) if i not in drop]

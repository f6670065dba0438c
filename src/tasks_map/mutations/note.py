"""
Frontmatter edits for note tasks.

Functions take the document's lines and return new lines (or the same list
when there is nothing to do). A document without a complete ``---`` block is
never modified.
"""

import logging
from typing import List, Optional

from tasks_map.mutations.inline import is_valid_tag, normalize_tag
from tasks_map.utils.frontmatter import (
    DEFAULT_ITEM_INDENT,
    find_block,
    find_key,
    flow_items,
    item_indent,
    item_value,
    key_value,
    list_item_spans,
    quote_scalar,
)

log = logging.getLogger(__name__)

STATUS_KEY = "status"
TAGS_KEY = "tags"
PRIORITY_KEY = "priority"
STARRED_KEY = "starred"


def _set_scalar(lines: List[str], key: str, value: str, after: Optional[str] = None) -> List[str]:
    """
    Set ``key: value``; a missing key goes after the ``after`` key when that
    exists, otherwise at the end of the block.
    """
    block = find_block(lines)
    if block is None:
        return lines
    new_line = f"{key}: {value}"
    idx = find_key(lines, block, key)
    lines = list(lines)
    if idx != -1:
        if lines[idx] == new_line:
            return lines
        lines[idx] = new_line
        return lines

    insert_at = block.end
    if after is not None:
        after_idx = find_key(lines, block, after)
        if after_idx != -1:
            insert_at = after_idx + 1
            spans = list_item_spans(lines, block, after_idx)
            if spans:
                insert_at = spans[-1][1]
    lines.insert(insert_at, new_line)
    return lines


def set_status(lines: List[str], status_name: str) -> List[str]:
    return _set_scalar(lines, STATUS_KEY, status_name)


def add_tag(lines: List[str], tag: str) -> List[str]:
    if not is_valid_tag(tag):
        return lines
    tag = normalize_tag(tag)
    block = find_block(lines)
    if block is None:
        return lines

    lines = list(lines)
    idx = find_key(lines, block, TAGS_KEY)
    if idx == -1:
        lines[block.end:block.end] = [f"{TAGS_KEY}:", f"{DEFAULT_ITEM_INDENT}- {quote_scalar(tag)}"]
        return lines

    value = key_value(lines[idx])
    if value:
        # Rewrite a flow list or scalar as a block list
        items = flow_items(value)
        if items is None:
            log.debug("Unreadable tags value: %s", value)
            return lines
        if tag in (normalize_tag(t) for t in items):
            return lines
        lines[idx:idx + 1] = [f"{TAGS_KEY}:"] + [f"{DEFAULT_ITEM_INDENT}- {quote_scalar(t)}" for t in items]
        block = find_block(lines)

    spans = list_item_spans(lines, block, idx)
    if any(normalize_tag(item_value(lines[first])) == tag for first, _ in spans):
        return lines
    indent = item_indent(lines, spans)
    insert_at = spans[-1][1] if spans else idx + 1
    lines.insert(insert_at, f"{indent}- {quote_scalar(tag)}")
    return lines


def remove_tag(lines: List[str], tag: str) -> List[str]:
    tag = normalize_tag(tag)
    block = find_block(lines)
    if block is None or not tag:
        return lines
    idx = find_key(lines, block, TAGS_KEY)
    if idx == -1:
        return lines

    value = key_value(lines[idx])
    if value:
        items = flow_items(value)
        if not items:
            return lines
        remaining = [t for t in items if normalize_tag(t) != tag]
        if len(remaining) == len(items):
            return lines
        lines = list(lines)
        lines[idx] = f"{TAGS_KEY}: [{', '.join(quote_scalar(t) for t in remaining)}]"
        return lines

    for first, last in list_item_spans(lines, block, idx):
        if normalize_tag(item_value(lines[first])) == tag:
            return lines[:first] + lines[last:]
    return lines


def set_starred(lines: List[str], starred: bool) -> List[str]:
    """
    ``starred: true`` is created after ``priority:`` (or at block end) when
    missing; un-starring only touches an existing field.
    """
    if starred:
        return _set_scalar(lines, STARRED_KEY, "true", after=PRIORITY_KEY)
    block = find_block(lines)
    if block is None or find_key(lines, block, STARRED_KEY) == -1:
        return lines
    return _set_scalar(lines, STARRED_KEY, "false")

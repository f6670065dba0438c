"""
Line-level access to a document's frontmatter block.

Note tasks are rewritten line by line rather than by re-dumping YAML so that
comments, key order and quoting outside the edited field survive untouched.
A block exists only when the first line is ``---`` and a later line closes
it with ``---``; anything else is treated as "no frontmatter".
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import yaml

_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*):(?:\s+(.*?))?\s*$")
_ITEM_RE = re.compile(r"^(\s*)-(?:\s+(.*?))?\s*$")
_WIKILINK_TARGET_RE = re.compile(r"\[\[([^\]]+)\]\]")

DEFAULT_ITEM_INDENT = "  "


def split_lines(text: str) -> Tuple[List[str], str]:
    """Split text into lines, returning the newline style to join with."""
    newline = "\r\n" if "\r\n" in text else "\n"
    return re.split(r"\r?\n", text), newline


def join_lines(lines: List[str], newline: str) -> str:
    return newline.join(lines)


@dataclass
class FrontmatterBlock:
    """Indices of the opening and closing ``---`` lines."""

    start: int
    end: int

    def body(self) -> range:
        return range(self.start + 1, self.end)


def find_block(lines: List[str]) -> Optional[FrontmatterBlock]:
    if not lines or lines[0].rstrip() != "---":
        return None
    for i in range(1, len(lines)):
        if lines[i].rstrip() == "---":
            return FrontmatterBlock(start=0, end=i)
    # Never closed
    return None


def extract_frontmatter(text: str) -> Optional[str]:
    """Return the raw YAML between the delimiters, or None."""
    lines, newline = split_lines(text)
    block = find_block(lines)
    if block is None:
        return None
    return join_lines(lines[block.start + 1 : block.end], newline)


def find_key(lines: List[str], block: FrontmatterBlock, key: str) -> int:
    """Index of the top-level ``key:`` line inside the block, or -1."""
    for i in block.body():
        m = _KEY_RE.match(lines[i])
        if m and m.group(1) == key:
            return i
    return -1


def key_value(line: str) -> str:
    """The inline value of a ``key: value`` line ("" for block-style keys)."""
    m = _KEY_RE.match(line)
    return (m.group(2) or "") if m else ""


def list_item_spans(lines: List[str], block: FrontmatterBlock, key_idx: int) -> List[Tuple[int, int]]:
    """
    Return ``(first, last_exclusive)`` line spans of the list items under a key.

    An item is a ``- `` line plus any more-indented continuation lines
    (e.g. the ``relation:`` line of a ``blockedBy`` mapping). The list ends at
    the next top-level key or the block end.
    """
    spans: List[Tuple[int, int]] = []
    i = key_idx + 1
    while i < block.end:
        line = lines[i]
        if not line.strip():
            i += 1
            continue
        m = _ITEM_RE.match(line)
        if not m:
            break
        item_indent = len(m.group(1))
        j = i + 1
        while j < block.end:
            nxt = lines[j]
            indent = len(nxt) - len(nxt.lstrip())
            if nxt.strip() and (indent <= item_indent or _KEY_RE.match(nxt)):
                break
            j += 1
        spans.append((i, j))
        i = j
    return spans


def item_value(line: str) -> str:
    """The scalar after ``- `` with surrounding quotes removed."""
    m = _ITEM_RE.match(line)
    value = (m.group(2) or "").strip() if m else line.strip()
    return unquote(value)


def item_indent(lines: List[str], spans: List[Tuple[int, int]]) -> str:
    """Indentation used by existing items, defaulting to two spaces."""
    if spans:
        m = _ITEM_RE.match(lines[spans[0][0]])
        if m:
            return m.group(1)
    return DEFAULT_ITEM_INDENT


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def wikilink_target(value: str) -> Optional[str]:
    """
    Extract the page name from ``[[Page]]``, ``[[Page|alias]]`` or
    ``[[Page#Heading]]``.
    """
    m = _WIKILINK_TARGET_RE.search(value)
    if not m:
        return None
    name = m.group(1).split("|", 1)[0].split("#", 1)[0].strip()
    return name or None


def quote_scalar(value: str) -> str:
    """
    Render ``value`` as a YAML scalar that reads back unchanged in both block
    and flow lists (``#task`` becomes ``'#task'``, ``task`` stays plain).
    """
    dumped = yaml.safe_dump([value], default_flow_style=True, allow_unicode=True, width=1 << 20)
    return dumped.strip()[1:-1]


def flow_items(value: str) -> Optional[List[str]]:
    """
    Items of a flow list (``[a, "#b"]``) or a bare scalar value.

    Returns None when the value is not valid YAML.
    """
    value = value.strip()
    if value in ("", "[]", "~", "null"):
        return []
    try:
        data = yaml.safe_load(value)
    except yaml.YAMLError:
        return None
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    return [str(item) for item in data if item is not None]

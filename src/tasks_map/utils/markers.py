"""
Marker grammar for inline tasks.

This module is the single source of truth for the textual markers embedded
in task lines:

    priority   🔺 ⏫ 🔼 🔽 ⏬   (⏫ high, 🔽 low, none = normal)
    star       ⭐
    own id     🆔 abc123            or  [[id:: abc123]]
    dependency ⛔ abc123            (one marker per dependency)
               ⛔ abc123,def456     (one comma-joined marker)
               [[dependsOn:: abc123, def456]]
    tag        #token
"""

import re
from typing import List

STAR = "⭐"
ID_EMOJI = "🆔"
DEPENDENCY_EMOJI = "⛔"

HIGH_PRIORITY = "⏫"
LOW_PRIORITY = "🔽"
PRIORITY_GLYPHS = ("🔺", HIGH_PRIORITY, "🔼", LOW_PRIORITY, "⏬")

# Checklist line: indent + bullet + "[c]" + content
CHECKLIST_RE = re.compile(r"^(\s*(?:[-*+]|\d+[.)])\s+\[)(.)(\])\s?(.*)$")

EMOJI_ID_RE = re.compile(r"🆔\s*([A-Za-z0-9]+)")
DATAVIEW_ID_RE = re.compile(r"\[\[id::\s*([A-Za-z0-9]+)\s*\]\]")

DEPENDENCY_RE = re.compile(r"⛔\ufe0f?\s*([A-Za-z0-9]+(?:,[A-Za-z0-9]+)*)")
DATAVIEW_DEPENDS_RE = re.compile(
    r"\[\[dependsOn::\s*([A-Za-z0-9]+(?:\s*,\s*[A-Za-z0-9]+)*)\s*\]\]"
)

STAR_RE = re.compile(r"\s*⭐\ufe0f?")
PRIORITY_RE = re.compile("|".join(re.escape(g) for g in PRIORITY_GLYPHS))

# A tag starts at line start or after whitespace and runs to the next space
TAG_RE = re.compile(r"(?<!\S)#(\S+)")
WIKILINK_RE = re.compile(r"\[\[.*?\]\]")
WHITESPACE_RE = re.compile(r"\s+")


def mask_wikilinks(text: str) -> str:
    """
    Blank out ``[[...]]`` spans with equal-length spaces.

    Positions stay aligned, and ``#`` section references inside links are
    not mistaken for tags.
    """
    return WIKILINK_RE.sub(lambda m: " " * len(m.group()), text)


def find_tags(text: str) -> List[str]:
    """Return ``#tag`` tokens in order of appearance, without duplicates."""
    tags: List[str] = []
    for m in TAG_RE.finditer(mask_wikilinks(text)):
        tag = m.group(1)
        # "#123" is not a tag
        if tag.isdigit() or tag in tags:
            continue
        tags.append(tag)
    return tags


def find_priority(text: str) -> str:
    m = PRIORITY_RE.search(text)
    return m.group() if m else ""


def find_own_id(text: str) -> str:
    """Return the task's own id from either marker form, or ""."""
    m = EMOJI_ID_RE.search(text) or DATAVIEW_ID_RE.search(text)
    return m.group(1) if m else ""


def strip_markers(text: str) -> str:
    """
    Remove every known marker and collapse whitespace.

    What remains is the human-written part of the task.
    """
    core = DATAVIEW_ID_RE.sub("", text)
    core = DATAVIEW_DEPENDS_RE.sub("", core)
    core = EMOJI_ID_RE.sub("", core)
    core = DEPENDENCY_RE.sub("", core)
    core = STAR_RE.sub(" ", core)
    core = PRIORITY_RE.sub("", core)
    core = TAG_RE.sub("", core)
    return WHITESPACE_RE.sub(" ", core).strip()

"""
Single-line edits for inline tasks.

Each function takes the task's line and returns the edited line. Nothing
outside the line is touched and leading indentation is always preserved.
Adding something that is already there returns the line unchanged.
"""

import re

from tasks_map.utils.markers import CHECKLIST_RE, STAR, STAR_RE


def _append(line: str, token: str) -> str:
    return f"{line.rstrip()} {token}"


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#")


def is_valid_tag(tag: str) -> bool:
    tag = normalize_tag(tag)
    return bool(tag) and not re.search(r"\s", tag)


def set_status(line: str, symbol: str) -> str:
    """Swap the character between the checkbox brackets."""
    m = CHECKLIST_RE.match(line)
    if not m:
        return line
    return line[: m.start(2)] + symbol + line[m.end(2):]


def add_tag(line: str, tag: str) -> str:
    if not is_valid_tag(tag):
        return line
    tag = normalize_tag(tag)
    if re.search(rf"(?<!\S)#{re.escape(tag)}(?=\s|$)", line):
        return line
    return _append(line, f"#{tag}")


def remove_tag(line: str, tag: str) -> str:
    """Remove ``#tag`` and any ``#tag/sub`` nested under it."""
    tag = normalize_tag(tag)
    if not tag:
        return line
    pattern = re.compile(rf"\s*(?<![^\s])#{re.escape(tag)}(?:/\S*)?(?=\s|$)")
    m = CHECKLIST_RE.match(line)
    head_end = m.start(4) if m else 0
    head, body = line[:head_end], line[head_end:]
    new_body = pattern.sub("", body)
    if new_body == body:
        return line
    if head and new_body.startswith(" "):
        new_body = new_body.lstrip()
    return (head + new_body).rstrip()


def add_star(line: str) -> str:
    if STAR in line:
        return line
    return _append(line, STAR)


def remove_star(line: str) -> str:
    if STAR not in line:
        return line
    return STAR_RE.sub("", line).rstrip()

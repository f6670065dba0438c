"""
Core task data model.

A Task is the canonical in-memory form of either an inline checklist line or
a note document described by frontmatter. ``text`` is kept verbatim so the
task can be re-located in its document on later writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

TaskStatus = Literal["todo", "in_progress", "done", "canceled"]
TaskType = Literal["inline", "note"]

ALL_STATUSES: List[str] = ["todo", "in_progress", "done", "canceled"]


@dataclass(eq=False)
class Task:
    """
    A single task parsed from a document.

    ``incoming_links`` lists the ids of the tasks this one depends on; each
    entry becomes an edge pointing at this task.
    """

    id: str
    type: TaskType = "inline"
    text: str = ""
    summary: str = ""
    tags: List[str] = field(default_factory=list)
    status: TaskStatus = "todo"
    priority: str = ""
    link: str = ""
    incoming_links: List[str] = field(default_factory=list)
    starred: bool = False
    line: Optional[int] = None
    project: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        # Tag order is a display concern only
        if not isinstance(other, Task):
            return NotImplemented
        mine = self.to_dict()
        theirs = other.to_dict()
        mine["tags"] = set(mine["tags"])
        theirs["tags"] = set(theirs["tags"])
        return mine == theirs

    @property
    def is_positional(self) -> bool:
        """True if the id is a ``path:line`` fallback or a note path."""
        return self.type == "note" or "/" in self.id or ":" in self.id or len(self.id) > 10

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def copy(self) -> Task:
        return Task.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the snapshot's camelCase keys."""
        d: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "summary": self.summary,
            "text": self.text,
            "tags": list(self.tags),
            "status": self.status,
            "priority": self.priority,
            "link": self.link,
            "incomingLinks": list(self.incoming_links),
            "starred": self.starred,
        }
        if self.line is not None:
            d["line"] = self.line
        if self.project is not None:
            d["project"] = self.project
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Task:
        return cls(
            id=str(data["id"]),
            type=data.get("type", "inline"),
            text=data.get("text", ""),
            summary=data.get("summary", ""),
            tags=list(data.get("tags") or []),
            status=data.get("status", "todo"),
            priority=data.get("priority", ""),
            link=data.get("link", ""),
            incoming_links=list(data.get("incomingLinks") or []),
            starred=bool(data.get("starred", False)),
            line=data.get("line"),
            project=data.get("project"),
        )

"""
Graph and snapshot data models.

GraphNode / GraphEdge are the live graph; SavedNode / SavedEdge / GraphData
are the persisted snapshot. The snapshot's JSON shape is fixed:

    {"nodes": [{"id", "position": {"x", "y"}, "taskId", "taskData"?}],
     "edges": [{"id", "source", "target"}],
     "viewport": {"x", "y", "zoom"}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from tasks_map.models.task import Task

LayoutDirection = Literal["Horizontal", "Vertical"]


def edge_id(source: str, target: str) -> str:
    """Edge ids are a pure function of the endpoints."""
    return f"{source}-{target}"


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Position:
        data = data or {}
        return cls(x=float(data.get("x", 0)), y=float(data.get("y", 0)))


@dataclass
class DisplayConfig:
    """Per-node options consumed only by the rendering layer."""

    layout_direction: LayoutDirection = "Horizontal"
    show_priorities: bool = True
    show_tags: bool = True
    debug_visualization: bool = False
    tag_color_mode: str = "random"
    tag_color_seed: int = 42
    tag_static_color: str = "#3b82f6"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layoutDirection": self.layout_direction,
            "showPriorities": self.show_priorities,
            "showTags": self.show_tags,
            "debugVisualization": self.debug_visualization,
            "tagColorMode": self.tag_color_mode,
            "tagColorSeed": self.tag_color_seed,
            "tagStaticColor": self.tag_static_color,
        }


@dataclass
class GraphNode:
    """A placed task. ``id`` always equals ``task.id``."""

    id: str
    position: Position
    task: Task
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "data": {"task": self.task.to_dict(), "displayConfig": self.display.to_dict()},
        }


@dataclass
class GraphEdge:
    """One dependency: ``source`` must complete before ``target``."""

    id: str
    source: str
    target: str
    marker: str = ""

    @classmethod
    def between(cls, source: str, target: str) -> GraphEdge:
        eid = edge_id(source, target)
        return cls(id=eid, source=source, target=target, marker=eid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "data": {"marker": self.marker},
        }


@dataclass
class Viewport:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Viewport:
        data = data or {}
        return cls(
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            zoom=float(data.get("zoom", 1)),
        )


@dataclass
class SavedNode:
    id: str
    position: Position
    task_id: str
    task_data: Optional[Task] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "position": self.position.to_dict(),
            "taskId": self.task_id,
        }
        if self.task_data is not None:
            d["taskData"] = self.task_data.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SavedNode:
        task_data = data.get("taskData")
        return cls(
            id=str(data["id"]),
            position=Position.from_dict(data.get("position")),
            task_id=str(data.get("taskId", data["id"])),
            task_data=Task.from_dict(task_data) if task_data else None,
        )


@dataclass
class SavedEdge:
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SavedEdge:
        source = str(data["source"])
        target = str(data["target"])
        return cls(id=str(data.get("id") or edge_id(source, target)), source=source, target=target)


@dataclass
class GraphData:
    """The persisted snapshot, replaced wholesale on every save."""

    nodes: List[SavedNode] = field(default_factory=list)
    edges: List[SavedEdge] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "viewport": self.viewport.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> GraphData:
        data = data or {}
        return cls(
            nodes=[SavedNode.from_dict(n) for n in data.get("nodes") or []],
            edges=[SavedEdge.from_dict(e) for e in data.get("edges") or []],
            viewport=Viewport.from_dict(data.get("viewport")),
        )

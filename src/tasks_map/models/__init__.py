from .task import ALL_STATUSES, Task, TaskStatus, TaskType
from .graph import (
    DisplayConfig,
    GraphData,
    GraphEdge,
    GraphNode,
    Position,
    SavedEdge,
    SavedNode,
    Viewport,
    edge_id,
)

__all__ = [
    "ALL_STATUSES",
    "Task",
    "TaskStatus",
    "TaskType",
    "DisplayConfig",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "Position",
    "SavedEdge",
    "SavedNode",
    "Viewport",
    "edge_id",
]

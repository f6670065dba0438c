"""Task batch → graph nodes and edges."""

from typing import List

from tasks_map.config import Settings
from tasks_map.models.graph import DisplayConfig, GraphEdge, GraphNode, Position
from tasks_map.models.task import Task

# Vertical spacing of nodes before a layout pass
DEFAULT_NODE_SPACING = 80


def display_config(settings: Settings) -> DisplayConfig:
    return DisplayConfig(
        layout_direction=settings.layout_direction,
        show_priorities=settings.show_priorities,
        show_tags=settings.show_tags,
        debug_visualization=settings.debug_visualization,
        tag_color_mode=settings.tag_color_mode,
        tag_color_seed=settings.tag_color_seed,
        tag_static_color=settings.tag_static_color,
    )


def build_node(task: Task, position: Position, settings: Settings) -> GraphNode:
    return GraphNode(id=task.id, position=position, task=task, display=display_config(settings))


def build_nodes(tasks: List[Task], settings: Settings) -> List[GraphNode]:
    """One node per task, stacked vertically at ``DEFAULT_NODE_SPACING``."""
    return [
        build_node(task, Position(0, idx * DEFAULT_NODE_SPACING), settings)
        for idx, task in enumerate(tasks)
    ]


def build_edges(tasks: List[Task]) -> List[GraphEdge]:
    """
    One edge per ``incoming_links`` entry, pointing at the dependent task.

    Sources with no matching task are kept; hiding them is up to the renderer.
    """
    edges: List[GraphEdge] = []
    seen = set()
    for task in tasks:
        for source in task.incoming_links:
            edge = GraphEdge.between(source, task.id)
            if edge.id in seen:
                continue
            seen.add(edge.id)
            edges.append(edge)
    return edges

"""Handler functions shared by MCP tools and the REST API."""

import logging
from typing import Any, Dict, List, Optional

from tasks_map.models.graph import Position, Viewport
from tasks_map.models.task import Task

log = logging.getLogger(__name__)


def _graph_to_dict(session) -> dict:
    graph = session.graph
    return {
        "nodes": [n.to_dict() for n in graph.nodes],
        "edges": [e.to_dict() for e in graph.edges],
        "viewport": graph.viewport.to_dict(),
    }


def _not_found(kind: str, key: str) -> dict:
    return {"error": f"{kind} '{key}' not found"}


def _edit_result(session, task_id: str, changed: Optional[bool]) -> dict:
    if changed is None:
        return _not_found("Task", task_id)
    return {"changed": changed, "task": session.get_task(task_id).to_dict()}


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

async def handle_graph_get(session) -> dict:
    return _graph_to_dict(session)


async def handle_graph_reload(session) -> dict:
    await session.load()
    return _graph_to_dict(session)


async def handle_graph_refresh(session) -> dict:
    count = await session.refresh()
    return {"tasks": count, "nodes": len(session.graph.nodes)}


async def handle_graph_rebuild(session) -> dict:
    await session.rebuild()
    return _graph_to_dict(session)


async def handle_graph_save(session) -> dict:
    await session.save()
    return {"saved": True, "nodes": len(session.graph.nodes), "edges": len(session.graph.edges)}


async def handle_viewport_set(session, *, x: float, y: float, zoom: float = 1.0) -> dict:
    await session.set_viewport(Viewport(x=x, y=y, zoom=zoom))
    return session.graph.viewport.to_dict()


# ---------------------------------------------------------------------------
# Nodes and edges
# ---------------------------------------------------------------------------

async def handle_node_add(
    session,
    *,
    task_id: str,
    x: float = 0.0,
    y: float = 0.0,
    task_data: Optional[Dict[str, Any]] = None,
) -> dict:
    if session.get_node(task_id) is not None:
        return {"error": f"Task '{task_id}' already on canvas"}
    fallback = Task.from_dict(task_data) if task_data else None
    node = await session.add_task_to_canvas(task_id, Position(x, y), fallback)
    if node is None:
        return _not_found("Task", task_id)
    return node.to_dict()


async def handle_node_move(session, *, node_id: str, x: float, y: float) -> dict:
    node = await session.move_node(node_id, Position(x, y))
    if node is None:
        return _not_found("Node", node_id)
    return node.to_dict()


async def handle_node_delete(session, *, node_id: str) -> dict:
    if not await session.delete_node(node_id):
        return _not_found("Node", node_id)
    return {"deleted": node_id}


async def handle_edge_connect(session, *, source: str, target: str) -> dict:
    edge = await session.connect(source, target)
    if edge is None:
        return {"error": f"Cannot connect '{source}' -> '{target}': task not found"}
    return edge.to_dict()


async def handle_edge_delete(session, *, edge_id: str) -> dict:
    if not await session.delete_edge(edge_id):
        return _not_found("Edge", edge_id)
    return {"deleted": edge_id}


async def handle_link(session, *, source: str, target: str) -> dict:
    """Write a dependency into the target's document and add the edge."""
    if session.get_task(source) is None:
        return _not_found("Task", source)
    if session.get_task(target) is None:
        return _not_found("Task", target)
    edge = await session.link_tasks(source, target)
    if edge is None:
        return {"linked": False, "source": source, "target": target}
    return {"linked": True, "edge": edge.to_dict()}


async def handle_unlink(session, *, edge_id: str) -> dict:
    if session.get_edge(edge_id) is None:
        return _not_found("Edge", edge_id)
    return {"unlinked": await session.unlink_tasks(edge_id), "edge_id": edge_id}


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

async def handle_task_get(session, *, task_id: str) -> dict:
    task = session.get_task(task_id)
    if task is None:
        return _not_found("Task", task_id)
    result = task.to_dict()
    result["on_canvas"] = session.get_node(task_id) is not None
    return result


async def handle_task_status(session, *, task_id: str, status: str) -> dict:
    return _edit_result(session, task_id, await session.set_status(task_id, status))


async def handle_task_add_tag(session, *, task_id: str, tag: str) -> dict:
    return _edit_result(session, task_id, await session.add_tag(task_id, tag))


async def handle_task_remove_tag(session, *, task_id: str, tag: str) -> dict:
    return _edit_result(session, task_id, await session.remove_tag(task_id, tag))


async def handle_task_star(session, *, task_id: str, starred: bool = True) -> dict:
    return _edit_result(session, task_id, await session.set_starred(task_id, starred))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def handle_tags(session) -> dict:
    return {"tags": session.all_tags()}


async def handle_sidebar(
    session, *, project: Optional[str] = None, hide_on_canvas: bool = False
) -> List[dict]:
    tasks = await session.sidebar_tasks(project=project, hide_on_canvas=hide_on_canvas)
    return [t.to_dict() for t in tasks]


async def handle_projects(session) -> dict:
    return {"projects": await session.projects()}


async def handle_settings_get(session) -> dict:
    return session.settings.to_dict()

"""REST API routes for tasks-map.

Task and node ids contain ``/`` and ``:`` (``notes/a.md:3``), so they travel
in request bodies and query parameters rather than in the path.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from tasks_map.api.handlers import (
    handle_edge_connect,
    handle_edge_delete,
    handle_graph_get,
    handle_graph_rebuild,
    handle_graph_refresh,
    handle_graph_reload,
    handle_graph_save,
    handle_link,
    handle_node_add,
    handle_node_delete,
    handle_node_move,
    handle_projects,
    handle_settings_get,
    handle_sidebar,
    handle_tags,
    handle_task_add_tag,
    handle_task_get,
    handle_task_remove_tag,
    handle_task_star,
    handle_task_status,
    handle_unlink,
    handle_viewport_set,
)


# ---------------------------------------------------------------------------
# Request body models
# ---------------------------------------------------------------------------


class NodeAddBody(BaseModel):
    task_id: str
    x: float = 0.0
    y: float = 0.0
    task_data: Optional[Dict[str, Any]] = None


class NodeMoveBody(BaseModel):
    node_id: str
    x: float
    y: float


class EdgeBody(BaseModel):
    source: str
    target: str


class TaskStatusBody(BaseModel):
    task_id: str
    status: str


class TaskTagBody(BaseModel):
    task_id: str
    tag: str


class TaskStarBody(BaseModel):
    task_id: str
    starred: bool = True


class ViewportBody(BaseModel):
    x: float
    y: float
    zoom: float = 1.0


def _or_404(result: dict) -> dict:
    if "error" in result:
        raise HTTPException(status_code=404, detail=result["error"])
    return result


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------


def register_routes(app_router: APIRouter, session) -> None:
    """Attach all REST routes that use the shared session."""

    # --- Graph routes ---

    @app_router.get("/graph")
    async def get_graph():
        return await handle_graph_get(session)

    @app_router.post("/graph/reload")
    async def reload_graph():
        return await handle_graph_reload(session)

    @app_router.post("/graph/refresh")
    async def refresh_graph():
        return await handle_graph_refresh(session)

    @app_router.post("/graph/rebuild")
    async def rebuild_graph():
        return await handle_graph_rebuild(session)

    @app_router.post("/graph/save")
    async def save_graph():
        return await handle_graph_save(session)

    @app_router.put("/viewport")
    async def set_viewport(body: ViewportBody):
        return await handle_viewport_set(session, x=body.x, y=body.y, zoom=body.zoom)

    # --- Node and edge routes ---

    @app_router.post("/nodes", status_code=201)
    async def add_node(body: NodeAddBody):
        result = await handle_node_add(session, **body.model_dump())
        if "error" in result:
            status_code = 404 if "not found" in result["error"] else 400
            raise HTTPException(status_code=status_code, detail=result["error"])
        return result

    @app_router.patch("/nodes")
    async def move_node(body: NodeMoveBody):
        return _or_404(await handle_node_move(session, **body.model_dump()))

    @app_router.delete("/nodes")
    async def delete_node(node_id: str = Query(...)):
        return _or_404(await handle_node_delete(session, node_id=node_id))

    @app_router.post("/edges", status_code=201)
    async def connect(body: EdgeBody):
        return _or_404(await handle_edge_connect(session, source=body.source, target=body.target))

    @app_router.delete("/edges")
    async def delete_edge(edge_id: str = Query(...)):
        return _or_404(await handle_edge_delete(session, edge_id=edge_id))

    @app_router.post("/links")
    async def link(body: EdgeBody):
        return _or_404(await handle_link(session, source=body.source, target=body.target))

    @app_router.delete("/links")
    async def unlink(edge_id: str = Query(...)):
        return _or_404(await handle_unlink(session, edge_id=edge_id))

    # --- Task routes ---

    @app_router.get("/task")
    async def get_task(task_id: str = Query(...)):
        return _or_404(await handle_task_get(session, task_id=task_id))

    @app_router.post("/task/status")
    async def set_status(body: TaskStatusBody):
        try:
            result = await handle_task_status(session, task_id=body.task_id, status=body.status)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _or_404(result)

    @app_router.post("/task/tags")
    async def add_tag(body: TaskTagBody):
        try:
            result = await handle_task_add_tag(session, task_id=body.task_id, tag=body.tag)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _or_404(result)

    @app_router.delete("/task/tags")
    async def remove_tag(task_id: str = Query(...), tag: str = Query(...)):
        return _or_404(await handle_task_remove_tag(session, task_id=task_id, tag=tag))

    @app_router.post("/task/star")
    async def set_star(body: TaskStarBody):
        return _or_404(await handle_task_star(session, task_id=body.task_id, starred=body.starred))

    # --- Query routes ---

    @app_router.get("/tags")
    async def list_tags():
        return await handle_tags(session)

    @app_router.get("/sidebar")
    async def sidebar(
        project: Optional[str] = Query(None),
        hide_on_canvas: bool = Query(False),
    ):
        return await handle_sidebar(session, project=project, hide_on_canvas=hide_on_canvas)

    @app_router.get("/projects")
    async def list_projects():
        return await handle_projects(session)

    @app_router.get("/settings")
    async def get_settings():
        return await handle_settings_get(session)

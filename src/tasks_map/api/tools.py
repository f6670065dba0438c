"""MCP tool registration for tasks-map."""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from tasks_map.api.handlers import (
    handle_edge_connect,
    handle_edge_delete,
    handle_graph_get,
    handle_graph_rebuild,
    handle_graph_refresh,
    handle_graph_save,
    handle_link,
    handle_node_add,
    handle_node_delete,
    handle_node_move,
    handle_projects,
    handle_sidebar,
    handle_tags,
    handle_task_add_tag,
    handle_task_get,
    handle_task_remove_tag,
    handle_task_star,
    handle_task_status,
    handle_unlink,
)

log = logging.getLogger(__name__)


def register_tools(mcp: FastMCP, session) -> None:
    """Register all MCP tools onto the FastMCP instance."""

    # ------------------------------------------------------------------
    # Graph tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def graph_get() -> str:
        """
        Get the task map: every node (with its task), every edge and the viewport.

        Edges point from the blocking task (source) to the blocked task (target).

        Returns:
            JSON object {nodes, edges, viewport}
        """
        return json.dumps(await handle_graph_get(session), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def graph_refresh() -> str:
        """
        Re-scan the vault and update the tasks shown by existing nodes.

        Node positions and edges are kept; no nodes are added or removed.
        """
        return json.dumps(await handle_graph_refresh(session), indent=2)

    @mcp.tool()
    async def graph_rebuild() -> str:
        """
        Replace the map with every task in the vault, edges taken from the
        dependency markers, laid out automatically. Discards manual placement.
        """
        return json.dumps(await handle_graph_rebuild(session), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def graph_save() -> str:
        """Write the current map to the data file now."""
        return json.dumps(await handle_graph_save(session), indent=2)

    # ------------------------------------------------------------------
    # Canvas tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def node_add(task_id: str, x: float = 0.0, y: float = 0.0) -> str:
        """
        Place a task on the map.

        Args:
            task_id: Task id (short id like "abc123", "path.md:12", or a note path)
            x: Horizontal position
            y: Vertical position
        """
        return json.dumps(await handle_node_add(session, task_id=task_id, x=x, y=y), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def node_move(node_id: str, x: float, y: float) -> str:
        """Move a node to a new position."""
        return json.dumps(await handle_node_move(session, node_id=node_id, x=x, y=y), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def node_delete(node_id: str) -> str:
        """Remove a node and its edges from the map. Documents are not changed."""
        return json.dumps(await handle_node_delete(session, node_id=node_id))

    @mcp.tool()
    async def edge_connect(source: str, target: str) -> str:
        """
        Draw an edge on the map only (saved in the data file, not in documents).

        Args:
            source: Id of the task that must finish first
            target: Id of the task that waits on it
        """
        return json.dumps(await handle_edge_connect(session, source=source, target=target), indent=2)

    @mcp.tool()
    async def edge_delete(edge_id: str) -> str:
        """Remove an edge from the map only. Edge ids are "<source>-<target>"."""
        return json.dumps(await handle_edge_delete(session, edge_id=edge_id))

    @mcp.tool()
    async def task_link(source: str, target: str) -> str:
        """
        Make ``target`` depend on ``source`` in the documents and on the map.

        Inline tasks get a dependency marker (⛔ or [[dependsOn:: ]] per the
        linking style) and the source gets a 🆔 if it lacks one. Note tasks get
        a blockedBy entry. Inline and note tasks cannot be linked to each other.
        """
        return json.dumps(await handle_link(session, source=source, target=target), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def task_unlink(edge_id: str) -> str:
        """Remove the dependency marker behind an edge, and the edge."""
        return json.dumps(await handle_unlink(session, edge_id=edge_id))

    # ------------------------------------------------------------------
    # Task tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def task_get(task_id: str) -> str:
        """Get a single task by id."""
        return json.dumps(await handle_task_get(session, task_id=task_id), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def task_set_status(task_id: str, status: str) -> str:
        """
        Change a task's status in its document.

        Args:
            task_id: Task id
            status: "todo", "in_progress", "done" or "canceled"

        Returns:
            JSON {changed, task}; changed is false when the document could
            not be updated (the task is left as it was)
        """
        try:
            return json.dumps(
                await handle_task_status(session, task_id=task_id, status=status),
                indent=2,
                ensure_ascii=False,
            )
        except ValueError as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    async def task_tag(task_id: str, tag: str, remove: bool = False) -> str:
        """
        Add or remove a tag on a task.

        Args:
            task_id: Task id
            tag: Tag without spaces; a leading # is optional
            remove: Remove the tag instead of adding it
        """
        try:
            if remove:
                result = await handle_task_remove_tag(session, task_id=task_id, tag=tag)
            else:
                result = await handle_task_add_tag(session, task_id=task_id, tag=tag)
        except ValueError as e:
            return json.dumps({"error": str(e)})
        return json.dumps(result, indent=2, ensure_ascii=False)

    @mcp.tool()
    async def task_star(task_id: str, starred: bool = True) -> str:
        """Star or un-star a task."""
        return json.dumps(await handle_task_star(session, task_id=task_id, starred=starred), indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Query tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def tags_list() -> str:
        """All tags in use, most frequent first."""
        return json.dumps(await handle_tags(session), indent=2, ensure_ascii=False)

    @mcp.tool()
    async def sidebar_list(project: Optional[str] = None, hide_on_canvas: bool = False) -> str:
        """
        List tasks from the configured tasks folder.

        Args:
            project: Only tasks whose document frontmatter names this project
            hide_on_canvas: Leave out tasks already on the map
        """
        return json.dumps(
            await handle_sidebar(session, project=project, hide_on_canvas=hide_on_canvas),
            indent=2,
            ensure_ascii=False,
        )

    @mcp.tool()
    async def projects_list() -> str:
        """Projects named in the tasks folder's frontmatter."""
        return json.dumps(await handle_projects(session), indent=2)

    log.debug("Registered MCP tools")

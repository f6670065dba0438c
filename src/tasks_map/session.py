"""
Task map session.

A TaskMapSession owns every piece of mutable state: the scanned tasks, the
live graph, the tag registry and the sidebar cache. Nothing lives at module
level; API handlers and MCP tools receive the session explicitly.

Task edits are optimistic. The in-memory task is changed first and a
PendingChange records how to undo it; the document is rewritten next. If the
rewrite raises, or leaves the document unchanged, the change is reverted.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, List, Optional

from tasks_map.config import ServerConfig, Settings
from tasks_map.graph import (
    Graph,
    build_edges,
    build_node,
    build_nodes,
    layout_nodes,
    merge,
    refresh_nodes,
    snapshot_from_graph,
)
from tasks_map.links.codec import link_id_for
from tasks_map.models.graph import GraphEdge, GraphNode, Position, Viewport, edge_id
from tasks_map.models.task import ALL_STATUSES, Task
from tasks_map.mutations import (
    AddDependency,
    AddOwnId,
    AddStar,
    AddTag,
    DocumentMutator,
    Operation,
    RemoveDependency,
    RemoveStar,
    RemoveTag,
    SetStatus,
)
from tasks_map.mutations.inline import is_valid_tag, normalize_tag
from tasks_map.parsers import collect_tasks, scan_folder
from tasks_map.persistence import DebouncedSaver, PluginData, SnapshotFile
from tasks_map.store import VaultStore
from tasks_map.utils.markers import find_own_id

log = logging.getLogger(__name__)


class PendingChange:
    """An applied in-memory change paired with the function that undoes it."""

    def __init__(self, description: str, revert: Callable[[], None]) -> None:
        self.description = description
        self._revert = revert
        self.reverted = False

    def revert(self) -> None:
        if self.reverted:
            return
        self._revert()
        self.reverted = True
        log.info("Reverted: %s", self.description)


class TaskMapSession:
    def __init__(
        self,
        store,
        snapshot_file: SnapshotFile,
        save_debounce: float = 0.2,
        layout_engine=None,
    ) -> None:
        self.store = store
        self.mutator = DocumentMutator(store)
        self.snapshot_file = snapshot_file
        self.settings = Settings()
        self.tasks: List[Task] = []
        self.graph = Graph()
        self._layout_engine = layout_engine
        self._saver = DebouncedSaver(self.save, save_debounce)
        self._sidebar_cache: Optional[List[Task]] = None

    @classmethod
    def from_config(cls, config: ServerConfig) -> "TaskMapSession":
        return cls(
            VaultStore(config.vault_root, config.exclude_dirs),
            SnapshotFile(config.data_file),
            save_debounce=config.save_debounce,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Read settings and snapshot, scan the vault and restore the graph."""
        data = await self.snapshot_file.load()
        self.settings = data.settings
        self.tasks = await collect_tasks(self.store)
        self.graph = merge(data.graph_data, self.tasks, self.settings)
        self._sidebar_cache = None
        log.info("Loaded %d tasks, %d nodes", len(self.tasks), len(self.graph.nodes))

    async def refresh(self) -> int:
        """
        Re-scan the vault and update task data of nodes already on the canvas.

        Positions, nodes without a match and edges are left alone. Returns
        the number of scanned tasks.
        """
        self.tasks = await collect_tasks(self.store)
        self.graph.nodes = refresh_nodes(self.graph.nodes, self.tasks)
        self._sidebar_cache = None
        self.schedule_save()
        return len(self.tasks)

    async def rebuild(self) -> None:
        """Replace the graph with every task, edges from dependency data, laid out."""
        self.tasks = await collect_tasks(self.store)
        nodes = build_nodes(self.tasks, self.settings)
        edges = build_edges(self.tasks)
        self.graph.nodes = layout_nodes(nodes, edges, self.settings.layout_direction, self._layout_engine)
        self.graph.edges = edges
        self._sidebar_cache = None
        log.info("Rebuilt graph: %d nodes, %d edges", len(nodes), len(edges))
        await self.save()

    async def save(self) -> None:
        data = PluginData(settings=self.settings, graph_data=snapshot_from_graph(self.graph))
        await self.snapshot_file.save(data)

    def schedule_save(self) -> None:
        self._saver.schedule()

    async def close(self) -> None:
        """Write the final state. Call before the session is discarded."""
        await self._saver.flush()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return next((n for n in self.graph.nodes if n.id == node_id), None)

    def get_edge(self, edge_id_: str) -> Optional[GraphEdge]:
        return next((e for e in self.graph.edges if e.id == edge_id_), None)

    def get_task(self, task_id: str) -> Optional[Task]:
        node = self.get_node(task_id)
        if node is not None:
            return node.task
        return next((t for t in self.tasks if t.id == task_id), None)

    def _instances(self, task_id: str) -> List[Task]:
        """Every distinct in-memory copy of a task (scan result and node)."""
        found: List[Task] = []
        for task in [t for t in self.tasks if t.id == task_id] + [
            n.task for n in self.graph.nodes if n.id == task_id
        ]:
            if not any(task is f for f in found):
                found.append(task)
        return found

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------

    def canvas_task_ids(self) -> List[str]:
        return [n.id for n in self.graph.nodes]

    async def add_task_to_canvas(
        self, task_id: str, position: Position, task_data: Optional[Task] = None
    ) -> Optional[GraphNode]:
        """Place a task on the canvas. None if it is unknown or already placed."""
        task = next((t for t in self.tasks if t.id == task_id), None) or task_data
        if task is None:
            log.info("Task not found: %s", task_id)
            return None
        if self.get_node(task.id) is not None:
            log.info("Task already on canvas: %s", task.id)
            return None
        node = build_node(task, position, self.settings)
        self.graph.nodes.append(node)
        self.schedule_save()
        return node

    async def move_node(self, node_id: str, position: Position) -> Optional[GraphNode]:
        node = self.get_node(node_id)
        if node is None:
            return None
        node.position = position
        self.schedule_save()
        return node

    async def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it. Documents are not changed."""
        if self.get_node(node_id) is None:
            return False
        self.graph.nodes = [n for n in self.graph.nodes if n.id != node_id]
        self.graph.edges = [
            e for e in self.graph.edges if e.source != node_id and e.target != node_id
        ]
        self.schedule_save()
        return True

    async def set_viewport(self, viewport: Viewport) -> None:
        self.graph.viewport = viewport
        self.schedule_save()

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    async def connect(self, source: str, target: str) -> Optional[GraphEdge]:
        """Add an edge stored only in the snapshot."""
        if self.get_task(source) is None or self.get_task(target) is None:
            log.info("Cannot connect %s -> %s: task data not found", source, target)
            return None
        existing = self.get_edge(edge_id(source, target))
        if existing is not None:
            return existing
        edge = GraphEdge.between(source, target)
        self.graph.edges.append(edge)
        self.schedule_save()
        return edge

    async def delete_edge(self, edge_id_: str) -> bool:
        """Remove an edge from the graph only."""
        if self.get_edge(edge_id_) is None:
            return False
        self.graph.edges = [e for e in self.graph.edges if e.id != edge_id_]
        self.schedule_save()
        return True

    def _rename_task(self, old_id: str, new_id: str) -> None:
        """Follow a task whose id changed from positional to an embedded id."""
        for task in self._instances(old_id):
            task.id = new_id
        for node in self.graph.nodes:
            if node.id == old_id:
                node.id = new_id
        edges: List[GraphEdge] = []
        for e in self.graph.edges:
            source = new_id if e.source == old_id else e.source
            target = new_id if e.target == old_id else e.target
            edges.append(GraphEdge.between(source, target) if (source, target) != (e.source, e.target) else e)
        self.graph.edges = edges
        for task in self.tasks + [n.task for n in self.graph.nodes]:
            task.incoming_links = [new_id if i == old_id else i for i in task.incoming_links]

    async def link_tasks(self, source_id: str, target_id: str) -> Optional[GraphEdge]:
        """
        Record in the target's document that it depends on the source, then
        add the edge.

        Inline tasks link through short-id markers, note tasks through
        ``blockedBy``. Mixed inline/note pairs cannot be expressed and return
        None. A positional source gets an embedded id and is renamed to it.
        """
        source = self.get_task(source_id)
        target = self.get_task(target_id)
        if source is None or target is None:
            return None
        if source.type != target.type:
            log.warning("Cannot link %s task %s to %s task %s", source.type, source_id, target.type, target_id)
            return None

        style = self.settings.linking_style
        wrote_id = False
        if target.type == "note":
            ref = source.id
            op: Operation = AddDependency(source.id, style, title=Path(source.id).stem)
        else:
            ref = link_id_for(source)
            op = AddDependency(ref, style)
            if ref != source.id and find_own_id(source.text) != ref:
                if not await self.mutator.apply(source, AddOwnId(ref, style)):
                    log.warning("Could not write id %s for %s", ref, source.id)
                    return None
                wrote_id = True

        edge = GraphEdge.between(source.id, target.id)
        added_edge = self.get_edge(edge.id) is None
        if added_edge:
            self.graph.edges.append(edge)

        def add_link(t: Task) -> None:
            if ref not in t.incoming_links:
                t.incoming_links.append(ref)

        def remove_edge() -> None:
            if added_edge:
                self.graph.edges = [e for e in self.graph.edges if e.id != edge.id]

        pending = self._tentative(target.id, f"link {source.id} -> {target.id}", add_link, remove_edge)
        if not await self._confirm(pending, target, op):
            return None

        if wrote_id:
            self._rename_task(source.id, ref)
            edge = self.get_edge(edge_id(ref, target.id)) or edge
        return edge

    async def unlink_tasks(self, edge_id_: str) -> bool:
        """Remove the dependency marker behind an edge, then the edge."""
        edge = self.get_edge(edge_id_)
        if edge is None:
            return False
        source = self.get_task(edge.source)
        target = self.get_task(edge.target)
        if source is None or target is None:
            return False

        if target.type == "note" or not source.is_positional:
            ref = source.id
        else:
            ref = find_own_id(source.text)
        if not ref:
            log.info("Edge %s has no text-level dependency", edge_id_)
            return False

        self.graph.edges = [e for e in self.graph.edges if e.id != edge_id_]

        def restore_edge() -> None:
            if self.get_edge(edge.id) is None:
                self.graph.edges.append(edge)

        pending = self._tentative(
            target.id,
            f"unlink {edge_id_}",
            lambda t: setattr(t, "incoming_links", [i for i in t.incoming_links if i != ref]),
            restore_edge,
        )
        return await self._confirm(pending, target, RemoveDependency(ref))

    # ------------------------------------------------------------------
    # Task edits
    # ------------------------------------------------------------------

    def _tentative(
        self,
        task_id: str,
        description: str,
        change: Callable[[Task], None],
        extra_revert: Optional[Callable[[], None]] = None,
    ) -> PendingChange:
        """Apply ``change`` to every in-memory copy of the task."""
        before = [(t, t.copy()) for t in self._instances(task_id)]
        for task, _ in before:
            change(task)

        def revert() -> None:
            for task, saved in before:
                vars(task).update(vars(saved))
            if extra_revert is not None:
                extra_revert()

        return PendingChange(description, revert)

    async def _confirm(self, pending: PendingChange, task: Task, op: Operation) -> bool:
        try:
            changed = await self.mutator.apply(task, op)
        except Exception:
            log.exception("Failed to write %s", pending.description)
            pending.revert()
            raise
        if not changed:
            log.info("Document unchanged for %s", pending.description)
            pending.revert()
            return False
        self.schedule_save()
        return True

    async def _edit(self, task_id: str, op: Operation, description: str, change: Callable[[Task], None]) -> Optional[bool]:
        task = self.get_task(task_id)
        if task is None:
            return None
        # Snapshot before the optimistic change so the locator sees the stored text
        target = task.copy()
        pending = self._tentative(task_id, description, change)
        return await self._confirm(pending, target, op)

    async def set_status(self, task_id: str, status: str) -> Optional[bool]:
        """
        Returns None if the task is unknown, False if the document did not
        change (the in-memory change is reverted), True on success.
        """
        if status not in ALL_STATUSES:
            raise ValueError(f"Invalid status '{status}'. Must be one of: {ALL_STATUSES}")
        return await self._edit(
            task_id, SetStatus(status), f"status of {task_id} -> {status}",
            lambda t: setattr(t, "status", status),
        )

    async def add_tag(self, task_id: str, tag: str) -> Optional[bool]:
        if not is_valid_tag(tag):
            raise ValueError(f"Invalid tag '{tag}'")
        tag = normalize_tag(tag)

        def change(t: Task) -> None:
            if tag not in t.tags:
                t.tags.append(tag)

        return await self._edit(task_id, AddTag(tag), f"add #{tag} to {task_id}", change)

    async def remove_tag(self, task_id: str, tag: str) -> Optional[bool]:
        tag = normalize_tag(tag)
        return await self._edit(
            task_id, RemoveTag(tag), f"remove #{tag} from {task_id}",
            lambda t: setattr(t, "tags", [x for x in t.tags if x != tag and not x.startswith(tag + "/")]),
        )

    async def set_starred(self, task_id: str, starred: bool) -> Optional[bool]:
        op: Operation = AddStar() if starred else RemoveStar()
        return await self._edit(
            task_id, op, f"starred of {task_id} -> {starred}",
            lambda t: setattr(t, "starred", starred),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all_tags(self) -> List[str]:
        """Tags in use, most frequent first, ties by case-insensitive name."""
        registry: Dict[str, List[str]] = {t.id: t.tags for t in self.tasks}
        for node in self.graph.nodes:
            registry.setdefault(node.id, node.task.tags)
        counts: Counter = Counter(tag for tags in registry.values() for tag in tags)
        return sorted(counts, key=lambda tag: (-counts[tag], tag.lower()))

    async def _sidebar(self) -> List[Task]:
        if self._sidebar_cache is None:
            self._sidebar_cache = await scan_folder(self.store, self.settings.tasks_folder)
        return self._sidebar_cache

    async def sidebar_tasks(self, project: Optional[str] = None, hide_on_canvas: bool = False) -> List[Task]:
        tasks = await self._sidebar()
        if project is not None:
            tasks = [t for t in tasks if t.project == project]
        if hide_on_canvas:
            on_canvas = set(self.canvas_task_ids())
            tasks = [t for t in tasks if t.id not in on_canvas]
        return tasks

    async def projects(self) -> List[str]:
        return sorted({t.project for t in await self._sidebar() if t.project})

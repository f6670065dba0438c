"""
Snapshot reconciliation.

A saved node is a durable placement, not a view over live data:

- ``merge`` (load) restores every saved node at its saved position, whether
  or not its task still exists. Task data missing from the snapshot is
  filled in from the fresh scan; a node with neither is dropped.
- ``refresh_nodes`` (refresh) swaps in fresh task data for nodes whose id
  matches a scanned task and leaves every position alone. Unmatched nodes
  are kept as they are.

Edges are never derived here. The saved edge list stands until an explicit
rebuild.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from tasks_map.config import Settings
from tasks_map.graph.builder import build_node
from tasks_map.models.graph import GraphData, GraphEdge, GraphNode, SavedEdge, SavedNode, Viewport
from tasks_map.models.task import Task

log = logging.getLogger(__name__)


@dataclass
class Graph:
    """The live graph: positioned nodes, edges and the viewport."""

    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)


def merge(snapshot: GraphData, fresh_tasks: Sequence[Task], settings: Settings) -> Graph:
    by_id: Dict[str, Task] = {t.id: t for t in fresh_tasks}
    nodes: List[GraphNode] = []
    for saved in snapshot.nodes:
        task = saved.task_data or by_id.get(saved.task_id)
        if task is None:
            log.debug("Dropping saved node %s: no task data", saved.id)
            continue
        nodes.append(build_node(task, saved.position, settings))

    edges = [GraphEdge.between(e.source, e.target) for e in snapshot.edges]
    log.info("Restored %d nodes and %d edges", len(nodes), len(edges))
    return Graph(nodes=nodes, edges=edges, viewport=snapshot.viewport)


def refresh_nodes(nodes: Sequence[GraphNode], fresh_tasks: Sequence[Task]) -> List[GraphNode]:
    by_id: Dict[str, Task] = {t.id: t for t in fresh_tasks}
    refreshed: List[GraphNode] = []
    updated = 0
    for node in nodes:
        task = by_id.get(node.id)
        if task is None:
            refreshed.append(node)
            continue
        updated += 1
        refreshed.append(GraphNode(id=node.id, position=node.position, task=task, display=node.display))
    log.info("Refreshed %d of %d nodes", updated, len(nodes))
    return refreshed


def snapshot_from_graph(graph: Graph) -> GraphData:
    """Serialize the complete live graph, replacing any previous snapshot."""
    return GraphData(
        nodes=[
            SavedNode(id=n.id, position=n.position, task_id=n.task.id, task_data=n.task)
            for n in graph.nodes
        ],
        edges=[SavedEdge(id=e.id, source=e.source, target=e.target) for e in graph.edges],
        viewport=graph.viewport,
    )

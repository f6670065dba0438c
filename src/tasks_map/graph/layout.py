"""
Layout adapter.

``layout_nodes`` hands node sizes and edges to a layout engine and copies the
returned positions back onto the nodes. Engines return node *centers*; the
adapter shifts them by a fixed offset so the renderer gets top-left corners.
Nodes the engine did not place go to (0, 0).

``HierarchicalLayout`` is the default engine: a layered layout on networkx
where each node's rank is the length of the longest dependency chain leading
to it. Cycles are collapsed into one rank. Layers are ordered by barycenter
and placed with ``nx.multipartite_layout``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from tasks_map.models.graph import GraphEdge, GraphNode, Position

log = logging.getLogger(__name__)

NODE_WIDTH = 250
NODE_HEIGHT = 120

# Subtracted from engine centers
CENTER_OFFSET_X = 90
CENTER_OFFSET_Y = 30

RANK_DIRECTIONS = {"Horizontal": "LR", "Vertical": "TB"}


@dataclass
class LayoutNode:
    id: str
    width: float = NODE_WIDTH
    height: float = NODE_HEIGHT


LayoutEngine = Callable[[List[LayoutNode], List[Tuple[str, str]], str], Dict[str, Tuple[float, float]]]


class HierarchicalLayout:
    """Longest-path layering with barycenter ordering inside each layer."""

    def __init__(self, rank_sep: float = 50, node_sep: float = 50) -> None:
        self.rank_sep = rank_sep
        self.node_sep = node_sep

    def _ranks(self, graph: nx.DiGraph) -> Dict[str, int]:
        condensed = nx.condensation(graph)
        ranks: Dict[str, int] = {}
        for rank, generation in enumerate(nx.topological_generations(condensed)):
            for component in generation:
                for member in condensed.nodes[component]["members"]:
                    ranks[member] = rank
        return ranks

    def _order_layers(self, graph: nx.DiGraph, ranks: Dict[str, int]) -> List[List[str]]:
        input_order = {node: i for i, node in enumerate(graph.nodes)}
        layers: List[List[str]] = [[] for _ in range(max(ranks.values()) + 1)]
        for node in graph.nodes:
            layers[ranks[node]].append(node)

        slot: Dict[str, float] = {}
        for layer in layers:
            def barycenter(node: str) -> Tuple[float, int]:
                placed = [slot[p] for p in graph.predecessors(node) if p in slot]
                center = sum(placed) / len(placed) if placed else float(input_order[node])
                return center, input_order[node]

            layer.sort(key=barycenter)
            for i, node in enumerate(layer):
                slot[node] = float(i)
        return layers

    def _grid(self, layers: List[List[str]], rank_direction: str) -> Dict[str, Tuple[float, float]]:
        """
        Place ordered layers with ``nx.multipartite_layout``.

        The result is in grid units: rank index along the rank axis and slot
        index (layers centered on each other) across it.
        """
        ordered = nx.Graph()
        for rank, layer in enumerate(layers):
            ordered.add_nodes_from(layer, rank=rank)
        align = "vertical" if rank_direction == "LR" else "horizontal"
        pos = nx.multipartite_layout(ordered, subset_key="rank", align=align)

        # multipartite_layout rescales uniformly; recover the unit step from
        # adjacent ranks, or from adjacent slots when there is a single rank
        coords = np.array([pos[node] for node in ordered], dtype=float)
        rank_axis = 0 if align == "vertical" else 1
        if len(layers) > 1:
            unit = float(np.diff(np.unique(coords[:, rank_axis])).min())
        elif len(coords) > 1:
            unit = float(np.abs(coords[1, 1 - rank_axis] - coords[0, 1 - rank_axis]))
        else:
            unit = 1.0
        # Slots are whole or half steps
        grid = np.round((coords - coords.min(axis=0)) / unit * 2) / 2
        return {node: (float(x), float(y)) for node, (x, y) in zip(ordered, grid)}

    def __call__(
        self,
        nodes: List[LayoutNode],
        edges: List[Tuple[str, str]],
        rank_direction: str = "LR",
    ) -> Dict[str, Tuple[float, float]]:
        if not nodes:
            return {}
        sizes = {n.id: (n.width, n.height) for n in nodes}
        graph = nx.DiGraph()
        graph.add_nodes_from(sizes)
        graph.add_edges_from((s, t) for s, t in edges if s in sizes and t in sizes and s != t)

        layers = self._order_layers(graph, self._ranks(graph))
        grid = self._grid(layers, rank_direction)

        # One cell per node, sized to the largest node
        cell_w = max(w for w, _ in sizes.values())
        cell_h = max(h for _, h in sizes.values())
        if rank_direction == "LR":
            step_x, step_y = cell_w + self.rank_sep, cell_h + self.node_sep
        else:
            step_x, step_y = cell_w + self.node_sep, cell_h + self.rank_sep

        return {
            node: (gx * step_x + cell_w / 2, gy * step_y + cell_h / 2)
            for node, (gx, gy) in grid.items()
        }


def layout_nodes(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    direction: str = "Horizontal",
    engine: Optional[LayoutEngine] = None,
) -> List[GraphNode]:
    """Return the nodes with engine-computed positions."""
    engine = engine or HierarchicalLayout()
    rank_direction = RANK_DIRECTIONS.get(direction, "LR")
    placed = engine(
        [LayoutNode(n.id) for n in nodes],
        [(e.source, e.target) for e in edges],
        rank_direction,
    )

    result: List[GraphNode] = []
    for node in nodes:
        center = placed.get(node.id)
        if center is None:
            log.debug("Layout did not place %s", node.id)
            position = Position(0, 0)
        else:
            position = Position(center[0] - CENTER_OFFSET_X, center[1] - CENTER_OFFSET_Y)
        result.append(GraphNode(id=node.id, position=position, task=node.task, display=node.display))
    return result

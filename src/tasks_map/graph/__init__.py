from .builder import DEFAULT_NODE_SPACING, build_edges, build_node, build_nodes, display_config
from .layout import HierarchicalLayout, LayoutNode, layout_nodes
from .reconcile import Graph, merge, refresh_nodes, snapshot_from_graph

__all__ = [
    "DEFAULT_NODE_SPACING",
    "build_edges",
    "build_node",
    "build_nodes",
    "display_config",
    "HierarchicalLayout",
    "LayoutNode",
    "layout_nodes",
    "Graph",
    "merge",
    "refresh_nodes",
    "snapshot_from_graph",
]

"""
Tests for graph/builder.py, graph/layout.py and graph/reconcile.py.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from tasks_map.config import Settings
from tasks_map.graph import (
    DEFAULT_NODE_SPACING,
    Graph,
    HierarchicalLayout,
    LayoutNode,
    build_edges,
    build_nodes,
    layout_nodes,
    merge,
    refresh_nodes,
    snapshot_from_graph,
)
from tasks_map.graph.layout import CENTER_OFFSET_X, CENTER_OFFSET_Y
from tasks_map.models.graph import GraphData, Position, SavedEdge, SavedNode, Viewport
from tasks_map.models.task import Task


def _chain():
    return [
        Task(id="aaa111", text="First"),
        Task(id="bbb222", text="Second", incoming_links=["aaa111"]),
        Task(id="ccc333", text="Third", incoming_links=["bbb222"]),
    ]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class TestBuildNodes:
    def test_one_node_per_task(self):
        nodes = build_nodes(_chain(), Settings())
        assert [n.id for n in nodes] == ["aaa111", "bbb222", "ccc333"]
        assert all(n.id == n.task.id for n in nodes)

    def test_default_positions_stacked(self):
        nodes = build_nodes(_chain(), Settings())
        assert [(n.position.x, n.position.y) for n in nodes] == [
            (0, 0), (0, DEFAULT_NODE_SPACING), (0, 2 * DEFAULT_NODE_SPACING)
        ]

    def test_display_config_from_settings(self):
        settings = Settings(layout_direction="Vertical", show_tags=False)
        node = build_nodes(_chain(), settings)[0]
        data = node.to_dict()["data"]["displayConfig"]
        assert data["layoutDirection"] == "Vertical"
        assert data["showTags"] is False


class TestBuildEdges:
    def test_edge_identity(self):
        edges = build_edges([Task(id="B", incoming_links=["A"])])
        assert len(edges) == 1
        edge = edges[0]
        assert (edge.id, edge.source, edge.target) == ("A-B", "A", "B")
        assert edge.to_dict()["data"]["marker"] == "A-B"

    def test_dangling_source_kept(self):
        edges = build_edges([Task(id="B", incoming_links=["missing"])])
        assert [e.id for e in edges] == ["missing-B"]

    def test_chain(self):
        assert [e.id for e in build_edges(_chain())] == ["aaa111-bbb222", "bbb222-ccc333"]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class TestHierarchicalLayout:
    def test_horizontal_ranks_increase_left_to_right(self):
        tasks = _chain()
        nodes = layout_nodes(build_nodes(tasks, Settings()), build_edges(tasks), "Horizontal")
        xs = [n.position.x for n in nodes]
        assert xs[0] < xs[1] < xs[2]
        assert len({n.position.y for n in nodes}) == 1

    def test_vertical_ranks_increase_top_to_bottom(self):
        tasks = _chain()
        nodes = layout_nodes(build_nodes(tasks, Settings()), build_edges(tasks), "Vertical")
        ys = [n.position.y for n in nodes]
        assert ys[0] < ys[1] < ys[2]

    def test_siblings_share_rank(self):
        tasks = [
            Task(id="root00"),
            Task(id="left00", incoming_links=["root00"]),
            Task(id="right0", incoming_links=["root00"]),
        ]
        nodes = {n.id: n for n in layout_nodes(build_nodes(tasks, Settings()), build_edges(tasks))}
        assert nodes["left00"].position.x == nodes["right0"].position.x
        assert nodes["left00"].position.y != nodes["right0"].position.y

    def test_cycle_does_not_crash(self):
        tasks = [Task(id="a", incoming_links=["b"]), Task(id="b", incoming_links=["a"])]
        nodes = layout_nodes(build_nodes(tasks, Settings()), build_edges(tasks))
        assert len(nodes) == 2

    def test_offsets_subtracted(self):
        def engine(nodes, edges, rank_direction):
            return {"aaa111": (100.0, 200.0)}

        nodes = layout_nodes(build_nodes(_chain(), Settings()), [], engine=engine)
        assert (nodes[0].position.x, nodes[0].position.y) == (100 - CENTER_OFFSET_X, 200 - CENTER_OFFSET_Y)

    def test_unplaced_nodes_fall_back_to_origin(self):
        nodes = layout_nodes(build_nodes(_chain(), Settings()), [], engine=lambda n, e, d: {})
        assert all((n.position.x, n.position.y) == (0, 0) for n in nodes)

    def test_rank_direction_passed_to_engine(self):
        seen = []

        def engine(nodes, edges, rank_direction):
            seen.append(rank_direction)
            return {}

        layout_nodes([], [], "Vertical", engine=engine)
        layout_nodes([], [], "Horizontal", engine=engine)
        assert seen == ["TB", "LR"]

    def test_empty(self):
        assert HierarchicalLayout()([], []) == {}

    def test_chain_spacing(self):
        engine = HierarchicalLayout(rank_sep=50, node_sep=50)
        placed = engine(
            [LayoutNode("a"), LayoutNode("b"), LayoutNode("c")],
            [("a", "b"), ("b", "c")],
            "LR",
        )
        assert placed == {"a": (125.0, 60.0), "b": (425.0, 60.0), "c": (725.0, 60.0)}

    def test_single_node_centered_on_wider_layer(self):
        engine = HierarchicalLayout(rank_sep=50, node_sep=50)
        placed = engine(
            [LayoutNode("root"), LayoutNode("left"), LayoutNode("right")],
            [("root", "left"), ("root", "right")],
            "TB",
        )
        assert placed["root"][1] < placed["left"][1] == placed["right"][1]
        assert placed["root"][0] == (placed["left"][0] + placed["right"][0]) / 2
        assert abs(placed["right"][0] - placed["left"][0]) == 250 + 50


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def _snapshot() -> GraphData:
    stale = Task(id="n1", text="Deleted from vault", status="todo")
    return GraphData(
        nodes=[SavedNode(id="n1", position=Position(40, 70), task_id="n1", task_data=stale)],
        edges=[SavedEdge(id="x-n1", source="x", target="n1")],
        viewport=Viewport(5, 6, 1.5),
    )


class TestMerge:
    def test_saved_node_restored_without_fresh_task(self):
        graph = merge(_snapshot(), [], Settings())
        assert len(graph.nodes) == 1
        node = graph.nodes[0]
        assert (node.position.x, node.position.y) == (40, 70)
        assert node.task.text == "Deleted from vault"

    def test_edges_and_viewport_restored(self):
        graph = merge(_snapshot(), [], Settings())
        assert [e.id for e in graph.edges] == ["x-n1"]
        assert graph.viewport.zoom == 1.5

    def test_missing_task_data_filled_from_scan(self):
        snapshot = GraphData(nodes=[SavedNode(id="t1", position=Position(1, 2), task_id="t1")])
        graph = merge(snapshot, [Task(id="t1", text="Fresh")], Settings())
        assert graph.nodes[0].task.text == "Fresh"

    def test_node_without_any_task_dropped(self):
        snapshot = GraphData(nodes=[SavedNode(id="t1", position=Position(1, 2), task_id="t1")])
        assert merge(snapshot, [], Settings()).nodes == []


class TestRefresh:
    def test_refresh_updates_task_keeps_position(self):
        graph = merge(_snapshot(), [], Settings())
        fresh = Task(id="n1", text="Updated", status="done")
        nodes = refresh_nodes(graph.nodes, [fresh])
        assert nodes[0].task.text == "Updated"
        assert nodes[0].task.status == "done"
        assert (nodes[0].position.x, nodes[0].position.y) == (40, 70)

    def test_unmatched_node_kept(self):
        graph = merge(_snapshot(), [], Settings())
        nodes = refresh_nodes(graph.nodes, [Task(id="other")])
        assert nodes[0].task.text == "Deleted from vault"


class TestSnapshot:
    def test_full_state_serialized(self):
        graph = merge(_snapshot(), [], Settings())
        data = snapshot_from_graph(graph).to_dict()
        assert data["nodes"][0]["position"] == {"x": 40, "y": 70}
        assert data["nodes"][0]["taskId"] == "n1"
        assert data["nodes"][0]["taskData"]["text"] == "Deleted from vault"
        assert data["edges"] == [{"id": "x-n1", "source": "x", "target": "n1"}]
        assert data["viewport"] == {"x": 5, "y": 6, "zoom": 1.5}

    def test_empty_graph(self):
        data = snapshot_from_graph(Graph()).to_dict()
        assert data == {"nodes": [], "edges": [], "viewport": {"x": 0, "y": 0, "zoom": 1}}

    def test_json_round_trip(self):
        data = snapshot_from_graph(merge(_snapshot(), [], Settings()))
        assert GraphData.from_dict(data.to_dict()).to_dict() == data.to_dict()

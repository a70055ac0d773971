"""Tests for graph data structures, reachability and scheduling."""

import logging

import pytest

from flowrun.core.graph import (
    Edge,
    NodeKind,
    WorkflowGraph,
    WorkflowNode,
    reachable_from,
    topological_order,
)
from flowrun.utils.errors import WorkflowValidationError


def make_node(node_id, kind=NodeKind.ACTION):
    return WorkflowNode(id=node_id, kind=kind, app_id="recorder", name=node_id)


def edges(*pairs):
    return [Edge(source=source, target=target) for source, target in pairs]


def test_node_kind_from_raw():
    """Unknown node types map to UNKNOWN."""
    assert NodeKind.from_raw("trigger") == NodeKind.TRIGGER
    assert NodeKind.from_raw("action") == NodeKind.ACTION
    assert NodeKind.from_raw("note") == NodeKind.UNKNOWN
    assert NodeKind.from_raw(None) == NodeKind.UNKNOWN


def test_reachable_includes_start_and_follows_forward_edges():
    result = reachable_from(["t"], edges(("t", "a"), ("a", "b"), ("c", "a")))

    assert result == ["t", "a", "b"]


def test_reachable_orphan_nodes_excluded():
    """Nodes with no path from the trigger are never reachable."""
    result = reachable_from(["t"], edges(("x", "y")))

    assert result == ["t"]


def test_reachable_terminates_on_cycle():
    result = reachable_from(["t"], edges(("t", "a"), ("a", "b"), ("b", "a")))

    assert sorted(result) == ["a", "b", "t"]
    assert len(result) == 3


def test_topological_order_respects_edges():
    order = topological_order(
        ["t", "b", "a", "c"], edges(("t", "a"), ("a", "b"), ("b", "c"))
    )

    assert order == ["t", "a", "b", "c"]


def test_topological_order_ignores_edges_outside_set():
    order = topological_order(["t", "a"], edges(("t", "a"), ("ghost", "t")))

    assert order == ["t", "a"]


def test_topological_order_keeps_branch_discovery_order():
    order = topological_order(
        ["t", "left", "right"], edges(("t", "left"), ("t", "right"))
    )

    assert order == ["t", "left", "right"]


def test_topological_order_cycle_falls_back_to_original_order(caplog):
    """A cycle yields the input order, not an error."""
    ids = ["t", "a", "b"]
    with caplog.at_level(logging.WARNING, logger="flowrun.core.graph"):
        order = topological_order(ids, edges(("t", "a"), ("a", "b"), ("b", "a")))

    assert order == ids
    assert "cycle" in caplog.text


def test_graph_requires_trigger():
    with pytest.raises(WorkflowValidationError):
        WorkflowGraph.from_nodes_and_edges([make_node("a")], [])


def test_graph_uses_first_trigger(caplog):
    nodes = [
        make_node("t1", NodeKind.TRIGGER),
        make_node("t2", NodeKind.TRIGGER),
    ]

    with caplog.at_level(logging.WARNING, logger="flowrun.core.graph"):
        graph = WorkflowGraph.from_nodes_and_edges(nodes, [])

    assert graph.trigger_id == "t1"
    assert "2 trigger nodes" in caplog.text


def test_graph_execution_order_only_reachable():
    nodes = [
        make_node("t", NodeKind.TRIGGER),
        make_node("a"),
        make_node("orphan"),
    ]
    graph = WorkflowGraph.from_nodes_and_edges(nodes, edges(("t", "a")))

    assert graph.get_execution_order() == ["t", "a"]
    assert graph.has_node("orphan")
    assert graph.get_node("missing") is None


def test_get_children():
    nodes = [make_node("t", NodeKind.TRIGGER), make_node("a"), make_node("b")]
    graph = WorkflowGraph.from_nodes_and_edges(nodes, edges(("t", "a"), ("t", "b")))

    assert graph.get_children("t") == ["a", "b"]
    assert graph.get_children("a") == []

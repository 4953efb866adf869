"""Tests for script <-> graph conversion."""

from __future__ import annotations

import logging

import pytest

from yarnflow.graph import (
    DanglingReferenceError,
    DuplicateEdgeError,
    DuplicateNodeError,
    Layout,
    collapse,
    edge_id,
    expand,
    layout_position,
)
from yarnflow.models import DialogueGraph, GraphEdge, GraphNode, ScriptNode


def _node(node_id: str) -> GraphNode:
    return GraphNode(id=node_id)


def _edge(source: str, target: str, label: str = "", eid: str | None = None) -> GraphEdge:
    return GraphEdge(
        id=eid or f"{source}->{target}:{label}", source=source, target=target, label=label
    )


class TestExpand:
    def test_one_node_per_script_node(self, sample_script: list[ScriptNode]) -> None:
        graph = expand(sample_script)

        assert [n.id for n in graph.nodes] == ["start", "friend", "fight", "gate"]

    def test_node_data_copied(self, sample_script: list[ScriptNode]) -> None:
        graph = expand(sample_script)

        gate = graph.get_node("gate")
        assert gate is not None
        assert gate.data.speaker == ""
        assert gate.data.text == "The gate swings open.\nYou step inside."

    def test_next_becomes_unlabeled_edge(self) -> None:
        graph = expand([ScriptNode(id="a", next="b"), ScriptNode(id="b")])

        assert len(graph.edges) == 1
        edge = graph.edges[0]
        assert (edge.source, edge.target, edge.label) == ("a", "b", "")

    def test_choices_become_labeled_edges_in_order(self, sample_script: list[ScriptNode]) -> None:
        graph = expand(sample_script)

        out = graph.outgoing("start")
        assert [(e.label, e.target) for e in out] == [
            ("A friend", "friend"),
            ("None of your business", "fight"),
        ]

    def test_positions_are_diagonal_by_default(self, sample_script: list[ScriptNode]) -> None:
        graph = expand(sample_script)

        assert [(n.position.x, n.position.y) for n in graph.nodes] == [
            (0.0, 0.0),
            (200.0, 80.0),
            (400.0, 160.0),
            (600.0, 240.0),
        ]

    def test_custom_layout(self) -> None:
        graph = expand([ScriptNode(id="a"), ScriptNode(id="b")], layout=Layout(x_step=10, y_step=5))

        assert graph.nodes[1].position.x == 10
        assert graph.nodes[1].position.y == 5

    def test_edge_ids_unique_for_repeated_targets(self) -> None:
        script = [
            ScriptNode.model_validate(
                {
                    "id": "a",
                    "choices": [{"text": "One", "next": "b"}, {"text": "Two", "next": "b"}],
                }
            ),
            ScriptNode(id="b"),
        ]

        graph = expand(script)

        assert len({e.id for e in graph.edges}) == 2

    def test_dangling_next_raises(self) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            expand([ScriptNode(id="a", next="missing")])

        assert exc_info.value.node_id == "missing"
        assert "node 'a'" in str(exc_info.value)

    def test_dangling_choice_raises(self) -> None:
        script = [
            ScriptNode.model_validate({"id": "a", "choices": [{"text": "Go", "next": "nope"}]})
        ]

        with pytest.raises(DanglingReferenceError):
            expand(script)

    def test_duplicate_id_raises(self) -> None:
        with pytest.raises(DuplicateNodeError) as exc_info:
            expand([ScriptNode(id="a"), ScriptNode(id="a")])

        assert exc_info.value.count == 2

    def test_non_strict_keeps_dangling_edges(self) -> None:
        graph = expand([ScriptNode(id="a", next="missing")], strict=False)

        assert [(e.source, e.target) for e in graph.edges] == [("a", "missing")]

    def test_non_strict_keeps_duplicate_ids(self) -> None:
        graph = expand([ScriptNode(id="a"), ScriptNode(id="a")], strict=False)

        assert [n.id for n in graph.nodes] == ["a", "a"]

    def test_empty_script(self) -> None:
        assert expand([]) == DialogueGraph()


class TestEdgeId:
    def test_deterministic(self) -> None:
        assert edge_id("a", "b", "next") == edge_id("a", "b", "next")

    def test_discriminator_separates_next_and_choices(self) -> None:
        assert edge_id("a", "b", "next") != edge_id("a", "b", "c0")

    def test_source_boundary_is_unambiguous(self) -> None:
        # "a->b" + "c" and "a" + "b->c" would collide without the length prefix
        assert edge_id("a->b", "c", "next") != edge_id("a", "b->c", "next")

    def test_layout_position(self) -> None:
        pos = layout_position(3)

        assert (pos.x, pos.y) == (600.0, 240.0)


class TestCollapse:
    def test_round_trip(self, sample_script: list[ScriptNode]) -> None:
        assert collapse(*expand(sample_script)) == sample_script

    def test_round_trip_preserves_choice_order(self) -> None:
        script = [
            ScriptNode.model_validate(
                {
                    "id": "hub",
                    "choices": [
                        {"text": "Zeta", "next": "z"},
                        {"text": "Alpha", "next": "a"},
                        {"text": "Back", "next": "hub"},
                    ],
                }
            ),
            ScriptNode(id="z"),
            ScriptNode(id="a"),
        ]

        assert collapse(*expand(script)) == script

    def test_expand_is_idempotent(self, sample_script: list[ScriptNode]) -> None:
        first = expand(sample_script)
        second = expand(sample_script)

        assert first == second
        assert collapse(*first) == collapse(*second)

    def test_choice_precedence(self) -> None:
        script = [
            ScriptNode.model_validate(
                {"id": "a", "next": "c", "choices": [{"text": "Go", "next": "b"}]}
            ),
            ScriptNode(id="b"),
            ScriptNode(id="c"),
        ]

        collapsed = collapse(*expand(script))

        assert collapsed[0].next is None
        assert [(c.text, c.next) for c in collapsed[0].choices] == [("Go", "b")]
        assert "next" not in collapsed[0].to_record()

    def test_no_edges_is_terminal(self) -> None:
        [node] = collapse([_node("a")], [])

        assert node.is_terminal

    def test_single_unlabeled_edge_is_next(self) -> None:
        script = collapse([_node("a"), _node("b")], [_edge("a", "b")])

        assert script[0].next == "b"

    def test_unlabeled_siblings_of_choices_ignored(self) -> None:
        nodes = [_node("a"), _node("b"), _node("c")]
        edges = [_edge("a", "b"), _edge("a", "c", "Go")]

        [a, _, _] = collapse(nodes, edges)

        assert a.next is None
        assert [(c.text, c.next) for c in a.choices] == [("Go", "c")]

    def test_several_unlabeled_edges_collapse_to_terminal(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        nodes = [_node("a"), _node("b"), _node("c")]
        edges = [_edge("a", "b"), _edge("a", "c")]

        with caplog.at_level(logging.WARNING):
            [a, _, _] = collapse(nodes, edges)

        assert a.is_terminal
        assert any("collapse_ambiguous_next" in record.getMessage() for record in caplog.records)

    def test_accepts_any_iterables(self) -> None:
        script = collapse(iter([_node("a"), _node("b")]), (e for e in [_edge("a", "b")]))

        assert script[0].next == "b"

    def test_dangling_target_raises(self) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            collapse([_node("a")], [_edge("a", "ghost", eid="e1")])

        assert exc_info.value.node_id == "ghost"
        assert "edge 'e1'" in str(exc_info.value)

    def test_dangling_source_raises(self) -> None:
        with pytest.raises(DanglingReferenceError):
            collapse([_node("a")], [_edge("ghost", "a")])

    def test_duplicate_node_raises(self) -> None:
        with pytest.raises(DuplicateNodeError):
            collapse([_node("a"), _node("a")], [])

    def test_duplicate_edge_raises(self) -> None:
        nodes = [_node("a"), _node("b")]
        edges = [_edge("a", "b", eid="e"), _edge("b", "a", eid="e")]

        with pytest.raises(DuplicateEdgeError):
            collapse(nodes, edges)

    def test_does_not_modify_input(self, sample_script: list[ScriptNode]) -> None:
        graph = expand(sample_script)
        snapshot = (list(graph.nodes), list(graph.edges))

        collapse(*graph)

        assert (list(graph.nodes), list(graph.edges)) == snapshot

    def test_feedback_suggests_close_ids(self) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            expand([ScriptNode(id="start", next="strat")])

        feedback = exc_info.value.to_feedback()
        assert "Did you mean" in feedback
        assert "`start`" in feedback

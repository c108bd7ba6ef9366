"""Tests for GraphController: per-frame update, rewiring and link invariants."""

import logging

import pytest

from eventgraph.graph_editor import (
    GraphController, NodeNotFoundError, Point, ReleaseKind, ReleaseSignal,
    UnknownNodeKindError,
)
from eventgraph.graph_editor.events import pointer_down, pointer_move, pointer_up


def drag(controller, start, end, steps=3):
    """Press at start, move to end in a few steps, release at end."""
    controller.update(pointer_down(*start))
    sx, sy = start
    ex, ey = end
    for i in range(1, steps + 1):
        t = i / steps
        controller.update(pointer_move(sx + (ex - sx) * t, sy + (ey - sy) * t))
    controller.update(pointer_up(*end))


def links(controller):
    return [(n.predecessor, n.successor) for n in controller.nodes]


def assert_invariants(controller):
    assert controller.is_consistent()
    targets = [n.successor for n in controller.nodes if n.successor is not None]
    assert len(targets) == len({id(t) for t in targets})


@pytest.fixture
def ab(make_node):
    a = make_node(0, 0, title="A")
    b = make_node(300, 0, title="B")
    return a, b


class TestScenarios:
    def test_wire_output_to_input(self, controller, ab):
        a, b = ab
        drag(controller, (140, 38), (309, 38))
        assert a.successor is b
        assert b.predecessor is a
        assert_invariants(controller)

    def test_new_edge_into_port_evicts_old(self, controller, ab, make_node):
        a, b = ab
        drag(controller, (140, 38), (309, 38))
        c = make_node(0, 200, title="C")
        drag(controller, (c.output_anchor.x, c.output_anchor.y), (309, 38))
        assert b.predecessor is c
        assert c.successor is b
        assert a.successor is None
        assert_invariants(controller)

    def test_body_drag_moves_node_and_keeps_links(self, controller, ab):
        a, b = ab
        drag(controller, (140, 38), (309, 38))
        controller.update(pointer_down(50, 10))
        controller.update(pointer_move(60, 5, 10, -5))
        controller.update(pointer_up(60, 5))
        assert (a.x, a.y) == (10, -5)
        assert a.input_port.x == 12 and a.input_port.y == 26
        assert a.output_port.x == 143 and a.output_port.y == 26
        assert a.successor is b and b.predecessor is a
        assert (b.x, b.y) == (300, 0)

    def test_release_over_empty_canvas_changes_nothing(self, controller, ab, make_node):
        a, b = ab
        c = make_node(0, 200)
        drag(controller, (140, 38), (309, 38))
        before = links(controller)
        drag(controller, (c.output_anchor.x, c.output_anchor.y), (700, 500))
        assert links(controller) == before
        drag(controller, (b.input_anchor.x, b.input_anchor.y), (220, 120))
        assert links(controller) == before


class TestRewiring:
    def test_input_release_on_output_port(self, controller, ab):
        a, b = ab
        drag(controller, (309, 38), (140, 38))
        assert a.successor is b
        assert b.predecessor is a

    def test_output_rewire_evicts_old_successor(self, controller, ab, make_node):
        a, b = ab
        c = make_node(300, 200)
        drag(controller, (140, 38), (309, 38))
        drag(controller, (140, 38), (c.input_anchor.x, c.input_anchor.y))
        assert a.successor is c
        assert c.predecessor is a
        assert b.predecessor is None
        assert_invariants(controller)

    def test_input_rewire_evicts_old_predecessor_side(self, controller, ab, make_node):
        a, b = ab
        c = make_node(0, 200)
        drag(controller, (140, 38), (309, 38))
        # Drag out of B's input onto C's output: B's edge from A is replaced.
        drag(controller, (309, 38), (c.output_anchor.x, c.output_anchor.y))
        assert b.predecessor is c
        assert c.successor is b
        assert a.successor is None
        assert_invariants(controller)

    def test_eviction_when_upstream_already_linked(self, controller, make_node):
        m = make_node(0, 0)
        o = make_node(300, 0)
        n = make_node(300, 200)
        controller.connect(m, o)
        controller.resolve_release(n, ReleaseSignal(ReleaseKind.INPUT, m.output_anchor))
        assert n.predecessor is m
        assert m.successor is n
        assert o.predecessor is None
        assert_invariants(controller)

    def test_reconnecting_same_edge_is_noop(self, controller, ab):
        a, b = ab
        assert controller.connect(a, b)
        assert not controller.connect(a, b)
        assert a.successor is b

    def test_self_wiring_produces_no_edge(self, controller, make_node):
        a = make_node(0, 0)
        drag(controller, (140, 38), (a.input_anchor.x, a.input_anchor.y))
        assert a.successor is None
        assert a.predecessor is None
        drag(controller, (a.input_anchor.x, a.input_anchor.y), (140, 38))
        assert a.successor is None
        assert a.predecessor is None

    def test_connect_to_self_refused(self, controller, make_node):
        a = make_node(0, 0)
        assert not controller.connect(a, a)

    def test_overlapping_ports_resolve_by_collection_order(self, controller, make_node):
        a = make_node(0, 0)
        first = make_node(300, 0)
        second = make_node(300, 0)
        drag(controller, (140, 38), (309, 38))
        assert a.successor is first
        assert second.predecessor is None

    def test_chain_of_three(self, controller, make_node):
        a = make_node(0, 0)
        b = make_node(300, 0)
        c = make_node(600, 0)
        drag(controller, (140, 38), (309, 38))
        drag(controller, (440, 38), (609, 38))
        assert controller.chain(a) == [a, b, c]
        assert controller.heads() == [a]
        assert [(u, d) for u, d in controller.edges()] == [(a, b), (b, c)]
        assert_invariants(controller)

    def test_update_reports_link_change(self, controller, make_node):
        a = make_node(0, 0)
        b = make_node(300, 0)
        controller.update(pointer_down(140, 38))
        assert controller.update(pointer_up(309, 38))
        assert a.successor is b


class TestCycles:
    def test_cycles_allowed_by_default(self, controller, ab):
        a, b = ab
        drag(controller, (140, 38), (309, 38))
        drag(controller, (440, 38), (9, 38))
        assert a.successor is b and b.successor is a
        assert a.predecessor is b and b.predecessor is a
        assert_invariants(controller)
        assert controller.chain(a) == [a, b]
        assert controller.heads() == []

    def test_cycles_refused_when_disabled(self, delay):
        controller = GraphController(allow_cycles=False)
        a = controller.add_node(delay, Point(0, 0))
        b = controller.add_node(delay, Point(300, 0))
        c = controller.add_node(delay, Point(600, 0))
        assert controller.connect(a, b)
        assert controller.connect(b, c)
        assert not controller.connect(c, a)
        assert c.successor is None and a.predecessor is None

    def test_cycle_closing_release_discarded_when_disabled(self, delay):
        controller = GraphController(allow_cycles=False)
        a = controller.add_node(delay, Point(0, 0))
        b = controller.add_node(delay, Point(300, 0))
        drag(controller, (140, 38), (309, 38))
        assert a.successor is b
        drag(controller, (440, 38), (9, 38))
        assert b.successor is None
        assert a.predecessor is None
        assert a.successor is b and b.predecessor is a
        assert controller.pending_wires() == []

    def test_would_create_cycle_ignores_evicted_edge(self, controller, make_node):
        a = make_node(0, 0)
        b = make_node(300, 0)
        c = make_node(600, 0)
        controller.connect(a, b)
        controller.connect(b, c)
        controller.connect(c, a)
        # Linking c → b evicts b's edge from a, so the loop is b → c → b.
        assert controller.would_create_cycle(c, b)
        controller.disconnect(c)
        assert not controller.would_create_cycle(a, c)
        assert controller.would_create_cycle(c, a)


class TestNodeLifecycle:
    def test_add_node_uses_default_size(self, controller, delay):
        n = controller.add_node(delay, Point(10, 20))
        assert (n.x, n.y, n.width, n.height) == (10, 20, 150, 60)
        assert n.predecessor is None and n.successor is None

    def test_configured_size_used_for_kinds_without_one(self, delay):
        controller = GraphController(default_size=(200.0, 80.0))
        n = controller.add_node(delay, Point(0, 0))
        assert (n.width, n.height) == (200.0, 80.0)
        assert n.output_port.x == 200 - 15 - 2

    def test_add_node_by_kind_name(self, controller):
        n = controller.add_node("delay", Point(0, 0))
        assert n.kind.name == "delay"

    def test_add_unknown_kind_raises(self, controller):
        with pytest.raises(UnknownNodeKindError):
            controller.add_node("nope", Point(0, 0))

    def test_remove_node_clears_both_sides(self, controller, make_node):
        a = make_node(0, 0)
        b = make_node(300, 0)
        c = make_node(600, 0)
        controller.connect(a, b)
        controller.connect(b, c)
        controller.remove_node(b)
        assert b not in controller
        assert a.successor is None
        assert c.predecessor is None
        assert b.predecessor is None and b.successor is None
        assert_invariants(controller)

    def test_remove_missing_node_raises(self, controller, make_node):
        a = make_node(0, 0)
        controller.remove_node(a)
        with pytest.raises(NodeNotFoundError):
            controller.remove_node(a)

    def test_stale_release_is_discarded(self, controller, ab):
        a, b = ab
        controller.remove_node(a)
        changed = controller.resolve_release(
            a, ReleaseSignal(ReleaseKind.OUTPUT, b.input_anchor))
        assert changed is False
        assert b.predecessor is None
        assert a.successor is None

    def test_node_removed_mid_drag(self, controller, ab):
        a, b = ab
        controller.update(pointer_down(140, 38))
        controller.remove_node(a)
        controller.update(pointer_up(309, 38))
        assert b.predecessor is None
        assert controller.pending_wires() == []

    def test_get_node(self, controller, make_node):
        a = make_node(0, 0)
        assert controller.get_node(a.node_id) is a
        assert controller.get_node("missing") is None

    def test_disconnect(self, controller, ab):
        a, b = ab
        controller.connect(a, b)
        assert controller.disconnect(a)
        assert a.successor is None and b.predecessor is None
        assert not controller.disconnect(a)


class TestUpdateReporting:
    def test_pending_wire_while_dragging(self, controller, ab):
        a, _ = ab
        controller.update(pointer_down(140, 38))
        controller.update(pointer_move(250, 90))
        assert controller.pending_wires() == [(a.output_anchor, Point(250, 90))]
        controller.update(pointer_up(250, 90))
        assert controller.pending_wires() == []

    def test_notifications(self, controller, ab):
        a, b = ab
        seen = []
        controller.on_change(seen.append)
        drag(controller, (140, 38), (309, 38))
        drag(controller, (50, 10), (60, 20))
        controller.remove_node(b)
        assert "connect" in seen
        assert "move" in seen
        assert seen[-1] == "remove_node"

    def test_update_returns_false_when_nothing_changes(self, controller, ab):
        assert controller.update(pointer_down(700, 700)) is False
        assert controller.update(pointer_up(700, 700)) is False

    def test_link_changes_are_logged(self, controller, ab, caplog):
        with caplog.at_level(logging.INFO, logger="eventgraph"):
            drag(controller, (140, 38), (309, 38))
        assert any("Linked" in r.getMessage() for r in caplog.records)

    def test_to_dict_records_links_by_id(self, controller, ab):
        a, b = ab
        controller.connect(a, b)
        d = controller.to_dict()
        assert d["allow_cycles"] is True
        by_id = {n["node_id"]: n for n in d["nodes"]}
        assert by_id[a.node_id]["successor"] == b.node_id
        assert by_id[b.node_id]["predecessor"] == a.node_id

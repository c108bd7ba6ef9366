"""Event graph model and controller.

Pure Python, no Qt dependency.  GraphController owns the node collection and
is the only thing that mutates links.  Nodes run their own pointer state
machines; the controller feeds them events and resolves the release signals
they return.

Link rules
----------
Each node has at most one predecessor and one successor, and
`a.successor is b` ⇔ `b.predecessor is a` after every call that returns.
Connecting into an occupied port evicts the old edge instead of adding a
second one:

  A → B, then C.output dropped on B.input   ⇒   C → B, A.successor is None

Release resolution
------------------
A release point is tested against the matching port of every *other* node in
collection order; the first containing port wins.  Overlapping ports resolve
by that order, not by distance or paint order.  No containing port, or a
release from a node that has since been removed, changes nothing.

Cycles (A → B → A) are allowed unless the controller was built with
allow_cycles=False, in which case a cycle-closing release is discarded.
"""

from __future__ import annotations
import logging
from typing import Callable, Optional, Union

from .errors import NodeNotFoundError
from .events import PointerEvent
from .geometry import Point
from .node import Node, ReleaseKind, ReleaseSignal
from .node_kinds import NodeKind, get_kind

log = logging.getLogger(__name__)

DEFAULT_NODE_SIZE = (150.0, 60.0)


def _label(node: Node) -> str:
    return f"{node.title}[{node.node_id[:8]}]"


class GraphController:
    """Mutable chain graph: nodes + predecessor/successor links."""

    def __init__(self, allow_cycles: bool = True,
                 default_size: tuple[float, float] = DEFAULT_NODE_SIZE):
        self.nodes: list[Node] = []
        self.allow_cycles = allow_cycles
        self.default_size = default_size
        self._listeners: list[Callable] = []

    # -- Change notification --

    def on_change(self, callback: Callable) -> None:
        self._listeners.append(callback)

    def notify(self, source=None) -> None:
        for cb in self._listeners:
            cb(source)

    # -- Node accessors --

    def __contains__(self, node: Node) -> bool:
        return any(n is node for n in self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.node_id == node_id), None)

    def add_node(self, kind: Union[NodeKind, str], position: Point,
                 size: Optional[tuple[float, float]] = None,
                 title: str = "") -> Node:
        """Create an unlinked node of `kind` with its top-left at position."""
        if isinstance(kind, str):
            kind = get_kind(kind)
        width, height = size or kind.default_size or self.default_size
        node = Node(kind=kind, x=position.x, y=position.y,
                    width=width, height=height, title=title)
        self.insert_node(node)
        return node

    def insert_node(self, node: Node) -> None:
        if node in self:
            return
        # A node from elsewhere must not drag foreign links in.
        node.predecessor = None
        node.successor = None
        node.cancel_interaction()
        self.nodes.append(node)
        log.info("Added node %s at (%.0f, %.0f)", _label(node), node.x, node.y)
        self.notify("add_node")

    def remove_node(self, node: Node) -> None:
        """Remove node and clear the links on both sides of it."""
        self._require(node)
        self._unlink_in(node)
        self._unlink_out(node)
        node.cancel_interaction()
        self.nodes = [n for n in self.nodes if n is not node]
        log.info("Removed node %s", _label(node))
        self.notify("remove_node")

    def _require(self, node: Node) -> None:
        if node not in self:
            raise NodeNotFoundError(f"node {_label(node)} is not in this graph")

    # -- Links --

    def _unlink_out(self, node: Node) -> None:
        old = node.successor
        if old is not None:
            old.predecessor = None
            node.successor = None

    def _unlink_in(self, node: Node) -> None:
        old = node.predecessor
        if old is not None:
            old.successor = None
            node.predecessor = None

    def would_create_cycle(self, upstream: Node, downstream: Node) -> bool:
        """True if linking upstream → downstream closes a loop.

        Walks successors from downstream.  Edges the link would evict are
        ignored: the walk stops if it comes back to downstream.
        """
        seen = {id(downstream)}
        cur = downstream.successor
        while cur is not None and id(cur) not in seen:
            if cur is upstream:
                return True
            seen.add(id(cur))
            cur = cur.successor
        return upstream is downstream

    def connect(self, upstream: Node, downstream: Node) -> bool:
        """Link upstream → downstream, evicting whatever either port held.

        Returns True if the links changed.  Self links, and cycle-closing
        links when cycles are disallowed, are refused with False.
        """
        self._require(upstream)
        self._require(downstream)
        if upstream is downstream:
            return False
        if upstream.successor is downstream:
            return False
        if not self.allow_cycles and self.would_create_cycle(upstream, downstream):
            log.info("Refused %s → %s: would close a cycle",
                     _label(upstream), _label(downstream))
            return False

        # Evict the old edge out of upstream and into downstream before linking.
        self._unlink_out(upstream)
        self._unlink_in(downstream)
        upstream.successor = downstream
        downstream.predecessor = upstream
        log.info("Linked %s → %s", _label(upstream), _label(downstream))
        self.notify("connect")
        return True

    def disconnect(self, upstream: Node) -> bool:
        """Remove the edge leaving upstream.  Returns True if there was one."""
        self._require(upstream)
        downstream = upstream.successor
        if downstream is None:
            return False
        self._unlink_out(upstream)
        log.info("Unlinked %s → %s", _label(upstream), _label(downstream))
        self.notify("disconnect")
        return True

    def edges(self) -> list[tuple[Node, Node]]:
        """(upstream, downstream) for every link, in collection order."""
        return [(n, n.successor) for n in self.nodes if n.successor is not None]

    def pending_wires(self) -> list[tuple[Point, Point]]:
        """(start, end) of every in-progress wiring drag."""
        return [w for n in self.nodes if (w := n.wire_preview()) is not None]

    def heads(self) -> list[Node]:
        return [n for n in self.nodes if n.predecessor is None]

    def chain(self, head: Node) -> list[Node]:
        """head and its successors, stopping at the end or at a repeat."""
        out: list[Node] = []
        seen: set[int] = set()
        cur: Optional[Node] = head
        while cur is not None and id(cur) not in seen:
            out.append(cur)
            seen.add(id(cur))
            cur = cur.successor
        return out

    def is_consistent(self) -> bool:
        """Check the two-sided link invariant over the whole collection."""
        for n in self.nodes:
            if n.successor is not None and n.successor.predecessor is not n:
                return False
            if n.predecessor is not None and n.predecessor.successor is not n:
                return False
            if n.successor is not None and n.successor not in self:
                return False
            if n.predecessor is not None and n.predecessor not in self:
                return False
        return True

    # -- Hit testing --

    def port_owner_at(self, pos: Point, kind: ReleaseKind,
                      exclude: Optional[Node] = None) -> Optional[Node]:
        """First node (collection order) whose port contains pos.

        kind is the kind of release being resolved: an INPUT release is
        dropped on an *output* port and vice versa.
        """
        for m in self.nodes:
            if m is exclude:
                continue
            port = m.output_port if kind is ReleaseKind.INPUT else m.input_port
            if port.contains(pos):
                return m
        return None

    # -- Per-frame update --

    def update(self, event: PointerEvent) -> bool:
        """Feed one pointer event to every node and resolve their releases.

        Each node's release is fully resolved, evictions included, before the
        next node sees the event.  Returns True if any node moved or any link
        changed.
        """
        moved = False
        linked = False
        for node in list(self.nodes):
            if node not in self:
                continue
            before = (node.x, node.y)
            signal = node.handle_event(event)
            if (node.x, node.y) != before:
                moved = True
            if signal is not None and self.resolve_release(node, signal):
                linked = True
        if moved:
            self.notify("move")
        return moved or linked

    def resolve_release(self, node: Node, signal: ReleaseSignal) -> bool:
        """Apply one release signal.  Returns True if the links changed."""
        if node not in self:
            log.debug("Discarded release from removed node %s", _label(node))
            return False
        target = self.port_owner_at(signal.pos, signal.kind, exclude=node)
        if target is None:
            log.debug("Release at (%.1f, %.1f) hit no port", signal.pos.x, signal.pos.y)
            return False
        if signal.kind is ReleaseKind.INPUT:
            return self.connect(target, node)
        return self.connect(node, target)

    # -- Snapshot --

    def to_dict(self) -> dict:
        return {
            "allow_cycles": self.allow_cycles,
            "nodes": [n.to_dict() for n in self.nodes],
        }

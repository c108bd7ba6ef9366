"""Graph node and its pointer interaction state machine.

Pure Python, no Qt dependency.

Layout (scene units), recomputed by layout() after every move/resize:

  ┌──────────────────────────────┐
  │ title_rect (drag handle)     │  y+1 .. y+1+TITLE_H
  ├──────────────────────────────┤
  │[in]                      [out]│  ports: PORT_SIZE squares, top at y + h/2 + 1
  └──────────────────────────────┘

Interaction states:
  IDLE                → pointer-down on title / input port / output port
  DRAGGING_BODY       → move translates the node; up returns to IDLE
  WIRING_FROM_INPUT   → up returns to IDLE and emits an INPUT release signal
  WIRING_FROM_OUTPUT  → up returns to IDLE and emits an OUTPUT release signal

A node never looks at other nodes.  Release signals are resolved by
GraphController, which owns all link mutation.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .events import PointerEvent, PointerKind
from .geometry import Point, Rect
from .node_kinds import NodeKind


# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

PORT_SIZE       = 15.0
PORT_INSET      = 2.0     # gap between port and node edge
TITLE_H         = 20.0
TITLE_INSET     = 1.0

# Ports sit at y + h/2 + 1, so h >= 2 * TITLE_H keeps them below the title.
# Two ports plus insets need 2 * (PORT_SIZE + PORT_INSET); the rest is room
# for the body widget.
MIN_NODE_WIDTH  = 60.0
MIN_NODE_HEIGHT = 2 * TITLE_H


class DragState(Enum):
    IDLE               = "idle"
    DRAGGING_BODY      = "dragging_body"
    WIRING_FROM_INPUT  = "wiring_from_input"
    WIRING_FROM_OUTPUT = "wiring_from_output"


class ReleaseKind(Enum):
    INPUT  = "input"    # wire dragged out of this node's input port
    OUTPUT = "output"   # wire dragged out of this node's output port


@dataclass(frozen=True)
class ReleaseSignal:
    kind: ReleaseKind
    pos: Point


def clamp_size(width: float, height: float) -> tuple[float, float]:
    return max(width, MIN_NODE_WIDTH), max(height, MIN_NODE_HEIGHT)


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Node:
    """One vertex of the chain.

    kind         – NodeKind supplying title, default size and parameter fields.
    x, y         – top-left corner (scene coords).
    width/height – clamped to MIN_NODE_WIDTH / MIN_NODE_HEIGHT.
    params       – kind parameter values (e.g. {"delay": 1.0}).
    predecessor / successor – non-owning links; kept mutually consistent by
                   GraphController.

    Nodes compare by identity: two nodes with equal fields are still
    different vertices.
    """
    kind:   NodeKind
    x:      float = 0.0
    y:      float = 0.0
    width:  float = 150.0
    height: float = 60.0
    title:  str = ""
    params: dict = field(default_factory=dict)
    node_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    predecessor: Optional["Node"] = field(default=None, repr=False)
    successor:   Optional["Node"] = field(default=None, repr=False)

    state:   DragState = field(default=DragState.IDLE, repr=False)
    pointer: Optional[Point] = field(default=None, repr=False)

    input_port:  Rect = field(init=False, repr=False)
    output_port: Rect = field(init=False, repr=False)

    def __post_init__(self):
        self.width, self.height = clamp_size(self.width, self.height)
        if not self.title:
            self.title = self.kind.title or self.kind.name
        self.params = self.kind.deserialize_params(self.params)
        self.layout()

    # -- Geometry --

    def layout(self) -> None:
        port_y = self.y + self.height * 0.5 + 1.0
        self.input_port = Rect(self.x + PORT_INSET, port_y, PORT_SIZE, PORT_SIZE)
        self.output_port = Rect(self.x + self.width - PORT_SIZE - PORT_INSET,
                                port_y, PORT_SIZE, PORT_SIZE)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def title_rect(self) -> Rect:
        return Rect(self.x + TITLE_INSET, self.y + TITLE_INSET,
                    self.width - 2 * TITLE_INSET, TITLE_H)

    @property
    def body_rect(self) -> Rect:
        """Area between the ports below the title, for the kind's widget."""
        top = self.y + TITLE_INSET + TITLE_H + 10.0
        left = self.x + PORT_INSET + PORT_SIZE + 3.0
        return Rect(left, top, self.width - 2 * (left - self.x), 20.0)

    @property
    def input_anchor(self) -> Point:
        return self.input_port.center

    @property
    def output_anchor(self) -> Point:
        return self.output_port.center

    def move_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy
        self.layout()

    def move_to(self, x: float, y: float) -> None:
        self.x, self.y = x, y
        self.layout()

    def resize(self, width: float, height: float) -> None:
        self.width, self.height = clamp_size(width, height)
        self.layout()

    # -- Interaction --

    @property
    def is_wiring(self) -> bool:
        return self.state in (DragState.WIRING_FROM_INPUT, DragState.WIRING_FROM_OUTPUT)

    def handle_event(self, event: PointerEvent) -> Optional[ReleaseSignal]:
        """Advance the state machine by one event.

        Returns a ReleaseSignal on pointer-up after a wiring drag, else None.
        """
        if event.kind is PointerKind.DOWN:
            self._on_down(event.pos)
            return None
        if event.kind is PointerKind.MOVE:
            self._on_move(event)
            return None
        if event.kind is PointerKind.UP:
            return self._on_up(event.pos)
        return None

    def _on_down(self, pos: Point) -> None:
        # Title wins over ports; a press never starts two gestures.
        if self.title_rect.contains(pos):
            self.state = DragState.DRAGGING_BODY
        elif self.input_port.contains(pos):
            self.state = DragState.WIRING_FROM_INPUT
        elif self.output_port.contains(pos):
            self.state = DragState.WIRING_FROM_OUTPUT
        else:
            self.state = DragState.IDLE
        self.pointer = pos if self.state is not DragState.IDLE else None

    def _on_move(self, event: PointerEvent) -> None:
        if self.state is DragState.IDLE:
            return
        if self.state is DragState.DRAGGING_BODY:
            delta = event.delta
            if delta is None:
                delta = event.pos - (self.pointer or event.pos)
            self.move_by(delta.x, delta.y)
        self.pointer = event.pos

    def _on_up(self, pos: Point) -> Optional[ReleaseSignal]:
        state = self.state
        self.state = DragState.IDLE
        self.pointer = None
        if state is DragState.WIRING_FROM_INPUT:
            return ReleaseSignal(ReleaseKind.INPUT, pos)
        if state is DragState.WIRING_FROM_OUTPUT:
            return ReleaseSignal(ReleaseKind.OUTPUT, pos)
        return None

    def cancel_interaction(self) -> None:
        self.state = DragState.IDLE
        self.pointer = None

    def wire_preview(self) -> Optional[tuple[Point, Point]]:
        """(start, end) of the provisional wire while wiring, else None.

        The curve always runs output-side → input-side, so when wiring from
        the input port the live pointer is the start.
        """
        if self.pointer is None:
            return None
        if self.state is DragState.WIRING_FROM_OUTPUT:
            return self.output_anchor, self.pointer
        if self.state is DragState.WIRING_FROM_INPUT:
            return self.pointer, self.input_anchor
        return None

    # -- Serialisation --

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "kind": self.kind.name,
            "title": self.title,
            "x": self.x, "y": self.y,
            "width": self.width, "height": self.height,
            "params": self.kind.serialize_params(self.params),
            "predecessor": self.predecessor.node_id if self.predecessor else None,
            "successor": self.successor.node_id if self.successor else None,
        }

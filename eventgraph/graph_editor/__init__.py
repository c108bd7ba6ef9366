"""Event graph editor package.

Public surface:
  GraphController         – owns the nodes, runs the per-frame update, rewires
  Node, DragState, ReleaseKind, ReleaseSignal  – node + interaction state
  NodeKind, DelayKind, FieldSpec, register_kind, get_kind, available_kinds
  PointerEvent, PointerKind, PointerButton     – consumed input
  Point, Rect             – geometry
  edge_curve              – wire control points
  GraphEditorWindow / NodeGraphCanvas live in their own modules (Qt).
"""

from .errors import GraphError, NodeNotFoundError, UnknownNodeKindError
from .events import PointerEvent, PointerKind, PointerButton
from .geometry import Point, Rect
from .graph_model import GraphController
from .node import Node, DragState, ReleaseKind, ReleaseSignal
from .node_kinds import (
    NodeKind, DelayKind, FieldSpec,
    register_kind, get_kind, available_kinds,
)
from .wiring import edge_curve

__all__ = [
    "GraphController", "Node", "DragState", "ReleaseKind", "ReleaseSignal",
    "NodeKind", "DelayKind", "FieldSpec",
    "register_kind", "get_kind", "available_kinds",
    "PointerEvent", "PointerKind", "PointerButton",
    "Point", "Rect", "edge_curve",
    "GraphError", "NodeNotFoundError", "UnknownNodeKindError",
]

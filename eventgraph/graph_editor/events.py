"""Pointer events consumed by the graph controller.

The canvas translates Qt mouse events into these; tests build them directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .geometry import Point


class PointerKind(Enum):
    DOWN = "down"
    MOVE = "move"
    UP   = "up"


class PointerButton(Enum):
    PRIMARY   = "primary"
    SECONDARY = "secondary"   # context menu; handled by the shell
    MIDDLE    = "middle"


@dataclass(frozen=True)
class PointerEvent:
    """One primitive input event in canvas (scene) coordinates.

    delta is the frame-to-frame pointer movement for MOVE events.  When None,
    nodes derive it from the previous pointer position they saw.
    """
    kind: PointerKind
    pos: Point
    delta: Optional[Point] = None
    button: PointerButton = PointerButton.PRIMARY


def pointer_down(x: float, y: float,
                 button: PointerButton = PointerButton.PRIMARY) -> PointerEvent:
    return PointerEvent(PointerKind.DOWN, Point(x, y), button=button)


def pointer_move(x: float, y: float, dx: Optional[float] = None,
                 dy: Optional[float] = None) -> PointerEvent:
    delta = Point(dx, dy) if dx is not None and dy is not None else None
    return PointerEvent(PointerKind.MOVE, Point(x, y), delta=delta)


def pointer_up(x: float, y: float,
               button: PointerButton = PointerButton.PRIMARY) -> PointerEvent:
    return PointerEvent(PointerKind.UP, Point(x, y), button=button)

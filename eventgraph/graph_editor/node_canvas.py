"""Node graph canvas widget.

A QWidget that renders a GraphController and feeds it pointer events.
Handles:
  - Left button: translated to PointerEvents and passed to the controller,
    which drags nodes by their title bar and wires ports
  - Pan (middle-mouse drag)
  - Zoom (mouse wheel)
  - Right-click: context_menu_requested(scene_pos, global_pos) for the window
  - Delete key: remove the node last pressed on
  - Inline parameter widgets built from each node kind's fields()

Coordinate spaces:
  scene  – logical coordinates stored in Node.x / .y; what the controller sees
  view   – screen pixels; scene_to_view / view_to_scene convert between them
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QSizePolicy, QFormLayout, QLabel, QDoubleSpinBox, QSpinBox,
    QCheckBox, QLineEdit,
)
from PySide6.QtCore import Qt, QPointF, QRectF, QPoint, Signal
from PySide6.QtGui import (
    QPainter, QPen, QBrush, QColor, QPainterPath, QFont,
    QMouseEvent, QWheelEvent, QKeyEvent,
)

from .events import PointerEvent, PointerKind
from .geometry import Point, Rect
from .graph_model import GraphController
from .node import Node
from .node_kinds import FieldSpec
from .wiring import edge_curve, distance_to_curve


# ---------------------------------------------------------------------------
# Visual constants
# ---------------------------------------------------------------------------

GRID_STEP       = 40
WIRE_HIT_DIST   = 6.0

# Colours
C_BG            = QColor("#0d1117")
C_GRID          = QColor("#1c2333")
C_NODE_BG       = QColor("#1a2236")
C_NODE_BORDER   = QColor("#2a3a5c")
C_NODE_ACTIVE   = QColor("#3a7bd5")
C_NODE_HEADER   = QColor("#1f6f7f")    # cyan title bar
C_PORT          = QColor("#6bcb77")
C_PORT_LINKED   = QColor("#f9ca24")
C_WIRE          = QColor("#ffffff")
C_WIRE_PREVIEW  = QColor("#aaaaaa")
C_TEXT          = QColor("#e6e6e6")

FIELD_STYLE = "background: #0d1117; color: #ccc; border: 1px solid #2a3a5c;"


def _qp(p: Point) -> QPointF:
    return QPointF(p.x, p.y)


def _qr(r: Rect) -> QRectF:
    return QRectF(r.x, r.y, r.width, r.height)


def _wire_path(start: Point, end: Point) -> QPainterPath:
    p0, c0, c1, p1 = edge_curve(start, end)
    path = QPainterPath(_qp(p0))
    path.cubicTo(_qp(c0), _qp(c1), _qp(p1))
    return path


# ---------------------------------------------------------------------------
# Node graph canvas
# ---------------------------------------------------------------------------

class NodeGraphCanvas(QWidget):
    """Interactive chain editor canvas.

    Signals:
      graph_changed()                          – links, positions or params changed
      context_menu_requested(object, QPoint)   – (scene Point, global_pos) on right-click
    """

    graph_changed = Signal()
    context_menu_requested = Signal(object, QPoint)

    def __init__(self, controller: GraphController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.controller.on_change(self._on_controller_change)

        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(400, 300)

        # Viewport transform
        self._origin = QPointF(0.0, 0.0)  # scene point at canvas (0,0)
        self._scale  = 1.0

        # Interaction state
        self._pan_start: Optional[QPointF] = None
        self._pan_origin_start: Optional[QPointF] = None
        self._left_down = False
        self._last_scene: Optional[Point] = None
        self.focus_node: Optional[Node] = None

        # Inline parameter widgets: node_id → QWidget
        self._settings_widgets: dict = {}
        self._rebuild_settings_widgets()

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def frame_all(self) -> None:
        """Zoom/pan to fit all nodes in view."""
        nodes = self.controller.nodes
        if not nodes:
            return
        margin = 60
        sx = min(n.x for n in nodes) - margin
        sy = min(n.y for n in nodes) - margin
        ex = max(n.x + n.width for n in nodes) + margin
        ey = max(n.y + n.height for n in nodes) + margin
        sw, sh = ex - sx, ey - sy
        self._scale = min(self.width() / sw, self.height() / sh, 2.0)
        self._origin = QPointF(sx, sy)
        self.update()

    def node_at(self, p: Point) -> Optional[Node]:
        """Topmost (last painted) node whose rect contains p."""
        for node in reversed(self.controller.nodes):
            if node.rect.contains(p):
                return node
        return None

    def edge_at(self, p: Point) -> Optional[Node]:
        """Upstream node of the wire passing near p, if any."""
        for up, down in self.controller.edges():
            if distance_to_curve(p, up.output_anchor, down.input_anchor) < WIRE_HIT_DIST:
                return up
        return None

    # -----------------------------------------------------------------------
    # Coordinate helpers
    # -----------------------------------------------------------------------

    def scene_to_view(self, p: QPointF) -> QPointF:
        return QPointF(
            (p.x() - self._origin.x()) * self._scale,
            (p.y() - self._origin.y()) * self._scale,
        )

    def view_to_scene(self, p: QPointF) -> QPointF:
        return QPointF(
            p.x() / self._scale + self._origin.x(),
            p.y() / self._scale + self._origin.y(),
        )

    def _scene_point(self, event) -> Point:
        sp = self.view_to_scene(QPointF(event.position()))
        return Point(sp.x(), sp.y())

    # -----------------------------------------------------------------------
    # Controller bridge
    # -----------------------------------------------------------------------

    def _on_controller_change(self, source) -> None:
        if source in ("add_node", "remove_node"):
            self._rebuild_settings_widgets()
            if self.focus_node is not None and self.focus_node not in self.controller:
                self.focus_node = None
        self.graph_changed.emit()
        self.update()

    def _send(self, event: PointerEvent) -> None:
        self.controller.update(event)
        self.update()

    # -----------------------------------------------------------------------
    # Settings widgets
    # -----------------------------------------------------------------------

    def _rebuild_settings_widgets(self) -> None:
        live_ids = {n.node_id for n in self.controller.nodes}
        for nid in list(self._settings_widgets.keys()):
            if nid not in live_ids:
                w = self._settings_widgets.pop(nid)
                w.setParent(None)
                w.deleteLater()

        for node in self.controller.nodes:
            if node.node_id not in self._settings_widgets:
                w = _make_settings_widget(node, self, self._on_node_param_changed)
                if w:
                    w.hide()
                    self._settings_widgets[node.node_id] = w

    def settings_widget(self, node: Node) -> Optional[QWidget]:
        return self._settings_widgets.get(node.node_id)

    def _on_node_param_changed(self, node_id: str, key: str, value) -> None:
        node = self.controller.get_node(node_id)
        if node:
            node.params[key] = value
            self.graph_changed.emit()

    def _place_settings_widgets(self) -> None:
        """Position settings widgets over their node bodies (view space)."""
        for node in self.controller.nodes:
            w = self._settings_widgets.get(node.node_id)
            if w is None:
                continue
            body = node.body_rect
            tl = self.scene_to_view(QPointF(body.x, body.y))
            w.setGeometry(int(tl.x()), int(tl.y()),
                          max(int(body.width * self._scale), 1),
                          max(int(body.height * self._scale), 1))
            w.show()

    # -----------------------------------------------------------------------
    # Paint
    # -----------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        painter.fillRect(self.rect(), C_BG)
        self._draw_grid(painter)

        painter.save()
        painter.translate(-self._origin.x() * self._scale,
                          -self._origin.y() * self._scale)
        painter.scale(self._scale, self._scale)

        self._draw_connections(painter)
        self._draw_nodes(painter)
        self._draw_preview_wires(painter)

        painter.restore()
        painter.end()

        self._place_settings_widgets()

    def _draw_grid(self, painter: QPainter) -> None:
        pen = QPen(C_GRID)
        pen.setWidth(1)
        painter.setPen(pen)
        step = GRID_STEP * self._scale
        x = (-self._origin.x() * self._scale) % step
        while x < self.width():
            painter.drawLine(int(x), 0, int(x), self.height())
            x += step
        y = (-self._origin.y() * self._scale) % step
        while y < self.height():
            painter.drawLine(0, int(y), self.width(), int(y))
            y += step

    def _draw_connections(self, painter: QPainter) -> None:
        painter.setPen(QPen(C_WIRE, 3.0))
        painter.setBrush(Qt.NoBrush)
        for up, down in self.controller.edges():
            painter.drawPath(_wire_path(up.output_anchor, down.input_anchor))

    def _draw_preview_wires(self, painter: QPainter) -> None:
        painter.setPen(QPen(C_WIRE_PREVIEW, 2.0, Qt.DashLine))
        painter.setBrush(Qt.NoBrush)
        for start, end in self.controller.pending_wires():
            painter.drawPath(_wire_path(start, end))

    def _draw_nodes(self, painter: QPainter) -> None:
        for node in self.controller.nodes:
            self._draw_node(painter, node)

    def _draw_node(self, painter: QPainter, node: Node) -> None:
        r = _qr(node.rect)
        active = node is self.focus_node

        body = QPainterPath()
        body.addRoundedRect(r, 6, 6)
        painter.fillPath(body, C_NODE_BG)
        painter.setPen(QPen(C_NODE_ACTIVE if active else C_NODE_BORDER,
                            2.0 if active else 1.0))
        painter.setBrush(Qt.NoBrush)
        painter.drawRoundedRect(r, 6, 6)

        # Title
        title = _qr(node.title_rect)
        header = QPainterPath()
        header.addRoundedRect(title, 5, 5)
        painter.fillPath(header, C_NODE_HEADER)
        font = QFont("Segoe UI", 8)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QPen(C_TEXT))
        painter.drawText(title, Qt.AlignCenter, node.title)

        # Ports
        for port, linked in ((node.input_port, node.predecessor is not None),
                             (node.output_port, node.successor is not None)):
            col = C_PORT_LINKED if linked else C_PORT
            painter.setBrush(QBrush(col))
            painter.setPen(QPen(col.darker(130), 1))
            painter.drawRoundedRect(_qr(port), 3, 3)

    # -----------------------------------------------------------------------
    # Mouse events
    # -----------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        scene_pos = self._scene_point(event)

        if event.button() == Qt.MiddleButton:
            self._pan_start = QPointF(event.position())
            self._pan_origin_start = QPointF(self._origin)
            return

        if event.button() == Qt.RightButton:
            self.context_menu_requested.emit(scene_pos, event.globalPosition().toPoint())
            return

        if event.button() == Qt.LeftButton:
            self._left_down = True
            self._last_scene = scene_pos
            self.focus_node = self.node_at(scene_pos)
            self._send(PointerEvent(PointerKind.DOWN, scene_pos))

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._pan_start is not None:
            delta = event.position() - self._pan_start
            self._origin = QPointF(
                self._pan_origin_start.x() - delta.x() / self._scale,
                self._pan_origin_start.y() - delta.y() / self._scale,
            )
            self.update()
            return

        if self._left_down:
            scene_pos = self._scene_point(event)
            delta = scene_pos - (self._last_scene or scene_pos)
            self._last_scene = scene_pos
            self._send(PointerEvent(PointerKind.MOVE, scene_pos, delta=delta))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MiddleButton:
            self._pan_start = None
            return

        if event.button() == Qt.LeftButton and self._left_down:
            self._left_down = False
            self._last_scene = None
            self._send(PointerEvent(PointerKind.UP, self._scene_point(event)))

    def wheelEvent(self, event: QWheelEvent) -> None:
        delta = event.angleDelta().y()
        factor = 1.12 if delta > 0 else 1 / 1.12
        mouse_scene = self.view_to_scene(QPointF(event.position()))
        self._scale = max(0.25, min(4.0, self._scale * factor))
        # Keep mouse point fixed
        self._origin = QPointF(
            mouse_scene.x() - event.position().x() / self._scale,
            mouse_scene.y() - event.position().y() / self._scale,
        )
        self.update()

    # -----------------------------------------------------------------------
    # Keyboard
    # -----------------------------------------------------------------------

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key_Delete and self.focus_node is not None:
            if self.focus_node in self.controller:
                self.controller.remove_node(self.focus_node)
            self.focus_node = None
        elif event.key() == Qt.Key_F:
            self.frame_all()
        else:
            super().keyPressEvent(event)


# ---------------------------------------------------------------------------
# Inline settings widgets
# ---------------------------------------------------------------------------

def _make_field_editor(node: Node, f: FieldSpec, on_change):
    value = node.params.get(f.key, f.default)

    if f.ftype == "bool":
        cb = QCheckBox()
        cb.setChecked(bool(value))
        cb.toggled.connect(lambda checked: on_change(node.node_id, f.key, checked))
        return cb

    if f.ftype == "int":
        spin = QSpinBox()
        spin.setRange(int(f.minimum if f.minimum is not None else -1_000_000),
                      int(f.maximum if f.maximum is not None else 1_000_000))
        spin.setValue(int(value))
        spin.setStyleSheet(FIELD_STYLE)
        spin.valueChanged.connect(lambda v: on_change(node.node_id, f.key, int(v)))
        return spin

    if f.ftype == "float":
        spin = QDoubleSpinBox()
        spin.setRange(f.minimum if f.minimum is not None else -1e6,
                      f.maximum if f.maximum is not None else 1e6)
        spin.setDecimals(2)
        spin.setSingleStep(0.1)
        spin.setValue(float(value))
        spin.setStyleSheet(FIELD_STYLE)
        spin.valueChanged.connect(lambda v: on_change(node.node_id, f.key, float(v)))
        return spin

    edit = QLineEdit(str(value))
    edit.setStyleSheet(FIELD_STYLE)
    edit.textChanged.connect(lambda text: on_change(node.node_id, f.key, text))
    return edit


def _make_settings_widget(node: Node, parent, on_change) -> Optional[QWidget]:
    """Build a compact inline panel from the node kind's fields.

    Returns None if the kind declares no fields.
    """
    fields = node.kind.fields()
    if not fields:
        return None

    w = QWidget(parent)
    w.setStyleSheet("background: transparent; color: #ccc;")
    lay = QFormLayout(w)
    lay.setContentsMargins(0, 0, 0, 0)
    lay.setSpacing(2)
    w.editors = {}
    for f in fields:
        editor = _make_field_editor(node, f, on_change)
        w.editors[f.key] = editor
        lay.addRow(QLabel(f.label), editor)
    return w

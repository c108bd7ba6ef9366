"""Event graph editor window.

Layout:
  ┌──────────────────────────────────────────────────────┐
  │ [Add Node ▾]  [Frame All]              3 nodes · 1 link │  ← toolbar
  ├──────────────────────────────────────────────────────┤
  │                                                      │
  │              NodeGraphCanvas                         │
  │                                                      │
  └──────────────────────────────────────────────────────┘

Right-click on the canvas opens a context menu:
  Add <Kind>          – one entry per registered kind, created at the click
  Delete node         – when the click is over a node
  Remove connection   – when the click is over a wire
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
    QMenu, QToolButton, QLabel, QFrame,
)
from PySide6.QtCore import Qt, QPoint, QPointF, QTimer

from ..core.settings import Settings
from .geometry import Point
from .graph_model import GraphController
from .node import Node
from .node_canvas import NodeGraphCanvas
from .node_kinds import NodeKind, available_kinds


class GraphEditorWindow(QWidget):
    """Top-level editor.

    Parameters
    ----------
    controller   GraphController to edit; a fresh one is built from settings
                 when omitted.
    settings     Settings (default node size, cycle policy).
    """

    def __init__(self, controller: Optional[GraphController] = None,
                 settings: Optional[Settings] = None, parent=None):
        super().__init__(parent, Qt.Window)
        self.setWindowTitle("Event Graph Editor")
        self.resize(1100, 700)

        self.settings = settings or Settings()
        self.controller = controller or GraphController(
            allow_cycles=self.settings.allow_cycles,
            default_size=self.settings.node_size,
        )

        self._build_ui()

        self.setStyleSheet("""
            QWidget { background-color: #16213e; color: #eeeeee; }
            QPushButton, QToolButton {
                background-color: #1a1a2e; color: #eeeeee;
                border: 1px solid #2a3a5c; border-radius: 4px;
                padding: 3px 8px;
            }
            QPushButton:hover, QToolButton:hover { background-color: #2a3a5c; }
            QMenu { background: #1a2236; color: #eee; border: 1px solid #2a3a5c; }
            QMenu::item:selected { background: #3a7bd5; }
            QLabel { background: transparent; }
        """)

    # -----------------------------------------------------------------------
    # UI construction
    # -----------------------------------------------------------------------

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(4)

        self.canvas = NodeGraphCanvas(self.controller, self)
        self.canvas.graph_changed.connect(self._refresh_status)
        self.canvas.context_menu_requested.connect(self._on_context_menu)

        toolbar = QHBoxLayout()
        toolbar.setSpacing(6)

        self._add_btn = QToolButton()
        self._add_btn.setText("＋ Add Node  ▾")
        self._add_btn.setPopupMode(QToolButton.InstantPopup)
        self._add_menu = QMenu(self)
        for kind in available_kinds():
            self._add_menu.addAction(kind.title or kind.name).triggered.connect(
                lambda checked=False, k=kind: self._add_node_at_centre(k))
        self._add_btn.setMenu(self._add_menu)
        toolbar.addWidget(self._add_btn)

        toolbar.addSpacing(8)

        frame_btn = QPushButton("Frame All")
        frame_btn.setToolTip("Zoom to fit all nodes  [F]")
        frame_btn.clicked.connect(self.canvas.frame_all)
        toolbar.addWidget(frame_btn)

        toolbar.addStretch()

        self._status_lbl = QLabel("")
        self._status_lbl.setStyleSheet("color: #888; font-size: 10px;")
        toolbar.addWidget(self._status_lbl)

        outer.addLayout(toolbar)

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setStyleSheet("color: #2a3a5c;")
        outer.addWidget(sep)

        outer.addWidget(self.canvas, 1)
        self._refresh_status()

    def _refresh_status(self) -> None:
        n_nodes = len(self.controller.nodes)
        n_links = len(self.controller.edges())
        self._status_lbl.setText(
            f"{n_nodes} node{'s' if n_nodes != 1 else ''} · "
            f"{n_links} link{'s' if n_links != 1 else ''}")

    @property
    def status_text(self) -> str:
        return self._status_lbl.text()

    # -----------------------------------------------------------------------
    # Node add / remove
    # -----------------------------------------------------------------------

    def add_node(self, kind: NodeKind, pos: Point) -> Node:
        return self.controller.add_node(kind, pos)

    def _add_node_at_centre(self, kind: NodeKind) -> Node:
        c = self.canvas.view_to_scene(
            QPointF(self.canvas.width() / 2, self.canvas.height() / 2))
        w, h = kind.default_size or self.controller.default_size
        return self.add_node(kind, Point(c.x() - w / 2, c.y() - h / 2))

    # -----------------------------------------------------------------------
    # Context menu
    # -----------------------------------------------------------------------

    def build_context_menu(self, scene_pos: Point) -> QMenu:
        menu = QMenu(self)
        for kind in available_kinds():
            menu.addAction(f"Add {kind.title or kind.name}").triggered.connect(
                lambda checked=False, k=kind: self.add_node(k, scene_pos))

        node = self.canvas.node_at(scene_pos)
        upstream = None if node else self.canvas.edge_at(scene_pos)
        if node is not None or upstream is not None:
            menu.addSeparator()
        if node is not None:
            menu.addAction("Delete node").triggered.connect(
                lambda checked=False: self._delete_node(node))
        elif upstream is not None:
            menu.addAction("Remove connection").triggered.connect(
                lambda checked=False: self.controller.disconnect(upstream))
        return menu

    def _on_context_menu(self, scene_pos: Point, global_pos: QPoint) -> None:
        self.build_context_menu(scene_pos).exec(global_pos)

    def _delete_node(self, node: Node) -> None:
        if node in self.controller:
            self.controller.remove_node(node)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        QTimer.singleShot(50, self.canvas.frame_all)

# File: knotpad/ui/canvas_view.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Lienzo (QGraphicsView): eventos Qt -> InteractionController; dibuja curvas + marcadores.
# Notes:
#   - Escena 1:1 con el viewport (px). El resize reajusta sceneRect y dispara recompute.
#   - El lienzo NO calcula geometría: solo lee SceneStore.all_curves() y MarkerLayer.markers().
from __future__ import annotations

from PySide6.QtCore import QPointF, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPen
from PySide6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsView,
)

from knotpad.core.controller import InteractionController
from knotpad.core.edit_mode import EditMode
from knotpad.core.marker_layer import MarkerLayer
from knotpad.core.models import Point
from knotpad.ui.qpath_render import circle_at, curve_to_qpath, square_at
from knotpad.utils.log import get_logger

log = get_logger(__name__)


class CanvasView(QGraphicsView):
    mode_changed = Signal(str)  # EditMode.value
    scene_changed = Signal(str)  # reason

    THEME_PRESETS = {
        "light": {
            "bg": (255, 255, 255),
            "anchor": (0, 153, 255),
        },
        "dark": {
            "bg": (30, 30, 30),
            "anchor": (0, 170, 255),
        },
    }

    ANCHOR_SIZE_PX = 5.0

    Z_CURVE = 0
    Z_ANCHOR = 1
    Z_MARKER = 10

    def __init__(self, controller: InteractionController, parent=None, *, theme_id: str = "light"):
        super().__init__(parent)

        self._controller = controller
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)

        self._curve_items: list[QGraphicsItem] = []
        self._marker_items: list[QGraphicsItem] = []
        self._pointer_down = False

        self._theme_id = "light"
        self._bg_color = QColor(*self.THEME_PRESETS["light"]["bg"])
        self._anchor_color = QColor(*self.THEME_PRESETS["light"]["anchor"])
        self.set_theme(theme_id)

        self.setRenderHint(QPainter.Antialiasing, True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setViewportUpdateMode(QGraphicsView.FullViewportUpdate)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setTransformationAnchor(QGraphicsView.NoAnchor)

        controller.subscribe_scene(self._on_scene_changed)
        controller.subscribe_mode(self._on_mode_changed)
        controller.engine.marker_layer.subscribe(self._on_markers_changed)

    # ------------------------------ Tema
    def theme_id(self) -> str:
        return self._theme_id

    def set_theme(self, theme_id: str) -> None:
        tid = (theme_id or "").strip().lower()
        if tid not in self.THEME_PRESETS:
            tid = "light"
        preset = self.THEME_PRESETS[tid]
        self._theme_id = tid
        self._bg_color = QColor(*preset["bg"])
        self._anchor_color = QColor(*preset["anchor"])
        self._rebuild_curve_items()
        self.viewport().update()

    def drawBackground(self, painter: QPainter, rect) -> None:
        painter.fillRect(rect, self._bg_color)

    # ------------------------------ Sync modelo -> items
    def _on_scene_changed(self, reason: str) -> None:
        self._rebuild_curve_items()
        self.scene_changed.emit(reason)

    def _on_mode_changed(self, mode: EditMode) -> None:
        self.mode_changed.emit(mode.value)

    def _on_markers_changed(self, layer: MarkerLayer) -> None:
        for it in self._marker_items:
            self._scene.removeItem(it)
        self._marker_items.clear()
        for m in layer.markers():
            dot = QGraphicsEllipseItem(circle_at(m.center, m.radius))
            dot.setBrush(QBrush(QColor(m.fill)))
            dot.setPen(QPen(Qt.NoPen))
            dot.setZValue(self.Z_MARKER)
            self._scene.addItem(dot)
            self._marker_items.append(dot)

    def _rebuild_curve_items(self) -> None:
        for it in self._curve_items:
            self._scene.removeItem(it)
        self._curve_items.clear()

        anchor_pen = QPen(self._anchor_color)
        anchor_pen.setCosmetic(True)
        anchor_brush = QBrush(self._bg_color)
        for curve in self._controller.store.all_curves():
            item = QGraphicsPathItem(curve_to_qpath(curve))
            pen = QPen(QColor(curve.style.stroke_color))
            pen.setWidthF(float(curve.style.stroke_width))
            pen.setCapStyle(Qt.RoundCap)
            pen.setJoinStyle(Qt.RoundJoin)
            item.setPen(pen)
            item.setBrush(QBrush(Qt.NoBrush))
            item.setZValue(self.Z_CURVE)
            self._scene.addItem(item)
            self._curve_items.append(item)

            # Anclas visibles (todas las curvas están "seleccionadas" para edición).
            for a in curve.anchors:
                sq = QGraphicsRectItem(square_at(a.point, self.ANCHOR_SIZE_PX))
                sq.setPen(anchor_pen)
                sq.setBrush(anchor_brush)
                sq.setZValue(self.Z_ANCHOR)
                self._scene.addItem(sq)
                self._curve_items.append(sq)

    def curve_item_count(self) -> int:
        return sum(1 for it in self._curve_items if isinstance(it, QGraphicsPathItem))

    def marker_item_count(self) -> int:
        return len(self._marker_items)

    # ------------------------------ Eventos
    def _scene_point(self, event) -> Point:
        try:
            vp = event.position().toPoint()  # Qt6
        except AttributeError:
            vp = event.pos()
        sp: QPointF = self.mapToScene(vp)
        return Point(float(sp.x()), float(sp.y()))

    def _dispatch(self, fn, *args) -> None:
        # Nunca romper el loop de eventos por un error del núcleo.
        try:
            fn(*args)
        except Exception:
            log.exception("Error procesando evento en %s", getattr(fn, "__name__", fn))

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        self._pointer_down = True
        self._dispatch(self._controller.pointer_down, self._scene_point(event))
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        if not self._pointer_down:
            super().mouseMoveEvent(event)
            return
        self._dispatch(self._controller.pointer_drag, self._scene_point(event))
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if event.button() != Qt.LeftButton or not self._pointer_down:
            super().mouseReleaseEvent(event)
            return
        self._pointer_down = False
        self._dispatch(self._controller.pointer_up, self._scene_point(event))
        event.accept()

    def keyPressEvent(self, event) -> None:
        text = (event.text() or "").lower()
        if text and not event.isAutoRepeat() and text in ("d", "c"):
            self._dispatch(self._controller.key_down, text)
            event.accept()
            return
        super().keyPressEvent(event)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        size = self.viewport().size()
        self._scene.setSceneRect(0.0, 0.0, float(size.width()), float(size.height()))
        self._dispatch(self._controller.resize, float(size.width()), float(size.height()))

    def viewport_size(self) -> tuple[float, float]:
        size = self.viewport().size()
        return (float(size.width()), float(size.height()))

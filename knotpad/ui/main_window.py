# File: knotpad/ui/main_window.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Ventana principal: arma núcleo (store + motor + controlador) + lienzo + barra de estado.
# Notes: Las acciones del menú NO llevan shortcut: D/C los atiende el lienzo directamente.
from __future__ import annotations

import base64

from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import QLabel, QMainWindow, QStatusBar

from knotpad.core.controller import InteractionController
from knotpad.core.edit_mode import EditMode
from knotpad.core.intersection_engine import IntersectionEngine
from knotpad.core.marker_layer import MarkerLayer
from knotpad.core.scene_store import SceneStore
from knotpad.core.settings import AppSettings
from knotpad.core.version import APP_NAME, APP_VERSION
from knotpad.geom.provider import BezierGeometryProvider
from knotpad.ui.canvas_view import CanvasView
from knotpad.utils.log import get_logger

log = get_logger(__name__)

_MODE_TEXT = {
    EditMode.IDLE.value: "Edit mode",
    EditMode.DRAWING.value: "Drawing mode",
    EditMode.DRAGGING_ANCHOR.value: "Edit mode (arrastrando ancla)",
}


class MainWindow(QMainWindow):
    def __init__(self, settings: AppSettings | None = None) -> None:
        super().__init__()
        self.setWindowTitle("{} v{}".format(APP_NAME, APP_VERSION))
        self.resize(1000, 700)

        self._settings = settings if settings is not None else AppSettings.load()

        self.store = SceneStore()
        self.engine = IntersectionEngine(
            self.store,
            BezierGeometryProvider(samples=self._settings.flatten_samples),
            MarkerLayer(radius=self._settings.marker_radius, fill=self._settings.marker_fill),
        )
        self.controller = InteractionController(
            self.store,
            self.engine,
            simplify_tolerance=self._settings.simplify_tolerance,
            hit_tolerance=self._settings.hit_tolerance,
        )

        self._build_ui()
        self._build_menu()
        self._restore_ui_state()
        self._seeded = False

    def _build_ui(self) -> None:
        self._canvas = CanvasView(self.controller, self, theme_id=self._settings.canvas_theme)
        self.setCentralWidget(self._canvas)

        sb = QStatusBar(self)
        self._mode_label = QLabel(_MODE_TEXT[EditMode.IDLE.value], self)
        self._count_label = QLabel("", self)
        sb.addWidget(self._mode_label)
        sb.addPermanentWidget(self._count_label)
        self.setStatusBar(sb)

        self._canvas.mode_changed.connect(self._on_mode_changed)
        self._canvas.scene_changed.connect(lambda _reason: self._update_counts())
        self.engine.marker_layer.subscribe(lambda _layer: self._update_counts())
        self._canvas.setFocus()

    @property
    def canvas(self) -> CanvasView:
        return self._canvas

    def mode_text(self) -> str:
        return self._mode_label.text()

    def counts_text(self) -> str:
        return self._count_label.text()

    def _build_menu(self) -> None:
        m_edit = self.menuBar().addMenu("Edición")

        act_draw = QAction("Modo dibujo (D)", self)
        act_draw.triggered.connect(lambda: self.controller.key_down("d"))
        m_edit.addAction(act_draw)

        act_clear = QAction("Limpiar lienzo (C)", self)
        act_clear.triggered.connect(lambda: self.controller.key_down("c"))
        m_edit.addAction(act_clear)

        m_edit.addSeparator()

        act_knot = QAction("Agregar nudo por defecto", self)
        act_knot.triggered.connect(self._add_default_knot)
        m_edit.addAction(act_knot)

    # ----------------------------
    # Escena inicial
    # ----------------------------
    def seed_initial_scene(self) -> None:
        """Siembra el nudo por defecto (una sola vez, con el viewport ya dimensionado)."""
        if self._seeded or not self._settings.seed_default_knot:
            return
        self._seeded = True
        self._add_default_knot()

    def _add_default_knot(self) -> None:
        w, h = self._canvas.viewport_size()
        self.controller.seed_default_knot(w, h)

    # ----------------------------
    # Status bar
    # ----------------------------
    def _on_mode_changed(self, mode: str) -> None:
        self._mode_label.setText(_MODE_TEXT.get(mode, mode))

    def _update_counts(self) -> None:
        self._count_label.setText(
            "Nudos: {}  Intersecciones: {}".format(len(self.store), len(self.engine.marker_layer))
        )

    # ----------------------------
    # UI state persistente (geometry)
    # ----------------------------
    def _restore_ui_state(self) -> None:
        try:
            if self._settings.ui_main_geometry_b64:
                raw = base64.b64decode(self._settings.ui_main_geometry_b64.encode("ascii"), validate=False)
                self.restoreGeometry(raw)
        except ValueError:
            # No romper arranque
            log.debug("Geometry guardada inválida", exc_info=True)

    def _persist_ui_state(self) -> None:
        self._settings.ui_main_geometry_b64 = base64.b64encode(bytes(self.saveGeometry())).decode("ascii")
        self._settings.save()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._persist_ui_state()
        event.accept()

# File: knotpad/core/controller.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Controlador de interacción: eventos de puntero/teclado -> mutaciones + recompute.
# Notes:
#   - Sin Qt: recibe puntos en coordenadas de escena y teclas como str.
#   - Hit-test delegado al proveedor de geometría (el controlador no mide distancias).
#   - Durante el arrastre de un ancla se recalcula TODO en cada paso (no solo al soltar).
from __future__ import annotations

from typing import Callable, Optional

from knotpad.core.edit_mode import EditMode, EditState, Selection
from knotpad.core.intersection_engine import IntersectionEngine
from knotpad.core.models import Anchor, Curve, CurveId, CurveStyle, Point
from knotpad.core.scene_store import SceneStore
from knotpad.core.shapes import default_knot_radius, make_default_knot
from knotpad.core.version import (
    FREEHAND_STROKE_COLOR,
    FREEHAND_STROKE_WIDTH,
    HIT_TOLERANCE,
    SIMPLIFY_TOLERANCE,
)
from knotpad.geom.simplify import simplify
from knotpad.utils.log import get_logger

log = get_logger(__name__)

MODE_KEY = "d"
CLEAR_KEY = "c"


class InteractionController:
    def __init__(
        self,
        store: SceneStore,
        engine: IntersectionEngine,
        *,
        simplify_tolerance: float = SIMPLIFY_TOLERANCE,
        hit_tolerance: float = HIT_TOLERANCE,
    ) -> None:
        self.store = store
        self.engine = engine
        self.simplify_tolerance = float(simplify_tolerance)
        self.hit_tolerance = float(hit_tolerance)
        self.state = EditState()
        self._mode_listeners: list[Callable[[EditMode], None]] = []
        self._scene_listeners: list[Callable[[str], None]] = []

    # ----------------------------
    # Listeners (renderer / status bar)
    # ----------------------------
    def subscribe_mode(self, callback: Callable[[EditMode], None]) -> None:
        self._mode_listeners.append(callback)

    def subscribe_scene(self, callback: Callable[[str], None]) -> None:
        """callback(reason): la escena cambió y hay que redibujar curvas."""
        self._scene_listeners.append(callback)

    def _emit_scene(self, reason: str) -> None:
        for cb in list(self._scene_listeners):
            cb(reason)

    def _set_mode(self, mode: EditMode) -> None:
        if self.state.mode == mode:
            return
        self.state.mode = mode
        for cb in list(self._mode_listeners):
            cb(mode)

    @property
    def mode(self) -> EditMode:
        return self.state.mode

    @property
    def selection(self) -> Optional[Selection]:
        return self.state.selection

    def recompute(self) -> None:
        self.engine.recompute()

    # ----------------------------
    # Escena inicial
    # ----------------------------
    def seed_default_knot(self, width: float, height: float) -> CurveId:
        self.state.viewport_size = (float(width), float(height))
        knot = make_default_knot(Point(width / 2.0, height / 2.0), default_knot_radius(width, height))
        cid = self.store.add_curve(knot)
        self._emit_scene("seed")
        self.recompute()
        return cid

    # ----------------------------
    # Teclado
    # ----------------------------
    def key_down(self, key: str) -> None:
        k = str(key or "").strip().lower()
        if k == MODE_KEY:
            self.toggle_drawing()
        elif k == CLEAR_KEY:
            self.clear()

    def toggle_drawing(self) -> None:
        if self.state.drawing_enabled:
            # Salir del modo dibujo con un trazo a medias lo cierra igual.
            finished = self._finish_drawing()
            self._set_mode(EditMode.IDLE)
            log.info("Edit mode")
            if finished:
                self.recompute()
        else:
            self.state.reset_pointer()
            self._set_mode(EditMode.DRAWING)
            log.info("Drawing mode")

    def clear(self) -> None:
        self.store.clear()
        self.state.drawing_curve = None
        self.state.reset_pointer()
        self._set_mode(EditMode.IDLE)
        self._emit_scene("clear")
        # El motor vacía capa de marcadores e intersecciones.
        self.recompute()
        log.info("Canvas cleared")

    # ----------------------------
    # Puntero
    # ----------------------------
    def pointer_down(self, point: Point) -> None:
        point = Point.of(point)
        self.state.last_point = point

        if self.state.drawing_enabled:
            curve = Curve(
                anchors=[Anchor(point)],
                closed=False,
                style=CurveStyle(stroke_color=FREEHAND_STROKE_COLOR, stroke_width=FREEHAND_STROKE_WIDTH),
            )
            self.state.drawing_curve = self.store.add_curve(curve)
            self._emit_scene("draw_start")
            return

        hit = self.engine.geometry.hit_test(self.store.all_curves(), point, self.hit_tolerance)
        if hit is None:
            return
        if hit.kind == "anchor" and hit.anchor_index is not None:
            self.state.selection = Selection(hit.curve_id, hit.anchor_index)
        elif hit.kind == "stroke" and hit.location is not None:
            idx = self.store.insert_anchor(hit.curve_id, hit.location.segment_index, point)
            if idx is None:
                return
            self.state.selection = Selection(hit.curve_id, idx)
            self._emit_scene("anchor_inserted")
        else:
            return
        self._set_mode(EditMode.DRAGGING_ANCHOR)

    def pointer_drag(self, point: Point) -> None:
        point = Point.of(point)
        st = self.state
        if st.mode == EditMode.DRAWING and st.drawing_curve is not None:
            self.store.append_anchor(st.drawing_curve, point)
            self._emit_scene("draw_step")
            return

        if st.mode == EditMode.DRAGGING_ANCHOR and st.selection is not None:
            last = st.last_point if st.last_point is not None else point
            self.store.move_anchor(st.selection.curve_id, st.selection.anchor_index, point - last)
            st.last_point = point
            self._emit_scene("anchor_moved")
            self.recompute()

    def pointer_up(self, point: Optional[Point] = None) -> None:
        _ = point
        if self.state.mode == EditMode.DRAWING:
            self._finish_drawing()
        elif self.state.mode == EditMode.DRAGGING_ANCHOR:
            self._set_mode(EditMode.IDLE)
        self.state.reset_pointer()
        self.recompute()

    def _finish_drawing(self) -> bool:
        cid = self.state.drawing_curve
        self.state.drawing_curve = None
        if cid is None:
            return False
        curve = self.store.get_curve(cid)
        if curve is None:
            return False
        anchors = simplify(curve.points(), self.simplify_tolerance)
        self.store.replace_anchors(cid, anchors)
        self.store.set_closed(cid, True)
        log.debug("Trazo %s simplificado: %d anclas", cid, len(anchors))
        self._emit_scene("draw_end")
        return True

    # ----------------------------
    # Viewport
    # ----------------------------
    def resize(self, width: float, height: float) -> None:
        # No muta geometría; solo reposiciona marcadores si el sistema de coords cambió.
        self.state.viewport_size = (float(width), float(height))
        self.recompute()

"""
InteractionController: modos, dibujo a mano alzada, arrastre de anclas y teclado.
"""

import math

import pytest

from knotpad.core.controller import InteractionController
from knotpad.core.edit_mode import EditMode
from knotpad.core.models import Point
from knotpad.core.shapes import make_default_knot
from knotpad.geom.bezier import point_at


@pytest.fixture
def controller(store, engine):
    return InteractionController(store, engine)


@pytest.fixture
def seeded(controller):
    """Controlador con el nudo por defecto (800x600 -> centro (400,300), radio 150)."""
    cid = controller.seed_default_knot(800, 600)
    return controller, cid


def draw_circle(ctrl, center, radius, steps=60):
    pts = [
        Point(center.x + radius * math.cos(k / 10), center.y + radius * math.sin(k / 10))
        for k in range(steps)
    ]
    ctrl.pointer_down(pts[0])
    for p in pts[1:]:
        ctrl.pointer_drag(p)
    ctrl.pointer_up(pts[-1])
    return pts


class TestModes:
    def test_starts_idle(self, controller):
        assert controller.mode == EditMode.IDLE
        assert controller.selection is None

    def test_mode_key_toggles(self, controller):
        controller.key_down("d")
        assert controller.mode == EditMode.DRAWING
        controller.key_down("d")
        assert controller.mode == EditMode.IDLE

    def test_mode_key_is_case_insensitive(self, controller):
        controller.key_down("D")
        assert controller.mode == EditMode.DRAWING

    def test_other_keys_are_ignored(self, controller):
        controller.key_down("x")
        controller.key_down("")
        assert controller.mode == EditMode.IDLE

    def test_entering_drawing_clears_selection(self, seeded):
        ctrl, _ = seeded
        ctrl.pointer_down(Point(550, 300))
        assert ctrl.selection is not None
        ctrl.key_down("d")
        assert ctrl.mode == EditMode.DRAWING
        assert ctrl.selection is None

    def test_mode_listeners_fire_on_change(self, controller):
        seen = []
        controller.subscribe_mode(seen.append)
        controller.key_down("d")
        controller.key_down("d")
        assert seen == [EditMode.DRAWING, EditMode.IDLE]


class TestSeed:
    def test_default_knot_is_centered(self, seeded):
        ctrl, cid = seeded
        knot = ctrl.store.get_curve(cid)
        assert knot.closed
        assert knot.anchors[0].point == Point(550, 300)
        assert len(ctrl.engine.marker_layer) == 0


class TestDrawing:
    def test_freehand_stroke_is_simplified_and_closed(self, seeded):
        ctrl, knot_id = seeded
        ctrl.key_down("d")
        pts = draw_circle(ctrl, Point(550, 300), 60)

        curves = ctrl.store.all_curves()
        assert len(curves) == 2
        stroke = curves[-1]
        assert stroke.id != knot_id
        assert stroke.closed
        assert 2 <= len(stroke.anchors) < len(pts)
        # El modo dibujo sigue activo hasta volver a pulsar la tecla.
        assert ctrl.mode == EditMode.DRAWING

    def test_stroke_crossing_the_knot_yields_two_markers(self, seeded):
        ctrl, _ = seeded
        ctrl.key_down("d")
        draw_circle(ctrl, Point(550, 300), 60)
        centers = sorted(ctrl.engine.marker_layer.centers(), key=lambda p: p.y)
        assert len(centers) == 2
        assert centers[0].x == pytest.approx(538.0, abs=5.0)
        assert centers[0].y == pytest.approx(241.2, abs=5.0)
        assert centers[1].y == pytest.approx(358.8, abs=5.0)

    def test_stroke_is_open_until_pointer_up(self, controller):
        controller.key_down("d")
        controller.pointer_down(Point(0, 0))
        controller.pointer_drag(Point(10, 0))
        controller.pointer_drag(Point(10, 10))
        cid = controller.state.drawing_curve
        assert cid is not None
        assert not controller.store.get_curve(cid).closed
        assert len(controller.store.get_curve(cid).anchors) == 3

    def test_single_click_stroke_is_harmless(self, controller):
        controller.key_down("d")
        controller.pointer_down(Point(5, 5))
        controller.pointer_up(Point(5, 5))
        (curve,) = controller.store.all_curves()
        assert len(curve.anchors) == 1
        assert not curve.is_intersectable()
        assert len(controller.engine.marker_layer) == 0

    def test_leaving_drawing_mode_finishes_the_stroke(self, controller):
        controller.key_down("d")
        controller.pointer_down(Point(0, 0))
        for p in [(20, 0), (40, 5), (40, 30), (10, 30)]:
            controller.pointer_drag(Point(*p))
        controller.key_down("d")
        assert controller.mode == EditMode.IDLE
        assert controller.state.drawing_curve is None
        assert controller.store.all_curves()[0].closed

    def test_scene_listener_sees_the_stroke_lifecycle(self, controller):
        reasons = []
        controller.subscribe_scene(reasons.append)
        controller.key_down("d")
        controller.pointer_down(Point(0, 0))
        controller.pointer_drag(Point(10, 10))
        controller.pointer_up(Point(10, 10))
        assert reasons == ["draw_start", "draw_step", "draw_end"]


class TestEditing:
    def test_anchor_hit_starts_a_drag(self, seeded):
        ctrl, cid = seeded
        ctrl.pointer_down(Point(551, 300))
        assert ctrl.mode == EditMode.DRAGGING_ANCHOR
        assert ctrl.selection.curve_id == cid
        assert ctrl.selection.anchor_index == 0

        ctrl.pointer_drag(Point(561, 300))
        assert ctrl.store.get_curve(cid).anchors[0].point == Point(560, 300)

        ctrl.pointer_up(Point(561, 300))
        assert ctrl.mode == EditMode.IDLE
        assert ctrl.selection is None

    def test_stroke_hit_inserts_an_anchor(self, seeded):
        ctrl, cid = seeded
        knot = ctrl.store.get_curve(cid)
        before = len(knot.anchors)
        on_stroke = point_at(knot, 0.5)

        ctrl.pointer_down(on_stroke)

        assert len(knot.anchors) == before + 1
        assert ctrl.mode == EditMode.DRAGGING_ANCHOR
        assert ctrl.selection.anchor_index == 1
        assert knot.anchors[1].point == on_stroke

    def test_miss_stays_idle(self, seeded):
        ctrl, cid = seeded
        before = ctrl.store.get_curve(cid).points()
        ctrl.pointer_down(Point(5, 5))
        ctrl.pointer_drag(Point(50, 50))
        ctrl.pointer_up(Point(50, 50))
        assert ctrl.mode == EditMode.IDLE
        assert ctrl.store.get_curve(cid).points() == before

    def test_every_drag_step_recomputes(self, seeded, monkeypatch):
        ctrl, _ = seeded
        calls = []
        original = ctrl.engine.recompute
        monkeypatch.setattr(ctrl.engine, "recompute", lambda: calls.append(1) or original())

        ctrl.pointer_down(Point(550, 300))
        assert calls == []
        for dx in (2, 4, 6):
            ctrl.pointer_drag(Point(550 + dx, 300))
        assert len(calls) == 3
        ctrl.pointer_up(Point(556, 300))
        assert len(calls) == 4

    def test_markers_stay_live_while_dragging(self, seeded):
        ctrl, _ = seeded
        other = ctrl.store.add_curve(make_default_knot(Point(550, 300), 150))
        ctrl.recompute()
        assert len(ctrl.engine.marker_layer) == 2
        before = ctrl.engine.marker_layer.centers()

        # Ancla 0 del segundo nudo: (700, 300), lejos de los cruces.
        ctrl.pointer_down(Point(700, 300))
        assert ctrl.selection.curve_id == other
        ctrl.pointer_drag(Point(730, 300))
        assert len(ctrl.engine.marker_layer) == 2
        assert ctrl.engine.marker_layer.centers() == before
        ctrl.pointer_up(Point(730, 300))


class TestClearAndResize:
    def test_clear_from_idle(self, seeded):
        ctrl, _ = seeded
        ctrl.key_down("c")
        assert len(ctrl.store) == 0
        assert len(ctrl.engine.marker_layer) == 0
        assert ctrl.mode == EditMode.IDLE

    def test_clear_while_drawing(self, controller):
        controller.key_down("d")
        controller.pointer_down(Point(0, 0))
        controller.pointer_drag(Point(10, 0))
        controller.key_down("C")
        assert controller.mode == EditMode.IDLE
        assert controller.state.drawing_curve is None
        assert len(controller.store) == 0

    def test_clear_while_dragging(self, seeded):
        ctrl, _ = seeded
        ctrl.pointer_down(Point(550, 300))
        assert ctrl.mode == EditMode.DRAGGING_ANCHOR
        ctrl.key_down("c")
        assert ctrl.mode == EditMode.IDLE
        assert ctrl.selection is None
        # Un arrastre huérfano posterior no debe fallar.
        ctrl.pointer_drag(Point(560, 300))
        ctrl.pointer_up(Point(560, 300))
        assert len(ctrl.store) == 0

    def test_resize_does_not_move_geometry(self, seeded):
        ctrl, cid = seeded
        before = ctrl.store.get_curve(cid).points()
        ctrl.resize(1024, 768)
        assert ctrl.store.get_curve(cid).points() == before
        assert ctrl.state.viewport_size == (1024.0, 768.0)

    def test_resize_recomputes(self, seeded, monkeypatch):
        ctrl, _ = seeded
        calls = []
        original = ctrl.engine.recompute
        monkeypatch.setattr(ctrl.engine, "recompute", lambda: calls.append(1) or original())
        ctrl.resize(10, 10)
        assert len(calls) == 1

    def test_clear_also_empties_engine_intersections(self, seeded):
        ctrl, _ = seeded
        ctrl.store.add_curve(make_default_knot(Point(550, 300), 150))
        ctrl.recompute()
        assert len(ctrl.engine.intersections) == 2
        ctrl.key_down("c")
        assert ctrl.engine.intersections == []
        assert len(ctrl.engine.marker_layer) == 0

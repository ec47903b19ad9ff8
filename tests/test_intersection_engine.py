"""
IntersectionEngine: enumeración de pares no ordenados + reemplazo de la capa de marcadores.
"""

import pytest

from knotpad.core.intersection_engine import IntersectionEngine
from knotpad.core.marker_layer import MarkerLayer
from knotpad.core.models import Curve, Point
from knotpad.core.scene_store import SceneStore
from knotpad.core.shapes import make_default_knot


def closed_square(x0=0.0, y0=0.0, size=10.0):
    return Curve.from_points(
        [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)],
        closed=True,
    )


class TestPairEnumeration:
    def test_each_unordered_pair_queried_once(self, store, stub_engine, geometry):
        ids = [store.add_curve(closed_square(i * 3.0)) for i in range(3)]
        stub_engine.recompute()

        expected = {frozenset((a, b)) for i, a in enumerate(ids) for b in ids[i + 1:]}
        assert set(geometry.calls) == expected
        assert all(n == 1 for n in geometry.calls.values())
        assert len(geometry.ordered_calls) == 3

    def test_never_pairs_a_curve_with_itself(self, store, stub_engine, geometry):
        ids = [store.add_curve(closed_square()) for _ in range(4)]
        stub_engine.recompute()
        assert all(a != b for a, b in geometry.ordered_calls)
        assert len(geometry.ordered_calls) == 6
        assert set(ids) == {cid for pair in geometry.ordered_calls for cid in pair}

    def test_pair_order_follows_insertion_order(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        c = store.add_curve(closed_square())
        stub_engine.recompute()
        assert geometry.ordered_calls == [(a, b), (a, c), (b, c)]

    def test_single_curve_makes_no_calls(self, store, stub_engine, geometry):
        store.add_curve(closed_square())
        stub_engine.recompute()
        assert sum(geometry.calls.values()) == 0
        assert len(stub_engine.marker_layer) == 0

    def test_open_and_degenerate_curves_are_excluded(self, store, stub_engine, geometry):
        closed_a = store.add_curve(closed_square())
        store.add_curve(Curve.from_points([(0, 0), (5, 5), (9, 0)], closed=False))
        store.add_curve(Curve.from_points([(1, 1)], closed=True))
        closed_b = store.add_curve(closed_square(2.0))
        stub_engine.recompute()
        assert list(geometry.calls) == [frozenset((closed_a, closed_b))]


class TestMarkers:
    def test_two_overlapping_circles_give_two_markers(self, store, stub_engine, geometry):
        a = store.add_curve(make_default_knot(Point(0, 0), 100))
        b = store.add_curve(make_default_knot(Point(100, 0), 100))
        geometry.stub(a, b, [(50, -86.6), (50, 86.6)])

        points = stub_engine.recompute()

        assert len(points) == 2
        centers = stub_engine.marker_layer.centers()
        assert centers == [Point(50, -86.6), Point(50, 86.6)]
        assert {p.curves() for p in points} == {frozenset((a, b))}

    def test_marker_count_matches_points_without_dedup(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        c = store.add_curve(closed_square())
        # Coincidentes dentro de epsilon: igual se reportan por separado.
        geometry.stub(a, b, [(1, 1), (1, 1)])
        geometry.stub(a, c, [(1, 1 + 1e-12)])
        geometry.stub(b, c, [(4, 4), (5, 5), (6, 6)])

        points = stub_engine.recompute()
        assert len(points) == 6
        assert len(stub_engine.marker_layer) == 6

    def test_recompute_replaces_previous_markers(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        geometry.stub(a, b, [(1, 1), (2, 2), (3, 3)])
        stub_engine.recompute()
        assert len(stub_engine.marker_layer) == 3

        geometry.stub(a, b, [(7, 7)])
        stub_engine.recompute()
        assert stub_engine.marker_layer.centers() == [Point(7, 7)]

    def test_recompute_is_idempotent(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        geometry.stub(a, b, [(1, 2), (3, 4)])
        stub_engine.recompute()
        first = stub_engine.marker_layer.centers()
        first_handles = [m.handle for m in stub_engine.marker_layer.markers()]
        stub_engine.recompute()
        assert stub_engine.marker_layer.centers() == first
        # Las identidades de los marcadores pueden cambiar; los puntos no.
        assert [m.handle for m in stub_engine.marker_layer.markers()] != first_handles

    def test_clear_then_recompute_gives_no_markers(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        geometry.stub(a, b, [(1, 1)])
        stub_engine.recompute()
        store.clear()
        stub_engine.recompute()
        assert len(stub_engine.marker_layer) == 0
        assert stub_engine.intersections == []

    def test_listener_sees_only_the_final_marker_set(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        geometry.stub(a, b, [(1, 1), (2, 2)])
        stub_engine.recompute()

        seen = []
        stub_engine.marker_layer.subscribe(lambda layer: seen.append(layer.centers()))
        geometry.stub(a, b, [(9, 9)])
        stub_engine.recompute()
        assert seen == [[Point(9, 9)]]


class TestFailures:
    def test_provider_failure_counts_as_no_intersections(self, store, stub_engine, geometry):
        a = store.add_curve(closed_square())
        b = store.add_curve(closed_square())
        c = store.add_curve(closed_square())
        geometry.fail_for.add(frozenset((a, b)))
        geometry.stub(a, c, [(1, 1)])

        points = stub_engine.recompute()
        assert [p.curves() for p in points] == [frozenset((a, c))]
        assert len(stub_engine.marker_layer) == 1


class TestRealGeometry:
    def test_overlapping_knots(self, store, engine):
        store.add_curve(make_default_knot(Point(0, 0), 100))
        store.add_curve(make_default_knot(Point(100, 0), 100))
        points = sorted(engine.recompute(), key=lambda p: p.point.y)
        assert len(points) == 2
        assert points[0].point.x == pytest.approx(50.0, abs=1.5)
        assert points[0].point.y == pytest.approx(-86.6, abs=1.5)
        assert points[1].point.y == pytest.approx(86.6, abs=1.5)
        assert all(p.param_a is not None and p.param_b is not None for p in points)

    def test_bbox_prefilter_skips_far_apart_curves(self, store, geometry):
        eng = IntersectionEngine(store, geometry, MarkerLayer(), bbox_prefilter=True)
        store.add_curve(closed_square(0, 0))
        store.add_curve(closed_square(500, 500))
        eng.recompute()
        assert sum(geometry.calls.values()) == 0

    def test_default_engine_queries_overlapping_pairs_once(self, store, geometry):
        eng = IntersectionEngine(store, geometry, MarkerLayer())
        a = store.add_curve(closed_square(0, 0))
        b = store.add_curve(closed_square(5, 5))
        store.add_curve(closed_square(500, 500))
        eng.recompute()
        assert geometry.ordered_calls == [(a, b)]

    def test_recompute_depends_only_on_current_state(self):
        def scene():
            s = SceneStore()
            s.add_curve(make_default_knot(Point(0, 0), 100))
            moving = s.add_curve(make_default_knot(Point(150, 0), 100))
            return s, moving

        store_a, moving_a = scene()
        engine_a = IntersectionEngine(store_a)
        for _ in range(10):
            store_a.move_anchor(moving_a, 0, Point(5, 5))
        engine_a.recompute()

        store_b, moving_b = scene()
        engine_b = IntersectionEngine(store_b)
        for _ in range(10):
            store_b.move_anchor(moving_b, 0, Point(5, 5))
            engine_b.recompute()

        assert engine_a.marker_layer.centers() == engine_b.marker_layer.centers()
        assert len(engine_a.marker_layer) > 0

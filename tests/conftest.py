import os
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from collections import Counter

import pytest

from knotpad.core.intersection_engine import IntersectionEngine
from knotpad.core.marker_layer import MarkerLayer
from knotpad.core.models import Point
from knotpad.core.scene_store import SceneStore
from knotpad.geom.intersect import CurveIntersection


# Variables de entorno que leen settings/AppSettings: cada test arranca limpio.
KNOTPAD_ENV_VARS = (
    "KNOTPAD_MARKER_RADIUS",
    "KNOTPAD_MARKER_FILL",
    "KNOTPAD_SIMPLIFY_TOLERANCE",
    "KNOTPAD_HIT_TOLERANCE",
    "KNOTPAD_FLATTEN_SAMPLES",
    "KNOTPAD_CANVAS_THEME",
    "KNOTPAD_SEED_KNOT",
    "KNOTPAD_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_knotpad_env(monkeypatch):
    for name in KNOTPAD_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # apply_project_settings escribe os.environ directo (fuera de monkeypatch).
    for name in KNOTPAD_ENV_VARS:
        os.environ.pop(name, None)


class CountingGeometry:
    """Proveedor de geometría falso: cuenta llamadas por par no ordenado."""

    def __init__(self):
        self.calls = Counter()
        self.ordered_calls = []
        self.results = {}
        self.fail_for = set()

    def stub(self, id_a, id_b, points):
        self.results[frozenset((id_a, id_b))] = [
            CurveIntersection(Point.of(p), 0.0, 0.0) for p in points
        ]

    def intersections(self, curve_a, curve_b):
        key = frozenset((curve_a.id, curve_b.id))
        self.calls[key] += 1
        self.ordered_calls.append((curve_a.id, curve_b.id))
        if key in self.fail_for:
            raise ZeroDivisionError("segmento de largo cero")
        return list(self.results.get(key, []))

    def hit_test(self, curves, point, tolerance):
        return None


@pytest.fixture
def store():
    return SceneStore()


@pytest.fixture
def geometry():
    return CountingGeometry()


@pytest.fixture
def stub_engine(store, geometry):
    """Motor con proveedor falso y sin prefiltro bbox (cada par llega al proveedor)."""
    return IntersectionEngine(store, geometry, MarkerLayer(), bbox_prefilter=False)


@pytest.fixture
def engine(store):
    """Motor con el proveedor real (svgelements)."""
    return IntersectionEngine(store)


@pytest.fixture(scope="session")
def qt_app():
    """QApplication única por sesión."""
    widgets = pytest.importorskip("PySide6.QtWidgets")
    app = widgets.QApplication.instance()
    if app is None:
        import sys
        app = widgets.QApplication(sys.argv)
    return app

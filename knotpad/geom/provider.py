# File: knotpad/geom/provider.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Proveedor de geometría que consume el núcleo (intersecciones + hit-test).
# Notes: Contrato: nunca lanza por geometría degenerada; devuelve vacío / None.
from __future__ import annotations

from typing import Protocol, Sequence

from knotpad.core.models import Curve, Point
from knotpad.core.version import FLATTEN_SAMPLES, HIT_TOLERANCE
from knotpad.geom.hit_test import HitResult, hit_test
from knotpad.geom.intersect import CurveIntersection, intersections
from knotpad.utils.errors import KnotGeometryError
from knotpad.utils.log import get_logger

log = get_logger(__name__)


class GeometryProvider(Protocol):
    def intersections(self, curve_a: Curve, curve_b: Curve) -> Sequence[CurveIntersection]: ...

    def hit_test(self, curves: Sequence[Curve], point: Point, tolerance: float) -> HitResult | None: ...


class BezierGeometryProvider:
    """Implementación por defecto: segmentos cúbicos svgelements aplanados."""

    def __init__(self, *, samples: int = FLATTEN_SAMPLES) -> None:
        self.samples = max(1, int(samples))

    def intersections(self, curve_a: Curve, curve_b: Curve) -> list[CurveIntersection]:
        try:
            return intersections(curve_a, curve_b, samples=self.samples)
        except KnotGeometryError:
            log.debug("Par degenerado %s/%s: sin intersecciones", curve_a.id, curve_b.id, exc_info=True)
            return []

    def hit_test(self, curves: Sequence[Curve], point: Point, tolerance: float = HIT_TOLERANCE) -> HitResult | None:
        try:
            return hit_test(curves, point, tolerance, samples=self.samples)
        except KnotGeometryError:
            log.debug("hit_test sobre geometría degenerada", exc_info=True)
            return None

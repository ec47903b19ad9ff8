# File: knotpad/geom/bezier.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Curva (anclas + handles) -> segmentos cúbicos svgelements + aplanado a polilínea.
# Notes:
#   - Usa svgelements para evaluar los segmentos (mismo parser/evaluador que el resto del stack).
#   - Segmento i: ancla i -> ancla i+1; si la curva es cerrada, el último vuelve al ancla 0.
#   - Parámetro de curva = índice de segmento + t local (como CurveLocation.param).
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from svgelements import CubicBezier

from knotpad.core.models import Anchor, Curve, Point
from knotpad.core.version import FLATTEN_SAMPLES
from knotpad.utils.errors import KnotGeometryError

BBox = tuple[float, float, float, float]  # x0, y0, x1, y1


@dataclass(frozen=True)
class PolyVertex:
    point: Point
    param: float


def _xy(pt: Any) -> Point:
    # svgelements.Point expone x/y; por las dudas aceptamos complejos.
    try:
        return Point(float(pt.x), float(pt.y))
    except AttributeError:
        return Point(float(getattr(pt, "real", 0.0)), float(getattr(pt, "imag", 0.0)))


def segment_controls(a: Anchor, b: Anchor) -> tuple[Point, Point, Point, Point]:
    """Puntos de control absolutos del segmento a -> b."""
    p0 = a.point
    p3 = b.point
    p1 = p0 + a.handle_out if a.handle_out is not None else p0
    p2 = p3 + b.handle_in if b.handle_in is not None else p3
    return (p0, p1, p2, p3)


def curve_controls(curve: Curve) -> list[tuple[Point, Point, Point, Point]]:
    anchors = curve.anchors
    n = len(anchors)
    out = []
    for i in range(curve.segment_count()):
        out.append(segment_controls(anchors[i], anchors[(i + 1) % n]))
    return out


def curve_segments(curve: Curve) -> list[CubicBezier]:
    """Segmentos svgelements de la curva (vacío si tiene < 2 anclas)."""
    segs = []
    for p0, p1, p2, p3 in curve_controls(curve):
        try:
            segs.append(CubicBezier(p0.as_tuple(), p1.as_tuple(), p2.as_tuple(), p3.as_tuple()))
        except (TypeError, ValueError) as e:
            raise KnotGeometryError(f"Segmento inválido en curva {curve.id!r}") from e
    return segs


def flatten(curve: Curve, samples: int = FLATTEN_SAMPLES) -> list[PolyVertex]:
    """Aplana la curva a una polilínea con el parámetro de cada vértice.

    Para curvas cerradas NO se repite el primer vértice al final: la arista
    de cierre es implícita (último -> primero).
    """
    samples = max(1, int(samples))
    segs = curve_segments(curve)
    if not segs:
        return [PolyVertex(a.point, 0.0) for a in curve.anchors[:1]]

    out: list[PolyVertex] = []
    for i, seg in enumerate(segs):
        for k in range(samples):
            t = k / samples
            out.append(PolyVertex(_xy(seg.point(t)), i + t))
    if not curve.closed:
        out.append(PolyVertex(curve.anchors[-1].point, float(len(segs))))
    return out


def polyline_edges(curve: Curve, samples: int = FLATTEN_SAMPLES) -> list[tuple[PolyVertex, PolyVertex]]:
    verts = flatten(curve, samples)
    if len(verts) < 2:
        return []
    edges = list(zip(verts, verts[1:]))
    if curve.closed:
        last = verts[-1]
        # La arista de cierre termina en param = cantidad de segmentos (equivale a 0).
        edges.append((last, PolyVertex(verts[0].point, float(curve.segment_count()))))
    return edges


def control_bbox(curve: Curve) -> BBox | None:
    """BBox del polígono de control (anclas + handles).

    Conservador: la curva de Bézier queda dentro de la envolvente convexa
    de sus puntos de control.
    """
    pts: list[Point] = []
    for a in curve.anchors:
        pts.append(a.point)
        if a.handle_in is not None:
            pts.append(a.point + a.handle_in)
        if a.handle_out is not None:
            pts.append(a.point + a.handle_out)
    if not pts:
        return None
    xs = [p.x for p in pts]
    ys = [p.y for p in pts]
    return (min(xs), min(ys), max(xs), max(ys))


def bboxes_overlap(a: BBox | None, b: BBox | None, eps: float = 1e-6) -> bool:
    if a is None or b is None:
        return False
    return not (a[2] + eps < b[0] or b[2] + eps < a[0] or a[3] + eps < b[1] or b[3] + eps < a[1])


def point_at(curve: Curve, param: float) -> Point:
    """Evalúa la curva en un parámetro (segmento + t)."""
    segs = curve_segments(curve)
    if not segs:
        raise KnotGeometryError(f"Curva {curve.id!r} sin segmentos")
    i = int(param)
    i = max(0, min(i, len(segs) - 1))
    t = max(0.0, min(1.0, float(param) - i))
    return _xy(segs[i].point(t))

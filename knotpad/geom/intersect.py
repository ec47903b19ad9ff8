# File: knotpad/geom/intersect.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Intersecciones curva-curva (polilíneas aplanadas + bbox por arista).
# Notes:
#   - Rangos semi-abiertos [0, 1) por arista: un cruce justo en un vértice se reporta una vez.
#   - Aristas de largo cero o paralelas no aportan puntos (geometría degenerada = sin cruces).
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from knotpad.core.models import Curve, Point
from knotpad.core.version import FLATTEN_SAMPLES
from knotpad.geom.bezier import PolyVertex, bboxes_overlap, control_bbox, polyline_edges

EPS = 1e-12


@dataclass(frozen=True)
class CurveIntersection:
    point: Point
    param_a: float
    param_b: float


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def _edge_bbox(e: tuple[PolyVertex, PolyVertex]) -> tuple[float, float, float, float]:
    p, q = e[0].point, e[1].point
    return (min(p.x, q.x), min(p.y, q.y), max(p.x, q.x), max(p.y, q.y))


def edge_intersection(
    p0: Point, p1: Point, q0: Point, q1: Point, *, close_p: bool = False, close_q: bool = False
) -> Optional[tuple[float, float]]:
    """(t, u) del cruce entre p0->p1 y q0->q1, o None.

    `close_p` / `close_q` hacen inclusivo el extremo final (última arista de
    una polilínea abierta).
    """
    rx, ry = p1.x - p0.x, p1.y - p0.y
    sx, sy = q1.x - q0.x, q1.y - q0.y
    den = _cross(rx, ry, sx, sy)
    scale = (rx * rx + ry * ry) * (sx * sx + sy * sy)
    if scale <= EPS or den * den <= EPS * scale:
        return None
    wx, wy = q0.x - p0.x, q0.y - p0.y
    t = _cross(wx, wy, sx, sy) / den
    u = _cross(wx, wy, rx, ry) / den
    t_ok = 0.0 <= t <= 1.0 if close_p else 0.0 <= t < 1.0
    u_ok = 0.0 <= u <= 1.0 if close_q else 0.0 <= u < 1.0
    if t_ok and u_ok:
        return (t, u)
    return None


def intersections(curve_a: Curve, curve_b: Curve, *, samples: int = FLATTEN_SAMPLES) -> list[CurveIntersection]:
    """Puntos donde se cruzan dos curvas, ordenados por parámetro en A."""
    if not bboxes_overlap(control_bbox(curve_a), control_bbox(curve_b)):
        return []

    edges_a = polyline_edges(curve_a, samples)
    edges_b = polyline_edges(curve_b, samples)
    if not edges_a or not edges_b:
        return []

    boxes_b = [_edge_bbox(e) for e in edges_b]
    last_a = len(edges_a) - 1
    last_b = len(edges_b) - 1

    out: list[CurveIntersection] = []
    for ia, ea in enumerate(edges_a):
        box_a = _edge_bbox(ea)
        for ib, eb in enumerate(edges_b):
            if not bboxes_overlap(box_a, boxes_b[ib], eps=1e-9):
                continue
            hit = edge_intersection(
                ea[0].point,
                ea[1].point,
                eb[0].point,
                eb[1].point,
                close_p=(not curve_a.closed and ia == last_a),
                close_q=(not curve_b.closed and ib == last_b),
            )
            if hit is None:
                continue
            t, u = hit
            pt = ea[0].point + (ea[1].point - ea[0].point) * t
            param_a = ea[0].param + (ea[1].param - ea[0].param) * t
            param_b = eb[0].param + (eb[1].param - eb[0].param) * u
            out.append(CurveIntersection(pt, param_a, param_b))

    out.sort(key=lambda x: (x.param_a, x.param_b))
    return out

# File: knotpad/geom/simplify.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Simplificación de trazos a mano alzada -> anclas con handles (ajuste cúbico).
# Notes:
#   - Algoritmo de Schneider ("An Algorithm for Automatically Fitting Digitized Curves",
#     Graphics Gems, 1990): parametrización por cuerda + mínimos cuadrados + Newton.
#   - `tolerance` se compara contra el error cuadrático máximo (mismo criterio que paper.js).
from __future__ import annotations

from typing import Iterable, Optional

from knotpad.core.models import Anchor, Point
from knotpad.core.version import SIMPLIFY_TOLERANCE

_EPS = 1e-12

Bezier = tuple[Point, Point, Point, Point]


def _normalize(v: Point, length: float = 1.0) -> Point:
    n = v.length()
    if n <= _EPS:
        return Point(0.0, 0.0)
    return v * (length / n)


def _evaluate(ctrl: list[Point], t: float) -> Point:
    # de Casteljau (grado = len(ctrl) - 1)
    tmp = list(ctrl)
    for k in range(1, len(tmp)):
        for i in range(len(tmp) - k):
            tmp[i] = tmp[i] * (1.0 - t) + tmp[i + 1] * t
    return tmp[0]


class _Fitter:
    def __init__(self, points: list[Point], error: float) -> None:
        self.points = points
        self.error = float(error)
        self.anchors: list[Anchor] = [Anchor(points[0])]

    def fit(self) -> list[Anchor]:
        pts = self.points
        if len(pts) > 1:
            self.fit_cubic(0, len(pts) - 1, pts[1] - pts[0], pts[-2] - pts[-1])
        return self.anchors

    def add_curve(self, curve: Bezier) -> None:
        prev = self.anchors[-1]
        prev.handle_out = curve[1] - curve[0]
        self.anchors.append(Anchor(curve[3], handle_in=curve[2] - curve[3]))

    def fit_cubic(self, first: int, last: int, tan1: Point, tan2: Point) -> None:
        pts = self.points
        if last - first == 1:
            p1, p2 = pts[first], pts[last]
            dist = p1.distance_to(p2) / 3.0
            self.add_curve((p1, p1 + _normalize(tan1, dist), p2 + _normalize(tan2, dist), p2))
            return

        u_prime = self.chord_length_parameterize(first, last)
        max_error = max(self.error, self.error * self.error)
        split = (first + last) // 2
        in_order = True

        for _ in range(5):
            curve = self.generate_bezier(first, last, u_prime, tan1, tan2)
            err, idx = self.find_max_error(first, last, curve, u_prime)
            if err < self.error and in_order:
                self.add_curve(curve)
                return
            split = idx
            if err >= max_error:
                break
            in_order = self.reparameterize(first, last, u_prime, curve)
            max_error = err

        tan_center = pts[split - 1] - pts[split + 1]
        self.fit_cubic(first, split, tan1, tan_center)
        self.fit_cubic(split, last, -tan_center, tan2)

    def generate_bezier(self, first: int, last: int, u_prime: list[float], tan1: Point, tan2: Point) -> Bezier:
        pts = self.points
        pt1, pt2 = pts[first], pts[last]
        c00 = c01 = c11 = 0.0
        x0 = x1 = 0.0
        for i in range(last - first + 1):
            u = u_prime[i]
            t = 1.0 - u
            b = 3.0 * u * t
            b0 = t * t * t
            b1 = b * t
            b2 = b * u
            b3 = u * u * u
            a1 = _normalize(tan1, b1)
            a2 = _normalize(tan2, b2)
            tmp = pts[first + i] - pt1 * (b0 + b1) - pt2 * (b2 + b3)
            c00 += a1.dot(a1)
            c01 += a1.dot(a2)
            c11 += a2.dot(a2)
            x0 += a1.dot(tmp)
            x1 += a2.dot(tmp)

        det_c = c00 * c11 - c01 * c01
        if abs(det_c) > _EPS:
            alpha1 = (x0 * c11 - x1 * c01) / det_c
            alpha2 = (c00 * x1 - c01 * x0) / det_c
        else:
            c0 = c00 + c01
            c1 = c01 + c11
            if abs(c0) > _EPS:
                alpha1 = alpha2 = x0 / c0
            elif abs(c1) > _EPS:
                alpha1 = alpha2 = x1 / c1
            else:
                alpha1 = alpha2 = 0.0

        seg_len = pt2.distance_to(pt1)
        eps = _EPS * seg_len
        h1: Optional[Point] = None
        h2: Optional[Point] = None
        if alpha1 < eps or alpha2 < eps:
            # Estimación inestable: heurística de Wu/Barsky (1/3 de la cuerda).
            alpha1 = alpha2 = seg_len / 3.0
        else:
            line = pt2 - pt1
            h1 = _normalize(tan1, alpha1)
            h2 = _normalize(tan2, alpha2)
            if h1.dot(line) - h2.dot(line) > seg_len * seg_len:
                # Handles que se cruzan: volver a la heurística.
                alpha1 = alpha2 = seg_len / 3.0
                h1 = h2 = None

        return (
            pt1,
            pt1 + (h1 if h1 is not None else _normalize(tan1, alpha1)),
            pt2 + (h2 if h2 is not None else _normalize(tan2, alpha2)),
            pt2,
        )

    def reparameterize(self, first: int, last: int, u: list[float], curve: Bezier) -> bool:
        for i in range(first, last + 1):
            u[i - first] = self.find_root(curve, self.points[i], u[i - first])
        for i in range(1, len(u)):
            if u[i] <= u[i - 1]:
                return False
        return True

    @staticmethod
    def find_root(curve: Bezier, point: Point, u: float) -> float:
        # Un paso de Newton-Raphson sobre |Q(u) - P|^2.
        d1 = [(curve[i + 1] - curve[i]) * 3.0 for i in range(3)]
        d2 = [(d1[i + 1] - d1[i]) * 2.0 for i in range(2)]
        pt = _evaluate(list(curve), u)
        pt1 = _evaluate(d1, u)
        pt2 = _evaluate(d2, u)
        diff = pt - point
        df = pt1.dot(pt1) + diff.dot(pt2)
        if abs(df) < _EPS:
            return u
        return u - diff.dot(pt1) / df

    def chord_length_parameterize(self, first: int, last: int) -> list[float]:
        pts = self.points
        u = [0.0]
        for i in range(first + 1, last + 1):
            u.append(u[-1] + pts[i].distance_to(pts[i - 1]))
        total = u[-1]
        if total <= _EPS:
            n = last - first
            return [i / n for i in range(n + 1)]
        return [x / total for x in u]

    def find_max_error(self, first: int, last: int, curve: Bezier, u: list[float]) -> tuple[float, int]:
        pts = self.points
        index = (last - first + 1) // 2 + first
        max_dist = 0.0
        for i in range(first + 1, last):
            p = _evaluate(list(curve), u[i - first])
            v = p - pts[i]
            dist = v.x * v.x + v.y * v.y
            if dist >= max_dist:
                max_dist = dist
                index = i
        return max_dist, index


def dedupe_points(points: Iterable[Point], eps: float = 1e-9) -> list[Point]:
    out: list[Point] = []
    for p in points:
        p = Point.of(p)
        if out and out[-1].is_close(p, eps):
            continue
        out.append(p)
    return out


def simplify(points: Iterable[Point], tolerance: float = SIMPLIFY_TOLERANCE) -> list[Anchor]:
    """Reduce un trazo a mano alzada a pocas anclas con handles.

    - El primer y el último punto se conservan.
    - Con menos de 2 puntos distintos se devuelve el trazo tal cual (sin handles).
    """
    pts = dedupe_points(points)
    if len(pts) < 2:
        return [Anchor(p) for p in pts]
    return _Fitter(pts, max(float(tolerance), _EPS)).fit()

# File: knotpad/geom/smooth.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Suavizado de anclas: handles tangentes continuos (Catmull-Rom uniforme).
# Notes: Pisa los handles existentes. En curvas abiertas los extremos usan la diferencia de un lado.
from __future__ import annotations

from typing import Sequence

from knotpad.core.models import Anchor, Point


def smooth_continuous(anchors: Sequence[Anchor], closed: bool, *, factor: float = 1.0 / 6.0) -> None:
    """Asigna handle_in/handle_out simétricos para una curva C1.

    handle_out[i] = (p[i+1] - p[i-1]) * factor ; handle_in[i] = -handle_out[i]
    """
    n = len(anchors)
    if n < 3 and closed:
        return
    if n < 2:
        return
    pts = [a.point for a in anchors]
    for i, a in enumerate(anchors):
        if closed:
            prev = pts[(i - 1) % n]
            nxt = pts[(i + 1) % n]
        else:
            prev = pts[max(i - 1, 0)]
            nxt = pts[min(i + 1, n - 1)]
        tangent: Point = (nxt - prev) * float(factor)
        if not closed and i in (0, n - 1):
            # Extremo abierto: diferencia de un solo lado, el doble de peso.
            tangent = tangent * 2.0
        a.handle_out = tangent
        a.handle_in = -tangent
    if not closed:
        anchors[0].handle_in = None
        anchors[-1].handle_out = None

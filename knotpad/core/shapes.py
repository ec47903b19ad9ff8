# File: knotpad/core/shapes.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Formas iniciales (nudo por defecto al arrancar).
# Notes: El radio lo decide el llamador (por defecto 1/4 del lado menor del viewport).
from __future__ import annotations

import math

from knotpad.core.models import Anchor, Curve, CurveStyle, Point
from knotpad.core.version import KNOT_ANGLE_STEP, KNOT_STROKE_COLOR, KNOT_STROKE_WIDTH
from knotpad.geom.smooth import smooth_continuous


def default_knot_radius(width: float, height: float) -> float:
    return min(float(width), float(height)) / 4.0


def make_default_knot(center: Point, radius: float, *, angle_step: float = KNOT_ANGLE_STEP) -> Curve:
    """Lazo cerrado aproximando un círculo, con handles suaves."""
    center = Point.of(center)
    step = float(angle_step)
    if step <= 0:
        step = KNOT_ANGLE_STEP
    anchors: list[Anchor] = []
    t = 0.0
    while t <= 2.0 * math.pi:
        anchors.append(Anchor(Point(center.x + radius * math.cos(t), center.y + radius * math.sin(t))))
        t += step
    smooth_continuous(anchors, closed=True)
    return Curve(
        anchors=anchors,
        closed=True,
        style=CurveStyle(stroke_color=KNOT_STROKE_COLOR, stroke_width=KNOT_STROKE_WIDTH),
    )

# File: knotpad/ui/qpath_render.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Curva del modelo -> QPainterPath (mismos segmentos cúbicos que usa la geometría).
# Notes: Las coordenadas de escena son px del viewport (sin transformación de vista).
from __future__ import annotations

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QPainterPath

from knotpad.core.models import Curve, Point
from knotpad.geom.bezier import curve_controls


def _qp(p: Point) -> QPointF:
    return QPointF(float(p.x), float(p.y))


def curve_to_qpath(curve: Curve) -> QPainterPath:
    """Convierte una curva a QPainterPath.

    - Sin anclas: path vacío.
    - 1 ancla (trazo recién empezado): solo moveTo.
    """
    q = QPainterPath()
    if not curve.anchors:
        return q
    q.moveTo(_qp(curve.anchors[0].point))
    for _p0, p1, p2, p3 in curve_controls(curve):
        q.cubicTo(_qp(p1), _qp(p2), _qp(p3))
    if curve.closed and curve.segment_count() > 0:
        q.closeSubpath()
    return q


def square_at(p: Point, size: float) -> QRectF:
    h = float(size) / 2.0
    return QRectF(float(p.x) - h, float(p.y) - h, float(size), float(size))


def circle_at(p: Point, radius: float) -> QRectF:
    r = float(radius)
    return QRectF(float(p.x) - r, float(p.y) - r, 2.0 * r, 2.0 * r)

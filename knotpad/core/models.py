# File: knotpad/core/models.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Modelos de datos del lienzo (curvas, anclas, intersecciones).
# Notes: Sin Qt. Las curvas viven solo en memoria durante la sesión.
from __future__ import annotations

import math
import uuid

from dataclasses import dataclass, field
from typing import Iterable, Optional

from knotpad.core.version import FREEHAND_STROKE_COLOR, FREEHAND_STROKE_WIDTH
from knotpad.utils.errors import KnotValidationError

CurveId = str


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> "Point":
        return Point(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y

    def is_close(self, other: "Point", eps: float = 1e-9) -> bool:
        return abs(self.x - other.x) <= eps and abs(self.y - other.y) <= eps

    def as_tuple(self) -> tuple[float, float]:
        return (float(self.x), float(self.y))

    @staticmethod
    def of(v: "Point | tuple[float, float] | Iterable[float]") -> "Point":
        """Acepta Point o (x, y). Usado en los bordes de la API."""
        if isinstance(v, Point):
            return v
        try:
            x, y = v  # type: ignore[misc]
            return Point(float(x), float(y))
        except (TypeError, ValueError) as e:
            raise KnotValidationError(f"Punto inválido: {v!r}") from e


@dataclass
class Anchor:
    """Punto de control de una curva.

    Los handles son offsets relativos al ancla (convención paper.js).
    `None` = sin handle (el segmento sale recto desde el ancla).
    """

    point: Point
    handle_in: Optional[Point] = None
    handle_out: Optional[Point] = None

    def has_handles(self) -> bool:
        return self.handle_in is not None or self.handle_out is not None


@dataclass
class CurveStyle:
    # Solo visual: no afecta a intersecciones.
    stroke_color: str = FREEHAND_STROKE_COLOR
    stroke_width: float = FREEHAND_STROKE_WIDTH


@dataclass
class Curve:
    anchors: list[Anchor] = field(default_factory=list)
    closed: bool = False
    style: CurveStyle = field(default_factory=CurveStyle)
    # Asignado por SceneStore.add_curve(); vacío mientras la curva no está en escena.
    id: CurveId = ""

    @staticmethod
    def from_points(
        points: Iterable["Point | tuple[float, float]"],
        *,
        closed: bool = False,
        style: CurveStyle | None = None,
    ) -> "Curve":
        return Curve(
            anchors=[Anchor(Point.of(p)) for p in points],
            closed=bool(closed),
            style=style or CurveStyle(),
        )

    def points(self) -> list[Point]:
        return [a.point for a in self.anchors]

    def segment_count(self) -> int:
        n = len(self.anchors)
        if n < 2:
            return 0
        return n if self.closed else n - 1

    def is_intersectable(self) -> bool:
        """Apta para el emparejamiento: cerrada y con al menos 2 anclas."""
        return self.closed and len(self.anchors) >= 2


@dataclass(frozen=True)
class CurveLocation:
    """Posición sobre una curva: segmento + t local en [0, 1]."""

    segment_index: int
    t: float

    @property
    def param(self) -> float:
        return float(self.segment_index) + float(self.t)


@dataclass(frozen=True)
class IntersectionPoint:
    curve_a: CurveId
    curve_b: CurveId
    point: Point
    param_a: Optional[float] = None
    param_b: Optional[float] = None

    def curves(self) -> frozenset[CurveId]:
        # Par no ordenado.
        return frozenset((self.curve_a, self.curve_b))


# ----------------------------
# Helpers
# ----------------------------

def new_curve_id(prefix: str = "curve") -> CurveId:
    """Genera un id corto y único.

    Nota: se usa UUID truncado para evitar colisiones sin depender de estado global.
    """
    return f"{prefix}_{uuid.uuid4().hex[:8]}"

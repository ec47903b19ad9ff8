# File: knotpad/core/intersection_engine.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Motor de intersecciones: todos los pares no ordenados de curvas -> marcadores.
# Notes:
#   - Cada par {A, B} se consulta exactamente una vez; nunca se empareja una curva consigo misma.
#   - Sin dedup: puntos coincidentes se reportan como marcadores separados.
#   - Recompute completo y sin estado: función pura del contenido actual del SceneStore.
from __future__ import annotations

import itertools

from typing import Optional

from knotpad.core.marker_layer import MarkerLayer
from knotpad.core.models import Curve, IntersectionPoint
from knotpad.core.scene_store import SceneStore
from knotpad.geom.bezier import bboxes_overlap, control_bbox
from knotpad.geom.provider import BezierGeometryProvider, GeometryProvider
from knotpad.utils.log import get_logger

log = get_logger(__name__)


class IntersectionEngine:
    """Recalcula el set completo de intersecciones y materializa los marcadores.

    El motor es dueño de la MarkerLayer y solo lee el SceneStore.

    Con `bbox_prefilter=True` (default) un par cuyas bboxes de control no se
    tocan NO llega al proveedor: "una llamada por par" vale solo para pares
    con bboxes solapadas. Pasar `bbox_prefilter=False` para consultar todos.
    """

    def __init__(
        self,
        store: SceneStore,
        geometry: Optional[GeometryProvider] = None,
        markers: Optional[MarkerLayer] = None,
        *,
        bbox_prefilter: bool = True,
    ) -> None:
        self._store = store
        self._geometry: GeometryProvider = geometry if geometry is not None else BezierGeometryProvider()
        self._markers = markers if markers is not None else MarkerLayer()
        self._bbox_prefilter = bool(bbox_prefilter)
        self._last: list[IntersectionPoint] = []

    @property
    def marker_layer(self) -> MarkerLayer:
        return self._markers

    @property
    def geometry(self) -> GeometryProvider:
        return self._geometry

    @property
    def intersections(self) -> list[IntersectionPoint]:
        return list(self._last)

    def eligible_curves(self) -> list[Curve]:
        return [c for c in self._store.all_curves() if c.is_intersectable()]

    def _query_pair(self, a: Curve, b: Curve) -> list[IntersectionPoint]:
        if self._bbox_prefilter and not bboxes_overlap(control_bbox(a), control_bbox(b)):
            return []
        try:
            found = self._geometry.intersections(a, b)
        except Exception:
            # Par degenerado/malformado: cuenta como "sin intersecciones".
            log.debug("Intersección no computable para %s/%s", a.id, b.id, exc_info=True)
            return []
        return [
            IntersectionPoint(
                curve_a=a.id,
                curve_b=b.id,
                point=ci.point,
                param_a=getattr(ci, "param_a", None),
                param_b=getattr(ci, "param_b", None),
            )
            for ci in found
        ]

    def recompute(self) -> list[IntersectionPoint]:
        curves = self.eligible_curves()
        points: list[IntersectionPoint] = []
        pairs = 0
        for a, b in itertools.combinations(curves, 2):
            pairs += 1
            points.extend(self._query_pair(a, b))

        self._last = points
        self._markers.replace(p.point for p in points)
        log.debug("recompute: %d curvas, %d pares, %d intersecciones", len(curves), pairs, len(points))
        return list(points)

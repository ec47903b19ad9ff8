# File: knotpad/core/marker_layer.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Capa de marcadores de intersección (círculos rojos).
# Notes: Se reemplaza completa en cada recompute; sin diff incremental.
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from knotpad.core.models import Point
from knotpad.core.version import MARKER_FILL, MARKER_RADIUS
from knotpad.utils.log import get_logger

log = get_logger(__name__)

MarkerHandle = int


@dataclass(frozen=True)
class Marker:
    handle: MarkerHandle
    center: Point
    radius: float = MARKER_RADIUS
    fill: str = MARKER_FILL


class MarkerLayer:
    """Conjunto de marcadores renderizados.

    El renderer se suscribe con `subscribe()` y recibe la capa completa
    tras cada cambio. `replace()` notifica una sola vez, con el set nuevo ya
    armado, así nunca se ve un frame con marcadores viejos y nuevos mezclados.
    """

    def __init__(self, *, radius: float = MARKER_RADIUS, fill: str = MARKER_FILL) -> None:
        self.radius = float(radius)
        self.fill = str(fill)
        self._markers: dict[MarkerHandle, Marker] = {}
        self._next_handle: MarkerHandle = 1
        self._listeners: list[Callable[["MarkerLayer"], None]] = []

    def subscribe(self, callback: Callable[["MarkerLayer"], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            try:
                cb(self)
            except Exception:
                # Un listener roto no debe dejar la capa a medio actualizar.
                log.exception("Listener de MarkerLayer falló")

    def clear(self) -> None:
        self._markers.clear()
        self._notify()

    def add_marker(self, point: Point) -> MarkerHandle:
        h = self._next_handle
        self._next_handle += 1
        self._markers[h] = Marker(handle=h, center=Point.of(point), radius=self.radius, fill=self.fill)
        self._notify()
        return h

    def replace(self, points: Iterable[Point]) -> list[MarkerHandle]:
        # Se arma el set nuevo completo antes de tocar el actual.
        centers = [Point.of(p) for p in points]
        first = self._next_handle
        self._next_handle += len(centers)
        fresh = {
            h: Marker(handle=h, center=c, radius=self.radius, fill=self.fill)
            for h, c in zip(range(first, self._next_handle), centers)
        }
        self._markers = fresh
        self._notify()
        return list(fresh)

    def markers(self) -> list[Marker]:
        return list(self._markers.values())

    def centers(self) -> list[Point]:
        return [m.center for m in self._markers.values()]

    def get(self, handle: MarkerHandle) -> Optional[Marker]:
        return self._markers.get(handle)

    def __len__(self) -> int:
        return len(self._markers)

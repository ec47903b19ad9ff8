# File: knotpad/core/scene_store.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Colección viva de curvas del lienzo (identidad + ciclo de vida).
# Notes: Ids/índices inexistentes = no-op silencioso (la UI puede llamar especulativamente).
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from knotpad.core.models import Anchor, Curve, CurveId, Point, new_curve_id
from knotpad.utils.errors import KnotValidationError
from knotpad.utils.log import get_logger

log = get_logger(__name__)


class SceneStore:
    """Dueña de todas las curvas.

    El orden de inserción se conserva (dict) para que la enumeración de pares
    del motor de intersecciones sea determinista.
    """

    def __init__(self) -> None:
        self._curves: dict[CurveId, Curve] = {}

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def add_curve(self, curve: Curve) -> CurveId:
        if not curve.anchors:
            raise KnotValidationError("Curva inválida: se espera al menos 1 ancla")
        cid = new_curve_id()
        while cid in self._curves:
            cid = new_curve_id()
        curve.id = cid
        self._curves[cid] = curve
        log.debug("Curva agregada: %s (%d anclas, closed=%s)", cid, len(curve.anchors), curve.closed)
        return cid

    def remove_curve(self, curve_id: CurveId) -> None:
        if self._curves.pop(curve_id, None) is not None:
            log.debug("Curva eliminada: %s", curve_id)

    def clear(self) -> None:
        self._curves.clear()

    # ----------------------------
    # Lectura
    # ----------------------------
    def all_curves(self) -> list[Curve]:
        # Snapshot: mutar el store durante la iteración no afecta a la lista.
        return list(self._curves.values())

    def get_curve(self, curve_id: CurveId) -> Curve | None:
        return self._curves.get(curve_id)

    def __len__(self) -> int:
        return len(self._curves)

    def __contains__(self, curve_id: object) -> bool:
        return curve_id in self._curves

    def __iter__(self) -> Iterator[Curve]:
        return iter(self.all_curves())

    # ----------------------------
    # Anclas
    # ----------------------------
    def _anchor(self, curve_id: CurveId, anchor_index: int) -> Optional[Anchor]:
        c = self._curves.get(curve_id)
        if c is None:
            log.debug("Referencia inválida: curva %s", curve_id)
            return None
        if not (0 <= anchor_index < len(c.anchors)):
            log.debug("Referencia inválida: ancla %s[%d]", curve_id, anchor_index)
            return None
        return c.anchors[anchor_index]

    def update_anchor(self, curve_id: CurveId, anchor_index: int, new_position: Point) -> bool:
        """Mueve un ancla en el lugar (identidad y cantidad de anclas intactas)."""
        a = self._anchor(curve_id, anchor_index)
        if a is None:
            return False
        a.point = Point.of(new_position)
        return True

    def move_anchor(self, curve_id: CurveId, anchor_index: int, delta: Point) -> bool:
        a = self._anchor(curve_id, anchor_index)
        if a is None:
            return False
        a.point = a.point + Point.of(delta)
        return True

    def append_anchor(self, curve_id: CurveId, position: Point) -> Optional[int]:
        c = self._curves.get(curve_id)
        if c is None:
            return None
        c.anchors.append(Anchor(Point.of(position)))
        return len(c.anchors) - 1

    def insert_anchor(self, curve_id: CurveId, after_index: int, position: Point) -> Optional[int]:
        """Inserta un ancla después de `after_index` (índice del segmento clickeado).

        Devuelve el índice de la nueva ancla, o None si la curva no existe.
        """
        c = self._curves.get(curve_id)
        if c is None:
            log.debug("insert_anchor: curva inexistente %s", curve_id)
            return None
        idx = max(0, min(int(after_index) + 1, len(c.anchors)))
        c.anchors.insert(idx, Anchor(Point.of(position)))
        return idx

    def replace_anchors(self, curve_id: CurveId, anchors: Iterable[Anchor]) -> bool:
        c = self._curves.get(curve_id)
        if c is None:
            return False
        new = list(anchors)
        if not new:
            # Nunca dejar una curva vacía en escena.
            return False
        c.anchors[:] = new
        return True

    def set_closed(self, curve_id: CurveId, closed: bool = True) -> bool:
        c = self._curves.get(curve_id)
        if c is None:
            return False
        c.closed = bool(closed)
        return True

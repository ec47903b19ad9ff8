# File: knotpad/core/edit_mode.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Estados de edición del lienzo + estado explícito del controlador.
# Notes: Reemplaza las variables globales (modo, selección, último punto).

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from knotpad.core.models import CurveId, Point


class EditMode(str, Enum):
    """Modo activo del lienzo.

    - idle: click sobre ancla = seleccionar; click sobre trazo = insertar ancla.
    - drawing: click+arrastre = nueva curva a mano alzada (se cierra al soltar).
    - dragging_anchor: arrastrando el ancla seleccionada (recompute en cada paso).
    """

    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING_ANCHOR = "dragging_anchor"


@dataclass
class Selection:
    curve_id: CurveId
    anchor_index: int


@dataclass
class EditState:
    mode: EditMode = EditMode.IDLE
    # Curva en construcción (modo dibujo, entre pointer-down y pointer-up).
    drawing_curve: Optional[CurveId] = None
    selection: Optional[Selection] = None
    last_point: Optional[Point] = None
    viewport_size: tuple[float, float] = (0.0, 0.0)

    @property
    def drawing_enabled(self) -> bool:
        # El modo dibujo sigue activo mientras no se lo apague con la tecla de modo.
        return self.mode == EditMode.DRAWING

    def reset_pointer(self) -> None:
        self.selection = None
        self.last_point = None

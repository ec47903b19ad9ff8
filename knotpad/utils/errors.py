# File: knotpad/utils/errors.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Errores tipados del proyecto.
# Notes: Las referencias inválidas (ids/índices) NO son errores: son no-op silenciosos.
from __future__ import annotations


class KnotError(Exception):
    """Error base del proyecto."""


class KnotValidationError(KnotError):
    """Error de validación (input inválido en un borde de la API)."""


class KnotGeometryError(KnotError):
    """La geometría de una curva no se puede evaluar (curva degenerada/malformada)."""

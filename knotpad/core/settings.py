# File: knotpad/core/settings.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: wip
# Date: 2026-10-19
# Purpose: Preferencias (JSON): tema, marcadores, tolerancias de dibujo/hit-test.
# Notes: No depende de Qt; guarda en ~/.knotpad/settings.json. Defaults por proyecto en
#        knotpad_settings.json (se aplican como variables de entorno KNOTPAD_*).
from __future__ import annotations

import json
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from knotpad.core.version import (
    FLATTEN_SAMPLES,
    HIT_TOLERANCE,
    MARKER_FILL,
    MARKER_RADIUS,
    SIMPLIFY_TOLERANCE,
)

log = logging.getLogger(__name__)


def settings_dir() -> Path:
    """Carpeta de settings del usuario (ruta simple y explícita, sin Qt)."""
    return Path.home() / ".knotpad"


def settings_path() -> Path:
    return settings_dir() / "settings.json"


# ------------------------------
# Env helpers (tolerantes)
# ------------------------------

def env_int(name: str, default: int, *, min_value: int = 0, max_value: int = 1 << 30) -> int:
    try:
        raw = os.environ.get(name, "")
        if raw is None or str(raw).strip() == "":
            return int(default)
        return _clamp(int(str(raw).strip()), min_value, max_value)
    except ValueError:
        return int(default)


def env_float(name: str, default: float, *, min_value: float = -1e9, max_value: float = 1e9) -> float:
    try:
        v = float(os.getenv(name, str(default)).strip())
    except ValueError:
        return float(default)
    return float(_clamp(v, min_value, max_value))


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    s = str(raw).strip().lower()
    if s in ("1", "true", "yes", "y", "on"):
        return True
    if s in ("0", "false", "no", "n", "off"):
        return False
    return bool(default)


def _clamp(v, lo, hi):
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v


# ------------------------------
# Project settings (repo-local)
# ------------------------------
# Defaults reproducibles por proyecto (no por usuario) sin tocar el código.
PROJECT_SETTINGS_FILENAME = "knotpad_settings.json"


def find_project_settings_path(start: Path | None = None) -> Path | None:
    """Busca knotpad_settings.json subiendo desde start (o CWD)."""
    start = (start or Path.cwd()).resolve()
    for p in (start, *start.parents):
        candidate = p / PROJECT_SETTINGS_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_project_settings(start: Path | None = None, *, logger: logging.Logger | None = None) -> Dict[str, Any]:
    """Carga el JSON de project settings. Devuelve {} si no existe o es inválido."""
    _log = logger or log
    p = find_project_settings_path(start)
    if not p:
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (OSError, ValueError) as e:
        _log.warning("No se pudo leer %s: %s", p, e)
        return {}


def _deep_get(d: Dict[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def apply_project_settings(
    start: Path | None = None,
    *,
    logger: logging.Logger | None = None,
    prefer_env: bool = True,
) -> Dict[str, Any]:
    """Carga knotpad_settings.json (si existe) y lo aplica vía variables de entorno.

    - Si `prefer_env=True`, una env var ya seteada NO se pisa (ganan los overrides manuales).
    - Si `prefer_env=False`, el JSON pisa la env var.

    Devuelve un dict con los valores *aplicados desde JSON* (útil para logging/debug).
    """
    _log = logger or log
    data = load_project_settings(start, logger=_log)
    if not data:
        return {}

    applied: Dict[str, Any] = {}

    def _set_env(key: str, value: Any) -> None:
        if prefer_env and os.environ.get(key):
            return
        os.environ[key] = str(value)

    # Marcadores de intersección
    radius = _deep_get(data, "markers.radius")
    if isinstance(radius, (int, float)) and 0.5 <= float(radius) <= 50.0:
        applied["markers.radius"] = float(radius)
        _set_env("KNOTPAD_MARKER_RADIUS", float(radius))

    fill = _deep_get(data, "markers.fill")
    if isinstance(fill, str) and fill.strip():
        applied["markers.fill"] = fill.strip()
        _set_env("KNOTPAD_MARKER_FILL", fill.strip())

    # Dibujo / edición
    tol = _deep_get(data, "drawing.simplify_tolerance")
    if isinstance(tol, (int, float)) and 0.0 < float(tol) <= 1000.0:
        applied["drawing.simplify_tolerance"] = float(tol)
        _set_env("KNOTPAD_SIMPLIFY_TOLERANCE", float(tol))

    hit = _deep_get(data, "drawing.hit_tolerance")
    if isinstance(hit, (int, float)) and 0.0 < float(hit) <= 100.0:
        applied["drawing.hit_tolerance"] = float(hit)
        _set_env("KNOTPAD_HIT_TOLERANCE", float(hit))

    # Geometría
    samples = _deep_get(data, "geometry.flatten_samples")
    if isinstance(samples, int) and 2 <= samples <= 256:
        applied["geometry.flatten_samples"] = samples
        _set_env("KNOTPAD_FLATTEN_SAMPLES", samples)

    # Lienzo
    theme = _deep_get(data, "ui.canvas.theme")
    if isinstance(theme, str) and theme.strip().lower() in VALID_CANVAS_THEMES:
        applied["ui.canvas.theme"] = theme.strip().lower()
        _set_env("KNOTPAD_CANVAS_THEME", theme.strip().lower())

    seed = _deep_get(data, "ui.canvas.seed_default_knot")
    if isinstance(seed, bool):
        applied["ui.canvas.seed_default_knot"] = seed
        _set_env("KNOTPAD_SEED_KNOT", "1" if seed else "0")

    if applied:
        _log.info("Project settings aplicados desde %s: %s", find_project_settings_path(start), applied)
    return applied


# Temas válidos para el lienzo. Mantener en sync con CanvasView.THEME_PRESETS.
VALID_CANVAS_THEMES = ("light", "dark")


@dataclass
class AppSettings:
    """Preferencias persistentes del usuario."""

    canvas_theme: str = "light"

    marker_radius: float = MARKER_RADIUS
    marker_fill: str = MARKER_FILL

    simplify_tolerance: float = SIMPLIFY_TOLERANCE
    hit_tolerance: float = HIT_TOLERANCE
    flatten_samples: int = FLATTEN_SAMPLES

    # Sembrar el nudo por defecto al arrancar.
    seed_default_knot: bool = True

    # UI (Qt): geometría de la ventana como base64 (evita dependencia fuerte a Qt).
    ui_main_geometry_b64: str = ""

    @classmethod
    def load(cls, path: Path | None = None) -> "AppSettings":
        """Carga desde disco (tolerante a errores) y aplica overrides KNOTPAD_*."""
        p = path or settings_path()
        out = cls()
        try:
            if p.exists():
                data = json.loads(p.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    out = cls.from_dict(data)
        except (OSError, ValueError):
            log.debug("No se pudieron cargar settings: %s", p, exc_info=True)
            out = cls()
        return out.with_env_overrides()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        out = cls()
        out.canvas_theme = _coerce_canvas_theme(data.get("canvas_theme", out.canvas_theme))
        out.marker_radius = _coerce_float(data.get("marker_radius"), 0.5, 50.0, out.marker_radius)
        out.marker_fill = str(data.get("marker_fill") or out.marker_fill)
        out.simplify_tolerance = _coerce_float(data.get("simplify_tolerance"), 0.01, 1000.0, out.simplify_tolerance)
        out.hit_tolerance = _coerce_float(data.get("hit_tolerance"), 0.5, 100.0, out.hit_tolerance)
        out.flatten_samples = _coerce_int(data.get("flatten_samples"), 2, 256, out.flatten_samples)
        out.seed_default_knot = bool(data.get("seed_default_knot", out.seed_default_knot))
        out.ui_main_geometry_b64 = str(data.get("ui_main_geometry_b64", "") or "")
        return out

    def with_env_overrides(self) -> "AppSettings":
        self.canvas_theme = _coerce_canvas_theme(os.environ.get("KNOTPAD_CANVAS_THEME", self.canvas_theme))
        self.marker_radius = env_float("KNOTPAD_MARKER_RADIUS", self.marker_radius, min_value=0.5, max_value=50.0)
        self.marker_fill = (os.environ.get("KNOTPAD_MARKER_FILL") or self.marker_fill).strip()
        self.simplify_tolerance = env_float(
            "KNOTPAD_SIMPLIFY_TOLERANCE", self.simplify_tolerance, min_value=0.01, max_value=1000.0
        )
        self.hit_tolerance = env_float("KNOTPAD_HIT_TOLERANCE", self.hit_tolerance, min_value=0.5, max_value=100.0)
        self.flatten_samples = env_int("KNOTPAD_FLATTEN_SAMPLES", self.flatten_samples, min_value=2, max_value=256)
        self.seed_default_knot = env_bool("KNOTPAD_SEED_KNOT", self.seed_default_knot)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": 1,
            "canvas_theme": _coerce_canvas_theme(self.canvas_theme),
            "marker_radius": float(self.marker_radius),
            "marker_fill": str(self.marker_fill),
            "simplify_tolerance": float(self.simplify_tolerance),
            "hit_tolerance": float(self.hit_tolerance),
            "flatten_samples": int(self.flatten_samples),
            "seed_default_knot": bool(self.seed_default_knot),
            "ui_main_geometry_b64": str(self.ui_main_geometry_b64 or ""),
        }

    def save(self, path: Path | None = None) -> None:
        """Guarda en disco (no debe romper la app)."""
        p = path or settings_path()
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError:
            log.debug("No se pudieron guardar settings", exc_info=True)


def _coerce_canvas_theme(v: Any) -> str:
    s = str(v or "").strip().lower()
    if s in VALID_CANVAS_THEMES:
        return s
    return "light"


def _coerce_int(v: Any, min_v: int, max_v: int, default: int) -> int:
    try:
        return _clamp(int(v), min_v, max_v)
    except (TypeError, ValueError):
        return int(default)


def _coerce_float(v: Any, min_v: float, max_v: float, default: float) -> float:
    try:
        return float(_clamp(float(v), min_v, max_v))
    except (TypeError, ValueError):
        return float(default)

# File: knotpad/utils/log.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Logging de la app: consola + logs/knotpad.log, nivel por KNOTPAD_LOG_LEVEL.
# Notes: Los handlers propios se marcan; setup repetido solo reajusta el nivel.
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FILENAME = "knotpad.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Atributo con el que se reconocen los handlers instalados por KnotPad.
_HANDLER_TAG = "_knotpad_handler"


def _own_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]


def _file_of(handlers: list[logging.Handler]) -> Optional[Path]:
    for h in handlers:
        if isinstance(h, logging.FileHandler):
            return Path(h.baseFilename)
    return None


def setup_logging(
    log_dir: str | os.PathLike = "logs",
    level: int = logging.INFO,
    *,
    filename: str = LOG_FILENAME,
) -> Optional[Path]:
    """Instala consola + archivo en el root logger y devuelve la ruta del log.

    Llamarlo otra vez no duplica handlers: solo cambia el nivel. Si el archivo
    no se puede abrir se sigue solo con consola y devuelve None.
    """
    root = logging.getLogger()
    root.setLevel(level)

    existing = _own_handlers(root)
    if existing:
        for h in existing:
            h.setLevel(level)
        return _file_of(existing)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_path: Optional[Path] = None
    file_error: Optional[OSError] = None
    try:
        d = Path(log_dir)
        d.mkdir(parents=True, exist_ok=True)
        log_path = d / filename
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    except OSError as e:
        log_path, file_error = None, e

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(fmt)
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)

    if file_error is not None:
        logging.getLogger(__name__).warning("Log solo por consola (%s): %s", log_dir, file_error)
    return log_path


def teardown_logging() -> None:
    """Quita y cierra los handlers de KnotPad (tests / reinicio del setup)."""
    root = logging.getLogger()
    for h in _own_handlers(root):
        root.removeHandler(h)
        h.close()


def level_from_env(default: int = logging.INFO) -> int:
    """Nivel de log desde KNOTPAD_LOG_LEVEL (DEBUG/INFO/...). Tolerante."""
    raw = (os.environ.get("KNOTPAD_LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    lvl = logging.getLevelName(raw)
    return lvl if isinstance(lvl, int) else default


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

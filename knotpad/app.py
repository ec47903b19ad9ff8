# File: knotpad/app.py
# Project: KnotPad (KNP)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-19
# Purpose: Entry-point de la aplicación.
# Notes: `python -m knotpad` o el script `knotpad` instalado por pyproject.
from __future__ import annotations

import sys

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from knotpad.core.settings import AppSettings, apply_project_settings
from knotpad.core.version import APP_VERSION
from knotpad.ui.main_window import MainWindow
from knotpad.utils.log import get_logger, level_from_env, setup_logging

log = get_logger(__name__)


def main() -> int:
    setup_logging(level=level_from_env())
    # Project-level defaults (repo-local): knotpad_settings.json
    apply_project_settings(logger=log, prefer_env=True)
    app = QApplication(sys.argv)
    w = MainWindow(AppSettings.load())
    w.show()
    # El nudo inicial necesita el tamaño real del viewport: después del primer layout.
    QTimer.singleShot(0, w.seed_initial_scene)
    log.info("KnotPad iniciado (v%s)", APP_VERSION)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())

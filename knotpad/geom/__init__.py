"""Curve geometry for KnotPad.

This package is the geometry provider the core talks to: segment
construction (svgelements), flattening, curve-curve intersections,
hit-testing, freehand simplification and handle smoothing.

It is Qt-free so the intersection engine can be tested headless.
"""

from __future__ import annotations

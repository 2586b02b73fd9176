"""
Trip hotspots package.

This package contains:
- pipeline: line parsing, zone/hour aggregation, top-K selection
  and CSV/console reports for trip record files.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trip-hotspots")
except PackageNotFoundError:  # pragma: no cover - package not installed
    __version__ = "0.0.0"

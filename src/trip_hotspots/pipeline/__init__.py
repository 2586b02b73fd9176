# ============================================
# File: src/trip_hotspots/pipeline/__init__.py
# Description:
#   Public surface of the trip_hotspots pipeline.
#
#   Exposes:
#     - TripAnalyzer (ingest + top-K reports)
#     - run_hotspot_report()
# ============================================

from __future__ import annotations

from .aggregate_trips import DEFAULT_TOP_K, IngestStats, TripAnalyzer
from .build_reports import (
    DEFAULT_OUTPUT_DIR,
    print_reports,
    run_hotspot_report,
    slots_frame,
    write_reports,
    zones_frame,
)
from .parse_trip_line import (
    COMPACT_LAYOUT,
    DEFAULT_LAYOUTS,
    TRIP_LAYOUT,
    RecordLayout,
    parse_hour,
    parse_line,
)
from .top_k import SlotCount, ZoneCount

__all__ = [
    "COMPACT_LAYOUT",
    "DEFAULT_LAYOUTS",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_TOP_K",
    "IngestStats",
    "RecordLayout",
    "SlotCount",
    "TRIP_LAYOUT",
    "TripAnalyzer",
    "ZoneCount",
    "parse_hour",
    "parse_line",
    "print_reports",
    "run_hotspot_report",
    "slots_frame",
    "write_reports",
    "zones_frame",
]

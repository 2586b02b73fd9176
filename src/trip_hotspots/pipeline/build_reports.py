# ============================================
# File: src/trip_hotspots/pipeline/build_reports.py
# Description:
#   Turn the ranked top-K sequences into tables:
#
#     1) top_pickup_zones.csv
#        - rank, zone, trips
#
#     2) top_busy_slots.csv
#        - rank, zone, hour, trips
#
#   and print them on the console. run_hotspot_report() is the
#   end-to-end pipeline: source -> TripAnalyzer -> tables.
# ============================================

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from .aggregate_trips import DEFAULT_TOP_K, IngestStats, TripAnalyzer
from .top_k import SlotCount, ZoneCount

DEFAULT_OUTPUT_DIR = Path("data/processed/hotspots")
STDIN_MARKER = "-"

ZONE_COLUMNS = ["rank", "zone", "trips"]
SLOT_COLUMNS = ["rank", "zone", "hour", "trips"]


# ------------------ DataFrame builders ------------------


def zones_frame(zones: Sequence[ZoneCount]) -> pd.DataFrame:
    rows = [
        {"rank": rank, "zone": item.zone, "trips": int(item.count)}
        for rank, item in enumerate(zones, start=1)
    ]
    return pd.DataFrame(rows, columns=ZONE_COLUMNS)


def slots_frame(slots: Sequence[SlotCount]) -> pd.DataFrame:
    rows = [
        {
            "rank": rank,
            "zone": item.zone,
            "hour": int(item.hour),
            "trips": int(item.count),
        }
        for rank, item in enumerate(slots, start=1)
    ]
    return pd.DataFrame(rows, columns=SLOT_COLUMNS)


# ------------------ output ------------------


def _print_table(title: str, df: pd.DataFrame) -> None:
    print(f"\n{title}")
    if df.empty:
        print("  (no data)")
        return
    print(df.to_string(index=False))


def print_reports(zones: Sequence[ZoneCount], slots: Sequence[SlotCount]) -> None:
    _print_table("Top pickup zones:", zones_frame(zones))
    _print_table("Top busy slots (zone, hour):", slots_frame(slots))


def write_reports(
    zones: Sequence[ZoneCount],
    slots: Sequence[SlotCount],
    output_dir: Optional[str | Path] = None,
) -> Dict[str, Path]:
    """
    Write both rankings as CSV into output_dir (default:
    data/processed/hotspots). Returns a mapping report name -> path.
    """
    out_dir = Path(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR
    out_dir.mkdir(parents=True, exist_ok=True)

    zones_path = out_dir / "top_pickup_zones.csv"
    slots_path = out_dir / "top_busy_slots.csv"

    print(f"[build_reports] Writing {zones_path}")
    zones_frame(zones).to_csv(zones_path, index=False)

    print(f"[build_reports] Writing {slots_path}")
    slots_frame(slots).to_csv(slots_path, index=False)

    return {
        "top_pickup_zones": zones_path,
        "top_busy_slots": slots_path,
    }


def _print_summary(source: str, stats: IngestStats, analyzer: TripAnalyzer) -> None:
    print(f"\n[build_reports] Source        : {source}")
    print(f"[build_reports] Lines read    : {stats.lines_read}")
    print(f"[build_reports] Accepted      : {stats.accepted}")
    print(f"[build_reports] Rejected      : {stats.rejected}")
    print(f"[build_reports] Distinct zones: {analyzer.zone_count}")
    if stats.accepted == 0:
        print("  ⚠ No trip records ingested: reports are empty.")


# ------------------ pipeline principale ------------------


def run_hotspot_report(
    input_path: Optional[str | Path] = None,
    output_dir: Optional[str | Path] = None,
    k: int = DEFAULT_TOP_K,
    write: bool = True,
    progress: bool = False,
) -> Dict[str, Any]:
    """
    Ingest trips from input_path (None or "-" means standard input),
    print the two rankings and optionally write them as CSV.

    Returns:
        dict with keys:
            - stats: IngestStats of the run
            - top_zones: list[ZoneCount]
            - top_busy_slots: list[SlotCount]
            - outputs: mapping report name -> CSV path (empty if write=False)
    """
    analyzer = TripAnalyzer()

    if input_path is None or str(input_path) == STDIN_MARKER:
        source = "<stdin>"
        stats = analyzer.ingest_stream(progress=progress)
    else:
        source = str(input_path)
        stats = analyzer.ingest_file(input_path, progress=progress)

    zones = analyzer.top_zones(k)
    slots = analyzer.top_busy_slots(k)

    print_reports(zones, slots)
    _print_summary(source, stats, analyzer)

    outputs: Dict[str, Path] = {}
    if write:
        outputs = write_reports(zones, slots, output_dir)

    return {
        "stats": stats,
        "top_zones": zones,
        "top_busy_slots": slots,
        "outputs": outputs,
    }

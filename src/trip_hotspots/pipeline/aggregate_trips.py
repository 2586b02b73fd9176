# ============================================
# File: src/trip_hotspots/pipeline/aggregate_trips.py
# Description:
#   Aggregazione in streaming dei trip records:
#
#   - una sola passata sulle righe, nessun seek / re-read
#   - interning delle zone: nome -> id denso (0, 1, 2, ... in ordine
#     di prima apparizione) + liste parallele indicizzate per id:
#       zone_names[id]  -> nome zona (trimmed)
#       zone_totals[id] -> viaggi totali
#       zone_hours[id]  -> 24 contatori, uno per ora 0..23
#   - ogni ingest riparte da zero (niente append tra chiamate)
#
#   Sorgenti: iterable di righe, file su disco, stream (default stdin).
#   Una sorgente illeggibile NON fa fallire il run: il report è vuoto.
# ============================================

from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, TextIO

from tqdm import tqdm

from .parse_trip_line import (
    DEFAULT_LAYOUTS,
    HEADER_MARKERS,
    HOURS_PER_DAY,
    RecordLayout,
    is_likely_header,
    parse_line,
)
from .top_k import SlotCount, ZoneCount, slot_rank, top_k_by_heap, zone_rank

DEFAULT_TOP_K = 10

# Decodifica tollerante: un byte non UTF-8 rovina al massimo un record
DECODE_ERRORS = "replace"
RECORD_NEWLINE = "\n"


@dataclass(frozen=True)
class IngestStats:
    lines_read: int = 0
    accepted: int = 0
    rejected: int = 0
    header_skipped: bool = False


class TripAnalyzer:
    """
    Per-zone and per-(zone, hour) trip counters for one ingest run.

    Not safe for concurrent ingest calls on the same instance. Report
    methods only read state and can be called any number of times.

    Usage:
        analyzer = TripAnalyzer()
        analyzer.ingest_file("data/raw/trips.csv")
        analyzer.top_zones(10)
        analyzer.top_busy_slots(10)
    """

    def __init__(
        self,
        layouts: Sequence[RecordLayout] = DEFAULT_LAYOUTS,
        header_markers: Sequence[str] = HEADER_MARKERS,
    ):
        self.layouts = tuple(layouts)
        self.header_markers = tuple(header_markers)

        self._zone_ids: Dict[str, int] = {}
        self._zone_names: List[str] = []
        self._zone_totals: List[int] = []
        self._zone_hours: List[List[int]] = []

        self._lines_read = 0
        self._accepted = 0
        self._header_skipped = False
        self.last_run = IngestStats()

    # ------------------ stato ------------------

    def reset(self) -> None:
        self._zone_ids.clear()
        self._zone_names.clear()
        self._zone_totals.clear()
        self._zone_hours.clear()

        self._lines_read = 0
        self._accepted = 0
        self._header_skipped = False
        self.last_run = IngestStats()

    def _zone_id(self, zone: str) -> int:
        zone_id = self._zone_ids.get(zone)
        if zone_id is None:
            zone_id = len(self._zone_names)
            self._zone_ids[zone] = zone_id
            self._zone_names.append(zone)
            self._zone_totals.append(0)
            self._zone_hours.append([0] * HOURS_PER_DAY)
        return zone_id

    def _finish_run(self) -> IngestStats:
        self.last_run = IngestStats(
            lines_read=self._lines_read,
            accepted=self._accepted,
            rejected=self._lines_read - self._accepted - int(self._header_skipped),
            header_skipped=self._header_skipped,
        )
        return self.last_run

    def _consume(self, lines: Iterable[str]) -> None:
        first_line = True
        for line in lines:
            self._lines_read += 1

            if first_line:
                first_line = False
                if is_likely_header(line, self.header_markers):
                    self._header_skipped = True
                    continue

            parsed = parse_line(line, self.layouts)
            if parsed is None:
                continue

            zone, hour = parsed
            zone_id = self._zone_id(zone)
            self._zone_totals[zone_id] += 1
            self._zone_hours[zone_id][hour] += 1
            self._accepted += 1

    # ------------------ ingest ------------------

    def ingest(self, lines: Iterable[str]) -> IngestStats:
        """
        Reset all counters, then aggregate every accepted line.

        Malformed lines are skipped silently; they only show up in the
        `rejected` field of the returned IngestStats.
        """
        self.reset()
        self._consume(lines)
        return self._finish_run()

    def _ingest_handle(self, handle: TextIO, label: str, progress: bool) -> IngestStats:
        lines: Iterator[str] = tqdm(
            handle,
            unit="rows",
            desc=label,
            leave=False,
            disable=not progress,
        )
        try:
            self._consume(lines)
        except (OSError, ValueError) as e:
            print(f"[aggregate_trips] ✗ Error reading {label}: {e}. Stopping ingest.")
        return self._finish_run()

    def ingest_file(self, path: str | Path, progress: bool = False) -> IngestStats:
        """
        Ingest a CSV file from disk.

        A missing or unreadable file leaves the analyzer empty instead
        of raising.
        """
        self.reset()
        path = Path(path)

        try:
            # bad bytes become U+FFFD; only '\n' ends a record
            handle = path.open(
                "r",
                encoding="utf-8",
                errors=DECODE_ERRORS,
                newline=RECORD_NEWLINE,
            )
        except OSError as e:
            print(f"[aggregate_trips] ✗ Cannot open {path}: {e}. Nothing ingested.")
            return self._finish_run()

        with handle:
            return self._ingest_handle(handle, path.name, progress)

    def ingest_stream(
        self,
        stream: Optional[TextIO] = None,
        progress: bool = False,
    ) -> IngestStats:
        """Ingest an already-open text stream (default: standard input)."""
        self.reset()
        use_stdin = stream is None
        if use_stdin:
            stream = sys.stdin
        if stream is None or stream.closed:
            print("[aggregate_trips] ✗ Input stream is not available. Nothing ingested.")
            return self._finish_run()

        if use_stdin and isinstance(stream, io.TextIOWrapper):
            stream.reconfigure(errors=DECODE_ERRORS, newline=RECORD_NEWLINE)

        return self._ingest_handle(stream, "<stdin>", progress)

    # ------------------ accesso in sola lettura ------------------

    @property
    def zone_count(self) -> int:
        return len(self._zone_names)

    @property
    def zone_names(self) -> list[str]:
        return list(self._zone_names)

    @property
    def total_trips(self) -> int:
        return sum(self._zone_totals)

    def total_for(self, zone: str) -> int:
        zone_id = self._zone_ids.get(zone)
        return 0 if zone_id is None else self._zone_totals[zone_id]

    def hourly_for(self, zone: str) -> tuple[int, ...]:
        zone_id = self._zone_ids.get(zone)
        if zone_id is None:
            return (0,) * HOURS_PER_DAY
        return tuple(self._zone_hours[zone_id])

    # ------------------ report ------------------

    def _zone_candidates(self) -> Iterator[ZoneCount]:
        for zone, total in zip(self._zone_names, self._zone_totals):
            yield ZoneCount(zone=zone, count=total)

    def _slot_candidates(self) -> Iterator[SlotCount]:
        for zone, hours in zip(self._zone_names, self._zone_hours):
            for hour, count in enumerate(hours):
                if count > 0:
                    yield SlotCount(zone=zone, hour=hour, count=count)

    def top_zones(self, k: int = DEFAULT_TOP_K) -> list[ZoneCount]:
        """Busiest pickup zones: count desc, then zone name asc."""
        return top_k_by_heap(self._zone_candidates(), k, zone_rank)

    def top_busy_slots(self, k: int = DEFAULT_TOP_K) -> list[SlotCount]:
        """Busiest (zone, hour) slots: count desc, zone asc, hour asc."""
        return top_k_by_heap(self._slot_candidates(), k, slot_rank)

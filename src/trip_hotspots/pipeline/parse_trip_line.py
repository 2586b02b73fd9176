# ============================================
# File: src/trip_hotspots/pipeline/parse_trip_line.py
# Description:
#   Parsing di una singola riga CSV di viaggi (trip records).
#
#   - split grezzo sulle virgole (niente quoting: una virgola dentro
#     un campo tra virgolette conta come separatore)
#   - trim ASCII di ogni campo
#   - estrazione della sola ora (0..23) dal timestamp di pickup
#
#   Layout supportati (posizioni fisse per convenzione):
#     TripID,PickupZoneID,DropoffZoneID,PickupDateTime,DistanceKm,FareAmount
#     TripID,PickupZoneID,PickupDateTime
#
#   Le righe malformate NON sono errori: parse_line() ritorna None
#   e il chiamante le salta.
# ============================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

# Whitespace "C locale": niente spazi unicode
ASCII_WHITESPACE = " \t\n\r\x0b\x0c"
ASCII_DIGITS = "0123456789"

# Token cercati (come sottostringhe) nella prima riga per riconoscere l'header
HEADER_MARKERS = ("TripID", "PickupZoneID")

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class RecordLayout:
    name: str
    zone_index: int
    pickup_index: int
    min_fields: int
    max_fields: Optional[int] = None

    def accepts(self, field_count: int) -> bool:
        if field_count < self.min_fields:
            return False
        return self.max_fields is None or field_count <= self.max_fields


TRIP_LAYOUT = RecordLayout(
    name="trip",
    zone_index=1,
    pickup_index=3,
    min_fields=6,
)

COMPACT_LAYOUT = RecordLayout(
    name="compact",
    zone_index=1,
    pickup_index=2,
    min_fields=3,
    max_fields=3,
)

DEFAULT_LAYOUTS: tuple[RecordLayout, ...] = (TRIP_LAYOUT, COMPACT_LAYOUT)


# ------------------ helper per stringhe ------------------


def _trim(value: str) -> str:
    return value.strip(ASCII_WHITESPACE)


def split_fields(line: str) -> list[str]:
    """
    Split on every comma and trim each field independently.

    An empty line yields a single empty field.
    """
    return [_trim(field) for field in line.split(",")]


def is_likely_header(line: str, markers: Sequence[str] = HEADER_MARKERS) -> bool:
    """
    True when the raw (untrimmed) line contains every marker token.

    Substring match only: a data row whose text happens to contain
    all markers is classified as a header too.
    """
    return all(marker in line for marker in markers)


def parse_hour(value: str) -> Optional[int]:
    """
    Extract the hour of day from a timestamp-shaped string.

    Accepts "<date> <time>" or "<date>T<time>", where <time> starts with
    a one- or two-digit hour followed by ':'. Date, minutes and seconds
    are never looked at.

    Returns:
        int | None: hour in 0..23, or None when the value is rejected.
    """
    s = _trim(value)
    if not s:
        return None

    sep = s.find(" ")
    if sep == -1:
        sep = s.find("T")
    if sep == -1 or sep + 1 >= len(s):
        return None

    time_part = _trim(s[sep + 1 :])
    if not time_part:
        return None

    colon = time_part.find(":")
    if colon == -1:
        return None

    hour_text = _trim(time_part[:colon])
    if not hour_text or len(hour_text) > 2:
        return None
    if any(ch not in ASCII_DIGITS for ch in hour_text):
        return None

    hour = int(hour_text)
    if hour >= HOURS_PER_DAY:
        return None
    return hour


def select_layout(
    field_count: int,
    layouts: Sequence[RecordLayout] = DEFAULT_LAYOUTS,
) -> Optional[RecordLayout]:
    for layout in layouts:
        if layout.accepts(field_count):
            return layout
    return None


def parse_line(
    line: str,
    layouts: Sequence[RecordLayout] = DEFAULT_LAYOUTS,
) -> Optional[tuple[str, int]]:
    """
    Parse one raw trip line into (zone, hour).

    Returns None (reject) when no layout fits the field count, when the
    zone or the pickup timestamp is empty, or when no valid hour can be
    extracted from the timestamp.
    """
    fields = split_fields(line)

    layout = select_layout(len(fields), layouts)
    if layout is None:
        return None

    zone = fields[layout.zone_index]
    pickup = fields[layout.pickup_index]
    if not zone or not pickup:
        return None

    hour = parse_hour(pickup)
    if hour is None:
        return None
    return zone, hour

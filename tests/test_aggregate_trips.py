from __future__ import annotations

import io
import random

import pytest

from trip_hotspots.pipeline.aggregate_trips import IngestStats, TripAnalyzer
from trip_hotspots.pipeline.top_k import SlotCount, ZoneCount

COMPACT_HEADER = "TripID,PickupZoneID,PickupDateTime"
TRIP_HEADER = "TripID,PickupZoneID,DropoffZoneID,PickupDateTime,DistanceKm,FareAmount"


@pytest.fixture
def scenario_lines():
    return [
        COMPACT_HEADER,
        "T1,ZoneA,2024-01-01 08:15:00",
        "T2,ZoneA,2024-01-01 08:45:00",
        "T3,ZoneB,2024-01-01 09:00:00",
    ]


def _random_trip_lines(seed: int, n: int) -> list[str]:
    rng = random.Random(seed)
    lines = [TRIP_HEADER]
    for i in range(n):
        zone = f"Z{rng.randint(1, 40):02d}"
        hour = rng.randint(0, 23)
        lines.append(f"{i},{zone},Z00,2024-05-{rng.randint(1, 28):02d} {hour:02d}:{rng.randint(0, 59):02d}:00,1.5,9.0")
        if i % 17 == 0:
            lines.append(f"{i},,Z00,2024-05-01 10:00:00,1.5,9.0")
    return lines


def test_scenario_top_zones_and_slots(scenario_lines):
    analyzer = TripAnalyzer()
    analyzer.ingest(scenario_lines)

    assert analyzer.top_zones(2) == [ZoneCount("ZoneA", 2), ZoneCount("ZoneB", 1)]
    assert analyzer.top_busy_slots(3) == [
        SlotCount("ZoneA", 8, 2),
        SlotCount("ZoneB", 9, 1),
    ]


def test_ingest_stats(scenario_lines):
    analyzer = TripAnalyzer()
    stats = analyzer.ingest(scenario_lines + ["garbage", "T4,,2024-01-01 10:00:00"])

    assert stats == IngestStats(lines_read=6, accepted=3, rejected=2, header_skipped=True)
    assert analyzer.last_run == stats


def test_first_line_without_header_is_data():
    analyzer = TripAnalyzer()
    stats = analyzer.ingest(["T1,ZoneA,2024-01-01 08:15:00", "T2,ZoneB,2024-01-01 09:15:00"])

    assert stats.header_skipped is False
    assert stats.accepted == 2
    assert analyzer.top_zones(5) == [ZoneCount("ZoneA", 1), ZoneCount("ZoneB", 1)]


def test_header_only_checked_on_first_line():
    analyzer = TripAnalyzer()
    analyzer.ingest(
        [
            "T1,ZoneA,2024-01-01 08:15:00",
            "T2,TripID PickupZoneID,2024-01-01 08:15:00",
        ]
    )
    assert analyzer.total_for("TripID PickupZoneID") == 1


def test_malformed_only_input_gives_empty_reports():
    analyzer = TripAnalyzer()
    stats = analyzer.ingest(
        [
            "T1,,2024-01-01 08:15:00",
            "T2,ZoneA,2024-01-01 0815",
            "T3,ZoneA,2024-01-01",
            "",
        ]
    )

    assert stats.accepted == 0
    assert stats.rejected == 4
    for k in (1, 10, 1000):
        assert analyzer.top_zones(k) == []
        assert analyzer.top_busy_slots(k) == []


def test_empty_input():
    analyzer = TripAnalyzer()
    assert analyzer.ingest([]) == IngestStats()
    assert analyzer.top_zones() == []


@pytest.mark.parametrize("k", [0, -1])
def test_non_positive_k(scenario_lines, k):
    analyzer = TripAnalyzer()
    analyzer.ingest(scenario_lines)
    assert analyzer.top_zones(k) == []
    assert analyzer.top_busy_slots(k) == []


def test_zone_ids_follow_first_seen_order():
    analyzer = TripAnalyzer()
    analyzer.ingest(
        [
            "1,Queens,2024-01-01 01:00:00",
            "2,Bronx,2024-01-01 02:00:00",
            "3, Queens ,2024-01-01 03:00:00",
            "4,Brooklyn,2024-01-01 04:00:00",
        ]
    )
    assert analyzer.zone_names == ["Queens", "Bronx", "Brooklyn"]
    assert analyzer.zone_count == 3
    assert analyzer.total_for("Queens") == 2
    assert analyzer.total_for("queens") == 0


def test_six_column_trip_export():
    analyzer = TripAnalyzer()
    analyzer.ingest(
        [
            TRIP_HEADER,
            "1,P1,D1,2024-01-01T08:05:00,2.0,10.0",
            "2,P1,D2,2024-01-01T08:55:00,2.0,10.0",
            "3,P2,D1,2024-01-01 23:10:00,2.0,10.0",
            "4,P2,D1,2024-01-01 23:10:00,2.0",
        ]
    )
    assert analyzer.top_zones() == [ZoneCount("P1", 2), ZoneCount("P2", 1)]
    assert analyzer.top_busy_slots() == [SlotCount("P1", 8, 2), SlotCount("P2", 23, 1)]


def test_counter_sums():
    lines = _random_trip_lines(seed=7, n=2000)
    analyzer = TripAnalyzer()
    stats = analyzer.ingest(lines)

    assert stats.accepted == 2000
    assert analyzer.total_trips == 2000
    for zone in analyzer.zone_names:
        assert sum(analyzer.hourly_for(zone)) == analyzer.total_for(zone)
        assert len(analyzer.hourly_for(zone)) == 24


def test_report_sizes_and_order():
    analyzer = TripAnalyzer()
    analyzer.ingest(_random_trip_lines(seed=11, n=1500))

    zones = analyzer.top_zones(1000)
    assert len(zones) == analyzer.zone_count
    assert zones == sorted(zones, key=lambda z: (-z.count, z.zone))
    for item in zones:
        assert item.count == analyzer.total_for(item.zone)

    non_zero = sum(
        1 for zone in analyzer.zone_names for count in analyzer.hourly_for(zone) if count > 0
    )
    slots = analyzer.top_busy_slots(10_000)
    assert len(slots) == non_zero
    assert all(item.count > 0 for item in slots)
    assert slots == sorted(slots, key=lambda s: (-s.count, s.zone, s.hour))
    assert len(analyzer.top_busy_slots(5)) == 5


def test_reports_are_idempotent_and_prefix_monotonic():
    analyzer = TripAnalyzer()
    analyzer.ingest(_random_trip_lines(seed=3, n=800))

    assert analyzer.top_zones(7) == analyzer.top_zones(7)
    assert analyzer.top_busy_slots(7) == analyzer.top_busy_slots(7)
    for k in range(0, analyzer.zone_count + 2):
        assert analyzer.top_zones(k) == analyzer.top_zones(k + 1)[:k]
        assert analyzer.top_busy_slots(k) == analyzer.top_busy_slots(k + 1)[:k]


def test_second_ingest_discards_first(scenario_lines):
    analyzer = TripAnalyzer()
    analyzer.ingest(scenario_lines)
    analyzer.ingest([COMPACT_HEADER, "T9,ZoneC,2024-01-02 18:00:00"])

    assert analyzer.top_zones(10) == [ZoneCount("ZoneC", 1)]
    assert analyzer.top_busy_slots(10) == [SlotCount("ZoneC", 18, 1)]
    assert analyzer.total_for("ZoneA") == 0
    assert analyzer.zone_names == ["ZoneC"]


def test_ingest_file(tmp_path, scenario_lines):
    path = tmp_path / "trips.csv"
    path.write_text("\r\n".join(scenario_lines) + "\r\n", encoding="utf-8")

    analyzer = TripAnalyzer()
    stats = analyzer.ingest_file(path)

    assert stats.accepted == 3
    assert stats.header_skipped is True
    assert analyzer.top_zones(2) == [ZoneCount("ZoneA", 2), ZoneCount("ZoneB", 1)]


def test_missing_file_degrades_to_empty(tmp_path, scenario_lines, capsys):
    analyzer = TripAnalyzer()
    analyzer.ingest(scenario_lines)

    stats = analyzer.ingest_file(tmp_path / "does-not-exist.csv")

    assert stats == IngestStats(0, 0, 0, False)
    assert analyzer.top_zones(10) == []
    assert analyzer.top_busy_slots(10) == []
    assert "✗" in capsys.readouterr().out


def test_directory_instead_of_file_degrades_to_empty(tmp_path):
    analyzer = TripAnalyzer()
    assert analyzer.ingest_file(tmp_path).accepted == 0
    assert analyzer.top_zones() == []


def test_undecodable_bytes_spoil_only_their_line(tmp_path, capsys):
    good = b"T1,ZoneA,2024-01-01 08:15:00\n"
    path = tmp_path / "mixed_encoding.csv"
    path.write_bytes(
        b"TripID,PickupZoneID,PickupDateTime\n"
        + good * 5000
        + b"T9,Bogot\xe1,2024-01-01 10:00:00\n"  # cp1252, not UTF-8
        + b"T10,\xff\xfe,2024-01-01 11:00:00\n"
        + good * 5000
    )

    analyzer = TripAnalyzer()
    stats = analyzer.ingest_file(path)

    assert stats.lines_read == 10003
    assert stats.accepted == 10002
    assert analyzer.total_for("ZoneA") == 10000
    assert analyzer.hourly_for("ZoneA")[8] == 10000
    assert analyzer.total_for("Bogot\ufffd") == 1
    assert "✗" not in capsys.readouterr().out


def test_lone_carriage_return_does_not_split_record(tmp_path):
    path = tmp_path / "stray_cr.csv"
    path.write_bytes(b"T1,Zone\rA,2024-01-01 08:15:00\nT2,ZoneB,2024-01-01 09:00:00\r\n")

    analyzer = TripAnalyzer()
    stats = analyzer.ingest_file(path)

    assert stats.lines_read == 2
    assert stats.accepted == 2
    assert analyzer.total_for("Zone\rA") == 1
    assert analyzer.total_for("ZoneB") == 1


def test_stdin_bytes_decoded_leniently(monkeypatch):
    raw = io.BytesIO(
        b"T1,ZoneA,2024-01-01 08:15:00\n"
        b"T2,Bogot\xe1,2024-01-01 09:00:00\n"
        b"T3,Zone\rB,2024-01-01 10:00:00\n"
    )
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(raw, encoding="utf-8"))

    analyzer = TripAnalyzer()
    stats = analyzer.ingest_stream()

    assert stats.lines_read == 3
    assert stats.accepted == 3
    assert analyzer.total_for("Zone\rB") == 1


def test_ingest_stream(scenario_lines):
    analyzer = TripAnalyzer()
    stats = analyzer.ingest_stream(io.StringIO("\n".join(scenario_lines) + "\n"), progress=True)

    assert stats.accepted == 3
    assert analyzer.top_busy_slots(1) == [SlotCount("ZoneA", 8, 2)]


def test_ingest_stream_defaults_to_stdin(monkeypatch, scenario_lines):
    monkeypatch.setattr("sys.stdin", io.StringIO("\n".join(scenario_lines)))

    analyzer = TripAnalyzer()
    assert analyzer.ingest_stream().accepted == 3


def test_closed_stream_degrades_to_empty(capsys):
    stream = io.StringIO("T1,ZoneA,2024-01-01 08:15:00\n")
    stream.close()

    analyzer = TripAnalyzer()
    assert analyzer.ingest_stream(stream) == IngestStats()
    assert "✗" in capsys.readouterr().out

# main.py

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure that the src/ directory is on sys.path when running
# `python main.py` from the project root.
ROOT_DIR = Path(__file__).resolve().parent
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from trip_hotspots.pipeline import (  # type: ignore[import]
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TOP_K,
    run_hotspot_report,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rank the busiest pickup zones and (zone, hour) slots of a trip CSV.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Trip CSV file, or '-' to read standard input (default: -).",
    )
    parser.add_argument(
        "-k",
        "--top-k",
        dest="k",
        type=int,
        default=DEFAULT_TOP_K,
        help=f"Number of entries per ranking (default: {DEFAULT_TOP_K}).",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for the CSV reports (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--write",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write the rankings as CSV files into --out-dir.",
    )
    parser.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Show a row progress bar while ingesting.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """
    Run the hotspot pipeline:
    - ingest the trip records (file or stdin)
    - print the top zones and top (zone, hour) slots
    - write them as CSV unless --no-write
    """
    args = parse_args(argv)
    results = run_hotspot_report(
        input_path=args.input,
        output_dir=args.out_dir,
        k=args.k,
        write=args.write,
        progress=args.progress,
    )

    if results["outputs"]:
        print("\nReports:")
        for name, out_path in results["outputs"].items():
            print(f"  {name}: {out_path}")


if __name__ == "__main__":
    main()

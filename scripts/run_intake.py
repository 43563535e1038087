#!/usr/bin/env python3
"""
Run spreadsheet intake: decode a workbook, classify and extract its sheets,
preview the parsed records, and optionally write the commit payloads.

Usage:
    python3 scripts/run_intake.py --file <path> [options]

Examples:
    # Parse everything the classifier recognizes and preview 5 rows per table
    python3 scripts/run_intake.py --file march.xlsx --preview 5

    # Treat unnamed sheets as cash-in and write payloads for entity 42
    python3 scripts/run_intake.py --file Sheet1.csv --hint cash_in --entity 42 --out out/

    # Probe the upload (sheets, sizes, first rows) without parsing
    python3 scripts/run_intake.py --file march.xlsx --probe-only
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run spreadsheet intake: decode -> classify -> extract -> [write payloads].",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--file",
        required=True,
        type=Path,
        help="Path to the upload (.xlsx or .csv).",
    )
    parser.add_argument(
        "--hint",
        default="",
        help="Report-type hint: cash_in, cash_out, inventory_report, financial_statements, auto (default: none).",
    )
    parser.add_argument(
        "--default-type",
        default=None,
        help="Report type assumed for sheets whose names identify nothing (default: the hint's type).",
    )
    parser.add_argument(
        "--entity",
        default=None,
        help="Target entity id. Required with --out.",
    )
    parser.add_argument(
        "--preview",
        type=int,
        default=5,
        metavar="N",
        help="Rows to show per parsed table (default: 5; 0 hides the preview).",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Directory to write commit payloads to as JSON files.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Override intake config YAML (default: packaged defaults.yaml).",
    )
    parser.add_argument(
        "--probe-only",
        action="store_true",
        help="Probe the upload (sheets, row counts, sample rows) and exit.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Emit structured debug logs to stderr.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1
    if args.out is not None and not args.entity:
        print("ERROR: --out requires --entity.", file=sys.stderr)
        return 1

    # Lazy imports so we fail fast on args first
    from finance_intake.config import default_config, load_intake_config
    from finance_intake.exceptions import IntakeError
    from finance_intake.logging_config import configure_logging
    from finance_intake.services import IntakeService, JsonFileSink

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = load_intake_config(args.config) if args.config else default_config()
    except IntakeError as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    svc = IntakeService(config=config)

    try:
        if args.probe_only:
            probe = svc.probe(source_path)
            print(f"File: {probe.file_name}")
            for sheet in probe.sheets:
                print(f"Sheet {sheet.sheet_name!r}: {sheet.row_count} rows, {sheet.column_count} columns")
                for i, row in enumerate(sheet.sample_rows[:3], 1):
                    print(f"  {i}: {list(row)}")
            return 0

        print(f"Parsing {source_path}...")
        result = svc.parse_file(source_path, args.hint, args.default_type)
    except IntakeError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1

    for sheet in result.sheets:
        print(f"  {sheet.sheet_name!r} -> {sheet.report_type.value}")
    for warning in result.warnings:
        where = f" [{warning.sheet_name}]" if warning.sheet_name else ""
        print(f"  WARNING {warning.code}{where}: {warning.message}")

    if args.preview > 0:
        for key, table in svc.preview(result.dataset, limit=args.preview).items():
            print(f"\n{key}: {table.total_rows} records")
            print("  " + " | ".join(table.columns))
            for row in table.rows:
                print("  " + " | ".join(str(row.get(c, "")) for c in table.columns))
            if table.truncated:
                print(f"  ... and {table.total_rows - len(table.rows)} more.")
            if table.counters:
                print("  Detected: " + ", ".join(f"{k}={v}" for k, v in table.counters.items()))

    if args.out is None:
        return 0

    sink = JsonFileSink(args.out)
    try:
        submission = svc.submit(result.dataset, args.entity, sink)
    except IntakeError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1
    for warning in submission.warnings:
        print(f"  WARNING {warning.code}: {warning.message}")
    if not submission.ok:
        print(f"ERROR: {submission.failed_kind} failed: {submission.message}", file=sys.stderr)
        return 1
    print(f"Wrote {', '.join(submission.submitted)} to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

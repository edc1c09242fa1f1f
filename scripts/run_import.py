#!/usr/bin/env python3
"""
Import a weekly AR summary CSV into the metrics store.

Uses the active config (get_active_config) for the database URL, upload
limit and sentinels; --db-url overrides the database.

Usage:
    python3 scripts/run_import.py --file <path> [options]

Examples:
    # Validate only; report errors and warnings, write nothing
    python3 scripts/run_import.py --file weekly_ar.csv --dry-run

    # Import (new weeks inserted, existing weeks replaced)
    python3 scripts/run_import.py --file weekly_ar.csv

    # Probe source file (row count, columns, sample) without parsing
    python3 scripts/run_import.py --file weekly_ar.csv --probe-only
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import a weekly AR summary CSV: parse -> validate -> store.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--file",
        required=True,
        type=Path,
        help="Path to the weekly AR summary CSV.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config YAML (default: AR_METRICS_CONFIG env or packaged defaults).",
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (default: from config).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and validate only; do not write to the store.",
    )
    parser.add_argument(
        "--probe-only",
        action="store_true",
        help="Print the header and first weeks of the file, then exit.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1
    data = source_path.read_bytes()

    # Lazy imports so we fail fast on args first
    from dataclasses import replace

    from ar_config import get_active_config
    from ar_ingestion.adapters.csv_adapter import CsvSourceAdapter
    from ar_ingestion.services.import_service import preview_upload
    from ar_kernel.exceptions import ArMetricsError, StructuralCsvError
    from ar_services.dashboard_service import DashboardService

    if args.probe_only:
        adapter = CsvSourceAdapter()
        try:
            probe = adapter.probe(adapter.decode(data))
        except UnicodeDecodeError as e:
            print(f"ERROR: File is not valid UTF-8: {e}", file=sys.stderr)
            return 1
        print(f"{probe.row_count} data rows in {source_path.name}")
        print("Header: " + ", ".join(probe.columns))
        for row in probe.sample_rows[:3]:
            print("  " + " | ".join(row))
        return 0

    try:
        config = get_active_config(args.config)
    except ArMetricsError as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1
    if args.db_url:
        config = replace(config, database_url=args.db_url)

    if args.dry_run:
        try:
            result = preview_upload(data, config.upload.max_bytes, config.upload.sentinels)
        except StructuralCsvError as e:
            for err in e.errors:
                print(f"ERROR: {err.render()}", file=sys.stderr)
            return 1
        except ArMetricsError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        for warning in result.warnings:
            print(f"WARNING: {warning.render()}")
        for err in result.errors:
            print(f"ERROR: {err.render()}", file=sys.stderr)
        print(
            f"Rows: {result.total_rows}  valid: {result.success_count}  "
            f"skipped: {result.skip_count}"
        )
        return 0 if result.ok else 1

    service = DashboardService.from_config(config)
    payload = service.upload_csv(data, source_path.name)
    print(json.dumps(payload, indent=2))
    return 0 if payload["success"] else 1


if __name__ == "__main__":
    sys.exit(main())

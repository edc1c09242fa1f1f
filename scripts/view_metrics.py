#!/usr/bin/env python3
"""
Print AR dashboard queries as JSON.

Usage:
    python3 scripts/view_metrics.py status
    python3 scripts/view_metrics.py current [--week YYYY-MM-DD]
    python3 scripts/view_metrics.py history [--months N]

Options common to every command: --config <yaml>, --db-url <url>.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show AR store status, current metrics or historical series.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Config YAML.")
    parser.add_argument("--db-url", default=None, help="Database URL (default: from config).")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Last upload, latest week, record count.")

    current = sub.add_parser("current", help="Current-week metrics and insights.")
    current.add_argument(
        "--week",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Reference week (YYYY-MM-DD). Default: latest stored week.",
    )

    history = sub.add_parser("history", help="Raw weekly series.")
    history.add_argument("--months", type=int, default=None, help="Months of history (default 12).")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    from dataclasses import replace

    from ar_config import get_active_config
    from ar_kernel.domain.dtos import EmptyDatasetError
    from ar_kernel.exceptions import ArMetricsError
    from ar_services.dashboard_service import DashboardService
    from ar_services.serializers import serialize_empty

    try:
        config = get_active_config(args.config)
        if args.db_url:
            config = replace(config, database_url=args.db_url)
        service = DashboardService.from_config(config)

        if args.command == "status":
            result = service.status()
        elif args.command == "current":
            result = service.current_metrics(args.week)
        else:
            result = service.historical(args.months)
    except ArMetricsError as e:
        print(json.dumps({"error": e.code, "message": str(e)}, indent=2), file=sys.stderr)
        return 1

    if isinstance(result, EmptyDatasetError):
        print(json.dumps(serialize_empty(result), indent=2), file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

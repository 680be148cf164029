#!/usr/bin/env python3
"""
Run a maintenance job once. Meant to be invoked by cron or a platform scheduler.

Usage:
  python3 scripts/run_job.py --list
  python3 scripts/run_job.py process-due-workflows
  python3 scripts/run_job.py calculate-daily-analytics --now 2026-06-14T03:00:00+00:00
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from autodetail.application.use_cases.maintenance import JOBS  # noqa: E402
from autodetail.core.config import settings  # noqa: E402
from autodetail.wiring.dependencies import get_container  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a maintenance job.")
    parser.add_argument("job", nargs="?", choices=sorted(JOBS), help="job name")
    parser.add_argument("--now", type=datetime.fromisoformat, default=None, help="override the current time (ISO 8601)")
    parser.add_argument("--list", action="store_true", help="list jobs and their cadence")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    if args.list or not args.job:
        for spec in JOBS.values():
            print(f"{spec.name:<28} {spec.schedule:<26} {spec.description}")
        return 0

    result = get_container().jobs.run(args.job, args.now)
    print(json.dumps({"job": args.job, "result": result}, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

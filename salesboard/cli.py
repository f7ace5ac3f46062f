"""CLI entry point for salesboard."""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, load_settings
from .dashboard import Dashboard, RecordSource
from .feed import TaskFeedClient, TaskFileSource
from .report import build_export, format_metrics, format_task_row
from .store import TaskStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="salesboard",
        description="Load sales tasks and report ROI and performance metrics.",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Base URL serving tasks.json (or set SALESBOARD_TASKS_URL)",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Local JSON file with a list of task records",
    )
    parser.add_argument(
        "--seed-count",
        type=int,
        default=None,
        help="Number of demo tasks to generate when no data is available",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for generated demo tasks",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="How many tasks to list in the report (default: 10)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write metrics and ordered tasks to a JSON file",
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    try:
        settings = load_settings()
    except ConfigError as e:
        logging.error("Invalid configuration: %s", e)
        return 1
    if args.seed_count is not None:
        if args.seed_count < 0:
            logging.error("--seed-count must not be negative")
            return 1
        settings = replace(settings, seed_count=args.seed_count)

    url = args.url or settings.tasks_url
    if args.file and not Path(args.file).is_file():
        logging.error("Task file not found: %s", args.file)
        return 1

    source: RecordSource | None = None
    client: TaskFeedClient | None = None
    if url:
        client = TaskFeedClient(url, path=settings.tasks_path, timeout=settings.timeout)
        source = client
    elif args.file:
        source = TaskFileSource(args.file)

    rng = random.Random(args.seed) if args.seed is not None else None
    dashboard = Dashboard(
        TaskStore(thresholds=settings.thresholds),
        source=source,
        settings=settings,
        rng=rng,
    )
    try:
        dashboard.load()
    finally:
        if client is not None:
            client.close()

    # Report
    for label, value in format_metrics(dashboard.metrics).items():
        logging.info("%-16s %s", label + ":", value)
    for derived in dashboard.derived_sorted[: max(args.top, 0)]:
        logging.info("  %s", format_task_row(derived))
    if dashboard.error:
        logging.warning("Load error: %s", dashboard.error)

    # Write JSON output
    if args.output_json:
        Path(args.output_json).write_text(json.dumps(build_export(dashboard), indent=2))
        logging.info("Results written to %s", args.output_json)

    return 1 if dashboard.error else 0


if __name__ == "__main__":
    sys.exit(main())

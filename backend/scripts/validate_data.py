#!/usr/bin/env python3
"""
validate_data.py - integrity check for the festival catalog JSON.

Loads films.json, entries.json, screenings.json (and editions.json when
present) from the data directory and reports duplicate ids, dangling
references and unparsable timestamps. Exits 1 when any error is found so the
check can gate a deploy.

Usage:
    python scripts/validate_data.py
    python scripts/validate_data.py --data-dir path/to/data --json
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.services.catalog.store import load_raw_catalog  # noqa: E402
from app.services.catalog.validation import ValidationReport, validate_catalog  # noqa: E402

logger = logging.getLogger("validate_data")

DEFAULT_DATA_DIR = BACKEND_DIR / "data"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check the catalog JSON files for integrity errors.")
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(DEFAULT_DATA_DIR),
        help=f"Directory holding the catalog JSON files (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Print the report as JSON instead of text.",
    )
    return parser


def print_report(report: ValidationReport, data_dir: str) -> None:
    print(f"Catalog: {data_dir}")
    for message in report.errors:
        print(f"  ERROR   {message}")
    for message in report.warnings:
        print(f"  WARNING {message}")
    print("-" * 40)
    if report.ok:
        print(f"OK: no integrity errors ({len(report.warnings)} warnings)")
    else:
        print(f"FAILED: {len(report.errors)} errors, {len(report.warnings)} warnings")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        raw = load_raw_catalog(args.data_dir)
    except (FileNotFoundError, ValueError, json.JSONDecodeError) as exc:
        logger.error("Could not load catalog: %s", exc)
        return 1

    report = validate_catalog(raw)
    if args.as_json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(report, args.data_dir)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
prefix_ids.py - namespace the film ids of one edition.

When two festivals ship overlapping film ids, prefix every film id that has
an entry in the target edition (``film_001`` -> ``biff2025_film_001``) and
rewrite the ``filmId`` references in entries.json to match. Ids that already
carry the prefix are left alone, so the script can be re-run safely.

Default behavior writes both files; use --dry-run to print the plan only.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Optional, Tuple

BACKEND_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = BACKEND_DIR / "data"

logger = logging.getLogger("prefix_ids")


def plan_renames(
    films: List[Dict[str, Any]], entries: List[Dict[str, Any]], edition_id: str, prefix: str
) -> Dict[str, str]:
    """Map old film id -> new film id for films entered in ``edition_id``."""
    target_ids = {entry.get("filmId") for entry in entries if entry.get("editionId") == edition_id}
    renames: Dict[str, str] = {}
    for film in films:
        film_id = str(film.get("id", ""))
        if film_id in target_ids and not film_id.startswith(prefix):
            renames[film_id] = f"{prefix}{film_id}"
    return renames


def apply_renames(
    films: List[Dict[str, Any]], entries: List[Dict[str, Any]], renames: Dict[str, str]
) -> Tuple[int, int]:
    """Rewrite film ids and entry references in place; returns (films, entries) touched."""
    film_count = 0
    for film in films:
        new_id = renames.get(film.get("id"))
        if new_id:
            film["id"] = new_id
            film_count += 1

    entry_count = 0
    for entry in entries:
        new_id = renames.get(entry.get("filmId"))
        if new_id:
            entry["filmId"] = new_id
            entry_count += 1
    return film_count, entry_count


def _read_array(path: Path) -> List[Dict[str, Any]]:
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def _write_array(path: Path, data: List[Dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
        fh.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prefix the film ids of one edition.")
    parser.add_argument("--edition", required=True, help="Edition id, e.g. edition_biff_2025")
    parser.add_argument("--prefix", required=True, help="Prefix to prepend, e.g. biff2025_")
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(DEFAULT_DATA_DIR),
        help=f"Directory holding films.json and entries.json (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=False,
        help="Print the planned renames without writing any file.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not args.prefix.strip():
        logger.error("--prefix must not be blank")
        return 2

    data_dir = Path(args.data_dir)
    films_path = data_dir / "films.json"
    entries_path = data_dir / "entries.json"
    try:
        films = _read_array(films_path)
        entries = _read_array(entries_path)
    except (OSError, ValueError) as exc:
        logger.error("Could not load catalog: %s", exc)
        return 1

    renames = plan_renames(films, entries, args.edition, args.prefix)
    logger.info("%d film ids of %s need the prefix %r", len(renames), args.edition, args.prefix)
    for old_id, new_id in sorted(renames.items()):
        print(f"  {old_id} -> {new_id}")

    if args.dry_run:
        print("Dry run: no files written.")
        return 0
    if not renames:
        return 0

    film_count, entry_count = apply_renames(films, entries, renames)
    _write_array(films_path, films)
    _write_array(entries_path, entries)
    logger.info("Updated %d films and %d entries", film_count, entry_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Integrity checks for the catalog JSON.

Errors make the dataset unusable (dangling references, duplicate ids, bad
timestamps); warnings are suspicious but loadable.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from .store import CatalogStore


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"ok": self.ok, "errors": list(self.errors), "warnings": list(self.warnings)}


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp, returning None when it is missing or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None


def _duplicates(ids: List[str]) -> List[str]:
    return sorted(item for item, n in Counter(ids).items() if n > 1)


def validate_catalog(catalog: Union[CatalogStore, Mapping[str, Any]]) -> ValidationReport:
    """
    Check a loaded store (or the raw ``{films, entries, screenings, editions}``
    lists) for integrity problems.
    """
    store = catalog if isinstance(catalog, CatalogStore) else CatalogStore.from_raw(**catalog)
    report = ValidationReport()

    for label, items in (
        ("film", store.films),
        ("entry", store.entries),
        ("screening", store.screenings),
    ):
        for dup in _duplicates([item.id for item in items]):
            report.errors.append(f"Duplicate {label} id: {dup}")

    for entry in store.entries:
        if store.film(entry.film_id) is None:
            report.errors.append(f"Entry {entry.id} references missing film {entry.film_id}")

    for screening in store.screenings:
        if store.entry(screening.entry_id) is None:
            report.errors.append(
                f"Screening {screening.id} references missing entry {screening.entry_id}"
            )

        start = parse_iso(screening.starts_at)
        if start is None:
            report.errors.append(f"Screening {screening.id} has invalid startsAt: {screening.starts_at!r}")
        if screening.ends_at is None:
            continue
        end = parse_iso(screening.ends_at)
        if end is None:
            report.errors.append(f"Screening {screening.id} has invalid endsAt: {screening.ends_at!r}")
            continue
        if start is not None:
            try:
                ends_first = end <= start
            except TypeError:
                # naive vs aware timestamps
                ends_first = end.replace(tzinfo=None) <= start.replace(tzinfo=None)
            if ends_first:
                report.warnings.append(f"Screening {screening.id} ends before it starts")

    return report

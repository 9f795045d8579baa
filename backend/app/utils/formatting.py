"""Small string helpers for ISO timestamps and ids used across the catalog."""

from datetime import date
from typing import Optional
from urllib.parse import unquote

WEEKDAYS_KO = ("월", "화", "수", "목", "금", "토", "일")


def ymd(iso: Optional[str]) -> str:
    """``2025-05-01T10:30:00+09:00`` -> ``2025-05-01``."""
    return iso[:10] if iso else ""


def hm(iso: Optional[str]) -> str:
    """``2025-05-01T10:30:00+09:00`` -> ``10:30``."""
    return iso[11:16] if iso else ""


def _date_of(iso: str) -> date:
    return date(int(iso[0:4]), int(iso[5:7]), int(iso[8:10]))


def weekday_k(iso: Optional[str]) -> str:
    """Korean one-letter weekday of the date part, e.g. ``목``."""
    if not iso:
        return ""
    return WEEKDAYS_KO[_date_of(iso).weekday()]


def is_weekend(iso: Optional[str]) -> bool:
    if not iso:
        return False
    return _date_of(iso).weekday() >= 5


def md_k(iso: Optional[str]) -> str:
    """``2025-05-01`` -> ``5월 1일(목)``."""
    if not iso:
        return ""
    day = _date_of(iso)
    return f"{day.month}월 {day.day}일({weekday_k(iso)})"


def norm_id(value: object) -> str:
    """URL-decode, trim and lower-case an id taken from a path or query."""
    text = str(value)
    try:
        text = unquote(text, errors="strict")
    except UnicodeDecodeError:
        pass
    return text.strip().lower()


def clamp(n: float, low: float, high: float) -> float:
    return min(high, max(low, n))

"""
Comma-separated multi-value query parameters.

Filter parameters such as ``sections`` or ``dates`` carry several values in a
single string. A value containing a comma or a double quote is wrapped in
double quotes, and each double quote inside it is written twice.
"""

from typing import Iterable, List, Optional, Sequence


def parse_csv(csv: Optional[str]) -> List[str]:
    """Split a quote-aware CSV string; items are trimmed and empties dropped."""
    out: List[str] = []
    if not csv:
        return out

    cur: List[str] = []
    in_quotes = False
    i = 0
    length = len(csv)
    while i < length:
        ch = csv[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < length and csv[i + 1] == '"':
                    cur.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                cur.append(ch)
        elif ch == ",":
            item = "".join(cur).strip()
            if item:
                out.append(item)
            cur = []
        elif ch == '"':
            in_quotes = True
        else:
            cur.append(ch)
        i += 1

    item = "".join(cur).strip()
    if item:
        out.append(item)
    return out


def build_csv(values: Iterable[str]) -> str:
    """Inverse of ``parse_csv``: trims, dedupes (first wins) and quotes as needed."""
    unique: List[str] = []
    for value in values:
        item = value.strip()
        if item and item not in unique:
            unique.append(item)

    encoded = []
    for item in unique:
        escaped = item.replace('"', '""')
        encoded.append(f'"{escaped}"' if "," in item or '"' in item else escaped)
    return ",".join(encoded)


def toggle_csv(current: Optional[str], value: str) -> str:
    """Add ``value`` if absent, remove it if present."""
    items = parse_csv(current)
    if value in items:
        items = [item for item in items if item != value]
    else:
        items.append(value)
    return build_csv(items)


def csv_of_all(options: Sequence[str]) -> Optional[str]:
    if not options:
        return None
    return build_csv(options)


def is_all_selected(current: Optional[str], options: Sequence[str]) -> bool:
    if not options:
        return False
    selected = set(parse_csv(current))
    return all(option in selected for option in options)

from __future__ import annotations
import math
import re
import unicodedata
from datetime import date
from typing import Any, Iterable

# ------- text helpers -------

def fold_text(value: Any) -> str:
    """Lower-case, decompose (NFD) and strip combining marks: 'Logística' -> 'logistica'."""
    if value is None or value == "":
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

def to_text(value: Any) -> str:
    """Stringify a loosely typed value the way it would be displayed.

    Integral floats lose their trailing '.0' so that 40.0 reads '40'.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()

# ------- numbers -------

# Longest numeric prefix, same acceptance as a browser parseFloat().
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

def parse_leading_float(value: Any) -> float | None:
    """'12.5h' -> 12.5, 'abc' -> None, '' -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
        return parsed if math.isfinite(parsed) else None
    m = _FLOAT_PREFIX_RE.match(str(value))
    if not m:
        return None
    parsed = float(m.group(1))
    return parsed if math.isfinite(parsed) else None

def hours_of(estimate: Any) -> float:
    """Hours an estimate contributes to totals; unparsable counts as 0."""
    return parse_leading_float(estimate) or 0.0

def hours_label(hours: float | None) -> str:
    """Round hours for display: 12.4 -> '12 h'."""
    return f"{round(hours or 0)} h"

# ------- people lists -------

def split_people(value: Any) -> list[str]:
    """'Ana, Luis,, Ana' -> ['Ana', 'Luis', 'Ana'] (trim and drop empties only).

    List items are split on commas as well, so no name holds one.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [name.strip() for name in value.split(",") if name.strip()]
    if isinstance(value, (list, tuple)):
        out = []
        for item in value:
            out.extend(split_people(to_text(item)))
        return out
    return []

def join_people(names: Iterable[str]) -> str:
    return ", ".join(names)

def unique(names: Iterable[str]) -> list[str]:
    """Drop repeated names, first occurrence wins."""
    seen: set[str] = set()
    out = []
    for name in names:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out

# ------- DD/MM/YYYY helpers -------

def dmy(d: date) -> str:
    """Format date to 'DD/MM/YYYY'."""
    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"

def iso_to_dmy(value: str) -> str:
    """'2024-03-05' -> '05/03/2024'; anything else passes through."""
    parts = (value or "").split("-")
    if len(parts) != 3:
        return value or ""
    year, month, day = parts
    return f"{day}/{month}/{year}"

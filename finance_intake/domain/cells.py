"""
Cell coercion and row predicates: pure functions over raw cells. ZERO I/O.

Nothing here raises. A cell that cannot be read as a number is None; a row
that cannot be read is treated as blank.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Sequence

# Spreadsheet error sentinels (compared upper-cased, after cleaning)
ERROR_SENTINELS = frozenset({
    "#N/A",
    "#REF!",
    "#NAME?",
    "#VALUE!",
    "#DIV/0!",
    "#NULL!",
    "#NUM!",
})

# First-column labels marking subtotal/formula/control rows
NOISE_PREFIXES = (
    "totals:",
    "(",
    "less: final count",
    "add: purchases",
    "total cost of goods sold",
    "weighted average formula",
    "price of final count",
    "total amount of purchases",
    "total quantity",
    "final count",
    "final total cost of goods sold",
)

BANNER_PREFIXES = ("month:", "date:")


# -----------------------------------------------------------------------------
# Coercion
# -----------------------------------------------------------------------------


def coerce_number(cell: Any) -> float | None:
    """Raw cell -> float, or None for empty, sentinel or unparseable cells."""
    if cell is None:
        return None
    if isinstance(cell, bool) or isinstance(cell, (date, datetime)):
        return None
    if isinstance(cell, (int, float)):
        try:
            value = float(cell)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None
    if not isinstance(cell, str):
        return None
    cleaned = cell.replace(",", "").strip()
    if cleaned.upper() in ERROR_SENTINELS:
        return None
    # digit groups are commas only; float() would accept "1_000"
    if cleaned == "" or "_" in cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def coerce_label(cell: Any) -> str:
    """Raw cell -> trimmed string; None -> ""."""
    if cell is None:
        return ""
    if isinstance(cell, datetime):
        return cell.date().isoformat()
    if isinstance(cell, date):
        return cell.isoformat()
    if isinstance(cell, float) and math.isfinite(cell) and cell == int(cell):
        return str(int(cell))
    return str(cell).strip()


def cell_at(row: Sequence[Any] | None, index: int) -> Any:
    """Cell at a 0-based column, None when the row is short."""
    if not row or index < 0 or index >= len(row):
        return None
    return row[index]


def first_label(row: Sequence[Any] | None) -> str:
    return coerce_label(cell_at(row, 0))


# -----------------------------------------------------------------------------
# Row predicates
# -----------------------------------------------------------------------------


def is_noise_label(label: str) -> bool:
    return coerce_label(label).lower().startswith(NOISE_PREFIXES)


def is_noise_row(row: Sequence[Any] | None) -> bool:
    """Subtotal, formula-as-text or control row."""
    return is_noise_label(first_label(row))


def is_blank_row(row: Sequence[Any] | None) -> bool:
    """First-column label empty after trimming."""
    return first_label(row) == ""


def banner_value(cell: Any) -> str | None:
    """Text after a leading "Month:"/"Date:" label, else None."""
    text = coerce_label(cell)
    if not text.lower().startswith(BANNER_PREFIXES):
        return None
    return text[text.index(":") + 1:].strip()


def is_banner_row(row: Sequence[Any] | None) -> bool:
    return banner_value(cell_at(row, 0)) is not None


def normalize_header(raw: Any) -> str:
    """Lower-case and drop every non-alphanumeric character."""
    return "".join(ch for ch in coerce_label(raw).lower() if ch.isascii() and ch.isalnum())

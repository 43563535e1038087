"""
Report-month resolution.

Turns a banner cell ("Month: April", "June 2025", "6/1/2025") or a row date
into the first day of its month. Total: every input resolves to a concrete
month, because the persistence side needs one even for malformed sheets.
The last-resort answer is the current month from the injected Clock; the
returned MonthResolution records which step produced the month so callers
can warn when that default was used.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from finance_intake.domain.cells import BANNER_PREFIXES, coerce_label
from finance_intake.domain.clock import Clock, SystemClock

_MONTH_ABBREVIATIONS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

# "April", "Apr", "April 2025", "Sept. 2025"
_MONTH_NAME_RE = re.compile(
    r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s*,?\s*(\d{4})?$",
    re.IGNORECASE,
)

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%b-%y",
    "%b-%Y",
    "%Y-%m",
)


class MonthSource(str, Enum):
    """Which resolution step produced the month."""

    BANNER_MONTH_NAME = "banner_month_name"
    BANNER_DATE = "banner_date"
    FALLBACK_DATE = "fallback_date"
    CURRENT_MONTH = "current_month"


@dataclass(frozen=True)
class MonthResolution:
    month: date
    source: MonthSource

    @property
    def iso(self) -> str:
        return self.month.isoformat()

    @property
    def defaulted(self) -> bool:
        return self.source == MonthSource.CURRENT_MONTH


def _strip_banner_prefix(text: str) -> str:
    if text.lower().startswith(BANNER_PREFIXES):
        return text[text.index(":") + 1:].strip()
    return text


def parse_date(cell: Any) -> date | None:
    """Best-effort date parse of a cell. None when unreadable."""
    if isinstance(cell, datetime):
        return cell.date()
    if isinstance(cell, date):
        return cell
    if not isinstance(cell, str):
        return None
    text = _strip_banner_prefix(cell.strip())
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _month_from_name(text: str, clock: Clock) -> date | None:
    match = _MONTH_NAME_RE.match(text)
    if not match:
        return None
    month_idx = _MONTH_ABBREVIATIONS.index(match.group(1).lower()) + 1
    year = int(match.group(2)) if match.group(2) else clock.today().year
    if year < 1:
        return None
    return date(year, month_idx, 1)


def resolve_month(banner: Any, fallback: Any = None, clock: Clock | None = None) -> MonthResolution:
    """Resolve a first-of-month date. Never raises."""
    clock = clock or SystemClock()

    if isinstance(banner, (date, datetime)):
        d = parse_date(banner)
        return MonthResolution(d.replace(day=1), MonthSource.BANNER_DATE)

    text = _strip_banner_prefix(coerce_label(banner)) if isinstance(banner, str) else ""
    if text:
        named = _month_from_name(text, clock)
        if named is not None:
            return MonthResolution(named, MonthSource.BANNER_MONTH_NAME)
        parsed = parse_date(text)
        if parsed is not None:
            return MonthResolution(parsed.replace(day=1), MonthSource.BANNER_DATE)

    parsed = parse_date(fallback)
    if parsed is not None:
        return MonthResolution(parsed.replace(day=1), MonthSource.FALLBACK_DATE)

    return MonthResolution(clock.today().replace(day=1), MonthSource.CURRENT_MONTH)


def resolve_report_month(banner: Any, fallback: Any = None, clock: Clock | None = None) -> str:
    """ISO first-of-month for a banner cell, falling back to a row date, then today."""
    return resolve_month(banner, fallback, clock).iso

"""
Header reconciler: raw header text -> canonical field key.

Pure lookups against the per-report-type alias tables of the intake config.
Unmapped headers return None and are dropped by callers, never errored.
"""

from __future__ import annotations

from typing import Any, Sequence

from finance_intake.config import IntakeConfig, default_config
from finance_intake.domain.cells import normalize_header
from finance_intake.domain.types import ReportType


def reconcile_header(
    raw_header: Any,
    report_type: ReportType,
    config: IntakeConfig | None = None,
) -> str | None:
    """Canonical key for a header cell, or None when unmapped."""
    norm = normalize_header(raw_header)
    if not norm:
        return None
    table = (config or default_config()).header_aliases.get(report_type, {})
    return table.get(norm)


def reconcile_header_row(
    header_row: Sequence[Any],
    report_type: ReportType,
    config: IntakeConfig | None = None,
) -> dict[int, str]:
    """Column index -> canonical key for every mapped header; first mapping wins."""
    config = config or default_config()
    mapped: dict[int, str] = {}
    taken: set[str] = set()
    for idx, raw in enumerate(header_row or ()):
        key = reconcile_header(raw, report_type, config)
        if key is None or key in taken:
            continue
        mapped[idx] = key
        taken.add(key)
    return mapped

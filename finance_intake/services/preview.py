"""
Preview builder: ParsedDataset -> display tables.

Each non-empty dataset key becomes one PreviewTable. Cash-flow tables put
their fixed columns first, then anything else seen, then the
"Detected Expenses"/"Detected Assets" summaries that flatten a row's
sub-components (fixed and band columns) into "Name: amount | ..." text.
No truncation unless the caller asks for a limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from finance_intake.config import IntakeConfig, default_config
from finance_intake.config.schema import ASSET, EXPENSE, ColumnLayout
from finance_intake.domain.cells import coerce_label
from finance_intake.domain.types import CanonicalRow, ParsedDataset, ReportType
from finance_intake.extraction.cash_flow import DYNAMIC_ASSETS, DYNAMIC_EXPENSES

DETECTED_ASSETS = "Detected Assets"
DETECTED_EXPENSES = "Detected Expenses"
_SEPARATOR = " | "

PRIORITY_COLUMNS: dict[str, tuple[str, ...]] = {
    ReportType.CASH_IN.value: (
        "date", "cash", "sales", "other_revenue", "liability", "owner_capital", "notes", "entered_by",
    ),
    ReportType.CASH_OUT.value: (
        "date", "cash", "utilities", "office_supplies", "inventory", "liability",
        "owner_withdrawal", "notes", "entered_by",
    ),
}


@dataclass(frozen=True)
class PreviewTable:
    key: str
    columns: tuple[str, ...]
    rows: tuple[dict[str, Any], ...]
    total_rows: int
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return len(self.rows) < self.total_rows


def _summaries(row: CanonicalRow, layout: ColumnLayout, group: str, dynamic_key: str) -> list[str]:
    parts = [
        f"{c.name}: {coerce_label(row[c.field])}"
        for c in layout.components_in(group)
        if row.get(c.field) is not None
    ]
    for label, amount in (row.get(dynamic_key) or {}).items():
        if amount is not None:
            parts.append(f"{label}: {coerce_label(amount)}")
    return parts


def flatten_cash_row(row: CanonicalRow, layout: ColumnLayout) -> dict[str, Any]:
    """Display copy of a cash-flow row with band maps folded into summary columns."""
    out = {k: v for k, v in row.items() if k not in (DYNAMIC_ASSETS, DYNAMIC_EXPENSES)}
    if layout.components_in(EXPENSE):
        expenses = _summaries(row, layout, EXPENSE, DYNAMIC_EXPENSES)
        if expenses:
            out[DETECTED_EXPENSES] = _SEPARATOR.join(expenses)
    assets = _summaries(row, layout, ASSET, DYNAMIC_ASSETS)
    if assets:
        out[DETECTED_ASSETS] = _SEPARATOR.join(assets)
    return out


def order_columns(key: str, rows: list[dict[str, Any]]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for row in rows:
        for col in row:
            seen.setdefault(col, None)
    priority = PRIORITY_COLUMNS.get(key, ())
    detected = [c for c in (DETECTED_EXPENSES, DETECTED_ASSETS) if c in seen]
    head = [c for c in priority if c in seen]
    rest = [c for c in seen if c not in priority and c not in detected]
    return tuple(head + rest + detected)


def _count_detected(rows: list[dict[str, Any]], column: str) -> int:
    return sum(len(r[column].split(_SEPARATOR)) for r in rows if column in r)


def build_preview_table(
    dataset: ParsedDataset,
    key: str,
    limit: int | None = None,
    config: IntakeConfig | None = None,
) -> PreviewTable:
    config = config or default_config()
    records = dataset.records(key)
    shown = records if limit is None else records[:limit]

    rt = ReportType.parse(key)
    counters: dict[str, int] = {}
    if rt is not None and rt.is_cash_flow:
        layout = config.layout(rt)
        rows = [flatten_cash_row(r, layout) for r in shown]
        if layout.components_in(EXPENSE):
            counters["expenses"] = _count_detected(rows, DETECTED_EXPENSES)
        counters["assets"] = _count_detected(rows, DETECTED_ASSETS)
    else:
        rows = [r.to_dict() if hasattr(r, "to_dict") else dict(r) for r in shown]

    return PreviewTable(
        key=key,
        columns=order_columns(key, rows),
        rows=tuple(rows),
        total_rows=len(records),
        counters=counters,
    )


def build_preview(
    dataset: ParsedDataset,
    limit: int | None = None,
    config: IntakeConfig | None = None,
) -> dict[str, PreviewTable]:
    """One table per non-empty dataset key, in dataset key order."""
    return {key: build_preview_table(dataset, key, limit, config) for key in dataset.keys()}

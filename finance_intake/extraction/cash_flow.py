"""
Cash-flow extractor, shared by the cash-in (inflow) and cash-out (outflow)
sheets.

Cash sheets have a fixed banner/header block and no reliable header text,
so fields are read by position from the direction's ColumnLayout. A field
is set only when its cell coerces to a value: records are sparse and
consumers must tolerate missing keys.

Extra "band" columns: when the header block has an "Expenses"/"Assets"
group row, sub-header labels inside a band that the layout does not
already cover are read as dynamic components (label -> non-zero amount).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from finance_intake.config import IntakeConfig, default_config
from finance_intake.config.schema import ASSET, EXPENSE, TEXT, ColumnLayout
from finance_intake.domain.cells import (
    banner_value,
    cell_at,
    coerce_label,
    coerce_number,
    is_banner_row,
    is_blank_row,
    is_noise_row,
)
from finance_intake.domain.types import CanonicalRow, Grid, ReportType, Row
from finance_intake.mapping.headers import reconcile_header

_EXPENSE_GROUP_RE = re.compile(r"^expenses?$", re.IGNORECASE)
_ASSET_GROUP_RE = re.compile(r"^assets?$", re.IGNORECASE)

DYNAMIC_ASSETS = "dynamic_assets"
DYNAMIC_EXPENSES = "dynamic_expenses"


@dataclass(frozen=True)
class BandColumn:
    """A sub-header column inside an "Expenses" or "Assets" band."""

    column: int
    label: str
    group: str  # "asset" or "expense"


def _norm(cell) -> str:
    return " ".join(coerce_label(cell).split())


def _in_band(col: int, start: int, other_start: int) -> bool:
    """A band runs from its group cell to the other group's cell, or to the row end."""
    if start == -1 or col < start:
        return False
    return other_start <= start or col < other_start


def report_month_banner(grid: Grid) -> str | None:
    """Text of a "Month:"/"Date:" banner in row 2, else None."""
    if len(grid) < 2:
        return None
    value = banner_value(cell_at(grid[1], 0))
    return value or None


def data_rows(grid: Grid, config: IntakeConfig | None = None) -> tuple[Row, ...]:
    """Rows after the banner/header block, noise, blank and banner rows removed."""
    config = config or default_config()
    start = 1 if len(grid) < config.short_sheet_rows else config.cash_flow_header_rows
    return tuple(
        row for row in grid[start:]
        if not is_blank_row(row) and not is_noise_row(row) and not is_banner_row(row)
    )


def find_band_columns(
    grid: Grid,
    report_type: ReportType,
    config: IntakeConfig | None = None,
) -> tuple[BandColumn, ...]:
    """Dynamic band columns the layout does not already read."""
    config = config or default_config()
    layout = config.layout(report_type)

    group_idx = expense_start = asset_start = -1
    for r, row in enumerate(grid[: config.band_search_rows]):
        cells = [_norm(c) for c in row]
        e_idx = next((i for i, c in enumerate(cells) if _EXPENSE_GROUP_RE.match(c)), -1)
        a_idx = next((i for i, c in enumerate(cells) if _ASSET_GROUP_RE.match(c)), -1)
        if e_idx != -1 or a_idx != -1:
            group_idx, expense_start, asset_start = r, e_idx, a_idx
            break
    if group_idx == -1:
        return ()

    # sub-header: first row below the group row with 2+ non-empty cells
    sub_header: Sequence | None = None
    for row in grid[group_idx + 1: group_idx + 6]:
        if sum(1 for c in row if _norm(c)) >= 2:
            sub_header = row
            break
    if sub_header is None:
        return ()

    track_expenses = bool(layout.components_in(EXPENSE))
    used = layout.used_columns
    bands: list[BandColumn] = []
    for col, cell in enumerate(sub_header):
        label = _norm(cell)
        if not label or col in used:
            continue
        if reconcile_header(label, report_type, config) is not None:
            continue
        if _in_band(col, expense_start, asset_start):
            if track_expenses:
                bands.append(BandColumn(column=col, label=label, group=EXPENSE))
            continue
        if _in_band(col, asset_start, expense_start):
            bands.append(BandColumn(column=col, label=label, group=ASSET))
    return tuple(bands)


def build_cash_flow_row(
    row: Row,
    layout: ColumnLayout,
    bands: Sequence[BandColumn] = (),
    report_month: str | None = None,
) -> CanonicalRow:
    """Sparse canonical record for one data row."""
    record: CanonicalRow = {}
    if report_month:
        record["month"] = report_month
    date_label = coerce_label(cell_at(row, layout.date_column))
    if date_label:
        record["date"] = date_label

    for offset in layout.offsets:
        cell = cell_at(row, offset.column)
        if offset.kind == TEXT:
            text = coerce_label(cell)
            if text:
                record[offset.field] = text
        else:
            value = coerce_number(cell)
            if value is not None:
                record[offset.field] = value

    dynamic: dict[str, dict[str, float]] = {ASSET: {}, EXPENSE: {}}
    for band in bands:
        value = coerce_number(cell_at(row, band.column))
        if value is not None and value != 0:
            dynamic[band.group][band.label] = value
    if dynamic[ASSET]:
        record[DYNAMIC_ASSETS] = dynamic[ASSET]
    if dynamic[EXPENSE]:
        record[DYNAMIC_EXPENSES] = dynamic[EXPENSE]

    # Totals are present only when a component was present, so "no data"
    # stays distinguishable from "sums to zero".
    for group, total_key in ((ASSET, "assets"), (EXPENSE, "expenses")):
        parts = [record[c.field] for c in layout.components_in(group) if c.field in record]
        parts.extend(dynamic[group].values())
        if parts:
            record[total_key] = sum(parts)
    return record


def extract_cash_flow(
    grid: Grid,
    report_type: ReportType,
    config: IntakeConfig | None = None,
) -> tuple[CanonicalRow, ...]:
    """Canonical rows of a cash-in or cash-out sheet."""
    if not report_type.is_cash_flow:
        raise ValueError(f"Not a cash-flow report type: {report_type.value}")
    config = config or default_config()
    layout = config.layout(report_type)
    month = report_month_banner(grid)
    bands = find_band_columns(grid, report_type, config)
    records = (build_cash_flow_row(row, layout, bands, month) for row in data_rows(grid, config))
    return tuple(r for r in records if r)

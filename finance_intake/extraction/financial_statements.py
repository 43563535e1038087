"""
Financial-statement extractor: flat, header-driven mapping.

Row 1 is the header row. Each later row becomes one sparse record keyed by
the canonical names of its reconciled headers; unmapped columns are dropped.
No banner or multi-section handling.
"""

from __future__ import annotations

from finance_intake.config import IntakeConfig, default_config
from finance_intake.domain.cells import cell_at, coerce_label, coerce_number, is_blank_row, is_noise_row
from finance_intake.domain.types import CanonicalRow, Grid, ReportType
from finance_intake.mapping.headers import reconcile_header_row


def extract_financial_statements(
    grid: Grid,
    config: IntakeConfig | None = None,
) -> tuple[CanonicalRow, ...]:
    config = config or default_config()
    if not grid:
        return ()
    rt = ReportType.FINANCIAL_STATEMENTS
    columns = reconcile_header_row(grid[0], rt, config)

    records: list[CanonicalRow] = []
    for row in grid[1:]:
        if is_blank_row(row) or is_noise_row(row):
            continue
        record: CanonicalRow = {}
        for idx, key in columns.items():
            cell = cell_at(row, idx)
            if config.is_text_field(rt, key):
                text = coerce_label(cell)
                if text:
                    record[key] = text
                continue
            value = coerce_number(cell)
            if value is not None:
                record[key] = value
        if record:
            records.append(record)
    return tuple(records)

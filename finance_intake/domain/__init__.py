"""
finance_intake.domain -- Pure types, cell coercion and month resolution.

ZERO I/O. Imports nothing from the rest of finance_intake.
"""

from finance_intake.domain.cells import (
    coerce_label,
    coerce_number,
    is_blank_row,
    is_noise_row,
    normalize_header,
)
from finance_intake.domain.clock import Clock, DeterministicClock, SystemClock
from finance_intake.domain.months import (
    MonthResolution,
    MonthSource,
    resolve_month,
    resolve_report_month,
)
from finance_intake.domain.types import (
    BOMLine,
    CashTransaction,
    ClassifiedSheet,
    IntakeResult,
    IntakeWarning,
    InventoryItem,
    InventoryReportLink,
    ParsedDataset,
    ReportType,
    Workbook,
)

__all__ = [
    "BOMLine",
    "CashTransaction",
    "ClassifiedSheet",
    "Clock",
    "DeterministicClock",
    "IntakeResult",
    "IntakeWarning",
    "InventoryItem",
    "InventoryReportLink",
    "MonthResolution",
    "MonthSource",
    "ParsedDataset",
    "ReportType",
    "SystemClock",
    "Workbook",
    "coerce_label",
    "coerce_number",
    "is_blank_row",
    "is_noise_row",
    "normalize_header",
    "resolve_month",
    "resolve_report_month",
]

"""Report extractors: raw grid -> semi-structured rows, one module per report type."""

from finance_intake.extraction.cash_flow import (
    BandColumn,
    build_cash_flow_row,
    data_rows,
    extract_cash_flow,
    find_band_columns,
    report_month_banner,
)
from finance_intake.extraction.financial_statements import extract_financial_statements
from finance_intake.extraction.inventory import (
    InventoryBlockParser,
    InventoryExtraction,
    ParserState,
    extract_inventory,
)

__all__ = [
    "BandColumn",
    "InventoryBlockParser",
    "InventoryExtraction",
    "ParserState",
    "build_cash_flow_row",
    "data_rows",
    "extract_cash_flow",
    "extract_financial_statements",
    "extract_inventory",
    "find_band_columns",
    "report_month_banner",
]

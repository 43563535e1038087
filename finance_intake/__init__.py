"""
finance_intake -- Spreadsheet intake and normalization.

Turns loosely structured, human-authored workbooks (cash-in, cash-out,
inventory with bill-of-materials blocks, financial statements) into named
arrays of canonical records and atomic cash transactions, ready for a
persistence collaborator.

Architecture:
    adapters/        file I/O boundary (csv, xlsx) -> Workbook
    classification/  sheet -> report type
    extraction/      grid -> records, one module per report type
    transactions/    cash-flow rows -> atomic transactions
    services/        orchestration, preview, payload sinks
    domain/, config/ leaf types, coercion, month resolution, YAML tables
"""

__version__ = "0.1.0"

"""Workbook adapters (file I/O only)."""

from __future__ import annotations

from pathlib import PurePath

from finance_intake.adapters.base import SheetProbe, WorkbookAdapter, WorkbookProbe
from finance_intake.adapters.csv_adapter import CSV_SHEET_NAME, CsvWorkbookAdapter
from finance_intake.adapters.xlsx_adapter import XlsxWorkbookAdapter
from finance_intake.config import IntakeLimits
from finance_intake.exceptions import UnsupportedFileFormatError

ADAPTERS_BY_EXTENSION = {
    ".csv": CsvWorkbookAdapter,
    ".xlsx": XlsxWorkbookAdapter,
    ".xlsm": XlsxWorkbookAdapter,
}


def adapter_for(file_name: str, limits: IntakeLimits | None = None) -> WorkbookAdapter:
    """Adapter for a file name's extension."""
    ext = PurePath(file_name).suffix.lower()
    adapter_cls = ADAPTERS_BY_EXTENSION.get(ext)
    if adapter_cls is None:
        raise UnsupportedFileFormatError(file_name, ext)
    return adapter_cls(limits)


__all__ = [
    "ADAPTERS_BY_EXTENSION",
    "CSV_SHEET_NAME",
    "CsvWorkbookAdapter",
    "SheetProbe",
    "WorkbookAdapter",
    "WorkbookProbe",
    "XlsxWorkbookAdapter",
    "adapter_for",
]

"""
XLSX workbook adapter.

Every worksheet becomes one grid, in workbook order. Cells are read with
openpyxl in read-only, data-only mode (cached formula results, not
formulas). Integral floats become ints so "3.0" does not leak into labels;
strings are stripped; empty cells are None.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Any, BinaryIO

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from finance_intake.adapters.base import (
    WorkbookProbe,
    check_row,
    check_sheet_count,
    probe_sheet,
    trim_row,
)
from finance_intake.config import IntakeLimits, default_config
from finance_intake.domain.types import Workbook
from finance_intake.exceptions import WorkbookDecodeError
from finance_intake.logging_config import get_logger

logger = get_logger("adapters.xlsx")

_DECODE_ERRORS = (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError)


def _cell_value(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, float):
        if v.is_integer():
            return int(v)
        return v
    if isinstance(v, str):
        return v.strip() or None
    return v


class XlsxWorkbookAdapter:
    """
    Read .xlsx files as a Workbook, one grid per worksheet.

    source_options:
      sheets: optional list of sheet names to keep; others are not decoded.
    """

    def __init__(self, limits: IntakeLimits | None = None):
        self.limits = limits or default_config().limits

    def _decode(self, source: str | Path | BinaryIO, file_name: str, options: dict[str, Any]) -> Workbook:
        wanted = options.get("sheets")
        try:
            wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
        except _DECODE_ERRORS as e:
            raise WorkbookDecodeError(file_name, str(e) or type(e).__name__) from e
        try:
            worksheets = [ws for ws in wb.worksheets if not wanted or ws.title in wanted]
            check_sheet_count(file_name, len(worksheets), self.limits)
            sheets: dict[str, list] = {}
            for ws in worksheets:
                rows = []
                for values in ws.iter_rows(values_only=True):
                    row = trim_row(_cell_value(v) for v in values)
                    check_row(file_name, ws.title, len(rows) + 1, row, self.limits)
                    rows.append(row)
                # read-only sheets report trailing empty rows
                while rows and not rows[-1]:
                    rows.pop()
                sheets[ws.title] = rows
        finally:
            wb.close()

        logger.debug(
            "workbook_decoded",
            extra={"file_name": file_name, "sheets": list(sheets), "format": "xlsx"},
        )
        return Workbook.from_mapping(sheets, file_name=file_name)

    def read(self, source_path: Path, options: dict[str, Any]) -> Workbook:
        source_path = Path(source_path)
        return self._decode(source_path, source_path.name, options)

    def read_bytes(self, data: bytes, file_name: str, options: dict[str, Any]) -> Workbook:
        return self._decode(io.BytesIO(data), file_name, options)

    def probe(self, source_path: Path, options: dict[str, Any]) -> WorkbookProbe:
        workbook = self.read(source_path, options)
        return WorkbookProbe(
            file_name=workbook.file_name,
            sheets=tuple(probe_sheet(name, grid) for name, grid in workbook.sheets),
        )

"""
CSV workbook adapter.

A CSV upload is a one-sheet workbook named "Sheet1". Configurable:
delimiter, encoding, quoting. Handles BOM via utf-8-sig when encoding is
utf-8. Empty cells decode to None, matching the xlsx adapter.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable

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

CSV_SHEET_NAME = "Sheet1"

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


class CsvWorkbookAdapter:
    """Read CSV files as a single-sheet Workbook."""

    def __init__(self, limits: IntakeLimits | None = None):
        self.limits = limits or default_config().limits

    def _decode(self, lines: Iterable[str], file_name: str, options: dict[str, Any]) -> Workbook:
        delimiter = options.get("delimiter", ",")
        quoting = _get_quoting(options)
        check_sheet_count(file_name, 1, self.limits)

        rows = []
        try:
            for raw in csv.reader(lines, delimiter=delimiter, quoting=quoting):
                row = trim_row(cell if cell != "" else None for cell in raw)
                check_row(file_name, CSV_SHEET_NAME, len(rows) + 1, row, self.limits)
                rows.append(row)
        except (csv.Error, UnicodeDecodeError) as e:
            raise WorkbookDecodeError(file_name, str(e)) from e
        return Workbook.from_mapping({CSV_SHEET_NAME: rows}, file_name=file_name)

    def read(self, source_path: Path, options: dict[str, Any]) -> Workbook:
        source_path = Path(source_path)
        encoding = _get_encoding(options)
        try:
            with source_path.open("r", encoding=encoding, newline="") as f:
                return self._decode(f, source_path.name, options)
        except OSError as e:
            raise WorkbookDecodeError(source_path.name, str(e)) from e

    def read_bytes(self, data: bytes, file_name: str, options: dict[str, Any]) -> Workbook:
        encoding = _get_encoding(options)
        try:
            text = data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise WorkbookDecodeError(file_name, str(e)) from e
        return self._decode(io.StringIO(text, newline=""), file_name, options)

    def probe(self, source_path: Path, options: dict[str, Any]) -> WorkbookProbe:
        workbook = self.read(source_path, options)
        return WorkbookProbe(
            file_name=workbook.file_name,
            sheets=tuple(probe_sheet(name, grid) for name, grid in workbook.sheets),
            encoding=_get_encoding(options),
            detected_delimiter=options.get("delimiter", ","),
        )

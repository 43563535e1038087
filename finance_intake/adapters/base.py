"""
Workbook adapter protocol and probe DTO.

Contract:
    WorkbookAdapter.read() decodes a whole upload into an immutable Workbook.
    WorkbookAdapter.probe() returns a quick snapshot: sheet names, row counts,
    the first rows of each sheet.

Adapters are the file I/O boundary. Nothing past them touches bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from finance_intake.config.schema import IntakeLimits
from finance_intake.domain.types import Grid, Row, Workbook
from finance_intake.exceptions import WorkbookTooLargeError

PROBE_SAMPLE_ROWS = 5


@runtime_checkable
class WorkbookAdapter(Protocol):
    """Protocol for decoding an uploaded file into a Workbook."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Workbook:
        ...

    def read_bytes(self, data: bytes, file_name: str, options: dict[str, Any]) -> Workbook:
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "WorkbookProbe":
        ...


@dataclass(frozen=True)
class SheetProbe:
    sheet_name: str
    row_count: int
    column_count: int
    sample_rows: tuple[Row, ...]  # first PROBE_SAMPLE_ROWS rows


@dataclass(frozen=True)
class WorkbookProbe:
    """Result of probing an upload (sheets, sizes, first rows)."""

    file_name: str
    sheets: tuple[SheetProbe, ...]
    encoding: str | None = None
    detected_delimiter: str | None = None

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(s.sheet_name for s in self.sheets)


def trim_row(values: Any) -> Row:
    """Row tuple with trailing empty cells dropped."""
    cells = list(values)
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return tuple(cells)


def check_sheet_count(file_name: str, count: int, limits: IntakeLimits) -> None:
    if count > limits.max_sheets:
        raise WorkbookTooLargeError(file_name, "sheets", limits.max_sheets)


def check_row(file_name: str, sheet_name: str, row_count: int, row: Row, limits: IntakeLimits) -> None:
    """Fail fast once a sheet grows past the configured bounds."""
    if row_count > limits.max_rows_per_sheet:
        raise WorkbookTooLargeError(file_name, "rows", limits.max_rows_per_sheet, sheet_name=sheet_name)
    if len(row) > limits.max_columns:
        raise WorkbookTooLargeError(file_name, "columns", limits.max_columns, sheet_name=sheet_name)


def probe_sheet(sheet_name: str, grid: Grid) -> SheetProbe:
    return SheetProbe(
        sheet_name=sheet_name,
        row_count=len(grid),
        column_count=max((len(r) for r in grid), default=0),
        sample_rows=tuple(grid[:PROBE_SAMPLE_ROWS]),
    )

"""Tests for workbook adapters."""

import tempfile
from datetime import datetime
from pathlib import Path

import openpyxl
import pytest

from finance_intake.adapters import (
    CSV_SHEET_NAME,
    CsvWorkbookAdapter,
    WorkbookAdapter,
    XlsxWorkbookAdapter,
    adapter_for,
)
from finance_intake.config.schema import IntakeLimits
from finance_intake.exceptions import (
    UnsupportedFileFormatError,
    WorkbookDecodeError,
    WorkbookTooLargeError,
)

_SMALL = IntakeLimits(max_sheets=2, max_rows_per_sheet=3, max_columns=4)


def _write_xlsx(path: Path, sheets: dict) -> Path:
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


class TestCsvWorkbookAdapter:
    """CSV uploads decode to a single sheet named Sheet1."""

    def test_read_single_sheet(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write("Date,Cash\n3/1/2024,100\n,\n")
            path = Path(f.name)
        try:
            workbook = CsvWorkbookAdapter().read(path, {})
            assert workbook.sheet_names == (CSV_SHEET_NAME,)
            assert workbook.file_name == path.name
            assert workbook.grid(CSV_SHEET_NAME) == (("Date", "Cash"), ("3/1/2024", "100"), ())
        finally:
            path.unlink()

    def test_bom_stripped(self):
        workbook = CsvWorkbookAdapter().read_bytes("\ufeffDate,Cash\n".encode("utf-8"), "up.csv", {})
        assert workbook.grid(CSV_SHEET_NAME)[0][0] == "Date"

    def test_custom_delimiter(self):
        workbook = CsvWorkbookAdapter().read_bytes(b"a;b;c\n1;2;3\n", "up.csv", {"delimiter": ";"})
        assert workbook.grid(CSV_SHEET_NAME) == (("a", "b", "c"), ("1", "2", "3"))

    def test_undecodable_bytes(self):
        with pytest.raises(WorkbookDecodeError):
            CsvWorkbookAdapter().read_bytes(b"\xff\xfe\xfa", "up.csv", {})

    def test_row_limit(self):
        with pytest.raises(WorkbookTooLargeError) as exc_info:
            CsvWorkbookAdapter(_SMALL).read_bytes(b"1\n2\n3\n4\n", "up.csv", {})
        assert exc_info.value.dimension == "rows"
        assert exc_info.value.code == "WORKBOOK_TOO_LARGE"

    def test_column_limit(self):
        with pytest.raises(WorkbookTooLargeError) as exc_info:
            CsvWorkbookAdapter(_SMALL).read_bytes(b"1,2,3,4,5\n", "up.csv", {})
        assert exc_info.value.dimension == "columns"

    def test_probe(self, tmp_path):
        path = tmp_path / "up.csv"
        path.write_text("x,y\n1,2\n3,4\n", encoding="utf-8")
        probe = CsvWorkbookAdapter().probe(path, {})
        assert probe.sheet_names == (CSV_SHEET_NAME,)
        assert probe.sheets[0].row_count == 3
        assert probe.sheets[0].column_count == 2
        assert probe.detected_delimiter == ","


class TestXlsxWorkbookAdapter:
    """Every worksheet becomes one grid, in order."""

    def test_read_all_sheets(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {
            "Cash In": [["Cash In Report"], ["Month: March 2024"], ["3/1/2024", 100.0, 2.5]],
            "Inventory": [["Item Name: Bread"], ["  Flour  ", 2, None]],
        })
        workbook = XlsxWorkbookAdapter().read(path, {})
        assert workbook.sheet_names == ("Cash In", "Inventory")
        assert workbook.file_name == "book.xlsx"
        assert workbook.grid("Cash In")[2] == ("3/1/2024", 100, 2.5)
        assert workbook.grid("Inventory")[1] == ("Flour", 2)

    def test_integral_floats_become_ints(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"S": [[3.0]]})
        (cell,) = XlsxWorkbookAdapter().read(path, {}).grid("S")[0]
        assert cell == 3 and isinstance(cell, int)

    def test_dates_kept(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"S": [[datetime(2024, 3, 1)]]})
        (cell,) = XlsxWorkbookAdapter().read(path, {}).grid("S")[0]
        assert cell == datetime(2024, 3, 1)

    def test_read_bytes(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"S": [["a"]]})
        workbook = XlsxWorkbookAdapter().read_bytes(path.read_bytes(), "upload.xlsx", {})
        assert workbook.file_name == "upload.xlsx"
        assert workbook.grid("S") == (("a",),)

    def test_sheet_filter_option(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"A": [["a"]], "B": [["b"]]})
        workbook = XlsxWorkbookAdapter().read(path, {"sheets": ["B"]})
        assert workbook.sheet_names == ("B",)

    def test_sheet_limit(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"A": [["a"]], "B": [["b"]], "C": [["c"]]})
        with pytest.raises(WorkbookTooLargeError) as exc_info:
            XlsxWorkbookAdapter(_SMALL).read(path, {})
        assert exc_info.value.dimension == "sheets"

    def test_not_a_workbook(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"definitely not a zip file")
        with pytest.raises(WorkbookDecodeError) as exc_info:
            XlsxWorkbookAdapter().read(path, {})
        assert exc_info.value.file_name == "broken.xlsx"

    def test_probe(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {"S": [[1, 2, 3]] * 8})
        probe = XlsxWorkbookAdapter().probe(path, {})
        assert probe.sheets[0].row_count == 8
        assert probe.sheets[0].column_count == 3
        assert len(probe.sheets[0].sample_rows) == 5


class TestAdapterFor:
    def test_by_extension(self):
        assert isinstance(adapter_for("a.CSV"), CsvWorkbookAdapter)
        assert isinstance(adapter_for("a.xlsx"), XlsxWorkbookAdapter)
        assert isinstance(adapter_for("a.xlsx"), WorkbookAdapter)

    def test_unsupported(self):
        with pytest.raises(UnsupportedFileFormatError) as exc_info:
            adapter_for("legacy.xls")
        assert exc_info.value.extension == ".xls"

"""Tests for sheet classification and hint admission."""

from finance_intake.classification.classifier import (
    admit_sheets,
    classify_sheets,
    detect_report_type,
)
from finance_intake.domain.types import UNCLASSIFIABLE_SHEET, ReportType

from tests.intake.conftest import make_workbook


def _types(result):
    return [(s.sheet_name, s.report_type) for s in result.sheets]


class TestDetectReportType:
    def test_sheet_name_markers(self):
        assert detect_report_type("Cash In March") == ReportType.CASH_IN
        assert detect_report_type("cash_out") == ReportType.CASH_OUT
        assert detect_report_type("Inventory Template") == ReportType.INVENTORY_REPORT
        assert detect_report_type("Financial Statements") == ReportType.FINANCIAL_STATEMENTS

    def test_sheet_name_beats_file_name(self):
        assert detect_report_type("Cash Out", "cash_in_march.xlsx") == ReportType.CASH_OUT

    def test_file_name_when_sheet_says_nothing(self):
        assert detect_report_type("Sheet1", "inventory_march.xlsx") == ReportType.INVENTORY_REPORT

    def test_default_last(self):
        assert detect_report_type("Sheet1", "upload.csv") is None
        assert detect_report_type("Sheet1", "upload.csv", ReportType.CASH_OUT) == ReportType.CASH_OUT


class TestAdmitSheets:
    def test_specific_hint_filters(self):
        admitted, fell_back = admit_sheets(["Cash In", "Cash Out", "Notes"], "book.xlsx", "cash_in")
        assert admitted == ("Cash In",)
        assert not fell_back

    def test_specific_hint_falls_back_to_all_sheets(self):
        admitted, fell_back = admit_sheets(["Sheet1"], "upload.csv", "cash_in")
        assert admitted == ("Sheet1",)
        assert fell_back

    def test_auto_excludes_financial_and_never_falls_back(self):
        admitted, fell_back = admit_sheets(
            ["Cash In", "Financial Statements", "Inventory", "Notes"], "book.xlsx", "auto",
        )
        assert admitted == ("Cash In", "Inventory")
        assert not fell_back

        admitted, fell_back = admit_sheets(["Sheet1"], "book.xlsx", "auto")
        assert admitted == ()
        assert not fell_back

    def test_no_hint_admits_everything(self):
        admitted, _ = admit_sheets(["A", "B"], "book.xlsx", "")
        assert admitted == ("A", "B")


class TestClassifySheets:
    def test_hint_cash_in_with_single_unnamed_sheet(self):
        workbook = make_workbook({"Sheet1": [["x"]]}, file_name="upload.csv")
        result = classify_sheets(workbook, "cash_in")
        assert _types(result) == [("Sheet1", ReportType.CASH_IN)]
        assert result.fell_back
        assert result.warnings == ()

    def test_unclassifiable_sheet_skipped_with_warning(self):
        workbook = make_workbook({"Cash In": [["x"]], "Notes": [["y"]]})
        result = classify_sheets(workbook)
        assert _types(result) == [("Cash In", ReportType.CASH_IN)]
        assert [w.code for w in result.warnings] == [UNCLASSIFIABLE_SHEET]
        assert result.warnings[0].sheet_name == "Notes"

    def test_explicit_default_type(self):
        workbook = make_workbook({"Sheet1": [["x"]]}, file_name="upload.csv")
        result = classify_sheets(workbook, "", default_report_type="cash_out")
        assert _types(result) == [("Sheet1", ReportType.CASH_OUT)]

    def test_concurrent_defaults_do_not_leak(self):
        workbook = make_workbook({"Sheet1": [["x"]]}, file_name="upload.csv")
        first = classify_sheets(workbook, "cash_out")
        second = classify_sheets(workbook, "")
        assert _types(first) == [("Sheet1", ReportType.CASH_OUT)]
        assert _types(second) == []

    def test_logs_skipped_sheet(self, captured_logs):
        workbook = make_workbook({"Notes": [["y"]]})
        classify_sheets(workbook)
        logs = captured_logs()
        skipped = [r for r in logs if r["message"] == "sheet_skipped"]
        assert skipped and skipped[0]["sheet_name"] == "Notes"

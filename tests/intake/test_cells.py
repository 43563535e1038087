"""Tests for cell coercion and row predicates."""

import math
from datetime import date, datetime

import pytest

from finance_intake.domain.cells import (
    ERROR_SENTINELS,
    banner_value,
    cell_at,
    coerce_label,
    coerce_number,
    is_banner_row,
    is_blank_row,
    is_noise_row,
    normalize_header,
)


class TestCoerceNumber:
    """Raw cell -> float or None; never NaN, never raises."""

    @pytest.mark.parametrize("sentinel", sorted(ERROR_SENTINELS))
    def test_error_sentinels_are_none(self, sentinel):
        assert coerce_number(sentinel) is None

    def test_lowercase_sentinel_is_none(self):
        assert coerce_number("#n/a") is None

    def test_thousands_separators_stripped(self):
        assert coerce_number("1,234.50") == 1234.5

    def test_numbers_pass_through(self):
        assert coerce_number(7) == 7.0
        assert coerce_number(2.5) == 2.5

    def test_zero_is_a_value(self):
        assert coerce_number(0) == 0.0
        assert coerce_number("0") == 0.0

    @pytest.mark.parametrize("cell", [None, "", "   ", "abc", "12abc", True, date(2024, 1, 1)])
    def test_unreadable_cells_are_none(self, cell):
        assert coerce_number(cell) is None

    @pytest.mark.parametrize("cell", [float("nan"), float("inf"), "nan", "-inf"])
    def test_non_finite_is_none(self, cell):
        result = coerce_number(cell)
        assert result is None

    def test_int_too_large_for_float_is_none(self):
        assert coerce_number(10 ** 400) is None

    @pytest.mark.parametrize("cell", ["1_000", "1_000.5", "_5"])
    def test_underscore_digit_groups_are_none(self, cell):
        assert coerce_number(cell) is None

    def test_result_is_never_nan(self):
        for cell in ["#DIV/0!", "nan", float("nan"), "1e400"]:
            result = coerce_number(cell)
            assert result is None or not math.isnan(result)


class TestCoerceLabel:
    def test_strips_whitespace(self):
        assert coerce_label("  Flour ") == "Flour"

    def test_none_is_empty(self):
        assert coerce_label(None) == ""

    def test_integral_float_has_no_decimal(self):
        assert coerce_label(3.0) == "3"
        assert coerce_label(2.5) == "2.5"

    def test_dates_render_iso(self):
        assert coerce_label(datetime(2024, 3, 5, 10, 0)) == "2024-03-05"
        assert coerce_label(date(2024, 3, 5)) == "2024-03-05"


class TestRowPredicates:
    @pytest.mark.parametrize("label", [
        "TOTALS:",
        "(subtotal)",
        "Less: Final Count",
        "Add: Purchases",
        "Total Cost of Goods Sold",
        "Weighted Average Formula",
        "Price of Final Count",
        "Total Amount of Purchases",
        "Total Quantity",
        "Final Count",
        "Final Total Cost of Goods Sold",
    ])
    def test_noise_rows(self, label):
        assert is_noise_row([label, 1, 2])

    def test_data_row_is_not_noise(self):
        assert not is_noise_row(["3/1/2024", 100])

    def test_blank_row_by_first_column(self):
        assert is_blank_row([None, 100])
        assert is_blank_row(["   "])
        assert is_blank_row([])
        assert not is_blank_row(["x"])

    def test_cell_at_short_row(self):
        assert cell_at(["a"], 3) is None
        assert cell_at(None, 0) is None
        assert cell_at(["a", "b"], 1) == "b"


class TestBanner:
    def test_month_banner_value(self):
        assert banner_value("Month: April") == "April"
        assert banner_value("date: 6/1/2025") == "6/1/2025"

    def test_not_a_banner(self):
        assert banner_value("Monthly total") is None
        assert banner_value(None) is None

    def test_banner_row(self):
        assert is_banner_row(["Month: March 2024"])
        assert not is_banner_row(["3/1/2024", 100])


class TestNormalizeHeader:
    def test_drops_case_and_punctuation(self):
        assert normalize_header("Owner's Capital") == "ownerscapital"
        assert normalize_header(" Cash (Assets) ") == "cashassets"
        assert normalize_header("entered_by") == "enteredby"

    def test_empty(self):
        assert normalize_header(None) == ""

"""
Shared builders for intake tests: a recording payload sink and grids in the
shapes the extractors expect. Imported directly by test modules.
"""

from typing import Any

import pytest

from finance_intake.domain.types import Workbook


# =============================================================================
# Sink fixtures
# =============================================================================


class RecordingSink:
    """PayloadSink fake: records calls, optionally fails a payload kind."""

    def __init__(
        self,
        fail_kind: str | None = None,
        error: Exception | None = None,
        reference_ids: dict[str, dict[str, Any]] | None = None,
        reference_error: Exception | None = None,
    ):
        self.fail_kind = fail_kind
        self.error = error or RuntimeError("boom")
        self.reference_ids = reference_ids
        self.reference_error = reference_error
        self.submitted: list[tuple[str, dict[str, Any]]] = []
        self.reference_calls: list[tuple[Any, tuple[str, ...], tuple[str, ...]]] = []

    def ensure_references(self, entity_id, assets, expenses):
        self.reference_calls.append((entity_id, tuple(assets), tuple(expenses)))
        if self.reference_error is not None:
            raise self.reference_error
        return self.reference_ids

    def submit(self, kind, payload):
        if kind == self.fail_kind:
            raise self.error
        self.submitted.append((kind, payload))

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.submitted]


@pytest.fixture
def recording_sink():
    return RecordingSink()


# =============================================================================
# Workbook builders
# =============================================================================


def cash_in_grid(*data_rows, month="Month: March 2024"):
    """Cash-in sheet: title, banner, three header rows, then data."""
    return [
        ["Cash In Report"],
        [month],
        ["Date", "Cash", "Sales", "Other Revenue", "Assets", None, None, "Liability", "Owner's Capital", "Notes", "Entered By"],
        [None, None, None, None, "Raw Materials", "Cash", "Savings"],
        [None],
        *data_rows,
    ]


def cash_out_grid(*data_rows, month="Month: March 2024"):
    """Cash-out sheet: title, banner, three header rows, then data."""
    return [
        ["Cash Out Report"],
        [month],
        ["Date", "Cash", "Expenses", None, "Assets", None, None, "Inventory", "Liability", "Owner's Withdrawal", "Notes", "Entered By"],
        [None, None, "Utilities", "Office Supplies", "Cash", "Investments", "Savings"],
        [None],
        *data_rows,
    ]


def inventory_grid(month="Month: March 2024"):
    """Two items: Bread with one BOM line, Cake with two."""
    return [
        ["Inventory Report"],
        [month],
        [None],
        ["Item Name: Bread"],
        ["Beginning Inventory", 10, 25],
        ["Flour", 2, 40],
        ["Add: Purchases", 5, 25],
        ["Less: Final Count", 4, 26],
        ["Ending Inventory", 11, 25],
        ["Item Name: Cake"],
        ["Beginning Inventory", 3, 300],
        ["Sugar", 1, 55],
        ["Eggs", 12, 7.5],
        ["Less: Final Count", 1, 310],
    ]


def make_workbook(sheets: dict, file_name: str = "report.xlsx") -> Workbook:
    return Workbook.from_mapping(sheets, file_name=file_name)

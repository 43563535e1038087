"""
finance_intake.domain.types -- Pure frozen dataclasses for spreadsheet intake.

ZERO I/O. Every record produced by an import is built fresh and never
mutated; correcting a bad import means re-running it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Sequence, Union

Cell = Union[str, int, float, date, datetime, None]
Row = tuple[Cell, ...]
Grid = tuple[Row, ...]

# Sparse mapping of canonical field key -> scalar. Cash-flow rows may also
# carry "dynamic_assets" / "dynamic_expenses" label -> amount maps.
CanonicalRow = dict[str, Any]


# =============================================================================
# Report types
# =============================================================================


class ReportType(str, Enum):
    """Which extractor and canonical field set applies to a sheet."""

    CASH_IN = "cash_in"
    CASH_OUT = "cash_out"
    INVENTORY_REPORT = "inventory_report"
    FINANCIAL_STATEMENTS = "financial_statements"

    @classmethod
    def parse(cls, value: "str | ReportType | None") -> "ReportType | None":
        """Lenient lookup: None/""/unknown -> None."""
        if value is None or isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return None

    @property
    def is_cash_flow(self) -> bool:
        return self in (ReportType.CASH_IN, ReportType.CASH_OUT)


AUTO_HINT = "auto"


# =============================================================================
# Workbook
# =============================================================================


def _freeze_grid(rows: Sequence[Sequence[Any]]) -> Grid:
    return tuple(tuple(r) if r is not None else () for r in rows)


@dataclass(frozen=True)
class Workbook:
    """Ordered, immutable sheet name -> grid mapping for one upload."""

    file_name: str
    sheets: tuple[tuple[str, Grid], ...] = ()

    @classmethod
    def from_mapping(
        cls,
        sheets: Mapping[str, Sequence[Sequence[Any]]],
        file_name: str = "",
    ) -> "Workbook":
        return cls(
            file_name=file_name,
            sheets=tuple((name, _freeze_grid(rows)) for name, rows in sheets.items()),
        )

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.sheets)

    def grid(self, sheet_name: str) -> Grid:
        for name, rows in self.sheets:
            if name == sheet_name:
                return rows
        raise KeyError(sheet_name)

    def __len__(self) -> int:
        return len(self.sheets)


# =============================================================================
# Warnings
# =============================================================================


@dataclass(frozen=True)
class IntakeWarning:
    """
    A single non-fatal finding.

    Carries a machine-readable code and a human-readable message. Never
    raised -- collected on results and shown to the user.
    """

    code: str
    message: str
    sheet_name: str | None = None
    details: dict[str, Any] | None = None


UNCLASSIFIABLE_SHEET = "UNCLASSIFIABLE_SHEET"
EMPTY_SHEET = "EMPTY_SHEET"
EMPTY_EXTRACTION = "EMPTY_EXTRACTION"
REPORT_MONTH_DEFAULTED = "REPORT_MONTH_DEFAULTED"
DUPLICATE_INVENTORY_ITEM = "DUPLICATE_INVENTORY_ITEM"
REFERENCE_LOOKUP_FAILED = "REFERENCE_LOOKUP_FAILED"


# =============================================================================
# Inventory records
# =============================================================================


@dataclass(frozen=True)
class InventoryItem:
    """One "Item Name:" block of an inventory sheet."""

    item_name: str
    bom_name: str
    item_price: float | None = None
    item_beginning_inventory: float | None = None
    item_less_count: float | None = None
    begin_unit_price: float | None = None
    final_unit_price: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BOMLine:
    """Raw-material line owned by an item through ``bom_name``."""

    bom_name: str
    raw_material_name: str
    raw_material_price: float = 0.0
    raw_material_qty: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InventoryReportLink:
    """Associates a reporting month with an item (many-to-many)."""

    month: str | None
    item_name: str
    begin_qty: float | None = None
    begin_unit_price: float | None = None
    final_qty: float | None = None
    final_unit_price: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def bom_name_for(item_name: str) -> str:
    return f"{item_name} BOM"


# =============================================================================
# Cash transactions
# =============================================================================

_INFLOW_ONLY = ("sales_amount", "other_revenue_amount", "owners_capital_amount")
_OUTFLOW_ONLY = ("inventory_amount", "owners_withdrawal_amount", "expense_name", "expense_amount", "expense_id")


@dataclass(frozen=True)
class CashTransaction:
    """
    One atomic cash movement.

    Invariant: at most one of the asset/expense slots is filled.
    """

    direction: ReportType
    transaction_date: str | None
    cash_amount: float | None = None
    liability_amount: float | None = None
    note: str | None = None
    entered_by: str | None = None
    sales_amount: float | None = None
    other_revenue_amount: float | None = None
    owners_capital_amount: float | None = None
    inventory_amount: float | None = None
    owners_withdrawal_amount: float | None = None
    asset_name: str | None = None
    asset_amount: float | None = None
    asset_id: Any = None
    expense_name: str | None = None
    expense_amount: float | None = None
    expense_id: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Plain record for transport; direction-irrelevant keys are dropped."""
        data = asdict(self)
        data.pop("direction")
        dropped = _OUTFLOW_ONLY if self.direction == ReportType.CASH_IN else _INFLOW_ONLY
        for key in dropped:
            data.pop(key)
        return data


# =============================================================================
# Dataset
# =============================================================================

INVENTORY_ITEMS = "inventory_items"
INVENTORY_BOM_LINES = "inventory_bom_lines"
INVENTORY_REPORT = "inventory_report"

DATASET_KEYS = (
    ReportType.FINANCIAL_STATEMENTS.value,
    ReportType.CASH_IN.value,
    ReportType.CASH_OUT.value,
    INVENTORY_ITEMS,
    INVENTORY_BOM_LINES,
    INVENTORY_REPORT,
)


@dataclass(frozen=True)
class ParsedDataset:
    """Terminal artifact of a parse: named arrays of records."""

    cash_in: tuple[CanonicalRow, ...] = ()
    cash_out: tuple[CanonicalRow, ...] = ()
    financial_statements: tuple[CanonicalRow, ...] = ()
    inventory_items: tuple[InventoryItem, ...] = ()
    inventory_bom_lines: tuple[BOMLine, ...] = ()
    inventory_report: tuple[InventoryReportLink, ...] = ()

    def records(self, key: str) -> tuple[Any, ...]:
        if key not in DATASET_KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def keys(self) -> tuple[str, ...]:
        """Dataset keys that hold at least one record."""
        return tuple(k for k in DATASET_KEYS if getattr(self, k))

    @property
    def is_empty(self) -> bool:
        return not self.keys()

    @property
    def has_inventory(self) -> bool:
        return bool(self.inventory_items or self.inventory_bom_lines or self.inventory_report)

    def as_mapping(self) -> dict[str, list[dict[str, Any]]]:
        """Plain-record view, non-empty keys only."""
        out: dict[str, list[dict[str, Any]]] = {}
        for key in self.keys():
            out[key] = [r.to_dict() if hasattr(r, "to_dict") else dict(r) for r in getattr(self, key)]
        return out


@dataclass(frozen=True)
class ClassifiedSheet:
    """A sheet admitted by the classifier with its detected report type."""

    sheet_name: str
    report_type: ReportType


@dataclass(frozen=True)
class IntakeResult:
    """Result of parsing one workbook."""

    file_name: str
    dataset: ParsedDataset
    sheets: tuple[ClassifiedSheet, ...] = ()
    warnings: tuple[IntakeWarning, ...] = field(default_factory=tuple)

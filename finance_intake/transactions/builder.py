"""
Transaction builder: cash-flow rows -> atomic CashTransaction records.

One source row fans out into one transaction per non-zero sub-component
(assets for cash-in; expenses then assets for cash-out), each carrying the
row's shared base fields and exactly one filled asset/expense slot. A row
with no sub-components yields a single transaction with both slots empty.
The downstream store keys each transaction to at most one asset or expense,
which is what the one-slot rule guarantees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from finance_intake.config import IntakeConfig, default_config
from finance_intake.config.schema import ASSET, EXPENSE, ColumnLayout
from finance_intake.domain.clock import Clock
from finance_intake.domain.months import MonthResolution, resolve_month
from finance_intake.domain.types import (
    REPORT_MONTH_DEFAULTED,
    CanonicalRow,
    CashTransaction,
    IntakeWarning,
    ReportType,
)
from finance_intake.extraction.cash_flow import DYNAMIC_ASSETS, DYNAMIC_EXPENSES
from finance_intake.logging_config import get_logger

logger = get_logger("transactions.builder")

_DYNAMIC_KEY = {ASSET: DYNAMIC_ASSETS, EXPENSE: DYNAMIC_EXPENSES}


@dataclass(frozen=True)
class Component:
    """One fan-out slot of a row."""

    group: str  # "asset" or "expense"
    name: str
    amount: float


@dataclass(frozen=True)
class ReferenceMaps:
    """Lower-cased asset/expense name -> id, as returned by the persistence side."""

    assets: Mapping[str, Any] = field(default_factory=dict)
    expenses: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, assets: Mapping[str, Any] | None, expenses: Mapping[str, Any] | None) -> "ReferenceMaps":
        return cls(
            assets={str(k).lower(): v for k, v in (assets or {}).items()},
            expenses={str(k).lower(): v for k, v in (expenses or {}).items()},
        )

    def asset_id(self, name: str) -> Any:
        return self.assets.get(name.lower())

    def expense_id(self, name: str) -> Any:
        return self.expenses.get(name.lower())


@dataclass(frozen=True)
class TransactionBatch:
    """All transactions of one cash-flow direction plus the batch month."""

    report_type: ReportType
    report_month: MonthResolution
    transactions: tuple[CashTransaction, ...] = ()
    warnings: tuple[IntakeWarning, ...] = ()


def row_components(row: CanonicalRow, layout: ColumnLayout) -> tuple[Component, ...]:
    """Non-zero sub-components of a row: expenses first, then assets."""
    # expense slots only where the layout defines expenses
    groups = (EXPENSE, ASSET) if layout.components_in(EXPENSE) else (ASSET,)
    parts: list[Component] = []
    for group in groups:
        for comp in layout.components_in(group):
            amount = row.get(comp.field)
            if amount is not None and amount != 0:
                parts.append(Component(group=group, name=comp.name, amount=amount))
        for label, amount in (row.get(_DYNAMIC_KEY[group]) or {}).items():
            if amount is not None and amount != 0:
                parts.append(Component(group=group, name=str(label).strip(), amount=amount))
    return tuple(parts)


def base_fields(row: CanonicalRow, report_type: ReportType) -> dict[str, Any]:
    """Fields every transaction fanned out of ``row`` shares."""
    base: dict[str, Any] = {
        "direction": report_type,
        "transaction_date": row.get("date"),
        "cash_amount": row.get("cash"),
        "liability_amount": row.get("liability"),
        "note": row.get("notes"),
        "entered_by": row.get("entered_by"),
    }
    if report_type == ReportType.CASH_IN:
        base["sales_amount"] = row.get("sales")
        base["other_revenue_amount"] = row.get("other_revenue")
        base["owners_capital_amount"] = row.get("owner_capital")
    else:
        base["inventory_amount"] = row.get("inventory")
        base["owners_withdrawal_amount"] = row.get("owner_withdrawal")
    return base


def fan_out_row(
    row: CanonicalRow,
    report_type: ReportType,
    layout: ColumnLayout,
    references: ReferenceMaps | None = None,
) -> tuple[CashTransaction, ...]:
    base = base_fields(row, report_type)
    components = row_components(row, layout)
    if not components:
        return (CashTransaction(**base),)

    references = references or ReferenceMaps()
    out: list[CashTransaction] = []
    for comp in components:
        if comp.group == ASSET:
            slot = {
                "asset_name": comp.name,
                "asset_amount": comp.amount,
                "asset_id": references.asset_id(comp.name),
            }
        else:
            slot = {
                "expense_name": comp.name,
                "expense_amount": comp.amount,
                "expense_id": references.expense_id(comp.name),
            }
        out.append(CashTransaction(**base, **slot))
    return tuple(out)


def build_transactions(
    rows: Sequence[CanonicalRow],
    report_type: ReportType,
    references: ReferenceMaps | None = None,
    config: IntakeConfig | None = None,
    clock: Clock | None = None,
) -> TransactionBatch:
    """
    Fan a direction's rows out into transactions.

    The report month is resolved once, from the first row's month banner
    or date. When neither is readable the current month is used and a
    REPORT_MONTH_DEFAULTED warning is attached to the batch.
    """
    if not report_type.is_cash_flow:
        raise ValueError(f"Not a cash-flow report type: {report_type.value}")
    config = config or default_config()
    layout = config.layout(report_type)

    first = rows[0] if rows else {}
    month = resolve_month(first.get("month"), first.get("date"), clock)
    warnings: list[IntakeWarning] = []
    if month.defaulted:
        logger.warning(
            "report_month_defaulted",
            extra={"report_type": report_type.value, "banner": first.get("month"), "date": first.get("date")},
        )
        warnings.append(IntakeWarning(
            code=REPORT_MONTH_DEFAULTED,
            message=(
                f"Could not read a report month for {report_type.value}; "
                f"using the current month {month.iso}."
            ),
            details={"report_type": report_type.value, "report_month": month.iso},
        ))

    transactions: list[CashTransaction] = []
    for row in rows:
        transactions.extend(fan_out_row(row, report_type, layout, references))

    logger.debug(
        "transactions_built",
        extra={"report_type": report_type.value, "rows": len(rows), "transactions": len(transactions)},
    )
    return TransactionBatch(
        report_type=report_type,
        report_month=month,
        transactions=tuple(transactions),
        warnings=tuple(warnings),
    )

"""Asset and expense names a dataset refers to, for the reference-ensure step."""

from __future__ import annotations

from dataclasses import dataclass

from finance_intake.config import IntakeConfig, default_config
from finance_intake.config.schema import ASSET
from finance_intake.domain.types import ParsedDataset, ReportType
from finance_intake.transactions.builder import row_components


@dataclass(frozen=True)
class ReferenceNames:
    assets: tuple[str, ...] = ()
    expenses: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.assets or self.expenses)


def collect_reference_names(
    dataset: ParsedDataset,
    config: IntakeConfig | None = None,
) -> ReferenceNames:
    """
    Distinct component names across both cash directions, in first-seen
    order. Matching is case-insensitive; the first spelling wins.
    """
    config = config or default_config()
    assets: dict[str, str] = {}
    expenses: dict[str, str] = {}
    for rt in (ReportType.CASH_IN, ReportType.CASH_OUT):
        layout = config.layout(rt)
        for row in dataset.records(rt.value):
            for comp in row_components(row, layout):
                target = assets if comp.group == ASSET else expenses
                target.setdefault(comp.name.lower(), comp.name)
    return ReferenceNames(assets=tuple(assets.values()), expenses=tuple(expenses.values()))

"""Cash-flow rows -> atomic transactions."""

from finance_intake.transactions.builder import (
    Component,
    ReferenceMaps,
    TransactionBatch,
    base_fields,
    build_transactions,
    fan_out_row,
    row_components,
)
from finance_intake.transactions.references import ReferenceNames, collect_reference_names

__all__ = [
    "Component",
    "ReferenceMaps",
    "ReferenceNames",
    "TransactionBatch",
    "base_fields",
    "build_transactions",
    "collect_reference_names",
    "fan_out_row",
    "row_components",
]

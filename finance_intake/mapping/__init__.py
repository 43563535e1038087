"""Header reconciliation: raw header text -> canonical keys (pure)."""

from finance_intake.mapping.headers import reconcile_header, reconcile_header_row

__all__ = [
    "reconcile_header",
    "reconcile_header_row",
]

"""
Inventory extractor: a two-state machine over "Item Name:" blocks.

An inventory sheet is a run of item sub-tables with no delimiter other than
the recurring "Item Name:" row. The parser tracks the open block explicitly:

    NO_CURRENT_ITEM --item name--> IN_ITEM
    IN_ITEM         --item name--> close current, IN_ITEM (new block)
    IN_ITEM         --end of rows--> close current, NO_CURRENT_ITEM

Closing a block emits its InventoryItem and, when the sheet carries a
report month, an InventoryReportLink. Rows seen in IN_ITEM update the open
block (beginning inventory, final count) or become BOM lines. Rows seen in
NO_CURRENT_ITEM are skipped.

Each extraction builds a fresh parser; no state outlives one sheet.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from finance_intake.domain.cells import (
    banner_value,
    cell_at,
    coerce_number,
    first_label,
    is_noise_label,
)
from finance_intake.domain.clock import Clock
from finance_intake.domain.months import MonthResolution, resolve_month
from finance_intake.domain.types import (
    BOMLine,
    Grid,
    InventoryItem,
    InventoryReportLink,
    Row,
    bom_name_for,
)

_ITEM_NAME = "item name:"
_BEGINNING = ("beginning inventory", "beggining inventory")
_LESS_FINAL = "less: final count"
_NOT_MATERIAL = ("add: purchases", "ending inventory")

QTY_COLUMN = 1
PRICE_COLUMN = 2


class ParserState(str, Enum):
    NO_CURRENT_ITEM = "no_current_item"
    IN_ITEM = "in_item"


def is_item_header(label: str) -> bool:
    return label.lower().startswith(_ITEM_NAME)


@dataclass
class _OpenItem:
    """Block under construction; frozen into an InventoryItem on close."""

    item_name: str
    item_price: float | None = None
    item_beginning_inventory: float | None = None
    item_less_count: float | None = None
    begin_unit_price: float | None = None
    final_unit_price: float | None = None

    @property
    def bom_name(self) -> str:
        return bom_name_for(self.item_name)

    def freeze(self) -> InventoryItem:
        return InventoryItem(
            item_name=self.item_name,
            bom_name=self.bom_name,
            item_price=self.item_price,
            item_beginning_inventory=self.item_beginning_inventory,
            item_less_count=self.item_less_count,
            begin_unit_price=self.begin_unit_price,
            final_unit_price=self.final_unit_price,
        )


@dataclass(frozen=True)
class InventoryExtraction:
    items: tuple[InventoryItem, ...] = ()
    bom_lines: tuple[BOMLine, ...] = ()
    report_links: tuple[InventoryReportLink, ...] = ()
    month: MonthResolution | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.items or self.bom_lines or self.report_links)


class InventoryBlockParser:
    """Explicit state machine for one inventory sheet."""

    def __init__(self, report_month: str | None = None):
        self.report_month = report_month
        self.state = ParserState.NO_CURRENT_ITEM
        self._current: _OpenItem | None = None
        self._items: list[InventoryItem] = []
        self._bom_lines: list[BOMLine] = []
        self._links: list[InventoryReportLink] = []

    # -- transitions ---------------------------------------------------------

    def open_item(self, item_name: str) -> None:
        self.close_current()
        self._current = _OpenItem(item_name=item_name)
        self.state = ParserState.IN_ITEM

    def close_current(self) -> None:
        if self.state is ParserState.NO_CURRENT_ITEM:
            return
        item = self._current.freeze()
        self._items.append(item)
        if self.report_month:
            self._links.append(InventoryReportLink(
                month=self.report_month,
                item_name=item.item_name,
                begin_qty=item.item_beginning_inventory,
                begin_unit_price=item.begin_unit_price if item.begin_unit_price is not None else item.item_price,
                final_qty=item.item_less_count,
                final_unit_price=item.final_unit_price,
            ))
        self._current = None
        self.state = ParserState.NO_CURRENT_ITEM

    # -- row handling --------------------------------------------------------

    def feed(self, row: Row) -> None:
        label = first_label(row)
        if not label:
            return
        if is_item_header(label):
            self.open_item(label[label.index(":") + 1:].strip())
            return
        if self.state is ParserState.NO_CURRENT_ITEM:
            return

        lower = label.lower()
        qty = coerce_number(cell_at(row, QTY_COLUMN))
        price = coerce_number(cell_at(row, PRICE_COLUMN))
        item = self._current

        if lower.startswith(_BEGINNING):
            if qty is not None:
                item.item_beginning_inventory = qty
            if price is not None:
                item.item_price = price
                item.begin_unit_price = price
            return

        if lower.startswith(_LESS_FINAL):
            if qty is not None:
                item.item_less_count = qty
            if price is not None:
                item.final_unit_price = price
            return

        if is_noise_label(label) or lower.startswith(_NOT_MATERIAL):
            return
        if qty is None and price is None:
            return
        self._bom_lines.append(BOMLine(
            bom_name=item.bom_name,
            raw_material_name=label,
            raw_material_price=price if price is not None else 0.0,
            raw_material_qty=qty if qty is not None else 0.0,
        ))

    def feed_all(self, rows: Iterable[Row]) -> None:
        for row in rows:
            self.feed(row)

    def finish(self) -> InventoryExtraction:
        self.close_current()
        return InventoryExtraction(
            items=tuple(self._items),
            bom_lines=tuple(self._bom_lines),
            report_links=tuple(self._links),
        )


def extract_inventory(grid: Grid, clock: Clock | None = None) -> InventoryExtraction:
    """Items, BOM lines and month links of one inventory sheet."""
    banner = banner_value(cell_at(grid[1], 0)) if len(grid) > 1 else None
    month = resolve_month(banner, clock=clock) if banner else None

    first_item = next((i for i, row in enumerate(grid) if is_item_header(first_label(row))), None)
    rows = grid[first_item:] if first_item is not None else grid

    parser = InventoryBlockParser(report_month=month.iso if month else None)
    parser.feed_all(rows)
    result = parser.finish()
    return InventoryExtraction(
        items=result.items,
        bom_lines=result.bom_lines,
        report_links=result.report_links,
        month=month,
    )

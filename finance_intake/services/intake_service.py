"""
Intake service: decode -> classify -> extract -> assemble -> submit.

Orchestrates workbook adapters, the sheet classifier, the per-type
extractors and the transaction builder. Uses structured logging
(LogContext, get_logger("services.*")).

Parsing never raises on content: unclassifiable sheets, empty extractions,
defaulted months and duplicate items become IntakeWarning values on the
result. Only submission raises, and only for caller errors (no entity
selected, nothing to import). Collaborator failures are caught at the
submission boundary and reported on the SubmissionResult; the dataset is
immutable, so a retry simply submits it again.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

from finance_intake.adapters import WorkbookAdapter, WorkbookProbe, adapter_for
from finance_intake.classification.classifier import classify_sheets
from finance_intake.config import IntakeConfig, default_config
from finance_intake.domain.clock import Clock, SystemClock
from finance_intake.domain.types import (
    DUPLICATE_INVENTORY_ITEM,
    EMPTY_EXTRACTION,
    EMPTY_SHEET,
    REFERENCE_LOOKUP_FAILED,
    REPORT_MONTH_DEFAULTED,
    BOMLine,
    CanonicalRow,
    ClassifiedSheet,
    IntakeResult,
    IntakeWarning,
    InventoryItem,
    InventoryReportLink,
    ParsedDataset,
    ReportType,
    Workbook,
)
from finance_intake.exceptions import (
    MissingEntitySelectionError,
    NothingToImportError,
    PayloadRejectedError,
    WorkbookTooLargeError,
)
from finance_intake.extraction import (
    InventoryExtraction,
    extract_cash_flow,
    extract_financial_statements,
    extract_inventory,
)
from finance_intake.logging_config import LogContext, get_logger
from finance_intake.services.preview import PreviewTable, build_preview
from finance_intake.services.sinks import (
    PAYLOAD_FINANCIAL_STATEMENTS,
    PAYLOAD_INVENTORY,
    PAYLOAD_ORDER,
    PayloadSink,
)
from finance_intake.transactions import (
    ReferenceMaps,
    build_transactions,
    collect_reference_names,
)

logger = get_logger("services.intake_service")


@dataclass(frozen=True)
class IntakePayloads:
    """Commit payloads for one dataset, keyed by payload kind."""

    entity_id: Any
    payloads: dict[str, dict[str, Any]] = field(default_factory=dict)
    warnings: tuple[IntakeWarning, ...] = ()

    def ordered(self) -> list[tuple[str, dict[str, Any]]]:
        return [(kind, self.payloads[kind]) for kind in PAYLOAD_ORDER if kind in self.payloads]


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of submitting a dataset. ``message`` is the collaborator's, verbatim."""

    ok: bool
    submitted: tuple[str, ...] = ()
    failed_kind: str | None = None
    message: str | None = None
    warnings: tuple[IntakeWarning, ...] = ()


@dataclass
class _Accumulator:
    """Per-parse record buckets. Lives for one parse() call only."""

    cash_in: list[CanonicalRow] = field(default_factory=list)
    cash_out: list[CanonicalRow] = field(default_factory=list)
    financial_statements: list[CanonicalRow] = field(default_factory=list)
    inventory: list[tuple[str, InventoryExtraction]] = field(default_factory=list)
    items: list[InventoryItem] = field(default_factory=list)
    bom_lines: list[BOMLine] = field(default_factory=list)
    links: list[InventoryReportLink] = field(default_factory=list)
    warnings: list[IntakeWarning] = field(default_factory=list)

    def freeze(self) -> ParsedDataset:
        return ParsedDataset(
            cash_in=tuple(self.cash_in),
            cash_out=tuple(self.cash_out),
            financial_statements=tuple(self.financial_statements),
            inventory_items=tuple(self.items),
            inventory_bom_lines=tuple(self.bom_lines),
            inventory_report=tuple(self.links),
        )


def dedupe_inventory(
    extractions: list[tuple[str, InventoryExtraction]],
) -> tuple[list[InventoryItem], list[BOMLine], list[InventoryReportLink], list[IntakeWarning]]:
    """
    Merge per-sheet inventory extractions, first item per name winning.

    A repeated item is dropped together with the BOM lines of its sheet;
    the warning lists what was dropped. BOM lines are unique on
    (bom_name, material) and report links on (month, item_name).
    """
    kept_items: dict[str, InventoryItem] = {}
    kept_lines: dict[tuple[str, str], BOMLine] = {}
    kept_links: dict[tuple[str | None, str], InventoryReportLink] = {}
    warnings: list[IntakeWarning] = []

    for sheet_name, extraction in extractions:
        sheet_items = {item.item_name for item in extraction.items if item.item_name not in kept_items}
        dropped: list[InventoryItem] = []
        for item in extraction.items:
            if item.item_name in kept_items:
                dropped.append(item)
            else:
                kept_items[item.item_name] = item

        # a name kept from this sheet keeps all of this sheet's lines for it
        dropped_boms = {item.bom_name for item in dropped if item.item_name not in sheet_items}
        dropped_lines: dict[str, list[str]] = {}
        for line in extraction.bom_lines:
            if line.bom_name in dropped_boms:
                dropped_lines.setdefault(line.bom_name, []).append(line.raw_material_name)
                continue
            kept_lines.setdefault((line.bom_name, line.raw_material_name), line)

        for item in dropped:
            warnings.append(IntakeWarning(
                code=DUPLICATE_INVENTORY_ITEM,
                message=f"Item {item.item_name!r} appears more than once; keeping the first occurrence.",
                sheet_name=sheet_name,
                details={
                    "item_name": item.item_name,
                    "dropped_bom_lines": dropped_lines.get(item.bom_name, []),
                },
            ))

        for link in extraction.report_links:
            kept_links.setdefault((link.month, link.item_name), link)

    return list(kept_items.values()), list(kept_lines.values()), list(kept_links.values()), warnings


class IntakeService:
    """Orchestrates decode -> classify -> extract -> submit. Uses config, clock, adapters, sink."""

    def __init__(
        self,
        config: IntakeConfig | None = None,
        clock: Clock | None = None,
        adapters: dict[str, WorkbookAdapter] | None = None,
        sink: PayloadSink | None = None,
    ):
        self._config = config or default_config()
        self._clock = clock or SystemClock()
        self._adapters = adapters
        self._sink = sink

    @property
    def config(self) -> IntakeConfig:
        return self._config

    # -- decode --------------------------------------------------------------

    def _adapter(self, file_name: str) -> WorkbookAdapter:
        if self._adapters:
            suffix = Path(file_name).suffix.lower().lstrip(".")
            adapter = self._adapters.get(suffix)
            if adapter is not None:
                return adapter
        return adapter_for(file_name, self._config.limits)

    def read_workbook(self, source_path: Path, options: dict[str, Any] | None = None) -> Workbook:
        source_path = Path(source_path)
        return self._adapter(source_path.name).read(source_path, options or {})

    def read_workbook_bytes(self, data: bytes, file_name: str, options: dict[str, Any] | None = None) -> Workbook:
        return self._adapter(file_name).read_bytes(data, file_name, options or {})

    async def read_workbook_async(self, source_path: Path, options: dict[str, Any] | None = None) -> Workbook:
        """Decode on a worker thread; the only suspension point of an import."""
        return await asyncio.to_thread(self.read_workbook, source_path, options)

    def probe(self, source_path: Path, options: dict[str, Any] | None = None) -> WorkbookProbe:
        source_path = Path(source_path)
        return self._adapter(source_path.name).probe(source_path, options or {})

    def _check_limits(self, workbook: Workbook) -> None:
        limits = self._config.limits
        if len(workbook) > limits.max_sheets:
            raise WorkbookTooLargeError(workbook.file_name, "sheets", limits.max_sheets)
        for name, grid in workbook.sheets:
            if len(grid) > limits.max_rows_per_sheet:
                raise WorkbookTooLargeError(workbook.file_name, "rows", limits.max_rows_per_sheet, sheet_name=name)
            if any(len(row) > limits.max_columns for row in grid):
                raise WorkbookTooLargeError(workbook.file_name, "columns", limits.max_columns, sheet_name=name)

    # -- parse ---------------------------------------------------------------

    def parse(
        self,
        workbook: Workbook,
        report_type_hint: str | None = "",
        default_report_type: ReportType | str | None = None,
    ) -> IntakeResult:
        """
        Classify every sheet and run its extractor.

        ``default_report_type`` is the type assumed for sheets whose names
        identify nothing; when omitted, a specific hint supplies it.
        """
        self._check_limits(workbook)
        with LogContext.bind(import_id=str(uuid4()), file_name=workbook.file_name):
            classification = classify_sheets(
                workbook, report_type_hint, default_report_type, self._config,
            )
            acc = _Accumulator(warnings=list(classification.warnings))
            for sheet in classification.sheets:
                with LogContext.bind(sheet_name=sheet.sheet_name, report_type=sheet.report_type.value):
                    self._extract_sheet(workbook, sheet, acc)

            acc.items, acc.bom_lines, acc.links, dup_warnings = dedupe_inventory(acc.inventory)
            acc.warnings.extend(dup_warnings)

            dataset = acc.freeze()
            logger.info(
                "workbook_parsed",
                extra={
                    "hint": report_type_hint,
                    "fell_back": classification.fell_back,
                    "keys": list(dataset.keys()),
                    "warnings": len(acc.warnings),
                },
            )
            return IntakeResult(
                file_name=workbook.file_name,
                dataset=dataset,
                sheets=classification.sheets,
                warnings=tuple(acc.warnings),
            )

    def _extract_sheet(self, workbook: Workbook, sheet: ClassifiedSheet, acc: _Accumulator) -> None:
        grid = workbook.grid(sheet.sheet_name)
        rt = sheet.report_type
        if not grid:
            logger.info("sheet_empty")
            acc.warnings.append(IntakeWarning(
                code=EMPTY_SHEET,
                message=f"Sheet {sheet.sheet_name!r} has no rows.",
                sheet_name=sheet.sheet_name,
            ))
            return

        produced = 0
        if rt.is_cash_flow:
            rows = extract_cash_flow(grid, rt, self._config)
            getattr(acc, rt.value).extend(rows)
            produced = len(rows)
        elif rt == ReportType.INVENTORY_REPORT:
            extraction = extract_inventory(grid, self._clock)
            acc.inventory.append((sheet.sheet_name, extraction))
            produced = len(extraction.items) + len(extraction.bom_lines)
            if extraction.month is not None and extraction.month.defaulted:
                acc.warnings.append(IntakeWarning(
                    code=REPORT_MONTH_DEFAULTED,
                    message=(
                        f"Could not read the report month of sheet {sheet.sheet_name!r}; "
                        f"using the current month {extraction.month.iso}."
                    ),
                    sheet_name=sheet.sheet_name,
                    details={"report_type": rt.value, "report_month": extraction.month.iso},
                ))
        else:
            rows = extract_financial_statements(grid, self._config)
            acc.financial_statements.extend(rows)
            produced = len(rows)

        if produced == 0:
            logger.info("extraction_empty")
            acc.warnings.append(IntakeWarning(
                code=EMPTY_EXTRACTION,
                message=f"No {rt.value} records found in sheet {sheet.sheet_name!r}.",
                sheet_name=sheet.sheet_name,
                details={"report_type": rt.value},
            ))
        else:
            logger.debug("sheet_extracted", extra={"records": produced})

    def parse_file(
        self,
        source_path: Path,
        report_type_hint: str | None = "",
        default_report_type: ReportType | str | None = None,
        options: dict[str, Any] | None = None,
    ) -> IntakeResult:
        workbook = self.read_workbook(source_path, options)
        return self.parse(workbook, report_type_hint, default_report_type)

    def preview(self, dataset: ParsedDataset, limit: int | None = None) -> dict[str, PreviewTable]:
        return build_preview(dataset, limit, self._config)

    # -- submit --------------------------------------------------------------

    @staticmethod
    def _require_submittable(dataset: ParsedDataset, entity_id: Any) -> None:
        if entity_id is None or (isinstance(entity_id, str) and not entity_id.strip()):
            raise MissingEntitySelectionError()
        if dataset.is_empty:
            raise NothingToImportError()

    def build_payloads(
        self,
        dataset: ParsedDataset,
        entity_id: Any,
        references: ReferenceMaps | None = None,
    ) -> IntakePayloads:
        """Commit payloads per kind. Raises before building anything on caller errors."""
        self._require_submittable(dataset, entity_id)
        payloads: dict[str, dict[str, Any]] = {}
        warnings: list[IntakeWarning] = []

        if dataset.has_inventory:
            payloads[PAYLOAD_INVENTORY] = {
                "entity_id": entity_id,
                "items": [i.to_dict() for i in dataset.inventory_items],
                "bom_lines": [b.to_dict() for b in dataset.inventory_bom_lines],
                "report_links": [r.to_dict() for r in dataset.inventory_report],
            }

        for rt in (ReportType.CASH_IN, ReportType.CASH_OUT):
            rows = dataset.records(rt.value)
            if not rows:
                continue
            batch = build_transactions(rows, rt, references, self._config, self._clock)
            warnings.extend(batch.warnings)
            payloads[rt.value] = {
                "entity_id": entity_id,
                "report_month": batch.report_month.iso,
                "transactions": [t.to_dict() for t in batch.transactions],
            }

        if dataset.financial_statements:
            payloads[PAYLOAD_FINANCIAL_STATEMENTS] = {
                "entity_id": entity_id,
                "data": [dict(r) for r in dataset.financial_statements],
            }
        return IntakePayloads(entity_id=entity_id, payloads=payloads, warnings=tuple(warnings))

    def _resolve_references(
        self,
        dataset: ParsedDataset,
        entity_id: Any,
        sink: PayloadSink,
    ) -> tuple[ReferenceMaps | None, list[IntakeWarning]]:
        names = collect_reference_names(dataset, self._config)
        if names.is_empty:
            return None, []
        try:
            maps = sink.ensure_references(entity_id, names.assets, names.expenses)
        except Exception as exc:  # collaborator failure; fall back to names
            logger.warning("reference_lookup_failed", exc_info=True)
            return None, [IntakeWarning(
                code=REFERENCE_LOOKUP_FAILED,
                message=f"Could not resolve asset/expense ids; submitting names only: {exc}",
                details={"assets": list(names.assets), "expenses": list(names.expenses)},
            )]
        if maps is None:
            return None, []
        return ReferenceMaps.from_raw(maps.get("assets"), maps.get("expenses")), []

    def submit(
        self,
        dataset: ParsedDataset,
        entity_id: Any,
        sink: PayloadSink | None = None,
    ) -> SubmissionResult:
        """
        Hand every payload to the sink, stopping at the first failure.

        Raises MissingEntitySelectionError / NothingToImportError before
        any collaborator call.
        """
        self._require_submittable(dataset, entity_id)
        sink = sink or self._sink
        if sink is None:
            raise ValueError("No payload sink configured")

        with LogContext.bind(entity_id=str(entity_id)):
            references, warnings = self._resolve_references(dataset, entity_id, sink)
            payloads = self.build_payloads(dataset, entity_id, references)
            warnings.extend(payloads.warnings)

            submitted: list[str] = []
            for kind, payload in payloads.ordered():
                try:
                    sink.submit(kind, payload)
                except Exception as exc:  # transport / persistence failure
                    if isinstance(exc, PayloadRejectedError):
                        logger.warning("payload_rejected", extra={"kind": kind, "status": exc.status})
                    else:
                        logger.error("payload_submit_failed", extra={"kind": kind}, exc_info=True)
                    return SubmissionResult(
                        ok=False,
                        submitted=tuple(submitted),
                        failed_kind=kind,
                        message=str(exc),
                        warnings=tuple(warnings),
                    )
                submitted.append(kind)
                logger.info("payload_submitted", extra={"kind": kind})

            return SubmissionResult(ok=True, submitted=tuple(submitted), warnings=tuple(warnings))

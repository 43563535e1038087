"""
Sheet classifier: which report type, if any, each sheet of a workbook holds.

Two levels:
    1. Admission -- the report-type hint filters sheets by name (or by the
       upload's file name). When a specific hint filters out everything,
       every sheet is admitted again: single-tab CSV uploads arrive as
       "Sheet1" and carry no signal in their name.
    2. Detection -- each admitted sheet is typed by marker phrases in its
       name, then in the file name, with precedence
       cash-in > cash-out > inventory > financial statements, then the
       caller's default type. Sheets still untyped are skipped with a
       warning.

The default type is a parameter, never module state, so concurrent imports
cannot bias each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from finance_intake.config import IntakeConfig, default_config
from finance_intake.domain.types import (
    AUTO_HINT,
    UNCLASSIFIABLE_SHEET,
    ClassifiedSheet,
    IntakeWarning,
    ReportType,
    Workbook,
)
from finance_intake.logging_config import get_logger

logger = get_logger("classification")

DETECTION_PRECEDENCE = (
    ReportType.CASH_IN,
    ReportType.CASH_OUT,
    ReportType.INVENTORY_REPORT,
    ReportType.FINANCIAL_STATEMENTS,
)


@dataclass(frozen=True)
class ClassificationResult:
    """Admitted, typed sheets in workbook order plus skip warnings."""

    sheets: tuple[ClassifiedSheet, ...]
    warnings: tuple[IntakeWarning, ...] = ()
    fell_back: bool = False  # hint filter matched nothing; all sheets admitted


def _contains_any(text: str, phrases: Sequence[str]) -> bool:
    return any(p in text for p in phrases)


def admit_sheets(
    sheet_names: Sequence[str],
    file_name: str,
    hint: str | None,
    config: IntakeConfig | None = None,
) -> tuple[tuple[str, ...], bool]:
    """Apply the hint filter. Returns (admitted names, fell_back)."""
    config = config or default_config()
    hint_key = (hint or "").strip().lower()
    lower_file = (file_name or "").lower()

    if hint_key == AUTO_HINT:
        admitted = tuple(
            name for name in sheet_names
            if not _contains_any(name.lower(), config.auto_exclude)
            and _contains_any(name.lower(), config.auto_allow)
        )
        # auto never falls back: unrelated tabs stay out
        return admitted, False

    hinted = ReportType.parse(hint_key)
    if hinted is None:
        if hint_key:
            logger.warning("unknown_report_type_hint", extra={"hint": hint})
        return tuple(sheet_names), False

    markers = config.markers(hinted)
    admitted = tuple(
        name for name in sheet_names
        if _contains_any(name.lower(), markers) or _contains_any(lower_file, markers)
    )
    if not admitted:
        return tuple(sheet_names), True
    return admitted, False


def detect_report_type(
    sheet_name: str,
    file_name: str = "",
    default_report_type: ReportType | None = None,
    config: IntakeConfig | None = None,
) -> ReportType | None:
    """Report type by marker phrases: sheet name first, then file name, then default."""
    config = config or default_config()
    for text in (sheet_name.lower(), (file_name or "").lower()):
        for rt in DETECTION_PRECEDENCE:
            if _contains_any(text, config.markers(rt)):
                return rt
    return default_report_type


def classify_sheets(
    workbook: Workbook,
    hint: str | None = "",
    default_report_type: ReportType | str | None = None,
    config: IntakeConfig | None = None,
) -> ClassificationResult:
    """
    Ordered (sheet, report type) pairs for the sheets worth extracting.

    Under a specific hint the hinted type is the default for sheets no
    marker identifies, after any caller-supplied default.
    """
    config = config or default_config()
    default_type = ReportType.parse(default_report_type)
    if default_type is None:
        default_type = ReportType.parse((hint or "").strip().lower())

    admitted, fell_back = admit_sheets(workbook.sheet_names, workbook.file_name, hint, config)
    if fell_back:
        logger.info("hint_filter_fallback", extra={"hint": hint, "sheet_count": len(admitted)})

    classified: list[ClassifiedSheet] = []
    warnings: list[IntakeWarning] = []
    for name in admitted:
        rt = detect_report_type(name, workbook.file_name, default_type, config)
        if rt is None:
            logger.warning("sheet_skipped", extra={"sheet_name": name, "reason": "unclassifiable"})
            warnings.append(IntakeWarning(
                code=UNCLASSIFIABLE_SHEET,
                message=f"Skipping sheet '{name}' because its report type could not be determined.",
                sheet_name=name,
            ))
            continue
        logger.debug("sheet_classified", extra={"sheet_name": name, "report_type": rt.value})
        classified.append(ClassifiedSheet(sheet_name=name, report_type=rt))

    return ClassificationResult(sheets=tuple(classified), warnings=tuple(warnings), fell_back=fell_back)

"""Sheet classification: hint filtering and marker-based report-type detection."""

from finance_intake.classification.classifier import (
    DETECTION_PRECEDENCE,
    ClassificationResult,
    admit_sheets,
    classify_sheets,
    detect_report_type,
)

__all__ = [
    "DETECTION_PRECEDENCE",
    "ClassificationResult",
    "admit_sheets",
    "classify_sheets",
    "detect_report_type",
]

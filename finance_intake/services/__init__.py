"""Intake services: orchestration, preview, payload sinks."""

from finance_intake.services.intake_service import (
    IntakePayloads,
    IntakeService,
    SubmissionResult,
    dedupe_inventory,
)
from finance_intake.services.preview import (
    DETECTED_ASSETS,
    DETECTED_EXPENSES,
    PreviewTable,
    build_preview,
)
from finance_intake.services.sinks import JsonFileSink, PayloadSink

__all__ = [
    "DETECTED_ASSETS",
    "DETECTED_EXPENSES",
    "IntakePayloads",
    "IntakeService",
    "JsonFileSink",
    "PayloadSink",
    "PreviewTable",
    "SubmissionResult",
    "build_preview",
    "dedupe_inventory",
]

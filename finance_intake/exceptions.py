"""
Typed exception hierarchy for spreadsheet intake.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from IntakeError:

    IntakeError (base)
    |
    +-- WorkbookError
    |   +-- UnsupportedFileFormatError
    |   +-- WorkbookDecodeError
    |   +-- WorkbookTooLargeError
    |
    +-- SubmissionError
    |   +-- MissingEntitySelectionError
    |   +-- NothingToImportError
    |   +-- PayloadRejectedError
    |
    +-- IntakeConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                        | When Raised
------------|-----------------------------|-------------------------------------
Workbook    | UNSUPPORTED_FILE_FORMAT     | File extension has no adapter
            | WORKBOOK_DECODE_FAILED      | Adapter could not read the file
            | WORKBOOK_TOO_LARGE          | Sheet/row/column bound exceeded
------------|-----------------------------|-------------------------------------
Submission  | MISSING_ENTITY_SELECTION    | No target entity chosen
            | NOTHING_TO_IMPORT           | Dataset has no records
            | PAYLOAD_REJECTED            | Persistence collaborator refused
------------|-----------------------------|-------------------------------------
Config      | INTAKE_CONFIG_INVALID       | defaults.yaml or override malformed

Extraction never raises: unclassifiable sheets, empty extractions and
malformed cells become IntakeWarning values on the result instead.
"""


class IntakeError(Exception):
    """
    Base exception for all intake errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INTAKE_ERROR"


# Workbook decoding


class WorkbookError(IntakeError):
    """Base exception for workbook decoding errors."""

    code: str = "WORKBOOK_ERROR"


class UnsupportedFileFormatError(WorkbookError):
    """No adapter is registered for the file's extension."""

    code: str = "UNSUPPORTED_FILE_FORMAT"

    def __init__(self, file_name: str, extension: str):
        self.file_name = file_name
        self.extension = extension
        super().__init__(f"Unsupported file format {extension!r} for {file_name}")


class WorkbookDecodeError(WorkbookError):
    """The adapter failed to read the source file."""

    code: str = "WORKBOOK_DECODE_FAILED"

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Could not decode {file_name}: {reason}")


class WorkbookTooLargeError(WorkbookError):
    """A configured sheet, row or column bound was exceeded."""

    code: str = "WORKBOOK_TOO_LARGE"

    def __init__(self, file_name: str, dimension: str, limit: int, sheet_name: str | None = None):
        self.file_name = file_name
        self.dimension = dimension
        self.limit = limit
        self.sheet_name = sheet_name
        where = f" (sheet {sheet_name!r})" if sheet_name else ""
        super().__init__(f"{file_name}{where} exceeds the {dimension} limit of {limit}")


# Submission


class SubmissionError(IntakeError):
    """Base exception for commit-time errors."""

    code: str = "SUBMISSION_ERROR"


class MissingEntitySelectionError(SubmissionError):
    """No target entity was selected before submitting."""

    code: str = "MISSING_ENTITY_SELECTION"

    def __init__(self) -> None:
        super().__init__("Please select an entity before importing.")


class NothingToImportError(SubmissionError):
    """The parsed dataset holds no records."""

    code: str = "NOTHING_TO_IMPORT"

    def __init__(self) -> None:
        super().__init__("No data to import. Please upload a file first.")


class PayloadRejectedError(SubmissionError):
    """The persistence collaborator rejected a payload."""

    code: str = "PAYLOAD_REJECTED"

    def __init__(self, payload_kind: str, message: str, status: int | None = None):
        self.payload_kind = payload_kind
        self.status = status
        super().__init__(message)


# Configuration


class IntakeConfigError(IntakeError):
    """Intake configuration failed validation."""

    code: str = "INTAKE_CONFIG_INVALID"

    def __init__(self, source: str, problem: str):
        self.source = source
        self.problem = problem
        super().__init__(f"Invalid intake config {source}: {problem}")

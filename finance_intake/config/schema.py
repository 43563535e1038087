"""
Intake configuration schema.

The YAML source (defaults.yaml or an override file) is parsed by the loader
into these frozen types. Cash-flow sheets carry no reliable headers, so
their column positions live here as explicit, versioned offset tables
rather than inline indexing in the extractor.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from finance_intake.domain.types import ReportType

NUMBER = "number"
TEXT = "text"

ASSET = "asset"
EXPENSE = "expense"


@dataclass(frozen=True)
class IntakeLimits:
    """Fail-fast bounds for a single upload."""

    max_sheets: int
    max_rows_per_sheet: int
    max_columns: int


@dataclass(frozen=True)
class ColumnOffset:
    """One field of a positional layout."""

    field: str
    column: int  # 0-based
    kind: str = NUMBER  # "number" or "text"


@dataclass(frozen=True)
class SubComponent:
    """A cash-flow field that fans out into its own transaction."""

    field: str
    name: str  # display / reference name, e.g. "Cash (Assets)"
    group: str  # "asset" or "expense"


@dataclass(frozen=True)
class ColumnLayout:
    """Positional column layout for one cash-flow direction."""

    report_type: ReportType
    version: int
    date_column: int
    offsets: tuple[ColumnOffset, ...]
    components: tuple[SubComponent, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(o.field for o in self.offsets)

    @property
    def used_columns(self) -> frozenset[int]:
        return frozenset({self.date_column, *(o.column for o in self.offsets)})

    def components_in(self, group: str) -> tuple[SubComponent, ...]:
        return tuple(c for c in self.components if c.group == group)


@dataclass(frozen=True)
class IntakeConfig:
    """Compiled intake configuration. The sole runtime config artifact."""

    version: int
    limits: IntakeLimits
    sheet_markers: dict[ReportType, tuple[str, ...]]
    auto_allow: tuple[str, ...]
    auto_exclude: tuple[str, ...]
    cash_flow_header_rows: int
    short_sheet_rows: int
    band_search_rows: int
    layouts: dict[ReportType, ColumnLayout]
    header_aliases: dict[ReportType, dict[str, str]]  # normalized alias -> canonical key
    text_fields: dict[ReportType, frozenset[str]] = field(default_factory=dict)
    checksum: str = ""

    def layout(self, report_type: ReportType) -> ColumnLayout:
        try:
            return self.layouts[report_type]
        except KeyError:
            raise KeyError(f"No column layout for {report_type.value}") from None

    def markers(self, report_type: ReportType) -> tuple[str, ...]:
        return self.sheet_markers.get(report_type, ())

    def is_text_field(self, report_type: ReportType, key: str) -> bool:
        return key in self.text_fields.get(report_type, frozenset())

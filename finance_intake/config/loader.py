"""
Intake configuration loader (``finance_intake.config.loader``).

Responsibility
--------------
Loads the intake YAML file and parses it into the frozen types of
``finance_intake.config.schema``. Alias spellings are normalized on load so
the header reconciler only ever does exact lookups.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid content  -> ``IntakeConfigError``.

``compute_checksum`` gives a deterministic SHA-256 of the parsed source so
an import can be traced back to the exact layout tables that shaped it.
"""

from __future__ import annotations

import hashlib
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from finance_intake.config.schema import (
    ASSET,
    EXPENSE,
    NUMBER,
    TEXT,
    ColumnLayout,
    ColumnOffset,
    IntakeConfig,
    IntakeLimits,
    SubComponent,
)
from finance_intake.domain.cells import normalize_header
from finance_intake.domain.types import ReportType
from finance_intake.exceptions import IntakeConfigError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 over the parsed YAML content."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _report_type(key: Any, source: str) -> ReportType:
    rt = ReportType.parse(key)
    if rt is None:
        raise IntakeConfigError(source, f"unknown report type {key!r}")
    return rt


def _positive_int(value: Any, name: str, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise IntakeConfigError(source, f"{name} must be a positive integer, got {value!r}")
    return value


def _phrases(values: Any, name: str, source: str) -> tuple[str, ...]:
    if not isinstance(values, list) or not values:
        raise IntakeConfigError(source, f"{name} must be a non-empty list")
    return tuple(str(v).strip().lower() for v in values)


def parse_limits(data: dict[str, Any], source: str) -> IntakeLimits:
    return IntakeLimits(
        max_sheets=_positive_int(data.get("max_sheets"), "limits.max_sheets", source),
        max_rows_per_sheet=_positive_int(data.get("max_rows_per_sheet"), "limits.max_rows_per_sheet", source),
        max_columns=_positive_int(data.get("max_columns"), "limits.max_columns", source),
    )


def parse_layout(report_type: ReportType, data: dict[str, Any], source: str) -> ColumnLayout:
    """
    Parse one cash-flow column layout.

    Postconditions:
        - No two fields share a column; the date column is not reused.
        - Every sub-component refers to a numeric field of the layout.
    """
    where = f"cash_flow.layouts.{report_type.value}"
    date_column = int(data.get("date_column", 0))
    offsets: list[ColumnOffset] = []
    seen_columns = {date_column}
    seen_fields: set[str] = set()
    for entry in data.get("columns") or ():
        fld = str(entry["field"])
        col = entry["column"]
        kind = entry.get("kind", NUMBER)
        if isinstance(col, bool) or not isinstance(col, int) or col < 0:
            raise IntakeConfigError(source, f"{where}: column for {fld!r} must be a non-negative integer")
        if kind not in (NUMBER, TEXT):
            raise IntakeConfigError(source, f"{where}: kind for {fld!r} must be 'number' or 'text'")
        if col in seen_columns:
            raise IntakeConfigError(source, f"{where}: column {col} used twice")
        if fld in seen_fields:
            raise IntakeConfigError(source, f"{where}: field {fld!r} defined twice")
        seen_columns.add(col)
        seen_fields.add(fld)
        offsets.append(ColumnOffset(field=fld, column=col, kind=kind))
    if not offsets:
        raise IntakeConfigError(source, f"{where}: no columns defined")

    numeric = {o.field for o in offsets if o.kind == NUMBER}
    components: list[SubComponent] = []
    for entry in data.get("components") or ():
        comp = SubComponent(field=str(entry["field"]), name=str(entry["name"]), group=str(entry["group"]))
        if comp.group not in (ASSET, EXPENSE):
            raise IntakeConfigError(source, f"{where}: component group must be 'asset' or 'expense'")
        if comp.field not in numeric:
            raise IntakeConfigError(source, f"{where}: component {comp.field!r} is not a numeric column")
        components.append(comp)

    return ColumnLayout(
        report_type=report_type,
        version=int(data.get("version", 1)),
        date_column=date_column,
        offsets=tuple(offsets),
        components=tuple(components),
    )


def parse_header_aliases(data: dict[str, Any], source: str) -> dict[ReportType, dict[str, str]]:
    """canonical -> [spellings] becomes normalized spelling -> canonical."""
    tables: dict[ReportType, dict[str, str]] = {}
    for type_key, entries in (data or {}).items():
        rt = _report_type(type_key, source)
        table: dict[str, str] = {}
        for canonical, spellings in (entries or {}).items():
            for raw in [canonical, *(spellings or ())]:
                norm = normalize_header(raw)
                if not norm:
                    continue
                if table.get(norm, canonical) != canonical:
                    raise IntakeConfigError(
                        source, f"header_aliases.{rt.value}: {raw!r} maps to both {table[norm]!r} and {canonical!r}"
                    )
                table[norm] = str(canonical)
        tables[rt] = table
    return tables


def parse_config(data: dict[str, Any], source: str = "<memory>") -> IntakeConfig:
    """Parse an ``IntakeConfig`` from a YAML-shaped dict."""
    try:
        classification = data.get("classification") or {}
        markers = {
            _report_type(k, source): _phrases(v, f"classification.markers.{k}", source)
            for k, v in (classification.get("markers") or {}).items()
        }
        missing = [rt.value for rt in ReportType if rt not in markers]
        if missing:
            raise IntakeConfigError(source, f"classification.markers missing {missing}")

        cash_flow = data.get("cash_flow") or {}
        layouts = {
            _report_type(k, source): parse_layout(_report_type(k, source), v or {}, source)
            for k, v in (cash_flow.get("layouts") or {}).items()
        }
        for rt in (ReportType.CASH_IN, ReportType.CASH_OUT):
            if rt not in layouts:
                raise IntakeConfigError(source, f"cash_flow.layouts missing {rt.value}")

        text_fields = {
            _report_type(k, source): frozenset(str(f) for f in (v or ()))
            for k, v in (data.get("text_fields") or {}).items()
        }

        return IntakeConfig(
            version=int(data.get("version", 1)),
            limits=parse_limits(data.get("limits") or {}, source),
            sheet_markers=markers,
            auto_allow=_phrases(classification.get("auto_allow"), "classification.auto_allow", source),
            auto_exclude=tuple(str(v).strip().lower() for v in classification.get("auto_exclude") or ()),
            cash_flow_header_rows=_positive_int(cash_flow.get("header_rows", 5), "cash_flow.header_rows", source),
            short_sheet_rows=_positive_int(cash_flow.get("short_sheet_rows", 6), "cash_flow.short_sheet_rows", source),
            band_search_rows=_positive_int(cash_flow.get("band_search_rows", 15), "cash_flow.band_search_rows", source),
            layouts=layouts,
            header_aliases=parse_header_aliases(data.get("header_aliases") or {}, source),
            text_fields=text_fields,
            checksum=compute_checksum(data),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise IntakeConfigError(source, f"{type(exc).__name__}: {exc}") from exc


def load_intake_config(path: Path | None = None) -> IntakeConfig:
    """Load and validate an intake config file (defaults.yaml when omitted)."""
    path = path or DEFAULT_CONFIG_PATH
    return parse_config(load_yaml_file(path), source=str(path))


@lru_cache(maxsize=1)
def default_config() -> IntakeConfig:
    """The packaged defaults, parsed once per process."""
    return load_intake_config(DEFAULT_CONFIG_PATH)

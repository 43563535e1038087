"""Tests for intake config loading and validation."""

import copy

import pytest
import yaml

from finance_intake.config import (
    DEFAULT_CONFIG_PATH,
    compute_checksum,
    default_config,
    load_intake_config,
    parse_config,
)
from finance_intake.config.schema import ASSET, EXPENSE, TEXT
from finance_intake.domain.types import ReportType
from finance_intake.exceptions import IntakeConfigError


@pytest.fixture
def raw_defaults() -> dict:
    with open(DEFAULT_CONFIG_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)


class TestDefaultConfig:
    """The packaged defaults.yaml parses into the expected tables."""

    def test_loads(self):
        config = default_config()
        assert config.version == 1
        assert config.limits.max_sheets > 0
        assert config.cash_flow_header_rows == 5

    def test_cached(self):
        assert default_config() is default_config()

    def test_cash_in_layout(self):
        layout = default_config().layout(ReportType.CASH_IN)
        columns = {o.field: o.column for o in layout.offsets}
        assert columns["cash"] == 1
        assert columns["raw_materials"] == 4
        assert columns["entered_by"] == 10
        assert [c.name for c in layout.components_in(ASSET)] == ["Raw Materials", "Cash (Assets)", "Savings"]
        assert layout.components_in(EXPENSE) == ()

    def test_cash_out_layout(self):
        layout = default_config().layout(ReportType.CASH_OUT)
        assert [c.name for c in layout.components_in(EXPENSE)] == ["Utilities", "Office Supplies"]
        assert [c.name for c in layout.components_in(ASSET)] == ["Cash (Assets)", "Investments", "Savings"]
        kinds = {o.field: o.kind for o in layout.offsets}
        assert kinds["notes"] == TEXT

    def test_no_layout_for_inventory(self):
        with pytest.raises(KeyError):
            default_config().layout(ReportType.INVENTORY_REPORT)

    def test_header_aliases_normalized(self):
        aliases = default_config().header_aliases[ReportType.CASH_OUT]
        assert aliases["ownerswithdrawal"] == "owner_withdrawal"
        assert aliases["officesupplies"] == "office_supplies"

    def test_checksum_is_stable(self, raw_defaults):
        assert default_config().checksum == compute_checksum(raw_defaults)
        assert len(default_config().checksum) == 64


class TestConfigValidation:
    """Malformed configs fail with IntakeConfigError, never a bare KeyError."""

    def test_duplicate_column_rejected(self, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        data["cash_flow"]["layouts"]["cash_in"]["columns"][1]["column"] = 1
        with pytest.raises(IntakeConfigError, match="used twice"):
            parse_config(data)

    def test_component_must_be_numeric_column(self, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        data["cash_flow"]["layouts"]["cash_in"]["components"].append(
            {"field": "notes", "name": "Notes", "group": "asset"}
        )
        with pytest.raises(IntakeConfigError):
            parse_config(data)

    def test_missing_layout_rejected(self, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        del data["cash_flow"]["layouts"]["cash_out"]
        with pytest.raises(IntakeConfigError, match="cash_out"):
            parse_config(data)

    def test_unknown_report_type_rejected(self, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        data["classification"]["markers"]["payroll"] = ["payroll"]
        with pytest.raises(IntakeConfigError, match="payroll"):
            parse_config(data)

    def test_error_carries_code(self, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        data["limits"]["max_sheets"] = 0
        with pytest.raises(IntakeConfigError) as exc_info:
            parse_config(data, source="override.yaml")
        assert exc_info.value.code == "INTAKE_CONFIG_INVALID"
        assert exc_info.value.source == "override.yaml"


class TestOverrideFile:
    def test_load_override(self, tmp_path, raw_defaults):
        data = copy.deepcopy(raw_defaults)
        data["limits"]["max_rows_per_sheet"] = 10
        path = tmp_path / "intake.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

        config = load_intake_config(path)
        assert config.limits.max_rows_per_sheet == 10
        assert config.checksum != default_config().checksum

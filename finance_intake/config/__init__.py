"""
finance_intake.config -- YAML-defined intake tables.

``default_config()`` is the runtime entrypoint; ``load_intake_config()``
accepts an override file (tests, alternative templates).
"""

from finance_intake.config.loader import (
    DEFAULT_CONFIG_PATH,
    compute_checksum,
    default_config,
    load_intake_config,
    parse_config,
)
from finance_intake.config.schema import (
    ColumnLayout,
    ColumnOffset,
    IntakeConfig,
    IntakeLimits,
    SubComponent,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ColumnLayout",
    "ColumnOffset",
    "IntakeConfig",
    "IntakeLimits",
    "SubComponent",
    "compute_checksum",
    "default_config",
    "load_intake_config",
    "parse_config",
]

"""
Payload sinks: the persistence collaborator seen from the engine.

The engine never persists anything itself. A PayloadSink receives the
commit payloads one kind at a time and may resolve reference names to ids
beforehand. JsonFileSink writes each payload to ``<out_dir>/<kind>.json``
and is what the command-line runner uses.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

from finance_intake.logging_config import get_logger

logger = get_logger("services.sinks")

PAYLOAD_INVENTORY = "inventory"
PAYLOAD_CASH_IN = "cash_in"
PAYLOAD_CASH_OUT = "cash_out"
PAYLOAD_FINANCIAL_STATEMENTS = "financial_statements"

# Submission order; inventory first so cash-out inventory amounts land on known items.
PAYLOAD_ORDER = (
    PAYLOAD_INVENTORY,
    PAYLOAD_CASH_IN,
    PAYLOAD_CASH_OUT,
    PAYLOAD_FINANCIAL_STATEMENTS,
)


@runtime_checkable
class PayloadSink(Protocol):
    """Protocol for the collaborator that stores commit payloads."""

    def ensure_references(
        self,
        entity_id: str,
        assets: tuple[str, ...],
        expenses: tuple[str, ...],
    ) -> Mapping[str, Mapping[str, Any]] | None:
        """
        Upsert asset/expense names and return ``{"assets": {name: id},
        "expenses": {name: id}}``. None means the sink does not track ids.
        """
        ...

    def submit(self, kind: str, payload: dict[str, Any]) -> Any:
        """Store one payload. Raise to reject it."""
        ...


class JsonFileSink:
    """Write payloads as pretty-printed JSON files under ``out_dir``."""

    def __init__(self, out_dir: Path):
        self.out_dir = Path(out_dir)
        self.written: list[Path] = []

    def ensure_references(
        self,
        entity_id: str,
        assets: tuple[str, ...],
        expenses: tuple[str, ...],
    ) -> None:
        self._write("references", {"entity_id": entity_id, "assets": list(assets), "expenses": list(expenses)})
        return None

    def submit(self, kind: str, payload: dict[str, Any]) -> Path:
        return self._write(kind, payload)

    def _write(self, kind: str, payload: dict[str, Any]) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        path = self.out_dir / f"{kind}.json"
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        self.written.append(path)
        logger.debug("payload_written", extra={"kind": kind, "path": str(path)})
        return path

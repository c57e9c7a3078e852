"""Rule event — one anomaly raised by the detection engine."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.contracts.enums import RuleType, Severity

# CSV column order for events.csv
EVENT_CSV_COLUMNS: list[str] = [
    "id",
    "type",
    "severity",
    "timestamp",
    "site",
    "value",
    "threshold",
    "description",
]


@dataclass(frozen=True, slots=True)
class RuleEvent:
    """A detected anomaly.

    ``timestamp`` is the triggering sample for LOW_PF and
    VOLTAGE_INSTABILITY, and the *start* of the run for IDLE_PERIOD.
    ``value`` is the measured magnitude, ``threshold`` the boundary it is
    reported against (for IDLE_PERIOD a fixed label, not the gate).
    """

    id: str
    type: RuleType
    severity: Severity
    timestamp: datetime
    site: str
    description: str
    value: float
    threshold: float

    # ── serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "site": self.site,
            "description": self.description,
            "value": self.value,
            "threshold": self.threshold,
        }

    def to_json(self) -> str:
        """Return compact JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def to_csv_row(self) -> str:
        """Return a single CSV line (no trailing newline)."""
        data = self.to_dict()
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow([data[c] for c in EVENT_CSV_COLUMNS])
        return buf.getvalue().rstrip("\r\n")

    @staticmethod
    def csv_header() -> str:
        return ",".join(EVENT_CSV_COLUMNS)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleEvent:
        """Rebuild an event from :meth:`to_dict` output."""
        ts = data["timestamp"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        return cls(
            id=str(data["id"]),
            type=RuleType(data["type"]),
            severity=Severity(data["severity"]),
            timestamp=ts,
            site=str(data["site"]),
            description=str(data.get("description", "")),
            value=float(data["value"]),
            threshold=float(data["threshold"]),
        )

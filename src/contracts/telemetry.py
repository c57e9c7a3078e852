"""Telemetry record — one normalised reading from one site at one instant."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# Column order for tabular export (dashboard frames, CSV dumps)
TELEMETRY_COLUMNS: list[str] = [
    "timestamp",
    "site",
    "power_factor",
    "voltage",
    "current",
    "power",
    "energy",
]


@dataclass(frozen=True, slots=True)
class TelemetryRecord:
    """One sample produced by ingestion and read (never mutated) by the engine."""

    timestamp: datetime     # tz-aware, UTC after ingestion
    site: str
    power_factor: float     # dimensionless, expected (0, 1]
    voltage: float          # V
    current: float          # A
    power: float
    energy: float

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {c: getattr(self, c) for c in TELEMETRY_COLUMNS}
        row["timestamp"] = self.timestamp.isoformat()
        return row

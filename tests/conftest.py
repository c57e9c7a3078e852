"""Shared fixtures for solar event engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.contracts.enums import RuleType, Severity
from src.contracts.rule_event import RuleEvent
from src.contracts.telemetry import TelemetryRecord

BASE_TS = "2024-01-01T10:00:00Z"

# ── Timestamp helpers ────────────────────────────────────────────────────


def ts_offset(base: str = BASE_TS, minutes: float = 0, seconds: float = 0) -> datetime:
    """Return a UTC datetime offset from *base*."""
    dt = datetime.fromisoformat(base.replace("Z", "+00:00"))
    return dt + timedelta(minutes=minutes, seconds=seconds)


# ── Helper: create records / events with sensible defaults ──────────────


def make_record(
    *,
    timestamp: datetime | None = None,
    site: str = "Site_A",
    power_factor: float = 0.95,
    voltage: float = 230.0,
    current: float = 10.0,
    power: float = 2300.0,
    energy: float = 100.0,
) -> TelemetryRecord:
    return TelemetryRecord(
        timestamp=timestamp or ts_offset(),
        site=site,
        power_factor=power_factor,
        voltage=voltage,
        current=current,
        power=power,
        energy=energy,
    )


def make_event(
    *,
    id: str = "R1-0001",
    type: RuleType = RuleType.LOW_PF,
    severity: Severity = Severity.HIGH,
    timestamp: datetime | None = None,
    site: str = "Site_A",
    description: str = "test event",
    value: float = 0.6,
    threshold: float = 0.85,
) -> RuleEvent:
    return RuleEvent(
        id=id,
        type=type,
        severity=severity,
        timestamp=timestamp or ts_offset(),
        site=site,
        description=description,
        value=value,
        threshold=threshold,
    )


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def idle_series() -> list[TelemetryRecord]:
    """Three idle samples then one active, 30 minutes apart."""
    return [
        make_record(current=0.2, voltage=220, timestamp=ts_offset(minutes=0)),
        make_record(current=0.1, voltage=230, timestamp=ts_offset(minutes=30)),
        make_record(current=0.3, voltage=225, timestamp=ts_offset(minutes=60)),
        make_record(current=8.0, voltage=230, timestamp=ts_offset(minutes=90)),
    ]


@pytest.fixture
def mixed_events() -> list[RuleEvent]:
    """One event of each rule across two sites, newest first."""
    return [
        make_event(
            id="R3-0001",
            type=RuleType.IDLE_PERIOD,
            severity=Severity.MEDIUM,
            timestamp=ts_offset(minutes=120),
            site="Site_B",
            description="Rule #3: Idle period 45 min at Site_B",
            value=45.0,
            threshold=15.0,
        ),
        make_event(
            id="R2-0001",
            type=RuleType.VOLTAGE_INSTABILITY,
            severity=Severity.LOW,
            timestamp=ts_offset(minutes=60),
            site="Site_A",
            description="Rule #2: Voltage variance 20.0V (8.7%) at Site_A",
            value=20.0,
            threshold=11.5,
        ),
        make_event(
            id="R1-0001",
            type=RuleType.LOW_PF,
            severity=Severity.HIGH,
            timestamp=ts_offset(minutes=0),
            site="Site_A",
            description="Rule #1: PF < 0.85 at Site_A (0.600)",
            value=0.6,
            threshold=0.85,
        ),
    ]


@pytest.fixture
def write_csv(tmp_path):
    """Write a telemetry CSV into tmp_path and return its path."""

    def _write(name: str, rows: list[dict], header: list[str] | None = None) -> str:
        cols = header or list(rows[0].keys())
        lines = [",".join(cols)]
        for row in rows:
            lines.append(",".join(str(row.get(c, "")) for c in cols))
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return _write

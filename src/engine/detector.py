"""Detector — rule engine: joined telemetry stream → Rule Events.

The engine is a single synchronous pass over an ordered sequence of
TelemetryRecords (ascending by timestamp, already merged across source
files).  It performs no I/O and keeps no state between calls.

Rules
─────
  #1 LOW_PF               — power_factor below threshold, per record
  #2 VOLTAGE_INSTABILITY  — relative voltage jump between index-adjacent
                            records of the same site
  #3 IDLE_PERIOD          — run of ≥ N consecutive idle samples per site
                            (near-zero current while voltage is present)

Output is the concatenation LOW_PF + VOLTAGE_INSTABILITY + IDLE_PERIOD,
stable-sorted by timestamp, most recent first.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from src.contracts.enums import RuleType
from src.contracts.rule_event import RuleEvent
from src.contracts.telemetry import TelemetryRecord
from src.engine.rules import (
    DEFAULT_SETTINGS,
    IdlePeriodRule,
    LowPowerFactorRule,
    RuleSettings,
    VoltageInstabilityRule,
)
from src.engine.severity import classify
from src.shared.ids import IdFactory, random_ids

log = logging.getLogger(__name__)


def _ratio(num: float, den: float) -> float:
    """IEEE division: x/0 → ±inf, 0/0 → nan, instead of ZeroDivisionError."""
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num) * math.copysign(1.0, den)
    return num / den


def group_by_site(records: Sequence[TelemetryRecord]) -> dict[str, list[TelemetryRecord]]:
    """Partition *records* by site, keeping relative order inside each site."""
    groups: dict[str, list[TelemetryRecord]] = {}
    for r in records:
        groups.setdefault(r.site, []).append(r)
    return groups


# ═══════════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════════


def run_rule_engine(
    records: Sequence[TelemetryRecord],
    settings: RuleSettings | None = None,
    id_factory: IdFactory | None = None,
) -> list[RuleEvent]:
    """Run all enabled rules over *records* and return merged events.

    Parameters
    ──────────
    records
        Telemetry sorted ascending by timestamp.  Unordered input does not
        raise but yields missed or spurious voltage-instability events.
    settings
        Thresholds per rule; None = production defaults.
    id_factory
        Id source for new events; None = random ids.

    Returns
    ───────
    Events sorted by timestamp descending (stable for equal timestamps).
    """
    if not records:
        log.warning("No telemetry to analyse — engine returns empty list")
        return []

    cfg = settings or DEFAULT_SETTINGS
    new_id = id_factory or random_ids()

    events: list[RuleEvent] = []
    if cfg.low_pf.enabled:
        events.extend(detect_low_power_factor(records, cfg.low_pf, new_id))
    if cfg.voltage_instability.enabled:
        events.extend(detect_voltage_instability(records, cfg.voltage_instability, new_id))
    if cfg.idle_period.enabled:
        events.extend(detect_idle_periods(records, cfg.idle_period, new_id))

    events.sort(key=lambda e: e.timestamp, reverse=True)
    log.info("Engine raised %d events from %d records", len(events), len(records))
    return events


# ═══════════════════════════════════════════════════════════════════════════
#  Rule implementations
# ═══════════════════════════════════════════════════════════════════════════


def detect_low_power_factor(
    records: Sequence[TelemetryRecord],
    rule: LowPowerFactorRule,
    new_id: IdFactory,
) -> list[RuleEvent]:
    """Rule #1 — one event per record with power_factor < threshold."""
    events: list[RuleEvent] = []
    for r in records:
        if r.power_factor < rule.threshold:
            events.append(
                RuleEvent(
                    id=new_id(RuleType.LOW_PF),
                    type=RuleType.LOW_PF,
                    severity=classify(r.power_factor, rule.tiers),
                    timestamp=r.timestamp,
                    site=r.site,
                    description=(
                        f"Rule #1: PF < {rule.threshold:g} at {r.site} ({r.power_factor:.3f})"
                    ),
                    value=r.power_factor,
                    threshold=rule.threshold,
                )
            )
    log.debug("LOW_PF: %d events", len(events))
    return events


def detect_voltage_instability(
    records: Sequence[TelemetryRecord],
    rule: VoltageInstabilityRule,
    new_id: IdFactory,
) -> list[RuleEvent]:
    """Rule #2 — relative voltage jump between adjacent same-site records.

    Pairs are taken by index in the full merged sequence; a pair that
    straddles two different sites is skipped, so interleaved sites are
    only compared where their samples happen to be adjacent.
    """
    events: list[RuleEvent] = []
    for prev, cur in zip(records, records[1:]):
        if cur.site != prev.site:
            continue
        change = abs(cur.voltage - prev.voltage)
        change_pct = _ratio(change, prev.voltage)
        if change_pct > rule.change_pct:
            events.append(
                RuleEvent(
                    id=new_id(RuleType.VOLTAGE_INSTABILITY),
                    type=RuleType.VOLTAGE_INSTABILITY,
                    severity=classify(change_pct, rule.tiers),
                    timestamp=cur.timestamp,
                    site=cur.site,
                    description=(
                        f"Rule #2: Voltage variance {change:.1f}V "
                        f"({change_pct * 100:.1f}%) at {cur.site}"
                    ),
                    value=change,
                    threshold=prev.voltage * rule.change_pct,
                )
            )
    log.debug("VOLTAGE_INSTABILITY: %d events", len(events))
    return events


@dataclass(frozen=True, slots=True)
class _IdleRun:
    """Open-run accumulator threaded through the per-site scan."""

    start: datetime | None = None
    length: int = 0


def _is_idle(r: TelemetryRecord, rule: IdlePeriodRule) -> bool:
    return r.current < rule.current_below and r.voltage > rule.voltage_above


def _idle_step(
    run: _IdleRun,
    r: TelemetryRecord,
    rule: IdlePeriodRule,
) -> tuple[_IdleRun, tuple[datetime, datetime] | None]:
    """Advance the run by one sample; return the closed interval, if any."""
    if _is_idle(r, rule):
        start = run.start if run.start is not None else r.timestamp
        return _IdleRun(start, run.length + 1), None
    closed = None
    if run.start is not None and run.length >= rule.min_run_length:
        closed = (run.start, r.timestamp)
    return _IdleRun(), closed


def idle_intervals(
    site_records: Sequence[TelemetryRecord],
    rule: IdlePeriodRule,
) -> list[tuple[datetime, datetime]]:
    """Reportable idle intervals ``(start, end)`` for one site's records.

    A run still open at the end is closed against the last sample.
    """
    intervals: list[tuple[datetime, datetime]] = []
    run = _IdleRun()
    for r in site_records:
        run, closed = _idle_step(run, r, rule)
        if closed is not None:
            intervals.append(closed)
    if run.start is not None and run.length >= rule.min_run_length:
        intervals.append((run.start, site_records[-1].timestamp))
    return intervals


def detect_idle_periods(
    records: Sequence[TelemetryRecord],
    rule: IdlePeriodRule,
    new_id: IdFactory,
) -> list[RuleEvent]:
    """Rule #3 — idle runs per site, anchored at the start of the run."""
    events: list[RuleEvent] = []
    for site, site_records in group_by_site(records).items():
        for start, end in idle_intervals(site_records, rule):
            minutes = (end - start).total_seconds() / 60
            events.append(
                RuleEvent(
                    id=new_id(RuleType.IDLE_PERIOD),
                    type=RuleType.IDLE_PERIOD,
                    severity=classify(minutes, rule.tiers),
                    timestamp=start,
                    site=site,
                    description=f"Rule #3: Idle period {minutes:.0f} min at {site}",
                    value=minutes,
                    threshold=rule.label_threshold_min,
                )
            )
    log.debug("IDLE_PERIOD: %d events", len(events))
    return events

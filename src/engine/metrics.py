"""Event statistics — aggregate view of one engine run.

Used by the triage template, the text report and the dashboard KPI cards.

Metrics
───────
  total                 number of events
  by_type / by_severity / by_site
                        dict value -> count
  sites                 number of distinct sites with at least one event
  high_count            events with severity == high
  mean_low_pf           mean power factor over LOW_PF events (None if none)
  max_voltage_change_v  largest VOLTAGE_INSTABILITY value in volts (None if none)
  total_idle_min        sum of IDLE_PERIOD durations in minutes
  first_ts / last_ts    earliest / latest event anchor (None if no events)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.contracts.enums import RuleType, Severity
from src.contracts.rule_event import RuleEvent

log = logging.getLogger(__name__)


@dataclass(slots=True)
class EventStats:
    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)
    by_site: dict[str, int] = field(default_factory=dict)
    sites: int = 0
    high_count: int = 0
    mean_low_pf: float | None = None
    max_voltage_change_v: float | None = None
    total_idle_min: float = 0.0
    first_ts: datetime | None = None
    last_ts: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_type": dict(self.by_type),
            "by_severity": dict(self.by_severity),
            "by_site": dict(self.by_site),
            "sites": self.sites,
            "high_count": self.high_count,
            "mean_low_pf": self.mean_low_pf,
            "max_voltage_change_v": self.max_voltage_change_v,
            "total_idle_min": self.total_idle_min,
            "first_ts": self.first_ts.isoformat() if self.first_ts else None,
            "last_ts": self.last_ts.isoformat() if self.last_ts else None,
        }


def compute_stats(events: list[RuleEvent]) -> EventStats:
    """Aggregate *events* into an :class:`EventStats`."""
    if not events:
        return EventStats()

    pf_values = [e.value for e in events if e.type == RuleType.LOW_PF]
    volt_values = [e.value for e in events if e.type == RuleType.VOLTAGE_INSTABILITY]
    idle_values = [e.value for e in events if e.type == RuleType.IDLE_PERIOD]
    by_site = Counter(e.site for e in events)

    stats = EventStats(
        total=len(events),
        by_type=dict(Counter(e.type.value for e in events)),
        by_severity=dict(Counter(e.severity.value for e in events)),
        by_site=dict(by_site),
        sites=len(by_site),
        high_count=sum(1 for e in events if e.severity == Severity.HIGH),
        mean_low_pf=sum(pf_values) / len(pf_values) if pf_values else None,
        max_voltage_change_v=max(volt_values) if volt_values else None,
        total_idle_min=sum(idle_values),
        first_ts=min(e.timestamp for e in events),
        last_ts=max(e.timestamp for e in events),
    )
    log.debug("Stats: %d events across %d sites", stats.total, stats.sites)
    return stats

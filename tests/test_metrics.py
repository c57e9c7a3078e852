"""Tests for src.engine.metrics — event statistics."""

from __future__ import annotations

import pytest

from src.contracts.enums import RuleType, Severity
from src.engine.metrics import EventStats, compute_stats
from tests.conftest import make_event, ts_offset


class TestComputeStats:
    def test_empty(self):
        s = compute_stats([])
        assert s == EventStats()
        assert s.first_ts is None
        assert s.mean_low_pf is None

    def test_counts(self, mixed_events):
        s = compute_stats(mixed_events)
        assert s.total == 3
        assert s.by_type == {"IDLE_PERIOD": 1, "VOLTAGE_INSTABILITY": 1, "LOW_PF": 1}
        assert s.by_severity == {"medium": 1, "low": 1, "high": 1}
        assert s.by_site == {"Site_B": 1, "Site_A": 2}
        assert s.sites == 2
        assert s.high_count == 1

    def test_magnitudes(self, mixed_events):
        extra = make_event(id="R1-0002", value=0.8, severity=Severity.LOW)
        s = compute_stats(mixed_events + [extra])
        assert s.mean_low_pf == pytest.approx(0.7)
        assert s.max_voltage_change_v == pytest.approx(20.0)
        assert s.total_idle_min == pytest.approx(45.0)

    def test_time_range(self, mixed_events):
        s = compute_stats(mixed_events)
        assert s.first_ts == ts_offset(minutes=0)
        assert s.last_ts == ts_offset(minutes=120)

    def test_to_dict_serialisable(self, mixed_events):
        d = compute_stats(mixed_events).to_dict()
        assert d["first_ts"] == "2024-01-01T10:00:00+00:00"
        assert d["by_type"][RuleType.LOW_PF.value] == 1

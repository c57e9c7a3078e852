"""Tests for src.shared.ids — event identifier factories."""

from __future__ import annotations

import re

from src.contracts.enums import RuleType
from src.shared.ids import random_ids, seeded_ids, sequential_ids

_ID_RE = re.compile(r"^R[123]-[0-9a-f]{8}$")


class TestIdFactories:
    def test_random_format_and_prefix(self):
        make = random_ids()
        assert _ID_RE.match(make(RuleType.LOW_PF))
        assert make(RuleType.IDLE_PERIOD).startswith("R3-")

    def test_random_ids_differ(self):
        make = random_ids()
        assert len({make(RuleType.LOW_PF) for _ in range(100)}) == 100

    def test_seeded_is_reproducible(self):
        a, b = seeded_ids(7), seeded_ids(7)
        seq_a = [a(RuleType.VOLTAGE_INSTABILITY) for _ in range(5)]
        seq_b = [b(RuleType.VOLTAGE_INSTABILITY) for _ in range(5)]
        assert seq_a == seq_b
        assert all(_ID_RE.match(i) for i in seq_a)

    def test_seeded_differs_by_seed(self):
        assert seeded_ids(1)(RuleType.LOW_PF) != seeded_ids(2)(RuleType.LOW_PF)

    def test_sequential_counts_per_rule(self):
        make = sequential_ids()
        assert make(RuleType.LOW_PF) == "R1-0001"
        assert make(RuleType.LOW_PF) == "R1-0002"
        assert make(RuleType.IDLE_PERIOD) == "R3-0001"

"""Canonical enumerations for the telemetry/event contract."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """1 for low, 2 for medium, 3 for high."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 1, Severity.MEDIUM: 2, Severity.HIGH: 3}


class RuleType(str, Enum):
    LOW_PF = "LOW_PF"
    VOLTAGE_INSTABILITY = "VOLTAGE_INSTABILITY"
    IDLE_PERIOD = "IDLE_PERIOD"

    @property
    def number(self) -> int:
        """Rule number as shown to operators ("Rule #1" ...)."""
        return _RULE_NUMBER[self]


_RULE_NUMBER = {
    RuleType.LOW_PF: 1,
    RuleType.VOLTAGE_INSTABILITY: 2,
    RuleType.IDLE_PERIOD: 3,
}

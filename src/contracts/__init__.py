"""Telemetry/Event contract — canonical data structures shared by all modules."""

from src.contracts.enums import RuleType, Severity
from src.contracts.rule_event import RuleEvent
from src.contracts.telemetry import TelemetryRecord

__all__ = ["RuleEvent", "RuleType", "Severity", "TelemetryRecord"]

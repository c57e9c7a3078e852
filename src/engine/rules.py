"""Rule settings — thresholds and tier boundaries for the three rules.

Defaults are the production constants; ``config/rules.yaml`` may override
any of them per rule::

    rules:
      low_pf:
        threshold: 0.85
      idle_period:
        enabled: false
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any

from src.engine.severity import Tiers

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LowPowerFactorRule:
    enabled: bool = True
    threshold: float = 0.85
    high_below: float = 0.70
    medium_below: float = 0.80

    @property
    def tiers(self) -> Tiers:
        return Tiers(high=self.high_below, medium=self.medium_below, direction="below")


@dataclass(frozen=True, slots=True)
class VoltageInstabilityRule:
    enabled: bool = True
    change_pct: float = 0.05       # fraction of the previous voltage
    high_above: float = 0.15
    medium_above: float = 0.10

    @property
    def tiers(self) -> Tiers:
        return Tiers(high=self.high_above, medium=self.medium_above, direction="above")


@dataclass(frozen=True, slots=True)
class IdlePeriodRule:
    enabled: bool = True
    current_below: float = 0.5     # A
    voltage_above: float = 100.0   # V
    min_run_length: int = 2        # consecutive idle samples
    high_above_min: float = 60.0
    medium_above_min: float = 30.0
    label_threshold_min: float = 15.0  # reported threshold, not the gate

    @property
    def tiers(self) -> Tiers:
        return Tiers(high=self.high_above_min, medium=self.medium_above_min, direction="above")


@dataclass(frozen=True, slots=True)
class RuleSettings:
    low_pf: LowPowerFactorRule = field(default_factory=LowPowerFactorRule)
    voltage_instability: VoltageInstabilityRule = field(default_factory=VoltageInstabilityRule)
    idle_period: IdlePeriodRule = field(default_factory=IdlePeriodRule)


DEFAULT_SETTINGS = RuleSettings()


def _coerce(current: Any, raw: Any, setting: str) -> Any:
    """Convert a YAML value to the type of the default it replaces.

    Raises:
        ValueError: On a non-boolean flag, a non-integral count or a
            non-numeric threshold.
    """
    if isinstance(current, bool):
        if not isinstance(raw, bool):
            raise ValueError(f"{setting}: expected true/false, got {raw!r}")
        return raw
    if isinstance(raw, bool):
        raise ValueError(f"{setting}: expected a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{setting}: expected a number, got {raw!r}") from exc
    if isinstance(current, int):
        if not value.is_integer():
            raise ValueError(f"{setting}: expected an integer, got {raw!r}")
        return int(value)
    return value


def _apply(block: Any, overrides: dict[str, Any], name: str) -> Any:
    known = {f.name: f for f in fields(block)}
    values: dict[str, Any] = {}
    for key, raw in (overrides or {}).items():
        if key not in known:
            log.debug("Unknown setting %s.%s — ignored", name, key)
            continue
        values[key] = _coerce(getattr(block, key), raw, f"{name}.{key}")
    return replace(block, **values)


def load_rule_settings(cfg: dict[str, Any] | None) -> RuleSettings:
    """Build :class:`RuleSettings` from parsed ``rules.yaml``.

    Missing blocks and keys fall back to defaults.

    Raises:
        ValueError: If a value does not fit the type of its setting.
    """
    rules = (cfg or {}).get("rules", {}) or {}
    for name in rules:
        if name not in {"low_pf", "voltage_instability", "idle_period"}:
            log.debug("Unknown rule block %s — ignored", name)
    return RuleSettings(
        low_pf=_apply(DEFAULT_SETTINGS.low_pf, rules.get("low_pf", {}), "low_pf"),
        voltage_instability=_apply(
            DEFAULT_SETTINGS.voltage_instability,
            rules.get("voltage_instability", {}),
            "voltage_instability",
        ),
        idle_period=_apply(DEFAULT_SETTINGS.idle_period, rules.get("idle_period", {}), "idle_period"),
    )

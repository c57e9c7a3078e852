"""Severity classifier shared by all detectors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from src.contracts.enums import Severity


@dataclass(frozen=True, slots=True)
class Tiers:
    """Tier boundaries for one rule.

    ``direction="below"``: smaller magnitudes are worse (power factor).
    ``direction="above"``: larger magnitudes are worse (voltage change,
    idle minutes).
    """

    high: float
    medium: float
    direction: Literal["below", "above"] = "above"


def classify(magnitude: float, tiers: Tiers) -> Severity:
    """Map *magnitude* to a severity tier, highest tier first.

    Comparisons are strict.  NaN fails every comparison and lands in
    ``low``.
    """
    if tiers.direction == "below":
        if magnitude < tiers.high:
            return Severity.HIGH
        if magnitude < tiers.medium:
            return Severity.MEDIUM
        return Severity.LOW

    if magnitude > tiers.high:
        return Severity.HIGH
    if magnitude > tiers.medium:
        return Severity.MEDIUM
    return Severity.LOW

"""Post-parse checks on telemetry records.

These only produce warnings for the operator log; records are passed to
the engine unchanged.
"""

from __future__ import annotations

import math

from src.contracts.telemetry import TelemetryRecord


def validate_record(record: TelemetryRecord) -> list[str]:
    """Return a list of validation warnings (empty = plausible).

    Currently checks:
      - no numeric field is NaN
      - voltage is positive
      - current is non-negative
      - power factor lies in (0, 1]
    """
    warnings: list[str] = []

    for name in ("power_factor", "voltage", "current", "power", "energy"):
        if math.isnan(getattr(record, name)):
            warnings.append(f"{name} is NaN")

    if record.voltage <= 0:
        warnings.append(f"non-positive voltage {record.voltage}")
    if record.current < 0:
        warnings.append(f"negative current {record.current}")
    if not 0 < record.power_factor <= 1:
        warnings.append(f"power factor {record.power_factor} outside (0, 1]")

    return warnings

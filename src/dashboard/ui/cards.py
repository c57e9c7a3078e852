"""Білдери HTML KPI карток та чипів подій."""

from __future__ import annotations

from html import escape

# ── canonical severity colours & rule labels ────────────────────────────────

SEVERITY_COLORS: dict[str, str] = {
    "high": "#ef4444",
    "medium": "#f97316",
    "low": "#eab308",
}

TYPE_LABELS: dict[str, str] = {
    "LOW_PF": "Low PF",
    "VOLTAGE_INSTABILITY": "Voltage",
    "IDLE_PERIOD": "Idle",
}


def kpi_card(label: str, value: str, accent: str = "") -> str:
    """Побудова однієї KPI картки."""
    accent_cls = f"card-accent-{accent}" if accent else ""
    return (
        f'<div class="kpi-card {accent_cls}">'
        f'  <div class="kpi-value">{escape(value)}</div>'
        f'  <div class="kpi-label">{escape(label)}</div>'
        f"</div>"
    )


def event_chip(event_type: str, severity: str, site: str, when: str) -> str:
    """Compact coloured chip for one event."""
    color = SEVERITY_COLORS.get(severity, "#888")
    label = TYPE_LABELS.get(event_type, event_type)
    return (
        f'<span class="event-chip" style="border-color:{color};color:{color}">'
        f"<strong>{escape(label)}</strong> @{escape(site)}"
        f' <span class="event-chip-time">{escape(when)}</span>'
        f"</span>"
    )

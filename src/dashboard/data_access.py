"""Шар підготовки та фільтрації даних для дашборду.

Pure pandas helpers — no Streamlit calls here, so everything is unit
testable without a running server.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pandas as pd

from src.contracts.rule_event import EVENT_CSV_COLUMNS, RuleEvent
from src.contracts.telemetry import TELEMETRY_COLUMNS, TelemetryRecord

log = logging.getLogger(__name__)

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# power-factor histogram bins: (label, lower, upper, colour); last bin closed
PF_BINS: list[tuple[str, float, float, str]] = [
    ("0.0-0.7", 0.0, 0.7, "#ef4444"),
    ("0.7-0.8", 0.7, 0.8, "#f97316"),
    ("0.8-0.85", 0.8, 0.85, "#eab308"),
    ("0.85-0.9", 0.85, 0.9, "#22c55e"),
    ("0.9-1.0", 0.9, 1.0, "#16a34a"),
]

FOCUS_WINDOW_MIN = 30


# ── frames ──────────────────────────────────────────────────────────────────


def records_frame(records: list[TelemetryRecord]) -> pd.DataFrame:
    """TelemetryRecords → DataFrame with a tz-aware ``timestamp`` column."""
    if not records:
        return pd.DataFrame(columns=TELEMETRY_COLUMNS)
    df = pd.DataFrame(
        {c: [getattr(r, c) for r in records] for c in TELEMETRY_COLUMNS}
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def events_frame(events: list[RuleEvent]) -> pd.DataFrame:
    """RuleEvents → DataFrame (enum fields as plain strings)."""
    if not events:
        return pd.DataFrame(columns=EVENT_CSV_COLUMNS)
    df = pd.DataFrame([e.to_dict() for e in events])[EVENT_CSV_COLUMNS]
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


# ── filtering ───────────────────────────────────────────────────────────────


def focus_window(ts: datetime, minutes: int = FOCUS_WINDOW_MIN) -> tuple[datetime, datetime]:
    """Time window of ±*minutes* around an event anchor."""
    delta = timedelta(minutes=minutes)
    return ts - delta, ts + delta


def _time_mask(df: pd.DataFrame, window: tuple[datetime, datetime] | None) -> pd.Series:
    mask = pd.Series(True, index=df.index)
    if window is not None and not df.empty:
        start, end = (pd.Timestamp(t) for t in window)
        mask &= (df["timestamp"] >= start) & (df["timestamp"] <= end)
    return mask


def filter_records(
    df: pd.DataFrame,
    *,
    sites: list[str] | None = None,
    window: tuple[datetime, datetime] | None = None,
) -> pd.DataFrame:
    """Застосовує фільтри sidebar до телеметрії."""
    mask = _time_mask(df, window)
    if sites is not None:
        mask &= df["site"].isin(sites)
    return df.loc[mask].copy()


def filter_events(
    df: pd.DataFrame,
    *,
    sites: list[str] | None = None,
    severities: list[str] | None = None,
    types: list[str] | None = None,
    window: tuple[datetime, datetime] | None = None,
) -> pd.DataFrame:
    """Застосовує фільтри sidebar до подій.

    ``None`` means "no filter"; an empty list filters everything out.
    """
    mask = _time_mask(df, window)
    if sites is not None:
        mask &= df["site"].isin(sites)
    if severities is not None:
        mask &= df["severity"].isin(severities)
    if types is not None:
        mask &= df["type"].isin(types)
    return df.loc[mask].copy()


# ── aggregations ────────────────────────────────────────────────────────────


def pf_histogram_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Count samples per power-factor bin; values outside [0, 1] are dropped."""
    pf = df["power_factor"] if "power_factor" in df.columns else pd.Series(dtype=float)
    rows = []
    for i, (label, lo, hi, color) in enumerate(PF_BINS):
        last = i == len(PF_BINS) - 1
        in_bin = (pf >= lo) & ((pf <= hi) if last else (pf < hi))
        rows.append({"range": label, "count": int(in_bin.sum()), "color": color})
    return pd.DataFrame(rows)


def daily_energy_by_site(df: pd.DataFrame) -> pd.DataFrame:
    """Sum of ``energy`` per (UTC day, site), wide format: one column per site."""
    if df.empty:
        return pd.DataFrame()
    tmp = df[["timestamp", "site", "energy"]].copy()
    tmp["day"] = tmp["timestamp"].dt.floor("D").dt.date
    agg = tmp.groupby(["day", "site"])["energy"].sum().unstack("site").fillna(0.0)
    return agg.sort_index()

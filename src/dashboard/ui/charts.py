"""Білдери Plotly графіків."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from src.dashboard.data_access import daily_energy_by_site, pf_histogram_counts
from src.dashboard.ui.cards import SEVERITY_COLORS, TYPE_LABELS

# ── chart config (hide toolbar by default) ──────────────────────────────────

CHART_CONFIG: dict = {"displayModeBar": False}

SITE_PALETTE: list[str] = ["#3b82f6", "#22c55e", "#f59e0b", "#a855f7", "#ec4899", "#14b8a6"]

# ── shared layout ───────────────────────────────────────────────────────────

_FONT = dict(family="-apple-system, Segoe UI, Roboto, sans-serif", size=13, color="#c9d1d9")

_LAYOUT: dict = dict(
    template="plotly_dark",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    margin=dict(l=48, r=16, t=44, b=36),
    font=_FONT,
    title=dict(font=dict(size=14, color="#e6edf3"), x=0, xanchor="left", y=0.98, yanchor="top"),
    legend=dict(
        orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1, font=dict(size=11)
    ),
    bargap=0.25,
    height=340,
)

_GRID_COLOR = "rgba(128,128,128,0.10)"


def _base(**overrides: object) -> dict:
    merged = {**_LAYOUT}
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = {**merged[k], **v}
        else:
            merged[k] = v
    return merged


def _site_color(i: int) -> str:
    return SITE_PALETTE[i % len(SITE_PALETTE)]


# ── time series ─────────────────────────────────────────────────────────────


def timeseries_chart(
    records: pd.DataFrame,
    events: pd.DataFrame | None = None,
    *,
    metric: str = "voltage",
    unit: str = "V",
) -> go.Figure | None:
    """One line per site for *metric*, events overlaid as markers.

    Returns *None* when there is nothing to draw.
    """
    if records is None or records.empty or metric not in records.columns:
        return None

    fig = go.Figure()
    for i, (site, grp) in enumerate(records.sort_values("timestamp").groupby("site", sort=True)):
        fig.add_trace(
            go.Scatter(
                x=grp["timestamp"],
                y=grp[metric],
                mode="lines",
                name=str(site),
                line=dict(color=_site_color(i), width=2),
                hovertemplate=f"%{{x|%Y-%m-%d %H:%M}}<br>%{{y:.2f}} {unit}<extra>{site}</extra>",
            )
        )

    if events is not None and not events.empty:
        # place markers on the site's sample at the event anchor when present
        lookup = records.set_index(["site", "timestamp"])[metric]
        lookup = lookup[~lookup.index.duplicated(keep="first")]
        for sev, grp in events.groupby("severity"):
            ys = [lookup.get((s, t)) for s, t in zip(grp["site"], grp["timestamp"])]
            fig.add_trace(
                go.Scatter(
                    x=grp["timestamp"],
                    y=ys,
                    mode="markers",
                    name=f"{sev} events",
                    marker=dict(color=SEVERITY_COLORS.get(str(sev), "#888"), size=9, symbol="x"),
                    text=[TYPE_LABELS.get(t, t) for t in grp["type"]],
                    hovertemplate="%{text}<br>%{x|%Y-%m-%d %H:%M}<extra></extra>",
                )
            )

    fig.update_layout(
        **_base(
            title=dict(text=f"{metric.replace('_', ' ').title()} by Site"),
            xaxis=dict(title="", gridcolor=_GRID_COLOR),
            yaxis=dict(title=unit, gridcolor=_GRID_COLOR, zeroline=False),
        )
    )
    return fig


# ── power-factor histogram ──────────────────────────────────────────────────


def pf_histogram(records: pd.DataFrame, threshold: float = 0.85) -> go.Figure | None:
    if records is None or records.empty:
        return None
    bins = pf_histogram_counts(records)
    fig = go.Figure(
        go.Bar(
            x=bins["range"],
            y=bins["count"],
            marker_color=list(bins["color"]),
            marker_line_width=0,
            showlegend=False,
            hovertemplate="PF %{x}: %{y}<extra></extra>",
        )
    )
    fig.update_layout(
        **_base(
            title=dict(text=f"Power Factor Distribution (threshold {threshold:g})"),
            xaxis=dict(title=""),
            yaxis=dict(title="", gridcolor=_GRID_COLOR, zeroline=False),
        )
    )
    return fig


# ── daily energy per site ───────────────────────────────────────────────────


def daily_energy_bar(records: pd.DataFrame) -> go.Figure | None:
    wide = daily_energy_by_site(records)
    if wide.empty:
        return None
    fig = go.Figure()
    for i, site in enumerate(wide.columns):
        fig.add_trace(
            go.Bar(
                x=[str(d) for d in wide.index],
                y=wide[site],
                name=str(site),
                marker_color=_site_color(i),
                marker_line_width=0,
                hovertemplate="%{x}: %{y:.1f}<extra>" + str(site) + "</extra>",
            )
        )
    fig.update_layout(
        **_base(
            title=dict(text="Daily Energy by Site"),
            barmode="group",
            xaxis=dict(title=""),
            yaxis=dict(title="", gridcolor=_GRID_COLOR, zeroline=False),
        )
    )
    return fig

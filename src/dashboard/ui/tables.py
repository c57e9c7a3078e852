"""Відображення таблиці подій."""

from __future__ import annotations

import pandas as pd
import streamlit as st
from streamlit import column_config as colcfg

from src.dashboard.data_access import SEVERITY_ORDER

# columns to display (in order)
_DISPLAY_COLS = [
    "timestamp",
    "type",
    "severity",
    "site",
    "value",
    "threshold",
    "description",
]

_COL_LABELS = {
    "timestamp": "Time",
    "type": "Rule",
    "severity": "Severity",
    "site": "Site",
    "value": "Value",
    "threshold": "Threshold",
    "description": "Description",
}

_COL_CONFIG = {
    "Time": colcfg.DatetimeColumn("Time", format="MMM DD, YYYY  HH:mm"),
    "Value": colcfg.NumberColumn("Value", format="%.3f"),
    "Threshold": colcfg.NumberColumn("Threshold", format="%.3f"),
}


def sort_for_display(df: pd.DataFrame) -> pd.DataFrame:
    """Severity (high first), then newest first."""
    view = df.copy()
    view["_sev_ord"] = view["severity"].map(SEVERITY_ORDER).fillna(99)
    view = view.sort_values(["_sev_ord", "timestamp"], ascending=[True, False], kind="stable")
    return view.drop(columns=["_sev_ord"])


def render_event_table(df: pd.DataFrame) -> None:
    """Render an interactive event table (sortable, searchable)."""
    if df.empty:
        st.info("No events detected.")
        return

    cols = [c for c in _DISPLAY_COLS if c in df.columns]
    view = sort_for_display(df[cols]).rename(columns=_COL_LABELS)

    st.caption(f"Total events: {len(view)}")
    st.dataframe(
        view,
        hide_index=True,
        use_container_width=True,
        height=min(len(view) * 36 + 42, 600),
        column_config=_COL_CONFIG,
        key="tbl_events",
    )

"""Головний файл дашборду Solar Triage на Streamlit.

Run with::

    streamlit run src/dashboard/app.py
"""

from __future__ import annotations

import logging
from pathlib import Path

import streamlit as st

# ── page config (MUST be the first Streamlit call) ───────────────────────────

st.set_page_config(
    page_title="Solar Operations Triage",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── inject theme CSS ────────────────────────────────────────────────────────

_CSS_PATH = Path(__file__).resolve().parent / "styles" / "theme.css"
if _CSS_PATH.exists():
    st.markdown(f"<style>{_CSS_PATH.read_text()}</style>", unsafe_allow_html=True)

# ── local imports (after page config) ───────────────────────────────────────

from src.dashboard.data_access import (  # noqa: E402
    events_frame,
    filter_events,
    filter_records,
    focus_window,
    records_frame,
)
from src.dashboard.ui.cards import event_chip, kpi_card  # noqa: E402
from src.dashboard.ui.charts import (  # noqa: E402
    CHART_CONFIG,
    daily_energy_bar,
    pf_histogram,
    timeseries_chart,
)
from src.dashboard.ui.layout import render_header, render_sidebar  # noqa: E402
from src.dashboard.ui.state import add_dataset, init_state  # noqa: E402
from src.dashboard.ui.tables import render_event_table  # noqa: E402
from src.engine.detector import run_rule_engine  # noqa: E402
from src.engine.metrics import compute_stats  # noqa: E402
from src.engine.rules import load_rule_settings  # noqa: E402
from src.ingestion.parser import parse_bytes  # noqa: E402
from src.ingestion.pipeline import join_datasets  # noqa: E402
from src.shared.config_loader import load_optional_yaml  # noqa: E402
from src.shared.logger import setup_logging  # noqa: E402
from src.triage.summarizer import TriageClient, load_triage_settings  # noqa: E402

log = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

setup_logging("INFO")
init_state()

# ── engine run (recomputed only when the set of files changes) ──────────────

_datasets = st.session_state["datasets"]
_data_key = tuple(ds.filename for ds in _datasets)

if st.session_state.get("_events_key") != _data_key:
    _records = join_datasets(_datasets)
    _settings = load_rule_settings(load_optional_yaml(_CONFIG_DIR / "rules.yaml"))
    st.session_state["_records"] = _records
    st.session_state["_events"] = run_rule_engine(_records, _settings)
    st.session_state["_events_key"] = _data_key
    st.session_state.pop("_triage", None)

records = st.session_state["_records"]
events = st.session_state["_events"]
df_records = records_frame(records)
df_events = events_frame(events)

# ── sidebar ─────────────────────────────────────────────────────────────────

sidebar = render_sidebar(
    site_options=sorted(df_records["site"].unique()) if not df_records.empty else [],
    severity_options=list(df_events["severity"].unique()) if not df_events.empty else [],
)

_added = 0
for upload in sidebar.uploads:
    try:
        dataset = parse_bytes(upload.getvalue(), upload.name)
    except ValueError as exc:
        st.sidebar.error(f"{upload.name}: {exc}")
        continue
    if add_dataset(dataset):
        _added += 1
        if dataset.rejected:
            st.sidebar.warning(f"{upload.name}: {len(dataset.rejected)} row(s) rejected")
if _added:
    st.rerun()

# ── header ──────────────────────────────────────────────────────────────────

render_header()

if not records:
    st.markdown(
        '<div class="no-data-box">'
        "<strong>No telemetry loaded.</strong><br>"
        "Upload one or more <code>.xlsx</code> / <code>.csv</code> exports in the sidebar."
        "</div>",
        unsafe_allow_html=True,
    )
    st.stop()

# ── focus window ────────────────────────────────────────────────────────────

visible_events = filter_events(df_events, sites=sidebar.sites, severities=sidebar.severities)

_labels = {"": "All time"}
for row in visible_events.itertuples():
    _labels[row.id] = f"{row.type} @ {row.site} — {row.timestamp:%Y-%m-%d %H:%M}"
focused = st.selectbox(
    "Focus on event (±30 min)",
    options=list(_labels),
    format_func=_labels.get,
    index=0,
)
window = None
if focused:
    _ts = visible_events.loc[visible_events["id"] == focused, "timestamp"]
    if not _ts.empty:
        window = focus_window(_ts.iloc[0].to_pydatetime())

view_records = filter_records(df_records, sites=sidebar.sites, window=window)
view_events = filter_events(visible_events, window=window)

# ── KPI cards ───────────────────────────────────────────────────────────────

stats = compute_stats(events)
c1, c2, c3, c4 = st.columns(4)
with c1:
    st.markdown(kpi_card("Records", f"{len(records):,}"), unsafe_allow_html=True)
with c2:
    st.markdown(kpi_card("Sites", str(df_records["site"].nunique())), unsafe_allow_html=True)
with c3:
    st.markdown(kpi_card("Events", str(stats.total)), unsafe_allow_html=True)
with c4:
    st.markdown(
        kpi_card("High severity", str(stats.high_count), accent="high"),
        unsafe_allow_html=True,
    )

# ── charts ──────────────────────────────────────────────────────────────────

st.markdown('<div class="section-gap"></div>', unsafe_allow_html=True)

_metric = st.radio(
    "Series", options=["voltage", "power", "current"], horizontal=True, label_visibility="collapsed"
)
_units = {"voltage": "V", "power": "W", "current": "A"}
fig = timeseries_chart(view_records, view_events, metric=_metric, unit=_units[_metric])
if fig is not None:
    st.plotly_chart(fig, width="stretch", config=CHART_CONFIG, key="chart_ts")

left, right = st.columns(2)
with left:
    fig = pf_histogram(view_records)
    if fig is not None:
        st.plotly_chart(fig, width="stretch", config=CHART_CONFIG, key="chart_pf")
with right:
    fig = daily_energy_bar(view_records)
    if fig is not None:
        st.plotly_chart(fig, width="stretch", config=CHART_CONFIG, key="chart_energy")

# ── events ──────────────────────────────────────────────────────────────────

st.markdown('<div class="section-gap"></div>', unsafe_allow_html=True)
st.markdown('<p class="section-label">Detected Events</p>', unsafe_allow_html=True)

if not view_events.empty:
    chips = "".join(
        event_chip(r.type, r.severity, r.site, f"{r.timestamp:%m-%d %H:%M}")
        for r in view_events.head(40).itertuples()
    )
    st.markdown(chips, unsafe_allow_html=True)
render_event_table(view_events)

# ── triage ──────────────────────────────────────────────────────────────────

st.markdown('<div class="section-gap"></div>', unsafe_allow_html=True)
st.markdown('<p class="section-label">Triage</p>', unsafe_allow_html=True)

_triage_key = (_data_key, sidebar.model_enabled)
_cached = st.session_state.get("_triage")
if _cached is None or _cached[0] != _triage_key:
    with st.spinner("Summarising events..."):
        settings = load_triage_settings(load_optional_yaml(_CONFIG_DIR / "triage.yaml"))
        with TriageClient(settings) as client:
            result = client.summarize(events, model_enabled=sidebar.model_enabled)
    st.session_state["_triage"] = (_triage_key, result)
else:
    result = _cached[1]

for bullet in result.bullets:
    st.markdown(f"- {bullet}")
st.caption(f"Source: {result.source}")

"""Page layout — sidebar controls and main-area scaffolding.

``render_sidebar`` populates the left panel and returns an object
with the current selections.  ``render_header`` draws the top
title bar.
"""

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from src.dashboard.data_access import SEVERITY_ORDER
from src.dashboard.ui.state import clear_all


@dataclass
class SidebarState:
    """Values collected from sidebar controls."""
    uploads: list
    model_enabled: bool
    sites: list[str]
    severities: list[str]


# ── header ──────────────────────────────────────────────────────────────────


def render_header() -> None:
    st.markdown(
        '<h1 class="page-title">Solar Operations Triage</h1>'
        '<p class="page-subtitle">'
        "Upload site telemetry, review detected events and get triage guidance."
        "</p>",
        unsafe_allow_html=True,
    )


# ── sidebar ─────────────────────────────────────────────────────────────────


def render_sidebar(site_options: list[str], severity_options: list[str]) -> SidebarState:
    """Draw sidebar controls and return current selections."""

    with st.sidebar:
        st.markdown('<p class="sidebar-brand">Solar Triage</p>', unsafe_allow_html=True)
        st.caption("Telemetry event engine")
        st.divider()

        # -- data --
        st.markdown("##### Data")
        uploads = st.file_uploader(
            "Telemetry files",
            type=["xlsx", "csv"],
            accept_multiple_files=True,
            key=f"uploader_{st.session_state.get('uploader_key', 0)}",
            label_visibility="collapsed",
        )
        if st.button("Clear all data", type="secondary", use_container_width=True):
            clear_all()
            st.rerun()

        st.divider()

        # -- filters --
        st.markdown("##### Filter Events")
        sites = st.multiselect("Site", options=site_options, default=site_options)
        sev_sorted = sorted(severity_options, key=lambda s: SEVERITY_ORDER.get(s, 9))
        severities = st.multiselect("Severity", options=sev_sorted, default=sev_sorted)

        st.divider()

        # -- triage model --
        st.markdown("##### Triage")
        model_enabled = st.toggle(
            "Use AI model",
            key="model_enabled",
            help="Off = deterministic template summary, no network calls.",
        )

    return SidebarState(
        uploads=list(uploads or []),
        model_enabled=model_enabled,
        sites=sites,
        severities=severities,
    )

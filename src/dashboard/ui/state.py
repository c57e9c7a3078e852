"""Ініціалізація та зміна стану сесії."""

from __future__ import annotations

import os

import streamlit as st

from src.ingestion.parser import ParsedDataset

# Model toggle default can be switched off for air-gapped deployments.
_MODEL_DEFAULT = os.environ.get("SOLAR_TRIAGE_MODEL", "1") != "0"

_DEFAULTS: dict[str, object] = {
    "datasets": [],
    "model_enabled": _MODEL_DEFAULT,
    "uploader_key": 0,
}


def init_state() -> None:
    """Заповнює st.session_state значеннями за замовчуванням."""
    for key, value in _DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = list(value) if isinstance(value, list) else value


def add_dataset(dataset: ParsedDataset) -> bool:
    """Store a parsed upload; returns False if that filename is already loaded."""
    datasets: list[ParsedDataset] = st.session_state["datasets"]
    if any(ds.filename == dataset.filename for ds in datasets):
        return False
    datasets.append(dataset)
    return True


def clear_all() -> None:
    """Drop uploaded data and reset the uploader widget."""
    st.session_state["datasets"] = []
    st.session_state["uploader_key"] = int(st.session_state.get("uploader_key", 0)) + 1

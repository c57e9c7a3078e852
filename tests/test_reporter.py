"""Tests for src.engine.reporter — CSV / JSONL / TXT / PNG outputs."""

from __future__ import annotations

import csv
import json

import pytest

from src.contracts.rule_event import EVENT_CSV_COLUMNS, RuleEvent
from src.engine.metrics import compute_stats
from src.engine.reporter import (
    write_events_csv,
    write_events_jsonl,
    write_plots,
    write_report_txt,
    write_triage_txt,
)
from src.triage.summarizer import TriageResult, template_summary


class TestEventWriters:
    def test_csv(self, tmp_path, mixed_events):
        path = tmp_path / "out" / "events.csv"
        write_events_csv(mixed_events, str(path))
        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert list(rows[0].keys()) == EVENT_CSV_COLUMNS
        assert [r["id"] for r in rows] == ["R3-0001", "R2-0001", "R1-0001"]
        assert rows[2]["severity"] == "high"

    def test_csv_empty_has_header(self, tmp_path):
        path = tmp_path / "events.csv"
        write_events_csv([], str(path))
        assert path.read_text(encoding="utf-8") == RuleEvent.csv_header() + "\n"

    def test_jsonl_roundtrip(self, tmp_path, mixed_events):
        path = tmp_path / "events.jsonl"
        write_events_jsonl(mixed_events, str(path))
        lines = path.read_text(encoding="utf-8").splitlines()
        assert [RuleEvent.from_dict(json.loads(line)) for line in lines] == mixed_events

    def test_no_temp_files_left(self, tmp_path, mixed_events):
        write_events_csv(mixed_events, str(tmp_path / "events.csv"))
        assert [p.name for p in tmp_path.iterdir()] == ["events.csv"]


class TestTextOutputs:
    def test_triage_txt(self, tmp_path):
        path = tmp_path / "triage.txt"
        write_triage_txt(TriageResult(bullets=["a", "b", "c"], source="model"), str(path))
        assert path.read_text(encoding="utf-8") == "- a\n- b\n- c\n\n(source: model)\n"

    def test_report_txt(self, tmp_path, mixed_events):
        path = tmp_path / "report.txt"
        stats = compute_stats(mixed_events)
        write_report_txt(stats, 42, template_summary(mixed_events), str(path))
        text = path.read_text(encoding="utf-8")
        assert "Records analysed: 42" in text
        assert "Events total:     3" in text
        assert "#1 LOW_PF" in text
        assert "Mean low PF:          0.600" in text
        assert "Max voltage change:   20.0 V" in text
        assert "Total idle time:      45 min" in text
        assert "--- Triage (template) ---" in text
        assert "  1. 1 high-severity events" in text

    def test_report_txt_no_events(self, tmp_path):
        path = tmp_path / "report.txt"
        write_report_txt(compute_stats([]), 0, template_summary([]), str(path))
        text = path.read_text(encoding="utf-8")
        assert "Time range" not in text
        assert "Mean low PF" not in text


class TestPlots:
    def test_png_written(self, tmp_path, mixed_events):
        pytest.importorskip("matplotlib")
        write_plots(compute_stats(mixed_events), str(tmp_path))
        assert (tmp_path / "plots" / "events_by_rule.png").stat().st_size > 0
        assert (tmp_path / "plots" / "events_by_severity.png").exists()

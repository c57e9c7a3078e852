"""Tests for src.triage.summarizer — template and model triage paths."""

from __future__ import annotations

import json

import httpx
import pytest

from src.contracts.enums import RuleType, Severity
from src.triage.summarizer import (
    TriageClient,
    TriageSettings,
    build_prompt,
    extract_bullets,
    load_triage_settings,
    template_summary,
)
from tests.conftest import make_event


def _client(handler, api_key: str = "test-key") -> TriageClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return TriageClient(TriageSettings(), http_client=http, api_key=api_key)


def _reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


# ═══════════════════════════════════════════════════════════════════════════
#  Template path
# ═══════════════════════════════════════════════════════════════════════════


class TestTemplateSummary:
    def test_no_events_padding(self):
        result = template_summary([])
        assert result.source == "template"
        assert result.reasoning is None
        assert result.bullets == [
            "No critical issues detected - system operating within normal parameters",
            "Continue monitoring system performance and event patterns",
            "Schedule routine maintenance check for optimal system performance",
        ]

    def test_mixed_events(self, mixed_events):
        bullets = template_summary(mixed_events).bullets
        assert bullets == [
            "1 high-severity events require immediate attention across 2 site(s)",
            "Rule #1: PF < 0.85 detected 1x (avg: 0.600) - check capacitor banks",
            "Rule #2: Voltage variance up to 20.0V detected - check grid stability",
        ]

    def test_idle_only(self):
        ev = make_event(type=RuleType.IDLE_PERIOD, severity=Severity.LOW, value=20.0, threshold=15.0)
        bullets = template_summary([ev]).bullets
        assert bullets[0] == "Rule #3: 20 min total idle time - verify inverter operation"
        assert len(bullets) == 3
        assert bullets[1] == "Continue monitoring system performance and event patterns"

    def test_always_exactly_max_bullets(self, mixed_events):
        assert len(template_summary(mixed_events, max_bullets=2).bullets) == 2
        assert len(template_summary([], max_bullets=5).bullets) == 5


class TestExtractBullets:
    def test_mixed_markers(self):
        text = "Here you go:\n• Check inverters\n - Inspect capacitor bank\nfooter\n-   \n• Call grid operator\n• extra"
        assert extract_bullets(text) == [
            "Check inverters",
            "Inspect capacitor bank",
            "Call grid operator",
        ]

    def test_no_bullets(self):
        assert extract_bullets("plain prose only") == []


class TestBuildPrompt:
    def test_contents(self, mixed_events):
        prompt = build_prompt(mixed_events)
        assert "Total events: 3" in prompt
        assert "Sites affected: 2 (Site_B, Site_A)" in prompt
        assert "- LOW_PF_high: 1" in prompt
        assert "exactly 3 actionable bullet points" in prompt

    def test_empty(self):
        assert "Time range: N/A" in build_prompt([])


# ═══════════════════════════════════════════════════════════════════════════
#  Model path
# ═══════════════════════════════════════════════════════════════════════════


class TestTriageClient:
    def test_model_reply_used(self, mixed_events):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
            return _reply("• Replace capacitor bank at Site_A\n• Monitor Site_B inverter\n• Log voltage")

        with _client(handler) as client:
            result = client.summarize(mixed_events)

        assert result.source == "model"
        assert result.bullets[0] == "Replace capacitor bank at Site_A"
        assert len(result.bullets) == 3
        assert seen["url"].endswith("/models/gemini-1.5-flash-latest:generateContent")
        assert seen["key"] == "test-key"
        assert "Total events: 3" in seen["body"]["contents"][0]["parts"][0]["text"]

    def test_model_disabled_skips_network(self, mixed_events):
        def handler(request):
            raise AssertionError("network must not be called")

        result = _client(handler).summarize(mixed_events, model_enabled=False)
        assert result.source == "template"

    def test_missing_key_falls_back(self, mixed_events):
        def handler(request):
            raise AssertionError("network must not be called")

        result = _client(handler, api_key="").summarize(mixed_events)
        assert result == template_summary(mixed_events)

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="boom"),
            httpx.Response(200, json={"candidates": []}),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "no bullets"}]}}]}),
        ],
    )
    def test_failures_fall_back(self, mixed_events, response):
        result = _client(lambda request: response).summarize(mixed_events)
        assert result.source == "template"
        assert result.bullets == template_summary(mixed_events).bullets

    def test_transport_error_falls_back(self, mixed_events):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert _client(handler).summarize(mixed_events).source == "template"


class TestLoadTriageSettings:
    def test_defaults(self):
        assert load_triage_settings(None) == TriageSettings()

    def test_override(self):
        s = load_triage_settings({"triage": {"model": "m", "endpoint": "http://x/", "max_bullets": 2}})
        assert s.model == "m"
        assert s.endpoint == "http://x"
        assert s.max_bullets == 2

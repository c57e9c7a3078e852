"""Triage summarizer.

Two paths produce the same :class:`TriageResult` shape:

  template  — deterministic text built from event type, severity, site,
              value and threshold only; always available, no network.
  model     — prompt sent to a text-generation service (Gemini
              ``generateContent`` REST API) over httpx; bullet lines are
              extracted from the reply.

Any failure on the model path falls back to the template, so callers
always get three bullets.
"""

from __future__ import annotations

import logging
import os
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any

import httpx

from src.contracts.enums import RuleType
from src.contracts.rule_event import RuleEvent
from src.engine.metrics import compute_stats

log = logging.getLogger(__name__)

_BULLET_RE = re.compile(r"^[•\-]\s*")

_PADDING = (
    "No critical issues detected - system operating within normal parameters",
    "Continue monitoring system performance and event patterns",
    "Schedule routine maintenance check for optimal system performance",
)


@dataclass(slots=True)
class TriageResult:
    bullets: list[str]
    reasoning: str | None = None
    source: str = "template"  # template | model


@dataclass(frozen=True, slots=True)
class TriageSettings:
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-1.5-flash-latest"
    timeout_sec: float = 15.0
    api_key_env: str = "GEMINI_API_KEY"
    max_bullets: int = 3


def load_triage_settings(cfg: dict[str, Any] | None) -> TriageSettings:
    """Build settings from parsed ``triage.yaml`` (``triage:`` block)."""
    block = (cfg or {}).get("triage", {}) or {}
    defaults = TriageSettings()
    return TriageSettings(
        endpoint=str(block.get("endpoint", defaults.endpoint)).rstrip("/"),
        model=str(block.get("model", defaults.model)),
        timeout_sec=float(block.get("timeout_sec", defaults.timeout_sec)),
        api_key_env=str(block.get("api_key_env", defaults.api_key_env)),
        max_bullets=int(block.get("max_bullets", defaults.max_bullets)),
    )


# ═══════════════════════════════════════════════════════════════════════════
#  Template path
# ═══════════════════════════════════════════════════════════════════════════


def template_summary(events: list[RuleEvent], max_bullets: int = 3) -> TriageResult:
    """Deterministic three-bullet summary of *events*."""
    stats = compute_stats(events)
    bullets: list[str] = []

    if stats.high_count:
        bullets.append(
            f"{stats.high_count} high-severity events require immediate attention "
            f"across {stats.sites} site(s)"
        )

    low_pf = [e for e in events if e.type == RuleType.LOW_PF]
    if low_pf:
        bullets.append(
            f"Rule #1: PF < {low_pf[0].threshold:g} detected {len(low_pf)}x "
            f"(avg: {stats.mean_low_pf:.3f}) - check capacitor banks"
        )
    if stats.max_voltage_change_v is not None:
        bullets.append(
            f"Rule #2: Voltage variance up to {stats.max_voltage_change_v:.1f}V detected "
            "- check grid stability"
        )
    if stats.by_type.get(RuleType.IDLE_PERIOD.value):
        bullets.append(
            f"Rule #3: {stats.total_idle_min:.0f} min total idle time - verify inverter operation"
        )

    while len(bullets) < max_bullets:
        bullets.append(_PADDING[min(len(bullets), len(_PADDING) - 1)])

    return TriageResult(bullets=bullets[:max_bullets])


# ═══════════════════════════════════════════════════════════════════════════
#  Model path
# ═══════════════════════════════════════════════════════════════════════════


def build_prompt(events: list[RuleEvent]) -> str:
    """Prompt for the text-generation service; *events* newest first."""
    breakdown = Counter(f"{e.type.value}_{e.severity.value}" for e in events)
    sites = list(dict.fromkeys(e.site for e in events))
    if events:
        first = min(e.timestamp for e in events).isoformat()
        last = max(e.timestamp for e in events).isoformat()
        time_range = f"{first} to {last}"
    else:
        time_range = "N/A"

    breakdown_lines = "\n".join(f"- {k}: {v}" for k, v in breakdown.items())
    recent_lines = "\n".join(
        f"- {e.type.value} at {e.site}: {e.description} ({e.severity.value} severity)"
        for e in events[:5]
    )

    return (
        "You are a solar operations expert analyzing system events. "
        "Provide exactly 3 actionable bullet points for the operations team.\n\n"
        "Event Summary:\n"
        f"- Total events: {len(events)}\n"
        f"- Sites affected: {len(sites)} ({', '.join(sites)})\n"
        f"- Time range: {time_range}\n\n"
        "Event Breakdown:\n"
        f"{breakdown_lines}\n\n"
        "Recent Events (last 5):\n"
        f"{recent_lines}\n\n"
        "Provide 3 specific, actionable recommendations starting with bullet points (•). "
        "Focus on:\n"
        "1. Immediate actions for high-severity issues\n"
        "2. Preventive measures for recurring patterns\n"
        "3. Monitoring or investigation steps\n\n"
        "Keep each bullet under 100 characters and prioritize operational impact."
    )


def extract_bullets(text: str, max_bullets: int = 3) -> list[str]:
    """Pick ``•``/``-`` prefixed lines out of free text."""
    bullets: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith(("•", "-")):
            continue
        cleaned = _BULLET_RE.sub("", stripped).strip()
        if cleaned:
            bullets.append(cleaned)
    return bullets[:max_bullets]


class TriageClient:
    """Summarize events via the text-generation service, with fallback."""

    def __init__(
        self,
        settings: TriageSettings | None = None,
        http_client: httpx.Client | None = None,
        api_key: str | None = None,
    ) -> None:
        self.settings = settings or TriageSettings()
        self._api_key = api_key if api_key is not None else os.environ.get(self.settings.api_key_env, "")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.settings.timeout_sec)

    def __enter__(self) -> TriageClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ── public API ───────────────────────────────────────────────────────

    def summarize(self, events: list[RuleEvent], model_enabled: bool = True) -> TriageResult:
        if not model_enabled:
            return template_summary(events, self.settings.max_bullets)
        if not self._api_key:
            log.warning("%s not set — using template summary", self.settings.api_key_env)
            return template_summary(events, self.settings.max_bullets)

        try:
            text = self._generate(build_prompt(events))
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
            log.warning("Triage model call failed (%s) — using template summary", exc)
            return template_summary(events, self.settings.max_bullets)

        bullets = extract_bullets(text, self.settings.max_bullets)
        if not bullets:
            log.warning("Triage model reply had no bullet lines — using template summary")
            return template_summary(events, self.settings.max_bullets)
        return TriageResult(bullets=bullets, reasoning=text, source="model")

    # ── internals ────────────────────────────────────────────────────────

    def _generate(self, prompt: str) -> str:
        url = f"{self.settings.endpoint}/models/{self.settings.model}:generateContent"
        response = self._client.post(
            url,
            headers={"x-goog-api-key": self._api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        response.raise_for_status()
        body = response.json()
        parts = body["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)

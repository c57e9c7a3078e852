"""Звітування: запис CSV, JSONL, TXT, PNG."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from src.contracts.enums import RuleType, Severity
from src.contracts.rule_event import RuleEvent
from src.engine.metrics import EventStats
from src.triage.summarizer import TriageResult

log = logging.getLogger(__name__)

_SEVERITY_COLORS = {"high": "#e74c3c", "medium": "#f39c12", "low": "#27ae60"}


def _atomic_write(path: str, content: str) -> None:
    """Атомарно записує content у файл path."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(target.parent),
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        # Clean up temp file on any failure
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


# ═══════════════════════════════════════════════════════════════════════════
#  Event writers
# ═══════════════════════════════════════════════════════════════════════════


def write_events_csv(events: list[RuleEvent], path: str) -> None:
    lines = [RuleEvent.csv_header()]
    for e in events:
        lines.append(e.to_csv_row())
    _atomic_write(path, "\n".join(lines) + "\n")
    log.info("Wrote events → %s (%d rows)", path, len(events))


def write_events_jsonl(events: list[RuleEvent], path: str) -> None:
    content = "".join(e.to_json() + "\n" for e in events)
    _atomic_write(path, content)
    log.info("Wrote events → %s (%d lines)", path, len(events))


# ═══════════════════════════════════════════════════════════════════════════
#  TXT outputs
# ═══════════════════════════════════════════════════════════════════════════


def write_triage_txt(triage: TriageResult, path: str) -> None:
    lines = [f"- {b}" for b in triage.bullets]
    lines.append("")
    lines.append(f"(source: {triage.source})")
    _atomic_write(path, "\n".join(lines) + "\n")
    log.info("Wrote triage → %s", path)


def write_report_txt(
    stats: EventStats,
    record_count: int,
    triage: TriageResult,
    path: str,
) -> None:
    """Генерує текстовий звіт."""
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("  Solar Operations Event Report")
    lines.append("=" * 60)
    lines.append("")
    lines.append(f"  Records analysed: {record_count}")
    lines.append(f"  Events total:     {stats.total}")
    lines.append(f"  Sites affected:   {stats.sites}")
    if stats.first_ts and stats.last_ts:
        lines.append(f"  Time range:       {stats.first_ts.isoformat()} .. {stats.last_ts.isoformat()}")
    lines.append("")

    lines.append("--- By rule ---")
    for rule in RuleType:
        lines.append(f"  #{rule.number} {rule.value:<20} {stats.by_type.get(rule.value, 0)}")
    lines.append("")

    lines.append("--- By severity ---")
    for sev in sorted(Severity, key=lambda s: s.rank, reverse=True):
        lines.append(f"  {sev.value:<8} {stats.by_severity.get(sev.value, 0)}")
    lines.append("")

    lines.append("--- By site ---")
    for site, count in sorted(stats.by_site.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"  {site:<20} {count}")
    lines.append("")

    lines.append("--- Magnitudes ---")
    if stats.mean_low_pf is not None:
        lines.append(f"  Mean low PF:          {stats.mean_low_pf:.3f}")
    if stats.max_voltage_change_v is not None:
        lines.append(f"  Max voltage change:   {stats.max_voltage_change_v:.1f} V")
    lines.append(f"  Total idle time:      {stats.total_idle_min:.0f} min")
    lines.append("")

    lines.append(f"--- Triage ({triage.source}) ---")
    for i, bullet in enumerate(triage.bullets, 1):
        lines.append(f"  {i}. {bullet}")
    lines.append("")
    lines.append("=" * 60)

    _atomic_write(path, "\n".join(lines) + "\n")
    log.info("Wrote report → %s", path)


# ═══════════════════════════════════════════════════════════════════════════
#  Plots (matplotlib)
# ═══════════════════════════════════════════════════════════════════════════


def write_plots(stats: EventStats, out_dir: str) -> None:
    """Generate PNG charts into out_dir/plots/."""
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        log.warning("matplotlib not installed — skipping plots")
        return

    plots_dir = Path(out_dir) / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)

    # ── 1. Events by rule ───────────────────────────────────────────
    fig, ax = plt.subplots(figsize=(8, 5))
    labels = [r.value for r in RuleType]
    counts = [stats.by_type.get(r.value, 0) for r in RuleType]
    bars = ax.bar(labels, counts, color="#3498db", edgecolor="black", linewidth=0.5)
    for bar, v in zip(bars, counts):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height() + 0.05,
            str(v),
            ha="center",
            va="bottom",
            fontweight="bold",
        )
    ax.set_ylabel("Events")
    ax.set_title("Events by Rule")
    fig.tight_layout()
    fig.savefig(str(plots_dir / "events_by_rule.png"), dpi=150)
    plt.close(fig)
    log.info("Wrote plots/events_by_rule.png")

    # ── 2. Events by severity ───────────────────────────────────────
    fig, ax = plt.subplots(figsize=(8, 5))
    sevs = [s.value for s in sorted(Severity, key=lambda s: s.rank, reverse=True)]
    counts = [stats.by_severity.get(s, 0) for s in sevs]
    ax.bar(
        sevs,
        counts,
        color=[_SEVERITY_COLORS[s] for s in sevs],
        edgecolor="black",
        linewidth=0.5,
    )
    ax.set_ylabel("Events")
    ax.set_title("Events by Severity")
    fig.tight_layout()
    fig.savefig(str(plots_dir / "events_by_severity.png"), dpi=150)
    plt.close(fig)
    log.info("Wrote plots/events_by_severity.png")

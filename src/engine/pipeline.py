"""Pipeline — orchestrator: load telemetry -> join -> detect -> triage -> report."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from src.engine.detector import run_rule_engine
from src.engine.metrics import compute_stats
from src.engine.reporter import (
    write_events_csv,
    write_events_jsonl,
    write_plots,
    write_report_txt,
    write_triage_txt,
)
from src.engine.rules import load_rule_settings
from src.ingestion.pipeline import join_datasets, load_datasets
from src.shared.config_loader import load_optional_yaml
from src.shared.ids import IdFactory
from src.triage.summarizer import TriageClient, load_triage_settings

log = logging.getLogger(__name__)


def run_pipeline(
    input_paths: Iterable[str],
    out_dir: str = "out",
    config_dir: str = "config",
    model_enabled: bool = True,
    id_factory: IdFactory | None = None,
    triage_client: TriageClient | None = None,
    plots: bool = True,
) -> dict[str, Any]:
    """Execute the full analysis and write outputs.

    Returns
    -------
    dict with keys: records, events, stats, triage.
    """
    datasets = load_datasets(input_paths)
    records = join_datasets(datasets)
    if not records:
        log.warning("No telemetry loaded — nothing to analyse.")
        return {"records": [], "events": [], "stats": compute_stats([]), "triage": None}

    settings = load_rule_settings(load_optional_yaml(f"{config_dir}/rules.yaml"))
    events = run_rule_engine(records, settings, id_factory=id_factory)
    stats = compute_stats(events)
    log.info(
        "Events: %d total, %d high, %d site(s)",
        stats.total, stats.high_count, stats.sites,
    )

    if triage_client is None:
        triage_settings = load_triage_settings(load_optional_yaml(f"{config_dir}/triage.yaml"))
        with TriageClient(triage_settings) as client:
            triage = client.summarize(events, model_enabled=model_enabled)
    else:
        triage = triage_client.summarize(events, model_enabled=model_enabled)

    # ── write outputs ────────────────────────────────────────────────────
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    write_events_csv(events, str(out / "events.csv"))
    write_events_jsonl(events, str(out / "events.jsonl"))
    write_triage_txt(triage, str(out / "triage.txt"))
    write_report_txt(stats, len(records), triage, str(out / "report.txt"))
    if plots:
        write_plots(stats, str(out))

    log.info("Pipeline complete. Outputs in %s/", out_dir)
    return {"records": records, "events": events, "stats": stats, "triage": triage}

"""Solar event engine — rule-based anomaly detection over joined telemetry.

Modules
───────
  severity   — tier classifier shared by all rules
  rules      — thresholds per rule, loaded from rules.yaml
  detector   — LOW_PF, VOLTAGE_INSTABILITY, IDLE_PERIOD + assembler
  metrics    — aggregate statistics over emitted events
  reporter   — write CSV, JSONL, TXT, PNG outputs
  pipeline   — orchestrate ingestion -> engine -> triage -> reports
  cli        — argparse entry-point
"""

from src.engine.detector import run_rule_engine
from src.engine.rules import RuleSettings, load_rule_settings

__all__ = ["RuleSettings", "load_rule_settings", "run_rule_engine"]

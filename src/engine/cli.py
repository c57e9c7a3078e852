"""CLI entry-point for the solar event engine.

Usage examples
--------------
# One or more spreadsheets / CSV exports (globs allowed):
python -m src.engine.cli --inputs "data/*.xlsx" --out-dir out

# Template triage only, reproducible event ids:
python -m src.engine.cli --inputs data/site_a.csv --no-model --seed 42
"""

from __future__ import annotations

import argparse

from src.engine.pipeline import run_pipeline
from src.shared.ids import seeded_ids
from src.shared.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solar-triage",
        description="Solar telemetry event engine — detect, triage, report",
    )
    p.add_argument(
        "--inputs",
        nargs="+",
        default=["data/*.xlsx"],
        help="Input files or globs (.xlsx / .csv). Default: data/*.xlsx",
    )
    p.add_argument(
        "--out-dir",
        default="out",
        help="Output directory. Default: out/",
    )
    p.add_argument(
        "--config-dir",
        default="config",
        help="Directory with rules.yaml and triage.yaml. Default: config/",
    )
    p.add_argument(
        "--model",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Ask the text-generation service for triage bullets (falls back "
             "to the template when unavailable). Default: enabled",
    )
    p.add_argument(
        "--plots",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write PNG charts into <out-dir>/plots. Default: enabled",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for deterministic event ids.",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    run_pipeline(
        input_paths=args.inputs,
        out_dir=args.out_dir,
        config_dir=args.config_dir,
        model_enabled=args.model,
        id_factory=seeded_ids(args.seed) if args.seed is not None else None,
        plots=args.plots,
    )


if __name__ == "__main__":
    main()

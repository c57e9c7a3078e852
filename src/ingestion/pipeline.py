"""Ingestion pipeline: input globs → parsed datasets → one joined stream."""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable

from src.contracts.telemetry import TelemetryRecord
from src.ingestion.parser import ParsedDataset, parse_file

log = logging.getLogger(__name__)


def expand_inputs(patterns: Iterable[str]) -> list[str]:
    """Expand globs; literal paths that match nothing are kept as-is."""
    files: list[str] = []
    for pattern in patterns:
        matched = sorted(glob.glob(pattern))
        if matched:
            files.extend(matched)
        elif not glob.has_magic(pattern):
            files.append(pattern)
        else:
            log.warning("No files match pattern: %s", pattern)
    return files


def load_datasets(patterns: Iterable[str]) -> list[ParsedDataset]:
    """Parse every input file."""
    return [parse_file(path) for path in expand_inputs(patterns)]


def join_datasets(datasets: Iterable[ParsedDataset]) -> list[TelemetryRecord]:
    """Flatten all datasets and stable-sort ascending by timestamp.

    This establishes the ordering the engine relies on for adjacent-pair
    comparisons.
    """
    joined = [r for ds in datasets for r in ds.records]
    joined.sort(key=lambda r: r.timestamp)
    log.info("Joined %d records", len(joined))
    return joined

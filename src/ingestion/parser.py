"""Spreadsheet parser: xlsx/csv table → TelemetryRecords.

Column headers are matched case-insensitively against alias lists, so
exports from different site loggers ("Timestamp", "PF", "Voltage" ...)
land on the same record shape.  Rows with a missing or non-numeric
value are rejected (kept on the dataset with a reason), never defaulted.
"""

from __future__ import annotations

import io
import logging
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from src.contracts.telemetry import TelemetryRecord
from src.ingestion.filters import validate_record

log = logging.getLogger(__name__)

# ── header aliases (normalised: lower-case, spaces → "_") ────────────────────
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "timestamp": ("timestamp", "date", "datetime", "time"),
    "site": ("site", "site_id", "site_name", "name"),
    "power_factor": ("powerfactor", "power_factor", "pf"),
    "voltage": ("voltage", "v"),
    "current": ("current", "i"),
    "power": ("power", "p"),
    "energy": ("energy", "e"),
}

NUMERIC_FIELDS: tuple[str, ...] = ("power_factor", "voltage", "current", "power", "energy")

SUPPORTED_SUFFIXES: tuple[str, ...] = (".xlsx", ".xlsm", ".csv")


@dataclass(slots=True)
class ParsedDataset:
    """One parsed source file."""

    filename: str
    records: list[TelemetryRecord]
    parse_time_ms: float
    rejected: list[tuple[int, str]] = field(default_factory=list)  # (row_number, reason)


# ── reading ──────────────────────────────────────────────────────────────────


def _read_frame(source: Path | io.BytesIO, suffix: str, filename: str) -> pd.DataFrame:
    """Load the first sheet / the CSV table; reader failures become ``ValueError``."""
    if suffix in (".xlsx", ".xlsm"):
        try:
            return pd.read_excel(source, sheet_name=0, engine="openpyxl")
        except (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as exc:
            raise ValueError(f"{filename}: unreadable workbook ({exc})") from exc
    if suffix == ".csv":
        try:
            return pd.read_csv(source)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise ValueError(f"{filename}: unreadable table ({exc})") from exc
    raise ValueError(f"Unsupported file type '{suffix}' (expected one of {SUPPORTED_SUFFIXES})")


def resolve_columns(columns: list[str]) -> dict[str, str]:
    """Map canonical field name → actual column header (first alias wins)."""
    normalised = {str(c).strip().lower().replace(" ", "_"): c for c in columns}
    mapping: dict[str, str] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in normalised:
                mapping[canonical] = normalised[alias]
                break
    return mapping


# ── parsing ──────────────────────────────────────────────────────────────────


def parse_frame(
    df: pd.DataFrame,
    filename: str,
    default_site: str | None = None,
) -> ParsedDataset:
    """Convert a raw table into a :class:`ParsedDataset`.

    Raises:
        ValueError: If the timestamp column or a numeric column is absent.
    """
    started = time.perf_counter()
    mapping = resolve_columns(list(df.columns))
    missing = [f for f in ("timestamp", *NUMERIC_FIELDS) if f not in mapping]
    if missing:
        raise ValueError(f"{filename}: missing required column(s): {', '.join(missing)}")

    site_fallback = default_site or Path(filename).stem
    ts = pd.to_datetime(df[mapping["timestamp"]], utc=True, errors="coerce")
    numeric = {f: pd.to_numeric(df[mapping[f]], errors="coerce") for f in NUMERIC_FIELDS}
    sites = df[mapping["site"]] if "site" in mapping else None

    records: list[TelemetryRecord] = []
    rejected: list[tuple[int, str]] = []

    for pos in range(len(df)):
        row_number = pos + 2  # header is row 1
        if pd.isna(ts.iloc[pos]):
            rejected.append((row_number, "invalid timestamp"))
            continue
        bad = [f for f in NUMERIC_FIELDS if pd.isna(numeric[f].iloc[pos])]
        if bad:
            rejected.append((row_number, f"non-numeric {', '.join(bad)}"))
            continue

        site = site_fallback
        if sites is not None and not pd.isna(sites.iloc[pos]):
            site = str(sites.iloc[pos]).strip() or site_fallback

        record = TelemetryRecord(
            timestamp=ts.iloc[pos].to_pydatetime(),
            site=site,
            power_factor=float(numeric["power_factor"].iloc[pos]),
            voltage=float(numeric["voltage"].iloc[pos]),
            current=float(numeric["current"].iloc[pos]),
            power=float(numeric["power"].iloc[pos]),
            energy=float(numeric["energy"].iloc[pos]),
        )
        warnings = validate_record(record)
        if warnings:
            log.debug("%s row %d: %s", filename, row_number, "; ".join(warnings))
        records.append(record)

    elapsed_ms = (time.perf_counter() - started) * 1000
    if rejected:
        log.warning("%s: rejected %d of %d rows", filename, len(rejected), len(df))
    log.info("Parsed %d records from %s in %.1f ms", len(records), filename, elapsed_ms)
    return ParsedDataset(
        filename=filename,
        records=records,
        parse_time_ms=elapsed_ms,
        rejected=rejected,
    )


def parse_file(path: str | Path, default_site: str | None = None) -> ParsedDataset:
    """Parse an ``.xlsx`` (first sheet) or ``.csv`` file from disk.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: On unsupported extension, an unreadable file or missing columns.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input not found: {p}")
    df = _read_frame(p, p.suffix.lower(), p.name)
    return parse_frame(df, p.name, default_site)


def parse_bytes(data: bytes, filename: str, default_site: str | None = None) -> ParsedDataset:
    """Parse an in-memory upload (dashboard file uploader)."""
    df = _read_frame(io.BytesIO(data), Path(filename).suffix.lower(), filename)
    return parse_frame(df, filename, default_site)

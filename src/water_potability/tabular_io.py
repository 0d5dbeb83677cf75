# src/water_potability/tabular_io.py
from __future__ import annotations

import io
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .config import InputDiscoveryConfig, PotabilityConfig
from .models import Dataset, ParseError
from .utils import normalize_text, safe_label, timestamp_slug


log = logging.getLogger(__name__)


SUPPORTED_EXTENSIONS = {"csv", "json"}

_DEFAULT_DATASET: Tuple[Dict[str, str], ...] = (
    {"ph": "7.5", "hardness": "200", "solids": "500", "chloramines": "2.5", "sulfate": "250",
     "conductivity": "400", "organic_carbon": "10", "trihalomethanes": "50", "turbidity": "3.5"},
    {"ph": "6.8", "hardness": "180", "solids": "480", "chloramines": "2.8", "sulfate": "230",
     "conductivity": "380", "organic_carbon": "9.5", "trihalomethanes": "45", "turbidity": "3.2"},
)


def default_dataset() -> Dataset:
    """Two-row demonstration dataset (fresh copy on every call)."""
    return [dict(row) for row in _DEFAULT_DATASET]


def _normalize_extension(declared_extension: str) -> str:
    ext = normalize_text(declared_extension).lower()
    # accept "csv", ".csv" or a whole filename
    if "." in ext:
        ext = ext.rsplit(".", 1)[-1]
    return ext


def _decode(content: Union[bytes, str], encoding: str) -> str:
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    return content.decode(encoding)


# =============================================================================
# CSV
# =============================================================================

def _unwrap_cell(value: str) -> str:
    """Trim and drop one pair of surrounding double quotes (as written by to_csv)."""
    s = value.strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    return s


def parse_csv_simple(text: str) -> Dataset:
    """
    Header-positional CSV reader.

    First non-blank line is the header; every following non-blank line is split
    on ',' and zipped with the header. There is no quoting support: a value
    containing a comma shifts the remaining columns. Use the strict parser
    (cfg.csv_parser = "strict") when that matters.
    """
    # rows end at "\n" only (CRLF tolerated); other line separators stay inside the cell
    lines = [ln.rstrip("\r") for ln in text.split("\n")]
    lines = [ln for ln in lines if ln.strip()]
    if not lines:
        raise ValueError("CSV content is empty (no header line)")

    headers = [_unwrap_cell(h) for h in lines[0].split(",")]

    records: Dataset = []
    for line in lines[1:]:
        values = line.split(",")
        entry = {}
        for idx, header in enumerate(headers):
            entry[header] = _unwrap_cell(values[idx]) if idx < len(values) else ""
        records.append(entry)
    return records


def iter_csv_records(
    stream: BinaryIO,
    encoding: str = "utf-8-sig",
    chunk_size: int = 500,
) -> Iterator[Dict[str, str]]:
    """
    Delimited-text reader (quotes, escaped quotes and embedded commas supported).

    Consumes `stream` once and yields one record at a time; the iterator is not
    restartable. Header names are cleaned; values are kept as text exactly as read.
    Raises pandas.errors.ParserError / EmptyDataError / UnicodeDecodeError on bad input.
    """
    reader = pd.read_csv(
        stream,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        escapechar="\\",
        encoding=encoding,
        chunksize=chunk_size,
    )
    with reader:
        for chunk in reader:
            chunk.columns = [normalize_text(c) for c in chunk.columns]
            for rec in chunk.to_dict(orient="records"):
                yield rec


# =============================================================================
# JSON
# =============================================================================

_SCALARS = (str, int, float, bool, type(None))


def parse_json_records(text: str) -> Dataset:
    """Content must be an array of flat objects (scalar values only)."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of records, got {type(data).__name__}")

    for i, rec in enumerate(data):
        if not isinstance(rec, dict):
            raise ValueError(f"Record {i} is not an object (got {type(rec).__name__})")
        nested = [k for k, v in rec.items() if not isinstance(v, _SCALARS)]
        if nested:
            raise ValueError(f"Record {i} has nested values in: {nested}")
    return data


# =============================================================================
# Ingestion entry points
# =============================================================================

def accept_file(
    content: Union[bytes, str],
    declared_extension: str,
    cfg: Optional[PotabilityConfig] = None,
) -> Union[Dataset, ParseError]:
    """
    Parse uploaded content into a dataset.
    Never raises for bad content: malformed input comes back as a ParseError value.
    """
    cfg = cfg or PotabilityConfig()
    ext = _normalize_extension(declared_extension)
    source = declared_extension or ""

    if ext not in SUPPORTED_EXTENSIONS:
        return ParseError(f"Unsupported file type: {declared_extension!r} (expected .csv or .json)", source)

    try:
        if ext == "csv" and cfg.csv_parser == "strict":
            raw = content.encode(cfg.text_encoding) if isinstance(content, str) else content
            records = list(iter_csv_records(io.BytesIO(raw), encoding=cfg.text_encoding))
        elif ext == "csv":
            records = parse_csv_simple(_decode(content, cfg.text_encoding))
        else:
            records = parse_json_records(_decode(content, cfg.text_encoding))
    except (
        ValueError,
        UnicodeDecodeError,
        RecursionError,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
    ) as e:
        # json.JSONDecodeError is a ValueError; RecursionError comes from deeply nested JSON
        log.warning("Error parsing %s content: %s", ext, e)
        return ParseError(f"Error parsing file. Please check the file format. ({e})", source)

    log.info("Parsed %s content: %s records", ext, len(records))
    return records


def load_file(path: str | Path, cfg: Optional[PotabilityConfig] = None) -> Union[Dataset, ParseError]:
    """Read `path` and dispatch on its suffix. Missing files raise FileNotFoundError."""
    path = Path(path)
    content = path.read_bytes()
    return accept_file(content, path.name, cfg)


def discover_inputs(input_dir: str | Path, disco: Optional[InputDiscoveryConfig] = None) -> List[Path]:
    """
    Find CSV/JSON inputs.

    Looks in:
      1) input_dir
      2) input_dir / "data"   (project convention)
    """
    disco = disco or InputDiscoveryConfig()
    input_dir = Path(input_dir).expanduser().resolve()
    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    def _scan(folder: Path) -> List[Path]:
        found = set()
        for pattern in disco.patterns:
            found.update(folder.glob(pattern))
        return sorted((p for p in found if p.is_file()), key=lambda p: p.name)

    files = _scan(input_dir)
    data_dir = input_dir / "data"
    if not files and data_dir.exists():
        files = _scan(data_dir)

    if not files:
        raise FileNotFoundError(
            f"No input files found in {input_dir} (or {data_dir}) with patterns: {list(disco.patterns)}"
        )
    return files


# =============================================================================
# Export
# =============================================================================

def _render_value(value: Any) -> str:
    s = "" if value is None else str(value)
    return '"' + s.replace('"', '\\"') + '"'


def to_csv(records: Dataset) -> str:
    """
    Header from the first record's keys, then one row per record with every
    value wrapped in double quotes and embedded quotes escaped as \\".
    """
    if not records:
        return ""

    headers = list(records[0].keys())
    rows = [",".join(headers)]
    for rec in records:
        rows.append(",".join(_render_value(rec.get(h)) for h in headers))
    return "\n".join(rows)


def export_filename(label: str, now: Optional[datetime] = None) -> str:
    """<label>_<ISO-8601 with ':' and '.' replaced by '-'>.csv"""
    return f"{safe_label(label)}_{timestamp_slug(now)}.csv"


def write_csv_export(
    records: Dataset,
    label: Optional[str] = None,
    out_dir: str | Path | None = None,
    cfg: Optional[PotabilityConfig] = None,
    now: Optional[datetime] = None,
) -> Path:
    cfg = cfg or PotabilityConfig()
    out_dir = Path(out_dir) if out_dir else cfg.export_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    out_path = out_dir / export_filename(label or cfg.export_label, now)
    out_path.write_text(to_csv(records), encoding="utf-8")
    log.info("Exported %s records to %s", len(records), out_path)
    return out_path

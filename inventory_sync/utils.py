import csv
import io
import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from . import settings
from .errors import TableParseError

logger = logging.getLogger(__name__)

Row = dict[str, str | int | float]

_INT_RE = re.compile(r"^[+-]?(0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

# Export cells (notes, addresses) can exceed the csv module's default field limit.
_MAX_FIELD_SIZE = min(sys.maxsize, 2**31 - 1)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def read_text(file_path: Path) -> str:
    """
    Reads a report from disk with a multi-stage encoding fallback:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can decode any byte sequence.
    """
    raw = file_path.read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'.")
        return raw.decode("latin-1")


def _field_counts(text: str, delimiter: str) -> list[int]:
    previous_limit = csv.field_size_limit(_MAX_FIELD_SIZE)
    try:
        reader = csv.reader(io.StringIO(text), delimiter=delimiter)
        return [len(fields) for fields in reader if any(f.strip() for f in fields)]
    finally:
        csv.field_size_limit(previous_limit)


def guess_delimiter(text: str) -> tuple[str, int]:
    """
    Picks the candidate delimiter that splits the text into the most consistent
    number of columns. Returns the delimiter and the widest row it produces.
    Raises TableParseError when no candidate can tokenize the text.
    """
    best: tuple[tuple[bool, float, int], str, int] | None = None
    failures: list[str] = []

    for delimiter in settings.DELIMITER_CANDIDATES:
        try:
            counts = _field_counts(text, delimiter)
        except csv.Error as e:
            failures.append(f"{delimiter!r}: {e}")
            continue
        if not counts:
            continue

        header_width = counts[0]
        consistency = sum(1 for c in counts if c == header_width) / len(counts)
        score = (header_width > 1, consistency, header_width)

        # Strictly greater keeps the earlier candidate on ties.
        if best is None or score > best[0]:
            best = (score, delimiter, max(counts))

    if best is None:
        if failures:
            raise TableParseError(f"Could not tokenize delimited text ({'; '.join(failures)})")
        return settings.DELIMITER_CANDIDATES[0], 1
    return best[1], best[2]


def coerce_cell(raw: Any) -> str | int | float | None:
    """Types a raw cell: empty -> None, integer -> int, decimal -> float, else str."""
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return None

    value = str(raw)
    stripped = value.strip()
    if stripped == "":
        return None
    if _INT_RE.match(stripped):
        return int(stripped)
    # Leading-zero identifiers like "007" stay strings.
    if _FLOAT_RE.match(stripped) and not re.match(r"^[+-]?0\d", stripped):
        return float(stripped)
    return value


def _unique_headers(labels: Iterable[Any]) -> list[str | None]:
    """Empty labels become None; repeated labels get `_1`, `_2`, ... suffixes."""
    headers: list[str | None] = []
    seen: dict[str, int] = {}

    for raw in labels:
        if coerce_cell(raw) is None:
            headers.append(None)
            continue
        label = str(raw)
        if label in seen:
            suffix = seen[label]
            while f"{label}_{suffix}" in seen:
                suffix += 1
            seen[label] = suffix + 1
            label = f"{label}_{suffix}"
        seen[label] = 1
        headers.append(label)
    return headers


def parse_table(text: str) -> list[Row]:
    """
    Parses delimited text into a list of row mappings keyed by the header row.

    The delimiter is auto-detected, numeric-looking cells are typed and empty
    cells are left out of the row entirely. Blank lines are skipped.
    """
    if not text:
        return []
    text = text.lstrip("\ufeff")
    if not text.strip():
        return []

    delimiter, width = guess_delimiter(text)

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            names=list(range(width)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, csv.Error, ValueError) as e:
        raise TableParseError(f"Could not tokenize delimited text: {e}") from e

    records = df.values.tolist()
    if not records:
        return []

    headers = _unique_headers(records[0])

    rows: list[Row] = []
    for record in records[1:]:
        row: Row = {}
        for label, cell in zip(headers, record):
            if label is None:
                continue
            value = coerce_cell(cell)
            if value is not None:
                row[label] = value
        if row:
            rows.append(row)

    logger.debug(f"Parsed {len(rows)} rows (delimiter={delimiter!r})")
    if rows:
        logger.debug(f"Sample headers: {list(rows[0].keys())}")
    return rows


def find_column_value(row: dict[str, Any], possible_names: Iterable[str]) -> Any:
    """Returns the first alias whose value is present and not empty, else None."""
    for name in possible_names:
        value = row.get(name)
        if value is None:
            continue
        if isinstance(value, str):
            if value == "":
                continue
        elif pd.isna(value):
            continue
        return value
    return None


def to_int(value: Any, default: int = 0) -> int:
    """
    Total integer coercion: ints pass through, floats truncate, strings use
    their leading integer part. Anything else returns `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if pd.isna(value) or value in (float("inf"), float("-inf")):
            return default
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    if match:
        return int(match.group(1))
    return default


def to_text(value: Any) -> str | None:
    """
    Stringifies a cell value and trims it; None stays None. Integral floats
    drop their ".0" so "12E4" and "100.0" identifiers read as "120000" and "100".
    """
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()

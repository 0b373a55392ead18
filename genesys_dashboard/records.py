"""
Record normalizer for Genesys Cloud interaction exports.
Turns raw CSV rows into canonical interaction frames (one row per interaction).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


SOURCE_TIMESTAMP_FORMAT = "%m/%d/%y %I:%M %p"  # 6/23/25 07:00 AM

UNKNOWN_AGENT = "Unknown Agent"
UNKNOWN_QUEUE = "Unknown Queue"
DEFAULT_MEDIA_TYPE = "message"
DEFAULT_DIRECTION = "Inbound/Outbound"

# Header columns a file must carry to be read at all
REQUIRED_SOURCE_COLUMNS = ("Conversation ID", "Date", "End Date", "Users", "Remote", "Queue")
# Per-row fields; a blank value drops the row
ROW_REQUIRED_COLUMNS = ("Conversation ID", "Date", "End Date", "Users", "Remote")

TEXT_COLUMNS = [
    "conversation_id", "agent", "customer", "queue", "media_type", "direction",
    "wrap_up", "flow", "ani", "dnis",
]
TIME_COLUMNS = ["start_time", "end_time"]
INTERACTION_COLUMNS = [
    "conversation_id", "agent", "customer", "queue", "media_type", "direction",
    "duration", "wrap_up", "flow", "start_time", "end_time", "ani", "dnis",
]
NULLABLE_COLUMNS = ["wrap_up", "flow", "ani", "dnis"]


class CSVImportError(ValueError):
    """The uploaded file could not be turned into rows at all."""


@dataclass
class FieldWarning:
    row: int          # 1-based data row, header excluded
    column: str
    value: str
    message: str


@dataclass
class NormalizedBatch:
    interactions: pd.DataFrame
    dropped_rows: int = 0
    warnings: List[FieldWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.interactions)

    @property
    def timestamp_fallbacks(self) -> int:
        return sum(1 for w in self.warnings if w.column in ("Date", "End Date"))


# ---------- CANONICAL FRAMES ----------------

def empty_interactions() -> pd.DataFrame:
    return coerce_interactions(pd.DataFrame(columns=INTERACTION_COLUMNS))


def coerce_interactions(frame: pd.DataFrame) -> pd.DataFrame:
    """Cast a frame carrying the interaction columns to the canonical dtypes."""
    df = frame.copy()
    for c in TEXT_COLUMNS:
        df[c] = df[c].astype("string")
    df["duration"] = pd.to_numeric(df["duration"], errors="coerce").fillna(0).astype("int64")
    for c in TIME_COLUMNS:
        df[c] = pd.to_datetime(df[c], errors="coerce")
    extra = [c for c in df.columns if c not in INTERACTION_COLUMNS]
    return df[extra + INTERACTION_COLUMNS]


# ---------- FIELD PARSING ----------------

def first_token(value: Any, placeholder: Optional[str] = None) -> Optional[str]:
    """First non-empty `;`-separated token of a multi-valued field."""
    if value is None or pd.isna(value):
        return placeholder
    tokens = [t.strip() for t in str(value).split(";")]
    tokens = [t for t in tokens if t]
    return tokens[0] if tokens else placeholder


def _clean_text(values: pd.Series) -> pd.Series:
    s = values.astype("string").str.strip()
    return s.mask(s.eq("").fillna(False))


def _optional_column(raw: pd.DataFrame, column: str) -> pd.Series:
    if column in raw.columns:
        return raw[column]
    return pd.Series(pd.NA, index=raw.index, dtype="string")


def parse_timestamps(values: pd.Series, column: str, warnings: List[FieldWarning]) -> pd.Series:
    parsed = pd.to_datetime(values, format=SOURCE_TIMESTAMP_FORMAT, errors="coerce")
    failed = parsed.isna()
    if failed.any():
        now = pd.Timestamp.now()
        for idx, value in values[failed].items():
            logger.warning("Failed to parse %s %r on row %d, using current time", column, value, idx + 1)
            warnings.append(FieldWarning(idx + 1, column, str(value), "unparseable timestamp, replaced with current time"))
        parsed = parsed.where(~failed, now)
    return parsed


def parse_durations(values: pd.Series, warnings: List[FieldWarning]) -> pd.Series:
    text = values.fillna("").astype(str)
    numeric = pd.to_numeric(text, errors="coerce").astype("float64")
    numeric = numeric.where(np.isfinite(numeric))
    bad = numeric.isna() & values.notna()
    for idx, value in values[bad].items():
        logger.warning("Failed to parse Duration %r on row %d, using 0", value, idx + 1)
        warnings.append(FieldWarning(idx + 1, "Duration", str(value), "unparseable duration, replaced with 0"))
    return np.floor(numeric.fillna(0)).clip(lower=0).astype("int64")


# ---------- NORMALIZATION ----------------

def normalize_frame(raw: pd.DataFrame) -> NormalizedBatch:
    raw = raw.copy()
    raw.columns = [str(c).strip() for c in raw.columns]
    duplicates = sorted(set(c for c in raw.columns if list(raw.columns).count(c) > 1))
    if duplicates:
        raise CSVImportError(f"CSV has duplicate columns: {', '.join(duplicates)}")
    missing = [c for c in REQUIRED_SOURCE_COLUMNS if c not in raw.columns]
    if missing:
        raise CSVImportError(f"CSV is missing required columns: {', '.join(missing)}")

    raw = raw.reset_index(drop=True)
    text = pd.DataFrame({c: _clean_text(raw[c]) for c in raw.columns}, index=raw.index)

    valid = text[list(ROW_REQUIRED_COLUMNS)].notna().all(axis=1)
    dropped = int((~valid).sum())
    if dropped:
        logger.info("Dropped %d of %d rows missing required fields", dropped, len(text))
    text = text[valid]

    warnings: List[FieldWarning] = []
    frame = pd.DataFrame(
        {
            "conversation_id": text["Conversation ID"],
            "agent": text["Users"].map(lambda v: first_token(v, UNKNOWN_AGENT)),
            "customer": text["Remote"],
            "queue": text["Queue"].map(lambda v: first_token(v, UNKNOWN_QUEUE)),
            "media_type": _optional_column(text, "Media Type").fillna(DEFAULT_MEDIA_TYPE),
            "direction": _optional_column(text, "Direction").fillna(DEFAULT_DIRECTION),
            "duration": parse_durations(_optional_column(text, "Duration"), warnings),
            "wrap_up": _optional_column(text, "Wrap-up"),
            "flow": _optional_column(text, "Flow"),
            "start_time": parse_timestamps(text["Date"], "Date", warnings),
            "end_time": parse_timestamps(text["End Date"], "End Date", warnings),
            "ani": _optional_column(text, "ANI"),
            "dnis": _optional_column(text, "DNIS"),
        },
        index=text.index,
    )
    warnings.sort(key=lambda w: w.row)
    return NormalizedBatch(coerce_interactions(frame).reset_index(drop=True), dropped, warnings)


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> NormalizedBatch:
    records = list(rows)
    if not records:
        return NormalizedBatch(empty_interactions())
    return normalize_frame(pd.DataFrame.from_records(records))


# ---------- CSV INPUT ----------------

def read_interactions_csv(source: Union[str, bytes]) -> pd.DataFrame:
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVImportError("CSV file is not valid UTF-8 text") from exc
    source = source.lstrip("\ufeff")
    if not source.strip():
        raise CSVImportError("CSV file is empty")

    try:
        df = pd.read_csv(
            io.StringIO(source),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise CSVImportError(f"CSV parsing error: {exc}") from exc

    df.columns = [c.strip() for c in df.columns]
    return df


def parse_csv(source: Union[str, bytes]) -> NormalizedBatch:
    batch = normalize_frame(read_interactions_csv(source))
    logger.info(
        "Normalized %d interactions (%d dropped, %d field warnings)",
        len(batch.interactions), batch.dropped_rows, len(batch.warnings),
    )
    return batch


def load_csv_file(path: str) -> NormalizedBatch:
    with open(path, "rb") as fh:
        return parse_csv(fh.read())

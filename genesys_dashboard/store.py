"""
In-memory interaction store. Owns the id sequence; lives as long as the process.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Protocol, Union

import pandas as pd

from .records import INTERACTION_COLUMNS, NULLABLE_COLUMNS, coerce_interactions, empty_interactions

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [c for c in INTERACTION_COLUMNS if c not in NULLABLE_COLUMNS]

Candidates = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


class InvalidInteractionData(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("Invalid interaction data: " + "; ".join(errors[:5]))
        self.errors = errors


class RecordStore(Protocol):
    def list_all(self) -> pd.DataFrame: ...

    def insert_many(self, candidates: Candidates) -> pd.DataFrame: ...

    def insert(self, candidate: Mapping[str, Any]) -> pd.DataFrame: ...

    def clear(self) -> None: ...

    def between(self, start, end) -> pd.DataFrame: ...


def _parse_times(values: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(values, errors="coerce", format="mixed")
    if parsed.dt.tz is not None:
        parsed = parsed.dt.tz_convert(None)
    return parsed


def validate_interactions(candidates: Candidates) -> pd.DataFrame:
    """Shape-check candidate records and return them with canonical dtypes (no id column)."""
    if isinstance(candidates, pd.DataFrame):
        df = candidates.copy()
    else:
        rows = list(candidates)
        if any(not isinstance(r, Mapping) for r in rows):
            raise InvalidInteractionData(["each interaction must be an object"])
        df = pd.DataFrame.from_records(rows) if rows else pd.DataFrame(columns=INTERACTION_COLUMNS)

    df = df.drop(columns=["id"], errors="ignore").reset_index(drop=True)
    for c in NULLABLE_COLUMNS:
        if c not in df.columns:
            df[c] = None

    errors = []
    for c in REQUIRED_FIELDS:
        if c not in df.columns:
            errors.append(f"{c} is required")
            continue
        blank = df[c].isna()
        if c not in ("duration", "start_time", "end_time"):
            blank |= df[c].astype("string").str.strip().eq("").fillna(False).astype(bool)
        errors.extend(f"row {i + 1}: {c} is required" for i in df.index[blank])
    if errors:
        raise InvalidInteractionData(errors)

    for c in ("start_time", "end_time"):
        try:
            df[c] = _parse_times(df[c])
        except (AttributeError, TypeError, ValueError):
            errors.append(f"{c} contains unparseable or mixed-timezone values")
            continue
        bad = df[c].isna()
        errors.extend(f"row {i + 1}: {c} is not a valid timestamp" for i in df.index[bad])
    duration = pd.to_numeric(df["duration"], errors="coerce")
    bad = duration.isna() | (duration < 0)
    errors.extend(f"row {i + 1}: duration must be a non-negative number" for i in df.index[bad])
    if errors:
        raise InvalidInteractionData(errors)

    for c in NULLABLE_COLUMNS:
        df[c] = df[c].astype("string").str.strip()
        df[c] = df[c].mask(df[c].eq("").fillna(False))
    return coerce_interactions(df[INTERACTION_COLUMNS])


class InteractionStore:
    def __init__(self):
        self._frame = self._empty()
        self._next_id = 1

    @staticmethod
    def _empty() -> pd.DataFrame:
        df = empty_interactions()
        df.insert(0, "id", pd.Series(dtype="int64"))
        return df

    def __len__(self) -> int:
        return len(self._frame)

    def list_all(self) -> pd.DataFrame:
        """All records, newest start_time first."""
        return self._frame.sort_values("start_time", ascending=False, kind="stable").reset_index(drop=True)

    def insert_many(self, candidates: Candidates) -> pd.DataFrame:
        new = validate_interactions(candidates)
        new.insert(0, "id", pd.Series(range(self._next_id, self._next_id + len(new)), dtype="int64"))
        self._next_id += len(new)
        if self._frame.empty:
            self._frame = new
        elif not new.empty:
            self._frame = pd.concat([self._frame, new], ignore_index=True)
        logger.info("Stored %d interactions (%d total)", len(new), len(self._frame))
        return new.copy()

    def insert(self, candidate: Mapping[str, Any]) -> pd.DataFrame:
        return self.insert_many([candidate])

    def clear(self) -> None:
        self._frame = self._empty()
        self._next_id = 1
        logger.info("Cleared all interactions")

    def between(self, start, end) -> pd.DataFrame:
        start, end = pd.Timestamp(start), pd.Timestamp(end)
        df = self._frame
        return df[(df["start_time"] >= start) & (df["start_time"] <= end)].reset_index(drop=True)

    def by_queue(self, queue: str) -> pd.DataFrame:
        df = self._frame
        return df[df["queue"].str.contains(queue, regex=False).fillna(False).astype(bool)].reset_index(drop=True)

    def by_agent(self, agent: str) -> pd.DataFrame:
        df = self._frame
        return df[df["agent"].str.contains(agent, regex=False).fillna(False).astype(bool)].reset_index(drop=True)

"""
Filter / sort / paginate engine behind the interactions table.

Two filtering layers with different match rules:
  - header filters (FilterState): case-sensitive substring per dimension, plus a date range
  - checkbox filters (column selections): exact membership in a set of allowed values
Free-text search is case-insensitive, either on one column or across all searchable columns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

import pandas as pd

ALL = "all"
PAGE_SIZE_OPTIONS = (10, 20, 50, 100)
DEFAULT_PAGE_SIZE = PAGE_SIZE_OPTIONS[0]

DIMENSIONS = ("queue", "agent", "media_type", "wrap_up", "flow")
SEARCH_COLUMNS = (
    "agent", "customer", "queue", "media_type", "direction", "wrap_up", "flow", "conversation_id",
)
CHECKBOX_COLUMNS = ("agent", "queue", "media_type", "direction", "wrap_up")

SORT_FIELDS = {
    "media_type": "text",
    "agent": "text",
    "customer": "text",
    "start_time": "time",
    "end_time": "time",
    "duration": "number",
    "direction": "text",
    "queue": "text",
    "wrap_up": "text",
}

TABLE_COLUMNS = [
    ("media_type", "Media Type"),
    ("agent", "Agent"),
    ("customer", "Customer"),
    ("start_time", "Date"),
    ("end_time", "End Date"),
    ("duration", "Duration"),
    ("direction", "Direction"),
    ("ani", "ANI"),
    ("dnis", "DNIS"),
    ("queue", "Queue"),
    ("wrap_up", "Wrap-up"),
    ("flow", "Flow"),
    ("conversation_id", "Conversation ID"),
]
COLUMN_LABELS = dict(TABLE_COLUMNS)
DEFAULT_VISIBLE_COLUMNS = (
    "media_type", "agent", "customer", "start_time", "end_time", "duration", "direction", "queue",
)


def _coerce_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


# ---------- HEADER FILTERS ----------------

@dataclass(frozen=True)
class FilterState:
    date_from: Optional[pd.Timestamp] = None
    date_to: Optional[pd.Timestamp] = None
    queue: str = ALL
    agent: str = ALL
    media_type: str = ALL
    wrap_up: str = ALL
    flow: str = ALL

    @classmethod
    def from_inputs(cls, start_date=None, end_date=None, **dimensions) -> "FilterState":
        """Build from date-picker / dropdown values. A date-only end bound includes that whole day."""
        date_to = _coerce_timestamp(end_date)
        if date_to is not None and date_to == date_to.normalize() and len(str(end_date)) <= 10:
            date_to = date_to + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
        values = {d: (dimensions.get(d) or ALL) for d in DIMENSIONS}
        return cls(date_from=_coerce_timestamp(start_date), date_to=date_to, **values)

    def is_active(self) -> bool:
        if self.date_from is not None or self.date_to is not None:
            return True
        return any(getattr(self, d) != ALL for d in DIMENSIONS)


def filter_mask(df: pd.DataFrame, filters: Optional[FilterState]) -> pd.Series:
    mask = pd.Series(True, index=df.index)
    if filters is None:
        return mask
    if filters.date_from is not None:
        mask &= df["start_time"] >= filters.date_from
    if filters.date_to is not None:
        mask &= df["start_time"] <= filters.date_to
    for dim in DIMENSIONS:
        value = getattr(filters, dim)
        if not value or value == ALL:
            continue
        hit = df[dim].astype("string").str.contains(str(value), regex=False)
        mask &= hit.fillna(False).astype(bool)
    return mask


def apply_filters(df: pd.DataFrame, filters: Optional[FilterState]) -> pd.DataFrame:
    return df[filter_mask(df, filters)]


# ---------- CHECKBOX FILTERS / SEARCH ----------------

def column_filter_mask(df: pd.DataFrame, selections: Optional[Mapping[str, Any]]) -> pd.Series:
    mask = pd.Series(True, index=df.index)
    for column, allowed in (selections or {}).items():
        if column not in CHECKBOX_COLUMNS or not allowed:
            continue
        values = df[column].astype("string").fillna("")
        mask &= values.isin(list(allowed)).astype(bool)
    return mask


def search_mask(df: pd.DataFrame, term: Optional[str], column: str = ALL) -> pd.Series:
    mask = pd.Series(True, index=df.index)
    if not term:
        return mask
    if column == ALL:
        columns = SEARCH_COLUMNS
    elif column in SEARCH_COLUMNS:
        columns = (column,)
    else:
        return mask

    needle = term.lower()
    hit = pd.Series(False, index=df.index)
    for c in columns:
        found = df[c].astype("string").str.lower().str.contains(needle, regex=False)
        hit |= found.fillna(False).astype(bool)
    return hit


# ---------- SORTING ----------------

@dataclass(frozen=True)
class SortSpec:
    field: Optional[str] = None
    descending: bool = False

    def toggle(self, field: str) -> "SortSpec":
        if field == self.field:
            return SortSpec(field, not self.descending)
        return SortSpec(field, False)

    @property
    def direction(self) -> str:
        return "desc" if self.descending else "asc"


def _text_key(values: pd.Series) -> pd.Series:
    return values.astype("string").fillna("").str.lower()


def sort_interactions(df: pd.DataFrame, sort: Optional[SortSpec]) -> pd.DataFrame:
    if sort is None or sort.field not in SORT_FIELDS or sort.field not in df.columns:
        return df
    key = _text_key if SORT_FIELDS[sort.field] == "text" else None
    return df.sort_values(sort.field, ascending=not sort.descending, kind="stable", key=key)


# ---------- PAGINATION ----------------

@dataclass(frozen=True)
class Page:
    interactions: pd.DataFrame
    page: int
    page_size: int
    total_matched: int
    total_pages: int

    @property
    def first_row(self) -> int:
        return 0 if self.total_matched == 0 else (self.page - 1) * self.page_size + 1

    @property
    def last_row(self) -> int:
        return min(self.page * self.page_size, self.total_matched)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def paginate(df: pd.DataFrame, page: Any = 1, page_size: Any = DEFAULT_PAGE_SIZE) -> Page:
    size = _as_int(page_size, DEFAULT_PAGE_SIZE)
    if size <= 0:
        size = DEFAULT_PAGE_SIZE
    matched = len(df)
    total_pages = math.ceil(matched / size)
    current = min(max(_as_int(page, 1), 1), max(total_pages, 1))
    start = (current - 1) * size
    return Page(df.iloc[start:start + size], current, size, matched, total_pages)


def query_interactions(
    df: pd.DataFrame,
    filters: Optional[FilterState] = None,
    search_term: str = "",
    search_column: str = ALL,
    column_filters: Optional[Mapping[str, Any]] = None,
    sort: Optional[SortSpec] = None,
    page: Any = 1,
    page_size: Any = DEFAULT_PAGE_SIZE,
) -> Page:
    view = apply_filters(df, filters)
    view = view[column_filter_mask(view, column_filters) & search_mask(view, search_term, search_column)]
    return paginate(sort_interactions(view, sort), page, page_size)


# ---------- TABLE UI STATE ----------------

@dataclass(frozen=True)
class TableState:
    search_term: str = ""
    search_column: str = ALL
    column_filters: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    sort: SortSpec = field(default_factory=SortSpec)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    visible_columns: Tuple[str, ...] = DEFAULT_VISIBLE_COLUMNS

    def with_search(self, term: Optional[str], column: Optional[str] = None) -> "TableState":
        return replace(self, search_term=term or "", search_column=column or self.search_column, page=1)

    def with_column_filter(self, column: str, values) -> "TableState":
        filters = dict(self.column_filters)
        if values:
            filters[column] = frozenset(values)
        else:
            filters.pop(column, None)
        return replace(self, column_filters=filters, page=1)

    def toggle_column_value(self, column: str, value: str, checked: bool) -> "TableState":
        current = set(self.column_filters.get(column, ()))
        if checked:
            current.add(value)
        else:
            current.discard(value)
        return self.with_column_filter(column, current)

    def clear_column_filter(self, column: str) -> "TableState":
        return self.with_column_filter(column, ())

    def with_page_size(self, size: Any) -> "TableState":
        size = _as_int(size, DEFAULT_PAGE_SIZE)
        if size not in PAGE_SIZE_OPTIONS:
            size = DEFAULT_PAGE_SIZE
        return replace(self, page_size=size, page=1)

    def toggle_sort(self, field_name: str) -> "TableState":
        return replace(self, sort=self.sort.toggle(field_name), page=1)

    def go_to(self, page: Any) -> "TableState":
        return replace(self, page=max(_as_int(page, 1), 1))

    def reset_page(self) -> "TableState":
        return replace(self, page=1)

    def with_visible_columns(self, columns) -> "TableState":
        keys = tuple(c for c in (columns or ()) if c in COLUMN_LABELS)
        return replace(self, visible_columns=keys)

    def apply(self, df: pd.DataFrame, filters: Optional[FilterState] = None) -> Page:
        return query_interactions(
            df,
            filters=filters,
            search_term=self.search_term,
            search_column=self.search_column,
            column_filters=self.column_filters,
            sort=self.sort,
            page=self.page,
            page_size=self.page_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search_term": self.search_term,
            "search_column": self.search_column,
            "column_filters": {k: sorted(v) for k, v in self.column_filters.items()},
            "sort_field": self.sort.field,
            "sort_descending": self.sort.descending,
            "page": self.page,
            "page_size": self.page_size,
            "visible_columns": list(self.visible_columns),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TableState":
        if not data:
            return cls()
        return cls(
            search_term=data.get("search_term") or "",
            search_column=data.get("search_column") or ALL,
            column_filters={k: frozenset(v) for k, v in (data.get("column_filters") or {}).items() if v},
            sort=SortSpec(data.get("sort_field"), bool(data.get("sort_descending"))),
            page=max(_as_int(data.get("page"), 1), 1),
            page_size=_as_int(data.get("page_size"), DEFAULT_PAGE_SIZE),
            visible_columns=tuple(data.get("visible_columns") or DEFAULT_VISIBLE_COLUMNS),
        )

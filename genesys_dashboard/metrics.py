"""
Interaction metrics: summary KPIs, agent/queue rollups, hourly trend and wrap-up breakdown.
Every function takes a canonical interaction frame (possibly empty) and never raises on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

MS_PER_MINUTE = 60_000
BUSINESS_FIRST_HOUR = 7
BUSINESS_LAST_HOUR = 18


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def _minutes(ms: pd.Series) -> pd.Series:
    return np.floor(ms / MS_PER_MINUTE + 0.5).astype("int64")


@dataclass(frozen=True)
class SummaryMetrics:
    total_interactions: int = 0
    avg_handle_time: int = 0              # whole minutes
    active_agents: int = 0
    primary_channel: Optional[str] = None
    primary_channel_volume: int = 0
    primary_channel_percentage: int = 0


def average_handle_time(df: pd.DataFrame) -> int:
    if df.empty:
        return 0
    return round_half_up(df["duration"].sum() / len(df) / MS_PER_MINUTE)


def primary_channel(df: pd.DataFrame) -> Tuple[Optional[str], int]:
    """Most frequent media type; ties go to the one seen first."""
    if df.empty:
        return None, 0
    counts = df.groupby("media_type", sort=False).size()
    if counts.empty:
        return None, 0
    return str(counts.idxmax()), int(counts.max())


def summary_metrics(df: pd.DataFrame) -> SummaryMetrics:
    total = len(df)
    channel, volume = primary_channel(df)
    return SummaryMetrics(
        total_interactions=total,
        avg_handle_time=average_handle_time(df),
        active_agents=int(df["agent"].nunique()),
        primary_channel=channel,
        primary_channel_volume=volume,
        primary_channel_percentage=round_half_up(volume / total * 100) if total else 0,
    )


def agent_performance(df: pd.DataFrame, limit: Optional[int] = 5) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=["agent", "interactions", "avg_duration", "queues"])

    g = df.groupby("agent", sort=False)
    out = pd.DataFrame(
        {
            "interactions": g.size(),
            "avg_duration": _minutes(g["duration"].mean()),
            "queues": g["queue"].unique().map(list),
        }
    ).reset_index()
    out = out.sort_values("interactions", ascending=False, kind="stable").reset_index(drop=True)
    if limit is not None:
        out = out.head(max(limit, 0))
    return out


def queue_distribution(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=["queue", "interactions", "avg_duration", "percentage"])

    total = len(df)
    g = df.groupby("queue", sort=False)
    out = pd.DataFrame(
        {
            "interactions": g.size(),
            "avg_duration": _minutes(g["duration"].mean()),
        }
    ).reset_index()
    out["percentage"] = np.floor(out["interactions"] / total * 100 + 0.5).astype("int64")
    return out.sort_values("interactions", ascending=False, kind="stable").reset_index(drop=True)


def hourly_trend(
    df: pd.DataFrame,
    first_hour: int = BUSINESS_FIRST_HOUR,
    last_hour: int = BUSINESS_LAST_HOUR,
) -> pd.DataFrame:
    """Interaction counts per clock hour of start_time, zero-filled; hours outside the window are left out."""
    hours = range(first_hour, last_hour + 1)
    counts = df["start_time"].dropna().dt.hour.value_counts()
    return pd.DataFrame(
        {
            "hour": [f"{h:02d}:00" for h in hours],
            "count": [int(counts.get(h, 0)) for h in hours],
        }
    )


def split_wrap_up_codes(df: pd.DataFrame) -> pd.Series:
    codes = df["wrap_up"].dropna().astype(str).str.split(";").explode().str.strip()
    return codes[codes.notna() & (codes != "")]


def wrap_up_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count per wrap-up code. A record tagged "A;B" counts once for A and once for B,
    unlike the table, which shows and filters the unsplit value.
    """
    codes = split_wrap_up_codes(df)
    if codes.empty:
        return pd.DataFrame(columns=["wrap_up", "count"])
    counts = codes.groupby(codes, sort=False).size()
    out = counts.rename_axis("wrap_up").reset_index(name="count")
    return out.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)


def wrap_up_codes(df: pd.DataFrame) -> List[str]:
    return sorted(split_wrap_up_codes(df).unique().tolist())


def unique_values(df: pd.DataFrame, column: str) -> List[str]:
    if column not in df.columns:
        return []
    values = df[column].dropna().astype(str)
    return sorted(v for v in values.unique().tolist() if v)


def format_duration(ms: int) -> str:
    total_seconds = max(int(ms), 0) // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"

import pandas as pd
import pytest

from genesys_dashboard.metrics import (
    SummaryMetrics,
    agent_performance,
    average_handle_time,
    format_duration,
    hourly_trend,
    primary_channel,
    queue_distribution,
    round_half_up,
    summary_metrics,
    unique_values,
    wrap_up_codes,
    wrap_up_distribution,
)
from genesys_dashboard.records import normalize_rows


def test_single_example_record(example_row):
    df = normalize_rows([example_row]).interactions
    m = summary_metrics(df)
    assert m.total_interactions == 1
    assert m.avg_handle_time == 5
    assert m.active_agents == 1
    assert m.primary_channel == "voice"
    assert m.primary_channel_volume == 1
    assert m.primary_channel_percentage == 100

    codes = wrap_up_distribution(df)
    assert dict(zip(codes["wrap_up"], codes["count"])) == {"RESOLVED": 1, "FOLLOWUP": 1}


def test_summary_over_fixture(interactions):
    m = summary_metrics(interactions)
    assert m == SummaryMetrics(
        total_interactions=8,
        avg_handle_time=5,  # 285000 ms = 4.75 min
        active_agents=3,
        primary_channel="voice",
        primary_channel_volume=6,
        primary_channel_percentage=75,
    )


def test_empty_input_yields_zeroes(empty_frame):
    assert summary_metrics(empty_frame) == SummaryMetrics()
    assert agent_performance(empty_frame).empty
    assert queue_distribution(empty_frame).empty
    assert wrap_up_distribution(empty_frame).empty
    assert hourly_trend(empty_frame)["count"].sum() == 0


@pytest.mark.parametrize("value, expected", [(2.5, 3), (2.4999, 2), (0.5, 1), (37.5, 38), (0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_average_handle_time_rounds_half_up(make_row):
    df = normalize_rows([make_row(Duration="150000")]).interactions  # 2.5 minutes
    assert average_handle_time(df) == 3


def test_primary_channel_tie_goes_to_first_seen(make_row):
    rows = [
        make_row(**{"Media Type": "email"}),
        make_row(**{"Media Type": "voice"}),
        make_row(**{"Media Type": "voice"}),
        make_row(**{"Media Type": "email"}),
    ]
    assert primary_channel(normalize_rows(rows).interactions) == ("email", 2)


def test_agent_performance(interactions):
    agents = agent_performance(interactions)
    assert agents["agent"].tolist() == ["Alice", "bob smith", "Carlos"]
    assert agents["interactions"].tolist() == [4, 2, 2]
    alice = agents.iloc[0]
    assert alice["avg_duration"] == 7
    assert alice["queues"] == ["Q_SALES", "Q_SUPPORT"]


def test_agent_performance_limit(interactions):
    assert len(agent_performance(interactions, limit=1)) == 1
    assert len(agent_performance(interactions, limit=None)) == 3
    assert agent_performance(interactions, limit=0).empty


def test_queue_distribution(interactions):
    queues = queue_distribution(interactions)
    assert queues["queue"].tolist() == ["Q_SALES", "Q_SUPPORT", "Q_BILLING"]
    assert queues["interactions"].tolist() == [3, 3, 2]
    assert queues["avg_duration"].tolist() == [4, 7, 2]
    assert queues["percentage"].tolist() == [38, 38, 25]


def test_hourly_trend_has_twelve_business_hours(interactions):
    trend = hourly_trend(interactions)
    assert trend["hour"].tolist() == [f"{h:02d}:00" for h in range(7, 19)]
    counts = dict(zip(trend["hour"], trend["count"]))
    assert counts["07:00"] == 2
    assert counts["08:00"] == 1
    assert counts["09:00"] == 2
    assert counts["13:00"] == 1
    assert counts["18:00"] == 1
    # the 22:00 interaction falls outside the window
    assert trend["count"].sum() == 7


def test_hourly_trend_full_day(interactions):
    trend = hourly_trend(interactions, 0, 23)
    assert len(trend) == 24
    assert trend["count"].sum() == len(interactions)


def test_wrap_up_distribution_splits_codes(interactions):
    codes = wrap_up_distribution(interactions)
    assert codes["wrap_up"].tolist() == ["SALE", "RESOLVED", "FOLLOWUP", "REFUND"]
    assert codes["count"].tolist() == [2, 2, 2, 1]


def test_wrap_up_distribution_ignores_empty_tokens(make_row):
    df = normalize_rows([make_row(**{"Wrap-up": "A; ;B;"})]).interactions
    codes = wrap_up_distribution(df)
    assert codes["wrap_up"].tolist() == ["A", "B"]


def test_wrap_up_codes_and_unique_values(interactions):
    assert wrap_up_codes(interactions) == ["FOLLOWUP", "REFUND", "RESOLVED", "SALE"]
    assert unique_values(interactions, "queue") == ["Q_BILLING", "Q_SALES", "Q_SUPPORT"]
    assert unique_values(interactions, "no_such_column") == []


@pytest.mark.parametrize("ms, expected", [(0, "0:00"), (59999, "0:59"), (300000, "5:00"), (61500, "1:01"), (-5, "0:00")])
def test_format_duration(ms, expected):
    assert format_duration(ms) == expected


def test_metrics_do_not_mutate_input(interactions):
    before = interactions.copy()
    summary_metrics(interactions)
    agent_performance(interactions)
    queue_distribution(interactions)
    wrap_up_distribution(interactions)
    pd.testing.assert_frame_equal(interactions, before)


def test_queue_percentages_round_each_queue(interactions):
    queues = queue_distribution(interactions)
    total = queues["interactions"].sum()
    for count, pct in zip(queues["interactions"], queues["percentage"]):
        assert pct == round_half_up(100 * count / total)
    # 37.5 + 37.5 + 25 rounds to 38 + 38 + 25
    assert queues["percentage"].sum() == 101

import pandas as pd
import pytest

from genesys_dashboard.store import InteractionStore, InvalidInteractionData, validate_interactions


@pytest.fixture
def store():
    return InteractionStore()


def test_insert_assigns_sequential_ids(store, make_interaction):
    first = store.insert_many([make_interaction(conversation_id="a"), make_interaction(conversation_id="b")])
    second = store.insert(make_interaction(conversation_id="c"))
    assert first["id"].tolist() == [1, 2]
    assert second["id"].tolist() == [3]
    assert len(store) == 3


def test_supplied_ids_are_ignored(store, make_interaction):
    created = store.insert(make_interaction(id=99))
    assert created["id"].tolist() == [1]


def test_clear_resets_id_sequence(store, make_interaction):
    store.insert_many([make_interaction(), make_interaction()])
    store.clear()
    assert len(store) == 0
    assert store.list_all().empty
    assert store.insert(make_interaction())["id"].tolist() == [1]


def test_list_all_is_newest_first(store, make_interaction):
    store.insert_many(
        [
            make_interaction(conversation_id="old", start_time="2025-06-20T09:00:00"),
            make_interaction(conversation_id="new", start_time="2025-06-25T09:00:00"),
            make_interaction(conversation_id="mid", start_time="2025-06-22T09:00:00"),
        ]
    )
    assert store.list_all()["conversation_id"].tolist() == ["new", "mid", "old"]


def test_uploads_append(store, interactions):
    store.insert_many(interactions)
    store.insert_many(interactions)
    assert len(store) == 2 * len(interactions)
    assert store.list_all()["id"].nunique() == 2 * len(interactions)


def test_between_filters_on_start_time(store, interactions):
    store.insert_many(interactions)
    out = store.between("2025-06-24T00:00:00", "2025-06-24T23:59:59")
    assert sorted(out["conversation_id"]) == ["c5", "c6"]


def test_by_queue_and_agent_are_substring_matches(store, interactions):
    store.insert_many(interactions)
    assert sorted(store.by_queue("SALES")["conversation_id"]) == ["c1", "c2", "c8"]
    assert sorted(store.by_agent("smith")["conversation_id"]) == ["c3", "c7"]


def test_missing_required_field_is_rejected(store, make_interaction):
    record = make_interaction()
    del record["agent"]
    with pytest.raises(InvalidInteractionData) as excinfo:
        store.insert(record)
    assert "agent is required" in excinfo.value.errors
    assert len(store) == 0


def test_blank_required_field_is_rejected(make_interaction):
    with pytest.raises(InvalidInteractionData) as excinfo:
        validate_interactions([make_interaction(), make_interaction(queue="  ")])
    assert excinfo.value.errors == ["row 2: queue is required"]


def test_bad_timestamp_and_negative_duration_are_rejected(make_interaction):
    with pytest.raises(InvalidInteractionData) as excinfo:
        validate_interactions([make_interaction(start_time="not a date", duration=-1)])
    errors = excinfo.value.errors
    assert "row 1: start_time is not a valid timestamp" in errors
    assert "row 1: duration must be a non-negative number" in errors


def test_non_mapping_entries_are_rejected():
    with pytest.raises(InvalidInteractionData):
        validate_interactions(["not a record"])


def test_validation_normalizes_optional_fields(make_interaction):
    df = validate_interactions([make_interaction(wrap_up="  ", flow=None)])
    assert pd.isna(df.iloc[0]["wrap_up"])
    assert pd.isna(df.iloc[0]["flow"])
    assert df.iloc[0]["start_time"] == pd.Timestamp("2025-06-23 07:00")


def test_timezone_aware_timestamps_become_naive(make_interaction):
    df = validate_interactions([make_interaction(start_time="2025-06-23T07:00:00Z")])
    assert df["start_time"].dt.tz is None
    assert df.iloc[0]["start_time"] == pd.Timestamp("2025-06-23 07:00")


def test_failed_insert_leaves_store_unchanged(store, make_interaction):
    store.insert(make_interaction())
    with pytest.raises(InvalidInteractionData):
        store.insert_many([make_interaction(), make_interaction(customer="")])
    assert len(store) == 1
    assert store.insert(make_interaction())["id"].tolist() == [2]

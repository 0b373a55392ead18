import pytest

from genesys_dashboard.records import normalize_rows


def source_row(**overrides):
    row = {
        "Conversation ID": "abc123",
        "Date": "6/23/25 07:00 AM",
        "End Date": "6/23/25 07:05 AM",
        "Users": "Jane Doe;John Smith",
        "Remote": "+15551234567",
        "Queue": "Q_SUPPORT;Q_BACKUP",
        "Media Type": "voice",
        "Direction": "Inbound",
        "Duration": "300000",
        "Wrap-up": "RESOLVED;FOLLOWUP",
        "Flow": "Main IVR",
        "ANI": "tel:+15551234567",
        "DNIS": "tel:+18005550100",
    }
    row.update(overrides)
    return row


@pytest.fixture
def example_row():
    return source_row()


@pytest.fixture
def make_row():
    return source_row


def interaction(**overrides):
    """A canonical interaction record as the store and API accept it."""
    record = {
        "conversation_id": "c-1",
        "agent": "Jane Doe",
        "customer": "+15551234567",
        "queue": "Q_SUPPORT",
        "media_type": "voice",
        "direction": "Inbound",
        "duration": 300000,
        "wrap_up": "RESOLVED",
        "flow": "Main IVR",
        "start_time": "2025-06-23T07:00:00",
        "end_time": "2025-06-23T07:05:00",
        "ani": None,
        "dnis": None,
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_interaction():
    return interaction


@pytest.fixture
def interactions():
    """Eight interactions across three queues, three agents and two media types."""
    rows = [
        source_row(**{"Conversation ID": "c1", "Users": "Alice", "Queue": "Q_SALES", "Media Type": "voice",
                      "Date": "6/23/25 07:10 AM", "End Date": "6/23/25 07:20 AM", "Duration": "600000",
                      "Wrap-up": "SALE", "Remote": "Bob"}),
        source_row(**{"Conversation ID": "c2", "Users": "Alice", "Queue": "Q_SALES", "Media Type": "message",
                      "Date": "6/23/25 08:00 AM", "End Date": "6/23/25 08:02 AM", "Duration": "120000",
                      "Wrap-up": "", "Remote": "carol"}),
        source_row(**{"Conversation ID": "c3", "Users": "bob smith", "Queue": "Q_SUPPORT", "Media Type": "voice",
                      "Date": "6/23/25 09:30 AM", "End Date": "6/23/25 09:35 AM", "Duration": "300000",
                      "Wrap-up": "RESOLVED", "Remote": "Dave"}),
        source_row(**{"Conversation ID": "c4", "Users": "Carlos", "Queue": "Q_SUPPORT", "Media Type": "message",
                      "Date": "6/23/25 09:45 AM", "End Date": "6/23/25 09:50 AM", "Duration": "60000",
                      "Wrap-up": "RESOLVED;FOLLOWUP", "Remote": "erin"}),
        source_row(**{"Conversation ID": "c5", "Users": "Alice", "Queue": "Q_SUPPORT", "Media Type": "voice",
                      "Date": "6/24/25 01:15 PM", "End Date": "6/24/25 01:30 PM", "Duration": "900000",
                      "Wrap-up": "FOLLOWUP", "Remote": "Frank"}),
        source_row(**{"Conversation ID": "c6", "Users": "Carlos", "Queue": "Q_BILLING", "Media Type": "voice",
                      "Date": "6/24/25 06:30 PM", "End Date": "6/24/25 06:40 PM", "Duration": "0",
                      "Wrap-up": "", "Remote": "grace"}),
        source_row(**{"Conversation ID": "c7", "Users": "bob smith", "Queue": "Q_BILLING", "Media Type": "voice",
                      "Date": "6/25/25 10:00 PM", "End Date": "6/25/25 10:05 PM", "Duration": "240000",
                      "Wrap-up": "REFUND", "Remote": "heidi"}),
        source_row(**{"Conversation ID": "c8", "Users": "Alice", "Queue": "Q_SALES", "Media Type": "voice",
                      "Date": "6/25/25 07:00 AM", "End Date": "6/25/25 07:01 AM", "Duration": "60000",
                      "Wrap-up": "SALE", "Remote": "ivan"}),
    ]
    return normalize_rows(rows).interactions


@pytest.fixture
def empty_frame():
    return normalize_rows([]).interactions

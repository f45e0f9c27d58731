"""
Tests for StatusCounter.
"""

from config.settings import LEAD_STATUS_DEFAULT_COLOR, LEAD_STATUS_COLORS
from src.processing.status_counter import StatusCounter, StatusRecord, count_statuses


def test_count_per_status():
    records = [StatusRecord("nouveau"), StatusRecord("nouveau"), StatusRecord("qualifie")]

    assert StatusCounter().count(records) == {"nouveau": 2, "qualifie": 1}


def test_order_is_first_occurrence():
    records = [StatusRecord(s) for s in ["perdu", "nouveau", "perdu", "accepte"]]

    assert list(StatusCounter().count(records)) == ["perdu", "nouveau", "accepte"]


def test_unknown_and_empty_statuses_are_kept():
    rows = [{"statut": "archive"}, {"statut": None}, {"statut": ""}, {}]

    counts = count_statuses(rows)

    assert counts == {"archive": 1, "Non défini": 3}


def test_empty_input():
    assert StatusCounter().count([]) == {}
    assert count_statuses(None) == {}


def test_to_dataframe_uses_fallback_color():
    df = StatusCounter.to_dataframe({"nouveau": 3, "archive": 1})

    assert list(df["name"]) == ["nouveau", "archive"]
    assert df.iloc[0]["color"] == LEAD_STATUS_COLORS["nouveau"]
    assert df.iloc[1]["color"] == LEAD_STATUS_DEFAULT_COLOR


def test_to_dataframe_empty():
    df = StatusCounter.to_dataframe({})
    assert df.empty
    assert list(df.columns) == ["name", "value", "color"]

"""Tests for table snapshots (stored form of a grid)."""

from datetime import datetime, timezone

import pytest

from revenuegrid.utils.snapshot import TableSnapshot, MalformedSnapshotException


def stored_snapshot(**overrides) -> dict:
    snapshot = dict(
        table_name="revenue",
        columns=["Jan", "Feb"],
        row_labels=["Monthly Fee", "Customer A"],
        data={
            "Monthly Fee": {"Jan": "100", "Feb": "100"},
            "Customer A": {"Jan": "50"},
        },
        updated_at="2024-03-01T10:15:00.123456+00:00",
    )
    snapshot.update(overrides)

    return snapshot


def test_from_dict():
    snapshot = TableSnapshot.from_dict(stored_snapshot())

    assert snapshot.table_name == "revenue"
    assert snapshot.column_labels == ["Jan", "Feb"]
    assert snapshot.row_labels == ["Monthly Fee", "Customer A"]
    assert snapshot.cells["Customer A"] == {"Jan": "50"}
    assert snapshot.updated_at == datetime(2024, 3, 1, 10, 15, 0, 123456, tzinfo=timezone.utc)


def test_from_dict_accepts_z_suffix():
    snapshot = TableSnapshot.from_dict(stored_snapshot(updated_at="2024-03-01T10:15:00Z"))

    assert snapshot.updated_at.tzinfo is not None


def test_from_dict_stringifies_values():
    snapshot = TableSnapshot.from_dict(
        stored_snapshot(data={"Customer A": {"Jan": 50, "Feb": None}})
    )

    assert snapshot.cells == {"Customer A": {"Jan": "50", "Feb": ""}}


@pytest.mark.parametrize(
    "overrides",
    [
        dict(columns=None),
        dict(row_labels=None),
        dict(data=None),
        dict(columns="Jan,Feb"),
        dict(row_labels=["Row 1", 2]),
        dict(row_labels=["Row 1", "Row 1"]),
        dict(data=["Row 1"]),
        dict(data={"Row 1": "100"}),
        dict(updated_at="yesterday"),
    ],
)
def test_from_dict_rejects_malformed(overrides):
    with pytest.raises(MalformedSnapshotException):
        TableSnapshot.from_dict(stored_snapshot(**overrides))


def test_from_dict_rejects_non_mapping():
    with pytest.raises(MalformedSnapshotException):
        TableSnapshot.from_dict(["revenue"])


def test_to_grid_drops_unknown_labels():
    snapshot = TableSnapshot.from_dict(
        stored_snapshot(data={"Customer A": {"Jan": "50", "Mar": "7"}, "Gone": {"Jan": "1"}})
    )

    grid = snapshot.to_grid()

    assert grid.cells == {"Monthly Fee": {}, "Customer A": {"Jan": "50"}}
    assert grid.get_cell("Monthly Fee", "Jan") == ""


def test_dict_round_trip():
    snapshot = TableSnapshot.from_dict(stored_snapshot())
    again = TableSnapshot.from_dict(snapshot.to_dict())

    assert again == snapshot


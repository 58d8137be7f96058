"""Tests for spreadsheet style column naming."""

import pytest

from revenuegrid.utils.column_names import (
    column_index,
    column_name,
    generate_column_name,
    is_column_name,
    next_column_name,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("A", "B"),
        ("C", "D"),
        ("Y", "Z"),
        ("Z", "AA"),
        ("AA", "AB"),
        ("AZ", "BA"),
        ("BZ", "CA"),
        ("ZZ", "AAA"),
        ("AZZ", "BAA"),
        ("ZZZ", "AAAA"),
    ],
)
def test_next_column_name(name, expected):
    assert next_column_name(name) == expected


def test_index_and_name_agree_over_long_sequence():
    """Walking the sequence one step at a time matches the direct conversion."""
    name = "A"

    for index in range(2000):
        assert column_name(index) == name
        assert column_index(name) == index
        name = next_column_name(name)


def test_known_indices():
    assert column_index("A") == 0
    assert column_index("Z") == 25
    assert column_index("AA") == 26
    assert column_index("ZZ") == 701
    assert column_index("AAA") == 702


def test_invalid_names():
    assert not is_column_name("Dec")
    assert not is_column_name("")
    assert not is_column_name("A1")

    with pytest.raises(ValueError):
        column_index("Jan")

    with pytest.raises(ValueError):
        column_name(-1)


def test_generate_after_letters():
    assert generate_column_name(["A", "B", "C"]) == "D"
    assert generate_column_name(["X", "Y", "Z"]) == "AA"


def test_generate_without_columns():
    assert generate_column_name([]) == "A"


def test_generate_after_month_labels_starts_sequence():
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    assert generate_column_name(months) == "A"


def test_generate_skips_existing_names():
    """The generated name never collides with an existing column."""
    assert generate_column_name(["B", "C", "A"]) == "D"
    assert generate_column_name(["A", "Dec"]) == "B"
    assert generate_column_name(["AA", "Z"]) == "AB"

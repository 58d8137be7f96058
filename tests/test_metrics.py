"""Tests for the derived metrics."""

import random

import pytest

from revenuegrid.utils.grid import Grid
from revenuegrid.utils.metrics import compute_metrics


def test_revenue_scenario():
    grid = Grid(
        row_labels=["Monthly Fee", "Customer A"],
        column_labels=["Jan", "Feb"],
        cells={
            "Monthly Fee": {"Jan": "100", "Feb": "100"},
            "Customer A": {"Jan": "50", "Feb": ""},
        },
    )

    metrics = compute_metrics(grid)

    assert metrics.row_totals == {"Monthly Fee": 200.0, "Customer A": 50.0}
    assert metrics.column_totals == {"Jan": 150.0, "Feb": 100.0}
    assert metrics.grand_total == 250.0
    assert metrics.total_revenue == 250.0
    assert metrics.recurring_income == 200.0
    assert metrics.customer_count == 2


def test_non_numeric_text_counts_as_zero():
    grid = Grid(
        row_labels=["Row 1", "Row 2"],
        column_labels=["A", "B"],
        cells={
            "Row 1": {"A": "abc", "B": "10"},
            "Row 2": {"A": "1,5", "B": "inf"},
        },
    )

    metrics = compute_metrics(grid)

    assert metrics.row_totals == {"Row 1": 10.0, "Row 2": 0.0}
    assert metrics.column_totals == {"A": 0.0, "B": 10.0}
    assert metrics.grand_total == 10.0
    # Text still makes a row count as a customer
    assert metrics.customer_count == 2


def test_decimal_negative_and_padded_values():
    grid = Grid(
        row_labels=["Row 1"],
        column_labels=["A", "B", "C"],
        cells={"Row 1": {"A": "12.5", "B": "-2.5", "C": " 5 "}},
    )

    assert compute_metrics(grid).row_totals == {"Row 1": 15.0}


def test_empty_grid_is_all_zero():
    metrics = compute_metrics(Grid())

    assert metrics.total_revenue == 0
    assert metrics.customer_count == 0
    assert metrics.recurring_income == 0
    assert metrics.grand_total == 0
    assert metrics.row_totals == {}


def test_rows_without_columns():
    metrics = compute_metrics(Grid(row_labels=["Row 1", "Row 2"]))

    assert metrics.row_totals == {"Row 1": 0.0, "Row 2": 0.0}
    assert metrics.grand_total == 0
    assert metrics.customer_count == 0


def test_default_grid_has_no_customers():
    metrics = compute_metrics(Grid.get_default(10, ["Jan", "Feb", "Mar"]))

    assert metrics.customer_count == 0
    assert metrics.grand_total == 0
    assert set(metrics.row_totals.values()) == {0.0}


def test_empty_row_excluded_from_customers():
    grid = Grid.get_default(3, ["Jan"]).set_cell("Row 2", "Jan", "5")
    metrics = compute_metrics(grid)

    assert metrics.customer_count == 1
    assert metrics.row_totals["Row 1"] == 0.0


def test_recurring_income_follows_first_row():
    grid = Grid.get_default(2, ["Jan"]).set_cell("Row 1", "Jan", "30").set_cell("Row 2", "Jan", "70")

    assert compute_metrics(grid).recurring_income == 30.0
    # Deleting the first row moves the convention to the next row
    assert compute_metrics(grid.delete_row("Row 1")).recurring_income == 70.0


@pytest.mark.parametrize("seed", range(5))
def test_row_and_column_totals_agree(seed):
    rng = random.Random(seed)
    grid = Grid.get_default(rng.randint(1, 15), [f"C{i}" for i in range(rng.randint(1, 12))])

    for row in grid.row_labels:
        for col in grid.column_labels:
            choice = rng.random()

            if choice < 0.6:
                grid = grid.set_cell(row, col, str(round(rng.uniform(-1000, 1000), 2)))
            elif choice < 0.7:
                grid = grid.set_cell(row, col, "n/a")

    metrics = compute_metrics(grid)

    assert sum(metrics.row_totals.values()) == pytest.approx(metrics.grand_total)
    assert sum(metrics.column_totals.values()) == pytest.approx(metrics.grand_total)
    assert metrics.total_revenue == metrics.grand_total

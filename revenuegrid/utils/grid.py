from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from .column_names import generate_column_name


Cells = Dict[str, Dict[str, str]]


@dataclass
class Grid:
    """
    Labeled 2D table of text values.

    A Grid is handled as a value: every edit returns a Grid and an edit that
    changes nothing returns the same object, so callers can compare with `is`.
    """
    row_labels: List[str] = field(default_factory=list)
    column_labels: List[str] = field(default_factory=list)

    # NOTE: sparse, a missing cell equals ""
    cells: Cells = field(default_factory=dict)

    @staticmethod
    def get_default(row_count: int, column_labels: List[str]) -> "Grid":
        row_labels = [f"Row {i + 1}" for i in range(row_count)]

        return Grid(
            row_labels=row_labels,
            column_labels=list(column_labels),
            cells={row: {col: "" for col in column_labels} for row in row_labels},
        )

    @staticmethod
    def from_labels(row_labels: List[str], column_labels: List[str], cells: dict) -> "Grid":
        # Only keep cells that belong to a known row and column
        columns = set(column_labels)

        clean_cells = {}

        for row in row_labels:
            row_cells = cells.get(row) or {}

            clean_cells[row] = {
                col: "" if value is None else str(value)
                for col, value in row_cells.items()
                if col in columns
            }

        return Grid(
            row_labels=list(row_labels),
            column_labels=list(column_labels),
            cells=clean_cells,
        )

    def copy(self) -> "Grid":
        return Grid(
            row_labels=list(self.row_labels),
            column_labels=list(self.column_labels),
            cells={row: dict(values) for row, values in self.cells.items()},
        )

    # Cells
    def get_cell(self, row: str, col: str) -> str:
        return self.cells.get(row, {}).get(col, "")

    def set_cell(self, row: str, col: str, value: str) -> "Grid":
        if row not in self.row_labels or col not in self.column_labels:
            return self

        if self.cells.get(row, {}).get(col) == value:
            return self

        grid = self.copy()
        grid.cells.setdefault(row, {})[col] = value

        return grid

    # Structure
    def add_row(self) -> "Grid":
        count = len(self.row_labels)
        label = f"Row {count + 1}"

        # NOTE: after renames or deletes "Row n+1" can already be taken
        while label in self.row_labels:
            count += 1
            label = f"Row {count + 1}"

        grid = self.copy()
        grid.row_labels.append(label)
        grid.cells[label] = {col: "" for col in grid.column_labels}

        return grid

    def add_column(self) -> "Grid":
        label = generate_column_name(self.column_labels)

        grid = self.copy()
        grid.column_labels.append(label)

        for row in grid.row_labels:
            grid.cells.setdefault(row, {})[label] = ""

        return grid

    def rename_row(self, old_label: str, new_label: str) -> "Grid":
        if old_label == new_label:
            return self

        if old_label not in self.row_labels:
            return self

        # Would create a duplicate row label
        if new_label in self.row_labels:
            return self

        grid = self.copy()
        grid.row_labels[grid.row_labels.index(old_label)] = new_label

        if old_label in grid.cells:
            grid.cells[new_label] = grid.cells.pop(old_label)

        return grid

    def delete_row(self, label: str) -> "Grid":
        if label not in self.row_labels:
            return self

        grid = self.copy()
        grid.row_labels.remove(label)
        grid.cells.pop(label, None)

        return grid

    # Views
    def column_headers(self, year: int) -> List[str]:
        return [f"{col} '{year}" for col in self.column_labels]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                col: [self.get_cell(row, col) for row in self.row_labels]
                for col in self.column_labels
            },
            index=pd.Index(self.row_labels, dtype=object),
            columns=pd.Index(self.column_labels, dtype=object),
            dtype=object,
        )

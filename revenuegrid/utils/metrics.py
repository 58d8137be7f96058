from dataclasses import dataclass, field
from typing import Dict

import numpy as np
import pandas as pd

from .grid import Grid


@dataclass
class DerivedMetrics:
    total_revenue: float = 0.0
    customer_count: int = 0
    recurring_income: float = 0.0

    row_totals: Dict[str, float] = field(default_factory=dict)
    column_totals: Dict[str, float] = field(default_factory=dict)
    grand_total: float = 0.0


def numeric_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Permissive numeric coercion, anything that is not a finite number counts as 0"""
    numeric = df.apply(
        lambda column: pd.to_numeric(column.astype(str).str.strip(), errors="coerce")
    )

    return numeric.replace([np.inf, -np.inf], np.nan).fillna(0.0).astype(float)


def compute_metrics(grid: Grid) -> DerivedMetrics:
    if len(grid.row_labels) == 0:
        return DerivedMetrics(
            column_totals={col: 0.0 for col in grid.column_labels},
        )

    df = grid.to_dataframe()

    if len(grid.column_labels) == 0:
        return DerivedMetrics(
            row_totals={row: 0.0 for row in grid.row_labels},
        )

    numeric = numeric_frame(df)

    row_totals = {row: float(total) for row, total in numeric.sum(axis=1).items()}
    column_totals = {col: float(total) for col, total in numeric.sum(axis=0).items()}

    grand_total = float(sum(column_totals.values()))

    # Rows with at least one non-empty cell are counted as customers
    customer_count = int((df != "").any(axis=1).sum())

    # NOTE: the first row holds the recurring (monthly) figures by convention
    recurring_income = row_totals[grid.row_labels[0]]

    return DerivedMetrics(
        total_revenue=grand_total,
        customer_count=customer_count,
        recurring_income=recurring_income,
        row_totals=row_totals,
        column_totals=column_totals,
        grand_total=grand_total,
    )

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .grid import Grid, Cells


class MalformedSnapshotException(Exception):
    pass


@dataclass
class TableSnapshot:
    table_name: str
    column_labels: list[str]
    row_labels: list[str]
    cells: Cells

    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def datetime_from_str(date_str: str) -> datetime:
        if date_str is None or date_str == "":
            return

        # NOTE: postgres sends "+00:00" offsets, older python versions choke on a trailing "Z"
        return datetime.fromisoformat(date_str.replace("Z", "+00:00"))

    @staticmethod
    def str_from_datetime(date: datetime) -> str:
        return date.isoformat()

    @staticmethod
    def from_dict(snapshot: dict) -> "TableSnapshot":
        """Builds a snapshot from its stored form, raises MalformedSnapshotException if unusable"""
        if not isinstance(snapshot, dict):
            raise MalformedSnapshotException("Snapshot is not a mapping")

        for key in ("table_name", "columns", "row_labels", "data"):
            if snapshot.get(key) is None:
                raise MalformedSnapshotException(f"Snapshot is missing '{key}'")

        columns = snapshot["columns"]
        row_labels = snapshot["row_labels"]
        data = snapshot["data"]

        for name, labels in (("columns", columns), ("row_labels", row_labels)):
            if not isinstance(labels, list) or not all(isinstance(l, str) for l in labels):
                raise MalformedSnapshotException(f"'{name}' is not a list of strings")

            if len(set(labels)) != len(labels):
                raise MalformedSnapshotException(f"'{name}' contains duplicate labels")

        if not isinstance(data, dict) or not all(
            isinstance(row, dict) for row in data.values()
        ):
            raise MalformedSnapshotException("'data' is not a mapping of rows")

        updated_at = snapshot.get("updated_at")

        if isinstance(updated_at, str):
            try:
                updated_at = TableSnapshot.datetime_from_str(updated_at)
            except ValueError:
                raise MalformedSnapshotException(f"Invalid 'updated_at' value '{updated_at}'")

        return TableSnapshot(
            table_name=snapshot["table_name"],
            column_labels=list(columns),
            row_labels=list(row_labels),
            cells={
                row: {col: "" if value is None else str(value) for col, value in values.items()}
                for row, values in data.items()
            },
            updated_at=updated_at if updated_at is not None else datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict:
        return dict(
            table_name=self.table_name,
            columns=list(self.column_labels),
            row_labels=list(self.row_labels),
            data={row: dict(values) for row, values in self.cells.items()},
            updated_at=TableSnapshot.str_from_datetime(self.updated_at),
        )

    def to_grid(self) -> Grid:
        return Grid.from_labels(
            row_labels=self.row_labels,
            column_labels=self.column_labels,
            cells=self.cells,
        )

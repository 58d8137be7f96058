import sqlite3 as sql

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..utils.sql import tables
from ..utils.snapshot import TableSnapshot, MalformedSnapshotException
from .store_controller import PollingStore, StoreException


logger = logging.getLogger(__name__)


class DBController(PollingStore):
    def __init__(self, db_location: str, poll_interval: float = 2.0):
        super().__init__(poll_interval=poll_interval)

        self.db_location = db_location

        try:
            with self.conn as conn:
                conn.execute(tables.create_excel_table_data_table)
                conn.commit()
        except sql.Error as e:
            raise StoreException(f"Database '{db_location}' could not be opened: {e}")

    @property
    def conn(self) -> sql.Connection:
        return sql.connect(self.db_location)

    def load(self, table_name: str) -> Optional[TableSnapshot]:
        try:
            with self.conn as conn:
                cursor = conn.execute(tables.find_excel_table_data, (table_name,))
                row = cursor.fetchone()
        except sql.Error as e:
            raise StoreException(f"Loading table '{table_name}' failed: {e}")

        if row is None:
            return

        name, row_labels, columns, data, updated_at = row

        try:
            return TableSnapshot.from_dict(
                dict(
                    table_name=name,
                    row_labels=json.loads(row_labels),
                    columns=json.loads(columns),
                    data=json.loads(data),
                    updated_at=updated_at,
                )
            )
        except ValueError:
            raise MalformedSnapshotException(f"Table '{table_name}' contains invalid json")

    def save(self, table_name, column_labels, row_labels, cells) -> TableSnapshot:
        now = datetime.now(timezone.utc)
        now_str = TableSnapshot.str_from_datetime(now)

        values = (
            json.dumps(list(row_labels)),
            json.dumps(list(column_labels)),
            json.dumps(cells),
        )

        try:
            with self.conn as conn:
                cursor = conn.execute(tables.find_excel_table_data_id, (table_name,))
                existing = cursor.fetchone()

                # Update if the table already exists, otherwise insert it
                if existing is not None:
                    conn.execute(
                        tables.update_excel_table_data,
                        (*values, now_str, existing[0]),
                    )
                else:
                    conn.execute(
                        tables.insert_excel_table_data,
                        (str(uuid.uuid4()), table_name, *values, now_str, now_str),
                    )

                conn.commit()
        except sql.Error as e:
            raise StoreException(f"Saving table '{table_name}' failed: {e}")

        logger.debug("Saved table '%s' to '%s'", table_name, self.db_location)

        return TableSnapshot(
            table_name=table_name,
            column_labels=list(column_labels),
            row_labels=list(row_labels),
            cells={row: dict(row_values) for row, row_values in cells.items()},
            updated_at=now,
        )

    def get_updated_at(self, table_name: str) -> Optional[str]:
        try:
            with self.conn as conn:
                cursor = conn.execute(tables.get_excel_table_data_updated_at, (table_name,))
                row = cursor.fetchone()
        except sql.Error as e:
            raise StoreException(f"Polling table '{table_name}' failed: {e}")

        if row is None:
            return

        return row[0]

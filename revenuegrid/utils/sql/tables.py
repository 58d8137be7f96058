from enum import Enum


class Tables(Enum):
    EXCEL_TABLE_DATA = "excel_table_data"


create_excel_table_data_table = f"""
CREATE TABLE IF NOT EXISTS {Tables.EXCEL_TABLE_DATA.value} (
    id text PRIMARY KEY,
    table_name text NOT NULL UNIQUE,
    row_labels text NOT NULL,
    columns text NOT NULL,
    data text NOT NULL,
    created_at text NOT NULL,
    updated_at text NOT NULL
)
"""
find_excel_table_data = f"""
SELECT table_name, row_labels, columns, data, updated_at
FROM {Tables.EXCEL_TABLE_DATA.value}
WHERE table_name=?
"""
find_excel_table_data_id = f"""
SELECT id
FROM {Tables.EXCEL_TABLE_DATA.value}
WHERE table_name=?
"""
get_excel_table_data_updated_at = f"""
SELECT updated_at
FROM {Tables.EXCEL_TABLE_DATA.value}
WHERE table_name=?
"""
insert_excel_table_data = f"""
INSERT INTO {Tables.EXCEL_TABLE_DATA.value}(id, table_name, row_labels, columns, data, created_at, updated_at)
VALUES(?,?,?,?,?,?,?)
"""
update_excel_table_data = f"""
UPDATE {Tables.EXCEL_TABLE_DATA.value}
SET row_labels=?,
    columns=?,
    data=?,
    updated_at=?
WHERE id=?
"""

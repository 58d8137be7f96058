import logging
from typing import Optional

from ..utils.snapshot import TableSnapshot, MalformedSnapshotException
from .store_controller import TableStore, StoreException


logger = logging.getLogger(__name__)


class CacheController(TableStore):
    """
    Write-through cache in front of a remote store.

    Saves go to the remote first and are mirrored into the local store,
    loads fall back to the local copy when the remote can not be reached.
    Change notifications only come from the remote.
    """
    def __init__(self, remote: TableStore, local: TableStore):
        self.remote = remote
        self.local = local

    def load(self, table_name: str) -> Optional[TableSnapshot]:
        try:
            snapshot = self.remote.load(table_name)
        except StoreException as e:
            cached = self._load_cached(table_name)

            if cached is None:
                raise

            logger.warning("Remote load of '%s' failed (%s), using the cached copy", table_name, e)
            return cached

        if snapshot is not None:
            self._mirror(snapshot)

        return snapshot

    def save(self, table_name, column_labels, row_labels, cells) -> TableSnapshot:
        snapshot = self.remote.save(table_name, column_labels, row_labels, cells)

        self._mirror(snapshot)

        return snapshot

    def subscribe(self, table_name, on_change):
        return self.remote.subscribe(table_name, on_change)

    def close(self) -> None:
        self.remote.close()
        self.local.close()

    def _load_cached(self, table_name: str) -> Optional[TableSnapshot]:
        try:
            return self.local.load(table_name)
        except (StoreException, MalformedSnapshotException):
            logger.exception("Reading the cached copy of '%s' failed", table_name)
            return

    def _mirror(self, snapshot: TableSnapshot) -> None:
        # NOTE: the cache is best effort, a failing cache never fails the remote operation
        try:
            self.local.save(
                snapshot.table_name,
                snapshot.column_labels,
                snapshot.row_labels,
                snapshot.cells,
            )
        except StoreException:
            logger.exception("Mirroring '%s' to the local cache failed", snapshot.table_name)

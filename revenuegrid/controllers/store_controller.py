import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..utils.grid import Cells
from ..utils.snapshot import TableSnapshot


logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class StoreException(Exception):
    pass


class TableStore:
    """
    Persistence contract for named tables.

    Notifications carry no payload, a subscriber has to load the full table again.
    """
    def load(self, table_name: str) -> Optional[TableSnapshot]:
        raise NotImplementedError("Method not implemented")

    def save(
        self,
        table_name: str,
        column_labels: List[str],
        row_labels: List[str],
        cells: Cells,
    ) -> TableSnapshot:
        raise NotImplementedError("Method not implemented")

    def subscribe(self, table_name: str, on_change: Callable[[], None]) -> Unsubscribe:
        raise NotImplementedError("Method not implemented")

    def close(self) -> None:
        pass


class Subscribers:
    """Thread safe registry of change callbacks per table"""
    def __init__(self):
        self._lock = threading.Lock()
        self._callbacks: Dict[str, List[Callable[[], None]]] = dict()

    def add(self, table_name: str, on_change: Callable[[], None]) -> Unsubscribe:
        with self._lock:
            self._callbacks.setdefault(table_name, []).append(on_change)

        def unsubscribe():
            with self._lock:
                callbacks = self._callbacks.get(table_name, [])

                if on_change in callbacks:
                    callbacks.remove(on_change)

                if len(callbacks) == 0:
                    self._callbacks.pop(table_name, None)

        return unsubscribe

    def tables(self) -> List[str]:
        with self._lock:
            return list(self._callbacks)

    def notify(self, table_name: str) -> None:
        with self._lock:
            callbacks = list(self._callbacks.get(table_name, []))

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change callback for table '%s' failed", table_name)


class ChangePollThread(threading.Thread):
    """
    Turns a store without push notifications into one with them.

    Checks the last change time of every subscribed table and notifies when it moved.
    """
    def __init__(
        self,
        subscribers: Subscribers,
        get_updated_at: Callable[[str], Optional[str]],
        interval: float,
    ):
        super().__init__()

        self.subscribers = subscribers
        self.get_updated_at = get_updated_at
        self.interval = interval

        self.last_seen: Dict[str, Optional[str]] = dict()
        self.stopped = threading.Event()

        self.daemon = True

    def run(self):
        while not self.stopped.wait(self.interval):
            self.poll()

    def poll(self) -> None:
        for table_name in self.subscribers.tables():
            try:
                updated_at = self.get_updated_at(table_name)
            except StoreException:
                # NOTE: try again on the next round
                logger.debug("Polling table '%s' failed", table_name)
                continue

            if table_name not in self.last_seen:
                # First look, nothing to compare against yet
                self.last_seen[table_name] = updated_at
                continue

            if self.last_seen[table_name] == updated_at:
                continue

            self.last_seen[table_name] = updated_at

            logger.debug("Table '%s' changed at %s", table_name, updated_at)
            self.subscribers.notify(table_name)

    def stop(self) -> None:
        self.stopped.set()


class PollingStore(TableStore):
    """Base for stores that detect outside changes by polling"""
    def __init__(self, poll_interval: float):
        self.poll_interval = poll_interval

        self.subscribers = Subscribers()
        self._poll_thread: ChangePollThread = None
        self._poll_lock = threading.Lock()

    def get_updated_at(self, table_name: str) -> Optional[str]:
        raise NotImplementedError("Method not implemented")

    def subscribe(self, table_name, on_change) -> Unsubscribe:
        unsubscribe = self.subscribers.add(table_name, on_change)

        with self._poll_lock:
            if self._poll_thread is None:
                self._poll_thread = ChangePollThread(
                    subscribers=self.subscribers,
                    get_updated_at=self.get_updated_at,
                    interval=self.poll_interval,
                )
                self._poll_thread.start()

        return unsubscribe

    def close(self) -> None:
        with self._poll_lock:
            if self._poll_thread is not None:
                self._poll_thread.stop()
                self._poll_thread = None


class MemoryStore(TableStore):
    """
    Keeps the tables in process.

    Every save notifies all subscribers of the table, the saving session included.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._tables: Dict[str, TableSnapshot] = dict()

        self.subscribers = Subscribers()

    def load(self, table_name: str) -> Optional[TableSnapshot]:
        with self._lock:
            snapshot = self._tables.get(table_name)

            return copy.deepcopy(snapshot)

    def save(self, table_name, column_labels, row_labels, cells) -> TableSnapshot:
        snapshot = TableSnapshot(
            table_name=table_name,
            column_labels=list(column_labels),
            row_labels=list(row_labels),
            cells=copy.deepcopy(cells),
            updated_at=datetime.now(timezone.utc),
        )

        with self._lock:
            self._tables[table_name] = snapshot

        self.subscribers.notify(table_name)

        return copy.deepcopy(snapshot)

    def subscribe(self, table_name, on_change) -> Unsubscribe:
        return self.subscribers.add(table_name, on_change)

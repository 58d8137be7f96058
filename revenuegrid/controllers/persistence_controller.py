import logging
import threading
from functools import partial
from typing import Callable, Optional, Tuple

from PySide6 import QtCore

from ..utils.configuration import GridDefaults
from ..utils.grid import Grid
from ..utils.session_status import SessionStatus
from ..utils.snapshot import TableSnapshot, MalformedSnapshotException
from .store_controller import TableStore, StoreException


logger = logging.getLogger(__name__)

# (snapshot, error message), exactly one of them is set unless the table does not exist
StoreResult = Tuple[Optional[TableSnapshot], Optional[str]]


def run_in_thread(job: Callable[[], None]) -> None:
    threading.Thread(target=job, daemon=True).start()


def run_inline(job: Callable[[], None]) -> None:
    job()


class PersistenceController(QtCore.QObject):
    """
    Loads and saves one named table for a session.

    All state lives on the thread of this object and only changes from timer
    timeouts and store completions, which arrive here as queued signals when the
    store ran on a worker thread. The resulting status is derived from that state:

        UNINITIALIZED -> LOADING -> IDLE/LOAD_FAILED
        IDLE -> PENDING_WRITE -> WRITING -> SETTLING -> IDLE
        IDLE -> RECONCILING -> IDLE

    While a write is in flight or settling the session is `updating`, no load is
    started during that time nor while edits are unsaved.
    """
    status_changed: QtCore.Signal = QtCore.Signal(*(object,), arguments=["status"])
    grid_loaded: QtCore.Signal = QtCore.Signal(*(object,), arguments=["grid"])
    saved: QtCore.Signal = QtCore.Signal(*(object,), arguments=["snapshot"])
    load_failed: QtCore.Signal = QtCore.Signal(*(str,), arguments=["message"])
    save_failed: QtCore.Signal = QtCore.Signal(*(str,), arguments=["message"])

    # Completions of store calls, emitted from whatever thread ran them
    _mount_loaded: QtCore.Signal = QtCore.Signal(*(object,), arguments=["result"])
    _reconcile_loaded: QtCore.Signal = QtCore.Signal(*(object,), arguments=["result"])
    _write_finished: QtCore.Signal = QtCore.Signal(*(object,), arguments=["result"])

    def __init__(
        self,
        store: TableStore,
        table_name: str,
        grid_defaults: GridDefaults,
        grid_callback: Callable[[], Grid],
        runner: Callable[[Callable[[], None]], None] = None,
        parent: QtCore.QObject = None,
    ):
        super().__init__(parent)

        self.store = store
        self.table_name = table_name
        self.grid_defaults = grid_defaults
        self.grid_callback = grid_callback
        self.runner = run_in_thread if runner is None else runner

        self._mounted = False
        self._loading = False
        self._load_failed = False
        self._reconciling = False
        self._writing = False
        self._write_queued = False
        self._dirty = False
        self._closed = False

        self._status = SessionStatus.UNINITIALIZED

        self.debounce_timer = QtCore.QTimer(self)
        self.debounce_timer.setSingleShot(True)
        self.debounce_timer.setInterval(grid_defaults.debounce_ms)
        self.debounce_timer.timeout.connect(self._on_debounce_timeout)

        self.settle_timer = QtCore.QTimer(self)
        self.settle_timer.setSingleShot(True)
        self.settle_timer.setInterval(grid_defaults.settle_ms)
        self.settle_timer.timeout.connect(self._on_settle_timeout)

        self._mount_loaded.connect(self._on_mount_loaded)
        self._reconcile_loaded.connect(self._on_reconcile_loaded)
        self._write_finished.connect(self._on_write_finished)

    # Status
    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def updating(self) -> bool:
        """Guard that is up from the start of a write until it settled"""
        return self._writing or self._write_queued or self.settle_timer.isActive()

    @property
    def has_pending_write(self) -> bool:
        return self.debounce_timer.isActive()

    @property
    def has_unsaved_changes(self) -> bool:
        """Edits that are not stored yet, pending or left over from a failed write"""
        return self._dirty or self.has_pending_write

    def can_reload(self) -> bool:
        if self._closed or not self._mounted:
            return False

        if self._loading or self._reconciling:
            return False

        return not self.updating and not self.has_unsaved_changes

    def _derive_status(self) -> SessionStatus:
        if self._closed:
            return SessionStatus.CLOSED
        if self._loading:
            return SessionStatus.LOADING
        if not self._mounted:
            return SessionStatus.UNINITIALIZED
        if self._writing:
            return SessionStatus.WRITING
        if self.debounce_timer.isActive():
            return SessionStatus.PENDING_WRITE
        if self.settle_timer.isActive() or self._write_queued:
            return SessionStatus.SETTLING
        if self._reconciling:
            return SessionStatus.RECONCILING
        if self._load_failed:
            return SessionStatus.LOAD_FAILED

        return SessionStatus.IDLE

    def _refresh_status(self) -> None:
        status = self._derive_status()

        if status == self._status:
            return

        logger.debug("Table '%s': %s -> %s", self.table_name, self._status.name, status.name)

        self._status = status
        self.status_changed.emit(status)

    # Store jobs, these run on the runner
    def _execute(self, job: Callable[[], StoreResult], done: QtCore.SignalInstance) -> None:
        result = job()

        try:
            done.emit(result)
        except RuntimeError:
            # NOTE: the controller was deleted while the job ran
            logger.debug("Dropping store result for '%s'", self.table_name)

    def _load_job(self) -> StoreResult:
        try:
            return self.store.load(self.table_name), None
        except (StoreException, MalformedSnapshotException) as e:
            logger.warning("Loading table '%s' failed: %s", self.table_name, e)
            return None, str(e)
        except Exception as e:
            logger.exception("Unexpected error while loading table '%s'", self.table_name)
            return None, str(e)

    def _write_job(self, grid: Grid) -> StoreResult:
        try:
            snapshot = self.store.save(
                self.table_name,
                grid.column_labels,
                grid.row_labels,
                grid.cells,
            )
        except StoreException as e:
            logger.warning("Saving table '%s' failed: %s", self.table_name, e)
            return None, str(e)
        except Exception as e:
            logger.exception("Unexpected error while saving table '%s'", self.table_name)
            return None, str(e)

        return snapshot, None

    # Loading
    def mount(self) -> None:
        if self._closed or self._mounted or self._loading:
            return

        logger.info("Loading table '%s'", self.table_name)

        self._loading = True
        self._refresh_status()

        self.runner(partial(self._execute, self._load_job, self._mount_loaded))

    def retry_load(self) -> bool:
        if self._closed or self._loading or not self._load_failed:
            return False

        # NOTE: local edits made after the failure win over a retry
        if self.updating or self.has_unsaved_changes:
            return False

        self._mounted = False
        self._load_failed = False

        self.mount()

        return True

    def _default_grid(self) -> Grid:
        return Grid.get_default(
            self.grid_defaults.default_rows,
            self.grid_defaults.default_columns,
        )

    @QtCore.Slot(object)
    def _on_mount_loaded(self, result: StoreResult) -> None:
        if self._closed:
            return

        snapshot, error = result

        self._loading = False
        self._mounted = True

        if error is not None:
            self._load_failed = True
            self.grid_loaded.emit(self._default_grid())
            self._refresh_status()
            self.load_failed.emit(error)
            return

        if snapshot is None:
            logger.info("Table '%s' does not exist yet, starting from the default grid", self.table_name)

            self.grid_loaded.emit(self._default_grid())
            self.schedule_write()
            return

        logger.info(
            "Loaded table '%s' (%d rows, %d columns)",
            self.table_name,
            len(snapshot.row_labels),
            len(snapshot.column_labels),
        )

        self.grid_loaded.emit(snapshot.to_grid())
        self._refresh_status()

    # Reconciling
    def request_reload(self) -> bool:
        """Reload the table because of an outside change, returns False when suppressed"""
        if not self.can_reload():
            logger.debug("Reload of '%s' suppressed (%s)", self.table_name, self._status.name)
            return False

        self._reconciling = True
        self._refresh_status()

        self.runner(partial(self._execute, self._load_job, self._reconcile_loaded))

        return True

    @QtCore.Slot(object)
    def _on_reconcile_loaded(self, result: StoreResult) -> None:
        self._reconciling = False

        if self._closed:
            return

        snapshot, error = result

        if error is not None:
            self._refresh_status()
            self.load_failed.emit(error)
            return

        # Edits were made or a write started while loading, the loaded snapshot is already outdated
        if self.updating or self.has_unsaved_changes:
            logger.debug("Discarding reload of '%s', local changes came in meanwhile", self.table_name)
            self._refresh_status()
            return

        if snapshot is None:
            self._refresh_status()
            return

        # NOTE: the reload replaces the whole grid
        self._load_failed = False

        logger.info("Reloaded table '%s' after an outside change", self.table_name)

        self.grid_loaded.emit(snapshot.to_grid())
        self._refresh_status()

    # Writing
    def schedule_write(self) -> None:
        if self._closed or not self._mounted:
            return

        self._dirty = True

        # Restarting the timer coalesces all changes within the quiet period
        self.debounce_timer.start()
        self._refresh_status()

    def flush(self) -> None:
        """Write pending changes now instead of waiting for the quiet period"""
        if self._closed or not self._dirty:
            return

        self.debounce_timer.stop()
        self._on_debounce_timeout()

    @QtCore.Slot()
    def _on_debounce_timeout(self) -> None:
        if self._writing:
            self._write_queued = True
            self._refresh_status()
            return

        self._start_write()

    def _start_write(self) -> None:
        grid = self.grid_callback().copy()

        self._writing = True
        self._write_queued = False
        self._dirty = False
        self.settle_timer.stop()
        self._refresh_status()

        logger.debug("Writing table '%s'", self.table_name)

        self.runner(partial(self._execute, partial(self._write_job, grid), self._write_finished))

    @QtCore.Slot(object)
    def _on_write_finished(self, result: StoreResult) -> None:
        self._writing = False

        snapshot, error = result

        if self._closed:
            if error is not None:
                logger.warning("Final write of '%s' failed: %s", self.table_name, error)

            if self._write_queued:
                self._start_write()

            return

        if error is not None:
            # NOTE: the edits are still unsaved, the next write or close sends them again
            self._dirty = True
            self.save_failed.emit(error)
        else:
            logger.info("Saved table '%s'", self.table_name)

            self._load_failed = False
            self.saved.emit(snapshot)

        if self._write_queued:
            self._start_write()
            return

        self.settle_timer.start()
        self._refresh_status()

    @QtCore.Slot()
    def _on_settle_timeout(self) -> None:
        self._refresh_status()

    # Teardown
    def close(self) -> None:
        if self._closed:
            return

        pending = self.has_unsaved_changes

        self._closed = True

        self.debounce_timer.stop()
        self.settle_timer.stop()

        # Best effort flush, nobody waits for it
        if pending and self._mounted:
            if self._writing:
                self._write_queued = True
            else:
                self._start_write()

        self._refresh_status()

        logger.info("Closed table '%s'", self.table_name)

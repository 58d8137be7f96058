import logging
from typing import Callable

from PySide6 import QtCore

from ...controllers.persistence_controller import PersistenceController
from ...controllers.reconcile_controller import ReconcileController
from ...controllers.store_controller import TableStore
from ..configuration import GridDefaults
from ..grid import Grid
from ..metrics import DerivedMetrics, compute_metrics
from ..session_status import SessionStatus


logger = logging.getLogger(__name__)


class SessionNotReadyException(Exception):
    pass


class TableSession(QtCore.QObject):
    """
    One open table: the grid, its metrics and the edits the view can make.

    Every edit recomputes the metrics and schedules a coalesced write.
    """
    def __init__(
        self,
        table_name: str,
        store: TableStore,
        grid_defaults: GridDefaults,
        runner: Callable[[Callable[[], None]], None] = None,
        parent: QtCore.QObject = None,
    ):
        super().__init__(parent)

        self.table_name = table_name

        self.grid = Grid()
        self.metrics = compute_metrics(self.grid)

        self.persistence = PersistenceController(
            store=store,
            table_name=table_name,
            grid_defaults=grid_defaults,
            grid_callback=lambda: self.grid,
            runner=runner,
            parent=self,
        )
        self.reconciler = ReconcileController(
            store=store,
            table_name=table_name,
            persistence=self.persistence,
            parent=self,
        )

        self.persistence.grid_loaded.connect(self._on_grid_loaded)
        self.persistence.status_changed.connect(self.status_changed)
        self.persistence.load_failed.connect(self.load_failed)
        self.persistence.save_failed.connect(self.save_failed)

    # Signals
    grid_changed: QtCore.Signal = QtCore.Signal(*(object,), arguments=["grid"])
    metrics_changed: QtCore.Signal = QtCore.Signal(*(object,), arguments=["metrics"])
    status_changed: QtCore.Signal = QtCore.Signal(*(object,), arguments=["status"])
    load_failed: QtCore.Signal = QtCore.Signal(*(str,), arguments=["message"])
    save_failed: QtCore.Signal = QtCore.Signal(*(str,), arguments=["message"])

    @property
    def status(self) -> SessionStatus:
        return self.persistence.status

    def on_metrics_change(self, callback: Callable[[DerivedMetrics], None]) -> Callable[[], None]:
        self.metrics_changed.connect(callback)

        return lambda: self.metrics_changed.disconnect(callback)

    # Lifecycle
    def mount(self) -> None:
        # NOTE: subscribe first so no outside change slips in between load and subscribe
        self.reconciler.start()
        self.persistence.mount()

    def retry_load(self) -> bool:
        return self.persistence.retry_load()

    def flush(self) -> None:
        self.persistence.flush()

    def close(self) -> None:
        self.reconciler.stop()
        self.persistence.close()

    # Cells
    def get_cell(self, row: str, col: str) -> str:
        return self.grid.get_cell(row, col)

    def set_cell(self, row: str, col: str, value: str) -> Grid:
        self._check_ready()

        return self._apply(self.grid.set_cell(row, col, value))

    # Structure
    def add_row(self) -> Grid:
        self._check_ready()

        return self._apply(self.grid.add_row())

    def add_column(self) -> Grid:
        self._check_ready()

        return self._apply(self.grid.add_column())

    def rename_row(self, old_label: str, new_label: str) -> Grid:
        self._check_ready()

        grid = self.grid.rename_row(old_label, new_label)

        if grid is self.grid and old_label != new_label and new_label in self.grid.row_labels:
            logger.info("Row '%s' not renamed, '%s' already exists", old_label, new_label)

        return self._apply(grid)

    def delete_row(self, label: str) -> Grid:
        self._check_ready()

        return self._apply(self.grid.delete_row(label))

    # Utils
    def _check_ready(self) -> None:
        if not self.status.is_ready():
            raise SessionNotReadyException(
                f"Table '{self.table_name}' can not be edited while {self.status.get_status_label().lower()}"
            )

    def _apply(self, grid: Grid) -> Grid:
        if grid is self.grid:
            return grid

        self._set_grid(grid)
        self.persistence.schedule_write()

        return grid

    def _set_grid(self, grid: Grid) -> None:
        self.grid = grid
        self.metrics = compute_metrics(grid)

        self.grid_changed.emit(grid)
        self.metrics_changed.emit(self.metrics)

    @QtCore.Slot(object)
    def _on_grid_loaded(self, grid: Grid) -> None:
        self._set_grid(grid)

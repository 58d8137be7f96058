import logging

from PySide6 import QtCore

from .persistence_controller import PersistenceController
from .store_controller import TableStore, Unsubscribe


logger = logging.getLogger(__name__)


class ReconcileController(QtCore.QObject):
    """
    Reloads the table when somebody else changed it.

    Store notifications may come from any thread, they are moved onto the
    thread of this object before the persistence controller is asked to reload.
    Notifications caused by our own writes arrive while the persistence
    controller is still updating, those are suppressed.
    """
    reload_started: QtCore.Signal = QtCore.Signal()
    notification_suppressed: QtCore.Signal = QtCore.Signal()

    _changed: QtCore.Signal = QtCore.Signal()

    def __init__(
        self,
        store: TableStore,
        table_name: str,
        persistence: PersistenceController,
        parent: QtCore.QObject = None,
    ):
        super().__init__(parent)

        self.store = store
        self.table_name = table_name
        self.persistence = persistence

        self._unsubscribe: Unsubscribe = None

        self.suppressed_count = 0

        self._changed.connect(self._on_changed)

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self.subscribed:
            return

        self._unsubscribe = self.store.subscribe(self.table_name, self._on_store_change)

    def stop(self) -> None:
        if not self.subscribed:
            return

        self._unsubscribe()
        self._unsubscribe = None

    def _on_store_change(self) -> None:
        # NOTE: can run on a store thread, only hop over to our own thread here
        try:
            self._changed.emit()
        except RuntimeError:
            logger.debug("Change notification for '%s' after teardown", self.table_name)

    @QtCore.Slot()
    def _on_changed(self) -> None:
        if not self.subscribed:
            return

        if self.persistence.request_reload():
            self.reload_started.emit()
            return

        self.suppressed_count += 1

        logger.debug("Suppressed change notification for '%s'", self.table_name)
        self.notification_suppressed.emit()

import logging
from typing import Callable, Dict

from PySide6 import QtCore

from ..controllers.store_controller import TableStore
from .configuration import Configuration
from .state_utils.table_session import TableSession


logger = logging.getLogger(__name__)


class State(QtCore.QObject):
    session_opened: QtCore.Signal = QtCore.Signal(*(object,), arguments=["session"])

    def __init__(
        self,
        configuration_callback: Callable[[], Configuration],
        store: TableStore,
        runner: Callable[[Callable[[], None]], None] = None,
    ):
        super().__init__()

        self.configuration_callback = configuration_callback
        self.store = store
        self.runner = runner

        self._sessions: Dict[str, TableSession] = dict()

    @property
    def configuration(self) -> Configuration:
        return self.configuration_callback()

    @property
    def sessions(self) -> Dict[str, TableSession]:
        return dict(self._sessions)

    def open_session(self, table_name: str = None) -> TableSession:
        if table_name is None:
            table_name = self.configuration.misc.table_name

        # NOTE: one session per table, opening it twice hands out the same one
        if table_name in self._sessions:
            return self._sessions[table_name]

        session = TableSession(
            table_name=table_name,
            store=self.store,
            grid_defaults=self.configuration.grid,
            runner=self.runner,
            parent=self,
        )
        self._sessions[table_name] = session

        session.mount()
        self.session_opened.emit(session)

        return session

    def close_session(self, table_name: str) -> None:
        session = self._sessions.pop(table_name, None)

        if session is None:
            return

        session.close()

    def close_all(self) -> None:
        for table_name in list(self._sessions):
            self.close_session(table_name)

import time

import pytest
from PySide6 import QtCore

from revenuegrid.controllers.persistence_controller import run_inline
from revenuegrid.controllers.store_controller import MemoryStore
from revenuegrid.utils.configuration import GridDefaults
from revenuegrid.utils.state_utils.table_session import TableSession


@pytest.fixture(scope="session")
def qapp():
    """Qt application object, needed for timers and queued signals."""
    app = QtCore.QCoreApplication.instance()

    if app is None:
        app = QtCore.QCoreApplication([])

    return app


def process_events(duration_ms: int = 0) -> None:
    """Run the Qt event loop for about `duration_ms`."""
    deadline = time.monotonic() + duration_ms / 1000

    while True:
        QtCore.QCoreApplication.processEvents(QtCore.QEventLoop.ProcessEventsFlag.AllEvents, 10)

        if time.monotonic() >= deadline:
            return

        time.sleep(0.005)


def wait_until(predicate, timeout_ms: int = 3000) -> bool:
    """Pump the event loop until `predicate()` holds, False on timeout."""
    deadline = time.monotonic() + timeout_ms / 1000

    while time.monotonic() < deadline:
        QtCore.QCoreApplication.processEvents(QtCore.QEventLoop.ProcessEventsFlag.AllEvents, 10)

        if predicate():
            return True

        time.sleep(0.005)

    return predicate()


@pytest.fixture
def grid_defaults():
    return GridDefaults(
        default_rows=3,
        default_columns=["Jan", "Feb", "Mar"],
        debounce_ms=50,
        settle_ms=50,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_session(qapp, store, grid_defaults):
    """Factory for mounted sessions on the shared memory store, I/O runs inline."""
    sessions = []

    def _make(table_name="revenue", runner=run_inline, session_store=None):
        session = TableSession(
            table_name=table_name,
            store=store if session_store is None else session_store,
            grid_defaults=grid_defaults,
            runner=runner,
        )
        session.mount()
        sessions.append(session)

        return session

    yield _make

    for session in sessions:
        session.close()

    process_events(20)

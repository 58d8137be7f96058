import logging

from PySide6 import QtCore

from .controllers.api_controller import APIController
from .controllers.cache_controller import CacheController
from .controllers.config_controller import ConfigController
from .controllers.db_controller import DBController
from .controllers.store_controller import TableStore, MemoryStore, StoreException
from .utils.configuration import Configuration, Persistence
from .utils.metrics import DerivedMetrics
from .utils.state import State
from .utils.state_utils.table_session import TableSession


logger = logging.getLogger(__name__)


def create_store(persistence: Persistence) -> TableStore:
    match persistence.backend:
        case "memory":
            store = MemoryStore()
        case "sqlite":
            store = DBController(persistence.db_location, poll_interval=persistence.poll_interval)
        case "api":
            if not persistence.has_api_credentials():
                raise StoreException("The api backend needs an url, a key and a table")

            store = APIController(persistence)
        case _:
            raise StoreException(f"Unknown backend '{persistence.backend}'")

    if persistence.has_cache():
        store = CacheController(
            remote=store,
            local=DBController(persistence.cache_location, poll_interval=persistence.poll_interval),
        )

    return store


class Application(QtCore.QCoreApplication):
    def __init__(self, configuration_path: str, argv: list = None):
        super().__init__([] if argv is None else argv)

        self.config_controller = ConfigController(configuration_path)
        self._configuration = self.config_controller.get_configuration()

        self.store = create_store(self._configuration.persistence)

        self.state = State(
            configuration_callback=self.get_configuration,
            store=self.store,
        )

        self.aboutToQuit.connect(self.shutdown)

    def get_configuration(self) -> Configuration:
        return self._configuration

    def start(self, table_name: str = None) -> TableSession:
        session = self.state.open_session(table_name)

        session.metrics_changed.connect(self._log_metrics)
        session.load_failed.connect(
            lambda message: logger.error("Loading '%s' failed: %s (retry with retry_load)", session.table_name, message)
        )
        session.save_failed.connect(
            lambda message: logger.error("Saving '%s' failed: %s", session.table_name, message)
        )

        return session

    @QtCore.Slot(object)
    def _log_metrics(self, metrics: DerivedMetrics) -> None:
        logger.info(
            "Total revenue %.2f, recurring income %.2f, %d customers",
            metrics.total_revenue,
            metrics.recurring_income,
            metrics.customer_count,
        )

    @QtCore.Slot()
    def shutdown(self) -> None:
        self.state.close_all()
        self.store.close()

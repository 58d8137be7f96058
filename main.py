import logging
import signal
import sys

from PySide6 import QtCore

from revenuegrid.application import Application

logger = logging.getLogger("revenuegrid")


def excepthook(cls, exception, traceback):
    logger.critical("An error occurred", exc_info=(cls, exception, traceback))


sys.excepthook = excepthook
app = Application("configuration.json", sys.argv)

logging.basicConfig(
    level=app.get_configuration().misc.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# NOTE: let Ctrl+C through, the Qt event loop does not give python a chance otherwise
signal.signal(signal.SIGINT, lambda *_: app.quit())
interrupt_timer = QtCore.QTimer()
interrupt_timer.timeout.connect(lambda: None)
interrupt_timer.start(200)

app.start(sys.argv[1] if len(sys.argv) > 1 else None)
sys.exit(app.exec())

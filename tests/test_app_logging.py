import logging
from logging.handlers import RotatingFileHandler
from types import SimpleNamespace

from flask import Flask

from src.mess_attendance.mess_attendance import main


def test_setup_logging_adds_each_handler_once(tmp_path):
    app = Flask(__name__)
    settings = SimpleNamespace(LOG_LEVEL="INFO", LOG_FILE=str(tmp_path / "logs" / "mess.log"))
    package_logger = logging.getLogger(main.__package__)
    before = list(package_logger.handlers)

    try:
        main.setup_logging(app, settings)
        main.setup_logging(app, settings)

        file_handlers = [h for h in package_logger.handlers if isinstance(h, RotatingFileHandler)]
        consoles = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
        assert len(file_handlers) == 1
        assert len(consoles) == 1
        assert app.logger.handlers.count(file_handlers[0]) == 1
        assert (tmp_path / "logs" / "mess.log").exists()
    finally:
        for handler in package_logger.handlers[:]:
            if handler not in before:
                package_logger.removeHandler(handler)
                handler.close()

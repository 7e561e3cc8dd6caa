from __future__ import annotations

import importlib
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def setup_logging(app: Flask, settings: Any) -> None:
    """Console logging always; a rotating log file outside debug/testing."""
    level = getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    package_logger = logging.getLogger(__package__)
    package_logger.setLevel(level)

    # FileHandler subclasses StreamHandler, so match the exact type
    if not any(type(h) is logging.StreamHandler for h in package_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    log_file = getattr(settings, "LOG_FILE", None)
    if log_file and not app.debug and not app.testing:
        log_path = os.path.abspath(log_file)
        file_handler = next(
            (h for h in package_logger.handlers
             if isinstance(h, RotatingFileHandler) and h.baseFilename == log_path),
            None,
        )
        if file_handler is None:
            os.makedirs(os.path.dirname(log_path), exist_ok=True)
            file_handler = RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            package_logger.addHandler(file_handler)
        if file_handler not in app.logger.handlers:
            app.logger.addHandler(file_handler)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(app, settings)

    if container is None:
        container = build_container(settings=settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.conn is not None:
            apply_schema(container.conn, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    register_attendance(app, container)

    @app.route("/health")
    def health_check():
        return jsonify({"status": "healthy", "service": "Mess Attendance"})

    logger.info("Mess attendance app started with settings=%s", settings_module)
    return app

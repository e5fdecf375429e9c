from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_MAX_DISTANCE_METERS, DEFAULT_SESSION_MINUTES
from .database.bootstrap import apply_schema, list_tables
from .enrollments.controller import register as register_enrollments
from .sessions.controller import register as register_sessions
from .stats.controller import register as register_stats

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Container | None = None) -> Flask:
    """Build the Flask app; tests pass a pre-built container with in-memory repositories."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            default_session_minutes=getattr(settings, "DEFAULT_SESSION_MINUTES", DEFAULT_SESSION_MINUTES),
            max_distance_meters=getattr(settings, "MAX_DISTANCE_METERS", DEFAULT_MAX_DISTANCE_METERS),
        )

    register_error_handlers(app)
    register_sessions(app, container)
    register_enrollments(app, container)
    register_attendance(app, container)
    register_stats(app, container)

    return app

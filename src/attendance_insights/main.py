from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container, build_memory_container
from .database.bootstrap import apply_schema, list_tables
from .insights.controller import register as register_insights
from .overrides.controller import register as register_overrides
from .templates.controller import register as register_templates
from .timetables.controller import register as register_timetables

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    min_required = float(getattr(settings, "MIN_REQUIRED_PERCENT", 75))
    workers = int(getattr(settings, "INSIGHTS_WORKERS", 1))

    if container is None:
        backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
        if backend == "memory":
            logger.info("settings=%s storage=memory", settings_module)
            container = build_memory_container(min_required_percent=min_required, insights_workers=workers)
        else:
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
                schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
                apply_schema(db_config, schema_path=schema_path)
                logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
            container = build_container(
                db_config=db_config,
                min_required_percent=min_required,
                insights_workers=workers,
            )

    app.extensions["attendance_insights"] = container

    register_timetables(app, container)
    register_overrides(app, container)
    register_attendance(app, container)
    register_insights(app, container)
    register_templates(app, container)

    return app

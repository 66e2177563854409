from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .core.constants import DEFAULT_TICK_TIMEOUT_SECONDS, DEFAULT_TIME_ZONE, DEFAULT_WORKERS
from .reminders.controller import register as register_break_reminders
from .reminders.scheduler import start_scheduler

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["ADMIN_TOKEN"] = getattr(settings, "ADMIN_TOKEN", "")
    app.config["TIME_ZONE"] = getattr(settings, "TIME_ZONE", DEFAULT_TIME_ZONE)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s tz=%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        app.config["TIME_ZONE"],
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        time_zone=app.config["TIME_ZONE"],
        workers=int(getattr(settings, "REMINDER_WORKERS", DEFAULT_WORKERS)),
        tick_timeout=float(getattr(settings, "REMINDER_TICK_TIMEOUT_SECONDS", DEFAULT_TICK_TIMEOUT_SECONDS)),
    )

    register_break_reminders(app, container)
    app.extensions["break_reminder_scheduler"] = start_scheduler(container.reminder_service, settings)

    return app

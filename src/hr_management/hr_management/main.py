from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging import setup_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, bootstrap_identity, list_tables
from .attendance.controller import register as register_attendance
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .users.controller import register as register_users
from .web.errors import register as register_error_handlers

logger = structlog.get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def load_settings(settings_module: Optional[str] = None) -> dict:
    module = importlib.import_module(settings_module or get_settings_module())
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings(settings_module)

    setup_logging(settings.get("LOG_LEVEL", "INFO"), json=bool(settings.get("LOG_JSON", True)))

    app = Flask(__name__)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))

    if container is None:
        db_config = settings["DB_CONFIG"]
        logger.info(
            "app_starting",
            settings=settings_module or get_settings_module(),
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )
        if settings.get("AUTO_INIT_DB"):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema_ready", tables=len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=settings)

    if settings.get("AUTO_BOOTSTRAP") and settings.get("DEFAULT_ADMIN_EMAIL"):
        bootstrap_identity(
            container.users_repo,
            admin_email=settings["DEFAULT_ADMIN_EMAIL"],
            admin_password=settings["DEFAULT_ADMIN_PASSWORD"],
        )

    register_error_handlers(app)
    register_users(app, container)
    register_departments(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_leave(app, container)

    return app

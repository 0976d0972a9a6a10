from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import DecimalJSONProvider, register_error_handlers
from .container import Container, build_container, build_in_memory_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .logging_config import setup_logging
from .attendance.controller import register as register_attendance
from .payroll.controller import register as register_payroll
from .rosters.controller import register as register_rosters
from .shifts.controller import register as register_shifts

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = DecimalJSONProvider(app)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    db_config = getattr(settings, "DB_CONFIG")
    overtime_split = getattr(settings, "OVERTIME_SPLIT", "period")
    lock_finalized = bool(getattr(settings, "PAYROLL_LOCK_FINALIZED", False))
    storage = getattr(settings, "STORAGE", "mysql")

    logger.info(
        "app_starting",
        extra={
            "settings": settings_module,
            "storage": "injected" if container else storage,
            "overtime_split": overtime_split,
            "payroll_lock_finalized": lock_finalized,
        },
    )

    if container is None:
        if storage == "memory":
            container = build_in_memory_container(
                overtime_split=overtime_split,
                payroll_lock_finalized=lock_finalized,
            )
        else:
            if bool(getattr(settings, "AUTO_INIT_DB", False)):
                apply_schema(db_config)
                logger.info("schema_ready", extra={"tables": len(list_tables(db_config))})
            if bool(getattr(settings, "AUTO_SEED_DB", False)):
                apply_seed_sql(db_config)
            container = build_container(
                db_config=db_config,
                overtime_split=overtime_split,
                payroll_lock_finalized=lock_finalized,
            )

    app.extensions["care_roster"] = container

    register_rosters(app, container)
    register_shifts(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_error_handlers(app)

    return app

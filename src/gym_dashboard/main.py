from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import ACTIVITY_REFRESH_SECONDS, LOGIN_TTL_HOURS, STATS_REFRESH_SECONDS
from .database.bootstrap import apply_schema, ensure_demo_owner, list_tables, seed_demo_members

from .auth.controller import register as register_auth
from .members.controller import register as register_members
from .payments.controller import register as register_payments
from .statistics.controller import register as register_statistics

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["LOGIN_TTL_HOURS"] = int(getattr(settings, "LOGIN_TTL_HOURS", LOGIN_TTL_HOURS))
    app.config["STATS_REFRESH_SECONDS"] = int(getattr(settings, "STATS_REFRESH_SECONDS", STATS_REFRESH_SECONDS))
    app.config["ACTIVITY_REFRESH_SECONDS"] = int(
        getattr(settings, "ACTIVITY_REFRESH_SECONDS", ACTIVITY_REFRESH_SECONDS)
    )
    app.json.ensure_ascii = False

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            owner_id = ensure_demo_owner(db_config)
            seed_demo_members(db_config, owner_id)
            logger.info("Demo seed ready")
        container = build_container(db_config=db_config)

    app.extensions["gym_dashboard"] = container

    register_error_handlers(app)
    register_auth(app, container)
    register_members(app, container)
    register_payments(app, container)
    register_statistics(app, container)

    return app

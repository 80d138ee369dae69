from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import (
    AuthorizationError,
    ConfigurationMissing,
    DomainError,
    FrozenRecordConflict,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .fees.controller import register as register_fees
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .promotion.controller import register as register_promotion

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (FrozenRecordConflict, 409),
    (ConfigurationMissing, 422),
    (ValidationError, 400),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(e, kind)), 400)
        return jsonify({"error": type(e).__name__, "message": str(e)}), status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

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
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            salary_divisor_days=int(getattr(settings, "SALARY_DIVISOR_DAYS", 30)),
            fee_due_day=int(getattr(settings, "FEE_DUE_DAY", 10)),
        )

    app.extensions["verticx_container"] = container
    _register_error_handlers(app)

    register_fees(app, container)
    register_payroll(app, container)
    register_leaves(app, container)
    register_promotion(app, container)

    return app

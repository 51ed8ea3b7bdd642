"""Application factory for the currency converter service."""

from __future__ import annotations

from flask import Flask
from flask_smorest import Api

from config import get_config
from .cli import register_cli
from .database import init_app as init_db


def create_app(config_name: str | None = None) -> Flask:
    """Application factory adhering to the Flask app factory pattern."""

    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    _configure_logging(app)
    _configure_api(app)
    api = _register_extensions(app)
    _register_blueprints(app, api)
    _register_error_handlers(app)

    register_cli(app)
    return app


def _configure_logging(app: Flask) -> None:
    from .cors import init_cors
    from .logging import init_request_logging, setup_logging

    setup_logging(app)
    init_request_logging(app)
    init_cors(app)


def _configure_api(app: Flask) -> None:
    app.config.setdefault("API_TITLE", "Currency Converter API")
    app.config.setdefault("API_VERSION", "v1")
    app.config.setdefault("OPENAPI_VERSION", "3.0.3")
    app.config.setdefault("OPENAPI_URL_PREFIX", "/docs")
    app.config.setdefault("OPENAPI_SWAGGER_UI_PATH", "/")
    app.config.setdefault(
        "OPENAPI_SWAGGER_UI_URL",
        "https://cdn.jsdelivr.net/npm/swagger-ui-dist/",
    )


def _register_extensions(app: Flask) -> Api:
    """Initialize the database, rate providers and the converter context."""

    init_db(app)
    from . import models  # noqa: F401  # Ensure models are imported for metadata
    from .providers.registry import init_provider
    from .services.context import init_context
    from .services.refresher import init_refresher

    init_provider(app)
    init_refresher(app)
    init_context(app)

    api = Api(app)
    app.extensions["smorest_api"] = api
    return api


def _register_blueprints(app: Flask, api: Api) -> None:
    from .conversions import blp as conversions_blp
    from .currencies import blp as currencies_blp
    from .favorites import blp as favorites_blp
    from .health import blp as health_blp
    from .history import blp as history_blp
    from .rates import blp as rates_blp

    api.register_blueprint(health_blp, url_prefix="/health")
    api.register_blueprint(rates_blp, url_prefix="/api/rates")
    api.register_blueprint(currencies_blp, url_prefix="/api/currencies")
    api.register_blueprint(conversions_blp, url_prefix="/api/conversions")
    api.register_blueprint(history_blp, url_prefix="/api/history")
    api.register_blueprint(favorites_blp, url_prefix="/api/favorites")


def _register_error_handlers(app: Flask) -> None:
    from .errors import register_error_handlers

    register_error_handlers(app)

"""Shared pytest fixtures."""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import delete

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Config classes read the environment at import time.
_DB_DIR = Path(tempfile.mkdtemp(prefix="currency-converter-tests-"))
_PREVIOUS_DB_URL = os.environ.get("DATABASE_URL")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"

from converter import create_app  # noqa: E402
from converter.database import SessionLocal, get_engine  # noqa: E402
from converter.models import ConversionHistoryEntry, FavoritePairEntry  # noqa: E402
from converter.providers.static import StaticRateProvider  # noqa: E402
from converter.rates.routes import REFRESH_STATE_KEY  # noqa: E402
from converter.services.context import CONTEXT_EXT_KEY, ConverterContext  # noqa: E402
from converter.services.ledger import Ledger  # noqa: E402
from converter.services.ledger_store import SqlLedgerStore  # noqa: E402
from converter.services.refresher import RateRefresher  # noqa: E402


@pytest.fixture(scope="session")
def app() -> Iterator:
    """Session-wide Flask application configured with a temporary database."""

    database_url = os.environ["DATABASE_URL"]
    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(alembic_cfg, "head")

    flask_app = create_app("testing")

    yield flask_app

    engine = get_engine()
    SessionLocal.remove()
    engine.dispose()
    command.downgrade(alembic_cfg, "base")
    shutil.rmtree(_DB_DIR, ignore_errors=True)

    if _PREVIOUS_DB_URL is not None:
        os.environ["DATABASE_URL"] = _PREVIOUS_DB_URL
    else:
        os.environ.pop("DATABASE_URL", None)


@pytest.fixture(autouse=True)
def converter_context(request) -> Iterator[ConverterContext | None]:
    """Give every app-backed test a fresh context, empty tables and no refresh throttle."""

    if "app" not in request.fixturenames:
        yield None
        return

    flask_app = request.getfixturevalue("app")
    session = SessionLocal()
    session.execute(delete(ConversionHistoryEntry))
    session.execute(delete(FavoritePairEntry))
    session.commit()
    SessionLocal.remove()

    context = ConverterContext(
        rates=RateRefresher(primary=StaticRateProvider()),
        ledger=Ledger(SqlLedgerStore(), history_limit=flask_app.config["HISTORY_LIMIT"]),
        base_currency=flask_app.config["DEFAULT_BASE_CURRENCY"],
    )
    flask_app.extensions[CONTEXT_EXT_KEY] = context
    flask_app.extensions[REFRESH_STATE_KEY] = {}
    yield context
    SessionLocal.remove()


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


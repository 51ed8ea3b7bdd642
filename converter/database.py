"""SQLAlchemy engine and session management."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, scoped_session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


SessionLocal = scoped_session(sessionmaker())

_engine: Optional[Engine] = None


def init_app(app: Any) -> None:
    """Bind the engine and scoped session for the Flask application (once per process)."""

    global _engine

    if _engine is None:
        _engine = create_engine(app.config["SQLALCHEMY_DATABASE_URI"], future=True)
        SessionLocal.configure(bind=_engine, autoflush=False, expire_on_commit=False)

    @app.teardown_appcontext
    def shutdown_session(_: Optional[BaseException] = None) -> None:
        SessionLocal.remove()

    app.extensions["sqlalchemy_engine"] = _engine
    app.extensions["sqlalchemy_session_factory"] = SessionLocal


def get_engine() -> Engine:
    """Return the active SQLAlchemy engine; raise if not yet initialized."""

    if _engine is None:
        raise RuntimeError("Database engine has not been initialized. Call init_app first.")
    return _engine


def get_session() -> scoped_session:
    return SessionLocal

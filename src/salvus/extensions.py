"""Database wiring for the Flask application."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import (
    SessionFactory,
    create_db_engine,
    create_session_factory,
    init_database,
)


def init_db(app: Flask) -> None:
    """Create the engine, ensure the schema, and expose a session factory."""

    config: BaseConfig = app.config["SALVUS_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)

    state = app.extensions.setdefault("salvus", {})
    state["engine"] = engine
    state["session_factory"] = create_session_factory(engine)


def get_session_factory() -> SessionFactory:
    """Return the session factory bound to the current application."""

    return current_app.extensions["salvus"]["session_factory"]

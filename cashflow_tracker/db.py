"""Utility helpers for SQLite persistence."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from flask import Flask

from .models import db

_SQLITE_PREFIX = "sqlite:///"


def sqlite_path(database_uri: str) -> Optional[Path]:
    """Return the file path behind a ``sqlite:///`` URI, or None."""
    if not database_uri.startswith(_SQLITE_PREFIX):
        return None
    raw = database_uri[len(_SQLITE_PREFIX):]
    if not raw or raw == ":memory:":
        return None
    return Path(raw)


def init_db(app: Flask) -> None:
    """Bind the SQLAlchemy extension to ``app`` and create missing tables."""
    path = sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
    db.init_app(app)
    with app.app_context():
        db.create_all()

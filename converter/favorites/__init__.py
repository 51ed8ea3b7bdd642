"""Favorites blueprint."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Favorites", __name__, description="Favorite currency pair endpoints")

from . import routes  # noqa: E402,F401

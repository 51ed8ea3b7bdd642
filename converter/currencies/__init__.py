"""Currencies blueprint listing the codes the held table can convert."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Currencies", __name__, description="Available currency endpoints")

from . import routes  # noqa: E402,F401

"""CORS handling for the single-page frontend."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Response, make_response, request


def init_cors(app) -> None:
    """Answer preflight requests and tag responses for configured origins."""

    if app.config.get("_cors_configured"):
        return

    origins = _split(app.config.get("CORS_ALLOWED_ORIGINS", ()))
    if not origins:
        return
    headers = ", ".join(_split(app.config.get("CORS_ALLOWED_HEADERS", "Content-Type")))
    methods = _split(app.config.get("CORS_ALLOWED_METHODS", "GET,POST,PATCH,DELETE,OPTIONS"))
    max_age = str(int(app.config.get("CORS_MAX_AGE", 600)))

    def allowed(origin: str | None) -> bool:
        return bool(origin) and ("*" in origins or origin in origins)

    @app.before_request
    def handle_preflight():
        origin = request.headers.get("Origin")
        if request.method != "OPTIONS" or origin is None:
            return None
        if not allowed(origin):
            return make_response("", 403)

        response = make_response("", 204)
        _tag_origin(response, origin, origins)
        response.headers["Access-Control-Allow-Methods"] = ", ".join(methods)
        response.headers["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", headers
        )
        response.headers["Access-Control-Max-Age"] = max_age
        return response

    @app.after_request
    def apply_cors(response: Response):
        origin = request.headers.get("Origin")
        if allowed(origin):
            _tag_origin(response, origin, origins)
            response.headers["Access-Control-Expose-Headers"] = "X-Request-ID"
        return response

    app.config["_cors_configured"] = True


def _split(raw: str | Iterable[str]) -> tuple[str, ...]:
    values = raw.split(",") if isinstance(raw, str) else list(raw)
    return tuple(item.strip() for item in values if item and item.strip())


def _tag_origin(response: Response, origin: str, origins: tuple[str, ...]) -> None:
    response.headers["Access-Control-Allow-Origin"] = "*" if "*" in origins else origin
    vary = [item.strip() for item in response.headers.get("Vary", "").split(",") if item.strip()]
    if "Origin" not in vary:
        vary.append("Origin")
    response.headers["Vary"] = ", ".join(vary)

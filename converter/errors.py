"""Application-wide error types and handlers."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify

from converter.providers import InvalidBaseCurrency, ProviderError


class APIError(Exception):
    """Base class for errors rendered to API clients."""

    status_code: int = 400

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class ValidationError(APIError):
    """Error raised for validation failures."""

    status_code = 422


class NotFound(APIError):
    """The addressed ledger entry does not exist."""

    status_code = 404


class DuplicateFavorite(APIError):
    """A favorite for the same (from, to) pair already exists."""

    status_code = 409

    def __init__(self, from_currency: str, to_currency: str) -> None:
        super().__init__(
            f"{from_currency} -> {to_currency} is already saved as a favorite.",
            payload={"from": from_currency, "to": to_currency},
        )
        self.from_currency = from_currency
        self.to_currency = to_currency


class PersistenceFailure(APIError):
    """The ledger's backing store rejected a load or save."""

    status_code = 503


class RateUnavailableError(APIError):
    """HTTP rendering of a conversion that had no usable rate."""

    status_code = 422


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    409: "Resource already exists.",
    422: "Submitted data is invalid.",
    429: "Too many requests. Please try again shortly.",
    502: "Upstream provider unavailable.",
    503: "Service temporarily unavailable. Please retry in a moment.",
}


def provider_error(exc: ProviderError) -> APIError:
    """Translate a provider failure into the API error the client should see."""

    if isinstance(exc, InvalidBaseCurrency):
        return ValidationError(str(exc), payload={"field": "base", "code": exc.base})
    return APIError(str(exc) or DEFAULT_STATUS_MESSAGES[503], status_code=503)


def error_response(message: str | None, status_code: int, **extra: Any):
    body: dict[str, Any] = {
        "message": message or DEFAULT_STATUS_MESSAGES.get(status_code, "Request failed.")
    }
    body.update({key: value for key, value in extra.items() if value is not None})
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        return error_response(error.message, error.status_code, **error.payload)

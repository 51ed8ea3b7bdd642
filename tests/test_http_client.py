from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from requests import Response

from converter.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError


def make_response(status_code: int, json_data: dict | list | None = None) -> Response:
    resp = MagicMock(spec=Response)
    resp.status_code = status_code
    resp.text = "error"
    if json_data is None:
        resp.json.side_effect = ValueError("no json")  # type: ignore[attr-defined]
    else:
        resp.json.return_value = json_data  # type: ignore[attr-defined]
    return resp


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda *_: None)
    monkeypatch.setattr("random.uniform", lambda *_: 0)


def test_http_client_success():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com/v4/", max_retries=1)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(200, {"ok": True})

    payload = client.get("/latest/USD", params={"foo": "bar"})

    assert payload == {"ok": True}
    session.get.assert_called_once_with(
        "https://example.com/v4/latest/USD", params={"foo": "bar"}, timeout=5.0
    )


def test_http_client_retries_then_succeeds():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = [make_response(500), make_response(200, {"value": 1})]

    payload = client.get("/data")

    assert payload == {"value": 1}
    assert session.get.call_count == 2


def test_http_client_retries_transport_errors():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = [
        requests.ConnectionError("down"),
        requests.Timeout("slow"),
        make_response(200, {"value": 2}),
    ]

    assert client.get("/data") == {"value": 2}
    assert session.get.call_count == 3


def test_http_client_raises_after_retries_exhausted():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(500)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get("/data")

    assert "Failed to fetch" in str(exc_info.value)
    assert exc_info.value.status_code is None
    assert session.get.call_count == 2


def test_http_client_does_not_retry_client_errors():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(404, {"result": "error", "error-type": "unsupported-code"})

    with pytest.raises(HTTPClientError) as exc_info:
        client.get("/latest/XYZ")

    assert exc_info.value.status_code == 404
    assert exc_info.value.retryable is False
    assert exc_info.value.payload == {"result": "error", "error-type": "unsupported-code"}
    session.get.assert_called_once()


def test_http_client_rejects_non_object_payload():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=1)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(200, ["not", "an", "object"])

    with pytest.raises(HTTPClientError):
        client.get("/data")

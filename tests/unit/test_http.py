from __future__ import annotations

import logging

import pytest
import requests

from surfcore.common.errors import ApiRequestError
from surfcore.common.http import ApiClient, RetryConfig
from surfcore.errors.handler import ErrorHandler
from surfcore.errors.taxonomy import ErrorKind


class FakeResponse:
    def __init__(self, status_code: int, payload=None, content: bytes = b"", content_type="application/json", raises_json=False):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.headers = {"Content-Type": content_type}
        self._raises_json = raises_json

    def json(self):
        if self._raises_json:
            raise requests.exceptions.JSONDecodeError("Expecting value", "", 0)
        return self._payload


def _client(max_attempts: int = 1) -> ApiClient:
    handler = ErrorHandler(logging.getLogger("surfcore.test.http"))
    return ApiClient(
        "https://surf.example.test/",
        error_handler=handler,
        retry=RetryConfig(max_attempts=max_attempts, multiplier=0.01, max_wait=0.01),
    )


def test_get_json_success(monkeypatch):
    client = _client()
    calls = []

    def fake_request(**kwargs):
        calls.append(kwargs)
        return FakeResponse(200, {"spots": []})

    monkeypatch.setattr(client.session, "request", fake_request)

    assert client.get_json("/spots", params={"country": "Ireland"}) == {"spots": []}
    assert calls[0]["url"] == "https://surf.example.test/spots"
    assert calls[0]["params"] == {"country": "Ireland"}


def test_api_error_body_raises_classified_error(monkeypatch):
    client = _client()
    body = b'{"error": "bad", "message": "Spot missing", "help": "Pick another"}'
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(404, content=body))

    with pytest.raises(ApiRequestError) as excinfo:
        client.get_json("/spots/nowhere")

    assert excinfo.value.error.kind is ErrorKind.API_ERROR
    assert excinfo.value.error.message == "Spot missing"


def test_retryable_status_is_retried_then_raised(monkeypatch):
    client = _client(max_attempts=3)
    calls = []

    def fake_request(**_kwargs):
        calls.append(1)
        return FakeResponse(503, content=b"down")

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(ApiRequestError) as excinfo:
        client.get_json("/conditions")

    assert len(calls) == 3
    assert excinfo.value.error.is_retryable


def test_retry_recovers_after_transient_failure(monkeypatch):
    client = _client(max_attempts=2)
    responses = iter([requests.exceptions.ConnectTimeout("slow"), FakeResponse(200, {"ok": True})])

    def fake_request(**_kwargs):
        item = next(responses)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(client.session, "request", fake_request)
    assert client.get_json("/conditions") == {"ok": True}


def test_non_retryable_status_is_not_retried(monkeypatch):
    client = _client(max_attempts=3)
    calls = []

    def fake_request(**_kwargs):
        calls.append(1)
        return FakeResponse(401, content=b"")

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(ApiRequestError) as excinfo:
        client.get_json("/me")

    assert len(calls) == 1
    assert excinfo.value.error.kind is ErrorKind.SESSION_EXPIRED


def test_invalid_json_raises_decoding_failed(monkeypatch):
    client = _client()
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, raises_json=True))

    with pytest.raises(ApiRequestError) as excinfo:
        client.get_json("/spots")
    assert excinfo.value.error.kind is ErrorKind.DECODING_FAILED


def test_html_success_page_is_invalid_response(monkeypatch):
    client = _client()
    monkeypatch.setattr(
        client.session,
        "request",
        lambda **_kwargs: FakeResponse(200, content=b"<html>", content_type="text/html"),
    )

    with pytest.raises(ApiRequestError) as excinfo:
        client.get_json("/spots")
    assert excinfo.value.error.kind is ErrorKind.INVALID_RESPONSE


def test_post_json_sends_body(monkeypatch):
    with _client() as client:
        calls = []

        def fake_request(**kwargs):
            calls.append(kwargs)
            return FakeResponse(201, {"id": "r1"})

        monkeypatch.setattr(client.session, "request", fake_request)
        assert client.post_json("/reports", body={"surfSize": "waist"}) == {"id": "r1"}
        assert calls[0]["method"] == "POST"
        assert calls[0]["json"] == {"surfSize": "waist"}

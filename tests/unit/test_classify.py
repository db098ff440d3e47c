from __future__ import annotations

import json
import socket

import pytest
import requests

from surfcore.common.errors import ApiRequestError
from surfcore.errors.classify import (
    DecodeFailure,
    HttpFailure,
    TransportFailure,
    TransportSignal,
    classify,
    parse_api_error_body,
    transport_signal_for,
)
from surfcore.errors.taxonomy import ErrorCategory, ErrorKind, NormalizedError

API_BODY = json.dumps(
    {"error": "invalid_report", "message": "Surf size is out of range", "help": "Choose a size between 1 and 5"}
).encode("utf-8")


@pytest.mark.parametrize("status", [429, 500, 501, 503, 504, 599])
def test_server_and_rate_limit_statuses_are_retryable(status):
    assert classify(HttpFailure(status_code=status)).is_retryable is True


@pytest.mark.parametrize("status", [401, 403])
def test_auth_statuses_classify_as_authentication(status):
    error = classify(HttpFailure(status_code=status, body=b"denied"))
    assert error.category is ErrorCategory.AUTHENTICATION
    assert error.kind is ErrorKind.SESSION_EXPIRED


def test_api_error_body_preserved_verbatim():
    error = classify(HttpFailure(status_code=400, body=API_BODY))
    assert error.kind is ErrorKind.API_ERROR
    assert error.error == "invalid_report"
    assert error.message == "Surf size is out of range"
    assert error.help == "Choose a size between 1 and 5"
    assert error.category is ErrorCategory.API_PROTOCOL


def test_api_error_body_wins_over_status():
    assert classify(HttpFailure(status_code=401, body=API_BODY)).kind is ErrorKind.API_ERROR


def test_generic_client_error_keeps_status_and_body_text():
    error = classify(HttpFailure(status_code=404, body=b"  no such spot \n"))
    assert error.kind is ErrorKind.HTTP_ERROR
    assert error.status_code == 404
    assert error.message == "no such spot"
    assert error.is_retryable is False


def test_html_error_page_is_invalid_response():
    error = classify(HttpFailure(status_code=404, body=b"<html></html>", content_type="text/html; charset=utf-8"))
    assert error.kind is ErrorKind.INVALID_RESPONSE


def test_undecodable_body_does_not_raise():
    error = classify(HttpFailure(status_code=400, body=b"\xff\xfe\x00"))
    assert error.kind is ErrorKind.HTTP_ERROR
    assert error.user_message


@pytest.mark.parametrize(
    "body",
    [b"", b"[]", b'{"error": "x", "message": "y"}', b'{"error": 1, "message": "y", "help": "z"}', b"not json"],
)
def test_parse_api_error_body_rejects_malformed(body):
    assert parse_api_error_body(body) is None


@pytest.mark.parametrize(
    ("signal", "kind"),
    [
        (TransportSignal.NO_CONNECTIVITY, ErrorKind.NO_CONNECTION),
        (TransportSignal.TIMED_OUT, ErrorKind.TIMEOUT),
        (TransportSignal.CONNECTION_LOST, ErrorKind.CONNECTION_LOST),
        (TransportSignal.HOST_UNREACHABLE, ErrorKind.SERVER_UNAVAILABLE),
    ],
)
def test_transport_signals(signal, kind):
    error = classify(TransportFailure(signal))
    assert error.kind is kind
    assert error.category is ErrorCategory.NETWORK


def test_unknown_transport_signal_becomes_unknown_with_cause():
    cause = OSError("weird")
    error = classify(TransportFailure("cosmic-ray", cause=cause))
    assert error.kind is ErrorKind.UNKNOWN
    assert error.cause is cause


def test_idempotence():
    error = classify(HttpFailure(status_code=503))
    assert classify(error) is error
    assert classify(classify(error)) == error
    assert classify(ApiRequestError(error)) is error


def test_decode_failures():
    cause = json.JSONDecodeError("Expecting value", "", 0)
    assert classify(DecodeFailure(cause)).kind is ErrorKind.DECODING_FAILED
    assert classify(cause).kind is ErrorKind.DECODING_FAILED
    assert classify(cause).is_retryable is False


def test_requests_exceptions_map_to_signals():
    assert classify(requests.exceptions.ReadTimeout("slow")).kind is ErrorKind.TIMEOUT
    assert classify(requests.exceptions.ChunkedEncodingError("cut")).kind is ErrorKind.CONNECTION_LOST
    assert classify(requests.exceptions.ConnectionError("nope")).kind is ErrorKind.SERVER_UNAVAILABLE


def test_connection_error_cause_chain_is_inspected():
    try:
        try:
            raise OSError(101, "Network is unreachable")
        except OSError as inner:
            raise requests.exceptions.ConnectionError("wrapped") from inner
    except requests.exceptions.ConnectionError as exc:
        assert transport_signal_for(exc) is TransportSignal.NO_CONNECTIVITY


def test_socket_level_errors():
    assert transport_signal_for(socket.gaierror(-2, "Name or service not known")) is TransportSignal.HOST_UNREACHABLE
    assert transport_signal_for(ConnectionResetError()) is TransportSignal.CONNECTION_LOST
    assert transport_signal_for(TimeoutError()) is TransportSignal.TIMED_OUT
    assert transport_signal_for(ValueError("x")) is None


def test_http_error_exception_uses_response():
    response = requests.Response()
    response.status_code = 502
    response._content = b"bad gateway"
    error = classify(requests.exceptions.HTTPError(response=response))
    assert error.kind is ErrorKind.HTTP_ERROR
    assert error.status_code == 502
    assert error.is_retryable is True


def test_invalid_url():
    assert classify(requests.exceptions.MissingSchema("treblesurf.com/api")).kind is ErrorKind.INVALID_URL


def test_unrecognized_exceptions_wrap_cause():
    cause = RuntimeError("disk on fire")
    error = classify(cause)
    assert error.kind is ErrorKind.UNKNOWN
    assert error.cause is cause
    assert classify(object()).kind is ErrorKind.UNKNOWN


def test_same_input_same_category():
    failure = HttpFailure(status_code=500, body=b"oops")
    assert classify(failure) == classify(failure)
    assert classify(failure) == NormalizedError.http_error(500, "oops")


def test_deeply_nested_body_does_not_raise():
    nested = b"[" * 100000 + b"]" * 100000
    error = classify(HttpFailure(status_code=502, body=nested))
    assert error.kind is ErrorKind.HTTP_ERROR
    assert error.is_retryable is True
    assert parse_api_error_body(nested) is None


def test_submission_error_maps_to_form_field():
    body = json.dumps(
        {"error": "Invalid surf size", "message": "Surf size must be set", "help": "Choose a surf size"}
    ).encode("utf-8")
    error = classify(HttpFailure(status_code=400, body=body))
    assert error.kind is ErrorKind.API_ERROR
    assert error.error == "Invalid surf size"
    assert error.message == "Surf size must be set"
    assert error.help == "Choose a surf size"
    assert error.field_name == "surfSize"
    assert error.field_errors == {"surfSize": "Choose a surf size"}

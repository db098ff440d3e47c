"""Classify raw failures into ``NormalizedError`` values.

``classify`` accepts whatever the networking glue observed: an already
normalized error, a transport failure signal, an HTTP status with its body, a
decode failure, or an arbitrary exception. It always returns a
``NormalizedError`` and never raises.
"""

from __future__ import annotations

import errno
import json
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from surfcore.common.constants import API_ERROR_FIELDS, AUTH_STATUS_CODES, RETRYABLE_STATUS_CODES
from surfcore.common.errors import ApiRequestError
from surfcore.errors.taxonomy import NormalizedError


class TransportSignal(str, Enum):
    NO_CONNECTIVITY = "no-connectivity"
    TIMED_OUT = "timed-out"
    CONNECTION_LOST = "connection-lost"
    HOST_UNREACHABLE = "host-unreachable"


@dataclass(frozen=True)
class TransportFailure:
    signal: TransportSignal | str
    cause: BaseException | None = None


@dataclass(frozen=True)
class HttpFailure:
    status_code: int
    body: bytes | None = None
    content_type: str | None = None

    @classmethod
    def from_response(cls, response: requests.Response) -> HttpFailure:
        return cls(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("Content-Type"),
        )


@dataclass(frozen=True)
class DecodeFailure:
    cause: BaseException | None = None


@dataclass(frozen=True)
class ApiErrorBody:
    error: str
    message: str
    help: str


_ERROR_BY_SIGNAL = {
    TransportSignal.NO_CONNECTIVITY: NormalizedError.no_connection,
    TransportSignal.TIMED_OUT: NormalizedError.timeout,
    TransportSignal.CONNECTION_LOST: NormalizedError.connection_lost,
    TransportSignal.HOST_UNREACHABLE: NormalizedError.server_unavailable,
}

_NO_CONNECTIVITY_ERRNOS = frozenset({errno.ENETUNREACH, errno.ENETDOWN})


def parse_api_error_body(body: bytes | str | None) -> ApiErrorBody | None:
    """Decode the API's ``{"error", "message", "help"}`` document, or return None."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    values = [payload.get(name) for name in API_ERROR_FIELDS]
    if not all(isinstance(value, str) for value in values):
        return None
    return ApiErrorBody(*values)


def _body_text(body: bytes | None) -> str | None:
    if not body:
        return None
    text = body.decode("utf-8", errors="replace").strip()
    return text or None


def _is_html(content_type: str | None) -> bool:
    return bool(content_type) and "text/html" in content_type.lower()


def classify_http_failure(failure: HttpFailure) -> NormalizedError:
    api_error = parse_api_error_body(failure.body)
    if api_error is not None:
        return NormalizedError.api_error(api_error.error, api_error.message, api_error.help)

    status = failure.status_code
    if status in AUTH_STATUS_CODES:
        return NormalizedError.session_expired(status)
    if status in RETRYABLE_STATUS_CODES:
        return NormalizedError.http_error(status, _body_text(failure.body))
    if _is_html(failure.content_type):
        return NormalizedError.invalid_response()
    return NormalizedError.http_error(status, _body_text(failure.body))


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        nested = current.args[0] if current.args and isinstance(current.args[0], BaseException) else None
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException):
            nested = reason
        current = nested or current.__cause__ or current.__context__
    return chain


def _signal_for_os_error(exc: BaseException) -> TransportSignal | None:
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return TransportSignal.TIMED_OUT
    if isinstance(exc, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
        return TransportSignal.CONNECTION_LOST
    if isinstance(exc, (ConnectionRefusedError, socket.gaierror)):
        return TransportSignal.HOST_UNREACHABLE
    if isinstance(exc, OSError) and exc.errno in _NO_CONNECTIVITY_ERRNOS:
        return TransportSignal.NO_CONNECTIVITY
    return None


def transport_signal_for(exc: BaseException) -> TransportSignal | None:
    """Map a transport exception to its signal, or None when it is not a transport failure."""
    if isinstance(exc, requests.exceptions.Timeout):
        return TransportSignal.TIMED_OUT
    if isinstance(exc, requests.exceptions.ChunkedEncodingError):
        return TransportSignal.CONNECTION_LOST
    if isinstance(exc, requests.exceptions.ConnectionError):
        for nested in _exception_chain(exc)[1:]:
            signal = _signal_for_os_error(nested)
            if signal is not None:
                return signal
        return TransportSignal.HOST_UNREACHABLE
    return _signal_for_os_error(exc)


def _classify_exception(exc: BaseException) -> NormalizedError:
    if isinstance(exc, ApiRequestError):
        return exc.error
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return classify_http_failure(HttpFailure.from_response(exc.response))
    if isinstance(exc, (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema)):
        url = exc.request.url if exc.request is not None else str(exc)
        return NormalizedError.invalid_url(url or str(exc))
    if isinstance(exc, (json.JSONDecodeError, requests.exceptions.JSONDecodeError, UnicodeDecodeError)):
        return NormalizedError.decoding_failed(exc)
    signal = transport_signal_for(exc)
    if signal is not None:
        return _ERROR_BY_SIGNAL[signal]()
    return NormalizedError.unknown(exc)


def classify(raw: Any) -> NormalizedError:
    """Reduce any observed failure to a ``NormalizedError``."""
    if isinstance(raw, NormalizedError):
        return raw
    if isinstance(raw, TransportFailure):
        try:
            signal = TransportSignal(raw.signal)
        except ValueError:
            return NormalizedError.unknown(raw.cause or ValueError(f"Unknown transport signal: {raw.signal}"))
        return _ERROR_BY_SIGNAL[signal]()
    if isinstance(raw, HttpFailure):
        return classify_http_failure(raw)
    if isinstance(raw, requests.Response):
        return classify_http_failure(HttpFailure.from_response(raw))
    if isinstance(raw, DecodeFailure):
        return NormalizedError.decoding_failed(raw.cause)
    if isinstance(raw, BaseException):
        return _classify_exception(raw)
    return NormalizedError.unknown(ValueError(f"Unclassifiable failure: {raw!r}"))

"""HTTP glue for the surf API: timeouts, retries, and classified failures."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any

import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from surfcore.common.constants import USER_AGENT
from surfcore.common.errors import ApiRequestError
from surfcore.common.logging import log_event
from surfcore.errors.taxonomy import NormalizedError

if TYPE_CHECKING:
    from surfcore.errors.handler import ErrorHandler


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 30.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    multiplier: float = 0.5
    max_wait: float = 8.0


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ApiRequestError) and exc.error.is_retryable


class ApiClient:
    """JSON client whose failures always surface as ``ApiRequestError``."""

    def __init__(
        self,
        base_url: str,
        *,
        error_handler: ErrorHandler,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.error_handler = error_handler
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.logger = logger or error_handler.logger
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _fail(self, raw: Any, context: str) -> ApiRequestError:
        return ApiRequestError(self.error_handler.handle(raw, context=context))

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        context = f"{method} {url}"
        started = time.monotonic()
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=self._headers(headers),
                timeout=(self.timeout.connect, self.timeout.read),
            )
        except requests.RequestException as exc:
            raise self._fail(exc, context) from exc

        content_type = response.headers.get("Content-Type", "")
        try:
            self.error_handler.validate_api_response(response.content, response.status_code, content_type)
        except ApiRequestError as exc:
            raise self._fail(exc.error, context) from exc

        if "text/html" in content_type.lower():
            raise self._fail(NormalizedError.invalid_response(), context)

        try:
            payload = response.json()
        except ValueError as exc:
            raise self._fail(exc, context) from exc

        log_event(
            self.logger,
            "request ok",
            event="HTTP_OK",
            method=method,
            url=url,
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return payload

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = self._url(path)

        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=self.retry.multiplier,
            ),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        def _wrapped() -> Any:
            return self._request_json(method, url, params=params, json_body=json_body, headers=headers)

        return _wrapped()

    def get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return self.request_json("GET", path, params=params, headers=headers)

    def post_json(
        self,
        path: str,
        *,
        body: Any,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return self.request_json("POST", path, json_body=body, headers=headers)

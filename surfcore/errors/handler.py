"""Error handling service: classify, log, and present failures."""

from __future__ import annotations

import logging
from typing import Any

import requests

from surfcore.common.errors import ApiRequestError
from surfcore.common.logging import log_event, log_warning
from surfcore.errors.classify import ApiErrorBody, HttpFailure, classify, parse_api_error_body
from surfcore.errors.presentation import DefaultPresenter, ErrorPresentation, Presenter
from surfcore.errors.taxonomy import NormalizedError


class ErrorHandler:
    """Classifies failures and records them on an injected logger."""

    def __init__(self, logger: logging.Logger, presenter: Presenter | None = None) -> None:
        self.logger = logger
        self.presenter = presenter or DefaultPresenter()

    def handle(self, raw: Any, context: str | None = None) -> NormalizedError:
        error = classify(raw)
        log = log_warning if error.is_retryable else log_event
        log(
            self.logger,
            error.technical_details,
            event="ERROR_CLASSIFIED",
            context=context,
            error_code=error.code,
            category=error.category.value,
            retryable=error.is_retryable,
            status_code=error.status_code,
        )
        return error

    def handle_for_presentation(self, raw: Any, context: str | None = None) -> ErrorPresentation:
        return self.presenter.present(self.handle(raw, context=context))

    def validate_api_response(
        self,
        body: bytes | None,
        status_code: int,
        content_type: str | None = None,
    ) -> None:
        if 200 <= status_code <= 299:
            return
        error = classify(HttpFailure(status_code=status_code, body=body, content_type=content_type))
        raise ApiRequestError(error)

    def extract_api_error(self, raw: Any) -> ApiErrorBody | None:
        if isinstance(raw, ApiRequestError):
            raw = raw.error
        if isinstance(raw, NormalizedError):
            if raw.error is None or raw.message is None or raw.help is None:
                return None
            return ApiErrorBody(raw.error, raw.message, raw.help)
        if isinstance(raw, HttpFailure):
            return parse_api_error_body(raw.body)
        if isinstance(raw, requests.exceptions.HTTPError) and raw.response is not None:
            return parse_api_error_body(raw.response.content)
        text = str(raw) if isinstance(raw, BaseException) else raw
        if isinstance(text, str) and '"error"' in text and '"message"' in text:
            start, end = text.find("{"), text.rfind("}")
            if 0 <= start < end:
                return parse_api_error_body(text[start : end + 1])
        return None

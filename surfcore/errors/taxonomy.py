"""Normalized error taxonomy for the surf-report client.

Every failure the client observes is reduced to a single ``NormalizedError``
value: an immutable record tagged by ``ErrorKind``. The kind fixes the stable
machine code and the category; the remaining attributes carry only what is
needed to render a message. All user-facing metadata (message, suggestions,
retryability, field association) is derived from those attributes, so equal
errors always describe themselves identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from surfcore.common.constants import RETRYABLE_STATUS_CODES


class ErrorCategory(str, Enum):
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    API_PROTOCOL = "api_protocol"
    MEDIA = "media"
    CACHE = "cache"
    DATA_PROCESSING = "data_processing"
    UNKNOWN = "unknown"


class ErrorKind(str, Enum):
    """Error variants; the value is the stable code reported to logs and analytics."""

    NO_CONNECTION = "NET_001"
    TIMEOUT = "NET_002"
    CONNECTION_LOST = "NET_003"
    SERVER_UNAVAILABLE = "NET_004"
    INVALID_URL = "NET_005"

    NOT_AUTHENTICATED = "AUTH_001"
    SESSION_EXPIRED = "AUTH_002"
    AUTHENTICATION_FAILED = "AUTH_003"
    CSRF_TOKEN_MISSING = "AUTH_004"

    HTTP_ERROR = "API_001"
    API_ERROR = "API_002"
    INVALID_RESPONSE = "API_003"
    DECODING_FAILED = "API_004"
    ENCODING_FAILED = "API_005"

    MISSING_REQUIRED_FIELD = "VAL_001"
    INVALID_FIELD_VALUE = "VAL_002"
    VALIDATION_FAILED = "VAL_003"

    IMAGE_VALIDATION_FAILED = "MEDIA_001"
    IMAGE_NOT_SURF_RELATED = "MEDIA_002"
    IMAGE_UPLOAD_FAILED = "MEDIA_003"
    IMAGE_NOT_FOUND = "MEDIA_004"
    VIDEO_UPLOAD_FAILED = "MEDIA_005"
    VIDEO_NOT_FOUND = "MEDIA_006"
    MEDIA_PROCESSING_FAILED = "MEDIA_007"

    CACHE_READ_FAILED = "CACHE_001"
    CACHE_WRITE_FAILED = "CACHE_002"
    CACHE_EXPIRED = "CACHE_003"

    DATA_CORRUPTED = "DATA_001"
    PARSING_FAILED = "DATA_002"
    UNEXPECTED_DATA_FORMAT = "DATA_003"

    UNKNOWN = "UNKNOWN_001"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY_BY_PREFIX[self.value.split("_", 1)[0]]


_CATEGORY_BY_PREFIX = {
    "NET": ErrorCategory.NETWORK,
    "AUTH": ErrorCategory.AUTHENTICATION,
    "API": ErrorCategory.API_PROTOCOL,
    "VAL": ErrorCategory.VALIDATION,
    "MEDIA": ErrorCategory.MEDIA,
    "CACHE": ErrorCategory.CACHE,
    "DATA": ErrorCategory.DATA_PROCESSING,
    "UNKNOWN": ErrorCategory.UNKNOWN,
}

RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.NO_CONNECTION,
        ErrorKind.TIMEOUT,
        ErrorKind.CONNECTION_LOST,
        ErrorKind.SERVER_UNAVAILABLE,
        ErrorKind.IMAGE_UPLOAD_FAILED,
        ErrorKind.VIDEO_UPLOAD_FAILED,
        ErrorKind.MEDIA_PROCESSING_FAILED,
        ErrorKind.CACHE_READ_FAILED,
        ErrorKind.CACHE_WRITE_FAILED,
    }
)

_IMAGE_KINDS = frozenset(
    {
        ErrorKind.IMAGE_VALIDATION_FAILED,
        ErrorKind.IMAGE_NOT_SURF_RELATED,
        ErrorKind.IMAGE_UPLOAD_FAILED,
        ErrorKind.IMAGE_NOT_FOUND,
    }
)
_VIDEO_KINDS = frozenset({ErrorKind.VIDEO_UPLOAD_FAILED, ErrorKind.VIDEO_NOT_FOUND})

# Backend ``error`` strings from report submission, checked in order; first match wins.
API_ERROR_FIELD_RULES: tuple[tuple[tuple[str, ...], str | None], ...] = (
    (("Image not surf-related", "not surf-related"), "image"),
    (("Image analysis failed", "analysis failed"), "image"),
    (("Image upload failed", "upload failed"), "image"),
    (("Invalid image data", "invalid format"), "image"),
    (("Image retrieval failed", "not found"), "image"),
    (("Image validation failed", "validation failed"), "image"),
    (("Missing required fields",), None),
    (("Invalid surf size",), "surfSize"),
    (("Invalid wind amount",), "windAmount"),
    (("Invalid wind direction",), "windDirection"),
    (("Invalid consistency",), "consistency"),
    (("Invalid quality",), "quality"),
    (("Invalid messiness",), "messiness"),
)

_IMAGE_RETRY_MARKERS = (
    "Image validation failed",
    "Image not surf-related",
    "Invalid image data",
    "Image analysis failed",
    "Image retrieval failed",
)


def api_error_field(error: str | None) -> str | None:
    """Form field named by a backend ``error`` string, if any."""
    if not error:
        return None
    for needles, field_name in API_ERROR_FIELD_RULES:
        if any(needle in error for needle in needles):
            return field_name
    return None

_USER_MESSAGES = {
    ErrorKind.NO_CONNECTION: "No internet connection available.",
    ErrorKind.TIMEOUT: "The request took too long to complete.",
    ErrorKind.CONNECTION_LOST: "Connection was interrupted.",
    ErrorKind.SERVER_UNAVAILABLE: "The server is temporarily unavailable.",
    ErrorKind.INVALID_URL: "Invalid request configuration.",
    ErrorKind.NOT_AUTHENTICATED: "You need to sign in to access this feature.",
    ErrorKind.SESSION_EXPIRED: "Your session has expired. Please sign in again.",
    ErrorKind.AUTHENTICATION_FAILED: "{reason}",
    ErrorKind.CSRF_TOKEN_MISSING: "Security validation failed. Please try again.",
    ErrorKind.INVALID_RESPONSE: "Received invalid response from server.",
    ErrorKind.DECODING_FAILED: "Failed to process server response.",
    ErrorKind.ENCODING_FAILED: "Failed to prepare request data.",
    ErrorKind.MISSING_REQUIRED_FIELD: "{field_title} is required.",
    ErrorKind.INVALID_FIELD_VALUE: "{field_title}: {reason}",
    ErrorKind.VALIDATION_FAILED: "Please check the form for errors.",
    ErrorKind.IMAGE_VALIDATION_FAILED: "Image validation failed: {reason}",
    ErrorKind.IMAGE_NOT_SURF_RELATED: "Please upload an image showing ocean, waves, beach, or coastline.",
    ErrorKind.IMAGE_UPLOAD_FAILED: "Failed to upload image: {reason}",
    ErrorKind.IMAGE_NOT_FOUND: "Image not found.",
    ErrorKind.VIDEO_UPLOAD_FAILED: "Failed to upload video: {reason}",
    ErrorKind.VIDEO_NOT_FOUND: "Video not found.",
    ErrorKind.MEDIA_PROCESSING_FAILED: "Media processing failed: {reason}",
    ErrorKind.CACHE_READ_FAILED: "Failed to access cached data.",
    ErrorKind.CACHE_WRITE_FAILED: "Failed to access cached data.",
    ErrorKind.CACHE_EXPIRED: "Failed to access cached data.",
    ErrorKind.DATA_CORRUPTED: "Data is corrupted: {reason}",
    ErrorKind.PARSING_FAILED: "Failed to parse data: {reason}",
    ErrorKind.UNEXPECTED_DATA_FORMAT: "Received unexpected data format.",
}

_TECHNICAL_DETAILS = {
    ErrorKind.INVALID_URL: "Invalid URL: {url}",
    ErrorKind.SESSION_EXPIRED: "Session expired (HTTP {status_code})",
    ErrorKind.AUTHENTICATION_FAILED: "Authentication failed: {reason}",
    ErrorKind.HTTP_ERROR: "HTTP {status_code}: {message_or_placeholder}",
    ErrorKind.API_ERROR: "API Error - {error}: {message} | Help: {help}",
    ErrorKind.DECODING_FAILED: "Decoding failed: {cause}",
    ErrorKind.ENCODING_FAILED: "Encoding failed: {cause}",
    ErrorKind.MISSING_REQUIRED_FIELD: "Missing required field: {form_field}",
    ErrorKind.INVALID_FIELD_VALUE: "Invalid value for {form_field}: {reason}",
    ErrorKind.VALIDATION_FAILED: "Validation failed for fields: {field_list}",
    ErrorKind.IMAGE_VALIDATION_FAILED: "Image validation failed: {reason}",
    ErrorKind.IMAGE_UPLOAD_FAILED: "Image upload failed: {reason}",
    ErrorKind.IMAGE_NOT_FOUND: "Image not found with key: {key}",
    ErrorKind.VIDEO_UPLOAD_FAILED: "Video upload failed: {reason}",
    ErrorKind.VIDEO_NOT_FOUND: "Video not found with key: {key}",
    ErrorKind.MEDIA_PROCESSING_FAILED: "Media processing failed: {reason}",
    ErrorKind.CACHE_READ_FAILED: "Cache read failed for key {key}: {cause}",
    ErrorKind.CACHE_WRITE_FAILED: "Cache write failed for key {key}: {cause}",
    ErrorKind.CACHE_EXPIRED: "Cache expired for key: {key}",
    ErrorKind.DATA_CORRUPTED: "Data corrupted: {reason}",
    ErrorKind.PARSING_FAILED: "Parsing failed: {reason}",
    ErrorKind.UNKNOWN: "Unknown error: {cause_repr}",
}

_TRY_AGAIN = ("Try again", "Contact support if the problem persists")
_WAIT = ("Wait a few minutes", "Try again later")
_MEDIA_RETRY = ("Try uploading a different file", "Check your file size and format", "Try again")

_RECOVERY_SUGGESTIONS = {
    ErrorKind.NO_CONNECTION: ("Check your internet connection", "Try again when connected"),
    ErrorKind.TIMEOUT: ("Check your internet connection", "Try again"),
    ErrorKind.CONNECTION_LOST: ("Check your internet connection", "Try again"),
    ErrorKind.SERVER_UNAVAILABLE: _WAIT,
    ErrorKind.NOT_AUTHENTICATED: ("Sign in to continue",),
    ErrorKind.SESSION_EXPIRED: ("Sign in again to continue",),
    ErrorKind.AUTHENTICATION_FAILED: ("Check your credentials", "Try signing in again"),
    ErrorKind.CSRF_TOKEN_MISSING: ("Restart the app", "Sign in again"),
    ErrorKind.INVALID_RESPONSE: ("Try again", "Update the app to the latest version"),
    ErrorKind.DECODING_FAILED: ("Try again", "Update the app to the latest version"),
    ErrorKind.IMAGE_NOT_SURF_RELATED: (
        "Upload an image showing surf conditions",
        "Ensure the image includes ocean, waves, beach, or coastline",
    ),
    ErrorKind.IMAGE_UPLOAD_FAILED: _MEDIA_RETRY,
    ErrorKind.VIDEO_UPLOAD_FAILED: _MEDIA_RETRY,
    ErrorKind.MEDIA_PROCESSING_FAILED: _MEDIA_RETRY,
    ErrorKind.VALIDATION_FAILED: ("Check all required fields", "Fix any validation errors"),
    ErrorKind.MISSING_REQUIRED_FIELD: ("Fill in all required information", "Check the field requirements"),
    ErrorKind.INVALID_FIELD_VALUE: ("Fill in all required information", "Check the field requirements"),
}

GENERIC_MESSAGE = "An unexpected error occurred."


@dataclass(frozen=True)
class NormalizedError:
    """Unified, immutable representation of a client-side failure."""

    kind: ErrorKind
    status_code: int | None = None
    message: str | None = None
    error: str | None = None
    help: str | None = None
    form_field: str | None = None
    reason: str | None = None
    fields: tuple[tuple[str, str], ...] = ()
    key: str | None = None
    url: str | None = None
    cause: BaseException | None = None

    # Network
    @classmethod
    def no_connection(cls) -> NormalizedError:
        return cls(ErrorKind.NO_CONNECTION)

    @classmethod
    def timeout(cls) -> NormalizedError:
        return cls(ErrorKind.TIMEOUT)

    @classmethod
    def connection_lost(cls) -> NormalizedError:
        return cls(ErrorKind.CONNECTION_LOST)

    @classmethod
    def server_unavailable(cls) -> NormalizedError:
        return cls(ErrorKind.SERVER_UNAVAILABLE)

    @classmethod
    def invalid_url(cls, url: str) -> NormalizedError:
        return cls(ErrorKind.INVALID_URL, url=url)

    # Authentication
    @classmethod
    def not_authenticated(cls) -> NormalizedError:
        return cls(ErrorKind.NOT_AUTHENTICATED)

    @classmethod
    def session_expired(cls, status_code: int | None = None) -> NormalizedError:
        return cls(ErrorKind.SESSION_EXPIRED, status_code=status_code)

    @classmethod
    def authentication_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.AUTHENTICATION_FAILED, reason=reason)

    @classmethod
    def csrf_token_missing(cls) -> NormalizedError:
        return cls(ErrorKind.CSRF_TOKEN_MISSING)

    # API protocol
    @classmethod
    def http_error(cls, status_code: int, message: str | None = None) -> NormalizedError:
        return cls(ErrorKind.HTTP_ERROR, status_code=status_code, message=message)

    @classmethod
    def api_error(cls, error: str, message: str, help: str) -> NormalizedError:
        return cls(ErrorKind.API_ERROR, error=error, message=message, help=help)

    @classmethod
    def invalid_response(cls) -> NormalizedError:
        return cls(ErrorKind.INVALID_RESPONSE)

    @classmethod
    def decoding_failed(cls, cause: BaseException | None = None) -> NormalizedError:
        return cls(ErrorKind.DECODING_FAILED, cause=cause)

    @classmethod
    def encoding_failed(cls, cause: BaseException | None = None) -> NormalizedError:
        return cls(ErrorKind.ENCODING_FAILED, cause=cause)

    # Validation
    @classmethod
    def missing_required_field(cls, field_name: str) -> NormalizedError:
        return cls(ErrorKind.MISSING_REQUIRED_FIELD, form_field=field_name)

    @classmethod
    def invalid_field_value(cls, field_name: str, reason: str) -> NormalizedError:
        return cls(ErrorKind.INVALID_FIELD_VALUE, form_field=field_name, reason=reason)

    @classmethod
    def validation_failed(cls, fields: Mapping[str, str]) -> NormalizedError:
        return cls(ErrorKind.VALIDATION_FAILED, fields=tuple(sorted(fields.items())))

    # Media
    @classmethod
    def image_validation_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.IMAGE_VALIDATION_FAILED, reason=reason)

    @classmethod
    def image_not_surf_related(cls) -> NormalizedError:
        return cls(ErrorKind.IMAGE_NOT_SURF_RELATED)

    @classmethod
    def image_upload_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.IMAGE_UPLOAD_FAILED, reason=reason)

    @classmethod
    def image_not_found(cls, key: str) -> NormalizedError:
        return cls(ErrorKind.IMAGE_NOT_FOUND, key=key)

    @classmethod
    def video_upload_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.VIDEO_UPLOAD_FAILED, reason=reason)

    @classmethod
    def video_not_found(cls, key: str) -> NormalizedError:
        return cls(ErrorKind.VIDEO_NOT_FOUND, key=key)

    @classmethod
    def media_processing_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.MEDIA_PROCESSING_FAILED, reason=reason)

    # Cache
    @classmethod
    def cache_read_failed(cls, key: str, cause: BaseException | None = None) -> NormalizedError:
        return cls(ErrorKind.CACHE_READ_FAILED, key=key, cause=cause)

    @classmethod
    def cache_write_failed(cls, key: str, cause: BaseException | None = None) -> NormalizedError:
        return cls(ErrorKind.CACHE_WRITE_FAILED, key=key, cause=cause)

    @classmethod
    def cache_expired(cls, key: str) -> NormalizedError:
        return cls(ErrorKind.CACHE_EXPIRED, key=key)

    # Data processing
    @classmethod
    def data_corrupted(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.DATA_CORRUPTED, reason=reason)

    @classmethod
    def parsing_failed(cls, reason: str) -> NormalizedError:
        return cls(ErrorKind.PARSING_FAILED, reason=reason)

    @classmethod
    def unexpected_data_format(cls) -> NormalizedError:
        return cls(ErrorKind.UNEXPECTED_DATA_FORMAT)

    @classmethod
    def unknown(cls, cause: BaseException | None = None) -> NormalizedError:
        return cls(ErrorKind.UNKNOWN, cause=cause)

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    @property
    def is_retryable(self) -> bool:
        if self.kind is ErrorKind.HTTP_ERROR:
            return self.status_code in RETRYABLE_STATUS_CODES
        return self.kind in RETRYABLE_KINDS

    @property
    def user_message(self) -> str:
        if self.kind is ErrorKind.HTTP_ERROR:
            text = self.message or f"Server returned error: {self.status_code}"
        elif self.kind is ErrorKind.API_ERROR:
            text = self.message or ""
        elif self.kind is ErrorKind.UNKNOWN:
            text = str(self.cause) if self.cause is not None else ""
        else:
            text = _USER_MESSAGES[self.kind].format(**self._template_values())
        return text.strip() or GENERIC_MESSAGE

    @property
    def technical_details(self) -> str:
        template = _TECHNICAL_DETAILS.get(self.kind)
        if template is None:
            return self.user_message
        return template.format(**self._template_values())

    @property
    def recovery_suggestions(self) -> tuple[str, ...]:
        if self.kind is ErrorKind.HTTP_ERROR:
            if self.status_code is not None and self.status_code >= 500:
                return _WAIT
            if self.status_code == 429:
                return ("Wait a moment", "Try again in a few seconds")
        if self.kind is ErrorKind.API_ERROR and self.help:
            return (self.help, "Contact support if the problem persists")
        return _RECOVERY_SUGGESTIONS.get(self.kind, _TRY_AGAIN)

    @property
    def field_name(self) -> str | None:
        """Form control this error should be shown next to, if any."""
        if self.kind in (ErrorKind.MISSING_REQUIRED_FIELD, ErrorKind.INVALID_FIELD_VALUE):
            return self.form_field
        if self.kind in _IMAGE_KINDS:
            return "image"
        if self.kind in _VIDEO_KINDS:
            return "video"
        if self.kind is ErrorKind.MEDIA_PROCESSING_FAILED:
            return "media"
        if self.kind is ErrorKind.API_ERROR:
            return api_error_field(self.error)
        return None

    @property
    def requires_authentication(self) -> bool:
        if self.category is ErrorCategory.AUTHENTICATION:
            return True
        return self.kind is ErrorKind.API_ERROR and "authentication" in (self.error or "").lower()

    @property
    def requires_image_retry(self) -> bool:
        if self.kind is not ErrorKind.API_ERROR or not self.error:
            return self.kind in (ErrorKind.IMAGE_VALIDATION_FAILED, ErrorKind.IMAGE_NOT_SURF_RELATED)
        if "validation" in self.error and "image" in self.error.lower():
            return True
        return any(marker in self.error for marker in _IMAGE_RETRY_MARKERS)

    @property
    def field_errors(self) -> dict[str, str]:
        if self.kind is ErrorKind.VALIDATION_FAILED:
            return dict(self.fields)
        if self.kind is ErrorKind.MISSING_REQUIRED_FIELD and self.form_field:
            return {self.form_field: "This field is required"}
        if self.kind is ErrorKind.INVALID_FIELD_VALUE and self.form_field:
            return {self.form_field: self.reason or self.user_message}
        if self.category is ErrorCategory.MEDIA and self.field_name:
            return {self.field_name: self.user_message}
        if self.kind is ErrorKind.API_ERROR and self.field_name:
            return {self.field_name: self.help or self.user_message}
        return {}

    def _template_values(self) -> dict[str, Any]:
        field_title = (self.form_field or "field").capitalize()
        return {
            "status_code": self.status_code,
            "message": self.message,
            "message_or_placeholder": self.message or "No message",
            "error": self.error,
            "help": self.help,
            "form_field": self.form_field,
            "field_title": field_title,
            "field_list": ", ".join(name for name, _ in self.fields),
            "reason": self.reason,
            "key": self.key,
            "url": self.url,
            "cause": self.cause,
            "cause_repr": repr(self.cause),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind.name,
            "category": self.category.value,
            "retryable": self.is_retryable,
            "status_code": self.status_code,
            "user_message": self.user_message,
            "technical_details": self.technical_details,
            "field_name": self.field_name,
            "field_errors": self.field_errors,
        }

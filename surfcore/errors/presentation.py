"""Project normalized errors into UI-ready presentations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from surfcore.errors.taxonomy import ErrorCategory, NormalizedError


class ErrorAction(str, Enum):
    RETRY = "retry"
    SIGN_IN = "sign_in"
    CHOOSE_NEW_IMAGE = "choose_new_image"
    CHOOSE_NEW_VIDEO = "choose_new_video"
    CHOOSE_NEW_FILE = "choose_new_file"
    CHECK_CONNECTION = "check_connection"
    DISMISS = "dismiss"

    @property
    def title(self) -> str:
        return _ACTION_TITLES[self]

    @property
    def is_primary(self) -> bool:
        return self in (ErrorAction.RETRY, ErrorAction.SIGN_IN)


_ACTION_TITLES = {
    ErrorAction.RETRY: "Try Again",
    ErrorAction.SIGN_IN: "Sign In",
    ErrorAction.CHOOSE_NEW_IMAGE: "Choose Another Image",
    ErrorAction.CHOOSE_NEW_VIDEO: "Choose Another Video",
    ErrorAction.CHOOSE_NEW_FILE: "Choose Another File",
    ErrorAction.CHECK_CONNECTION: "Check Connection",
    ErrorAction.DISMISS: "OK",
}

TITLE_BY_CATEGORY = {
    ErrorCategory.NETWORK: "Connection Issue",
    ErrorCategory.AUTHENTICATION: "Authentication Required",
    ErrorCategory.VALIDATION: "Validation Error",
    ErrorCategory.API_PROTOCOL: "Request Failed",
    ErrorCategory.MEDIA: "Media Error",
    ErrorCategory.CACHE: "Data Access Error",
    ErrorCategory.DATA_PROCESSING: "Data Error",
    ErrorCategory.UNKNOWN: "Unexpected Error",
}

_MEDIA_ACTION_BY_FIELD = {
    "image": ErrorAction.CHOOSE_NEW_IMAGE,
    "video": ErrorAction.CHOOSE_NEW_VIDEO,
}


@dataclass(frozen=True)
class ErrorPresentation:
    title: str
    message: str
    help_text: str
    actions: tuple[ErrorAction, ...] = ()
    field_errors: Mapping[str, str] = field(default_factory=dict)
    error_code: str = "CUSTOM"
    is_retryable: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_errors", MappingProxyType(dict(self.field_errors)))

    def __hash__(self) -> int:
        return hash(
            (
                self.title,
                self.message,
                self.help_text,
                self.actions,
                tuple(sorted(self.field_errors.items())),
                self.error_code,
                self.is_retryable,
            )
        )

    def error_for_field(self, name: str) -> str | None:
        return self.field_errors.get(name)

    @property
    def has_field_errors(self) -> bool:
        return bool(self.field_errors)

    @property
    def error_field_names(self) -> list[str]:
        return sorted(self.field_errors)

    @property
    def field_name(self) -> str | None:
        names = self.error_field_names
        return names[0] if names else None

    @property
    def requires_authentication(self) -> bool:
        return ErrorAction.SIGN_IN in self.actions

    @property
    def requires_new_media(self) -> bool:
        return any(action in self.actions for action in _MEDIA_ACTIONS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "message": self.message,
            "help_text": self.help_text,
            "actions": [action.value for action in self.actions],
            "field_errors": dict(self.field_errors),
            "error_code": self.error_code,
            "retryable": self.is_retryable,
        }


_MEDIA_ACTIONS = (ErrorAction.CHOOSE_NEW_IMAGE, ErrorAction.CHOOSE_NEW_VIDEO, ErrorAction.CHOOSE_NEW_FILE)


def actions_for(error: NormalizedError) -> tuple[ErrorAction, ...]:
    actions: list[ErrorAction] = []
    if error.is_retryable:
        actions.append(ErrorAction.RETRY)

    category = error.category
    if error.requires_authentication:
        actions.append(ErrorAction.SIGN_IN)
    elif category is ErrorCategory.MEDIA:
        actions.append(_MEDIA_ACTION_BY_FIELD.get(error.field_name or "", ErrorAction.CHOOSE_NEW_FILE))
    elif category is ErrorCategory.NETWORK:
        actions.append(ErrorAction.CHECK_CONNECTION)
    elif error.requires_image_retry:
        actions.append(ErrorAction.CHOOSE_NEW_IMAGE)

    if not actions and not error.is_retryable:
        actions.append(ErrorAction.DISMISS)
    return tuple(actions)


def present(error: NormalizedError) -> ErrorPresentation:
    """Build the presentation for ``error``; pure and total over all kinds."""
    return ErrorPresentation(
        title=TITLE_BY_CATEGORY[error.category],
        message=error.user_message,
        help_text="\n".join(error.recovery_suggestions),
        actions=actions_for(error),
        field_errors=error.field_errors,
        error_code=error.code,
        is_retryable=error.is_retryable,
    )


class Presenter(ABC):
    """Turns normalized errors into presentations for a UI layer."""

    @abstractmethod
    def present(self, error: NormalizedError) -> ErrorPresentation:
        raise NotImplementedError


class DefaultPresenter(Presenter):
    def present(self, error: NormalizedError) -> ErrorPresentation:
        return present(error)

import pytest

from surfcore.errors.taxonomy import ErrorCategory, ErrorKind, NormalizedError


def test_every_kind_has_category_and_nonempty_message():
    for kind in ErrorKind:
        error = NormalizedError(kind)
        assert isinstance(error.category, ErrorCategory)
        assert error.code == kind.value
        assert error.user_message
        assert error.recovery_suggestions


def test_codes_are_unique():
    codes = [kind.value for kind in ErrorKind]
    assert len(codes) == len(set(codes))


@pytest.mark.parametrize("status", [429, 500, 502, 503, 599])
def test_http_error_retryable_for_server_and_rate_limit(status):
    assert NormalizedError.http_error(status).is_retryable is True


@pytest.mark.parametrize("status", [400, 404, 409, 422])
def test_http_error_not_retryable_for_client_errors(status):
    assert NormalizedError.http_error(status).is_retryable is False


def test_session_expired_is_authentication_and_not_retryable():
    error = NormalizedError.session_expired(401)
    assert error.category is ErrorCategory.AUTHENTICATION
    assert error.is_retryable is False


def test_retryable_kinds():
    assert NormalizedError.no_connection().is_retryable
    assert NormalizedError.timeout().is_retryable
    assert NormalizedError.connection_lost().is_retryable
    assert NormalizedError.image_upload_failed("too big").is_retryable
    assert not NormalizedError.decoding_failed(ValueError("x")).is_retryable
    assert not NormalizedError.missing_required_field("surfSize").is_retryable


def test_field_association():
    assert NormalizedError.missing_required_field("surfSize").field_name == "surfSize"
    assert NormalizedError.invalid_field_value("windAmount", "too high").field_name == "windAmount"
    assert NormalizedError.image_not_surf_related().field_name == "image"
    assert NormalizedError.video_not_found("k1").field_name == "video"
    assert NormalizedError.timeout().field_name is None
    assert NormalizedError.http_error(500).field_name is None


def test_field_errors():
    assert NormalizedError.missing_required_field("surfSize").field_errors == {"surfSize": "This field is required"}
    assert NormalizedError.invalid_field_value("quality", "pick one").field_errors == {"quality": "pick one"}
    fields = {"surfSize": "required", "consistency": "required"}
    assert NormalizedError.validation_failed(fields).field_errors == fields
    assert NormalizedError.image_upload_failed("timeout").field_errors == {"image": "Failed to upload image: timeout"}
    assert NormalizedError.server_unavailable().field_errors == {}


def test_user_messages():
    assert NormalizedError.missing_required_field("surfSize").user_message == "Surfsize is required."
    assert NormalizedError.http_error(418).user_message == "Server returned error: 418"
    assert NormalizedError.http_error(418, "teapot").user_message == "teapot"
    assert NormalizedError.unknown(RuntimeError("boom")).user_message == "boom"
    assert NormalizedError.unknown(RuntimeError()).user_message == "An unexpected error occurred."


def test_api_error_recovery_leads_with_help():
    error = NormalizedError.api_error("bad_spot", "Spot not found", "Pick a spot from the list")
    assert error.recovery_suggestions[0] == "Pick a spot from the list"
    assert error.technical_details == "API Error - bad_spot: Spot not found | Help: Pick a spot from the list"


def test_structural_equality_and_immutability():
    assert NormalizedError.http_error(503, "down") == NormalizedError.http_error(503, "down")
    error = NormalizedError.timeout()
    with pytest.raises(AttributeError):
        error.status_code = 500


def test_to_dict_snapshot():
    payload = NormalizedError.session_expired(403).to_dict()
    assert payload["code"] == "AUTH_002"
    assert payload["category"] == "authentication"
    assert payload["retryable"] is False
    assert payload["status_code"] == 403


@pytest.mark.parametrize(
    ("backend_error", "field_name"),
    [
        ("Invalid surf size", "surfSize"),
        ("Invalid wind amount", "windAmount"),
        ("Invalid wind direction", "windDirection"),
        ("Invalid consistency", "consistency"),
        ("Invalid quality", "quality"),
        ("Invalid messiness", "messiness"),
        ("Image not surf-related", "image"),
        ("Image validation failed", "image"),
        ("Missing required fields", None),
        ("Failed to retrieve reports", None),
    ],
)
def test_api_error_field_from_backend_error(backend_error, field_name):
    error = NormalizedError.api_error(backend_error, "message", "help text")
    assert error.field_name == field_name
    assert error.field_errors == ({field_name: "help text"} if field_name else {})


def test_api_error_auth_and_image_flags():
    assert NormalizedError.api_error("Authentication required", "m", "h").requires_authentication
    assert not NormalizedError.api_error("Invalid quality", "m", "h").requires_authentication
    assert NormalizedError.api_error("Image not surf-related", "m", "h").requires_image_retry
    assert not NormalizedError.api_error("Image upload failed", "m", "h").requires_image_retry
    assert NormalizedError.image_not_surf_related().requires_image_retry

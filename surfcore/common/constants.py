"""Application constants."""

USER_AGENT = "surfcore/0.3 (+treblesurf client)"
EXIT_SUCCESS = 0
EXIT_HANDLED_FAILURE = 10
EXIT_HARD_FAIL = 20
RETRYABLE_STATUS_CODES = frozenset({429, *range(500, 600)})
AUTH_STATUS_CODES = frozenset({401, 403})
API_ERROR_FIELDS = ("error", "message", "help")
JSON_LOG_FIELDS = (
    "timestamp",
    "logger",
    "level",
    "event",
    "context",
    "error_code",
    "category",
    "retryable",
    "status_code",
    "method",
    "url",
    "attempt",
    "duration_ms",
    "message",
)

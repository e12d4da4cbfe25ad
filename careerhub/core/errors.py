"""
Domain errors.

Services raise these; the exception handler in main.py turns them into
JSON error responses with the status codes below.
"""


class CareerHubError(Exception):
    """Base class for all domain errors."""

    status_code = 400


class ConfigurationError(CareerHubError):
    """A required third-party credential is missing. Never retried."""

    status_code = 503


class InvalidAnswerError(CareerHubError):
    """Answer text is empty after trimming."""

    status_code = 422


class InvalidModeError(CareerHubError):
    """Interview mode is not one of the known values."""

    status_code = 400


class SessionStateError(CareerHubError):
    """Operation not allowed in the session's current state."""

    status_code = 409


class VoiceCallError(CareerHubError):
    """The voice provider rejected or failed a call request."""

    status_code = 502


def error_payload(error: CareerHubError) -> dict:
    return {"detail": str(error), "error": type(error).__name__}

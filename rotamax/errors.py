# rotamax/errors.py
"""Failure taxonomy shared by the stores, the coordinator and the HTTP layer.

Every error carries one user-facing ``message``; callers show that string and
keep whatever state they already had.
"""

from __future__ import annotations


class TrackerError(Exception):
    status_code = 500
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationMissing(TrackerError):
    """Backing-service configuration is absent; initialization cannot continue."""

    default_message = "Error: database configuration not found."


class AuthenticationFailed(TrackerError):
    status_code = 401
    default_message = "Error authenticating the user."


class ReadFailed(TrackerError):
    status_code = 503
    default_message = "Error loading data."


class WriteFailed(TrackerError):
    status_code = 503
    default_message = "Error saving data. Check your connection."

    def __init__(self, message: str | None = None, submitted: dict | None = None) -> None:
        super().__init__(message)
        # the form values the user was editing, echoed back for a retry
        self.submitted = dict(submitted or {})


class ValidationRejected(TrackerError):
    status_code = 400
    default_message = "Invalid input."

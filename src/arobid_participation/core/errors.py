"""Exception types raised by the participation engine."""

from __future__ import annotations

from typing import Optional


class ArobidError(Exception):
    """The Arobid backend answered with a non-success status."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ConfigurationError(ValueError):
    """Backend connection settings are missing or unusable."""


class InvalidInputError(ValueError):
    """Caller parameters failed validation. Raised before any network call."""


class BusinessSearchError(Exception):
    """A single event's business search failed."""

    def __init__(
        self,
        message: str,
        event_id: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.event_id = event_id
        self.status_code = status_code
        self.code = code

    @classmethod
    def from_backend(cls, event_id: str, error: ArobidError) -> "BusinessSearchError":
        message = f'Failed to search businesses in event "{event_id}": {error.message or "Unknown error"}'
        if error.status_code:
            message += f" (HTTP {error.status_code})"
        if error.code:
            message += f" [{error.code}]"
        return cls(message, event_id=event_id, status_code=error.status_code, code=error.code)


class ParticipationLookupError(Exception):
    """The participation lookup failed as a whole (not a per-event failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

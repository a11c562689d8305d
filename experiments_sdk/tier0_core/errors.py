"""
experiments_sdk.tier0_core.errors
───────────────────────────────────
Standard error taxonomy for the experiments SDK. Errors carry a stable
machine-readable code, a user-safe message, and internal detail.

Only definition loading and backend selection raise. Storage corruption and
tracking failures are absorbed by the runner and never reach callers.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class ExperimentsError(Exception):
    """
    Base class for all SDK errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: HTTP-style status for hosts that expose the SDK over an API
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class ValidationError(ExperimentsError):
    """Experiment definition or rule reference failed validation."""
    status_code = 422
    code = "validation_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Validation failed.",
        fields: dict[str, str] | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class ConfigurationError(ExperimentsError):
    """Misconfiguration detected at startup (unknown backend, missing URL)."""
    status_code = 500
    code = "configuration_error"


class TrackingError(ExperimentsError):
    """The tracking transport rejected or failed to deliver an event."""
    status_code = 502
    code = "tracking_error"


__all__ = [
    "ExperimentsError",
    "ValidationError",
    "ConfigurationError",
    "TrackingError",
]

"""
Error taxonomy shared by the auth and discovery layers.

Every error carries the HTTP status it maps to and a human-readable message
that is safe to show to the client. ``app.py`` renders them as
``{"error": message}``.
"""
from __future__ import annotations


class NearbyError(Exception):
    status_code: int = 500
    message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Auth ─────────────────────────────────────────────────────────────────


class ValidationError(NearbyError):
    status_code = 400
    message = "Email and password required"


class DuplicateEmail(NearbyError):
    status_code = 409
    message = "Email already registered."


class InvalidCredentials(NearbyError):
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(NearbyError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(NearbyError):
    status_code = 403
    message = "Invalid token"


# ── Discovery ────────────────────────────────────────────────────────────


class LocationNotFound(NearbyError):
    status_code = 404
    message = "Location not found"


class UpstreamUnavailable(NearbyError):
    status_code = 503
    message = "Location service unavailable, please try again"


class Superseded(NearbyError):
    """A newer request from the same client replaced this one."""

    status_code = 409
    message = "Search superseded by a newer request"

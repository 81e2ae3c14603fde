# Overview: Domain error taxonomy shared by services and routes.

"""
Every error a service raises on purpose derives from AssetTrackerError and
carries the HTTP status the API layer answers with. Anything else reaching a
route is an internal failure (500).
"""

from __future__ import annotations


class AssetTrackerError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AssetTrackerError, ValueError):
    """Missing or malformed input."""


class ConflictError(ValidationError):
    """Unique-field collision (asset tag, serial number, email, ...)."""


class NotFoundError(AssetTrackerError):
    """Unknown id."""

    status_code = 404


class InvalidStateError(AssetTrackerError):
    """
    A status precondition does not hold: issuing a non-Available asset,
    scrapping an Assigned one, reviewing a request that is no longer Pending.
    """


class ReferentialIntegrityError(AssetTrackerError):
    """The row is still referenced (e.g. a category with assets)."""


class AuthenticationError(AssetTrackerError):
    status_code = 401


class PermissionDeniedError(AssetTrackerError):
    status_code = 403

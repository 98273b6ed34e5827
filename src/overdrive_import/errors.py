"""Exception types raised by the OverDrive clients and the import pipeline."""

from __future__ import annotations


class OverDriveError(Exception):
    """Base class for all errors raised by overdrive_import."""


class AuthError(OverDriveError):
    """Raised when an access token cannot be acquired or refreshed."""


class FetchError(OverDriveError):
    """Raised on transport failures or responses that are not usable JSON.

    Attributes:
        url (str | None): The URL that was requested.
        status_code (int | None): HTTP status of the response, when one arrived.

    """

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NotFound(OverDriveError):
    """Raised when an expected field such as `id` or `totalItems` is missing."""

from __future__ import annotations


class PaapiSearchError(Exception):
    """Base class for every failure raised while processing a search item."""


class ConfigurationError(PaapiSearchError):
    """Credentials or runtime configuration are missing or unusable."""


class ValidationError(PaapiSearchError):
    """Search options cannot produce a valid SearchItems request."""


class RemoteError(PaapiSearchError):
    """The remote SearchItems call failed (network, auth, throttling, bad request)."""

    def __init__(self, message: str, *, status: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code


class UnknownError(PaapiSearchError):
    """The remote call failed without anything resembling an error message."""

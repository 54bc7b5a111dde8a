"""Exception types raised across the sync, reconciliation and admission layers."""

from __future__ import annotations


class StaySyncError(Exception):
    """Base class for all stay-sync errors."""


class FetchError(StaySyncError):
    """A feed could not be downloaded (network error, timeout, non-2xx status)."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(StaySyncError):
    """A feed payload is not a well-formed calendar document."""


class ValidationError(StaySyncError):
    """Admission input was rejected. The message is shown to the operator as-is."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class StoreError(StaySyncError):
    """The persistent store is unreachable or a statement failed."""


class AuthError(StaySyncError):
    """Login was refused by the identity provider or the authorization policy."""

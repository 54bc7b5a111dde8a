"""
Admin login.

Credentials are checked by an IdentityProvider, and the provider asks an
injected AuthorizationPolicy whether the account may sign in at all. The
default setup reads both from the environment (ADMIN_CREDENTIALS and
ALLOWED_EMAILS).
"""

from __future__ import annotations

import hmac
import re
from dataclasses import dataclass
from typing import Iterable, Protocol

import structlog

from stay_sync.config import ADMIN_CREDENTIALS_RAW, ALLOWED_EMAILS
from stay_sync.errors import AuthError, ValidationError
from stay_sync.schemas.results import Failure, Result, Success

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class User:
    email: str
    display_name: str = ""


class AuthorizationPolicy(Protocol):
    def is_allowed(self, email: str) -> bool: ...


class IdentityProvider(Protocol):
    def login(self, email: str, password: str) -> User: ...


class AllowListPolicy:
    """Only the listed email addresses (case-insensitive) may sign in."""

    def __init__(self, emails: Iterable[str]):
        self._emails = frozenset(email.strip().lower() for email in emails if email.strip())

    def is_allowed(self, email: str) -> bool:
        return email.strip().lower() in self._emails


class StaticCredentialProvider:
    """
    Identity provider backed by a fixed email -> password map.

    Suitable for a single-property admin console with a handful of operators.
    """

    def __init__(self, credentials: dict[str, str], policy: AuthorizationPolicy):
        self._credentials = {email.strip().lower(): pw for email, pw in credentials.items()}
        self._policy = policy

    @classmethod
    def from_env(
        cls,
        raw: str = ADMIN_CREDENTIALS_RAW,
        allowed_emails: Iterable[str] = ALLOWED_EMAILS,
    ) -> "StaticCredentialProvider":
        """Build from ``email:password`` pairs separated by commas."""
        credentials: dict[str, str] = {}
        for pair in raw.split(","):
            email, sep, password = pair.strip().partition(":")
            if sep and email and password:
                credentials[email] = password
        return cls(credentials, AllowListPolicy(allowed_emails))

    def login(self, email: str, password: str) -> User:
        normalized = email.strip().lower()
        if not self._policy.is_allowed(normalized):
            raise AuthError("Access denied. This account is not authorized.")

        expected = self._credentials.get(normalized)
        if expected is None or not hmac.compare_digest(
            expected.encode("utf-8"), password.encode("utf-8")
        ):
            raise AuthError("Invalid email or password")

        return User(email=normalized, display_name=normalized.split("@", 1)[0])


def authenticate(provider: IdentityProvider, email: str, password: str) -> Result[User]:
    """
    Validate login input and sign in through the identity provider.

    Returns:
        Result[User]: Success(user), Failure(ValidationError) for malformed
        input, or Failure(AuthError) when the provider refuses the login.
    """
    if not email.strip():
        return Failure(ValidationError("Email is required", field="email"))
    if not EMAIL_PATTERN.match(email.strip()):
        return Failure(ValidationError("Invalid email format", field="email"))
    if not password:
        return Failure(ValidationError("Password is required", field="password"))

    try:
        user = provider.login(email, password)
    except AuthError as e:
        logger.warning("login_refused", reason=str(e))
        return Failure(e)

    logger.info("login_succeeded", email=user.email)
    return Success(user)

"""Authentication / authorization failures.

Each error carries the HTTP status, the client-facing message and any
extra response headers.  ``peridot.main`` installs one exception handler
that renders them as ``{"error": message}``.
"""

from __future__ import annotations

ERR_BEARER = "Authorization header with valid Bearer token required"
ERR_NOT_REGISTERED = "Github user is not registered"
ERR_ACCESS_DENIED = "Access denied"
ERR_LOOKUP = "Unable to resolve user identity"

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class AuthError(Exception):
    status_code: int = 401
    message: str = ERR_BEARER
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingCredential(AuthError):
    """No Authorization header, or not of the form ``Bearer <token>``."""

    status_code = 401
    message = ERR_BEARER
    headers = _CHALLENGE


class InvalidCredential(MissingCredential):
    """Token present but failed verification.

    Subclasses :class:`MissingCredential` so both render identically.
    """


class UnregisteredIdentity(AuthError):
    status_code = 401
    message = ERR_NOT_REGISTERED
    headers = _CHALLENGE


class InsufficientRole(AuthError):
    status_code = 403
    message = ERR_ACCESS_DENIED
    headers = None


class OwnerMismatch(InsufficientRole):
    """Coarse role check passed but the self/other rule refused."""


class IdentityLookupError(AuthError):
    """The user lookup failed for a reason other than "no such user"."""

    status_code = 500
    message = ERR_LOOKUP
    headers = None

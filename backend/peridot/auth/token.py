"""Login token codec.

A token is an HS256 JWT whose only claim is ``github``, the caller's GitHub
login.  It carries no user ID, role or timestamp: the same key and login
always produce the same token, and everything authorization-related is
looked up fresh from the database on each request.
"""

from __future__ import annotations

import logging

import jwt  # PyJWT

logger = logging.getLogger("peridot.auth")

ALGORITHM = "HS256"
# Any HMAC-SHA2 signature verifies; tokens are always issued with ALGORITHM.
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]
CLAIM = "github"


class TokenError(Exception):
    """Base exception for token errors."""


class TokenEncodingError(TokenError):
    """The token could not be signed."""


class TokenInvalidError(TokenError):
    """Token is invalid, tampered with, or malformed."""


def encode_token(secret_key: str, github: str) -> str:
    """Sign a token binding *github*."""
    try:
        return jwt.encode({CLAIM: github}, secret_key, algorithm=ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise TokenEncodingError("error encoding login token") from exc


def decode_token(secret_key: str, token: str) -> str:
    """Verify *token* and return the GitHub login it binds.

    Only HMAC signatures are accepted.  Fails when the signature
    does not verify, the header names a non-HMAC algorithm, or the
    ``github`` claim is missing or not a string.  Does not touch the
    database.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=ACCEPTED_ALGORITHMS,
            options={"require": [CLAIM]},
        )
    except jwt.PyJWTError as exc:
        logger.debug("Token decode failed: %s", exc)
        raise TokenInvalidError("error decoding login token") from exc

    github = payload.get(CLAIM)
    if not isinstance(github, str):
        raise TokenInvalidError("error decoding login token")
    return github

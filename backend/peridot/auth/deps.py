"""FastAPI dependencies: the access gate and ``require_role``.

The gate is attached to every protected router::

    gate = AccessGate(settings.JWT_SECRET_KEY)
    app.include_router(projects_router, dependencies=[Depends(gate)])

It authenticates the ``Authorization: Bearer <token>`` header, resolves the
caller and stores the :class:`Identity` on ``request.state``.  Endpoints then
enforce their minimum role::

    @router.post("")
    async def create_project(..., identity: Identity = Depends(require_role(Role.OPERATOR))):
        ...

Both raise :mod:`peridot.auth.errors` exceptions, which abort the request
before the endpoint body runs.
"""

import logging

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from peridot.auth.errors import InsufficientRole, InvalidCredential, MissingCredential, UnregisteredIdentity
from peridot.auth.identity import Identity, resolve_identity
from peridot.auth.roles import Role
from peridot.auth.token import TokenInvalidError, decode_token
from peridot.db.engine import get_db
from peridot.utils.logger import ctx_github

logger = logging.getLogger("peridot.auth")

_BEARER_PREFIX = "Bearer "

# Private attribute on request.state; only this module reads or writes it.
_IDENTITY_ATTR = "_peridot_identity"


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise MissingCredential()
    token = authorization[len(_BEARER_PREFIX):]
    if not token:
        raise MissingCredential()
    return token


class AccessGate:
    """Authenticates the request and attaches the caller's identity.

    The signing key is given at construction; nothing here reads the
    environment.
    """

    def __init__(self, signing_key: str) -> None:
        if not signing_key:
            raise ValueError("AccessGate requires a non-empty signing key")
        self._signing_key = signing_key

    async def __call__(
        self,
        request: Request,
        authorization: str | None = Header(default=None, alias="Authorization"),
        db: AsyncSession = Depends(get_db),
    ) -> Identity:
        token = _bearer_token(authorization)
        try:
            github = decode_token(self._signing_key, token)
        except TokenInvalidError as exc:
            raise InvalidCredential() from exc

        ctx_github.set(github)
        identity = await resolve_identity(db, github)
        setattr(request.state, _IDENTITY_ATTR, identity)
        return identity


def current_identity(request: Request) -> Identity | None:
    """Return the identity the gate stored for this request, if any."""
    return getattr(request.state, _IDENTITY_ATTR, None)


def require_role(minimum: Role):
    """Return a FastAPI dependency that enforces *minimum* (or higher).

    - no identity on the request   -> 401, bearer token required
    - unregistered GitHub login    -> 401, not registered
    - role below *minimum*         -> 403, access denied
    """

    async def _check(request: Request) -> Identity:
        identity = current_identity(request)
        if identity is None:
            raise MissingCredential()
        if not identity.is_registered:
            logger.info("Rejected unregistered github user '%s'", identity.github)
            raise UnregisteredIdentity()
        if not identity.role.at_least(minimum):
            logger.warning(
                "Access denied: user '%s' (role=%s) needs role '%s' for %s %s",
                identity.github,
                identity.role.label,
                minimum.label,
                request.method,
                request.url.path,
            )
            raise InsufficientRole()
        return identity

    return _check

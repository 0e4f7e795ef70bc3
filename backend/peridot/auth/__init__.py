"""Authentication and authorization for peridot.

Credential scheme
-----------------
``Authorization: Bearer <jwt>``
    HS256-signed JWT issued by the ``/auth/redirect`` OAuth callback.
    Its only claim is ``github`` (the caller's GitHub login).  Roles and
    user IDs are never read from the token; they are looked up in the
    ``users`` table on every request.

Role hierarchy (checked with ``require_role``)
-----------------------------------------------
``admin`` > ``operator`` > ``commenter`` > ``viewer`` > ``disabled``
"""

from peridot.auth.deps import AccessGate, current_identity, require_role
from peridot.auth.identity import Identity
from peridot.auth.roles import Role

__all__ = ["AccessGate", "Identity", "Role", "current_identity", "require_role"]

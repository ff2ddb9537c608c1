"""Authentication dependencies for FastAPI routes.

Public interface:
    ``require_reader``: AuthContext for read endpoints. Anonymous readers
                         pass when ``PUBLIC_READ=true``.
    ``require_editor``: AuthContext for write endpoints; viewers get 403.

When ``settings.auth_enabled`` is False every request runs as an anonymous
admin so the development workflow is unbroken.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .logging_config import actor_var
from .token_factory import decode_token
from ..exceptions import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

_WRITE_ROLES = frozenset({"admin", "editor", "service"})


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity of the caller.

    ``user_id`` is what write operations record as ``created_by``.
    """

    user_id: str
    role: str

    @property
    def can_write(self) -> bool:
        return self.role in _WRITE_ROLES


# Dev-mode anonymous context.
_ANONYMOUS = AuthContext(user_id="anonymous", role="admin")

# Public-read mode: anonymous can read history but cannot write.
_PUBLIC_READER = AuthContext(user_id="anonymous", role="viewer")


def _authenticate(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[AuthContext]:
    """Decode the bearer token, or None if it is absent."""
    if credentials is None:
        return None

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        logger.info("Rejected invalid or expired token")
        raise AuthenticationError("Invalid or expired token")

    auth = AuthContext(user_id=payload.sub, role=payload.role)
    actor_var.set(auth.user_id)
    return auth


async def require_reader(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Require a valid token, unless reads are public."""
    if not settings.auth_enabled:
        return _ANONYMOUS

    auth = _authenticate(credentials)
    if auth is not None:
        return auth
    if settings.public_read:
        return _PUBLIC_READER
    raise AuthenticationError("Missing authentication token")


async def require_editor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Require a valid token whose role may write versions and branches."""
    if not settings.auth_enabled:
        return _ANONYMOUS

    auth = _authenticate(credentials)
    if auth is None:
        raise AuthenticationError("Missing authentication token")
    if not auth.can_write:
        raise ForbiddenError("Editor access required")
    return auth

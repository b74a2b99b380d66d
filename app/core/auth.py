"""Request authentication and role gates.

Callers authenticate in one of two ways:

- ``Authorization: Bearer <token>`` with a token issued by ``/v1/auth/login``;
- ``X-API-Key: <key>`` with an active key from the settings page.

API-key callers are checked against the key's permissions by HTTP method
(GET needs ``read``, POST/PUT/PATCH need ``write``, DELETE needs ``delete``)
and act with the admin role otherwise. Route groups are gated by role with
:func:`require_roles`, mirroring the sidebar navigation rules.

Usage:
    @router.get("/users", dependencies=[Depends(require_roles("admin", "moderator"))])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Annotated, Callable

from fastapi import Depends, Header, Request

from app.core.container import Services, get_services
from app.core.errors import AuthenticationAppError, AuthorizationAppError
from app.schemas.user import User
from app.services.api_key_service import hash_key

logger = logging.getLogger(__name__)

METHOD_PERMISSIONS: dict[str, str] = {
    "GET": "read",
    "HEAD": "read",
    "OPTIONS": "read",
    "POST": "write",
    "PUT": "write",
    "PATCH": "write",
    "DELETE": "delete",
}

ALL_PERMISSIONS = frozenset({"read", "write", "delete"})


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of the current request."""

    kind: str
    id: str
    role: str
    user: User | None = None
    permissions: frozenset[str] = field(default=ALL_PERMISSIONS)

    @property
    def rate_limit_key(self) -> str:
        return f"{self.kind}:{self.id}"


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header.

    Examples:
        >>> parse_bearer("Bearer abc")
        'abc'
        >>> parse_bearer(None) is None
        True
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationAppError(
            code="token_invalid",
            message="Authorization header must use the Bearer scheme",
        )
    return token.strip()


def required_permission(method: str) -> str:
    return METHOD_PERMISSIONS.get(method.upper(), "write")


def _authenticate_api_key(services: Services, raw_key: str, method: str) -> Principal:
    api_key = services.api_keys.authenticate(raw_key)
    if api_key is None:
        logger.warning("auth.api_key_rejected", extra={"key_hash": hash_key(raw_key)})
        raise AuthenticationAppError(code="invalid_api_key", message="Invalid or inactive API key")

    needed = required_permission(method)
    if needed not in api_key.permissions:
        logger.warning(
            "auth.permission_denied",
            extra={"api_key_id": api_key.id, "required_permission": needed},
        )
        raise AuthorizationAppError(
            code="insufficient_permissions",
            message=f"API key lacks the '{needed}' permission",
            details={"allowed": list(api_key.permissions)},
        )
    return Principal(
        kind="api_key",
        id=api_key.id,
        role="admin",
        permissions=frozenset(api_key.permissions),
    )


async def authenticate(
    request: Request,
    services: Annotated[Services, Depends(get_services)],
    authorization: Annotated[str | None, Header()] = None,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> Principal:
    """FastAPI dependency resolving the caller from a session token or API key.

    Raises:
        AuthenticationAppError: No credentials, or credentials that are
            unknown, expired or revoked.
        AuthorizationAppError: API key without the permission for this method.
    """
    token = parse_bearer(authorization)
    if token:
        user = services.auth.resolve(token)
        principal = Principal(kind="user", id=user.id, role=user.role, user=user)
    elif x_api_key:
        principal = _authenticate_api_key(services, x_api_key, request.method)
    else:
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Not authenticated. Provide a Bearer token or X-API-Key header.",
        )

    request.state.principal = principal
    logger.debug("auth.success", extra={"principal_kind": principal.kind, "principal_id": principal.id})
    return principal


CurrentPrincipal = Annotated[Principal, Depends(authenticate)]


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Build a dependency that admits only callers with one of ``roles``."""

    async def dependency(principal: CurrentPrincipal) -> Principal:
        if principal.role not in roles:
            logger.warning(
                "auth.role_denied",
                extra={"principal_id": principal.id, "role": principal.role, "required_roles": list(roles)},
            )
            raise AuthorizationAppError(
                code="insufficient_role",
                message="You do not have access to this section",
                details={"allowed": list(roles)},
            )
        return principal

    return dependency

# portal/services/session_service.py

from typing import Any, Dict, List, Protocol

from loguru import logger

from portal.core.errors import BackendError
from portal.models.roles import AppRole
from portal.schemas.session import SessionRoles


class RoleReader(Protocol):
    async def list_roles(self, user_id: str) -> List[str]: ...


async def resolve_session_roles(gateway: RoleReader, claims: Dict[str, Any]) -> SessionRoles:
    """
    Roles held by the account behind a verified access token.

    A failed lookup degrades to "no roles" so the caller still gets a
    well-formed (unprivileged) session.
    """
    user_id = str(claims["sub"])

    try:
        raw_roles = await gateway.list_roles(user_id)
    except BackendError as e:
        logger.error(f"Error fetching roles for {user_id}: {e}")
        raw_roles = []

    roles: List[AppRole] = []
    for raw in raw_roles:
        try:
            role = AppRole(raw)
        except ValueError:
            logger.warning(f"Ignoring unknown role {raw!r} for user {user_id}")
            continue
        if role not in roles:
            roles.append(role)

    return SessionRoles(
        user_id=user_id,
        email=claims.get("email"),
        roles=roles,
        is_admin=AppRole.Admin in roles,
        is_faculty=AppRole.Faculty in roles,
        is_student=AppRole.Student in roles,
    )

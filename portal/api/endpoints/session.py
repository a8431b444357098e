# portal/api/endpoints/session.py

from fastapi import APIRouter, Depends

from portal.api.deps import get_gateway, get_token_claims
from portal.schemas.session import SessionRoles
from portal.services.backend import SupabaseGateway
from portal.services.session_service import resolve_session_roles

router = APIRouter(prefix="/api/portal", tags=["Session"])


@router.get("/session", response_model=SessionRoles)
async def current_session(
    claims: dict = Depends(get_token_claims),
    gateway: SupabaseGateway = Depends(get_gateway),
):
    """Roles of the signed-in account, as the portals use them for gating."""
    return await resolve_session_roles(gateway, claims)

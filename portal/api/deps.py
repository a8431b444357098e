# portal/api/deps.py

from functools import lru_cache

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portal.core.config import PortalConfig, settings
from portal.core.errors import AuthenticationError, ServiceUnavailableError
from portal.core.security import decode_access_token
from portal.services.backend import SupabaseGateway
from portal.services.portal_login_service import PortalLoginService
from portal.services.token_service import PasswordGrantClient


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# Backing services (built once per process)
# ------------------------------------------------------------
@lru_cache
def get_portal_config() -> PortalConfig:
    return PortalConfig.from_settings(settings)


@lru_cache
def get_gateway() -> SupabaseGateway:
    return SupabaseGateway.from_config(get_portal_config(), users_page_size=settings.ADMIN_USERS_PAGE_SIZE)


def get_portal_login_service(
    gateway: SupabaseGateway = Depends(get_gateway),
    config: PortalConfig = Depends(get_portal_config),
) -> PortalLoginService:
    tokens = PasswordGrantClient(config, timeout=settings.HTTP_TIMEOUT_SECONDS)
    return PortalLoginService(gateway, tokens)


# ------------------------------------------------------------
# Verified claims of the caller's access token
# ------------------------------------------------------------
def get_jwt_secret() -> str | None:
    return settings.SUPABASE_JWT_SECRET


async def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    secret: str | None = Depends(get_jwt_secret),
) -> dict:
    if not secret:
        raise ServiceUnavailableError()

    if not credentials:
        raise AuthenticationError("Not authenticated")

    try:
        return decode_access_token(credentials.credentials, secret)
    except jwt.InvalidTokenError:
        raise AuthenticationError("Could not validate credentials")

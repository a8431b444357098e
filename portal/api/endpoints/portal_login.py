# portal/api/endpoints/portal_login.py

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger

from portal.core.config import settings
from portal.core.errors import PortalError, UnknownError
from portal.core.rate_limiter import limiter
from portal.schemas.portal_login import ErrorResponse, PortalLoginRequest, PortalLoginResponse
from portal.api.deps import get_portal_login_service
from portal.services.portal_login_service import PortalLoginService

router = APIRouter(tags=["Portal Login"])

LOGIN_PATHS = ("/functions/v1/portal-login", "/api/portal-login")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unsupported portal or missing identifier/DOB"},
    401: {"model": ErrorResponse, "description": "Invalid identifier, DOB or login credentials"},
    403: {"model": ErrorResponse, "description": "Portal Not Activated"},
    500: {"model": ErrorResponse, "description": "Account setup failed / unexpected error"},
}


async def read_login_body(request: Request) -> PortalLoginRequest:
    """Invalid JSON or a non-object body is treated as an empty request."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        body = {}

    return PortalLoginRequest.model_validate(body)


# -------------------------------------------------------------------
# STUDENT PORTAL LOGIN (roll/register number + DOB)
# -------------------------------------------------------------------
@limiter.limit(settings.PORTAL_LOGIN_RATE_LIMIT)
async def portal_login(
    request: Request,
    service: PortalLoginService = Depends(get_portal_login_service),
):
    data = await read_login_body(request)

    try:
        payload = await service.login(data.portal_type, data.identifier, data.dob)
    except PortalError:
        raise
    except Exception as e:
        logger.exception("portal-login error")
        raise UnknownError(str(e) or "Unknown error") from e

    return JSONResponse(payload, status_code=200)


async def portal_login_preflight():
    return Response(status_code=204)


for path in LOGIN_PATHS:
    router.add_api_route(
        path,
        portal_login,
        methods=["POST"],
        response_model=PortalLoginResponse,
        responses=ERROR_RESPONSES,
    )
    router.add_api_route(path, portal_login_preflight, methods=["OPTIONS"], include_in_schema=False)

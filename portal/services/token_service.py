# portal/services/token_service.py

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from portal.core.config import PortalConfig
from portal.core.errors import BackendError, InvalidLoginCredentialsError

TOKEN_PATH = "/auth/v1/token"


class PasswordGrantClient:
    """
    Exchanges email + password for a session via the auth service's
    password grant. The JSON payload is returned untouched.
    """

    def __init__(
        self,
        config: PortalConfig,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.timeout = timeout
        self.transport = transport

    @property
    def token_url(self) -> str:
        return f"{self.config.store_url}{TOKEN_PATH}"

    async def exchange(self, email: str, password: str) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.config.token_api_key,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    self.token_url,
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                    headers=headers,
                )
            except httpx.HTTPError as e:
                raise BackendError("token exchange", e) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.is_success:
            logger.error(f"portal-login token error ({response.status_code}): {payload}")
            raise InvalidLoginCredentialsError()

        return payload

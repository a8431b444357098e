# portal/core/config.py

from dataclasses import dataclass
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str

    # Public key used for the password-grant exchange. Several names are
    # in circulation depending on how the project was provisioned; the
    # first non-empty one wins (see public_key).
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_ANON_PUBLIC: Optional[str] = None
    SUPABASE_PUBLISHABLE_KEY: Optional[str] = None

    # Needed only for GET /api/portal/session
    SUPABASE_JWT_SECRET: Optional[str] = None

    HTTP_TIMEOUT_SECONDS: float = 10.0
    ADMIN_USERS_PAGE_SIZE: int = 200

    # --- RATE LIMITING ---
    RATE_LIMIT_ENABLED: bool = True
    PORTAL_LOGIN_RATE_LIMIT: str = "20/minute"
    REDIS_URL: Optional[str] = None

    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    ENV: str = "dev"  # "dev" or "prod"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def public_key(self) -> Optional[str]:
        return self.SUPABASE_ANON_KEY or self.SUPABASE_ANON_PUBLIC or self.SUPABASE_PUBLISHABLE_KEY or None


@dataclass(frozen=True)
class PortalConfig:
    """
    Credentials handed to the backing-store gateway and the token client.

    Built once from Settings; nothing below the API layer reads the
    process environment, so tests can construct one by hand.
    """

    store_url: str
    service_credential: str
    public_credential: Optional[str] = None

    @property
    def token_api_key(self) -> str:
        # The service key is accepted by the token endpoint as well.
        return self.public_credential or self.service_credential

    @classmethod
    def from_settings(cls, s: "Settings") -> "PortalConfig":
        return cls(
            store_url=s.SUPABASE_URL.rstrip("/"),
            service_credential=s.SUPABASE_SERVICE_ROLE_KEY,
            public_credential=s.public_key,
        )


settings = Settings()

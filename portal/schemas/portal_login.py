# portal/schemas/portal_login.py

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# -------------------------------------------------------------------
# PORTAL LOGIN REQUEST
# -------------------------------------------------------------------
class PortalLoginRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"portalType": "student", "identifier": "21CSE001", "dob": "2003-05-15"},
                {"portalType": "student", "identifier": "721921104001", "dob": "15/05/2003"},
            ]
        },
    )

    portal_type: Optional[Any] = Field(default=None, alias="portalType")
    identifier: str = ""    # <-- roll_number OR register_number
    dob: str = ""           # <-- YYYY-MM-DD, DD/MM/YYYY or DD-MM-YYYY

    @field_validator("identifier", "dob", mode="before")
    @classmethod
    def coerce_to_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


# -------------------------------------------------------------------
# TOKEN RESPONSE (pass-through of the auth service payload)
# -------------------------------------------------------------------
class PortalLoginResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None


class ErrorResponse(BaseModel):
    error: str

# portal/schemas/session.py

from typing import List, Optional

from pydantic import BaseModel

from portal.models.roles import AppRole


class SessionRoles(BaseModel):
    user_id: str
    email: Optional[str] = None
    roles: List[AppRole] = []
    is_admin: bool = False
    is_faculty: bool = False
    is_student: bool = False

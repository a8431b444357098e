# portal/models/student.py

from typing import Optional

from pydantic import BaseModel

# Columns read by the login adapter; the rest of the students table is
# managed from the admin screens.
STUDENT_LOGIN_COLUMNS = "id, roll_number, register_number, user_id, is_active, date_of_birth"


class StudentRecord(BaseModel):
    id: str
    roll_number: str
    register_number: Optional[str] = None
    user_id: Optional[str] = None
    is_active: Optional[bool] = True
    date_of_birth: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return bool(self.user_id)

    @property
    def is_disabled(self) -> bool:
        # Only an explicit false disables the portal.
        return self.is_active is False

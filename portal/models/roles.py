# portal/models/roles.py

from enum import Enum


class AppRole(str, Enum):
    """Values of the ``app_role`` enum used by the user_roles table."""

    Admin = "admin"
    Faculty = "faculty"
    Student = "student"


class PortalType(str, Enum):
    Student = "student"
    Faculty = "faculty"
    Admin = "admin"

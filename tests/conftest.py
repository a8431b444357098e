import os
import uuid
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# TEST ENVIRONMENT
# Must be set BEFORE importing portal.main, which builds Settings at
# import time.
# ------------------------------------------------------------------
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-123"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from portal.main import app
from portal.api.deps import get_gateway, get_portal_login_service
from portal.core.errors import BackendError, InvalidLoginCredentialsError
from portal.models.roles import AppRole
from portal.models.student import StudentRecord
from portal.services.portal_login_service import PortalLoginService


class FakeGateway:
    """In-memory stand-in for SupabaseGateway."""

    def __init__(self):
        self.students: Dict[str, Dict[str, Any]] = {}
        self.auth_users: Dict[str, Dict[str, Any]] = {}  # id -> {"email", "password", "metadata"}
        self.roles: List[Dict[str, str]] = []
        self.calls: List[str] = []

        self.fail_find = False
        self.fail_link = False
        self.fail_create = False
        self.fail_list_users = False
        self.fail_has_role = False
        self.fail_add_role = False

    def add_student(self, roll_number, date_of_birth, register_number=None, is_active=True, user_id=None, id=None):
        student_id = id or str(uuid.uuid4())
        self.students[student_id] = {
            "id": student_id,
            "roll_number": roll_number,
            "register_number": register_number,
            "user_id": user_id,
            "is_active": is_active,
            "date_of_birth": date_of_birth,
        }
        return student_id

    def add_auth_user(self, email, password):
        user_id = str(uuid.uuid4())
        self.auth_users[user_id] = {"email": email, "password": password, "metadata": {}}
        return user_id

    def roles_for(self, user_id):
        return [r["role"] for r in self.roles if r["user_id"] == user_id]

    # --- gateway interface ---
    async def find_students(self, identifier: str, dob: str) -> List[StudentRecord]:
        self.calls.append("find_students")
        if self.fail_find:
            raise BackendError("find students", "connection reset")
        return [
            StudentRecord.model_validate(row)
            for row in sorted(self.students.values(), key=lambda r: r["id"])
            if identifier in (row["roll_number"], row["register_number"]) and row["date_of_birth"] == dob
        ]

    async def link_student_account(self, student_id: str, user_id: str) -> None:
        self.calls.append("link_student_account")
        if self.fail_link:
            raise BackendError("link student account", "permission denied")
        self.students[student_id]["user_id"] = user_id

    async def has_role(self, user_id: str, role: AppRole) -> bool:
        self.calls.append("has_role")
        if self.fail_has_role:
            raise BackendError("check role", "statement timeout")
        return role.value in self.roles_for(user_id)

    async def add_role(self, user_id: str, role: AppRole) -> None:
        self.calls.append("add_role")
        if self.fail_add_role:
            raise BackendError("insert role", "connection reset")
        self.roles.append({"user_id": user_id, "role": role.value})

    async def list_roles(self, user_id: str) -> List[str]:
        self.calls.append("list_roles")
        return self.roles_for(user_id)

    async def create_auth_user(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        self.calls.append("create_auth_user")
        if self.fail_create:
            raise BackendError("create auth user", "service unavailable")
        if any(u["email"] == email for u in self.auth_users.values()):
            raise BackendError("create auth user", "A user with this email address has already been registered")
        user_id = str(uuid.uuid4())
        self.auth_users[user_id] = {"email": email, "password": password, "metadata": metadata or {}}
        return user_id

    async def find_auth_user_by_email(self, email: str) -> Optional[str]:
        self.calls.append("find_auth_user_by_email")
        if self.fail_list_users:
            raise BackendError("list auth users", "timeout")
        for user_id, user in self.auth_users.items():
            if user["email"] == email:
                return user_id
        return None


class FakeTokenIssuer:
    """Password grant against FakeGateway's auth users."""

    def __init__(self, gateway: FakeGateway):
        self.gateway = gateway
        self.exchanges: List[tuple] = []

    async def exchange(self, email: str, password: str) -> Dict[str, Any]:
        self.exchanges.append((email, password))
        for user_id, user in self.gateway.auth_users.items():
            if user["email"] == email and user["password"] == password:
                return {
                    "access_token": f"access-{user_id}",
                    "refresh_token": f"refresh-{user_id}",
                    "token_type": "bearer",
                    "expires_in": 3600,
                    "user": {"id": user_id, "email": email},
                }
        raise InvalidLoginCredentialsError()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def tokens(gateway):
    return FakeTokenIssuer(gateway)


@pytest.fixture
def service(gateway, tokens):
    return PortalLoginService(gateway, tokens)


@pytest_asyncio.fixture
async def client(gateway, service):
    app.dependency_overrides[get_portal_login_service] = lambda: service
    app.dependency_overrides[get_gateway] = lambda: gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()

# portal/services/backend.py

"""
Service-role access to the Supabase project: the ``students`` and
``user_roles`` tables and the auth admin API.

The supabase client is synchronous, so every call runs in the threadpool
and never blocks the event loop. SDK failures are re-raised as
BackendError so the services above only deal with one exception type.
"""

from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from starlette.concurrency import run_in_threadpool
from supabase import Client, create_client
from supabase.client import ClientOptions

from portal.core.config import PortalConfig
from portal.core.errors import BackendError
from portal.models.roles import AppRole
from portal.models.student import STUDENT_LOGIN_COLUMNS, StudentRecord

STUDENTS_TABLE = "students"
USER_ROLES_TABLE = "user_roles"

# roll_number and register_number are unique, so two rows is already the
# ambiguous case; the cap only bounds a misconfigured table.
MAX_STUDENT_MATCHES = 10


def quote_filter_value(value: str) -> str:
    """Quote a value for a PostgREST ``or=(...)`` filter."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseGateway:
    def __init__(self, client: Client, users_page_size: int = 200):
        self.client = client
        self.users_page_size = users_page_size

    @classmethod
    def from_config(cls, config: PortalConfig, users_page_size: int = 200) -> "SupabaseGateway":
        client = create_client(
            config.store_url,
            config.service_credential,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        return cls(client, users_page_size=users_page_size)

    async def _call(self, operation: str, fn: Callable[[], Any]) -> Any:
        try:
            return await run_in_threadpool(fn)
        except Exception as e:
            raise BackendError(operation, e) from e

    # ------------------------------------------------------------
    # students
    # ------------------------------------------------------------
    async def find_students(self, identifier: str, dob: str) -> List[StudentRecord]:
        quoted = quote_filter_value(identifier)
        response = await self._call(
            "find students",
            lambda: (
                self.client.table(STUDENTS_TABLE)
                .select(STUDENT_LOGIN_COLUMNS)
                .or_(f"roll_number.eq.{quoted},register_number.eq.{quoted}")
                .eq("date_of_birth", dob)
                .order("id")
                .limit(MAX_STUDENT_MATCHES)
                .execute()
            ),
        )
        return [StudentRecord.model_validate(_stringify_ids(row)) for row in response.data or []]

    async def link_student_account(self, student_id: str, user_id: str) -> None:
        await self._call(
            "link student account",
            lambda: self.client.table(STUDENTS_TABLE).update({"user_id": user_id}).eq("id", student_id).execute(),
        )

    # ------------------------------------------------------------
    # user_roles
    # ------------------------------------------------------------
    async def has_role(self, user_id: str, role: AppRole) -> bool:
        response = await self._call(
            "check role",
            lambda: (
                self.client.table(USER_ROLES_TABLE)
                .select("id")
                .eq("user_id", user_id)
                .eq("role", role.value)
                .limit(1)
                .execute()
            ),
        )
        return bool(response.data)

    async def add_role(self, user_id: str, role: AppRole) -> None:
        await self._call(
            "insert role",
            lambda: self.client.table(USER_ROLES_TABLE).insert({"user_id": user_id, "role": role.value}).execute(),
        )

    async def list_roles(self, user_id: str) -> List[str]:
        response = await self._call(
            "list roles",
            lambda: self.client.table(USER_ROLES_TABLE).select("role").eq("user_id", user_id).execute(),
        )
        return [row["role"] for row in response.data or []]

    # ------------------------------------------------------------
    # auth admin
    # ------------------------------------------------------------
    async def create_auth_user(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        response = await self._call(
            "create auth user",
            lambda: self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata or {},
                }
            ),
        )

        if not response or not response.user:
            raise BackendError("create auth user", "empty response")
        return str(response.user.id)

    async def find_auth_user_by_email(self, email: str) -> Optional[str]:
        """Page through the auth users until one has this email."""
        page = 1
        while True:
            users = await self._call(
                "list auth users",
                lambda: self.client.auth.admin.list_users(page=page, per_page=self.users_page_size),
            )

            if not users:
                return None

            for user in users:
                if (user.email or "").lower() == email.lower():
                    return str(user.id)

            if len(users) < self.users_page_size:
                return None

            page += 1
            logger.debug(f"Auth user {email} not on page {page - 1}, continuing.")


def _stringify_ids(row: Dict[str, Any]) -> Dict[str, Any]:
    row = dict(row)
    for key in ("id", "user_id"):
        if row.get(key) is not None:
            row[key] = str(row[key])
    return row

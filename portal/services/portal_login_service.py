# portal/services/portal_login_service.py

"""
Student portal login: roll/register number + date of birth in, Supabase
session out.

Students are issued roll numbers rather than emails, so each student is
mapped onto a synthetic auth account (see portal.core.identity) whose
password is the canonical DOB. The account and its ``student`` role are
created lazily on the first successful login.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger

from portal.core.dob import normalize_dob
from portal.core.errors import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    LookupFailedError,
    MissingCredentialsError,
    ProvisioningError,
    UnsupportedPortalError,
)
from portal.core.identity import canonical_student_email, normalize_identifier
from portal.models.roles import AppRole, PortalType
from portal.models.student import StudentRecord


class StudentGateway(Protocol):
    async def find_students(self, identifier: str, dob: str) -> List[StudentRecord]: ...
    async def link_student_account(self, student_id: str, user_id: str) -> None: ...
    async def has_role(self, user_id: str, role: AppRole) -> bool: ...
    async def add_role(self, user_id: str, role: AppRole) -> None: ...
    async def create_auth_user(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str: ...
    async def find_auth_user_by_email(self, email: str) -> Optional[str]: ...


class TokenIssuer(Protocol):
    async def exchange(self, email: str, password: str) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class LinkOutcome:
    ok: bool
    error: Optional[BackendError] = None


# ============================================================================
# STUDENT SELECTION
# ============================================================================
def select_student(rows: List[StudentRecord], identifier: str) -> Optional[StudentRecord]:
    """
    Pick one student out of the rows matching identifier + DOB.

    A roll-number match beats a register-number match; ties fall back to
    the lowest id.
    """
    if not rows:
        return None

    if len(rows) > 1:
        logger.warning(
            f"portal-login: {len(rows)} students match identifier {identifier!r} for one DOB; "
            f"candidates {[r.id for r in rows]}"
        )

    return min(rows, key=lambda r: (r.roll_number != identifier, r.id))


# ============================================================================
# LOGIN SERVICE
# ============================================================================
class PortalLoginService:
    def __init__(self, gateway: StudentGateway, tokens: TokenIssuer):
        self.gateway = gateway
        self.tokens = tokens

    async def login(self, portal_type: Any, identifier: str, dob: str) -> Dict[str, Any]:
        if portal_type != PortalType.Student.value:
            raise UnsupportedPortalError()

        identifier = normalize_identifier(identifier)
        canonical_dob = normalize_dob(dob)
        if not identifier or not canonical_dob:
            raise MissingCredentialsError()

        student = await self.find_student(identifier, canonical_dob)

        if student.is_disabled:
            raise AuthorizationError()

        email = canonical_student_email(student.roll_number)

        user_id = student.user_id
        if not student.is_linked:
            user_id = await self.provision_account(student, email, canonical_dob)

            outcome = await self.link_account(student, user_id)
            if not outcome.ok:
                logger.warning(f"portal-login link student error (student {student.id}): {outcome.error}")

        # Linked accounts are re-checked too.
        await self.ensure_student_role(user_id)

        return await self.tokens.exchange(email, canonical_dob)

    # ------------------------------------------------------------
    # 1) Lookup
    # ------------------------------------------------------------
    async def find_student(self, identifier: str, dob: str) -> StudentRecord:
        try:
            rows = await self.gateway.find_students(identifier, dob)
        except BackendError as e:
            logger.error(f"portal-login find student error: {e}")
            raise LookupFailedError() from e

        student = select_student(rows, identifier)
        if not student:
            raise AuthenticationError()
        return student

    # ------------------------------------------------------------
    # 2) Provision backing account
    # ------------------------------------------------------------
    async def provision_account(self, student: StudentRecord, email: str, password: str) -> str:
        metadata = {"portal": PortalType.Student.value, "roll_number": student.roll_number}

        try:
            user_id = await self.gateway.create_auth_user(email, password, metadata)
            logger.info(f"portal-login provisioned auth user {user_id} for student {student.id}")
            return user_id
        except BackendError as create_err:
            # Most likely a previous attempt created the user but never
            # linked it; recover the existing account by email.
            try:
                existing = await self.gateway.find_auth_user_by_email(email)
            except BackendError as e:
                logger.error(f"portal-login list users error: {e}")
                existing = None

            if not existing:
                logger.error(f"portal-login create user error: {create_err}")
                raise ProvisioningError() from create_err

            logger.info(f"portal-login reusing existing auth user {existing} for student {student.id}")
            return existing

    # ------------------------------------------------------------
    # 3) Link student -> auth user (best effort)
    # ------------------------------------------------------------
    async def link_account(self, student: StudentRecord, user_id: str) -> LinkOutcome:
        try:
            await self.gateway.link_student_account(student.id, user_id)
        except BackendError as e:
            return LinkOutcome(ok=False, error=e)
        return LinkOutcome(ok=True)

    # ------------------------------------------------------------
    # 4) Role assignment (check-then-insert)
    # ------------------------------------------------------------
    async def ensure_student_role(self, user_id: str) -> bool:
        """Return True if a role row was inserted."""
        try:
            if await self.gateway.has_role(user_id, AppRole.Student):
                return False
            await self.gateway.add_role(user_id, AppRole.Student)
        except BackendError as e:
            logger.error(f"portal-login role assignment error (user {user_id}): {e}")
            raise ProvisioningError() from e

        logger.info(f"portal-login granted student role to {user_id}")
        return True

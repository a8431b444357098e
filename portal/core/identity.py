# portal/core/identity.py

import re

EMAIL_LOCAL_PART_MAX = 48
STUDENT_EMAIL_PREFIX = "student."
STUDENT_EMAIL_DOMAIN = "portal.local"


def normalize_identifier(raw: str) -> str:
    return (raw or "").strip()


def sanitize_email_local_part(value: str) -> str:
    local = value.lower().strip()
    local = re.sub(r"\s+", "-", local)
    local = re.sub(r"[^a-z0-9._-]", "-", local)
    local = re.sub(r"-+", "-", local)
    local = re.sub(r"^[-.]+|[-.]+$", "", local)
    return local[:EMAIL_LOCAL_PART_MAX]


def canonical_student_email(roll_number: str) -> str:
    """
    Synthetic auth email for a student.

    Students are identified by roll number, not email, so each one is
    mapped onto a deterministic address: the same roll number always
    yields the same email.
    """
    return f"{STUDENT_EMAIL_PREFIX}{sanitize_email_local_part(str(roll_number))}@{STUDENT_EMAIL_DOMAIN}"

# portal/core/dob.py

"""
Date-of-birth parsing for the student portal.

Students type their DOB by hand, so a small closed set of shapes is
accepted. Each shape is a DobRule; rules are tried in order and the first
one that yields a real calendar date wins. The canonical form is
``YYYY-MM-DD``, which is also the stored ``date_of_birth`` and the
backing account password.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Pattern, Tuple

CANONICAL_DOB = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DobRule:
    name: str
    pattern: Pattern[str]
    canonicalize: Callable[[re.Match], str]

    def apply(self, raw: str) -> Optional[str]:
        match = self.pattern.match(raw)
        if not match:
            return None
        return self.canonicalize(match)


def _iso(match: re.Match) -> str:
    return match.group(0)


def _day_month_year(match: re.Match) -> str:
    day, month, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


DOB_RULES: Tuple[DobRule, ...] = (
    DobRule("iso", re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), _iso),
    DobRule("day-month-year", re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$"), _day_month_year),
)


def is_calendar_date(canonical: str) -> bool:
    try:
        date.fromisoformat(canonical)
    except ValueError:
        return False
    return True


def normalize_dob(raw: str) -> Optional[str]:
    """Return the DOB as YYYY-MM-DD, or None if it cannot be understood."""
    value = (raw or "").strip()
    if not value:
        return None

    for rule in DOB_RULES:
        canonical = rule.apply(value)
        if canonical and CANONICAL_DOB.match(canonical) and is_calendar_date(canonical):
            return canonical

    return None

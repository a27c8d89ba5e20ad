"""Cheap local email checks that never touch the network."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

MAX_EMAIL_LENGTH = 254
MAX_LOCAL_LENGTH = 64

# minimal RFC-lite
_PLAUSIBLE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")

ROLE_LOCAL_PARTS = frozenset(
    {
        "info", "support", "admin", "contact", "hello", "sales", "team",
        "office", "hr", "jobs", "careers", "marketing", "press", "media",
        "help", "service", "billing", "webmaster", "postmaster", "abuse",
        "noreply", "no-reply", "donotreply", "newsletter",
    }
)


def is_plausible_email(email: Optional[str]) -> bool:
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    if not _PLAUSIBLE.match(email):
        return False
    local, _, domain = email.rpartition("@")
    if not local or not domain:
        return False
    if len(local) > MAX_LOCAL_LENGTH:
        return False
    if ".." in domain:
        return False
    return True


def normalize_email(email: str) -> Tuple[bool, Optional[str], Optional[str], List[str]]:
    """Validate syntax only; return (valid, normalized, domain, notes)."""
    notes: List[str] = []
    try:
        v = validate_email(email, check_deliverability=False)
        return True, v.normalized, v.domain.lower(), notes
    except EmailNotValidError as e:
        notes.append(f"Syntax error: {e}")
        return False, None, None, notes


def domain_of(email: str) -> Optional[str]:
    _, at, domain = email.strip().lower().rpartition("@")
    if not at:
        return None
    return domain or None


def is_role_address(email: str) -> bool:
    """``info@``, ``support.team@``, ``sales_eu@`` and the like."""
    local = email.strip().lower().rpartition("@")[0].split("+", 1)[0]
    return any(
        local == prefix or local.startswith(f"{prefix}.") or local.startswith(f"{prefix}_")
        for prefix in ROLE_LOCAL_PARTS
    )

"""Local email blocklist: local-part prefixes and domains."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

from apis.models import ReasonCode
from screening.config import DEFAULT_BLOCKED_DOMAINS, DEFAULT_BLOCKED_PREFIXES, dedupe_lower

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockCheck:
    blocked: bool
    reason: Optional[ReasonCode] = None  # BLOCKED_PREFIX | BLOCKED_DOMAIN


NOT_BLOCKED = BlockCheck(False)


class Denylist:
    """Case-insensitive prefix and domain matching.

    A domain entry blocks the domain itself and any subdomain of it
    (``mail.mailinator.com`` matches ``mailinator.com``).
    """

    def __init__(
        self,
        prefixes: Iterable[str] = DEFAULT_BLOCKED_PREFIXES,
        domains: Iterable[str] = DEFAULT_BLOCKED_DOMAINS,
    ):
        self.prefixes: Tuple[str, ...] = dedupe_lower(prefixes)
        self.domains: FrozenSet[str] = frozenset(dedupe_lower(domains))
        logger.debug(
            "Denylist loaded: %d prefixes, %d domains", len(self.prefixes), len(self.domains)
        )

    def check(self, email: Optional[str]) -> BlockCheck:
        if not email:
            return NOT_BLOCKED
        email = email.strip().lower()
        at = email.rfind("@")
        if at <= 0:
            # malformed input is the format check's job
            return NOT_BLOCKED
        local, domain = email[:at], email[at + 1 :]

        if any(local.startswith(p) for p in self.prefixes):
            return BlockCheck(True, ReasonCode.BLOCKED_PREFIX)
        if domain and self._domain_blocked(domain):
            return BlockCheck(True, ReasonCode.BLOCKED_DOMAIN)
        return NOT_BLOCKED

    def _domain_blocked(self, domain: str) -> bool:
        if domain in self.domains:
            return True
        return any(domain.endswith("." + d) for d in self.domains)

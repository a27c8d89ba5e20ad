"""Upgrades for email verdicts the provider could not decide."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from apis.models import Confidence, EmailVerdict, ReasonCode
from screening.config import DEFAULT_TRUSTED_DOMAINS
from screening.email_format import domain_of, is_role_address
from screening.mx import MxResolver

logger = logging.getLogger(__name__)

# soft passes the fallback may upgrade; provider_error verdicts pass through unchanged
FALLBACK_REASONS = frozenset({ReasonCode.TIMEOUT_SOFT_PASS, ReasonCode.PROVIDER_MISSING})


class FallbackResolver:
    """Trusted-domain upgrade, then MX upgrade, then give up.

    Only applies to email; phone soft passes are returned as they are.
    """

    def __init__(
        self,
        trusted_domains: Iterable[str] = DEFAULT_TRUSTED_DOMAINS,
        mx_resolver: Optional[MxResolver] = None,
        mx_timeout_ms: int = 1500,
        enable_trusted: bool = True,
        enable_mx: bool = True,
    ):
        self.trusted_domains = frozenset(d.strip().lower() for d in trusted_domains)
        self.mx_resolver = mx_resolver or MxResolver()
        self.mx_timeout_ms = mx_timeout_ms
        self.enable_trusted = enable_trusted
        self.enable_mx = enable_mx

    @classmethod
    def from_settings(cls, settings, mx_resolver: Optional[MxResolver] = None) -> "FallbackResolver":
        return cls(
            trusted_domains=settings.trusted_email_domains,
            mx_resolver=mx_resolver,
            mx_timeout_ms=settings.mx_fallback_timeout_ms,
            enable_trusted=settings.enable_trusted_email_fallback,
            enable_mx=settings.enable_mx_fallback,
        )

    @staticmethod
    def applies_to(verdict: EmailVerdict) -> bool:
        return verdict.valid is None and verdict.reason in FALLBACK_REASONS

    def resolve(self, email: str, verdict: EmailVerdict) -> EmailVerdict:
        if not self.applies_to(verdict):
            return verdict
        domain = domain_of(email)
        if not domain:
            return verdict

        if self.enable_trusted and domain in self.trusted_domains:
            logger.debug("Fallback: %s is a trusted provider", domain)
            return replace(
                verdict,
                valid=True,
                reason=ReasonCode.PROVISIONAL_TRUSTED,
                confidence=Confidence.GOOD,
                domain=domain,
            )

        if self.enable_mx and not is_role_address(email):
            records = self.mx_resolver.resolve(domain, self.mx_timeout_ms)
            if records:
                logger.debug("Fallback: %s has %d MX records", domain, len(records))
                return replace(
                    verdict,
                    valid=True,
                    reason=ReasonCode.PROVISIONAL_MX,
                    confidence=Confidence.MEDIUM,
                    domain=domain,
                )

        return verdict

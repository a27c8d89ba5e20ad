"""
Validation orchestrator: the entry points the form handler calls.

Email:  empty → format → denylist → cache → provider → fallback → cache write
Phone:  empty → format → NANP structure → cache → provider → cache write

Local rejections (format, denylist, NANP) are never cached. Provider
outcomes, soft passes included, are cached for ``cache_ttl_ms``.
Concurrent calls for the same uncached key may both reach the provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import requests

from apis.mailboxlayer import MailboxLayerClient
from apis.models import Confidence, EmailVerdict, PhoneVerdict, ReasonCode
from apis.numverify import NumverifyClient, rejected
from screening.cache import TTLCache
from screening.config import Settings
from screening.denylist import Denylist
from screening.email_format import domain_of, is_plausible_email, normalize_email
from screening.fallback import FallbackResolver
from screening.mx import MxResolver
from screening.phone_format import only_digits, precheck_phone
from screening.rate_limit import FixedWindowRateLimiter, RateDecision

logger = logging.getLogger(__name__)

LOCAL_REJECTION_SCORE = 0.0

Verdict = Union[EmailVerdict, PhoneVerdict]


class IdentifierType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


@dataclass(frozen=True)
class ValidationRequest:
    identifier_type: IdentifierType
    raw_value: str
    country_hint: Optional[str] = None
    client_id: Optional[str] = None


class RateLimitExceeded(Exception):
    def __init__(self, client_id: str, decision: RateDecision):
        super().__init__(f"rate limit exceeded for {client_id}")
        self.client_id = client_id
        self.decision = decision


def _email_rejection(reason: ReasonCode, normalized: Optional[str] = None) -> EmailVerdict:
    return EmailVerdict(
        valid=False,
        reason=reason,
        confidence=Confidence.LOW,
        score=LOCAL_REJECTION_SCORE,
        normalized=normalized,
        domain=domain_of(normalized) if normalized else None,
    )


def email_cache_key(email: str) -> str:
    return f"email:{email.strip().lower()}"


def phone_cache_key(phone: str, country: Optional[str]) -> str:
    return f"phone:{(country or '').strip().upper()}:{only_digits(phone)}"


class ContactValidator:
    """Composes the providers, cache, denylist, fallback and limiter.

    Build one at process start and share it; tests build their own with
    stub providers and fresh stores.
    """

    def __init__(
        self,
        settings: Settings,
        email_provider,
        phone_provider,
        cache: Optional[TTLCache] = None,
        denylist: Optional[Denylist] = None,
        fallback: Optional[FallbackResolver] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
    ):
        self.settings = settings
        self.email_provider = email_provider
        self.phone_provider = phone_provider
        self.cache = cache if cache is not None else TTLCache()
        self.denylist = denylist or Denylist(
            settings.blocked_email_prefixes, settings.blocked_email_domains
        )
        self.fallback = fallback or FallbackResolver.from_settings(settings)
        self.rate_limiter = rate_limiter or FixedWindowRateLimiter()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: Optional[requests.Session] = None,
        mx_resolver: Optional[MxResolver] = None,
    ) -> "ContactValidator":
        session = session or requests.Session()
        return cls(
            settings,
            email_provider=MailboxLayerClient.from_settings(settings, session=session),
            phone_provider=NumverifyClient.from_settings(settings, session=session),
            fallback=FallbackResolver.from_settings(settings, mx_resolver=mx_resolver),
        )

    # ---- email ----

    def validate_email(self, raw: Optional[str], client_ip: Optional[str] = None) -> EmailVerdict:
        if raw is None or not raw.strip():
            return _email_rejection(ReasonCode.EMPTY)

        email = raw.strip()
        if not is_plausible_email(email):
            return _email_rejection(ReasonCode.BAD_FORMAT)
        syntax_ok, canonical, _, notes = normalize_email(email)
        if not syntax_ok:
            logger.debug("Email rejected by syntax check: %s", "; ".join(notes))
            return _email_rejection(ReasonCode.BAD_FORMAT)
        normalized = (canonical or email).lower()

        block = self.denylist.check(normalized)
        if block.blocked:
            logger.debug("Email %s denylisted (%s)", normalized, block.reason.value)
            return _email_rejection(block.reason, normalized)

        key = email_cache_key(normalized)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        verdict = self.email_provider.check(normalized)
        if FallbackResolver.applies_to(verdict):
            before = verdict.reason
            verdict = self.fallback.resolve(normalized, verdict)
            if verdict.reason is not before:
                logger.debug("Fallback upgraded %s: %s → %s", normalized, before.value, verdict.reason.value)

        self.cache.set(key, verdict, self.settings.cache_ttl_ms)
        logger.debug(
            "Email verdict for %s (client %s): %s", normalized, client_ip or "-", verdict.reason.value
        )
        return verdict

    # ---- phone ----

    def validate_phone(self, raw: Optional[str], country: Optional[str] = None) -> PhoneVerdict:
        country = (country or "").strip().upper() or None
        problem = precheck_phone(raw, country)
        if problem is not None:
            return rejected(problem)

        key = phone_cache_key(raw, country)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        verdict = self.phone_provider.check(raw.strip(), country)
        self.cache.set(key, verdict, self.settings.cache_ttl_ms)
        logger.debug("Phone verdict for %s: %s", key, verdict.reason.value)
        return verdict

    # ---- rate limiting ----

    def attempt(
        self,
        client_id: Optional[str],
        limit: Optional[int] = None,
        window_ms: Optional[int] = None,
    ) -> RateDecision:
        return self.rate_limiter.attempt(
            client_id,
            self.settings.rate_limit_per_minute if limit is None else limit,
            self.settings.rate_limit_window_ms if window_ms is None else window_ms,
        )

    def submit(self, request: ValidationRequest) -> Verdict:
        """Rate-limited entry point; raises RateLimitExceeded before any other work."""
        client_id = request.client_id or "unknown"
        decision = self.attempt(client_id)
        if not decision.allowed:
            raise RateLimitExceeded(client_id, decision)
        if request.identifier_type is IdentifierType.EMAIL:
            return self.validate_email(request.raw_value, client_ip=request.client_id)
        return self.validate_phone(request.raw_value, request.country_hint)

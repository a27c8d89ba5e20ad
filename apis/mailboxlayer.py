"""MailboxLayer API email verification client."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .deadline import Deadline, DeadlineExceeded, call_with_deadline
from .errors import ProviderError
from .models import Confidence, EmailVerdict, MailboxLayerPayload, ReasonCode
from screening.confidence import DEFAULT_GOOD_THRESHOLD, DEFAULT_MED_THRESHOLD, classify, coerce_score
from screening.email_format import domain_of

logger = logging.getLogger(__name__)

NAME = "MailboxLayer"
ENDPOINT = "https://apilayer.net/api/check"


def soft_pass(reason: ReasonCode, email: Optional[str] = None) -> EmailVerdict:
    """Unknown verdict for a provider that could not answer."""
    return EmailVerdict(
        valid=None,
        reason=reason,
        confidence=Confidence.UNKNOWN,
        normalized=email,
        domain=domain_of(email) if email else None,
    )


def _flag(data: dict, key: str) -> Optional[bool]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def parse_mailboxlayer_payload(data: Any) -> MailboxLayerPayload:
    """Parse MailboxLayer API response payload; raises ProviderError."""
    if not isinstance(data, dict):
        raise ProviderError(NAME, f"unexpected payload type {type(data).__name__}")
    if data.get("success") is False or "error" in data:
        error = data.get("error") or {}
        info = error.get("info") or error.get("type") or "unknown error"
        raise ProviderError(NAME, f"error envelope: {info}")
    if "format_valid" not in data:
        raise ProviderError(NAME, "payload has no format_valid field")

    suggestion = data.get("did_you_mean") or None
    return MailboxLayerPayload(
        format_valid=bool(_flag(data, "format_valid")),
        mx_found=_flag(data, "mx_found"),
        smtp_check=_flag(data, "smtp_check"),
        catch_all=bool(_flag(data, "catch_all")),
        disposable=bool(_flag(data, "disposable")),
        role=bool(_flag(data, "role")),
        score=coerce_score(data.get("score")),
        did_you_mean=str(suggestion) if suggestion else None,
    )


class MailboxLayerClient:
    """Email adapter: one timeout-bounded MailboxLayer check per address.

    Only format, MX, SMTP, and (when enabled) disposable/role signals reject
    an address. A low score or a catch-all domain lowers confidence but never
    blocks on its own.
    """

    name = NAME

    def __init__(
        self,
        api_key: Optional[str],
        timeout_ms: int = 5000,
        block_role: bool = True,
        block_disposable: bool = False,
        good_threshold: float = DEFAULT_GOOD_THRESHOLD,
        med_threshold: float = DEFAULT_MED_THRESHOLD,
        session: Optional[requests.Session] = None,
        endpoint: str = ENDPOINT,
    ):
        self.api_key = api_key or ""
        self.timeout_ms = timeout_ms
        self.block_role = block_role
        self.block_disposable = block_disposable
        self.good_threshold = good_threshold
        self.med_threshold = med_threshold
        self.session = session or requests.Session()
        self.endpoint = endpoint

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "MailboxLayerClient":
        return cls(
            settings.mailboxlayer_api_key,
            timeout_ms=settings.validation_timeout_ms,
            block_role=settings.block_role_emails,
            block_disposable=settings.block_disposable,
            good_threshold=settings.email_score_good_threshold,
            med_threshold=settings.email_score_med_threshold,
            session=session,
        )

    def check(self, email: str) -> EmailVerdict:
        """Call MailboxLayer to verify email deliverability. Never raises."""
        if not self.api_key:
            return soft_pass(ReasonCode.PROVIDER_MISSING, email)

        try:
            payload = call_with_deadline(
                lambda deadline: self._fetch(email, deadline), self.timeout_ms, name=NAME
            )
        except DeadlineExceeded:
            logger.warning("%s timed out after %sms", NAME, self.timeout_ms)
            return soft_pass(ReasonCode.TIMEOUT_SOFT_PASS, email)
        except ProviderError as e:
            logger.warning("%s failed: %s", NAME, e.detail)
            return soft_pass(ReasonCode.PROVIDER_ERROR, email)
        except Exception:
            logger.exception("%s check crashed", NAME)
            return soft_pass(ReasonCode.PROVIDER_ERROR, email)

        return self.verdict_for(email, payload)

    def _fetch(self, email: str, deadline: Deadline) -> MailboxLayerPayload:
        try:
            r = self.session.get(
                self.endpoint,
                params={"access_key": self.api_key, "email": email, "smtp": 1, "format": 1},
                timeout=deadline.remaining(),
            )
            r.raise_for_status()
            data = r.json()
        except requests.Timeout:
            raise DeadlineExceeded() from None
        except requests.RequestException as e:
            raise ProviderError(NAME, f"HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError(NAME, f"invalid JSON: {e}") from e
        deadline.check()
        return parse_mailboxlayer_payload(data)

    def verdict_for(self, email: str, payload: MailboxLayerPayload) -> EmailVerdict:
        reason = ReasonCode.OK
        if not payload.format_valid:
            reason = ReasonCode.BAD_FORMAT
        elif payload.mx_found is False:
            reason = ReasonCode.NO_MX
        elif payload.smtp_check is False:
            reason = ReasonCode.SMTP_FAIL
        elif self.block_disposable and payload.disposable:
            reason = ReasonCode.DISPOSABLE
        elif self.block_role and payload.role:
            reason = ReasonCode.ROLE

        return EmailVerdict(
            valid=reason is ReasonCode.OK,
            reason=reason,
            confidence=classify(payload.score, self.good_threshold, self.med_threshold),
            score=payload.score,
            normalized=email,
            domain=domain_of(email),
            disposable=payload.disposable,
            role=payload.role,
            catch_all=payload.catch_all,
            did_you_mean=payload.did_you_mean,
        )

"""Numverify API phone validation client."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .deadline import Deadline, DeadlineExceeded, call_with_deadline
from .errors import ProviderError
from .models import Confidence, NumverifyPayload, PhoneVerdict, ReasonCode
from screening.confidence import classify
from screening.phone_format import only_digits, precheck_phone, to_e164, to_national_digits

logger = logging.getLogger(__name__)

NAME = "Numverify"
ENDPOINT = "https://apilayer.net/api/validate"

# Numverify reports no quality score; these feed the same classifier as email.
SCORE_ACCEPTED = 1.0
SCORE_VOIP_ALLOWED = 0.6
SCORE_REJECTED = 0.0


def soft_pass(reason: ReasonCode) -> PhoneVerdict:
    return PhoneVerdict(valid=None, reason=reason, confidence=Confidence.UNKNOWN)


def rejected(reason: ReasonCode, **extra) -> PhoneVerdict:
    return PhoneVerdict(
        valid=False,
        reason=reason,
        confidence=classify(SCORE_REJECTED),
        score=SCORE_REJECTED,
        **extra,
    )


def parse_numverify_payload(data: Any) -> NumverifyPayload:
    """Parse Numverify API response payload; raises ProviderError."""
    if not isinstance(data, dict):
        raise ProviderError(NAME, f"unexpected payload type {type(data).__name__}")
    if data.get("success") is False or "error" in data:
        error = data.get("error") or {}
        info = error.get("info") or error.get("type") or "unknown error"
        raise ProviderError(NAME, f"error envelope: {info}")
    if "valid" not in data:
        raise ProviderError(NAME, "payload has no valid field")

    country = (data.get("country_code") or "").strip().upper()
    return NumverifyPayload(
        valid=data.get("valid") is True,
        international_format=(data.get("international_format") or None),
        country_code=country or None,
        line_type=str(data.get("line_type") or "").strip().lower(),
        carrier=(data.get("carrier") or None),
    )


class NumverifyClient:
    """Phone adapter: local pre-checks, then one timeout-bounded lookup."""

    name = NAME

    def __init__(
        self,
        api_key: Optional[str],
        timeout_ms: int = 5000,
        block_voip: bool = False,
        allow_landline: bool = True,
        session: Optional[requests.Session] = None,
        endpoint: str = ENDPOINT,
    ):
        self.api_key = api_key or ""
        self.timeout_ms = timeout_ms
        self.block_voip = block_voip
        self.allow_landline = allow_landline
        self.session = session or requests.Session()
        self.endpoint = endpoint

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "NumverifyClient":
        return cls(
            settings.numverify_api_key,
            timeout_ms=settings.validation_timeout_ms,
            block_voip=settings.block_voip,
            allow_landline=settings.allow_landline,
            session=session,
        )

    def check(self, phone: str, country: Optional[str] = None) -> PhoneVerdict:
        """Validate a phone number. Never raises."""
        country = (country or "").strip().upper() or None
        problem = precheck_phone(phone, country)
        if problem is not None:
            return rejected(problem)

        if not self.api_key:
            return soft_pass(ReasonCode.PROVIDER_MISSING)

        digits = only_digits(phone)
        try:
            payload = call_with_deadline(
                lambda deadline: self._fetch(digits, country, deadline), self.timeout_ms, name=NAME
            )
        except DeadlineExceeded:
            logger.warning("%s timed out after %sms", NAME, self.timeout_ms)
            return soft_pass(ReasonCode.TIMEOUT_SOFT_PASS)
        except ProviderError as e:
            logger.warning("%s failed: %s", NAME, e.detail)
            return soft_pass(ReasonCode.PROVIDER_ERROR)
        except Exception:
            logger.exception("%s check crashed", NAME)
            return soft_pass(ReasonCode.PROVIDER_ERROR)

        return self.verdict_for(digits, country, payload)

    def _fetch(self, digits: str, country: Optional[str], deadline: Deadline) -> NumverifyPayload:
        params = {"access_key": self.api_key, "number": digits, "format": 1}
        if country:
            params["country_code"] = country
        try:
            r = self.session.get(self.endpoint, params=params, timeout=deadline.remaining())
            r.raise_for_status()
            data = r.json()
        except requests.Timeout:
            raise DeadlineExceeded() from None
        except requests.RequestException as e:
            raise ProviderError(NAME, f"HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError(NAME, f"invalid JSON: {e}") from e
        deadline.check()
        return parse_numverify_payload(data)

    def verdict_for(
        self, digits: str, country: Optional[str], payload: NumverifyPayload
    ) -> PhoneVerdict:
        if not payload.valid:
            return rejected(ReasonCode.INVALID_NUMBER)

        if country and payload.country_code and payload.country_code != country:
            return rejected(ReasonCode.COUNTRY_MISMATCH, country=payload.country_code)

        detected = payload.country_code or country
        normalized = payload.international_format or to_e164(
            to_national_digits(digits, detected), detected
        ) or None
        extra = dict(
            line_type=payload.line_type or None,
            country=payload.country_code,
            normalized=normalized,
            carrier=payload.carrier,
        )

        lt = payload.line_type
        if lt == "voip" and self.block_voip:
            return rejected(ReasonCode.VOIP_BLOCKED, **extra)
        if lt == "landline" and not self.allow_landline:
            return rejected(ReasonCode.LINE_TYPE_BLOCKED, **extra)

        score = SCORE_VOIP_ALLOWED if lt == "voip" else SCORE_ACCEPTED
        return PhoneVerdict(
            valid=True,
            reason=ReasonCode.OK,
            confidence=classify(score),
            score=score,
            **extra,
        )

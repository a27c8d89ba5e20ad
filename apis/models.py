"""Shared data models for contact verification providers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Confidence(str, Enum):
    GOOD = "good"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class ErrorKind(str, Enum):
    NONE = "none"
    FORMAT = "format"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    POLICY_BLOCK = "policy_block"
    UNDELIVERABLE = "undeliverable"


class ReasonCode(str, Enum):
    OK = "ok"

    # local input problems
    EMPTY = "empty"
    BAD_FORMAT = "bad_format"
    NANP_LENGTH = "nanp_length"
    NANP_AREA_CODE = "nanp_area_code"
    NANP_EXCHANGE = "nanp_exchange"
    NANP_N11_EXCHANGE = "nanp_n11_exchange"

    # provider could not answer
    PROVIDER_MISSING = "provider_missing"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT_SOFT_PASS = "timeout_soft_pass"

    # provider said no
    NO_MX = "no_mx"
    SMTP_FAIL = "smtp_fail"
    INVALID_NUMBER = "invalid_number"

    # business rules
    DISPOSABLE = "disposable"
    ROLE = "role"
    VOIP_BLOCKED = "voip_blocked"
    LINE_TYPE_BLOCKED = "line_type_blocked"
    BLOCKED_PREFIX = "blocked_prefix"
    BLOCKED_DOMAIN = "blocked_domain"
    COUNTRY_MISMATCH = "country_mismatch"

    # fallback upgrades
    PROVISIONAL_TRUSTED = "provisional_trusted"
    PROVISIONAL_MX = "provisional_mx"

    @property
    def kind(self) -> ErrorKind:
        return _REASON_KINDS.get(self, ErrorKind.NONE)

    @property
    def soft_pass(self) -> bool:
        return self.kind is ErrorKind.PROVIDER_UNAVAILABLE


_REASON_KINDS = {
    ReasonCode.EMPTY: ErrorKind.FORMAT,
    ReasonCode.BAD_FORMAT: ErrorKind.FORMAT,
    ReasonCode.NANP_LENGTH: ErrorKind.FORMAT,
    ReasonCode.NANP_AREA_CODE: ErrorKind.FORMAT,
    ReasonCode.NANP_EXCHANGE: ErrorKind.FORMAT,
    ReasonCode.NANP_N11_EXCHANGE: ErrorKind.FORMAT,
    ReasonCode.PROVIDER_MISSING: ErrorKind.PROVIDER_UNAVAILABLE,
    ReasonCode.PROVIDER_ERROR: ErrorKind.PROVIDER_UNAVAILABLE,
    ReasonCode.TIMEOUT_SOFT_PASS: ErrorKind.PROVIDER_UNAVAILABLE,
    ReasonCode.NO_MX: ErrorKind.UNDELIVERABLE,
    ReasonCode.SMTP_FAIL: ErrorKind.UNDELIVERABLE,
    ReasonCode.INVALID_NUMBER: ErrorKind.UNDELIVERABLE,
    ReasonCode.DISPOSABLE: ErrorKind.POLICY_BLOCK,
    ReasonCode.ROLE: ErrorKind.POLICY_BLOCK,
    ReasonCode.VOIP_BLOCKED: ErrorKind.POLICY_BLOCK,
    ReasonCode.LINE_TYPE_BLOCKED: ErrorKind.POLICY_BLOCK,
    ReasonCode.BLOCKED_PREFIX: ErrorKind.POLICY_BLOCK,
    ReasonCode.BLOCKED_DOMAIN: ErrorKind.POLICY_BLOCK,
    ReasonCode.COUNTRY_MISMATCH: ErrorKind.POLICY_BLOCK,
}


def _jsonable(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


@dataclass(frozen=True)
class EmailVerdict:
    valid: Optional[bool]  # True accept, False reject, None unknown
    reason: ReasonCode
    confidence: Confidence
    score: Optional[float] = None  # 0..1 if provided
    normalized: Optional[str] = None
    domain: Optional[str] = None
    disposable: Optional[bool] = None
    role: Optional[bool] = None
    catch_all: Optional[bool] = None
    did_you_mean: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class PhoneVerdict:
    valid: Optional[bool]  # True accept, False reject, None unknown
    reason: ReasonCode
    confidence: Confidence
    score: Optional[float] = None  # synthetic, see apis.numverify
    normalized: Optional[str] = None  # E.164 if available
    line_type: Optional[str] = None  # mobile, landline, voip, ...
    country: Optional[str] = None
    carrier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class MailboxLayerPayload:
    """Typed view of a MailboxLayer check response.

    Missing optional fields resolve to ``None``/``False`` so that absent
    signals never block: only an explicit ``False`` for ``mx_found`` or
    ``smtp_check`` is treated as a rejection.
    """

    format_valid: bool
    mx_found: Optional[bool]
    smtp_check: Optional[bool]
    catch_all: bool
    disposable: bool
    role: bool
    score: Optional[float]
    did_you_mean: Optional[str]


@dataclass(frozen=True)
class NumverifyPayload:
    """Typed view of a Numverify validate response."""

    valid: bool
    international_format: Optional[str]
    country_code: Optional[str]
    line_type: str  # lowercased, "" when the plan does not report it
    carrier: Optional[str]

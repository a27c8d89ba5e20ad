"""Runtime settings for the screening pipeline, read from the environment.

Environment (.env)
  MAILBOXLAYER_API_KEY=...
  NUMVERIFY_API_KEY=...
  EMAIL_SCORE_GOOD=0.8
  EMAIL_SCORE_MED=0.5
  BLOCK_ROLE_EMAILS=true
  BLOCK_DISPOSABLE=false
  BLOCK_VOIP=false
  ALLOW_LANDLINE=true
  VALIDATION_TIMEOUT_MS=5000
  MX_FALLBACK_TIMEOUT_MS=1500
  CACHE_TTL_MS=900000
  RATE_LIMIT_PER_MIN=10
  RATE_LIMIT_WINDOW_MS=60000
  ENABLE_TRUSTED_EMAIL_FALLBACK=true
  ENABLE_MX_FALLBACK=true
  BLOCKED_EMAIL_PREFIXES=motivation.usa,promo.
  BLOCKED_EMAIL_DOMAINS=["mailinator.com", "yopmail.com"]
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, replace
from typing import Iterable, List, Mapping, Optional, Tuple

from screening.confidence import DEFAULT_GOOD_THRESHOLD, DEFAULT_MED_THRESHOLD

DEFAULT_BLOCKED_PREFIXES: Tuple[str, ...] = ("motivation.usa",)

DEFAULT_BLOCKED_DOMAINS: Tuple[str, ...] = (
    "mailinator.com",
    "tempmail.com",
    "guerrillamail.com",
    "10minutemail.com",
    "yopmail.com",
    "dayrep.com",
    "rhyta.com",
    "armyspy.com",
    "tiffincrane.com",
    "mv6.com",
    "acmecorp.com",
)

DEFAULT_TRUSTED_DOMAINS: Tuple[str, ...] = (
    "gmail.com",
    "googlemail.com",
    "yahoo.com",
    "outlook.com",
    "hotmail.com",
    "live.com",
    "msn.com",
    "icloud.com",
    "me.com",
    "mac.com",
    "aol.com",
    "proton.me",
    "protonmail.com",
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_list(raw: Optional[str]) -> List[str]:
    """Accept a JSON array or comma/semicolon/whitespace separated values."""
    if not raw:
        return []
    trimmed = raw.strip()
    if not trimmed:
        return []
    if trimmed.startswith("[") and trimmed.endswith("]"):
        try:
            items = json.loads(trimmed)
        except ValueError:
            items = None
        if isinstance(items, list):
            return [str(v).strip().lower() for v in items if str(v).strip()]
    return [s.strip().lower() for s in re.split(r"[\n,; \t]+", trimmed) if s.strip()]


def dedupe_lower(items: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    out = []
    for item in items:
        v = item.strip().lower()
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return tuple(out)


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _number(env: Mapping[str, str], name: str, default, cast=float):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    mailboxlayer_api_key: str = ""
    numverify_api_key: str = ""
    email_score_good_threshold: float = DEFAULT_GOOD_THRESHOLD
    email_score_med_threshold: float = DEFAULT_MED_THRESHOLD
    block_role_emails: bool = True
    block_disposable: bool = False
    block_voip: bool = False
    allow_landline: bool = True
    validation_timeout_ms: int = 5000
    mx_fallback_timeout_ms: int = 1500
    cache_ttl_ms: int = 15 * 60 * 1000
    rate_limit_per_minute: int = 10
    rate_limit_window_ms: int = 60 * 1000
    enable_trusted_email_fallback: bool = True
    enable_mx_fallback: bool = True
    blocked_email_prefixes: Tuple[str, ...] = DEFAULT_BLOCKED_PREFIXES
    blocked_email_domains: Tuple[str, ...] = DEFAULT_BLOCKED_DOMAINS
    trusted_email_domains: Tuple[str, ...] = DEFAULT_TRUSTED_DOMAINS

    def __post_init__(self):
        med, good = self.email_score_med_threshold, self.email_score_good_threshold
        if not 0.0 <= med <= good <= 1.0:
            raise ValueError(
                f"score thresholds must satisfy 0 <= med <= good <= 1 (med={med}, good={good})"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            mailboxlayer_api_key=(env.get("MAILBOXLAYER_API_KEY") or "").strip(),
            numverify_api_key=(env.get("NUMVERIFY_API_KEY") or "").strip(),
            email_score_good_threshold=_number(env, "EMAIL_SCORE_GOOD", DEFAULT_GOOD_THRESHOLD),
            email_score_med_threshold=_number(env, "EMAIL_SCORE_MED", DEFAULT_MED_THRESHOLD),
            block_role_emails=_bool(env, "BLOCK_ROLE_EMAILS", True),
            block_disposable=_bool(env, "BLOCK_DISPOSABLE", False),
            block_voip=_bool(env, "BLOCK_VOIP", False),
            allow_landline=_bool(env, "ALLOW_LANDLINE", True),
            validation_timeout_ms=_number(env, "VALIDATION_TIMEOUT_MS", 5000, int),
            mx_fallback_timeout_ms=_number(env, "MX_FALLBACK_TIMEOUT_MS", 1500, int),
            cache_ttl_ms=_number(env, "CACHE_TTL_MS", 15 * 60 * 1000, int),
            rate_limit_per_minute=_number(env, "RATE_LIMIT_PER_MIN", 10, int),
            rate_limit_window_ms=_number(env, "RATE_LIMIT_WINDOW_MS", 60 * 1000, int),
            enable_trusted_email_fallback=_bool(env, "ENABLE_TRUSTED_EMAIL_FALLBACK", True),
            enable_mx_fallback=_bool(env, "ENABLE_MX_FALLBACK", True),
            blocked_email_prefixes=dedupe_lower(
                [*parse_list(env.get("BLOCKED_EMAIL_PREFIXES")), *DEFAULT_BLOCKED_PREFIXES]
            ),
            blocked_email_domains=dedupe_lower(
                [*parse_list(env.get("BLOCKED_EMAIL_DOMAINS")), *DEFAULT_BLOCKED_DOMAINS]
            ),
        )

    def without_providers(self) -> "Settings":
        """Copy with provider credentials blanked (soft-pass path only)."""
        return replace(self, mailboxlayer_api_key="", numverify_api_key="")

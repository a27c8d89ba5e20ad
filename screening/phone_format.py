"""Local phone number plausibility and NANP structure checks."""

from __future__ import annotations

import re
from typing import Optional

from apis.models import ReasonCode

MIN_DIGITS = 7
MAX_DIGITS = 15  # ITU E.164

COUNTRY_TO_CC = {
    "US": "1",
    "CA": "1",
    "GB": "44",
    "AU": "61",
}

NANP_COUNTRIES = frozenset({"US", "CA"})

_NON_DIGIT = re.compile(r"\D+")


def only_digits(s: Optional[str]) -> str:
    return _NON_DIGIT.sub("", s or "")


def is_plausible_phone(raw: Optional[str]) -> bool:
    digits = only_digits(raw)
    return MIN_DIGITS <= len(digits) <= MAX_DIGITS


def to_national_digits(raw: Optional[str], country: Optional[str] = None) -> str:
    """Strip a leading country calling code when the country is known."""
    digits = only_digits(raw)
    if not digits:
        return ""
    cc = COUNTRY_TO_CC.get((country or "").upper())
    if not cc:
        return digits
    if digits.startswith(cc):
        # NANP numbers without the leading 1 are already national
        if cc == "1" and len(digits) == 10:
            return digits
        return digits[len(cc) :]
    return digits


def to_e164(national: Optional[str], country: Optional[str] = None) -> str:
    """``+<cc><national>``, or "" when the country has no known code."""
    nd = only_digits(national)
    cc = COUNTRY_TO_CC.get((country or "").upper())
    if not nd or not cc:
        return ""
    return f"+{cc}{nd}"


def nanp_problem(digits: str) -> Optional[ReasonCode]:
    """Structural NANP check on a digit string; None when it looks fine.

    NXX-NXX-XXXX: area code and exchange start with 2-9, and the exchange
    is not an N11 service code (211, 311, ... 911).
    """
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return ReasonCode.NANP_LENGTH
    area, exchange = digits[:3], digits[3:6]
    if area[0] in "01":
        return ReasonCode.NANP_AREA_CODE
    if exchange[0] in "01":
        return ReasonCode.NANP_EXCHANGE
    if exchange[1:] == "11":
        return ReasonCode.NANP_N11_EXCHANGE
    return None


def precheck_phone(raw: Optional[str], country: Optional[str] = None) -> Optional[ReasonCode]:
    """Reason the number is rejected locally, or None if it may go to the provider."""
    if not raw or not raw.strip():
        return ReasonCode.EMPTY
    if not is_plausible_phone(raw):
        return ReasonCode.BAD_FORMAT
    if (country or "").upper() in NANP_COUNTRIES:
        return nanp_problem(only_digits(raw))
    return None

"""Tests for the trusted-domain / MX fallback and the MX resolver."""

import threading

import dns.resolver
import pytest

from apis.mailboxlayer import soft_pass
from apis.models import Confidence, ReasonCode
from screening.fallback import FallbackResolver
from screening.mx import MxRecord, MxResolver, _parse_mx_rdata, lookup_mx


def resolver(mx, **kwargs):
    return FallbackResolver(mx_resolver=mx, **kwargs)


@pytest.mark.parametrize("reason", [ReasonCode.TIMEOUT_SOFT_PASS, ReasonCode.PROVIDER_MISSING])
def test_trusted_domain_upgrades_to_good(reason, mx_absent):
    v = resolver(mx_absent).resolve("user@gmail.com", soft_pass(reason, "user@gmail.com"))
    assert v.valid is True
    assert v.reason is ReasonCode.PROVISIONAL_TRUSTED
    assert v.confidence is Confidence.GOOD
    assert mx_absent.calls == []


def test_mx_upgrade_to_medium(mx_present):
    v = resolver(mx_present, mx_timeout_ms=1500).resolve(
        "jane@acme.io", soft_pass(ReasonCode.TIMEOUT_SOFT_PASS, "jane@acme.io")
    )
    assert v.valid is True
    assert v.reason is ReasonCode.PROVISIONAL_MX
    assert v.confidence is Confidence.MEDIUM
    assert mx_present.calls == [("acme.io", 1500)]


def test_no_mx_stays_unknown(mx_absent):
    before = soft_pass(ReasonCode.TIMEOUT_SOFT_PASS, "jane@acme.io")
    assert resolver(mx_absent).resolve("jane@acme.io", before) == before


def test_role_address_skips_mx(mx_present):
    before = soft_pass(ReasonCode.PROVIDER_MISSING, "info@acme.io")
    assert resolver(mx_present).resolve("info@acme.io", before).valid is None
    assert mx_present.calls == []


def test_provider_error_is_left_unknown(mx_present):
    before = soft_pass(ReasonCode.PROVIDER_ERROR, "user@gmail.com")
    assert resolver(mx_present).resolve("user@gmail.com", before) == before
    assert mx_present.calls == []


def test_toggles(mx_present):
    before = soft_pass(ReasonCode.TIMEOUT_SOFT_PASS, "user@gmail.com")
    v = resolver(mx_present, enable_trusted=False).resolve("user@gmail.com", before)
    assert v.reason is ReasonCode.PROVISIONAL_MX

    v = resolver(mx_present, enable_trusted=False, enable_mx=False).resolve("user@gmail.com", before)
    assert v.valid is None


class _Rdata:
    def __init__(self, text):
        self._text = text

    def to_text(self):
        return self._text


def test_parse_mx_rdata_from_text():
    assert _parse_mx_rdata(_Rdata("10 mx1.acme.io.")) == (10, "mx1.acme.io")


def test_lookup_mx_sorts_by_preference(monkeypatch):
    answers = [_Rdata("20 mx2.acme.io."), _Rdata("5 mx1.acme.io.")]
    monkeypatch.setattr(dns.resolver, "resolve", lambda *a, **k: answers)
    assert lookup_mx("acme.io") == [MxRecord(5, "mx1.acme.io"), MxRecord(20, "mx2.acme.io")]


def test_lookup_mx_nxdomain_is_empty(monkeypatch):
    def boom(*a, **k):
        raise dns.resolver.NXDOMAIN()

    monkeypatch.setattr(dns.resolver, "resolve", boom)
    assert lookup_mx("nope.invalid") == []


def test_mx_resolver_timer_wins_returns_no_records():
    release = threading.Event()

    def slow_lookup(domain, lifetime):
        release.wait(5)
        return [MxRecord(10, "late.acme.io")]

    try:
        assert MxResolver(lookup=slow_lookup).resolve("acme.io", timeout_ms=30) == []
    finally:
        release.set()


def test_mx_resolver_passes_through_records():
    records = [MxRecord(10, "mx1.acme.io")]
    assert MxResolver(lookup=lambda d, lifetime: records).resolve("acme.io", 500) == records

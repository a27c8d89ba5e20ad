"""Shared fixtures: fake clock, fake HTTP session, stub providers."""

import sys
import threading
from dataclasses import replace
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

from apis.models import Confidence, EmailVerdict, PhoneVerdict, ReasonCode  # noqa: E402
from screening.cache import TTLCache  # noqa: E402
from screening.config import Settings  # noqa: E402
from screening.fallback import FallbackResolver  # noqa: E402
from screening.mx import MxRecord  # noqa: E402
from screening.rate_limit import FixedWindowRateLimiter  # noqa: E402
from screening.service import ContactValidator  # noqa: E402


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body_error=None):
        self._payload = payload
        self.status_code = status_code
        self._body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self._body_error is not None:
            raise self._body_error
        return self._payload


class FakeSession:
    """Records every GET and answers with a canned response or exception."""

    def __init__(self, response=None, exc=None):
        self.response = response if response is not None else FakeResponse({})
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


class HangingSession(FakeSession):
    """Blocks until released, long past any test timeout."""

    def __init__(self, response=None):
        super().__init__(response)
        self.release = threading.Event()
        self.returned = threading.Event()

    def get(self, url, params=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        try:
            self.release.wait(5)
            return self.response
        finally:
            self.returned.set()


class StubEmailProvider:
    def __init__(self, verdict=None):
        self.verdict = verdict or EmailVerdict(
            valid=True, reason=ReasonCode.OK, confidence=Confidence.GOOD, score=0.9
        )
        self.calls = []

    def check(self, email):
        self.calls.append(email)
        return self.verdict


class StubPhoneProvider:
    def __init__(self, verdict=None):
        self.verdict = verdict or PhoneVerdict(
            valid=True,
            reason=ReasonCode.OK,
            confidence=Confidence.GOOD,
            score=1.0,
            normalized="+14155552671",
            line_type="mobile",
            country="US",
        )
        self.calls = []

    def check(self, phone, country=None):
        self.calls.append((phone, country))
        return self.verdict


class StubMxResolver:
    def __init__(self, records=()):
        self.records = list(records)
        self.calls = []

    def resolve(self, domain, timeout_ms):
        self.calls.append((domain, timeout_ms))
        return list(self.records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(mailboxlayer_api_key="ml-key", numverify_api_key="nv-key")


@pytest.fixture
def mx_present():
    return StubMxResolver([MxRecord(10, "mx1.acme.io")])


@pytest.fixture
def mx_absent():
    return StubMxResolver([])


@pytest.fixture
def make_validator(settings, clock):
    """Validator with stub providers and fresh stores on a fake clock."""

    def build(email_provider=None, phone_provider=None, mx_resolver=None, **overrides):
        s = replace(settings, **overrides)
        return ContactValidator(
            s,
            email_provider=email_provider or StubEmailProvider(),
            phone_provider=phone_provider or StubPhoneProvider(),
            cache=TTLCache(clock=clock),
            fallback=FallbackResolver.from_settings(s, mx_resolver=mx_resolver or StubMxResolver()),
            rate_limiter=FixedWindowRateLimiter(clock=clock),
        )

    return build


@pytest.fixture
def hanging_session():
    session = HangingSession()
    yield session
    session.release.set()

"""Tests for score classification and environment settings."""

import pytest

from apis.models import Confidence, ErrorKind, ReasonCode
from screening.confidence import classify, coerce_score
from screening.config import DEFAULT_BLOCKED_DOMAINS, Settings


@pytest.mark.parametrize(
    "score,expected",
    [
        (1.0, Confidence.GOOD),
        (0.80, Confidence.GOOD),
        (0.7999, Confidence.MEDIUM),
        (0.50, Confidence.MEDIUM),
        (0.49, Confidence.LOW),
        (0.0, Confidence.LOW),
        (None, Confidence.UNKNOWN),
    ],
)
def test_classify_default_thresholds(score, expected):
    assert classify(score) is expected


def test_classify_custom_thresholds():
    assert classify(0.7, good=0.65, medium=0.3) is Confidence.GOOD
    assert classify(0.2, good=0.65, medium=0.3) is Confidence.LOW


@pytest.mark.parametrize(
    "raw,expected",
    [(0.64, 0.64), ("0.5", 0.5), (88, 0.88), (None, None), ("n/a", None), (True, None), (-1, 0.0)],
)
def test_coerce_score(raw, expected):
    assert coerce_score(raw) == expected


def test_reason_kinds():
    assert ReasonCode.BAD_FORMAT.kind is ErrorKind.FORMAT
    assert ReasonCode.NANP_N11_EXCHANGE.kind is ErrorKind.FORMAT
    assert ReasonCode.TIMEOUT_SOFT_PASS.kind is ErrorKind.PROVIDER_UNAVAILABLE
    assert ReasonCode.PROVIDER_ERROR.soft_pass is True
    assert ReasonCode.BLOCKED_DOMAIN.kind is ErrorKind.POLICY_BLOCK
    assert ReasonCode.COUNTRY_MISMATCH.kind is ErrorKind.POLICY_BLOCK
    assert ReasonCode.SMTP_FAIL.kind is ErrorKind.UNDELIVERABLE
    assert ReasonCode.PROVISIONAL_MX.kind is ErrorKind.NONE


class TestSettings:
    def test_defaults(self):
        s = Settings.from_env({})
        assert s.email_score_good_threshold == 0.80
        assert s.email_score_med_threshold == 0.50
        assert s.block_role_emails is True
        assert s.block_disposable is False
        assert s.block_voip is False
        assert s.allow_landline is True
        assert s.validation_timeout_ms == 5000
        assert s.mx_fallback_timeout_ms == 1500
        assert s.cache_ttl_ms == 900_000
        assert s.rate_limit_per_minute == 10
        assert s.enable_trusted_email_fallback is True
        assert s.enable_mx_fallback is True
        assert s.mailboxlayer_api_key == ""
        assert s.blocked_email_domains == DEFAULT_BLOCKED_DOMAINS

    def test_overrides(self):
        s = Settings.from_env(
            {
                "MAILBOXLAYER_API_KEY": " abc ",
                "EMAIL_SCORE_GOOD": "0.9",
                "EMAIL_SCORE_MED": "0.6",
                "BLOCK_VOIP": "TRUE",
                "ALLOW_LANDLINE": "no",
                "VALIDATION_TIMEOUT_MS": "2500",
                "BLOCKED_EMAIL_DOMAINS": '["Spam.io", "mailinator.com"]',
                "BLOCKED_EMAIL_PREFIXES": "promo.",
            }
        )
        assert s.mailboxlayer_api_key == "abc"
        assert s.email_score_good_threshold == 0.9
        assert s.block_voip is True
        assert s.allow_landline is False
        assert s.validation_timeout_ms == 2500
        assert s.blocked_email_domains[0] == "spam.io"
        assert s.blocked_email_domains.count("mailinator.com") == 1
        assert s.blocked_email_prefixes == ("promo.", "motivation.usa")

    def test_bad_boolean_names_variable(self):
        with pytest.raises(ValueError, match="BLOCK_VOIP"):
            Settings.from_env({"BLOCK_VOIP": "sometimes"})

    def test_bad_number_names_variable(self):
        with pytest.raises(ValueError, match="CACHE_TTL_MS"):
            Settings.from_env({"CACHE_TTL_MS": "soon"})

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValueError):
            Settings(email_score_good_threshold=0.4, email_score_med_threshold=0.6)

    def test_without_providers(self):
        s = Settings(mailboxlayer_api_key="a", numverify_api_key="b").without_providers()
        assert s.mailboxlayer_api_key == "" and s.numverify_api_key == ""

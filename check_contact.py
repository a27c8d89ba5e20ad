#!/usr/bin/env python3
"""
check_contact.py — email and phone screening from the command line

Features
- Local format checks (RFC-lite + email-validator, E.164 length, NANP structure)
- Denylist of local-part prefixes and domains
- MailboxLayer (email) and Numverify (phone) lookups, bounded by a timeout
- Soft pass on provider trouble, upgraded by trusted-domain / MX fallback
- Per-client fixed-window rate limiting
- Clear CLI output, or JSON

Environment (.env)
  MAILBOXLAYER_API_KEY=...
  NUMVERIFY_API_KEY=...
  (see screening/config.py for every option)

Usage
  python check_contact.py --email EMAIL [--no-apis] [--json]
  python check_contact.py --phone PHONE --country US
  python check_contact.py --email EMAIL --client-id 203.0.113.7
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from apis.models import EmailVerdict, PhoneVerdict
from screening.config import Settings
from screening.service import (
    ContactValidator,
    IdentifierType,
    RateLimitExceeded,
    ValidationRequest,
)

EXIT_REJECTED = 1
EXIT_RATE_LIMITED = 2

# --------------------------
# Output
# --------------------------

_VALID_MAP = {True: "accepted", False: "rejected", None: "unknown"}
_ICON = {True: "✅", False: "🚫", None: "⚠️"}


def _score(score: Optional[float]) -> str:
    return f"{score:.2f}" if isinstance(score, float) else "-"


def print_email_verdict(raw: str, verdict: EmailVerdict) -> None:
    print("\n================ Email Check =================")
    print(f"📧 Email:           {raw}")
    if verdict.normalized and verdict.normalized != raw:
        print(f"↪︎ Normalized:      {verdict.normalized}")
    print(f"🧩 Domain:          {verdict.domain or '-'}")
    print(f"🎯 Score:           {_score(verdict.score)}")
    print(f"📊 Confidence:      {verdict.confidence.value}")
    flags = [
        name
        for name, on in (
            ("disposable", verdict.disposable),
            ("role", verdict.role),
            ("catch-all", verdict.catch_all),
        )
        if on
    ]
    if flags:
        print(f"   flags:           {', '.join(flags)}")
    if verdict.did_you_mean:
        print(f"   did you mean:    {verdict.did_you_mean}")
    _print_footer(verdict.valid, verdict.reason.value)


def print_phone_verdict(raw: str, verdict: PhoneVerdict) -> None:
    print("\n================ Phone Check =================")
    print(f"📞 Phone:           {raw}")
    if verdict.normalized:
        print(f"↪︎ Normalized:      {verdict.normalized}")
    print(f"🌍 Country:         {verdict.country or '-'}")
    print(f"📱 Line type:       {verdict.line_type or '-'}")
    if verdict.carrier:
        print(f"   Carrier:         {verdict.carrier}")
    print(f"📊 Confidence:      {verdict.confidence.value}")
    _print_footer(verdict.valid, verdict.reason.value)


def _print_footer(valid: Optional[bool], reason: str) -> None:
    print("\n============================================")
    print(f"{_ICON[valid]} Verdict: {_VALID_MAP[valid]}")
    print(f"💡 Reason:  {reason}")
    print("============================================\n")


# --------------------------
# CLI
# --------------------------


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--email", help="Email address to screen.")
@click.option("--phone", help="Phone number to screen.")
@click.option("--country", help="ISO country hint for --phone (e.g. US).")
@click.option("--client-id", help="Client identifier (IP) to rate-limit on.")
@click.option("--no-apis", is_flag=True, help="Skip providers; local checks and fallback only.")
@click.option("--json", "as_json", is_flag=True, help="Print verdicts as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def main(
    email: Optional[str],
    phone: Optional[str],
    country: Optional[str],
    client_id: Optional[str],
    no_apis: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    if not email and not phone:
        raise click.UsageError("give at least one of --email / --phone")

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.ClickException(f"configuration error: {e}")
    if no_apis:
        settings = settings.without_providers()

    validator = ContactValidator.from_settings(settings)

    pending = []
    if email:
        pending.append(ValidationRequest(IdentifierType.EMAIL, email, client_id=client_id))
    if phone:
        pending.append(
            ValidationRequest(IdentifierType.PHONE, phone, country_hint=country, client_id=client_id)
        )

    results = {}
    for req in pending:
        try:
            if client_id:
                verdict = validator.submit(req)
            elif req.identifier_type is IdentifierType.EMAIL:
                verdict = validator.validate_email(req.raw_value)
            else:
                verdict = validator.validate_phone(req.raw_value, req.country_hint)
        except RateLimitExceeded as e:
            click.echo(
                f"🚫 Rate limit exceeded for {e.client_id}; retry after {e.decision.reset_at:.0f}",
                err=True,
            )
            sys.exit(EXIT_RATE_LIMITED)
        results[req.identifier_type.value] = (req.raw_value, verdict)

    if as_json:
        click.echo(json.dumps({k: v.to_dict() for k, (_, v) in results.items()}, indent=2))
    else:
        for kind, (raw, verdict) in results.items():
            if kind == IdentifierType.EMAIL.value:
                print_email_verdict(raw, verdict)
            else:
                print_phone_verdict(raw, verdict)

    if any(v.valid is False for _, v in results.values()):
        sys.exit(EXIT_REJECTED)


if __name__ == "__main__":
    main()

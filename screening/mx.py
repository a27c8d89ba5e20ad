"""MX lookups via dnspython, bounded by a short timer race."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import dns.exception
import dns.resolver
from dns.exception import Timeout as DnsTimeout

from apis.deadline import Deadline, DeadlineExceeded, call_with_deadline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MxRecord:
    preference: int
    host: str


def _parse_mx_rdata(rdata) -> Tuple[Optional[int], Optional[str]]:
    """
    Return (preference, host) from an MX rdata entry, tolerating different dnspython shapes.
    """
    pref = getattr(rdata, "preference", None)
    host = None
    exch = getattr(rdata, "exchange", None)
    if exch is not None:
        host = exch.to_text() if hasattr(exch, "to_text") else str(exch)
    if host and host.endswith("."):
        host = host[:-1]

    if pref is None or not host:
        parts = rdata.to_text().split()
        if len(parts) >= 2:
            try:
                pref = int(parts[0])
            except ValueError:
                pref = None
            host = parts[1].rstrip(".")

    return pref, host


def lookup_mx(domain: str, lifetime: float = 5.0) -> List[MxRecord]:
    """
    Look up MX records, best (lowest preference) first.
    Returns [] for NXDOMAIN, no answer, DNS timeout or any resolver failure.
    """
    try:
        answers = dns.resolver.resolve(domain, "MX", lifetime=lifetime)
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.NoNameservers) as e:
        logger.debug("MX lookup for %s: %s", domain, e.__class__.__name__)
        return []
    except DnsTimeout:
        logger.debug("MX lookup for %s: timeout", domain)
        return []
    except dns.exception.DNSException as e:
        logger.warning("MX lookup error for %s: %s", domain, e)
        return []

    rows: List[MxRecord] = []
    for r in answers:
        pref, host = _parse_mx_rdata(r)
        if pref is not None and host:
            rows.append(MxRecord(pref, host))
    rows.sort(key=lambda m: m.preference)
    return rows


class MxResolver:
    """``resolve(domain, timeout_ms)`` with a hard wall-clock bound.

    When the timer wins the result is "no records"; a late DNS answer is
    dropped with its future.
    """

    def __init__(self, lookup=lookup_mx):
        self._lookup = lookup

    def resolve(self, domain: str, timeout_ms: int) -> List[MxRecord]:
        def run(deadline: Deadline) -> List[MxRecord]:
            records = self._lookup(domain, max(deadline.remaining(), 0.001))
            deadline.check()
            return records

        try:
            return call_with_deadline(run, timeout_ms, name="mx")
        except DeadlineExceeded:
            logger.debug("MX lookup for %s exceeded %sms", domain, timeout_ms)
            return []
        except Exception:
            logger.exception("MX lookup for %s crashed", domain)
            return []

"""Tests for the timer race around blocking calls."""

import threading

import pytest

from apis.deadline import Deadline, DeadlineExceeded, call_with_deadline


def test_fast_call_returns_its_result():
    assert call_with_deadline(lambda deadline: 42, timeout_ms=500) == 42


def test_slow_call_loses_and_sees_cancelled_token():
    release = threading.Event()
    done = threading.Event()
    seen = {}

    def slow(deadline):
        release.wait(5)
        seen["cancelled"] = deadline.cancelled
        done.set()

    with pytest.raises(DeadlineExceeded):
        call_with_deadline(slow, timeout_ms=30)
    release.set()
    assert done.wait(2)
    assert seen["cancelled"] is True


def test_errors_from_the_call_propagate():
    def boom(deadline):
        raise KeyError("nope")

    with pytest.raises(KeyError):
        call_with_deadline(boom, timeout_ms=500)


def test_timeout_error_raised_by_the_call_is_not_a_lost_race():
    def socket_timeout(deadline):
        raise TimeoutError("connect timed out")

    with pytest.raises(TimeoutError) as exc:
        call_with_deadline(socket_timeout, timeout_ms=500)
    assert not isinstance(exc.value, DeadlineExceeded)
    assert "connect timed out" in str(exc.value)


def test_deadline_remaining_and_check(clock):
    d = Deadline(1000, clock=clock)
    assert d.remaining() == pytest.approx(1.0)
    d.check()
    clock.advance(2)
    assert d.remaining() == 0.0
    with pytest.raises(DeadlineExceeded):
        d.check()


def test_cancel_expires_the_token(clock):
    d = Deadline(1000, clock=clock)
    d.cancel()
    assert d.cancelled and d.expired

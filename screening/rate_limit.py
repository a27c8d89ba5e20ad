"""Fixed-window request limiter keyed by client (usually the caller's IP).

Windows reset wholesale once expired, so a client can burst up to twice the
limit across a window boundary.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    reset_at: float  # clock seconds


@dataclass
class RateWindow:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    def __init__(self, clock: Callable[[], float] = time.time, sweep_at: int = 1024):
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        # expired windows are dropped once the map holds this many clients
        self.sweep_at = sweep_at

    def attempt(self, client_id: Optional[str], limit: int, window_ms: float) -> RateDecision:
        key = client_id or "unknown"
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                if window is None and len(self._windows) >= self.sweep_at:
                    self._sweep(now)
                window = RateWindow(count=0, reset_at=now + window_ms / 1000.0)
                self._windows[key] = window
            if window.count >= limit:
                return RateDecision(False, 0, window.reset_at)
            window.count += 1
            return RateDecision(True, max(0, limit - window.count), window.reset_at)

    def _sweep(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for k in expired:
            del self._windows[k]

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self, client_id: Optional[str] = None) -> None:
        """Forget one client's window, or every window."""
        with self._lock:
            if client_id is None:
                self._windows.clear()
            else:
                self._windows.pop(client_id, None)

"""Pacing and progress helpers shared by the scan and maintenance passes."""

from __future__ import annotations

import random
import time


class AdaptiveDelay:
    """Adaptive delay between per-folder API calls to stay under Drive quotas."""

    def __init__(self, min_delay: float, max_delay: float):
        self.base_min = min_delay
        self.base_max = max_delay
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.last_reset = time.time()

    def on_success(self):
        if time.time() - self.last_reset > 10:
            self.min_delay = max(self.base_min, self.min_delay * 0.95)
            self.max_delay = max(self.base_max, self.max_delay * 0.95)
            self.last_reset = time.time()

    def on_error(self):
        """Back off after a failed call."""
        self.min_delay = min(3.0, max(self.base_min, self.min_delay * 1.5))
        self.max_delay = min(6.0, max(self.base_max, self.max_delay * 1.5))

    def sleep(self):
        if self.max_delay <= 0:
            return
        delay = random.uniform(self.min_delay, self.max_delay)
        time.sleep(delay)


def calculate_eta(processed: int, total: int, elapsed: float) -> str:
    """Return a human-readable ETA string from a processing rate."""
    if processed == 0:
        return "Calculating..."

    rate = processed / elapsed if elapsed > 0 else 0
    remaining = max(total - processed, 0)
    eta_seconds = remaining / rate if rate > 0 else 0

    if eta_seconds < 60:
        return f"{int(eta_seconds)}s"
    if eta_seconds < 3600:
        return f"{int(eta_seconds // 60)}m {int(eta_seconds % 60)}s"
    hours = int(eta_seconds // 3600)
    minutes = int((eta_seconds % 3600) // 60)
    return f"{hours}h {minutes}m"

from __future__ import annotations

from datetime import datetime, timezone

from cryptomatrix.contexts.matrices.application.ports.clock import Clock
from cryptomatrix.shared_kernel.primitives import UtcTimestamp


class SystemClock(Clock):
    """
    SystemClock — platform Clock implementation: "now" from the system time.

    Returns UtcTimestamp(datetime.now(timezone.utc)).
    """

    def now(self) -> UtcTimestamp:
        return UtcTimestamp(datetime.now(timezone.utc))

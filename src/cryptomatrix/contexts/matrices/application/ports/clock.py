from __future__ import annotations

from typing import Protocol

from cryptomatrix.shared_kernel.primitives import UtcTimestamp


class Clock(Protocol):
    """
    Clock — source of "current time" for the application layer in UTC.

    Contract:
    - now() -> UtcTimestamp
    """

    def now(self) -> UtcTimestamp:
        ...

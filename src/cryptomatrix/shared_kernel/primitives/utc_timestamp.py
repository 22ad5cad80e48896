from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class UtcTimestamp:
    """
    UtcTimestamp — single time type of the system with a hard UTC requirement.

    Rules:
    - input datetime must be timezone-aware (naive is forbidden)
    - value is stored in UTC
    - precision is truncated to milliseconds (matrix rows are keyed by epoch ms)
    """

    value: datetime

    def __post_init__(self) -> None:
        dt = self.value

        # tzinfo may be set while utcoffset() still returns None.
        if dt.tzinfo is None or dt.utcoffset() is None:
            raise ValueError("UtcTimestamp requires a timezone-aware datetime (naive datetime is forbidden)")  # noqa: E501

        dt_utc = dt.astimezone(timezone.utc)
        ms = (dt_utc.microsecond // 1000) * 1000
        object.__setattr__(self, "value", dt_utc.replace(microsecond=ms))

    @classmethod
    def from_epoch_ms(cls, epoch_ms: int) -> UtcTimestamp:
        """Build timestamp from integer milliseconds since the Unix epoch."""
        if isinstance(epoch_ms, bool):
            raise ValueError("UtcTimestamp.from_epoch_ms does not accept bool")
        return cls(_EPOCH + timedelta(milliseconds=int(epoch_ms)))

    @property
    def epoch_ms(self) -> int:
        """Milliseconds since the Unix epoch (the storage representation of matrix timestamps)."""
        delta = self.value - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000

    def __str__(self) -> str:
        """
        ISO string in UTC with milliseconds and `Z` suffix.
        Example: 2026-02-04T12:34:56.789Z
        """
        s = self.value.isoformat(timespec="milliseconds")
        if s.endswith("+00:00"):
            s = s[:-6] + "Z"
        return s

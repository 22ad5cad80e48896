from __future__ import annotations

from dataclasses import dataclass

GLOBAL_SESSION = "global"


@dataclass(frozen=True, slots=True)
class SessionKey:
    """
    SessionKey — logical session scope used to filter persisted matrix rows.

    Rules:
    - normalization: strip
    - blank value means the shared `"global"` scope
    """

    value: str = GLOBAL_SESSION

    def __post_init__(self) -> None:
        normalized = str(self.value or "").strip()
        object.__setattr__(self, "value", normalized or GLOBAL_SESSION)

    @classmethod
    def from_raw(cls, raw: str | None) -> SessionKey:
        return cls(raw or "")

    @property
    def is_global(self) -> bool:
        return self.value == GLOBAL_SESSION

    def __str__(self) -> str:
        return self.value

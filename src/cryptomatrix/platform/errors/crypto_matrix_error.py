from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class CryptoMatrixError(Exception):
    """
    CryptoMatrixError — structured failure of a matrices request.

    Rendered by the CLI as `{"ok": false, "error": {"code", "message", "details"}}`, the
    failure counterpart of the latest-matrices payload. `usage_error` marks failures caused
    by the request itself (e.g. an empty coin universe) rather than by the system.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
      - apps/cli/commands/matrices_latest.py
    """

    code: str
    message: str
    details: Mapping[str, Any] | None = None
    usage_error: bool = False

    def __post_init__(self) -> None:
        """
        Normalize code/message and freeze details into a JSON-safe payload.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `code` is a stable snake_case token callers can branch on.
        Raises:
            ValueError: If `code` or `message` are blank.
            TypeError: If `details` is provided but is not a mapping.
        Side Effects:
            Replaces `details` with a normalized copy.
        """
        code = self.code.strip()
        message = self.message.strip()
        if not code:
            raise ValueError("CryptoMatrixError.code must be non-empty")
        if not message:
            raise ValueError("CryptoMatrixError.message must be non-empty")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

        if self.details is not None:
            if not isinstance(self.details, Mapping):
                raise TypeError("CryptoMatrixError.details must be a mapping when provided")
            object.__setattr__(self, "details", _json_safe(self.details))

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "ok": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "details": dict(self.details or {}),
            },
        }


def _json_safe(value: Any) -> Any:
    # NaN/inf become null, matching "no data" cells of matrix payloads
    if isinstance(value, Enum):
        return _json_safe(value.value)
    if isinstance(value, bool) or value is None or isinstance(value, (str, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Mapping):
        return {str(key): _json_safe(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (set, frozenset)):
        return sorted((_json_safe(item) for item in value), key=str)
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)

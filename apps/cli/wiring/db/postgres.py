from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_ENV_FILE = Path("/etc/cryptomatrix/cryptomatrix.env")
_DSN_KEYS = ("MATRICES_PG_DSN", "POSTGRES_DSN")


@dataclass(frozen=True, slots=True)
class PostgresSettings:
    dsn: str

    def __post_init__(self) -> None:
        if not self.dsn.strip():
            raise ValueError(f"one of {_DSN_KEYS} must be set")


class PostgresSettingsLoader:
    """
    Resolve Postgres DSN for CLI commands.

    Precedence:
    1) environ (`MATRICES_PG_DSN`, then `POSTGRES_DSN`)
    2) env-file (`/etc/cryptomatrix/cryptomatrix.env`) when it exists
    """

    def __init__(self, environ: Mapping[str, str], *, env_file: Path = DEFAULT_ENV_FILE) -> None:
        self._env = environ
        self._env_file = env_file

    def load(self) -> PostgresSettings:
        file_env = _read_env_file(self._env_file)
        for source in (self._env, file_env):
            for key in _DSN_KEYS:
                value = source.get(key)
                if value is not None and str(value).strip():
                    return PostgresSettings(dsn=str(value).strip())
        return PostgresSettings(dsn="")


def _read_env_file(path: Path) -> dict[str, str]:
    """
    Minimal KEY=VALUE env-file parser.
    - skips blank lines and `#` comments
    - strips one pair of surrounding quotes
    """
    if not path.exists():
        return {}

    out: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if "=" not in s:
            continue
        k, v = s.split("=", 1)
        key = k.strip()
        val = v.strip()

        if len(val) >= 2 and ((val[0] == val[-1] == '"') or (val[0] == val[-1] == "'")):
            val = val[1:-1]

        if key:
            out[key] = val
    return out

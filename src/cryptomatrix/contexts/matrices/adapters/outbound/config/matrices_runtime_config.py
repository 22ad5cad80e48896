from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from cryptomatrix.contexts.matrices.domain.entities import DEFAULT_PIVOT, TradeStampConvention

_ENV_NAME_KEY = "CRYPTOMATRIX_ENV"
_MATRICES_CONFIG_PATH_KEY = "CRYPTOMATRIX_MATRICES_CONFIG"
_ALLOWED_ENVS = ("dev", "prod", "test")

_TRADE_CONVENTIONS = {
    "benchmark_trade": TradeStampConvention.BENCHMARK_TRADE,
    "benchmark_flag": TradeStampConvention.BENCHMARK_FLAG,
}


@dataclass(frozen=True, slots=True)
class MatricesWindowsConfig:
    """
    MatricesWindowsConfig — accepted window labels and the default for latest matrices.

    Related:
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
      - configs/dev/matrices.yaml
    """

    default: str
    allowed: tuple[str, ...]
    opening_cache_window: str

    def __post_init__(self) -> None:
        """
        Validate window policy invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Labels are compared lower-cased.
        Raises:
            ValueError: If allowed list is empty or does not contain the default.
        Side Effects:
            Normalizes labels to lower case.
        """
        allowed = tuple(label.strip().lower() for label in self.allowed)
        default = self.default.strip().lower()
        opening_window = self.opening_cache_window.strip().lower()
        if not allowed:
            raise ValueError("matrices.windows.allowed must be non-empty")
        if default not in allowed:
            raise ValueError(
                f"matrices.windows.default must be one of {allowed}, got {default!r}"
            )
        if not opening_window:
            raise ValueError("matrices.windows.opening_cache_window must be non-empty")
        object.__setattr__(self, "allowed", allowed)
        object.__setattr__(self, "default", default)
        object.__setattr__(self, "opening_cache_window", opening_window)


@dataclass(frozen=True, slots=True)
class MatricesStorageConfig:
    """
    MatricesStorageConfig — Postgres table names read by matrices adapters.

    Related:
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/
        matrix_series_reader.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/ticker_reader.py
    """

    values_table: str
    snapshot_registry_table: str
    ticker_latest_table: str
    ticker_ticks_table: str


@dataclass(frozen=True, slots=True)
class MatricesAnchorsConfig:
    """Which optional anchors feed the derivation; `trade_convention=None` disables trade."""

    snapshot_enabled: bool
    trade_convention: TradeStampConvention | None


@dataclass(frozen=True, slots=True)
class MatricesRuntimeConfig:
    """
    MatricesRuntimeConfig — top-level runtime config for latest-matrices builds.

    Related:
      - apps/cli/wiring/modules/matrices.py
      - configs/dev/matrices.yaml
      - configs/prod/matrices.yaml
    """

    version: int
    pivot: str
    lookback_hours: int
    prefetch_previous: bool
    windows: MatricesWindowsConfig
    anchors: MatricesAnchorsConfig
    storage: MatricesStorageConfig

    def __post_init__(self) -> None:
        if self.version != 1:
            raise ValueError(f"matrices config version must be 1, got {self.version}")
        if not self.pivot.strip():
            raise ValueError("matrices.pivot must be non-empty")
        if self.lookback_hours <= 0:
            raise ValueError("matrices.live.lookback_hours must be > 0")
        object.__setattr__(self, "pivot", self.pivot.strip().upper())


def resolve_matrices_config_path(
    *,
    environ: Mapping[str, str],
    cli_config_path: str | Path | None = None,
) -> Path:
    """
    Resolve matrices runtime config path using CLI/env/fallback precedence.

    Args:
        environ: Runtime environment mapping.
        cli_config_path: Optional explicit CLI override path.
    Returns:
        Path: Resolved path to runtime config.
    Assumptions:
        Precedence is CLI `--config` > `CRYPTOMATRIX_MATRICES_CONFIG` >
        `configs/<env>/matrices.yaml`.
    Raises:
        ValueError: If `CRYPTOMATRIX_ENV` value is invalid.
    Side Effects:
        None.
    """
    if cli_config_path is not None:
        raw_cli_path = str(cli_config_path).strip()
        if raw_cli_path:
            return Path(raw_cli_path)

    override_path = environ.get(_MATRICES_CONFIG_PATH_KEY, "").strip()
    if override_path:
        return Path(override_path)

    env_name = _resolve_env_name(environ=environ)
    return Path("configs") / env_name / "matrices.yaml"


def load_matrices_runtime_config(path: str | Path) -> MatricesRuntimeConfig:
    """
    Load and validate matrices runtime YAML config.

    Args:
        path: Path to `matrices.yaml`.
    Returns:
        MatricesRuntimeConfig: Parsed and validated runtime config.
    Assumptions:
        YAML payload contains top-level `version` and `matrices` mapping; every nested
        section is optional and falls back to documented defaults.
    Raises:
        FileNotFoundError: If config path does not exist.
        ValueError: If YAML structure or values are invalid.
    Side Effects:
        Reads one UTF-8 YAML file from filesystem.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"matrices config not found: {config_path}")

    payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError("matrices config must be mapping at top-level")

    version = _get_int(payload, "version", required=True)
    matrices_map = _get_mapping(payload, "matrices", required=True)
    windows_map = _get_mapping(matrices_map, "windows", required=False)
    live_map = _get_mapping(matrices_map, "live", required=False)
    anchors_map = _get_mapping(matrices_map, "anchors", required=False)
    storage_map = _get_mapping(matrices_map, "storage", required=False)

    return MatricesRuntimeConfig(
        version=version,
        pivot=_get_str_with_default(matrices_map, "pivot", default=DEFAULT_PIVOT),
        lookback_hours=_get_int_with_default(live_map, "lookback_hours", default=24),
        prefetch_previous=_get_bool_with_default(live_map, "prefetch_previous", default=True),
        windows=MatricesWindowsConfig(
            default=_get_str_with_default(windows_map, "default", default="30m"),
            allowed=_get_str_tuple_with_default(
                windows_map,
                "allowed",
                default=("15m", "30m", "1h"),
            ),
            opening_cache_window=_get_str_with_default(
                windows_map,
                "opening_cache_window",
                default="1h",
            ),
        ),
        anchors=MatricesAnchorsConfig(
            snapshot_enabled=_get_bool_with_default(anchors_map, "snapshot_enabled", default=True),
            trade_convention=_get_trade_convention(anchors_map),
        ),
        storage=MatricesStorageConfig(
            values_table=_get_str_with_default(
                storage_map,
                "values_table",
                default="matrices.dyn_values",
            ),
            snapshot_registry_table=_get_str_with_default(
                storage_map,
                "snapshot_registry_table",
                default="snapshot.snapshot_registry",
            ),
            ticker_latest_table=_get_str_with_default(
                storage_map,
                "ticker_latest_table",
                default="market.ticker_latest",
            ),
            ticker_ticks_table=_get_str_with_default(
                storage_map,
                "ticker_ticks_table",
                default="market.ticker_ticks",
            ),
        ),
    )


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name for matrices config fallback path.

    Args:
        environ: Runtime environment mapping.
    Returns:
        str: One of `dev`, `prod`, or `test`.
    Assumptions:
        Missing `CRYPTOMATRIX_ENV` defaults to `dev`.
    Raises:
        ValueError: If value is outside allowed environment literals.
    Side Effects:
        None.
    """
    raw_env_name = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env_name not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env_name!r}"
        )
    return raw_env_name


def _get_trade_convention(data: Mapping[str, Any]) -> TradeStampConvention | None:
    if "trade_convention" not in data:
        return TradeStampConvention.BENCHMARK_TRADE
    value = data["trade_convention"]
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(
            f"expected string or null at key 'trade_convention', got {type(value).__name__}"
        )
    normalized = value.strip().lower()
    if normalized not in _TRADE_CONVENTIONS:
        raise ValueError(
            f"trade_convention must be one of {tuple(_TRADE_CONVENTIONS)}, got {normalized!r}"
        )
    return _TRADE_CONVENTIONS[normalized]


def _get_mapping(data: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """
    Read nested mapping value from config payload.

    Args:
        data: Source mapping.
        key: Nested mapping key name.
        required: Whether key must be present.
    Returns:
        Mapping[str, Any]: Nested mapping value or empty mapping.
    Assumptions:
        Optional missing nested sections are represented as empty mapping.
    Raises:
        ValueError: If required key is missing or value is not mapping.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected mapping at key '{key}', got {type(value).__name__}")
    return value


def _get_int(data: Mapping[str, Any], key: str, *, required: bool) -> int:
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected int at key '{key}', got {type(value).__name__}")
    return value


def _get_int_with_default(data: Mapping[str, Any], key: str, *, default: int) -> int:
    if key not in data:
        return default
    return _get_int(data, key, required=True)


def _get_str_with_default(data: Mapping[str, Any], key: str, *, default: str) -> str:
    """
    Read optional non-empty string config value with explicit default.

    Args:
        data: Source mapping.
        key: String key name.
        default: Value used when key is absent.
    Returns:
        str: Parsed non-empty string value.
    Assumptions:
        Empty strings are invalid for runtime config fields.
    Raises:
        ValueError: If present value is not non-empty string.
    Side Effects:
        None.
    """
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"expected string at key '{key}', got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"key '{key}' must be non-empty")
    return normalized


def _get_str_tuple_with_default(
    data: Mapping[str, Any],
    key: str,
    *,
    default: tuple[str, ...],
) -> tuple[str, ...]:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"expected list of strings at key '{key}'")
    return tuple(item.strip() for item in value if item.strip())


def _get_bool_with_default(data: Mapping[str, Any], key: str, *, default: bool) -> bool:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"expected bool at key '{key}', got {type(value).__name__}")
    return value

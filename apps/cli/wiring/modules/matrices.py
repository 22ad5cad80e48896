from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from apps.cli.wiring.db.postgres import DEFAULT_ENV_FILE, PostgresSettingsLoader
from cryptomatrix.contexts.matrices.adapters.outbound import (
    InMemoryOpeningTimestampCache,
    MatricesRuntimeConfig,
    PostgresMatrixSeriesReader,
    PostgresTickerReader,
    PsycopgMatricesPostgresGateway,
    load_matrices_runtime_config,
    resolve_matrices_config_path,
)
from cryptomatrix.contexts.matrices.application.services import (
    LiveGridBuilder,
    OpeningGridResolver,
    SnapshotGridResolver,
    TradeGridResolver,
)
from cryptomatrix.contexts.matrices.application.use_cases import BuildLatestMatricesUseCase
from cryptomatrix.platform.time.system_clock import SystemClock


@dataclass(frozen=True, slots=True)
class MatricesLatestWiring:
    """
    Composition root for CLI `matrices-latest`.

    Env is the source of truth for the DSN; YAML config for everything else.
    """

    environ: Mapping[str, str]
    config_path: str | None = None
    env_file: Path = DEFAULT_ENV_FILE

    def config(self) -> MatricesRuntimeConfig:
        path = resolve_matrices_config_path(
            environ=self.environ,
            cli_config_path=self.config_path,
        )
        return load_matrices_runtime_config(path)

    def use_case(self) -> BuildLatestMatricesUseCase:
        """
        Build a fully wired latest-matrices use-case.

        Parameters:
        - none; paths and DSN come from `environ` and `config_path`.

        Returns:
        - Ready-to-run `BuildLatestMatricesUseCase`.

        Assumptions/Invariants:
        - One opening timestamp cache per wiring call; CLI processes are short-lived.

        Errors/Exceptions:
        - Propagates config parsing and DSN resolution errors.

        Side effects:
        - Loads runtime config from filesystem.
        """
        cfg = self.config()
        settings = PostgresSettingsLoader(self.environ, env_file=self.env_file).load()
        gateway = PsycopgMatricesPostgresGateway(dsn=settings.dsn)
        clock = SystemClock()

        series = PostgresMatrixSeriesReader(
            gateway=gateway,
            values_table=cfg.storage.values_table,
            snapshot_registry_table=cfg.storage.snapshot_registry_table,
        )
        tickers = PostgresTickerReader(
            gateway=gateway,
            latest_table=cfg.storage.ticker_latest_table,
            ticks_table=cfg.storage.ticker_ticks_table,
        )

        trade = None
        if cfg.anchors.trade_convention is not None:
            trade = TradeGridResolver(reader=series, convention=cfg.anchors.trade_convention)

        return BuildLatestMatricesUseCase(
            live_builder=LiveGridBuilder(
                reader=tickers,
                clock=clock,
                pivot=cfg.pivot,
                lookback_hours=cfg.lookback_hours,
            ),
            point_reader=series,
            opening=OpeningGridResolver(
                reader=series,
                cache=InMemoryOpeningTimestampCache(),
                clock=clock,
                default_window=cfg.windows.opening_cache_window,
            ),
            snapshot=SnapshotGridResolver(reader=series) if cfg.anchors.snapshot_enabled else None,
            trade=trade,
            default_window=cfg.windows.default,
            allowed_windows=cfg.windows.allowed,
            prefetch_previous=cfg.prefetch_previous,
        )

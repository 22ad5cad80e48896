from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Callable, Mapping, Sequence

from apps.cli.wiring.modules.matrices import MatricesLatestWiring
from cryptomatrix.contexts.matrices.application.use_cases import BuildLatestMatricesUseCase
from cryptomatrix.platform.errors.crypto_matrix_error import CryptoMatrixError

log = logging.getLogger(__name__)

UseCaseFactory = Callable[[argparse.Namespace], BuildLatestMatricesUseCase]


class MatricesLatestCli:
    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        use_case_factory: UseCaseFactory | None = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._use_case_factory = use_case_factory

    def run(self, argv: Sequence[str]) -> int:
        parser = _build_parser()
        try:
            ns = parser.parse_args(list(argv))
        except SystemExit as exc:
            return 0 if exc.code in (0, None) else 2

        coins = _parse_coins(ns.coins)
        if not coins:
            print("matrices-latest: --coins must list at least one coin", file=sys.stderr)
            return 2

        try:
            use_case = self._build_use_case(ns)
            result = use_case.execute(coins=coins, app_session_id=ns.session, window=ns.window)
        except CryptoMatrixError as error:
            print(json.dumps(error.to_payload(), ensure_ascii=False))
            return 2 if error.usage_error else 1
        except ValueError as error:
            print(f"matrices-latest: {error}", file=sys.stderr)
            return 2

        indent = 2 if ns.pretty else None
        print(json.dumps(result.to_payload(), ensure_ascii=False, indent=indent))
        return 0

    def _build_use_case(self, ns: argparse.Namespace) -> BuildLatestMatricesUseCase:
        if self._use_case_factory is not None:
            return self._use_case_factory(ns)
        wiring = MatricesLatestWiring(environ=self._environ, config_path=ns.config)
        return wiring.use_case()


def _parse_coins(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="matrices-latest")
    p.add_argument(
        "--coins",
        required=True,
        help="Comma separated coins, e.g. BTC,ETH (pivot is added automatically)",
    )
    p.add_argument(
        "--session",
        default=None,
        help="App session id (default: global)",
    )
    p.add_argument(
        "--window",
        default=None,
        help="Window label: 15m, 30m or 1h (invalid values fall back to config default)",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to matrices.yaml (default: $CRYPTOMATRIX_MATRICES_CONFIG or "
        "configs/$CRYPTOMATRIX_ENV/matrices.yaml)",
    )
    p.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output",
    )
    return p

from .build_latest_matrices import (
    ALLOWED_WINDOWS,
    DEFAULT_WINDOW,
    EMPTY_UNIVERSE_CODE,
    BuildLatestMatricesUseCase,
)

__all__ = [
    "ALLOWED_WINDOWS",
    "BuildLatestMatricesUseCase",
    "DEFAULT_WINDOW",
    "EMPTY_UNIVERSE_CODE",
]

from .matrices_runtime_config import (
    MatricesAnchorsConfig,
    MatricesRuntimeConfig,
    MatricesStorageConfig,
    MatricesWindowsConfig,
    load_matrices_runtime_config,
    resolve_matrices_config_path,
)

__all__ = [
    "MatricesAnchorsConfig",
    "MatricesRuntimeConfig",
    "MatricesStorageConfig",
    "MatricesWindowsConfig",
    "load_matrices_runtime_config",
    "resolve_matrices_config_path",
]

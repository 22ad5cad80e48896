from .matrices_errors import AnchorGridInvariantError, GridInvariantError, MatricesDomainError

__all__ = [
    "AnchorGridInvariantError",
    "GridInvariantError",
    "MatricesDomainError",
]

"""
Application layer ports for the matrices bounded context.

Ports define external dependencies used by anchor resolvers and the live grid builder.
"""

from .cache import OpeningTimestampCache
from .clock import Clock
from .stores import MatrixAnchorReader, MatrixPointReader, TickerReader

__all__ = [
    "Clock",
    "MatrixAnchorReader",
    "MatrixPointReader",
    "OpeningTimestampCache",
    "TickerReader",
]

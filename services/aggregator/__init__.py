"""
Aggregator.

Concurrent fan-out over the external job boards, plus the composite
continuation token that lets clients page through all boards at once.
"""

from .aggregator import AggregationBatch, Aggregator
from .continuation import InvalidPageTokenError, decode_continuation, encode_continuation

__all__ = [
    "AggregationBatch",
    "Aggregator",
    "InvalidPageTokenError",
    "decode_continuation",
    "encode_continuation",
]

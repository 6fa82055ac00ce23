"""
Result Merger.

Top-level job search: request parsing, mode selection, internal/external
page stitching, response caching and the CLI.
"""

from .cache import ResponseCache
from .merger import MergedPage, ResultMerger
from .request import InvalidRequestError, JobSearchRequest, Mode, parse_request

__all__ = [
    "InvalidRequestError",
    "JobSearchRequest",
    "MergedPage",
    "Mode",
    "ResponseCache",
    "ResultMerger",
    "parse_request",
]

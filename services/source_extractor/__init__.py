"""Source Extractor.

Fetches job postings from external job boards and normalizes them into
canonical records, one page at a time.

Main components:
- SourceAdapter: Abstract base class for all job board adapters
- FetchResult: Explicit per-page result (jobs, total, next cursor, error)
- Adapters: Provider-specific implementations (in adapters/ directory)
- load_sources_config / build_adapters: YAML-driven adapter wiring
"""

from .base import FetchResult, MalformedPayloadError, SourceAdapter, UpstreamError
from .source_config import (
    AggregatorConfig,
    ProviderConfig,
    SourcesConfig,
    build_adapters,
    load_sources_config,
)

__all__ = [
    "AggregatorConfig",
    "FetchResult",
    "MalformedPayloadError",
    "ProviderConfig",
    "SourceAdapter",
    "SourcesConfig",
    "UpstreamError",
    "build_adapters",
    "load_sources_config",
]
__version__ = "0.1.0"

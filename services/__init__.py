"""Job Search Services Package.

This package contains the components of the job search service:
- common: Canonical job record, pagination cursors, settings
- normalizer: Shared rules for mapping provider data to the canonical record
- source_extractor: Job board adapters (Workable, SmartRecruiters, Hiring.cafe)
- aggregator: Concurrent fan-out over the adapters with composite page tokens
- search: Internal jobs from PostgreSQL, with a Typesense index in front
- merger: Internal/external page stitching, response cache and CLI
"""

__version__ = "0.1.0"

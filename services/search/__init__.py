"""
Internal Job Search.

PostgreSQL job store, Typesense index client, and the facade that tries the
index first and falls back to the database.
"""

from .db_operations import DatabaseError, JobStore
from .facade import ENGINE_FALLBACK, ENGINE_INDEXED, SearchFacade, SearchFilters, SearchPage
from .search_index import IndexHits, SearchIndexError, TypesenseIndex

__all__ = [
    "DatabaseError",
    "ENGINE_FALLBACK",
    "ENGINE_INDEXED",
    "IndexHits",
    "JobStore",
    "SearchFacade",
    "SearchFilters",
    "SearchIndexError",
    "SearchPage",
    "TypesenseIndex",
]

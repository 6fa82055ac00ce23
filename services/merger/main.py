"""
Job Search Service - Main Entry Point

Command-line interface for the job search service, plus `handle_request`,
the transport-neutral request handler an HTTP layer would call.

Usage:
    python -m services.merger.main search [OPTIONS]
    python -m services.merger.main reindex [--verbose]

Search options:
    --search TEXT         Free-text query
    --job-type TEXT       Exact employment type filter (internal results only)
    --page INTEGER        Page number, 1-based (default: 1)
    --limit INTEGER       Page size, 1-100 (default: 10)
    --no-external         Leave out external job boards
    --no-internal         Leave out internal jobs
    --page-token TEXT     externalPageToken from a previous page
    --verbose             Enable debug logging

Examples:
    # Mixed internal + external results:
    python -m services.merger.main search --search "data engineer"

    # Second page of external results only:
    python -m services.merger.main search --no-internal --page 2 --page-token eyJ3b3Jr...

    # Rebuild the search index from PostgreSQL:
    python -m services.merger.main reindex

Exit Codes:
    0: Success
    1: Invalid request (bad parameters or page token)
    2: Fatal error (configuration, database, search index, etc.)
"""

import argparse
import json
import logging
import sys
from collections.abc import Mapping
from typing import Any, Optional

from services.aggregator.aggregator import Aggregator
from services.common.errors import InvalidRequestError
from services.common.settings import Settings
from services.search.db_operations import DatabaseError, JobStore
from services.search.facade import SearchFacade
from services.search.search_index import SearchIndexError, TypesenseIndex
from services.source_extractor.source_config import build_adapters, load_sources_config

from .cache import ResponseCache
from .merger import ResultMerger
from .request import Mode, parse_request

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = {"message": "Internal server error"}
EXIT_CODES = {200: 0, 400: 1, 500: 2}


def handle_request(
    params: Mapping[str, Any],
    merger: ResultMerger,
    cache: Optional[ResponseCache] = None,
) -> tuple[int, dict[str, Any]]:
    """
    Serve one job search request.

    Args:
        params: Raw query parameters (search, jobType, page, limit,
                includeExternal, includeInternal, externalPageToken)
        merger: Configured result merger
        cache: Response cache; consulted only for internal-only requests

    Returns:
        (HTTP status, JSON body)
    """
    try:
        request = parse_request(params)
        use_cache = cache is not None and cache.enabled and request.mode is Mode.INTERNAL_ONLY

        if use_cache:
            cached = cache.get(request.cache_key)
            if cached is not None:
                logger.debug("Serving job search from cache", extra={"key": request.cache_key})
                return 200, cached

        body = merger.merge(request).to_dict()

        if use_cache:
            cache.set(request.cache_key, body)
        return 200, body

    except InvalidRequestError as e:
        logger.warning("Rejected job search request", extra={"error": str(e)})
        return 400, {"message": str(e)}

    except Exception as e:
        logger.error(
            "Unexpected error while serving job search",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 500, dict(INTERNAL_SERVER_ERROR)


def build_store(settings: Settings) -> Optional[JobStore]:
    return JobStore(settings.database_url) if settings.database_url else None


def build_index(settings: Settings) -> Optional[TypesenseIndex]:
    if not settings.typesense_url:
        return None
    return TypesenseIndex(
        settings.typesense_url,
        settings.typesense_api_key or "",
        collection=settings.typesense_collection,
    )


def build_merger(settings: Settings) -> ResultMerger:
    """
    Wire the merger from settings and `config/sources.yml`.

    Raises:
        FileNotFoundError: If the sources configuration file is missing
        ValueError: If the sources configuration is invalid
    """
    store = build_store(settings)
    facade = SearchFacade(store, build_index(settings)) if store is not None else None
    if facade is None:
        logger.warning("DATABASE_URL not set, internal jobs are disabled")

    sources = load_sources_config(settings.sources_config_path)
    aggregator = Aggregator(
        build_adapters(sources),
        per_source_total_cap=sources.aggregator.per_source_total_cap,
        max_workers=sources.aggregator.max_workers,
    )

    return ResultMerger(
        facade,
        aggregator,
        external_only_total_cap=settings.external_only_total_cap,
        mixed_external_total_cap=settings.mixed_external_total_cap,
    )


def build_cache(settings: Settings) -> ResponseCache:
    return ResponseCache(settings.redis_url, ttl_seconds=settings.cache_ttl_seconds)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Search internal and external job postings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    search = subparsers.add_parser('search', help='Run one job search and print the JSON page')
    search.add_argument('--search', type=str, default=None, help='Free-text query')
    search.add_argument('--job-type', type=str, default=None, dest='job_type',
                        help='Exact employment type filter')
    search.add_argument('--page', type=str, default=None, help='Page number, 1-based')
    search.add_argument('--limit', type=str, default=None, help='Page size, 1-100')
    search.add_argument('--no-external', action='store_true', dest='no_external',
                        help='Leave out external job boards')
    search.add_argument('--no-internal', action='store_true', dest='no_internal',
                        help='Leave out internal jobs')
    search.add_argument('--page-token', type=str, default=None, dest='page_token',
                        help='externalPageToken from a previous page')
    search.add_argument('--verbose', action='store_true', help='Enable debug logging')

    reindex = subparsers.add_parser('reindex', help='Bulk-index internal jobs into Typesense')
    reindex.add_argument('--verbose', action='store_true', help='Enable debug logging')

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def run_search(args: argparse.Namespace, settings: Settings) -> int:
    params = {
        "search": args.search,
        "jobType": args.job_type,
        "page": args.page,
        "limit": args.limit,
        "includeExternal": "false" if args.no_external else "true",
        "includeInternal": "false" if args.no_internal else "true",
        "externalPageToken": args.page_token,
    }
    status, body = handle_request(params, build_merger(settings), build_cache(settings))
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return EXIT_CODES.get(status, 2)


def run_reindex(settings: Settings) -> int:
    store = build_store(settings)
    index = build_index(settings)
    if store is None or index is None:
        logger.error("DATABASE_URL and TYPESENSE_HOST must both be set to reindex")
        return 2

    store.check_connection()
    index.ensure_collection()
    indexed = index.bulk_index(store.iter_all_jobs())
    invalidated = build_cache(settings).invalidate()

    logger.info(
        "Reindex completed",
        extra={'indexed': indexed, 'cache_keys_invalidated': invalidated}
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the job search CLI.

    Returns:
        Exit code (0 = success, 1 = invalid request, 2 = fatal error)
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.from_env()
        if args.command == 'reindex':
            return run_reindex(settings)
        return run_search(args, settings)

    except (DatabaseError, SearchIndexError) as e:
        logger.error(f"Backend error: {e}")
        return 2

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2


if __name__ == '__main__':
    sys.exit(main())

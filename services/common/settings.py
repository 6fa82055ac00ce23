"""
Environment-driven settings.

Values come from the process environment, optionally seeded from a local
`.env` file via python-dotenv. Everything except the caps is optional: a
missing DATABASE_URL, TYPESENSE_HOST or REDIS_URL simply disables that
collaborator.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300
DEFAULT_EXTERNAL_ONLY_TOTAL_CAP = 2000
DEFAULT_MIXED_EXTERNAL_TOTAL_CAP = 500


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the job search service."""

    database_url: Optional[str] = None
    typesense_host: Optional[str] = None
    typesense_port: int = 8108
    typesense_protocol: str = "http"
    typesense_api_key: Optional[str] = None
    typesense_collection: str = "jobs"
    redis_url: Optional[str] = None
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    external_only_total_cap: int = DEFAULT_EXTERNAL_ONLY_TOTAL_CAP
    mixed_external_total_cap: int = DEFAULT_MIXED_EXTERNAL_TOTAL_CAP
    sources_config_path: Optional[str] = None

    @property
    def typesense_url(self) -> Optional[str]:
        if not self.typesense_host:
            return None
        return f"{self.typesense_protocol}://{self.typesense_host}:{self.typesense_port}"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables (after loading `.env`).

        Raises:
            ValueError: If a numeric variable is set but not an integer
        """
        load_dotenv()

        settings = cls(
            database_url=os.getenv("DATABASE_URL") or None,
            typesense_host=os.getenv("TYPESENSE_HOST") or None,
            typesense_port=_int_env("TYPESENSE_PORT", 8108),
            typesense_protocol=os.getenv("TYPESENSE_PROTOCOL", "http"),
            typesense_api_key=os.getenv("TYPESENSE_API_KEY") or None,
            typesense_collection=os.getenv("TYPESENSE_COLLECTION", "jobs"),
            redis_url=os.getenv("REDIS_URL") or None,
            cache_ttl_seconds=_int_env("JOBS_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
            external_only_total_cap=_int_env(
                "EXTERNAL_ONLY_TOTAL_CAP", DEFAULT_EXTERNAL_ONLY_TOTAL_CAP
            ),
            mixed_external_total_cap=_int_env(
                "MIXED_EXTERNAL_TOTAL_CAP", DEFAULT_MIXED_EXTERNAL_TOTAL_CAP
            ),
            sources_config_path=os.getenv("SOURCES_CONFIG_PATH") or None,
        )

        logger.info(
            "Settings loaded",
            extra={
                "database_configured": settings.database_url is not None,
                "search_index_configured": settings.typesense_host is not None,
                "cache_configured": settings.redis_url is not None,
            },
        )
        return settings


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e

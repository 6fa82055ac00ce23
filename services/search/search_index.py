"""
Typesense search index client.

Talks to the Typesense REST API directly with ``requests``. The index holds a
flattened copy of each internal job (enough to rank and filter); full records
are always loaded from PostgreSQL afterwards.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import requests

from services.common.models import CanonicalJobRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 2.0
QUERY_BY = "title,company,description,location"
SORT_BY = "publishedat:desc"


def collection_schema(name: str) -> dict[str, Any]:
    """Typesense collection definition for job documents."""
    return {
        "name": name,
        "fields": [
            {"name": "id", "type": "string"},
            {"name": "title", "type": "string"},
            {"name": "company", "type": "string"},
            {"name": "location", "type": "string"},
            {"name": "jobType", "type": "string", "facet": True},
            {"name": "description", "type": "string"},
            {"name": "requirements", "type": "string[]", "optional": True},
            {"name": "salary", "type": "string", "optional": True},
            {"name": "publishedat", "type": "int64"},
            {"name": "apply_url", "type": "string", "optional": True},
        ],
        "default_sorting_field": "publishedat",
    }


def document_from_record(record: CanonicalJobRecord) -> dict[str, Any]:
    """Flatten a canonical record into an index document."""
    return {
        "id": record.id,
        "title": record.title,
        "company": record.company.name,
        "location": record.location,
        "jobType": record.employment_type,
        "description": record.description,
        "requirements": list(record.requirements),
        "salary": record.salary or "",
        "publishedat": int(record.published_at.timestamp() * 1000),
        "apply_url": record.apply_url,
    }


class SearchIndexError(Exception):
    """Raised when the search index is unreachable or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class IndexHits:
    """Ids of the matching documents, in rank order, plus the total match count."""

    ids: list[str]
    found: int


class TypesenseIndex:
    """
    Keyword search over internal jobs.

    Args:
        base_url: e.g. ``http://localhost:8108``
        api_key: Typesense API key
        collection: Collection name
        timeout_seconds: Per-request timeout
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        collection: str = "jobs",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.collection = collection
        self.timeout_seconds = timeout_seconds

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-TYPESENSE-API-KEY": self.api_key}

    def _check(self, response: requests.Response, action: str) -> None:
        if response.status_code >= 400:
            raise SearchIndexError(
                f"Typesense {action} failed with {response.status_code}: {response.text[:200]}",
                response.status_code,
            )

    def search(
        self,
        query: Optional[str],
        job_type: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> IndexHits:
        """
        Run a keyword search.

        Args:
            query: Free text; None or blank searches everything (``*``)
            job_type: Exact ``jobType`` filter
            page: 1-based page number
            per_page: Hits per page

        Raises:
            SearchIndexError: On transport errors, error responses or unexpected payloads
        """
        params: dict[str, Any] = {
            "q": query.strip() if query and query.strip() else "*",
            "query_by": QUERY_BY,
            "sort_by": SORT_BY,
            "page": page,
            "per_page": per_page,
        }
        if job_type:
            # Backticks keep hyphens and spaces in the value literal
            params["filter_by"] = f"jobType:=`{job_type.replace('`', '')}`"

        url = f"{self.base_url}/collections/{self.collection}/documents/search"
        try:
            response = requests.get(url, headers=self._headers, params=params, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            raise SearchIndexError(f"Typesense unreachable: {e}") from e

        self._check(response, "search")
        try:
            data = response.json()
            ids = [str(hit["document"]["id"]) for hit in data.get("hits") or []]
            found = int(data.get("found") or 0)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise SearchIndexError(f"Unexpected Typesense search response: {e}") from e

        logger.debug(
            "Typesense search complete",
            extra={"query": params["q"], "page": page, "hits": len(ids), "found": found},
        )
        return IndexHits(ids=ids, found=found)

    def ensure_collection(self) -> bool:
        """
        Create the collection if it does not exist.

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            SearchIndexError: If Typesense is unreachable or refuses the schema
        """
        url = f"{self.base_url}/collections/{self.collection}"
        try:
            response = requests.get(url, headers=self._headers, timeout=self.timeout_seconds)
            if response.status_code == 200:
                logger.info("Search collection already exists", extra={"collection": self.collection})
                return False
            if response.status_code != 404:
                self._check(response, "collection lookup")

            response = requests.post(
                f"{self.base_url}/collections",
                headers=self._headers,
                json=collection_schema(self.collection),
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise SearchIndexError(f"Typesense unreachable: {e}") from e

        self._check(response, "collection create")
        logger.info("Created search collection", extra={"collection": self.collection})
        return True

    def bulk_index(self, records: Iterable[CanonicalJobRecord], batch_size: int = 500) -> int:
        """
        Upsert records into the collection using the JSONL import endpoint.

        Returns:
            Number of documents Typesense accepted

        Raises:
            SearchIndexError: If an import request fails outright
        """
        indexed = 0
        batch: list[dict[str, Any]] = []
        for record in records:
            batch.append(document_from_record(record))
            if len(batch) >= batch_size:
                indexed += self._import_batch(batch)
                batch = []
        if batch:
            indexed += self._import_batch(batch)

        logger.info("Bulk indexed jobs", extra={"collection": self.collection, "indexed": indexed})
        return indexed

    def _import_batch(self, documents: list[dict[str, Any]]) -> int:
        body = "\n".join(json.dumps(doc) for doc in documents)
        url = f"{self.base_url}/collections/{self.collection}/documents/import"
        try:
            response = requests.post(
                url,
                headers={**self._headers, "Content-Type": "text/plain"},
                params={"action": "upsert"},
                data=body.encode("utf-8"),
                timeout=max(self.timeout_seconds, 30.0),
            )
        except requests.exceptions.RequestException as e:
            raise SearchIndexError(f"Typesense unreachable: {e}") from e

        self._check(response, "import")

        succeeded = 0
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                result = json.loads(line)
            except ValueError:
                continue
            if result.get("success"):
                succeeded += 1
            else:
                logger.warning(
                    "Typesense rejected a document",
                    extra={"error": result.get("error"), "document": result.get("document")},
                )
        return succeeded

import json
import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx
import redis.asyncio as redis

from canon_reader.core.utils import get_from_corpus, with_retries

logger = logging.getLogger(__name__)


def _is_transient(error: Exception) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.RequestError)


class TextStore(Protocol):
    """Storage contract the page loader depends on."""

    async def fetch_section(self, section_prefix: str) -> List[Dict[str, Any]]:
        """Ordered records ``{ref, primary_text, secondary_text, c1, c2, c3}`` under a section prefix."""

    async def fetch_book(self, slug: str) -> Optional[Dict[str, Any]]:
        """Structure and neighbours of one book, or ``None`` when unknown."""

    async def fetch_index(self) -> List[Dict[str, Any]]:
        """All book entries known to the store."""


class RemoteTextStore:
    """Corpus API client with a Redis page cache and retries."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        redis_client: Optional[redis.Redis],
        api_url: str,
        api_key: str | None,
        cache_ttl_sec: int = 3600,
        timeout: float = 20.0,
        attempts: int = 3,
    ):
        self.http_client = http_client
        self.redis_client = redis_client
        self.api_url = api_url
        self.api_key = api_key
        self.cache_ttl = cache_ttl_sec
        self.timeout = timeout
        self.attempts = attempts

    def _cache_key(self, section_prefix: str) -> str:
        return f"reader_section:v1:{section_prefix}"

    async def fetch_section(self, section_prefix: str) -> List[Dict[str, Any]]:
        cache_key = self._cache_key(section_prefix)
        if self.redis_client:
            try:
                cached = await self.redis_client.get(cache_key)
                if cached:
                    logger.debug(f"Section cache HIT for key: {cache_key}")
                    return json.loads(cached)
            except Exception as e:
                logger.error(f"Redis cache read failed for key {cache_key}: {e}")

        payload = await self._get(f"sections/{quote(section_prefix)}")
        if payload is None:
            return []
        records = payload.get("records", []) if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise ValueError(f"Unexpected section payload for '{section_prefix}'")

        if records and self.redis_client:
            try:
                await self.redis_client.set(cache_key, json.dumps(records), ex=self.cache_ttl)
                logger.debug(f"Section cache WRITE for key: {cache_key}")
            except Exception as e:
                logger.error(f"Redis cache write failed for key {cache_key}: {e}")
        return records

    async def fetch_book(self, slug: str) -> Optional[Dict[str, Any]]:
        payload = await self._get(f"books/{quote(slug)}")
        return payload if isinstance(payload, dict) else None

    async def fetch_index(self) -> List[Dict[str, Any]]:
        payload = await self._get("books")
        if isinstance(payload, dict):
            payload = payload.get("books", [])
        return payload or []

    async def _get(self, endpoint: str) -> Any:
        api_call = lambda: get_from_corpus(
            self.http_client, endpoint,
            api_url=self.api_url, api_key=self.api_key, timeout=self.timeout,
        )
        try:
            return await with_retries(api_call, attempts=self.attempts, should_retry=_is_transient)
        except httpx.HTTPStatusError as e:
            # 404: the store has no such section or book
            if e.response.status_code == 404:
                return None
            raise


class InMemoryTextStore:
    """Text store backed by dictionaries; used for tests and local fixtures."""

    def __init__(
        self,
        sections: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        books: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.sections = dict(sections or {})
        self.books = dict(books or {})
        self.calls: List[str] = []

    async def fetch_section(self, section_prefix: str) -> List[Dict[str, Any]]:
        self.calls.append(section_prefix)
        return list(self.sections.get(section_prefix, []))

    async def fetch_book(self, slug: str) -> Optional[Dict[str, Any]]:
        return self.books.get(slug)

    async def fetch_index(self) -> List[Dict[str, Any]]:
        return list(self.books.values())

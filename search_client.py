"""Web search clients returning raw result records with optional page text."""

import logging
from abc import ABC, abstractmethod

import httpx

from config_loader import Settings, get_search_api_key
from models import RawSearchResult

logger = logging.getLogger(__name__)


class SearchClient(ABC):
    """One query in, ranked raw results out."""

    source_tag: str = "search"

    @abstractmethod
    async def search(self, query: str, limit: int | None = None) -> list[RawSearchResult]:
        """Run a single search query.

        Raises:
            httpx.HTTPError: On transport errors, timeouts and non-2xx responses.
        """


class FirecrawlSearchClient(SearchClient):
    """Firecrawl /search with markdown scraping of each hit."""

    source_tag = "firecrawl"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            settings: Settings with the search endpoint, key and timeout.
            transport: Optional httpx transport (used by tests).

        Raises:
            ValueError: If no search API key is configured.
        """
        self.api_key = get_search_api_key(settings)
        self.url = settings.search_api_url
        self.timeout = settings.search_timeout
        self.default_limit = settings.search_results_per_query
        self.transport = transport

    async def search(self, query: str, limit: int | None = None) -> list[RawSearchResult]:
        payload = {
            "query": query,
            "limit": limit or self.default_limit,
            "scrapeOptions": {"formats": ["markdown"]},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.url, json=payload, headers=headers)
            if response.status_code != 200:
                logger.warning(
                    "Search HTTP %d for %r: %s",
                    response.status_code, query, response.text[:200],
                )
            response.raise_for_status()
            data = response.json()

        if not data.get("success") or not isinstance(data.get("data"), list):
            return []

        results = []
        for item in data["data"]:
            if not isinstance(item, dict):
                continue
            results.append(
                RawSearchResult(
                    url=_text(item.get("url")),
                    title=_text(item.get("title")),
                    description=_text(item.get("description")),
                    markdown=_text(item.get("markdown")),
                )
            )
        return results


def _text(value) -> str | None:
    return value if isinstance(value, str) else None

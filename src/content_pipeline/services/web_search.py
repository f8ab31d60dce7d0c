"""
Web search client backed by the Tavily search API.

Returns plain-text snippets for the top results of a query. The Tavily SDK is
synchronous, so each search runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from tavily import TavilyClient

from content_pipeline.config import settings
from content_pipeline.services.exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


def extract_snippets(response: Dict[str, Any]) -> List[str]:
    """
    Pull result snippets out of a Tavily search response.

    Each result contributes its "content" or, failing that, its "snippet"
    (empty string if neither is present). A response without a results list
    yields an empty list.
    """
    results = response.get("results") if isinstance(response, dict) else None
    if not isinstance(results, list):
        return []

    return [
        (result.get("content") or result.get("snippet") or "") if isinstance(result, dict) else ""
        for result in results
    ]


class WebSearchClient:
    """Client for Tavily web search."""

    def __init__(self, api_key: Optional[str] = None, max_results: Optional[int] = None):
        self.api_key = api_key if api_key is not None else settings.TAVILY_API_KEY
        self.max_results = max_results or settings.SEARCH_MAX_RESULTS
        self.tavily_client = TavilyClient(api_key=self.api_key) if self.api_key else None

    async def search(self, query: str) -> List[str]:
        """
        Search the web and return snippets from the top results.

        Args:
            query: Search query

        Returns:
            List of result snippets (at most max_results, possibly empty)

        Raises:
            ConfigurationError: If TAVILY_API_KEY is not configured
            ProviderError: If the search request fails
        """
        if not self.tavily_client:
            raise ConfigurationError("TAVILY_API_KEY environment variable is not set")

        try:
            response = await asyncio.to_thread(
                self.tavily_client.search,
                query=query,
                max_results=self.max_results,
            )
        except Exception as e:
            raise ProviderError(f"Failed to search web with Tavily: {str(e)}") from e

        snippets = extract_snippets(response)
        logger.debug("Tavily search %r returned %d results", query, len(snippets))
        return snippets[:self.max_results]

"""
Client for the public Wikipedia (MediaWiki action) API.

Two read-only calls are used: a full-text search returning the top article
title, and a plain-text extract fetch for a title.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .exceptions import ExtractFetchFailed, SearchFailed
from .logging_config import log_latency

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


def article_url(base_url: str, title: str) -> str:
    """
    Build the human-readable link for an article.

    Args:
        base_url (str): Article path prefix, e.g. https://en.wikipedia.org/wiki/
        title (str): Article title

    Returns:
        str: Base URL followed by the percent-encoded title
    """
    return f"{base_url}{quote(title, safe=_URI_COMPONENT_SAFE)}"


def _query_block(data: Dict[str, Any]) -> Dict[str, Any]:
    query = data.get("query")
    if query is None:
        return {}
    if not isinstance(query, dict):
        raise ValueError("'query' is not an object")
    return query


def _top_title(data: Dict[str, Any]) -> Optional[str]:
    """Title of the first search hit; None when there is no hit."""
    results = _query_block(data).get("search")
    if not results:
        return None
    if not isinstance(results, list):
        raise ValueError("'query.search' is not a list")

    hit = results[0]
    if not isinstance(hit, dict):
        raise ValueError("search hit is not an object")

    title = hit.get("title")
    if title is None:
        return None
    if not isinstance(title, str):
        raise ValueError("search hit title is not a string")
    return title or None


def _pages(data: Dict[str, Any]) -> Dict[str, Any]:
    pages = _query_block(data).get("pages")
    if not pages:
        return {}
    if not isinstance(pages, dict):
        raise ValueError("'query.pages' is not an object")
    return pages


def _first_extract(pages: Dict[str, Any]) -> Optional[str]:
    """Extract of the first page; None when the page has none."""
    page = next(iter(pages.values()))
    if page is None:
        return None
    if not isinstance(page, dict):
        raise ValueError("page entry is not an object")

    extract = page.get("extract")
    if extract is None:
        return None
    if not isinstance(extract, str):
        raise ValueError("page extract is not a string")
    return extract or None


class WikipediaClient:
    """Thin async wrapper over the two MediaWiki queries."""

    def __init__(
        self,
        api_url: str,
        extract_chars: int = 1200,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.extract_chars = extract_chars
        self.timeout = timeout
        self.transport = transport

    async def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(self.api_url, params=params)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected response payload")
        return data

    @log_latency("wikipedia.search")
    async def search_title(self, search_term: str) -> Optional[str]:
        """
        Search Wikipedia and return the top article title.

        Args:
            search_term (str): Free-text search query

        Returns:
            Optional[str]: The article title, or None if nothing matched

        Raises:
            SearchFailed: On network or HTTP status errors, invalid JSON or an unexpected payload shape
        """
        params = {
            "action": "query",
            "list": "search",
            "srsearch": search_term,
            "format": "json",
            "srlimit": 1,
        }

        try:
            data = await self._get_json(params)
            return _top_title(data)
        except httpx.HTTPError as e:
            raise SearchFailed(f"Search failed due to network issue: {e}") from e
        except ValueError as e:
            raise SearchFailed(f"Search returned a malformed payload: {e}") from e

    @log_latency("wikipedia.extract")
    async def fetch_extract(self, title: str) -> Optional[str]:
        """
        Fetch the plain-text extract of an article, following redirects.

        Args:
            title (str): Article title as returned by search_title

        Returns:
            Optional[str]: The extract text, or None if the page has none

        Raises:
            ExtractFetchFailed: On network or HTTP status errors, invalid JSON or an unexpected payload shape
        """
        params = {
            "action": "query",
            "titles": title,
            "prop": "extracts",
            "exchars": self.extract_chars,
            "explaintext": 1,
            "format": "json",
            "redirects": 1,
        }

        try:
            data = await self._get_json(params)
            pages = _pages(data)
            if not pages:
                logger.warning("Extract response for %r contained no pages", title)
                return None
            return _first_extract(pages)
        except httpx.HTTPError as e:
            raise ExtractFetchFailed(f"Extraction failed due to network issue: {e}") from e
        except ValueError as e:
            raise ExtractFetchFailed(f"Extraction returned a malformed payload: {e}") from e

"""Search for competitor articles on the same topic via Google Custom Search."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import requests

from common.config import SearchConfig, is_configured_key
from common.utils import get_host, host_matches
from search_competitors.models import SearchResult

logger = logging.getLogger(__name__)

MAX_RESULTS = 10


def build_query(topic: str, qualifier: str) -> str:
    """Append the long-form qualifier to the topic."""
    topic = topic.strip()
    return f"{topic} {qualifier}".strip() if qualifier else topic


def is_excluded(url: str, excluded_domains: Iterable[str]) -> bool:
    host = get_host(url)
    if not host:
        return True
    return any(host_matches(host, domain) for domain in excluded_domains)


def parse_search_items(
    items: list[Any],
    excluded_domains: Iterable[str],
    limit: int,
) -> list[SearchResult]:
    """Convert raw API items to SearchResults, dropping denylisted hosts."""
    excluded = list(excluded_domains)
    results = []
    for item in items:
        if not isinstance(item, dict):
            continue
        link = item.get("link") or ""
        if not link or is_excluded(link, excluded):
            continue
        results.append(
            SearchResult(
                title=item.get("title") or "",
                url=link,
                snippet=item.get("snippet") or "",
            )
        )
    return results[:limit]


class GoogleSearchClient:
    """Google Custom Search JSON API client.

    Never raises for backend problems: missing credentials, quota errors,
    bad engine ids and network failures all yield an empty result list.
    """

    def __init__(
        self,
        api_key: str,
        cx: str,
        endpoint: str = "https://www.googleapis.com/customsearch/v1",
        qualifier: str = "blog article",
        excluded_domains: Optional[Iterable[str]] = None,
        timeout: float = 15.0,
        max_results: int = MAX_RESULTS,
    ) -> None:
        self.api_key = api_key
        self.cx = cx
        self.endpoint = endpoint
        self.qualifier = qualifier
        self.excluded_domains = list(excluded_domains or [])
        self.timeout = timeout
        self.max_results = min(max_results, MAX_RESULTS)

    @classmethod
    def from_config(cls, config: SearchConfig) -> "GoogleSearchClient":
        return cls(
            api_key=config.api_key,
            cx=config.cx,
            endpoint=config.endpoint,
            qualifier=config.qualifier,
            excluded_domains=config.excluded_domains,
            timeout=config.timeout,
            max_results=config.max_results,
        )

    @property
    def is_configured(self) -> bool:
        return is_configured_key(self.api_key) and is_configured_key(self.cx)

    def search(
        self,
        topic: str,
        desired_count: int = 3,
        exclude_hosts: Iterable[str] = (),
    ) -> list[SearchResult]:
        """Return up to ``min(desired_count, 10)`` ranked results for a topic.

        Args:
            topic: Article title or topic to search for
            desired_count: Number of results wanted (capped at 10)
            exclude_hosts: Extra hosts to drop, e.g. the site being enhanced

        Returns:
            List of SearchResult, possibly empty
        """
        if desired_count < 1:
            raise ValueError("desired_count must be >= 1")
        if not topic or not topic.strip():
            logger.warning("Empty search topic, skipping search")
            return []

        logger.info("Searching for: %r", topic[:50])

        if not self.is_configured:
            logger.warning(
                "Google Custom Search not configured (set GOOGLE_API_KEY and GOOGLE_CX)"
            )
            return []

        count = min(desired_count, self.max_results)
        params = {
            "key": self.api_key,
            "cx": self.cx,
            "q": build_query(topic, self.qualifier),
            "num": count,
        }

        try:
            response = requests.get(self.endpoint, params=params, timeout=self.timeout)
        except Exception as e:
            logger.error("Google search request failed: %s", e)
            return []

        if response.status_code == 403:
            logger.error("Google search quota exceeded or invalid API key")
            return []
        if response.status_code == 400:
            logger.error("Google search rejected the request (check GOOGLE_CX)")
            return []
        if response.status_code >= 300:
            logger.error("Google search failed with HTTP %s", response.status_code)
            return []

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Google search returned invalid JSON: %s", e)
            return []

        items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(items, list):
            items = []

        excluded = self.excluded_domains + [h for h in exclude_hosts if h]
        results = parse_search_items(items, excluded, count)
        logger.info("Found %d results via Custom Search API", len(results))
        return results

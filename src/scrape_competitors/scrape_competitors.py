"""Extract competitor content for a list of search results."""

import logging
from typing import Optional, Protocol

from common.pacing import Pacer
from scrape_competitors.models import ExtractedSource
from search_competitors.models import SearchResult

logger = logging.getLogger(__name__)

MIN_SOURCE_LENGTH = 200


class TextFetcher(Protocol):
    def fetch_text(self, url: str) -> str: ...


def scrape_competitors(
    results: list[SearchResult],
    scraper: TextFetcher,
    pacer: Optional[Pacer] = None,
    min_length: int = MIN_SOURCE_LENGTH,
) -> list[ExtractedSource]:
    """Scrape each search result in order and keep the ones with enough text.

    A source is kept only if its text is longer than ``min_length``
    characters. Order of ``results`` is preserved.
    """
    sources = []
    for result in results:
        if pacer is not None:
            pacer.wait()
        try:
            text = scraper.fetch_text(result.url) or ""
        finally:
            if pacer is not None:
                pacer.mark()

        if len(text) > min_length:
            sources.append(ExtractedSource(title=result.title, url=result.url, content=text))
        else:
            logger.info("Discarding %s (%d characters)", result.url, len(text))

    logger.info("Scraped %d competitor articles", len(sources))
    return sources

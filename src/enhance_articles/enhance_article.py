"""Enhance a single article: search, scrape, synthesize, assemble, publish."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from common.pacing import Pacer
from common.utils import get_host
from enhance_articles.helpers import (
    build_citations,
    build_references_html,
    enhanced_source_url,
    enhanced_tags,
    pass_through_content,
)
from enhance_articles.models import (
    Article,
    Citation,
    EnhancedContent,
    EnhancementOutcome,
    EnhancementStage,
)
from scrape_competitors.models import ExtractedSource
from scrape_competitors.scrape_competitors import MIN_SOURCE_LENGTH, TextFetcher, scrape_competitors
from search_competitors.models import SearchResult

logger = logging.getLogger(__name__)

RESULTS_PER_ARTICLE = 2


class ArticleStore(Protocol):
    def list_unenhanced(self) -> list[Article]: ...

    def create(self, article: Article) -> Article: ...

    def health_check(self) -> bool: ...


class Searcher(Protocol):
    def search(self, topic: str, desired_count: int = 3, exclude_hosts=()) -> list[SearchResult]: ...


class Synthesizer(Protocol):
    def synthesize(
        self, title: str, content: str, sources: list[ExtractedSource]
    ) -> Optional[EnhancedContent]: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def assemble_article(
    original: Article,
    content: EnhancedContent,
    citations: list[Citation],
    published_at: datetime,
) -> Article:
    """Build the enhanced Article; references go after the synthesized body."""
    body = content.content + build_references_html(citations)
    return Article(
        title=content.title,
        content=body,
        excerpt=content.excerpt,
        author=original.author,
        published_at=published_at,
        source_url=enhanced_source_url(original.source_url, published_at),
        tags=enhanced_tags(original.tags),
        is_enhanced=True,
        original_article_id=original.id,
        cited_references=citations,
        enhancement_details=list(content.enhancement_details),
    )


class ArticleEnhancer:
    """Runs the per-article state machine.

    SEARCH -> EXTRACT -> SYNTHESIZE -> ASSEMBLE -> PUBLISH -> DONE, or FAILED
    on the first exception. Never retries.
    """

    def __init__(
        self,
        store: ArticleStore,
        searcher: Searcher,
        scraper: TextFetcher,
        synthesizer: Synthesizer,
        search_enabled: bool = True,
        llm_enabled: bool = True,
        results_per_article: int = RESULTS_PER_ARTICLE,
        min_source_length: int = MIN_SOURCE_LENGTH,
        search_pacer: Optional[Pacer] = None,
        scrape_pacer: Optional[Pacer] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.searcher = searcher
        self.scraper = scraper
        self.synthesizer = synthesizer
        self.search_enabled = search_enabled
        self.llm_enabled = llm_enabled
        self.results_per_article = results_per_article
        self.min_source_length = min_source_length
        self.search_pacer = search_pacer
        self.scrape_pacer = scrape_pacer
        self.clock = clock

    def search(self, article: Article) -> list[SearchResult]:
        if not self.search_enabled:
            logger.info("Search disabled, using original content only")
            return []

        if self.search_pacer is not None:
            self.search_pacer.wait()
        try:
            origin_host = get_host(article.source_url)
            results = self.searcher.search(
                article.title,
                self.results_per_article,
                exclude_hosts=[origin_host] if origin_host else [],
            )
        finally:
            if self.search_pacer is not None:
                self.search_pacer.mark()

        if not results:
            logger.warning("No search results found. Using original content only.")
        return results

    def extract(self, results: list[SearchResult]) -> list[ExtractedSource]:
        return scrape_competitors(
            results,
            self.scraper,
            pacer=self.scrape_pacer,
            min_length=self.min_source_length,
        )

    def synthesize(self, article: Article, sources: list[ExtractedSource]) -> EnhancedContent:
        if self.llm_enabled and sources:
            enhanced = self.synthesizer.synthesize(article.title, article.content, sources)
            if enhanced is not None:
                return enhanced
        return pass_through_content(article)

    def enhance(self, article: Article) -> EnhancementOutcome:
        """Enhance one article and publish it. Failures are returned, not raised."""
        logger.info("Processing: %s", article.title[:50])

        stage = EnhancementStage.SEARCH
        sources: list[ExtractedSource] = []
        try:
            results = self.search(article)

            stage = EnhancementStage.EXTRACT
            sources = self.extract(results)

            stage = EnhancementStage.SYNTHESIZE
            content = self.synthesize(article, sources)

            stage = EnhancementStage.ASSEMBLE
            # Only sources the synthesizer actually saw are cited.
            used = sources if (self.llm_enabled and sources) else []
            enhanced = assemble_article(article, content, build_citations(used), self.clock())

            stage = EnhancementStage.PUBLISH
            created = self.store.create(enhanced)
        except Exception as e:
            logger.error("Failed to enhance article %s at %s: %s", article.id, stage.value, e)
            return EnhancementOutcome(
                article_id=article.id,
                title=article.title,
                stage=EnhancementStage.FAILED,
                failed_at=stage,
                error=str(e) or type(e).__name__,
                sources_used=len(sources),
            )

        logger.info("Enhanced article published: %s", created.id)
        return EnhancementOutcome(
            article_id=article.id,
            title=article.title,
            stage=EnhancementStage.DONE,
            enhanced_article=created,
            sources_used=len(used),
        )

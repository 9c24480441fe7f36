"""Enhance every original article in the backlog, one at a time."""

import logging
from typing import Optional

from common.pacing import Pacer
from enhance_articles.article_api import ArticleApiError
from enhance_articles.enhance_article import ArticleEnhancer, ArticleStore
from enhance_articles.models import BatchSummary

logger = logging.getLogger(__name__)


def log_summary(summary: BatchSummary) -> None:
    logger.info("=" * 60)
    logger.info("ENHANCEMENT COMPLETE")
    logger.info("Articles processed:     %3d", summary.processed)
    logger.info("Successfully enhanced:  %3d", summary.succeeded)
    logger.info("Failed:                 %3d", summary.failed)
    logger.info("=" * 60)


def run_batch(
    store: ArticleStore,
    enhancer: ArticleEnhancer,
    pacer: Optional[Pacer] = None,
) -> BatchSummary:
    """
    Enhance all non-enhanced articles from the store.

    One article failing never stops the batch; it is counted and the
    runner moves on.

    Raises:
        ArticleApiError: If the store is unreachable or the backlog
            cannot be fetched.
    """
    logger.info("Checking article API connection...")
    if not store.health_check():
        raise ArticleApiError("Article API is not reachable")

    articles = store.list_unenhanced()
    if not articles:
        logger.warning("No original articles found. Nothing to enhance.")
        return BatchSummary()

    logger.info("Found %d original articles to enhance", len(articles))

    summary = BatchSummary()
    for i, article in enumerate(articles):
        if pacer is not None and i > 0:
            waited = pacer.wait()
            if waited:
                logger.info("Waited %.1fs before next article", waited)

        logger.info("[%d/%d] Processing...", i + 1, len(articles))
        try:
            outcome = enhancer.enhance(article)
        finally:
            if pacer is not None:
                pacer.mark()

        summary.outcomes.append(outcome)
        summary.processed += 1
        if outcome.success:
            summary.succeeded += 1
        else:
            summary.failed += 1

    log_summary(summary)
    return summary

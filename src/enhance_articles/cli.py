"""CLI for enhancing original articles with competitor content."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from common.cli_helpers import save_jsonl_local, setup_logging
from common.config import EnhanceConfig, load_config
from common.pacing import Pacer
from common.serialization import serialize_dataclass
from enhance_articles.article_api import ArticleApiClient, ArticleApiError
from enhance_articles.enhance_article import ArticleEnhancer
from enhance_articles.helpers import parse_enhance_articles_args
from enhance_articles.run_batch import run_batch
from enhance_articles.synthesize import ArticleSynthesizer
from scrape_competitors.scrape_article_text import ArticleScraper
from search_competitors.search_competitors import GoogleSearchClient

logger = logging.getLogger(__name__)


def _apply_args(config: EnhanceConfig, args) -> EnhanceConfig:
    if args.api_url:
        config.api.base_url = args.api_url
    if args.model:
        config.llm.model = args.model
    if args.search is not None:
        config.search.enabled = args.search
    if args.llm is not None:
        config.llm.enabled = args.llm
    if args.delay_between_articles is not None:
        config.pacing.delay_between_articles = args.delay_between_articles
    return config


def build_enhancer(config: EnhanceConfig, store: ArticleApiClient) -> ArticleEnhancer:
    """Construct the per-article pipeline from config."""
    return ArticleEnhancer(
        store=store,
        searcher=GoogleSearchClient.from_config(config.search),
        scraper=ArticleScraper.from_config(config.scrape),
        synthesizer=ArticleSynthesizer.from_config(config.llm),
        search_enabled=config.search.enabled,
        llm_enabled=config.llm.enabled,
        results_per_article=config.search.results_per_article,
        min_source_length=config.scrape.min_source_length,
        search_pacer=Pacer(config.pacing.delay_between_searches, name="search"),
        scrape_pacer=Pacer(config.pacing.delay_between_scrapes, name="scrape"),
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_enhance_articles_args(argv)

    load_dotenv()
    setup_logging(args.log_level)

    config = _apply_args(load_config(args.config), args)

    store = ArticleApiClient(
        config.api.base_url,
        timeout=config.api.timeout,
        list_limit=config.api.list_limit,
    )
    enhancer = build_enhancer(config, store)
    article_pacer = Pacer(config.pacing.delay_between_articles, name="articles")

    try:
        summary = run_batch(store, enhancer, pacer=article_pacer)
    except ArticleApiError as e:
        logger.error("%s (%s)", e, config.api.base_url)
        return 1

    if args.load_local and summary.outcomes:
        now = datetime.now(timezone.utc)
        records = [
            {**serialize_dataclass(outcome), "success": outcome.success}
            for outcome in summary.outcomes
        ]
        filepath = save_jsonl_local(records, "enhancement_outcomes", now)
        logger.info("Saved %d outcomes to %s", len(records), filepath)

    return 0


if __name__ == "__main__":
    sys.exit(main())

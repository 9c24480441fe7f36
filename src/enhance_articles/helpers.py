"""Helper functions for enhance_articles."""

from __future__ import annotations

import argparse
import html
from datetime import datetime

from common.datetime import to_epoch_millis
from enhance_articles.models import Article, Citation, EnhancedContent
from enhance_articles.parse_response import ENHANCED_SUFFIX, EXCERPT_LENGTH
from scrape_competitors.models import ExtractedSource

ENHANCED_TAG = "enhanced"


def build_citations(sources: list[ExtractedSource]) -> list[Citation]:
    return [Citation(title=source.title, url=source.url) for source in sources]


def build_references_html(citations: list[Citation]) -> str:
    """Render the References block appended after enhanced content."""
    if not citations:
        return ""
    items = "\n".join(
        f'  <li><a href="{html.escape(c.url, quote=True)}" target="_blank" rel="noopener">'
        f"{html.escape(c.title or c.url)}</a></li>"
        for c in citations
    )
    return (
        "\n<hr/>\n"
        "<h2>References</h2>\n"
        "<p>This article was enhanced using insights from the following sources:</p>\n"
        "<ul>\n"
        f"{items}\n"
        "</ul>\n"
    )


def pass_through_content(article: Article) -> EnhancedContent:
    """Content used when there is nothing to synthesize from."""
    return EnhancedContent(
        title=article.title + ENHANCED_SUFFIX,
        content=article.content,
        excerpt=article.excerpt or article.content[:EXCERPT_LENGTH],
        enhancement_details=[],
    )


def enhanced_source_url(source_url: str, published_at: datetime) -> str:
    """Unique source URL for an enhanced variant of ``source_url``."""
    return f"{source_url}#enhanced-{to_epoch_millis(published_at)}"


def enhanced_tags(tags: list[str]) -> list[str]:
    result = list(tags)
    if ENHANCED_TAG not in result:
        result.append(ENHANCED_TAG)
    return result


def parse_enhance_articles_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for enhance_articles."""

    parser = argparse.ArgumentParser(
        description="Enhance original articles using competitor content and an LLM.",
    )
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--api-url", default=None, help="Article API base URL")
    parser.add_argument("--model", default=None, help="OpenAI model to use")
    parser.add_argument(
        "--search",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Search for competitor articles (default: from config)",
    )
    parser.add_argument(
        "--llm",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rewrite articles with the LLM (default: from config)",
    )
    parser.add_argument(
        "--delay-between-articles",
        type=float,
        default=None,
        help="Seconds to wait between articles",
    )
    parser.add_argument("--load-local", action="store_true", help="Save outcomes to a local file")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)

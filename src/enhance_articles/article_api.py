"""HTTP client for the article API (the document store)."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

import requests

from common.datetime import parse_datetime
from common.serialization import to_camel_case
from common.utils import get_value
from enhance_articles.models import Article, Citation, EnhancementDetail

logger = logging.getLogger(__name__)


class ArticleApiError(Exception):
    """Article API request failed or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ArticleConflictError(ArticleApiError):
    """An article with the same source URL already exists."""


def citation_from_payload(raw: Any) -> Citation:
    return Citation(title=get_value(raw, "title") or "", url=get_value(raw, "url") or "")


def detail_from_payload(raw: Any) -> EnhancementDetail:
    return EnhancementDetail(
        type=get_value(raw, "type"),
        new_text=get_value(raw, "newText") or "",
        reason=get_value(raw, "reason") or "",
        original_text=get_value(raw, "originalText"),
    )


def details_from_payload(raw_details: Any) -> list[EnhancementDetail]:
    """Parse enhancement details, skipping entries that are not valid."""
    details = []
    for raw in raw_details or []:
        try:
            details.append(detail_from_payload(raw))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping invalid enhancement detail: %s", e)
    return details


def article_from_payload(raw: dict[str, Any]) -> Article:
    """Build an Article from the API's camelCase JSON."""
    created_at = raw.get("createdAt")
    updated_at = raw.get("updatedAt")
    citations = raw.get("citedReferences")
    details = raw.get("enhancementDetails")
    return Article(
        id=raw.get("id"),
        title=raw.get("title") or "",
        content=raw.get("content") or "",
        excerpt=raw.get("excerpt"),
        author=raw.get("author") or "",
        published_at=parse_datetime(raw.get("publishedAt")),
        source_url=raw.get("sourceUrl") or "",
        tags=list(raw.get("tags") or []),
        is_enhanced=bool(raw.get("isEnhanced", False)),
        original_article_id=raw.get("originalArticleId"),
        cited_references=[citation_from_payload(c) for c in citations] if citations is not None else None,
        enhancement_details=details_from_payload(details) if details is not None else None,
        created_at=parse_datetime(created_at) if created_at else None,
        updated_at=parse_datetime(updated_at) if updated_at else None,
    )


def article_to_payload(article: Article) -> dict[str, Any]:
    """Build the create-article request body. Store-assigned fields are omitted."""
    payload: dict[str, Any] = {
        "title": article.title,
        "content": article.content,
        "excerpt": article.excerpt,
        "author": article.author,
        "publishedAt": article.published_at.isoformat(),
        "sourceUrl": article.source_url,
        "tags": list(article.tags),
        "isEnhanced": article.is_enhanced,
    }
    if article.original_article_id is not None:
        payload["originalArticleId"] = article.original_article_id
    if article.cited_references is not None:
        payload["citedReferences"] = [
            {"title": c.title, "url": c.url} for c in article.cited_references
        ]
    if article.enhancement_details is not None:
        details = []
        for d in article.enhancement_details:
            item = {to_camel_case(k): v for k, v in vars(d).items() if v is not None}
            details.append(item)
        payload["enhancementDetails"] = details
    if payload["excerpt"] is None:
        del payload["excerpt"]
    return payload


class ArticleApiClient:
    """Client for listing and creating articles over the REST API."""

    def __init__(self, base_url: str, timeout: float = 30.0, list_limit: int = 100) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.list_limit = list_limit

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def health_check(self) -> bool:
        """Return True if the API answers a minimal list request."""
        try:
            response = requests.get(
                self._url("articles"),
                params={"limit": 1},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return True
        except Exception as e:
            logger.warning("Article API health check failed for %s: %s", self.base_url, e)
            return False

    def list_unenhanced(self) -> list[Article]:
        """Fetch all original (non-enhanced) articles in one request."""
        try:
            response = requests.get(
                self._url("articles"),
                params={"isEnhanced": "false", "limit": self.list_limit},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except Exception as e:
            raise ArticleApiError(f"Failed to fetch articles: {e}") from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            raise ArticleApiError("Article list response has no 'data' array")

        articles = []
        for raw in data:
            try:
                articles.append(article_from_payload(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed article %s: %s", get_value(raw, "id"), e)
        return articles

    def create(self, article: Article) -> Article:
        """Create an article and return it with the store-assigned id.

        Raises:
            ArticleConflictError: If the source URL is already taken (HTTP 409).
            ArticleApiError: On any other failure before the article is stored.
        """
        try:
            response = requests.post(
                self._url("articles"),
                json=article_to_payload(article),
                timeout=self.timeout,
            )
        except Exception as e:
            raise ArticleApiError(f"Failed to create article: {e}") from e

        if response.status_code == 409:
            raise ArticleConflictError(
                f"Article with URL {article.source_url} already exists",
                status_code=409,
            )
        if response.status_code >= 400:
            raise ArticleApiError(
                f"Failed to create article: HTTP {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        # Stored from here on; a malformed echo only degrades the returned article.
        try:
            body = response.json()
        except ValueError as e:
            logger.warning("Create-article response is not JSON: %s", e)
            return article

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.warning("Create-article response has no 'data' object")
            return article

        try:
            return article_from_payload(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Malformed created article %s: %s", data.get("id"), e)
            return replace(article, id=data.get("id"))

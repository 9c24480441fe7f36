"""Recover structured content from raw model output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from enhance_articles.models import (
    DETAIL_TYPES,
    EnhancedContent,
    EnhancementDetail,
    LLMResponse,
    ParsedResponse,
    UnparsedResponse,
)

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 200
ENHANCED_SUFFIX = " (Enhanced)"

_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fences(raw: str) -> str:
    """Remove an enclosing ``` / ```json fence, if present."""
    text = raw.strip()
    if text.startswith("```"):
        text = _OPENING_FENCE.sub("", text, count=1)
        text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_llm_response(raw: str) -> LLMResponse:
    """Parse model output into ParsedResponse (a JSON object) or UnparsedResponse."""
    text = strip_code_fences(raw or "")
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return UnparsedResponse(raw_text=raw)

    if not isinstance(data, dict):
        return UnparsedResponse(raw_text=raw)
    return ParsedResponse(fields=data)


def _string_field(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    return value if isinstance(value, str) else ""


def parse_enhancement_details(raw_details: Any) -> list[EnhancementDetail]:
    """Validate the model's enhancementDetails array, skipping bad entries."""
    if not isinstance(raw_details, list):
        return []

    details = []
    for i, item in enumerate(raw_details):
        if not isinstance(item, dict):
            logger.warning("Skipping enhancement detail %d: not an object", i)
            continue
        detail_type = item.get("type")
        new_text = item.get("newText")
        if detail_type not in DETAIL_TYPES or not isinstance(new_text, str) or not new_text:
            logger.warning("Skipping enhancement detail %d: bad type or missing newText", i)
            continue
        original_text = item.get("originalText")
        details.append(
            EnhancementDetail(
                type=detail_type,
                new_text=new_text,
                reason=item.get("reason") if isinstance(item.get("reason"), str) else "",
                original_text=original_text if isinstance(original_text, str) else None,
            )
        )
    return details


def to_enhanced_content(response: LLMResponse, original_title: str, original_content: str) -> EnhancedContent:
    """Turn a parsed or unparsed response into publishable content.

    Parsed: missing fields fall back to the original article.
    Unparsed: the raw text becomes the content under a derived title.
    """
    if isinstance(response, ParsedResponse):
        fields = response.fields
        return EnhancedContent(
            title=_string_field(fields, "title") or original_title,
            content=_string_field(fields, "content") or original_content,
            excerpt=_string_field(fields, "excerpt") or original_content[:EXCERPT_LENGTH],
            enhancement_details=parse_enhancement_details(fields.get("enhancementDetails")),
        )

    logger.warning("Failed to parse model response as JSON, using text directly")
    raw = response.raw_text
    return EnhancedContent(
        title=original_title + ENHANCED_SUFFIX,
        content=raw,
        excerpt=raw[:EXCERPT_LENGTH],
        enhancement_details=[],
    )

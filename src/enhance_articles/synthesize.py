"""Generate an enhanced article from the original and competitor sources."""

from __future__ import annotations

import logging
from typing import Any, Optional

from openai import OpenAI

from common.config import LLMConfig, is_configured_key
from enhance_articles.instructions import build_enhancement_prompt
from enhance_articles.models import EnhancedContent
from enhance_articles.parse_response import parse_llm_response, to_enhanced_content
from scrape_competitors.models import ExtractedSource

logger = logging.getLogger(__name__)


class SynthesisError(Exception):
    """The generative backend failed for one article."""


class ArticleSynthesizer:
    """Rewrites an article with an OpenAI chat model, one call per article."""

    def __init__(
        self,
        client: Optional[Any],
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        top_p: float = 0.8,
        max_tokens: int = 8192,
        timeout: float = 120.0,
        max_reference_chars: int = 2000,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_reference_chars = max_reference_chars

    @classmethod
    def from_config(cls, config: LLMConfig) -> "ArticleSynthesizer":
        client = None
        if is_configured_key(config.api_key):
            client = OpenAI(api_key=config.api_key)
        else:
            logger.warning("OPENAI_API_KEY not set. LLM enhancement will be skipped.")
        return cls(
            client=client,
            model=config.model,
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            max_reference_chars=config.max_reference_chars,
        )

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def build_prompt(self, title: str, content: str, sources: list[ExtractedSource]) -> str:
        references = [(s.title, s.url, s.content) for s in sources]
        return build_enhancement_prompt(
            title,
            content,
            references,
            max_reference_chars=self.max_reference_chars,
        )

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the raw response text.

        Raises:
            SynthesisError: On any backend failure or an empty response.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                top_p=self.top_p,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
            )
            text = response.choices[0].message.content or ""
        except Exception as e:
            raise SynthesisError(f"LLM enhancement failed: {e}") from e

        if not text.strip():
            raise SynthesisError("LLM returned an empty response")
        return text

    def synthesize(
        self,
        title: str,
        content: str,
        sources: list[ExtractedSource],
    ) -> Optional[EnhancedContent]:
        """Produce enhanced content, or None when no model is configured.

        Schema violations in the response are recovered locally; backend
        errors raise SynthesisError.
        """
        if not self.is_available:
            logger.warning("LLM not initialized. Returning original content.")
            return None
        if not sources:
            logger.warning("Synthesizing without reference articles")

        logger.info("Enhancing article with %s (%d sources)", self.model, len(sources))
        prompt = self.build_prompt(title, content, sources)
        raw = self.generate(prompt)

        enhanced = to_enhanced_content(parse_llm_response(raw), title, content)
        logger.info(
            "Article enhanced successfully (%d enhancement details)",
            len(enhanced.enhancement_details),
        )
        return enhanced

"""Tests for enhance_articles.synthesize module."""

import json
from unittest.mock import Mock, patch

import pytest

from common.config import LLMConfig
from enhance_articles.instructions import build_enhancement_prompt
from enhance_articles.synthesize import ArticleSynthesizer, SynthesisError
from scrape_competitors.models import ExtractedSource

TITLE = "Intro to Chatbots"
CONTENT = "<p>Chatbots are programs that talk.</p>"


def _completion(text) -> Mock:
    return Mock(choices=[Mock(message=Mock(content=text))])


def _client(text=None, error: Exception | None = None) -> Mock:
    client = Mock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        client.chat.completions.create.return_value = _completion(text)
    return client


def _source(n: int, length: int = 1200) -> ExtractedSource:
    return ExtractedSource(title=f"Competitor {n}", url=f"https://c{n}.com/post", content=str(n) * length)


class TestBuildEnhancementPrompt:
    def test_includes_original_and_capped_references(self) -> None:
        prompt = build_enhancement_prompt(
            TITLE,
            CONTENT,
            [("Competitor 1", "https://c1.com/post", "a" * 3000)],
            max_reference_chars=2000,
        )
        assert f"Title: {TITLE}" in prompt
        assert CONTENT in prompt
        assert 'Reference Article 1: "Competitor 1"' in prompt
        assert "URL: https://c1.com/post" in prompt
        assert "a" * 2000 in prompt
        assert "a" * 2001 not in prompt
        assert '"enhancementDetails"' in prompt
        assert "at least 3-5" in prompt

    def test_multiple_references_are_separated_and_numbered(self) -> None:
        prompt = build_enhancement_prompt(
            TITLE,
            CONTENT,
            [("One", "https://1.com", "x"), ("Two", "https://2.com", "y")],
        )
        assert 'Reference Article 1: "One"' in prompt
        assert 'Reference Article 2: "Two"' in prompt
        assert "\n---\n" in prompt

    def test_no_references(self) -> None:
        prompt = build_enhancement_prompt(TITLE, CONTENT, [])
        assert "No reference articles are available" in prompt


class TestArticleSynthesizer:
    def test_parses_json_response(self) -> None:
        payload = {
            "title": "Chatbots Explained",
            "content": "<h2>Intro</h2><p>More detail.</p>",
            "excerpt": "A short summary.",
            "enhancementDetails": [
                {"type": "addition", "newText": f"<p>Detail {i}</p>", "reason": "More depth"}
                for i in range(4)
            ],
        }
        client = _client("```json\n" + json.dumps(payload) + "\n```")
        synthesizer = ArticleSynthesizer(client, model="gpt-test", temperature=0.5, max_tokens=100)

        result = synthesizer.synthesize(TITLE, CONTENT, [_source(1)])

        assert result.title == "Chatbots Explained"
        assert result.content == payload["content"]
        assert result.excerpt == "A short summary."
        assert len(result.enhancement_details) == 4

        kwargs = client.chat.completions.create.call_args[1]
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.5
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][0]["role"] == "user"
        assert "Competitor 1" in kwargs["messages"][0]["content"]
        client.chat.completions.create.assert_called_once()

    def test_unparsable_response_falls_back_to_raw_text(self) -> None:
        raw = "I rewrote the article: <p>Chatbots are great.</p>"
        synthesizer = ArticleSynthesizer(_client(raw))

        result = synthesizer.synthesize(TITLE, CONTENT, [_source(1)])

        assert result.title == "Intro to Chatbots (Enhanced)"
        assert result.content == raw
        assert result.excerpt == raw[:200]
        assert result.enhancement_details == []

    def test_backend_error_raises_synthesis_error(self) -> None:
        synthesizer = ArticleSynthesizer(_client(error=RuntimeError("quota exceeded")))

        with pytest.raises(SynthesisError, match="quota exceeded") as excinfo:
            synthesizer.synthesize(TITLE, CONTENT, [_source(1)])
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_response_raises(self, text) -> None:
        synthesizer = ArticleSynthesizer(_client(text))
        with pytest.raises(SynthesisError):
            synthesizer.synthesize(TITLE, CONTENT, [_source(1)])

    def test_unavailable_returns_none(self) -> None:
        synthesizer = ArticleSynthesizer(None)
        assert synthesizer.is_available is False
        assert synthesizer.synthesize(TITLE, CONTENT, [_source(1)]) is None

    def test_empty_sources_does_not_crash(self) -> None:
        client = _client(json.dumps({"title": "T2", "content": "<p>c</p>", "excerpt": "e"}))
        result = ArticleSynthesizer(client).synthesize(TITLE, CONTENT, [])
        assert result.title == "T2"


class TestFromConfig:
    @patch("enhance_articles.synthesize.OpenAI")
    def test_builds_client_when_key_set(self, mock_openai) -> None:
        synthesizer = ArticleSynthesizer.from_config(LLMConfig(api_key="sk-test", model="gpt-x"))
        mock_openai.assert_called_once_with(api_key="sk-test")
        assert synthesizer.is_available
        assert synthesizer.model == "gpt-x"

    @patch("enhance_articles.synthesize.OpenAI")
    def test_no_client_without_key(self, mock_openai) -> None:
        synthesizer = ArticleSynthesizer.from_config(LLMConfig(api_key="your_openai_api_key_here"))
        mock_openai.assert_not_called()
        assert not synthesizer.is_available

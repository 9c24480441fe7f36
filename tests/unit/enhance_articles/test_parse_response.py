"""Tests for enhance_articles.parse_response module."""

import json

import pytest

from enhance_articles.models import EnhancementDetail, ParsedResponse, UnparsedResponse
from enhance_articles.parse_response import (
    parse_enhancement_details,
    parse_llm_response,
    strip_code_fences,
    to_enhanced_content,
)

ORIGINAL_TITLE = "Intro to Chatbots"
ORIGINAL_CONTENT = "<p>" + "Chatbots answer questions. " * 20 + "</p>"

PAYLOAD = {
    "title": "A Complete Introduction to Chatbots",
    "content": "<h2>What is a chatbot?</h2><p>A chatbot is...</p>",
    "excerpt": "Everything you need to know about chatbots.",
    "enhancementDetails": [
        {"type": "addition", "newText": "<h2>What is a chatbot?</h2>", "reason": "Added definition"},
        {
            "type": "modification",
            "originalText": "Chatbots answer questions.",
            "newText": "<p>A chatbot is...</p>",
            "reason": "Clarified wording",
        },
    ],
}


class TestStripCodeFences:
    @pytest.mark.parametrize(
        "raw",
        [
            '{"a": 1}',
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```JSON\n{"a": 1}```  ',
        ],
    )
    def test_removes_enclosing_fence(self, raw: str) -> None:
        assert strip_code_fences(raw) == '{"a": 1}'

    def test_inner_backticks_untouched(self) -> None:
        assert strip_code_fences('{"code": "use `x`"}') == '{"code": "use `x`"}'


class TestParseLlmResponse:
    @pytest.mark.parametrize("wrap", ["{}", "```json\n{}\n```", "```\n{}\n```"])
    def test_recovers_exact_fields(self, wrap: str) -> None:
        raw = wrap.replace("{}", json.dumps(PAYLOAD))
        result = parse_llm_response(raw)
        assert isinstance(result, ParsedResponse)
        assert result.fields["title"] == PAYLOAD["title"]
        assert result.fields["content"] == PAYLOAD["content"]
        assert result.fields["excerpt"] == PAYLOAD["excerpt"]

    @pytest.mark.parametrize("raw", ["Here is your article: <p>hi</p>", "[1, 2, 3]", '"just a string"', ""])
    def test_non_object_is_unparsed(self, raw: str) -> None:
        result = parse_llm_response(raw)
        assert isinstance(result, UnparsedResponse)
        assert result.raw_text == raw


class TestParseEnhancementDetails:
    def test_valid_details(self) -> None:
        details = parse_enhancement_details(PAYLOAD["enhancementDetails"])
        assert details == [
            EnhancementDetail(type="addition", new_text="<h2>What is a chatbot?</h2>", reason="Added definition"),
            EnhancementDetail(
                type="modification",
                new_text="<p>A chatbot is...</p>",
                reason="Clarified wording",
                original_text="Chatbots answer questions.",
            ),
        ]

    def test_skips_invalid_entries(self) -> None:
        raw = [
            "not an object",
            {"type": "deletion", "newText": "x", "reason": "r"},
            {"type": "addition", "reason": "no text"},
            {"type": "addition", "newText": "kept"},
        ]
        details = parse_enhancement_details(raw)
        assert len(details) == 1
        assert details[0].new_text == "kept"
        assert details[0].reason == ""

    def test_non_list_returns_empty(self) -> None:
        assert parse_enhancement_details(None) == []
        assert parse_enhancement_details({"type": "addition"}) == []


class TestToEnhancedContent:
    def test_parsed_response(self) -> None:
        content = to_enhanced_content(ParsedResponse(fields=PAYLOAD), ORIGINAL_TITLE, ORIGINAL_CONTENT)
        assert content.title == PAYLOAD["title"]
        assert content.content == PAYLOAD["content"]
        assert content.excerpt == PAYLOAD["excerpt"]
        assert len(content.enhancement_details) == 2

    def test_parsed_missing_fields_fall_back_to_original(self) -> None:
        content = to_enhanced_content(ParsedResponse(fields={"title": 42}), ORIGINAL_TITLE, ORIGINAL_CONTENT)
        assert content.title == ORIGINAL_TITLE
        assert content.content == ORIGINAL_CONTENT
        assert content.excerpt == ORIGINAL_CONTENT[:200]
        assert content.enhancement_details == []

    def test_unparsed_response_uses_raw_text(self) -> None:
        raw = "Sorry, here is the article in plain text. " * 10
        content = to_enhanced_content(UnparsedResponse(raw_text=raw), ORIGINAL_TITLE, ORIGINAL_CONTENT)
        assert content.title == "Intro to Chatbots (Enhanced)"
        assert content.content == raw
        assert content.excerpt == raw[:200]
        assert content.enhancement_details == []

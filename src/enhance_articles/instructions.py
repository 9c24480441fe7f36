ENHANCE_ARTICLE_INSTRUCTIONS = """
You are an expert content writer and SEO specialist. Your task is to enhance an existing article to make it more comprehensive, engaging, and competitive with top-ranking articles on the same topic.

## Instructions:
1. Analyze the original article and the reference articles from competitors
2. Improve the original article by:
   - Making the content more comprehensive and detailed
   - Improving the structure and readability
   - Adding relevant information from competitors (without copying)
   - Making the tone more engaging
   - Ensuring good SEO practices (headings, keywords)
3. Keep the original author's voice and perspective
4. Do NOT copy content directly from competitors
5. The enhanced article should be clearly better than the original

## CRITICAL REQUIREMENT:
You must provide a detailed breakdown of the enhancements you made. Identify specific blocks of text you added or modified and explain WHY you made those changes (e.g., "Added latest statistics," "Clarified technical term," "Included missing step").
""".strip()

OUTPUT_FORMAT_INSTRUCTIONS = """
## Output Format:
Respond with a JSON object containing:
{
  "title": "Enhanced title (keep similar to original or improve)",
  "content": "The full enhanced article content in HTML format with proper headings (h2, h3), paragraphs, and lists",
  "excerpt": "A compelling 2-3 sentence summary of the article",
  "enhancementDetails": [
    {
      "type": "addition" | "modification",
      "originalText": "For modifications only: the original passage that was changed",
      "newText": "The actual text you added or the specific paragraph you modified (HTML fragment)",
      "reason": "Clear explanation of why this was added/changed"
    }
  ]
}

Important:
- Return ONLY the JSON object, no additional text or markdown code blocks.
- Ensure 'enhancementDetails' contains at least 3-5 key significant changes.
- The 'newText' in details should match sections in the full 'content'.
""".strip()

NO_REFERENCES_NOTE = "(No reference articles are available. Improve the article on its own merits.)"


def format_reference(index: int, title: str, url: str, content: str, max_chars: int) -> str:
    return (
        f'### Reference Article {index}: "{title}"\n'
        f"URL: {url}\n\n"
        f"{content[:max_chars]}\n"
    )


def build_enhancement_prompt(
    title: str,
    content: str,
    references: list[tuple[str, str, str]],
    max_reference_chars: int = 2000,
) -> str:
    """Build the single enhancement prompt.

    Args:
        title: Original article title
        content: Original article body (HTML)
        references: (title, url, text) for each competitor source, in order
        max_reference_chars: Per-source cap on embedded reference text
    """
    if references:
        reference_text = "\n---\n".join(
            format_reference(i, ref_title, url, text, max_reference_chars)
            for i, (ref_title, url, text) in enumerate(references, 1)
        )
    else:
        reference_text = NO_REFERENCES_NOTE

    return "\n\n".join([
        ENHANCE_ARTICLE_INSTRUCTIONS,
        f"## Original Article:\nTitle: {title}\n\n{content}",
        f"## Reference Articles (Top Ranking Competitors):\n{reference_text}",
        OUTPUT_FORMAT_INSTRUCTIONS,
    ])

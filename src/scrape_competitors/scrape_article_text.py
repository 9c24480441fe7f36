"""Fetch a competitor page and reduce it to clean article text."""

import logging
import random
import re
from typing import Optional, Union

import requests
from lxml import html as lxml_html
from readability import Document

from common.config import ScrapeConfig

logger = logging.getLogger(__name__)

USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14.2; rv:121.0) Gecko/20100101 Firefox/121.0",
]

ACCEPT_HEADER = "text/html,application/xhtml+xml"

BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "aside"]
BOILERPLATE_CLASSES = ["sidebar", "comments", "advertisement", "related-posts"]

ELLIPSIS = "..."

DEFAULT_ENCODING = "utf-8"

HEADER_CHARSET_RE = re.compile(r"""charset=['"]?([\w-]+)""", re.IGNORECASE)
DECLARED_CHARSET_RE = re.compile(
    rb"""<meta[^>]+charset=['"]?\s*([\w-]+)|<\?xml[^>]+encoding=['"]([\w-]+)""",
    re.IGNORECASE,
)
XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)


def _class_xpath(name: str) -> str:
    return f"//*[contains(concat(' ', normalize-space(@class), ' '), ' {name} ')]"


# Tried in order; the first one with enough text wins.
CONTENT_SELECTORS = [
    ("article", "//article"),
    ('[role="main"]', "//*[@role='main']"),
    (".post-content", _class_xpath("post-content")),
    (".entry-content", _class_xpath("entry-content")),
    (".article-content", _class_xpath("article-content")),
    (".blog-content", _class_xpath("blog-content")),
    ("main", "//main"),
    (".content", _class_xpath("content")),
]


def random_user_agent() -> str:
    return random.choice(USER_AGENTS)


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces."""
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def strip_boilerplate(tree) -> None:
    """Remove non-content elements from a parsed document in place."""
    xpaths = [f"//{tag}" for tag in BOILERPLATE_TAGS]
    xpaths += [_class_xpath(name) for name in BOILERPLATE_CLASSES]
    for xpath in xpaths:
        for element in tree.xpath(xpath):
            if element.getparent() is not None:
                element.drop_tree()


def _selector_text(tree, xpath: str) -> str:
    elements = tree.xpath(xpath)
    return "\n".join(el.text_content() for el in elements).strip()


def _paragraph_text(tree) -> str:
    paragraphs = (p.text_content().strip() for p in tree.xpath("//p"))
    return "\n\n".join(p for p in paragraphs if p)


def _readability_text(html: str) -> str:
    summary_html = Document(html).summary()
    text = lxml_html.fromstring(summary_html).text_content()
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines)


def header_charset(content_type: str) -> Optional[str]:
    match = HEADER_CHARSET_RE.search(content_type or "")
    return match.group(1).lower() if match else None


def declared_charset(raw: bytes) -> Optional[str]:
    """Charset named by a <meta> tag or XML declaration near the top of the page."""
    match = DECLARED_CHARSET_RE.search(raw[:2048])
    if not match:
        return None
    return (match.group(1) or match.group(2)).decode("ascii").lower()


def decode_html(raw: bytes, charset: Optional[str] = None) -> str:
    """
    Decode a page body to text.

    Tries the HTTP header charset, then the charset declared in the page,
    then UTF-8. Undecodable bytes are replaced rather than dropping the page.
    """
    for encoding in (charset, declared_charset(raw), DEFAULT_ENCODING):
        if not encoding:
            continue
        try:
            return raw.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            logger.debug("Could not decode page as %s", encoding)
    return raw.decode(DEFAULT_ENCODING, errors="replace")


def extract_text(
    html: Union[str, bytes],
    min_candidate_length: int = 500,
    max_length: int = 5000,
) -> str:
    """
    Extract readable article text from an HTML page.

    Order:
    1. content-container selectors (first with > min_candidate_length chars)
    2. all paragraph text
    3. readability-lxml summary

    Result is whitespace-normalized and truncated to max_length.
    """
    if isinstance(html, bytes):
        html = decode_html(html)
    # lxml rejects str input that carries an encoding declaration
    html = XML_DECLARATION_RE.sub("", html, count=1)
    if not html.strip():
        return ""

    tree = lxml_html.document_fromstring(html)
    strip_boilerplate(tree)

    content = ""
    for selector, xpath in CONTENT_SELECTORS:
        candidate = _selector_text(tree, xpath)
        if len(candidate) > min_candidate_length:
            logger.debug("Matched content selector %s", selector)
            content = candidate
            break

    if not content:
        content = _paragraph_text(tree)

    if not content.strip():
        try:
            content = _readability_text(html)
        except Exception as e:
            logger.debug("readability failed: %s", e)
            content = ""

    return truncate(normalize_whitespace(content), max_length)


def fetch_html(url: str, timeout: float = 15.0) -> Optional[str]:
    """GET a page with a browser user agent and decode its body.

    Returns None for non-HTML responses.
    """
    response = requests.get(
        url,
        timeout=timeout,
        headers={
            "User-Agent": random_user_agent(),
            "Accept": ACCEPT_HEADER,
        },
    )
    response.raise_for_status()

    content_type = response.headers.get("Content-Type", "")
    if content_type and "html" not in content_type.lower():
        logger.warning("Skipping non-HTML response from %s (%s)", url, content_type)
        return None
    return decode_html(response.content, header_charset(content_type))


class ArticleScraper:
    """Fetches competitor pages and returns their cleaned text, or "" on failure."""

    def __init__(
        self,
        timeout: float = 15.0,
        min_candidate_length: int = 500,
        max_content_length: int = 5000,
    ) -> None:
        self.timeout = timeout
        self.min_candidate_length = min_candidate_length
        self.max_content_length = max_content_length

    @classmethod
    def from_config(cls, config: ScrapeConfig) -> "ArticleScraper":
        return cls(
            timeout=config.timeout,
            min_candidate_length=config.min_candidate_length,
            max_content_length=config.max_content_length,
        )

    def fetch_text(self, url: str) -> str:
        logger.info("Scraping: %s", url[:60])
        try:
            html = fetch_html(url, timeout=self.timeout)
            if html is None:
                return ""
            text = extract_text(
                html,
                min_candidate_length=self.min_candidate_length,
                max_length=self.max_content_length,
            )
        except Exception as e:
            logger.warning("Failed to scrape %s: %s", url, e)
            return ""

        logger.info("Scraped %d characters", len(text))
        return text

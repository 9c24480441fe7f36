"""Data models for scrape_competitors pipeline stage."""

from dataclasses import dataclass


@dataclass
class ExtractedSource:
    """Competitor article with cleaned text, kept only if it has enough content."""
    title: str
    url: str
    content: str

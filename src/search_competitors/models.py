"""Data models for search_competitors pipeline stage."""

from dataclasses import dataclass


@dataclass
class SearchResult:
    """Ranked web search hit for an article topic."""
    title: str
    url: str
    snippet: str

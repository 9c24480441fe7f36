"""Data models for enhance_articles pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

DETAIL_TYPES = ("addition", "modification")


@dataclass
class Citation:
    """Reference to a competitor source used during enhancement."""
    title: str
    url: str


@dataclass
class EnhancementDetail:
    """One change the model reports having made to the original article."""
    type: str
    new_text: str
    reason: str
    original_text: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in DETAIL_TYPES:
            raise ValueError(f"Unknown enhancement type: {self.type!r}")


@dataclass
class Article:
    """Article as stored by the article API.

    An enhanced article always points at its original; an original never does.
    """
    title: str
    content: str
    author: str
    published_at: datetime
    source_url: str
    excerpt: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    is_enhanced: bool = False
    original_article_id: Optional[str] = None
    cited_references: Optional[list[Citation]] = None
    enhancement_details: Optional[list[EnhancementDetail]] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.is_enhanced and self.original_article_id is None:
            raise ValueError("Enhanced article must reference its original article")
        if not self.is_enhanced and self.original_article_id is not None:
            raise ValueError("Original article must not reference a parent article")


@dataclass
class EnhancedContent:
    """Rewritten title/body/excerpt plus the model's change annotations."""
    title: str
    content: str
    excerpt: str
    enhancement_details: list[EnhancementDetail] = field(default_factory=list)


@dataclass
class ParsedResponse:
    """Model output that parsed into a JSON object."""
    fields: dict[str, Any]


@dataclass
class UnparsedResponse:
    """Model output that did not parse; kept verbatim."""
    raw_text: str


LLMResponse = Union[ParsedResponse, UnparsedResponse]


class EnhancementStage(str, Enum):
    SEARCH = "search"
    EXTRACT = "extract"
    SYNTHESIZE = "synthesize"
    ASSEMBLE = "assemble"
    PUBLISH = "publish"
    DONE = "done"
    FAILED = "failed"


@dataclass
class EnhancementOutcome:
    """Result of enhancing one article.

    ``stage`` is DONE or FAILED; ``failed_at`` names the stage that raised.
    """
    article_id: Optional[str]
    title: str
    stage: EnhancementStage
    enhanced_article: Optional[Article] = None
    failed_at: Optional[EnhancementStage] = None
    error: Optional[str] = None
    sources_used: int = 0

    @property
    def success(self) -> bool:
        return self.stage is EnhancementStage.DONE


@dataclass
class BatchSummary:
    """Counts for one batch run."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    outcomes: list[EnhancementOutcome] = field(default_factory=list)

from __future__ import annotations

"""Core data types for retrieval."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ContentSection:
    """Candidate section returned by the search backend."""
    content: str
    similarity: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchPolicy:
    """Threshold and count policy sent to the search backend."""
    similarity_threshold: float = 0.5
    match_count: int = 10
    min_content_length: int = 50


@dataclass(frozen=True)
class PreparedSearch:
    """Everything produced before the completion call."""
    query: str
    enhanced_query: str
    sections: list[ContentSection]
    context_text: str
    prompt: str

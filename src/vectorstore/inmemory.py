from __future__ import annotations

"""In-memory section store for local testing and small datasets."""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable

from src.rag.embeddings import EmbeddingProvider
from src.rag.types import ContentSection, SearchPolicy
from src.vectorstore.errors import SearchError


@dataclass
class InMemorySectionStore:
    """Simple in-memory section store with cosine similarity matching."""
    embedder: EmbeddingProvider
    contents: list[str] = field(default_factory=list)
    metadata: list[dict[str, Any]] = field(default_factory=list)
    vectors: list[list[float]] = field(default_factory=list)

    def add_sections(
        self,
        contents: Iterable[str],
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """Embed and store page sections."""
        added = 0
        for content in contents:
            self.contents.append(content)
            self.metadata.append(dict(metadata or {}))
            self.vectors.append(self.embedder.embed(content))
            added += 1
        return added

    def match_sections(self, vector: list[float], policy: SearchPolicy) -> list[ContentSection]:
        """Return sections above the similarity threshold, best first."""
        if len(vector) != self.embedder.dimension:
            raise SearchError(
                "Query vector dimension mismatch",
                data={"expected": self.embedder.dimension, "got": len(vector)},
            )
        scored: list[ContentSection] = []
        for content, metadata, stored in zip(self.contents, self.metadata, self.vectors):
            if len(content) < policy.min_content_length:
                continue
            similarity = self._cosine_similarity(vector, stored)
            if similarity <= policy.similarity_threshold:
                continue
            scored.append(ContentSection(content=content, similarity=similarity, metadata=metadata))
        scored.sort(key=lambda item: item.similarity, reverse=True)
        return scored[: policy.match_count]

    def _cosine_similarity(self, a: list[float], b: list[float]) -> float:
        """Compute cosine similarity between two vectors."""
        dot = sum(x * y for x, y in zip(a, b))
        norm_a = math.sqrt(sum(x * x for x in a))
        norm_b = math.sqrt(sum(y * y for y in b))
        if norm_a == 0.0 or norm_b == 0.0:
            return 0.0
        return dot / (norm_a * norm_b)

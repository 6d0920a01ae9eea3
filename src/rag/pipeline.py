from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Protocol

from src.rag.context import TokenCounter, assemble_context
from src.rag.embeddings import EmbeddingError, EmbeddingProvider
from src.rag.enhancer import EpisodeQueryEnhancer, QueryEnhancer
from src.rag.errors import ApplicationError, UserError
from src.rag.guardrails import NO_CONTENT_FOUND, require_context, validate_query
from src.rag.llm import Completer, LLMError
from src.rag.moderation import ModerationError, Moderator, NoopModerator
from src.rag.prompt import build_search_prompt
from src.rag.types import ContentSection, PreparedSearch, SearchPolicy
from src.vectorstore.errors import SearchError

logger = logging.getLogger(__name__)


class SectionStore(Protocol):
    """Protocol for similarity search backends."""
    def match_sections(self, vector: list[float], policy: SearchPolicy) -> list[ContentSection]:
        """Return ranked candidate sections or raise SearchError."""
        raise NotImplementedError


def _query_hash(query: str) -> str:
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


@dataclass
class SearchPipeline:
    embedder: EmbeddingProvider
    store: SectionStore
    completer: Completer
    token_counter: TokenCounter
    enhancer: QueryEnhancer = field(default_factory=EpisodeQueryEnhancer)
    moderator: Moderator = field(default_factory=NoopModerator)
    policy: SearchPolicy = field(default_factory=SearchPolicy)
    min_query_length: int = 3
    token_budget: int = 1500

    async def prepare(self, query: str | None) -> PreparedSearch:
        """Validate, moderate, retrieve and render the prompt for a query."""
        sanitized = validate_query(query, self.min_query_length)
        query_hash = _query_hash(sanitized)
        logger.info(
            "query_received",
            extra={"query_length": len(sanitized), "query_hash": query_hash},
        )

        enhanced = self.enhancer.enhance(sanitized)
        logger.info(
            "query_enhanced",
            extra={
                "query_hash": query_hash,
                "enhanced_length": len(enhanced),
                "enhanced": enhanced != sanitized,
            },
        )

        await self._moderate(sanitized, query_hash)

        try:
            vector = await asyncio.to_thread(self.embedder.embed, enhanced.replace("\n", " "))
        except EmbeddingError as exc:
            raise ApplicationError(
                "Failed to create embedding for question", {"detail": str(exc)}
            ) from exc

        try:
            sections = await asyncio.to_thread(self.store.match_sections, vector, self.policy)
        except SearchError as exc:
            raise ApplicationError(
                "Failed to match page sections", {"detail": str(exc), "data": exc.data}
            ) from exc
        logger.info(
            "retrieval_complete",
            extra={
                "query_hash": query_hash,
                "results": len(sections),
                "top_similarity": sections[0].similarity if sections else None,
            },
        )
        if not sections:
            raise UserError(NO_CONTENT_FOUND)

        context_text = assemble_context(sections, self.token_budget, self.token_counter)
        require_context(context_text)
        logger.info(
            "context_assembled",
            extra={
                "query_hash": query_hash,
                "context_length": len(context_text),
                "token_budget": self.token_budget,
            },
        )

        return PreparedSearch(
            query=sanitized,
            enhanced_query=enhanced,
            sections=sections,
            context_text=context_text,
            prompt=build_search_prompt(context_text, sanitized),
        )

    async def answer(self, query: str | None) -> AsyncIterator[bytes]:
        """Prepare the prompt and open the completion stream."""
        prepared = await self.prepare(query)
        try:
            return await self.completer.stream(prepared.prompt)
        except LLMError as exc:
            raise ApplicationError(
                "Failed to generate completion", {"detail": str(exc), "data": exc.data}
            ) from exc

    async def _moderate(self, query: str, query_hash: str) -> None:
        """Reject flagged queries; moderation outages never block retrieval."""
        try:
            result = await asyncio.to_thread(self.moderator.moderate, query)
        except ModerationError as exc:
            logger.warning(
                "moderation_failed",
                extra={"query_hash": query_hash, "detail": str(exc)},
            )
            return
        if result.flagged:
            logger.info("moderation_flagged", extra={"query_hash": query_hash})
            raise UserError(
                "Flagged content",
                {"flagged": True, "categories": result.categories},
            )

from __future__ import annotations

from functools import lru_cache

from src.app.settings import settings
from src.rag.context import TiktokenCounter
from src.rag.embeddings import (
    EmbeddingConfigError,
    EmbeddingProvider,
    HashEmbedder,
    OpenAIEmbedder,
)
from src.rag.enhancer import EpisodeQueryEnhancer, NoopEnhancer, QueryEnhancer
from src.rag.llm import build_completer
from src.rag.moderation import Moderator, NoopModerator, OpenAIModerator
from src.rag.pipeline import SearchPipeline, SectionStore
from src.rag.types import SearchPolicy
from src.vectorstore.errors import SearchError
from src.vectorstore.inmemory import InMemorySectionStore
from src.vectorstore.supabase import SupabaseConfig, SupabaseSectionStore


@lru_cache
def get_pipeline() -> SearchPipeline:
    embedder = build_embedder()
    return SearchPipeline(
        embedder=embedder,
        store=build_store(embedder),
        completer=build_completer(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_completion_model,
            max_tokens=settings.completion_max_tokens,
            temperature=settings.completion_temperature,
            timeout=settings.completion_timeout,
        ),
        token_counter=TiktokenCounter(encoding_name=settings.tokenizer_encoding),
        enhancer=build_enhancer(),
        moderator=build_moderator(),
        policy=SearchPolicy(
            similarity_threshold=settings.match_threshold,
            match_count=settings.match_count,
            min_content_length=settings.min_content_length,
        ),
        min_query_length=settings.min_query_length,
        token_budget=settings.context_token_budget,
    )


def reset_pipeline_cache() -> None:
    get_pipeline.cache_clear()


def build_enhancer() -> QueryEnhancer:
    if not settings.query_enhancer_enabled:
        return NoopEnhancer()
    return EpisodeQueryEnhancer()


def build_moderator() -> Moderator:
    if not settings.moderation_enabled or not settings.openai_api_key:
        return NoopModerator()
    return OpenAIModerator(api_key=settings.openai_api_key, base_url=settings.openai_base_url)


def build_embedder() -> EmbeddingProvider:
    provider = settings.embedding_provider.lower().strip()
    if provider == "hash":
        return HashEmbedder(dimension=settings.embedding_dimension)
    if provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key or "",
            model=settings.openai_embedding_model,
            dimension=settings.embedding_dimension,
            base_url=settings.openai_base_url,
        )
    raise EmbeddingConfigError(f"Unsupported embedding provider: {provider}")


def build_store(embedder: EmbeddingProvider) -> SectionStore:
    backend = settings.search_backend.lower().strip()
    if backend == "supabase":
        config = SupabaseConfig(
            url=settings.supabase_url or "",
            service_role_key=settings.supabase_service_role_key or "",
            schema=settings.supabase_schema,
            function=settings.supabase_match_function,
            timeout=settings.supabase_timeout,
        )
        return SupabaseSectionStore(config=config)
    if backend == "memory":
        return InMemorySectionStore(embedder=embedder)
    raise SearchError(f"Unsupported search backend: {backend}")

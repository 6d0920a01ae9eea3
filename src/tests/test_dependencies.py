from __future__ import annotations

import pytest

from src.app import dependencies
from src.app.settings import Settings
from src.rag.embeddings import EmbeddingConfigError, HashEmbedder
from src.rag.enhancer import EpisodeQueryEnhancer, NoopEnhancer
from src.rag.moderation import NoopModerator
from src.vectorstore.errors import SearchError
from src.vectorstore.inmemory import InMemorySectionStore
from src.vectorstore.supabase import SupabaseSectionStore


def use_settings(monkeypatch: pytest.MonkeyPatch, **values) -> None:
    monkeypatch.setattr(dependencies, "settings", Settings(**values))
    dependencies.reset_pipeline_cache()


def test_memory_backend_with_hash_embeddings(monkeypatch: pytest.MonkeyPatch) -> None:
    use_settings(monkeypatch, search_backend="memory", embedding_provider="hash", embedding_dimension=64)

    embedder = dependencies.build_embedder()
    store = dependencies.build_store(embedder)

    assert isinstance(embedder, HashEmbedder)
    assert embedder.dimension == 64
    assert isinstance(store, InMemorySectionStore)


def test_supabase_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    use_settings(
        monkeypatch,
        search_backend="supabase",
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="key",
    )

    store = dependencies.build_store(HashEmbedder())

    assert isinstance(store, SupabaseSectionStore)
    assert store.endpoint.endswith("/rest/v1/rpc/match_page_sections")


def test_unknown_backends_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    use_settings(monkeypatch, search_backend="faiss", embedding_provider="word2vec")

    with pytest.raises(EmbeddingConfigError):
        dependencies.build_embedder()
    with pytest.raises(SearchError):
        dependencies.build_store(HashEmbedder())


def test_enhancer_and_moderator_toggles(monkeypatch: pytest.MonkeyPatch) -> None:
    use_settings(monkeypatch, query_enhancer_enabled=False, moderation_enabled=True, openai_api_key=None)

    assert isinstance(dependencies.build_enhancer(), NoopEnhancer)
    assert isinstance(dependencies.build_moderator(), NoopModerator)

    use_settings(monkeypatch, query_enhancer_enabled=True)
    assert isinstance(dependencies.build_enhancer(), EpisodeQueryEnhancer)


def test_pipeline_requires_completion_key(monkeypatch: pytest.MonkeyPatch) -> None:
    use_settings(monkeypatch, openai_api_key=None)

    with pytest.raises(RuntimeError):
        dependencies.get_pipeline()

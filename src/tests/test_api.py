from __future__ import annotations

import logging

import httpx
import pytest

from src.app.main import app, pipeline_dependency
from src.rag.pipeline import SearchPipeline
from src.rag.types import ContentSection, SearchPolicy
from src.tests.fakes import CharCounter, FakeCompleter, FakeEmbedder, FakeModerator, FakeStore

pytestmark = pytest.mark.anyio

SECTIONS = [
    ContentSection(content="第5集：行銷漏斗與轉換率的實戰分享，適合剛開始經營品牌的人。", similarity=0.8),
    ContentSection(content="第6集：品牌經營與社群操作的經驗談，包含案例拆解與工具推薦。", similarity=0.7),
]


def build_pipeline(**overrides) -> SearchPipeline:
    options = {
        "embedder": FakeEmbedder(),
        "store": FakeStore(sections=list(SECTIONS)),
        "completer": FakeCompleter(),
        "token_counter": CharCounter(),
        "moderator": FakeModerator(),
        "policy": SearchPolicy(),
    }
    options.update(overrides)
    return SearchPipeline(**options)


def get_client(pipeline: SearchPipeline) -> httpx.AsyncClient:
    app.dependency_overrides[pipeline_dependency] = lambda: pipeline
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


async def test_health_endpoint() -> None:
    async with get_client(build_pipeline()) as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_preflight_is_answered() -> None:
    async with get_client(build_pipeline()) as client:
        response = await client.options("/vector-search")
    assert response.status_code == 200
    assert response.text == "ok"
    assert response.headers["access-control-allow-origin"] == "*"
    assert "apikey" in response.headers["access-control-allow-headers"]


async def test_streams_answer() -> None:
    completer = FakeCompleter(chunks=[b"data: first\n\n", b"data: [DONE]\n\n"])
    async with get_client(build_pipeline(completer=completer)) as client:
        response = await client.get("/vector-search", params={"query": "第五集在講什麼"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["x-request-id"]
    assert response.content == b"data: first\n\ndata: [DONE]\n\n"
    assert 'Question: """\n第五集在講什麼\n"""' in completer.prompts[0]


async def test_post_reads_query_parameter() -> None:
    async with get_client(build_pipeline()) as client:
        response = await client.post("/vector-search?query=我對行銷有興趣")
    assert response.status_code == 200


async def test_missing_query_returns_400() -> None:
    async with get_client(build_pipeline()) as client:
        response = await client.get("/vector-search")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing query in request data"}


async def test_short_query_returns_400() -> None:
    async with get_client(build_pipeline()) as client:
        response = await client.get("/vector-search", params={"query": "a"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Query is too short")


async def test_flagged_query_returns_data() -> None:
    pipeline = build_pipeline(moderator=FakeModerator(flagged=True))
    async with get_client(pipeline) as client:
        response = await client.get("/vector-search", params={"query": "flagged words"})
    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Flagged content"
    assert payload["data"] == {"flagged": True, "categories": {"violence": True}}


async def test_no_results_returns_400() -> None:
    pipeline = build_pipeline(store=FakeStore(sections=[]))
    async with get_client(pipeline) as client:
        response = await client.get("/vector-search", params={"query": "我對行銷有興趣"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("No relevant content found")


async def test_search_failure_hides_diagnostics(caplog: pytest.LogCaptureFixture) -> None:
    pipeline = build_pipeline(store=FakeStore(fail=True))
    with caplog.at_level(logging.ERROR, logger="src.app.main"):
        async with get_client(pipeline) as client:
            response = await client.get("/vector-search", params={"query": "第五集在講什麼"})
    assert response.status_code == 500
    assert response.json() == {"error": "There was an error processing your request"}
    assert "db.internal" not in response.text
    assert any("db.internal" in record.getMessage() for record in caplog.records)


async def test_completion_failure_returns_500() -> None:
    pipeline = build_pipeline(completer=FakeCompleter(fail=True))
    async with get_client(pipeline) as client:
        response = await client.get("/vector-search", params={"query": "第五集在講什麼"})
    assert response.status_code == 500
    assert response.json() == {"error": "There was an error processing your request"}


async def test_unexpected_error_returns_500() -> None:
    class BrokenEmbedder(FakeEmbedder):
        def embed(self, text: str) -> list[float]:
            raise ValueError("unexpected")

    pipeline = build_pipeline(embedder=BrokenEmbedder())
    async with get_client(pipeline) as client:
        response = await client.get("/vector-search", params={"query": "第五集在講什麼"})
    assert response.status_code == 500
    assert response.json() == {"error": "There was an error processing your request"}


async def test_metrics_endpoint() -> None:
    async with get_client(build_pipeline()) as client:
        await client.get("/vector-search", params={"query": "a"})
        response = await client.get("/metrics")
    assert response.status_code == 200
    assert "vector_search_outcomes_total" in response.text

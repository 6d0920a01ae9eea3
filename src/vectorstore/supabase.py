from __future__ import annotations

"""Section store backed by a Supabase (PostgREST) RPC function."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.rag.types import ContentSection, SearchPolicy
from src.vectorstore.errors import SearchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupabaseConfig:
    """Connection settings for the Supabase REST endpoint."""
    url: str
    service_role_key: str
    schema: str = "docs"
    function: str = "match_page_sections"
    timeout: float = 15.0


@dataclass
class SupabaseSectionStore:
    """Calls the ``match_page_sections`` RPC to rank page sections."""
    config: SupabaseConfig
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        if not self.config.url:
            raise SearchError("SUPABASE_URL is required for the supabase backend")
        if not self.config.service_role_key:
            raise SearchError("SUPABASE_SERVICE_ROLE_KEY is required for the supabase backend")

    @property
    def endpoint(self) -> str:
        return f"{self.config.url.rstrip('/')}/rest/v1/rpc/{self.config.function}"

    def match_sections(self, vector: list[float], policy: SearchPolicy) -> list[ContentSection]:
        """Run the similarity RPC and map rows to content sections."""
        payload = {
            "embedding": vector,
            "match_threshold": policy.similarity_threshold,
            "match_count": policy.match_count,
            "min_content_length": policy.min_content_length,
        }
        headers = {
            "apikey": self.config.service_role_key,
            "Authorization": f"Bearer {self.config.service_role_key}",
            "Content-Profile": self.config.schema,
            "Accept-Profile": self.config.schema,
        }
        try:
            with httpx.Client(timeout=self.config.timeout, transport=self.transport) as client:
                response = client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise SearchError(str(exc)) from exc
        if response.is_error:
            raise SearchError(
                f"Section match failed with status {response.status_code}",
                data=_error_payload(response),
            )
        try:
            rows = response.json()
        except ValueError as exc:
            raise SearchError("Section match returned invalid JSON") from exc
        if not isinstance(rows, list):
            raise SearchError("Section match returned an unexpected payload", data=rows)
        sections = [_to_section(row) for row in rows]
        logger.debug("supabase_match_complete", extra={"rows": len(sections)})
        return sections


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _to_section(row: Any) -> ContentSection:
    if not isinstance(row, dict) or not isinstance(row.get("content"), str):
        raise SearchError("Section row is missing content", data=row)
    similarity = row.get("similarity", 0.0)
    if not isinstance(similarity, (int, float)):
        raise SearchError("Section row has a non-numeric similarity", data=row)
    metadata = {key: value for key, value in row.items() if key not in {"content", "similarity"}}
    return ContentSection(content=row["content"], similarity=float(similarity), metadata=metadata)

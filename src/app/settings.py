from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    min_query_length: int = int(os.getenv("RAG_MIN_QUERY_LENGTH", "3"))
    match_threshold: float = float(os.getenv("RAG_MATCH_THRESHOLD", "0.5"))
    match_count: int = int(os.getenv("RAG_MATCH_COUNT", "10"))
    min_content_length: int = int(os.getenv("RAG_MIN_CONTENT_LENGTH", "50"))
    context_token_budget: int = int(os.getenv("RAG_CONTEXT_TOKEN_BUDGET", "1500"))
    tokenizer_encoding: str = os.getenv("TOKENIZER_ENCODING", "r50k_base")
    query_enhancer_enabled: bool = _env_flag("QUERY_ENHANCER_ENABLED", "true")
    moderation_enabled: bool = _env_flag("MODERATION_ENABLED", "true")
    search_backend: str = os.getenv("RAG_SEARCH_BACKEND", "memory")
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "hash")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "1536"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_embedding_model: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002")
    openai_completion_model: str = os.getenv("OPENAI_COMPLETION_MODEL", "gpt-3.5-turbo-instruct")
    completion_max_tokens: int = int(os.getenv("COMPLETION_MAX_TOKENS", "512"))
    completion_temperature: float = float(os.getenv("COMPLETION_TEMPERATURE", "0"))
    completion_timeout: float = float(os.getenv("COMPLETION_TIMEOUT", "60"))
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    supabase_schema: str = os.getenv("SUPABASE_SCHEMA", "docs")
    supabase_match_function: str = os.getenv("SUPABASE_MATCH_FUNCTION", "match_page_sections")
    supabase_timeout: float = float(os.getenv("SUPABASE_TIMEOUT", "15"))
    metrics_enabled: bool = _env_flag("RAG_METRICS_ENABLED", "true")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_allow_headers_raw: str = os.getenv(
        "RAG_CORS_ALLOW_HEADERS", "authorization, x-client-info, apikey, content-type"
    )

    @property
    def cors_allow_headers(self) -> str:
        return ", ".join(
            value.strip() for value in self.cors_allow_headers_raw.split(",") if value.strip()
        )


settings = Settings()

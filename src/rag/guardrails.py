from __future__ import annotations

from src.rag.errors import UserError


MISSING_QUERY = "Missing query in request data"
SHORT_QUERY = "Query is too short. Please provide a more detailed question."
NO_CONTENT_FOUND = (
    "No relevant content found in the documentation. Please try rephrasing your "
    "question or check if the documentation has been ingested."
)
NO_CONTENT_EXTRACTED = (
    "No content was extracted from the documentation. Please try rephrasing your question."
)


def validate_query(query: str | None, min_length: int) -> str:
    if not query:
        raise UserError(MISSING_QUERY)
    sanitized = query.strip()
    if not sanitized:
        raise UserError(MISSING_QUERY)
    if len(sanitized) < min_length:
        raise UserError(SHORT_QUERY)
    return sanitized


def require_context(context_text: str) -> None:
    if not context_text.strip():
        raise UserError(NO_CONTENT_EXTRACTED)

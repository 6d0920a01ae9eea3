from __future__ import annotations

"""Token-bounded context assembly."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from src.rag.types import ContentSection

CONTEXT_DELIMITER = "\n---\n"


class TokenCounter(Protocol):
    """Protocol for token counters."""
    def count(self, text: str) -> int:
        """Return the number of tokens in text."""
        raise NotImplementedError


@dataclass
class TiktokenCounter:
    """Token counter backed by a tiktoken encoding."""
    encoding_name: str = "r50k_base"
    _encoding: Any = field(default=None, init=False, repr=False)

    def count(self, text: str) -> int:
        if self._encoding is None:
            import tiktoken

            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return len(self._encoding.encode(text, disallowed_special=()))


def assemble_context(
    sections: Iterable[ContentSection],
    token_budget: int,
    counter: TokenCounter,
) -> str:
    """Join ranked sections until the token budget is reached.

    Sections keep the order they were ranked in. Each section is appended in
    full before the running total is compared to the budget, so a non-empty
    input always yields at least its first section and the budget is crossed
    by at most one section.
    """
    parts: list[str] = []
    total = 0
    for section in sections:
        parts.append(section.content.strip() + CONTEXT_DELIMITER)
        total += counter.count(section.content)
        if total >= token_budget:
            break
    return "".join(parts)

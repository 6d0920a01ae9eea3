from __future__ import annotations

"""Content moderation collaborators."""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx


class ModerationError(RuntimeError):
    """Raised when the moderation service itself fails."""
    pass


@dataclass(frozen=True)
class ModerationResult:
    """Moderation verdict for a single input."""
    flagged: bool
    categories: dict[str, bool] = field(default_factory=dict)


class Moderator(Protocol):
    """Protocol for moderation services."""
    def moderate(self, text: str) -> ModerationResult:
        """Return the moderation verdict or raise ModerationError."""
        raise NotImplementedError


@dataclass(frozen=True)
class NoopModerator:
    """Moderator that never flags input."""
    def moderate(self, text: str) -> ModerationResult:
        return ModerationResult(flagged=False)


@dataclass
class OpenAIModerator:
    """Moderator backed by the OpenAI moderation endpoint."""
    api_key: str
    base_url: str | None = None
    http_client: httpx.Client | None = None
    max_retries: int = 2
    client: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ModerationError("OPENAI_API_KEY is required for OpenAIModerator")
        from openai import OpenAI

        self.client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            http_client=self.http_client,
            max_retries=self.max_retries,
        )

    def moderate(self, text: str) -> ModerationResult:
        """Moderate text using the OpenAI moderation API."""
        from openai import OpenAIError

        try:
            response = self.client.moderations.create(input=text)
        except OpenAIError as exc:
            raise ModerationError(str(exc)) from exc
        if not response.results:
            return ModerationResult(flagged=False)
        result = response.results[0]
        # API names keep the hyphenated category keys such as "self-harm".
        categories = result.categories.to_dict() if result.categories else {}
        return ModerationResult(
            flagged=bool(result.flagged),
            categories={key: bool(value) for key, value in categories.items()},
        )

from __future__ import annotations

"""Streaming completion client."""

from dataclasses import dataclass
import json
import logging
from typing import Any, AsyncIterator, Protocol

import httpx


class LLMError(RuntimeError):
    """Raised when LLM requests fail or responses are invalid."""

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.data = data


logger = logging.getLogger(__name__)


class Completer(Protocol):
    """Protocol for streaming completion services."""
    async def stream(self, prompt: str) -> AsyncIterator[bytes]:
        """Open a completion stream, raising LLMError before the first byte on failure."""
        raise NotImplementedError


def _decode_error_body(body: bytes) -> Any:
    """Decode an error body as JSON, falling back to text."""
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


@dataclass(frozen=True)
class OpenAICompleter:
    """Completer backed by the OpenAI legacy completions endpoint."""
    api_key: str
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo-instruct"
    max_tokens: int = 512
    temperature: float = 0.0
    timeout: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None

    async def stream(self, prompt: str) -> AsyncIterator[bytes]:
        """Start a streamed completion and return its SSE byte iterator."""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": True,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        try:
            request = client.build_request(
                "POST",
                f"{self.base_url.rstrip('/')}/completions",
                json=payload,
                headers=headers,
            )
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise LLMError(str(exc)) from exc

        if response.is_error:
            try:
                body = await response.aread()
            except httpx.HTTPError as exc:
                raise LLMError(
                    f"Completion request failed with status {response.status_code}"
                ) from exc
            finally:
                await response.aclose()
                await client.aclose()
            raise LLMError(
                f"Completion request failed with status {response.status_code}",
                data=_decode_error_body(body),
            )

        logger.info(
            "completion_started",
            extra={"model": self.model, "status": response.status_code},
        )
        return _proxy(client, response)


async def _proxy(client: httpx.AsyncClient, response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield decoded response bytes and release the connection afterwards."""
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()
        await client.aclose()


def build_completer(
    *,
    api_key: str | None,
    base_url: str,
    model: str,
    max_tokens: int,
    temperature: float,
    timeout: float,
) -> OpenAICompleter:
    """Factory for the completion client."""
    if not api_key:
        raise LLMError("OPENAI_API_KEY is required for completions")
    if not model:
        raise LLMError("OPENAI_COMPLETION_MODEL is required for completions")
    return OpenAICompleter(
        api_key=api_key,
        base_url=base_url,
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        timeout=timeout,
    )

# src/tinygraph/rag/client.py
"""Async client for OpenAI-compatible generation and embedding endpoints."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from tinygraph.core.config import ProviderSettings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EmbeddedChunk:
    """A piece of text and its embedding vector."""

    text: str
    embedding: list[float]


class ProviderError(Exception):
    """Error from the generation/embedding service.

    Attributes:
        retryable: Whether the error is likely transient
    """

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class RateLimitError(ProviderError):
    """HTTP 429 from the provider - retryable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=True)


class ServerError(ProviderError):
    """HTTP 5xx from the provider - retryable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=True)


class NetworkError(ProviderError):
    """Timeout, refused connection, DNS failure - retryable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=True)


class ResponseFormatError(ProviderError):
    """Provider answered 2xx with a body we cannot interpret - not retryable."""


class ProviderClient:
    """Thin async wrapper over /chat/completions and /embeddings.

    The client never retries; callers that want retries wrap the node
    that uses it.

    Usage:
        async with ProviderClient(settings.provider) as client:
            answer = await client.complete(SYSTEM, "question")
    """

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        headers = {"Content-Type": "application/json"}
        if settings.api_key is not None:
            headers["Authorization"] = f"Bearer {settings.api_key.get_secret_value()}"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            headers=headers,
            timeout=settings.timeout_seconds,
        )

    async def __aenter__(self) -> ProviderClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run a single chat completion and return the message content.

        Returns an empty string when the provider returns no content.
        """
        body = await self._post(
            "/chat/completions",
            {
                "model": self._settings.llm_model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            },
        )
        try:
            choices = body["choices"]
        except KeyError as e:
            raise ResponseFormatError("Completion response has no 'choices'") from e
        if not choices:
            return ""
        content = choices[0].get("message", {}).get("content")
        return content or ""

    async def embed(self, texts: str | list[str]) -> list[EmbeddedChunk]:
        """Embed one or more texts, preserving input order."""
        inputs = [texts] if isinstance(texts, str) else list(texts)
        if not inputs:
            return []

        body = await self._post(
            "/embeddings",
            {
                "model": self._settings.embed_model,
                "input": inputs,
                "encoding_format": "float",
            },
        )
        try:
            data = sorted(body["data"], key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseFormatError(f"Malformed embedding response: {e}") from e
        if len(vectors) != len(inputs):
            raise ResponseFormatError(f"Expected {len(inputs)} embeddings, got {len(vectors)}")

        return [EmbeddedChunk(text=text, embedding=vector) for text, vector in zip(inputs, vectors, strict=True)]

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        start = time.perf_counter()
        try:
            response = await self._http.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 429:
                raise RateLimitError(f"Rate limited: {e}") from e
            if status_code >= 500:
                raise ServerError(f"Server error ({status_code}): {e}") from e
            raise ProviderError(f"Request to {path} failed ({status_code}): {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e

        logger.debug(
            "provider_call_completed",
            path=path,
            status_code=response.status_code,
            latency_ms=round((time.perf_counter() - start) * 1000.0, 2),
        )
        try:
            body: dict[str, Any] = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Response from {path} is not JSON") from e
        return body

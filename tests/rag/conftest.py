# tests/rag/conftest.py
"""Fixtures for the retrieval example: a fake provider and an in-memory store."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from tinygraph.rag.client import EmbeddedChunk
from tinygraph.rag.store import VectorStore


def vector_for(text: str) -> list[float]:
    """Deterministic 3-d embedding: counts of a, b and c."""
    lowered = text.lower()
    return [float(lowered.count("a")), float(lowered.count("b")), float(lowered.count("c"))]


class FakeProviderClient:
    """Stands in for ProviderClient without any HTTP.

    Grading answers ``relevant: true`` unless the document contains
    ``irrelevant``; answers echo how many documents were supplied.
    """

    def __init__(self, complete: Callable[[str, str], str] | None = None) -> None:
        self.completions: list[tuple[str, str]] = []
        self.embedded: list[list[str]] = []
        self.closed = False
        self._complete = complete

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.completions.append((system_prompt, user_prompt))
        if self._complete is not None:
            return self._complete(system_prompt, user_prompt)
        if "expert document grader" in system_prompt:
            return "relevant: false" if "irrelevant" in user_prompt else "relevant: true"
        return f"answer from {user_prompt.count('Document:')} documents"

    async def embed(self, texts: str | list[str]) -> list[EmbeddedChunk]:
        inputs = [texts] if isinstance(texts, str) else list(texts)
        self.embedded.append(inputs)
        return [EmbeddedChunk(text=text, embedding=vector_for(text)) for text in inputs]

    async def aclose(self) -> None:
        self.closed = True

    async def __aenter__(self) -> FakeProviderClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


@pytest.fixture
def fake_client() -> FakeProviderClient:
    return FakeProviderClient()


@pytest.fixture
def store() -> VectorStore:
    vector_store = VectorStore.from_url("sqlite://")
    vector_store.init()
    return vector_store

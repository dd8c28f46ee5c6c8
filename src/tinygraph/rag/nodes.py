# src/tinygraph/rag/nodes.py
"""Retrieval-augmented generation nodes.

Context layout shared by the store and query pipelines:

    embed:
        documents: list[str]           input documents, or the query
        embedded: list[EmbeddedChunk]  chunks with their vectors
    search_results: list[SearchResult]
    llm_out: str

Store pipeline:  embed -> store
Query pipeline:  embed -> retrieve -> grader -> answer
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
import yaml

from tinygraph.contracts import Context, NodeResult
from tinygraph.core.config import ChunkingSettings
from tinygraph.rag.chunking import chunk_text
from tinygraph.rag.client import ProviderClient
from tinygraph.rag.prompts import GRADE_PROMPT, QA_PROMPT
from tinygraph.rag.store import VectorStore

logger = structlog.get_logger(__name__)


def _documents(context: Context) -> list[str]:
    documents = context["embed"]["documents"]
    if isinstance(documents, str):
        return [documents]
    return list(documents)


def _is_relevant(verdict: str) -> bool:
    """Read a grader verdict of the form ``relevant: true``.

    Anything that is not a YAML mapping with a boolean true ``relevant``
    counts as not relevant.
    """
    try:
        parsed: Any = yaml.safe_load(verdict)
    except yaml.YAMLError:
        logger.warning("grader_verdict_unparseable", verdict=verdict[:200])
        return False
    return isinstance(parsed, dict) and parsed.get("relevant") is True


class EmbedNode:
    """Chunk and embed the documents in ``embed.documents``.

    Usable in both pipelines; transitions to the name it was built with.
    """

    def __init__(
        self,
        client: ProviderClient,
        transition: str,
        chunking: ChunkingSettings | None = None,
    ) -> None:
        self._client = client
        self._transition = transition
        self._chunking = chunking or ChunkingSettings()

    async def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        documents = _documents(context)
        chunks = [
            chunk
            for document in documents
            for chunk in chunk_text(document, self._chunking.max_chars, self._chunking.overlap)
        ]
        embedded = await self._client.embed(chunks)
        return NodeResult(
            context_patch={"embed": {"documents": documents, "embedded": embedded}},
            transition=self._transition,
        )


class StoreNode:
    """Persist every embedded chunk, then end the run."""

    def __init__(self, store: VectorStore) -> None:
        self._store = store

    def next(self, context: Context, transitions: frozenset[str]) -> None:
        embedded = context["embed"]["embedded"]
        for chunk in embedded:
            self._store.insert(chunk.text, chunk.embedding)
        logger.info("documents_stored", chunks=len(embedded))


class RetrieveNode:
    """Embed the query and fetch its nearest stored chunks."""

    def __init__(
        self,
        client: ProviderClient,
        store: VectorStore,
        *,
        limit: int = 10,
        transition: str = "grader",
    ) -> None:
        self._client = client
        self._store = store
        self._limit = limit
        self._transition = transition

    async def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        documents = _documents(context)
        embedded = await self._client.embed(documents)
        results = self._store.search(embedded[0].embedding, limit=self._limit)
        return NodeResult(
            context_patch={
                "embed": {"documents": documents, "embedded": embedded},
                "search_results": results,
            },
            transition=self._transition,
        )


class GradeNode:
    """Ask the model whether each search result is relevant to the query.

    All results are graded concurrently. ``search_results`` is replaced by
    the relevant subset, in the original order.
    """

    def __init__(self, client: ProviderClient, *, transition: str = "answer") -> None:
        self._client = client
        self._transition = transition

    async def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        query = _documents(context)[0]
        results = context.get("search_results", [])
        verdicts = await asyncio.gather(
            *(self._client.complete(GRADE_PROMPT, f"Document:\n{r.text}\nPrompt:\n{query}") for r in results)
        )
        relevant = [r for r, verdict in zip(results, verdicts, strict=True) if _is_relevant(verdict)]
        logger.debug("search_results_graded", total=len(results), relevant=len(relevant))
        return NodeResult(context_patch={"search_results": relevant}, transition=self._transition)


class QANode:
    """Answer the query from the graded documents and end the run."""

    def __init__(self, client: ProviderClient) -> None:
        self._client = client

    async def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        query = _documents(context)[0]
        documents = "".join(f"Document:\n{r.text}\n\n" for r in context.get("search_results", []))
        answer = await self._client.complete(QA_PROMPT, f"{documents}\nQuestion:{query}")
        return NodeResult(context_patch={"llm_out": answer})

# src/tinygraph/rag/pipelines.py
"""Store and query graphs for the retrieval example."""

from __future__ import annotations

from tinygraph.core.config import ChunkingSettings
from tinygraph.engine import Graph
from tinygraph.rag.client import ProviderClient
from tinygraph.rag.nodes import EmbedNode, GradeNode, QANode, RetrieveNode, StoreNode
from tinygraph.rag.store import VectorStore


def build_store_graph(
    client: ProviderClient,
    store: VectorStore,
    *,
    chunking: ChunkingSettings | None = None,
) -> Graph:
    """embed -> store"""
    return (
        Graph("store")
        .node("embed", EmbedNode(client, "store", chunking))
        .node("store", StoreNode(store))
        .edge("embed", "store")
        .set_start("embed")
    )


def build_query_graph(
    client: ProviderClient,
    store: VectorStore,
    *,
    search_limit: int = 10,
) -> Graph:
    """embed -> retrieve -> grader -> answer"""
    return (
        Graph("query")
        .node("embed", EmbedNode(client, "retrieve"))
        .node("retrieve", RetrieveNode(client, store, limit=search_limit))
        .node("grader", GradeNode(client))
        .node("answer", QANode(client))
        .edge("embed", "retrieve")
        .edge("retrieve", "grader")
        .edge("grader", "answer")
        .set_start("embed")
    )


def _drop_blank_lines(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if line)


async def embed_document(
    text: str,
    client: ProviderClient,
    store: VectorStore,
    *,
    chunking: ChunkingSettings | None = None,
) -> Graph:
    """Chunk, embed and store a document.

    Returns the finished graph; its termination tells whether the chunks
    were stored.
    """
    store.init()
    graph = build_store_graph(client, store, chunking=chunking)
    await graph.run({"embed": {"documents": [_drop_blank_lines(text)]}})
    return graph


async def answer_query(
    query: str,
    client: ProviderClient,
    store: VectorStore,
    *,
    search_limit: int = 10,
) -> str | None:
    """Answer query from stored documents.

    Returns None when the run stopped before the answer node produced
    output; the graph logs the reason.
    """
    store.init()
    graph = build_query_graph(client, store, search_limit=search_limit)
    context = await graph.run({"embed": {"documents": [query]}})
    return context.get("llm_out")

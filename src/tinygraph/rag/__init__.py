"""Retrieval-augmented generation example built on the graph engine.

Chunks documents, embeds them through an OpenAI-compatible API, stores the
vectors, and answers questions from the nearest chunks after a relevance
grading pass.
"""

from tinygraph.rag.chunking import chunk_text
from tinygraph.rag.client import EmbeddedChunk, ProviderClient, ProviderError
from tinygraph.rag.pipelines import answer_query, build_query_graph, build_store_graph, embed_document
from tinygraph.rag.store import SearchResult, VectorStore

__all__ = [
    "EmbeddedChunk",
    "ProviderClient",
    "ProviderError",
    "SearchResult",
    "VectorStore",
    "answer_query",
    "build_query_graph",
    "build_store_graph",
    "chunk_text",
    "embed_document",
]

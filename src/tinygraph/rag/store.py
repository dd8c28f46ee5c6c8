# src/tinygraph/rag/store.py
"""Embedding storage and nearest-neighbour search.

Uses SQLAlchemy Core (not ORM). Vectors are stored as JSON text and ranked
in-process with numpy by Euclidean distance, so any SQLAlchemy backend
works without a vector extension.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import structlog
from sqlalchemy import Column, Integer, MetaData, Table, Text, create_engine, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)

metadata = MetaData()

items_table = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("text", Text, nullable=False),
    Column("embedding", Text, nullable=False),  # JSON array of floats
)


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A stored chunk returned by a search, nearest first."""

    id: int
    text: str
    distance: float


class VectorStore:
    """Table of text chunks and their embeddings.

    Usage:
        store = VectorStore.from_url("sqlite:///tinygraph.db")
        store.init()
        store.insert("some text", [0.1, 0.2])
        results = store.search([0.1, 0.25], limit=5)
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, url: str) -> VectorStore:
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise each checkout sees an empty database
            engine = create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
        else:
            engine = create_engine(url)
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def init(self) -> None:
        """Create the items table if it does not exist."""
        metadata.create_all(self._engine)

    def insert(self, text: str, embedding: Sequence[float]) -> int:
        """Store a chunk and return its id."""
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(items_table).values(text=text, embedding=json.dumps([float(x) for x in embedding]))
            )
            row_id = result.inserted_primary_key[0]
        logger.debug("store_chunk_inserted", id=row_id, chars=len(text))
        return int(row_id)

    def count(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(items_table)).scalar_one())

    def search(self, embedding: Sequence[float], limit: int = 10) -> list[SearchResult]:
        """Return up to limit stored chunks ordered by distance to embedding.

        Raises:
            ValueError: If a stored vector's dimension differs from the query
        """
        with self._engine.connect() as conn:
            rows = conn.execute(select(items_table.c.id, items_table.c.text, items_table.c.embedding)).all()
        if not rows:
            return []

        query = np.asarray(embedding, dtype=np.float64)
        matrix = np.asarray([json.loads(row.embedding) for row in rows], dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[1] != query.shape[0]:
            raise ValueError(f"Query has dimension {query.shape[0]}, stored vectors have shape {matrix.shape}")

        distances = np.linalg.norm(matrix - query, axis=1)
        order = np.argsort(distances, kind="stable")[:limit]
        return [
            SearchResult(id=int(rows[i].id), text=rows[i].text, distance=float(distances[i]))
            for i in order
        ]

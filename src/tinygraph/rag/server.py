# src/tinygraph/rag/server.py
"""Starlette ASGI application exposing the retrieval pipelines.

Endpoints:
    GET  /health          liveness probe
    POST /embed           multipart form with a ``file`` field; stores it
    GET  /query?query=... answers from stored documents

Usage:
    from tinygraph.core.config import load_settings
    from tinygraph.rag.server import create_app

    app = create_app(load_settings())
    # uvicorn.run(app, host=..., port=...)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from starlette.applications import Starlette
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from tinygraph.core.config import TinygraphSettings
from tinygraph.rag.client import ProviderClient
from tinygraph.rag.pipelines import answer_query, embed_document
from tinygraph.rag.store import VectorStore

logger = structlog.get_logger(__name__)


class RagServer:
    """Holds the provider client and store shared by all requests.

    Attributes:
        app: The Starlette ASGI application
    """

    def __init__(
        self,
        settings: TinygraphSettings,
        *,
        client: ProviderClient | None = None,
        store: VectorStore | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or ProviderClient(settings.provider)
        self._store = store or VectorStore.from_url(settings.store.url)
        self._app = self._create_app()

    def _create_app(self) -> Starlette:
        routes = [
            Route("/health", self._health_endpoint, methods=["GET"]),
            Route("/embed", self._embed_endpoint, methods=["POST"]),
            Route("/query", self._query_endpoint, methods=["GET"]),
        ]
        return Starlette(debug=False, routes=routes, lifespan=self._lifespan)

    @asynccontextmanager
    async def _lifespan(self, app: Starlette) -> AsyncIterator[None]:
        self._store.init()
        yield
        await self._client.aclose()

    @property
    def app(self) -> Starlette:
        return self._app

    async def _health_endpoint(self, request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    async def _embed_endpoint(self, request: Request) -> JSONResponse:
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            return JSONResponse({"e": "No file uploaded in formdata"}, status_code=400)

        text = (await upload.read()).decode("utf-8", errors="replace")
        try:
            graph = await embed_document(text, self._client, self._store, chunking=self._settings.chunking)
        except SQLAlchemyError as e:
            logger.error("embed_store_unavailable", error=str(e), error_type=type(e).__name__)
            return JSONResponse({"e": "Failed to embed document."}, status_code=502)
        if graph.termination is not None and graph.termination.failed:
            return JSONResponse({"e": "Failed to embed document."}, status_code=502)
        return JSONResponse({"e": "Document embedded successfully"})

    async def _query_endpoint(self, request: Request) -> JSONResponse:
        query = request.query_params.get("query")
        if not query:
            return JSONResponse({"response": "Missing 'query' parameter."}, status_code=400)

        try:
            answer = await answer_query(
                query, self._client, self._store, search_limit=self._settings.store.search_limit
            )
        except SQLAlchemyError as e:
            logger.error("query_store_unavailable", error=str(e), error_type=type(e).__name__)
            answer = None
        if answer is None:
            return JSONResponse({"response": "Something went wrong. Try again. "}, status_code=502)
        return JSONResponse({"response": answer})


def create_app(
    settings: TinygraphSettings,
    *,
    client: ProviderClient | None = None,
    store: VectorStore | None = None,
) -> Starlette:
    """Create the Starlette application."""
    return RagServer(settings, client=client, store=store).app

# src/tinygraph/cli.py
"""tinygraph Command Line Interface.

Entry point for the retrieval example: serve it over HTTP or drive the
store/query graphs directly from the shell.

Usage:
    tinygraph embed notes.txt
    tinygraph query "What do the notes say about deadlines?"
    tinygraph serve --port 3000
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from tinygraph import __version__
from tinygraph.core.config import TinygraphSettings, load_settings

__all__ = ["app"]

app = typer.Typer(
    name="tinygraph",
    help="tinygraph: run small directed-graph pipelines.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tinygraph version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


def _settings(ctx: typer.Context) -> TinygraphSettings:
    settings: TinygraphSettings = ctx.obj
    return settings


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to settings YAML file.", dir_okay=False),
    ] = None,
    no_dotenv: Annotated[bool, typer.Option("--no-dotenv", help="Skip loading .env file.")] = False,
    env_file: Annotated[
        Path | None,
        typer.Option("--env-file", help="Path to .env file (skips automatic search)."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    json_logs: Annotated[bool, typer.Option("--json-logs", help="Output structured JSON logs.")] = False,
) -> None:
    """tinygraph: run small directed-graph pipelines."""
    from tinygraph.core.logging import configure_logging

    if not no_dotenv:
        _load_dotenv(env_file=env_file)

    try:
        settings = load_settings(config)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except ValidationError as e:
        typer.secho(f"Configuration errors:\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e

    level = "DEBUG" if verbose else settings.logging.level
    configure_logging(json_output=json_logs or settings.logging.json_output, level=level)
    ctx.obj = settings


@app.command()
def embed(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Text file to chunk, embed and store.", exists=True, dir_okay=False)],
) -> None:
    """Chunk, embed and store a document."""
    from tinygraph.rag.client import ProviderClient
    from tinygraph.rag.pipelines import embed_document
    from tinygraph.rag.store import VectorStore

    settings = _settings(ctx)
    text = file.read_text(encoding="utf-8")

    async def _run() -> bool:
        async with ProviderClient(settings.provider) as client:
            store = VectorStore.from_url(settings.store.url)
            graph = await embed_document(text, client, store, chunking=settings.chunking)
            return graph.termination is None or not graph.termination.failed

    if not asyncio.run(_run()):
        typer.secho("Failed to embed document.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho(f"Embedded {file}", fg=typer.colors.GREEN)


@app.command()
def query(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Question to answer from stored documents.")],
) -> None:
    """Answer a question from stored documents."""
    from tinygraph.rag.client import ProviderClient
    from tinygraph.rag.pipelines import answer_query
    from tinygraph.rag.store import VectorStore

    settings = _settings(ctx)

    async def _run() -> str | None:
        async with ProviderClient(settings.provider) as client:
            store = VectorStore.from_url(settings.store.url)
            return await answer_query(text, client, store, search_limit=settings.store.search_limit)

    answer = asyncio.run(_run())
    if answer is None:
        typer.secho("No answer was produced; see the log for the reason.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo(answer)


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", "-h", help="Host address to bind to.")] = None,
    port: Annotated[int | None, typer.Option("--port", "-P", help="Port to listen on.", min=1, max=65535)] = None,
) -> None:
    """Serve the /embed and /query endpoints."""
    import uvicorn

    from tinygraph.rag.server import create_app

    settings = _settings(ctx)
    bind_host = host or settings.server.host
    bind_port = port or settings.server.port

    typer.echo(f"Server is running on http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port, log_config=None)


if __name__ == "__main__":
    app()

"""Command line interface for ocrindex."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Set

import click
import typer
from rich.console import Console
from typer.core import TyperGroup

from ocrindex.config import AppConfig
from ocrindex.errors import OcrIndexError
from ocrindex.index.analyzer import Analyzer, AnalyzeStats
from ocrindex.index.indexer import Indexer
from ocrindex.index.search import Searcher
from ocrindex.index.storage import open_store
from ocrindex.vision.annotator import open_annotator

GENERAL_USAGE = "Usage: ocrindex <command> <arg> ...\n\n\tCommands: analyze, lookup"
ANALYZE_USAGE = "Usage: ocrindex analyze <dir>"
LOOKUP_USAGE = "Usage: ocrindex lookup <word> ..."

console = Console()


class UsageGroup(TyperGroup):
    """Command group that answers unknown commands with the general usage."""

    def resolve_command(self, ctx: click.Context, args: List[str]):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            _usage(GENERAL_USAGE)


app = typer.Typer(cls=UsageGroup, help="ocrindex - find the images that contain a word")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _usage(message: str) -> None:
    console.print(message, markup=False, highlight=False)
    raise typer.Exit(code=1)


def _build_config(host: Optional[str], port: Optional[int], **overrides) -> AppConfig:
    if host is not None:
        overrides["redis_host"] = host
    if port is not None:
        overrides["redis_port"] = port
    try:
        return AppConfig(**overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


async def _analyze(config: AppConfig, directory: Path) -> AnalyzeStats:
    async with open_store(config) as store, open_annotator(config) as annotator:
        indexer = Indexer(store, lowercase=config.lowercase_tokens)
        return await Analyzer(indexer, annotator).analyze(directory)


async def _lookup(config: AppConfig, words: Sequence[str]) -> List[Set[str]]:
    async with open_store(config) as store:
        return await Searcher(store).lookup(words)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        _usage(GENERAL_USAGE)


@app.command()
def analyze(
    directory: Optional[Path] = typer.Argument(None, help="Directory of images to analyze."),
    host: Optional[str] = typer.Option(None, "--host", help="Redis host"),
    port: Optional[int] = typer.Option(None, "--port", help="Redis port"),
    lowercase_tokens: bool = typer.Option(
        False, "--lowercase-tokens", help="Lowercase tokens before indexing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Detect text in unprocessed images and add it to the index."""
    if directory is None:
        _usage(ANALYZE_USAGE)
    _setup_logging(verbose)

    if not directory.is_dir():
        console.print(f"[red]Not a directory: {directory}[/red]")
        raise typer.Exit(code=1)

    config = _build_config(host, port, lowercase_tokens=lowercase_tokens)
    try:
        stats = asyncio.run(_analyze(config, directory))
    except OcrIndexError as exc:
        console.print(f"[red]Analysis failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(
        f"Indexed: {stats.indexed}, no text: {stats.no_text}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}"
    )


@app.command()
def lookup(
    words: Optional[List[str]] = typer.Argument(None, help="Words to look up."),
    host: Optional[str] = typer.Option(None, "--host", help="Redis host"),
    port: Optional[int] = typer.Option(None, "--port", help="Redis port"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print the files that contain each word."""
    if not words:
        _usage(LOOKUP_USAGE)
    _setup_logging(verbose)

    config = _build_config(host, port)
    try:
        hits = asyncio.run(_lookup(config, words))
    except OcrIndexError as exc:
        console.print(f"[red]Lookup failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    for word, documents in zip(words, hits):
        console.print(
            f'hits for "{word}": {", ".join(sorted(documents))}',
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

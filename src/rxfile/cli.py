"""CLI implementation for rxfile."""

import asyncio
import json
import sys
from contextlib import aclosing
from pathlib import Path
from typing import Optional

import typer

from . import flow, save
from .core.model import SAVE_BUFF_SIZE, Completion, StreamError
from .core.settle import settle_policy
from .core.transforms import rechunk
from .core.util import completion_asdict
from .io import DEFAULT_READ_BLOCK_SIZE, is_url, open_provider
from .logging_config import setup_logging

app = typer.Typer(add_completion=False, help="Stream files and URLs byte by byte.")


def _location(src: str) -> str:
    """Resolve local paths, leave URLs untouched."""
    if is_url(src):
        return src
    return str(Path(src).resolve())


async def _cat(source: str, out, block_size: int) -> None:
    async with open_provider(source, block_size=block_size) as provider:
        async with aclosing(rechunk(flow(source, provider), SAVE_BUFF_SIZE)) as blocks:
            async for block in blocks:
                out.write(block)
    out.flush()


async def _copy(source: str, dest: str, settle_ms: int, buffer_size: int, fsync: bool) -> Completion:
    """Pipe flow(source) into save(dest) and report the outcome."""
    counted = 0

    async def counting(stream):
        nonlocal counted
        async with aclosing(stream):
            async for byte in stream:
                counted += 1
                yield byte

    async with open_provider(source) as src_provider, open_provider(dest, fsync=fsync) as dst_provider:
        try:
            await save(dest, counting(flow(source, src_provider)), dst_provider,
                       settle=settle_policy(settle_ms), buffer_size=buffer_size)
        except StreamError as e:
            return Completion(success=False, error=str(e), bytes_read=counted, path=dest)
    return Completion(success=True, error=None, bytes_read=counted, path=dest)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: RXFILE_LOG_LEVEL or WARNING)"),
):
    """Stream files and URLs byte by byte."""
    setup_logging(log_level)


@app.command()
def cat(
    source: str = typer.Argument(..., help="File or URL to read"),
    block_size: int = typer.Option(DEFAULT_READ_BLOCK_SIZE, "--block-size", min=1,
                                   envvar="RXFILE_READ_BLOCK_SIZE", help="Read block size in bytes"),
):
    """Write the content of SOURCE to stdout."""
    try:
        asyncio.run(_cat(_location(source), sys.stdout.buffer, block_size))
    except StreamError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


@app.command()
def copy(
    source: str = typer.Argument(..., help="File or URL to read"),
    dest: str = typer.Argument(..., help="File or URL to write"),
    settle_ms: int = typer.Option(0, "--settle-ms", min=0, envvar="RXFILE_SETTLE_MS",
                                  help="Wait N ms after the write completes"),
    buffer_size: int = typer.Option(SAVE_BUFF_SIZE, "--buffer-size", min=1, envvar="RXFILE_BUFFER_SIZE",
                                    help="Maximum bytes per write"),
    fsync: bool = typer.Option(False, "--fsync", envvar="RXFILE_FSYNC", help="fsync local files on close"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write the JSON record to PATH instead of stdout"),
):
    """Copy SOURCE to DEST through the byte stream and print a JSON record."""
    res = asyncio.run(_copy(_location(source), _location(dest), settle_ms, buffer_size, fsync))

    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        json.dump(completion_asdict(res), sink, indent=2)
        sink.write("\n")
    finally:
        if output:
            sink.close()

    if not res.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

"""Reader: a file as a lazy sequence of single bytes."""

from __future__ import annotations
import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator

from .core.model import OpenFailure, ReadFailure
from .core.transforms import flatten
from .io.base import BlockSource, FilePath, FileProvider

logger = logging.getLogger(__name__)


class FileReader:
    """Turns the provider's block stream into a byte stream.

    Holds no handle between calls: every flow() opens the file afresh and the
    source is closed when the stream ends, fails or is abandoned.
    """

    def __init__(self, provider: FileProvider):
        self.provider = provider

    async def _blocks(self, source: BlockSource, path: FilePath,
                      cancel: asyncio.Event | None) -> AsyncIterator[bytes]:
        while cancel is None or not cancel.is_set():
            try:
                block = await source.__anext__()
            except StopAsyncIteration:
                return
            except Exception as exc:
                raise ReadFailure(path, exc) from exc
            yield block
        logger.debug("Read of %s cancelled", path)

    async def flow(self, path: FilePath, cancel: asyncio.Event | None = None) -> AsyncIterator[int]:
        """Yield the bytes of `path` in file order.

        Nothing is opened until the first byte is requested. Setting `cancel`,
        calling aclose() on the returned stream, or cancelling the consuming
        task stops further reads.
        """
        if cancel is not None and cancel.is_set():
            logger.debug("Read of %s cancelled before open", path)
            return

        try:
            source = await self.provider.open_read(path)
        except Exception as exc:
            raise OpenFailure(path, exc) from exc
        logger.debug("Opened %s for read", path)

        try:
            async with aclosing(self._blocks(source, path, cancel)) as blocks:
                async with aclosing(flatten(blocks)) as stream:
                    async for byte in stream:
                        yield byte
        finally:
            await source.aclose()

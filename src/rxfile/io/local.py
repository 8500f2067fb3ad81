"""Local file provider - blocking file calls pushed to worker threads."""

import asyncio
import logging
import os
from typing import BinaryIO, Optional

from .base import DEFAULT_READ_BLOCK_SIZE, FilePath

logger = logging.getLogger(__name__)


class LocalBlockSource:
    """Reads one local file as a sequence of blocks."""

    def __init__(self, file: BinaryIO, block_size: int = DEFAULT_READ_BLOCK_SIZE):
        self._file: Optional[BinaryIO] = file
        self._block_size = block_size
        self.reads_issued = 0
        self.bytes_read = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self._file is None:
            raise StopAsyncIteration
        self.reads_issued += 1
        block = await asyncio.to_thread(self._file.read, self._block_size)
        if not block:
            await self.aclose()
            raise StopAsyncIteration
        self.bytes_read += len(block)
        return block

    async def aclose(self) -> None:
        """Close the file if still open."""
        if self._file is not None:
            file, self._file = self._file, None
            await asyncio.to_thread(file.close)
            logger.debug("Closed %s after %d reads", getattr(file, "name", "<file>"), self.reads_issued)


class LocalBlockSink:
    """Writes blocks to one local file, in call order."""

    def __init__(self, file: BinaryIO, fsync: bool = False):
        self._file: Optional[BinaryIO] = file
        self._fsync = fsync
        self.writes_issued = 0
        self.bytes_written = 0

    async def write(self, block: bytes) -> None:
        if self._file is None:
            raise IOError("Write after close")
        self.writes_issued += 1
        await asyncio.to_thread(self._file.write, block)
        self.bytes_written += len(block)

    def _flush_and_close(self, file: BinaryIO) -> None:
        try:
            file.flush()
            if self._fsync:
                os.fsync(file.fileno())
        finally:
            file.close()

    async def abort(self) -> None:
        """Close without fsync; whatever was written stays on disk."""
        if self._file is not None:
            file, self._file = self._file, None
            await asyncio.to_thread(file.close)
            logger.debug("Aborted %s after %d writes", getattr(file, "name", "<file>"), self.writes_issued)

    async def close(self) -> None:
        """Flush (and fsync if requested) then close."""
        if self._file is not None:
            file, self._file = self._file, None
            await asyncio.to_thread(self._flush_and_close, file)
            logger.debug("Closed %s after %d writes", getattr(file, "name", "<file>"), self.writes_issued)


class LocalFileProvider:
    """Provider for paths on the local filesystem."""

    def __init__(self, block_size: int = DEFAULT_READ_BLOCK_SIZE, fsync: bool = False):
        if block_size <= 0:
            raise ValueError("block_size must be positive")
        self.block_size = block_size
        self.fsync = fsync

    async def open_read(self, path: FilePath) -> LocalBlockSource:
        file = await asyncio.to_thread(open, path, "rb")
        return LocalBlockSource(file, self.block_size)

    async def open_write(self, path: FilePath) -> LocalBlockSink:
        # "wb" truncates: a save always starts from byte zero
        file = await asyncio.to_thread(open, path, "wb")
        return LocalBlockSink(file, fsync=self.fsync)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Nothing is shared between files."""
        pass


def open_local_provider(block_size: int = DEFAULT_READ_BLOCK_SIZE, fsync: bool = False) -> LocalFileProvider:
    """Create a local file provider."""
    return LocalFileProvider(block_size=block_size, fsync=fsync)

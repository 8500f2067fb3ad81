"""Protocols for the block-oriented file handle providers."""

import os
from typing import AsyncIterator, Protocol, Union, runtime_checkable


FilePath = Union[str, os.PathLike]

DEFAULT_READ_BLOCK_SIZE = 8 * 1024


@runtime_checkable
class BlockSource(Protocol):
    """Lazy, cancellable sequence of blocks read from one open file."""

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...

    async def __anext__(self) -> bytes:
        """Read the next block; raise StopAsyncIteration at EOF, IOError on failure."""
        ...

    async def aclose(self) -> None:
        """Release the handle. Safe to call more than once."""
        ...


@runtime_checkable
class BlockSink(Protocol):
    """Accepts blocks for one file opened in write mode."""

    async def write(self, block: bytes) -> None:
        """Return once the provider acknowledged the block; raise IOError on failure."""
        ...

    async def close(self) -> None:
        """Flush and release the handle. Safe to call more than once."""
        ...

    async def abort(self) -> None:
        """Release the handle after a failed save without marking the content complete."""
        ...


@runtime_checkable
class FileProvider(Protocol):
    """Opens files as block sources or block sinks."""

    async def open_read(self, path: FilePath) -> BlockSource:
        ...

    async def open_write(self, path: FilePath) -> BlockSink:
        ...

    async def aclose(self) -> None:
        ...

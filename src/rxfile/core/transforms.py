"""Lazy adapters between block-level and byte-level sequences."""

from __future__ import annotations
from typing import AsyncIterable, AsyncIterator, Iterable, Union

from .model import SAVE_BUFF_SIZE

ByteSource = Union[AsyncIterable[int], Iterable[int]]


async def aiter_bytes(data: ByteSource) -> AsyncIterator[int]:
    """Iterate `data` asynchronously whether it is a sync or async iterable."""
    if hasattr(data, "__aiter__"):
        async for byte in data:
            yield byte
    else:
        for byte in data:
            yield byte


async def flatten(blocks: AsyncIterable[bytes]) -> AsyncIterator[int]:
    """Expand each block into its bytes, block order and byte order preserved."""
    async for block in blocks:
        for byte in block:
            yield byte


async def rechunk(data: ByteSource, max_size: int = SAVE_BUFF_SIZE) -> AsyncIterator[bytes]:
    """Group single bytes into blocks of `max_size`; only the last block may be shorter.

    An empty input yields no blocks at all.
    """
    if max_size <= 0:
        raise ValueError("max_size must be positive")

    buf = bytearray()
    async for byte in aiter_bytes(data):
        buf.append(byte)
        if len(buf) >= max_size:
            yield bytes(buf)
            buf.clear()
    if buf:
        yield bytes(buf)


async def collect(stream: ByteSource) -> bytes:
    """Drain a byte sequence into a single bytes object."""
    buf = bytearray()
    async for byte in aiter_bytes(stream):
        buf.append(byte)
    return bytes(buf)

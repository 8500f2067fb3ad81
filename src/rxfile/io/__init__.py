"""I/O layer for rxfile - block-oriented file handle providers."""

# Re-export these for import convenience
from .base import BlockSink, BlockSource, FileProvider, FilePath, DEFAULT_READ_BLOCK_SIZE
from .local import LocalFileProvider, open_local_provider
from .http_async import HTTPFileProvider, open_http_provider


def is_url(location) -> bool:
    return str(location).startswith(('http://', 'https://'))


def open_provider(location, *, block_size: int = DEFAULT_READ_BLOCK_SIZE, fsync: bool = False):
    """Factory function to create the provider that can handle `location`."""
    if is_url(location):
        return open_http_provider()
    return open_local_provider(block_size=block_size, fsync=fsync)


__all__ = [
    "BlockSink", "BlockSource", "FileProvider", "FilePath", "DEFAULT_READ_BLOCK_SIZE",
    "LocalFileProvider", "HTTPFileProvider",
    "open_provider", "open_local_provider", "open_http_provider", "is_url",
]

"""rxfile - a file as a lazy byte stream, and a byte stream persisted to a file."""

from .core.model import (                                             # re-export
    SAVE_BUFF_SIZE, Completion, StreamError,
    OpenFailure, ReadFailure, WriteFailure, SourceFailure,
)
from .core.settle import SettlePolicy, NoSettle, FixedDelay, settle_policy, LEGACY_SETTLE_MS
from .core.transforms import flatten, rechunk, collect
from .io import FileProvider, open_provider
from .reader import FileReader
from .writer import FileWriter


class RxFile:
    """One file, read with flow() and written with save()."""

    def __init__(self, path, provider: FileProvider, *, settle: SettlePolicy | None = None,
                 buffer_size: int = SAVE_BUFF_SIZE):
        self.path = path
        self._reader = FileReader(provider)
        self._writer = FileWriter(provider, settle=settle, buffer_size=buffer_size)

    def flow(self, cancel=None):
        """Read the file content as a lazy stream of bytes."""
        return self._reader.flow(self.path, cancel=cancel)

    async def save(self, data) -> None:
        """Save a stream of bytes to the file."""
        await self._writer.save(self.path, data)


def flow(path, provider: FileProvider, *, cancel=None):
    """Stream the bytes of `path` (lazy; opens on first iteration)."""
    return FileReader(provider).flow(path, cancel=cancel)


async def save(path, data, provider: FileProvider, *, settle: SettlePolicy | None = None,
               buffer_size: int = SAVE_BUFF_SIZE) -> None:
    """Persist the byte sequence `data` to `path`, raising on failure."""
    await FileWriter(provider, settle=settle, buffer_size=buffer_size).save(path, data)


__all__ = [
    "RxFile", "FileReader", "FileWriter", "flow", "save",
    "flatten", "rechunk", "collect", "open_provider",
    "SettlePolicy", "NoSettle", "FixedDelay", "settle_policy", "LEGACY_SETTLE_MS",
    "SAVE_BUFF_SIZE", "Completion", "StreamError",
    "OpenFailure", "ReadFailure", "WriteFailure", "SourceFailure",
]

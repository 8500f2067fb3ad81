"""Writer: persist a lazy byte sequence through bounded, sequential block writes."""

from __future__ import annotations
import logging

from .core.model import SAVE_BUFF_SIZE, OpenFailure, SourceFailure, WriteFailure
from .core.settle import NoSettle, SettlePolicy
from .core.transforms import ByteSource, rechunk
from .io.base import BlockSink, FilePath, FileProvider

logger = logging.getLogger(__name__)


class FileWriter:
    """Re-chunks bytes into blocks of at most `buffer_size` and writes them in order.

    Each block is written only after the previous write was acknowledged.
    Success is reported after the sink closed and the settle policy ran.
    """

    def __init__(self, provider: FileProvider, settle: SettlePolicy | None = None,
                 buffer_size: int = SAVE_BUFF_SIZE):
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.provider = provider
        self.settle = settle if settle is not None else NoSettle()
        self.buffer_size = buffer_size

    async def _stream(self, sink: BlockSink, path: FilePath, data: ByteSource) -> int:
        written = 0
        blocks = rechunk(data, self.buffer_size)
        try:
            while True:
                try:
                    block = await anext(blocks)
                except StopAsyncIteration:
                    return written
                except Exception as exc:
                    raise SourceFailure(path, exc) from exc

                try:
                    await sink.write(block)
                except Exception as exc:
                    raise WriteFailure(path, exc) from exc
                written += len(block)
                logger.debug("Flushed %d bytes to %s", len(block), path)
        finally:
            await blocks.aclose()

    async def save(self, path: FilePath, data: ByteSource) -> None:
        """Write `data` to `path`, replacing existing content.

        Returns None on success; raises OpenFailure, SourceFailure or
        WriteFailure otherwise. A failed save aborts the sink instead of closing
        it, so the provider never treats the partial content as complete.
        """
        try:
            sink = await self.provider.open_write(path)
        except Exception as exc:
            raise OpenFailure(path, exc) from exc
        logger.debug("Opened %s for write", path)

        try:
            written = await self._stream(sink, path, data)
        except BaseException as exc:
            try:
                await sink.abort()
            except Exception as abort_exc:
                logger.warning("Aborting %s after %s also failed: %s",
                               path, type(exc).__name__, abort_exc)
            raise

        try:
            await sink.close()
        except Exception as exc:
            raise WriteFailure(path, exc) from exc

        await self.settle.settle()
        logger.debug("Saved %d bytes to %s", written, path)

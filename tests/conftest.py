"""In-memory file provider with call counters and fault injection."""

import asyncio

import pytest


class FakeSource:
    def __init__(self, provider, blocks, fail_after=None):
        self.provider = provider
        self._blocks = list(blocks)
        self._fail_after = fail_after
        self._index = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed:
            raise StopAsyncIteration
        self.provider.reads_issued += 1
        await asyncio.sleep(0)
        if self._fail_after is not None and self._index >= self._fail_after:
            raise IOError("disk on fire")
        if self._index >= len(self._blocks):
            raise StopAsyncIteration
        block = self._blocks[self._index]
        self._index += 1
        return block

    async def aclose(self):
        self.closed = True


class FakeSink:
    def __init__(self, provider, path, fail_on=None, fail_close=False, fail_abort=False):
        self.provider = provider
        self.path = path
        self.blocks = []
        self.attempts = 0
        self.closed = False
        self.aborted = False
        self._fail_abort = fail_abort
        self._fail_on = fail_on
        self._fail_close = fail_close
        self._in_flight = 0
        self.max_in_flight = 0

    async def write(self, block):
        self.attempts += 1
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(0)
            if self._fail_on is not None and self.attempts == self._fail_on:
                raise IOError("write rejected")
            self.blocks.append(bytes(block))
        finally:
            self._in_flight -= 1

    async def close(self):
        self.closed = True
        self.provider.files[self.path] = b"".join(self.blocks)
        self.provider.events.append("close")
        if self._fail_close:
            raise IOError("flush failed")

    async def abort(self):
        self.aborted = True
        self.provider.events.append("abort")
        if self._fail_abort:
            raise IOError("abort failed")


class FakeProvider:
    """Stores files in a dict and splits them into `block_size` blocks on read."""

    def __init__(self, files=None, block_size=4):
        self.files = dict(files or {})
        self.block_size = block_size
        self.reads_issued = 0
        self.opened = 0
        self.fail_open = False
        self.fail_read_after = None     # block index
        self.fail_write_on = None       # 1-based block number
        self.fail_close = False
        self.fail_abort = False
        self.sources = []
        self.sinks = []
        self.events = []

    async def open_read(self, path):
        self.opened += 1
        if self.fail_open or path not in self.files:
            raise FileNotFoundError(path)
        data = self.files[path]
        blocks = [data[i:i + self.block_size] for i in range(0, len(data), self.block_size)]
        source = FakeSource(self, blocks, self.fail_read_after)
        self.sources.append(source)
        return source

    async def open_write(self, path):
        self.opened += 1
        if self.fail_open:
            raise PermissionError(path)
        sink = FakeSink(self, path, self.fail_write_on, self.fail_close, self.fail_abort)
        self.sinks.append(sink)
        return sink

    async def aclose(self):
        pass


@pytest.fixture
def provider():
    return FakeProvider()

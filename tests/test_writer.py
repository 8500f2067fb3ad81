"""Tests for FileWriter.save()."""

import asyncio

import pytest

from rxfile import (FileWriter, OpenFailure, ReadFailure, RxFile, SAVE_BUFF_SIZE,
                    SourceFailure, WriteFailure, flow, save)


class RecordingSettle:
    def __init__(self, provider):
        self.provider = provider

    async def settle(self):
        self.provider.events.append("settle")


class TestSave:

    @pytest.mark.asyncio
    async def test_writes_bounded_blocks_in_order(self, provider):
        data = bytes(i % 256 for i in range(2 * SAVE_BUFF_SIZE + 10))

        await FileWriter(provider).save("out.bin", data)

        sink = provider.sinks[0]
        assert [len(b) for b in sink.blocks] == [SAVE_BUFF_SIZE, SAVE_BUFF_SIZE, 10]
        assert provider.files["out.bin"] == data
        assert sink.closed

    @pytest.mark.asyncio
    async def test_writes_are_sequential(self, provider):
        await save("out.bin", bytes(100), provider, buffer_size=7)
        assert provider.sinks[0].max_in_flight == 1
        assert len(provider.sinks[0].blocks) == 15

    @pytest.mark.asyncio
    async def test_accepts_async_byte_sequence(self, provider):
        async def gen():
            for b in b"ABC":
                await asyncio.sleep(0)
                yield b

        await RxFile("t.bin", provider).save(gen())
        assert provider.files["t.bin"] == b"ABC"

    @pytest.mark.asyncio
    async def test_empty_sequence_still_succeeds(self, provider):
        settle = RecordingSettle(provider)

        assert await save("empty.bin", [], provider, settle=settle) is None

        assert provider.files["empty.bin"] == b""
        assert provider.sinks[0].blocks == []
        assert provider.events == ["close", "settle"]

    @pytest.mark.asyncio
    async def test_settle_runs_after_close(self, provider):
        await FileWriter(provider, settle=RecordingSettle(provider)).save("a", b"xyz")
        assert provider.events == ["close", "settle"]

    def test_rejects_non_positive_buffer(self, provider):
        with pytest.raises(ValueError):
            FileWriter(provider, buffer_size=0)


class TestSaveFailures:

    @pytest.mark.asyncio
    async def test_open_failure(self, provider):
        provider.fail_open = True

        with pytest.raises(OpenFailure) as exc_info:
            await save("out.bin", b"abc", provider)

        assert isinstance(exc_info.value.cause, PermissionError)
        assert provider.sinks == []

    @pytest.mark.asyncio
    async def test_write_failure_aborts_remaining_blocks(self, provider):
        provider.fail_write_on = 3
        settle = RecordingSettle(provider)

        with pytest.raises(WriteFailure) as exc_info:
            await save("out.bin", bytes(50), provider, settle=settle, buffer_size=5)

        sink = provider.sinks[0]
        # the third write was the last one attempted
        assert sink.attempts == 3
        assert len(sink.blocks) == 2
        assert sink.aborted and not sink.closed
        assert provider.events == ["abort"]
        assert "out.bin" not in provider.files
        assert str(exc_info.value.cause) == "write rejected"

    @pytest.mark.asyncio
    async def test_source_failure(self, provider):
        async def broken():
            for b in b"abcdef":
                yield b
            raise ValueError("source broke")

        settle = RecordingSettle(provider)
        with pytest.raises(SourceFailure) as exc_info:
            await save("out.bin", broken(), provider, settle=settle, buffer_size=4)

        assert isinstance(exc_info.value.cause, ValueError)
        assert provider.sinks[0].blocks == [b"abcd"]
        assert provider.sinks[0].aborted and not provider.sinks[0].closed
        assert provider.events == ["abort"]

    @pytest.mark.asyncio
    async def test_invalid_byte_value_is_source_failure(self, provider):
        with pytest.raises(SourceFailure):
            await save("out.bin", [1, 2, 300], provider)

    @pytest.mark.asyncio
    async def test_close_failure_is_write_failure(self, provider):
        provider.fail_close = True
        settle = RecordingSettle(provider)

        with pytest.raises(WriteFailure):
            await save("out.bin", b"abc", provider, settle=settle)

        assert "settle" not in provider.events

    @pytest.mark.asyncio
    async def test_abort_failure_after_write_failure_keeps_original(self, provider):
        provider.fail_write_on = 1
        provider.fail_abort = True

        with pytest.raises(WriteFailure) as exc_info:
            await save("out.bin", b"abc", provider)

        assert str(exc_info.value.cause) == "write rejected"

    @pytest.mark.asyncio
    async def test_read_failure_surfaces_through_save(self, provider):
        provider.files["src"] = b"abcdefghijkl"
        provider.fail_read_after = 1

        with pytest.raises(SourceFailure) as exc_info:
            await save("dst", flow("src", provider), provider)

        assert isinstance(exc_info.value.cause, ReadFailure)

    @pytest.mark.asyncio
    async def test_cancelled_save_aborts_sink(self, provider):
        async def endless():
            while True:
                await asyncio.sleep(0)
                yield 0

        task = asyncio.create_task(save("out.bin", endless(), provider, buffer_size=4))
        while not provider.sinks or not provider.sinks[0].blocks:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert provider.sinks[0].aborted
        assert not provider.sinks[0].closed

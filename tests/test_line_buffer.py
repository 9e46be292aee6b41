"""Tests for the line buffer and its stream source."""

import asyncio
import io
import os

import pytest

from ksecret.exceptions import InputClosedError, LineRequestPendingError
from ksecret.secrets.prompts import LineBuffer, StreamLineSource


def make_buffer(text: str = "") -> LineBuffer:
    return LineBuffer(io.StringIO(text), io.StringIO())


class TestLineBufferQueue:
    """Tests for line delivery through on_line and request_line."""

    @pytest.mark.asyncio
    async def test_queued_lines_are_fifo(self):
        """Test that lines arriving before requests are handed out in order."""
        buffer = make_buffer()
        for line in ("a", "b", "c"):
            buffer.on_line(line)

        assert await buffer.request_line("") == "a"
        assert await buffer.request_line("") == "b"
        assert await buffer.request_line("") == "c"

    @pytest.mark.asyncio
    async def test_waiter_receives_next_line(self):
        """Test that a line arriving while a request waits goes to that request only."""
        buffer = make_buffer()

        future = buffer.request_line("")
        assert not future.done()
        buffer.on_line("x")

        assert await future == "x"
        assert not buffer.request_line("").done()

    @pytest.mark.asyncio
    async def test_second_request_while_pending(self):
        """Test that a second request fails without disturbing the first."""
        buffer = make_buffer()
        first = buffer.request_line("")

        with pytest.raises(LineRequestPendingError):
            buffer.request_line("")

        buffer.on_line("v")
        assert await first == "v"

    @pytest.mark.asyncio
    async def test_request_after_resolution(self):
        """Test that a new request is allowed once the previous one resolved."""
        buffer = make_buffer()
        first = buffer.request_line("")
        buffer.on_line("1")
        await first

        second = buffer.request_line("")
        buffer.on_line("2")

        assert await second == "2"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_swallow_line(self):
        """Test that a line arriving after the waiter was cancelled is queued."""
        buffer = make_buffer()
        buffer.request_line("").cancel()

        buffer.on_line("kept")

        assert await buffer.request_line("") == "kept"


class TestLineBufferEof:
    """Tests for end-of-input handling."""

    @pytest.mark.asyncio
    async def test_eof_fails_waiter(self):
        """Test that a waiting request fails when input ends."""
        buffer = make_buffer()
        future = buffer.request_line("")

        buffer.on_eof()

        with pytest.raises(InputClosedError):
            await future

    @pytest.mark.asyncio
    async def test_queued_lines_survive_eof(self):
        """Test that lines queued before EOF are still handed out."""
        buffer = make_buffer()
        buffer.on_line("a")
        buffer.on_eof()

        assert await buffer.request_line("") == "a"
        with pytest.raises(InputClosedError):
            await buffer.request_line("")


class TestLineBufferLifecycle:
    """Tests for opening and closing the buffer."""

    @pytest.mark.asyncio
    async def test_drains_in_memory_stream(self):
        """Test that all lines of a stream are delivered, including an unterminated last one."""
        async with make_buffer("one\ntwo\r\nthree") as buffer:
            assert await buffer.request_line("") == "one"
            assert await buffer.request_line("") == "two"
            assert await buffer.request_line("") == "three"
            with pytest.raises(InputClosedError):
                await buffer.request_line("")

    @pytest.mark.asyncio
    async def test_empty_lines_are_values(self):
        """Test that a blank line is a value, not the end of input."""
        async with make_buffer("\nlast\n") as buffer:
            assert await buffer.request_line("") == ""
            assert await buffer.request_line("") == "last"

    @pytest.mark.asyncio
    async def test_close_cancels_waiter(self):
        """Test that closing the buffer cancels a pending request."""
        buffer = make_buffer()
        future = buffer.request_line("")

        buffer.close()

        assert future.cancelled()

    @pytest.mark.asyncio
    async def test_request_after_close_fails(self):
        """Test that a request made after closing fails instead of waiting forever."""
        buffer = make_buffer()
        buffer.close()

        with pytest.raises(InputClosedError):
            await asyncio.wait_for(buffer.request_line(""), timeout=5)

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self):
        """Test that opening twice does not read the stream twice."""
        buffer = make_buffer("only\n")
        buffer.open()
        buffer.open()

        assert await buffer.request_line("") == "only"
        with pytest.raises(InputClosedError):
            await buffer.request_line("")
        buffer.close()

    @pytest.mark.asyncio
    async def test_reads_from_file_descriptor(self):
        """Test that a pipe is read on a background thread."""
        read_fd, write_fd = os.pipe()
        os.write(write_fd, b"first\nsecond\ntail")
        os.close(write_fd)

        with open(read_fd, encoding="utf-8") as stream:
            async with LineBuffer(stream, io.StringIO()) as buffer:
                assert await asyncio.wait_for(buffer.request_line(""), timeout=5) == "first"
                assert await asyncio.wait_for(buffer.request_line(""), timeout=5) == "second"
                assert await asyncio.wait_for(buffer.request_line(""), timeout=5) == "tail"
                with pytest.raises(InputClosedError):
                    await asyncio.wait_for(buffer.request_line(""), timeout=5)


class TestPrompts:
    """Tests for prompt display."""

    @pytest.mark.asyncio
    async def test_prompt_written_for_terminal(self, tty_stream):
        """Test that prompts are shown when input is a terminal."""
        out = io.StringIO()

        async with LineBuffer(tty_stream("v\n"), out) as buffer:
            await buffer.request_line("Value: ")

        assert buffer.interactive
        assert out.getvalue() == "Value: "

    @pytest.mark.asyncio
    async def test_no_prompt_for_piped_input(self):
        """Test that prompts are suppressed when input is redirected."""
        out = io.StringIO()

        async with LineBuffer(io.StringIO("v\n"), out) as buffer:
            await buffer.request_line("Value: ")

        assert not buffer.interactive
        assert out.getvalue() == ""


class TestStreamLineSource:
    """Tests for StreamLineSource."""

    @pytest.mark.asyncio
    async def test_stopped_source_delivers_nothing(self):
        """Test that a stopped source neither emits lines nor EOF."""
        lines: list[str] = []
        eofs: list[bool] = []
        source = StreamLineSource(io.StringIO("a\nb\n"), lines.append, lambda: eofs.append(True))

        source.stop()
        source.start(asyncio.get_running_loop())

        assert lines == []
        assert eofs == []

    @pytest.mark.asyncio
    async def test_strips_terminators(self):
        """Test that LF and CRLF terminators are removed."""
        lines: list[str] = []
        eofs: list[bool] = []
        source = StreamLineSource(io.StringIO("a\r\nb\n"), lines.append, lambda: eofs.append(True))

        source.start(asyncio.get_running_loop())

        assert lines == ["a", "b"]
        assert eofs == [True]

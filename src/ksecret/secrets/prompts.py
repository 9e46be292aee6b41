"""Buffered line input for interactive and piped secret values.

Reading one line per prompt straight from the terminal drops or reorders input
when several lines arrive in one read, which is what happens when a user pastes
a block of text or redirects a file into stdin. LineBuffer reads lines as soon
as they arrive, queues the ones nobody has asked for yet, and hands them out
one request at a time on the asyncio event loop.
"""

import asyncio
import codecs
import contextlib
import os
import threading
from collections import deque
from collections.abc import Callable
from types import TracebackType
from typing import TextIO

from icecream import ic

from ksecret.exceptions import InputClosedError, LineRequestPendingError

_READ_SIZE = 65536


def _strip_terminator(line: str) -> str:
    """Remove a trailing newline (and carriage return) from a line."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _file_descriptor(stream: TextIO) -> int | None:
    """Return the stream's file descriptor, or None for in-memory streams."""
    try:
        return stream.fileno()
    except (OSError, ValueError):
        # io.UnsupportedOperation derives from both
        return None


class StreamLineSource:
    """Emits the lines of a stream to callbacks running on an event loop.

    Streams backed by a file descriptor are read on a daemon thread with
    ``os.read``, so a blocked terminal read never holds a lock on ``sys.stdin``
    and never keeps the process alive once the source is stopped. In-memory
    streams have all their content available up front and are drained
    synchronously by start().

    Attributes:
        stream: The stream lines are read from.

    """

    def __init__(self, stream: TextIO, on_line: Callable[[str], None], on_eof: Callable[[], None]) -> None:
        self.stream = stream
        self._on_line = on_line
        self._on_eof = on_eof
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stopped = threading.Event()

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Begin delivering lines to the callbacks.

        Args:
            loop: The event loop the callbacks must run on.

        """
        self._loop = loop
        fd = _file_descriptor(self.stream)
        if fd is None:
            self._drain()
            return

        self._thread = threading.Thread(target=self._read_fd, args=(fd,), daemon=True, name="ksecret-line-source")
        self._thread.start()

    def stop(self) -> None:
        """Stop delivering lines. Lines read afterwards are discarded."""
        self._stopped.set()

    def _drain(self) -> None:
        for line in self.stream:
            if self._stopped.is_set():
                return
            self._on_line(_strip_terminator(line))
        self._on_eof()

    def _read_fd(self, fd: int) -> None:
        encoding = getattr(self.stream, "encoding", None) or "utf-8"
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        pending = ""
        while not self._stopped.is_set():
            try:
                chunk = os.read(fd, _READ_SIZE)
            except OSError as err:
                ic(err)
                break
            if not chunk:
                break
            pending += decoder.decode(chunk)
            *lines, pending = pending.split("\n")
            for line in lines:
                self._post(self._on_line, _strip_terminator(line))

        pending += decoder.decode(b"", final=True)
        if pending:
            self._post(self._on_line, _strip_terminator(pending))
        self._post(self._on_eof)

    def _post(self, callback: Callable[..., None], *args: str) -> None:
        loop = self._loop
        if loop is None or self._stopped.is_set() or loop.is_closed():
            return
        # The loop may still shut down between the check above and this call.
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(self._deliver, callback, *args)

    def _deliver(self, callback: Callable[..., None], *args: str) -> None:
        if not self._stopped.is_set():
            callback(*args)


class LineBuffer:
    """Hands out input lines one request at a time, whenever they arrive.

    Lines that arrive before anyone asks for them are queued; a request made
    while the queue is empty becomes the single outstanding waiter and is
    fulfilled by the next line. Only one request may be outstanding at a time.

    The buffer must be closed once all lines have been read, otherwise an
    interactive user has to end the input stream by hand. Using it as an async
    context manager guarantees that on every exit path::

        async with LineBuffer(sys.stdin, sys.stdout) as buffer:
            value = await buffer.request_line("New value for password: ")

    Attributes:
        interactive: True if input comes from a terminal; prompts are only
            written in that case.

    """

    def __init__(self, instream: TextIO, outstream: TextIO) -> None:
        """Create a buffer over the given streams.

        Args:
            instream: The stream to read input from.
            outstream: The stream prompts are written to. Ignored if instream
                is not a terminal.

        """
        self.interactive: bool = instream.isatty()
        self._outstream: TextIO | None = outstream if self.interactive else None
        self._source = StreamLineSource(instream, self.on_line, self.on_eof)
        self._lines: deque[str] = deque()
        self._waiter: asyncio.Future[str] | None = None
        self._eof: bool = False
        self._opened: bool = False
        self._closed: bool = False

    async def __aenter__(self) -> "LineBuffer":
        """Open the buffer.

        Returns:
            The LineBuffer instance.

        """
        self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the buffer, whether or not the block succeeded."""
        self.close()

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return (
            f"LineBuffer(interactive={self.interactive!r}, queued={len(self._lines)}, "
            f"waiting={self._waiter is not None}, eof={self._eof!r})"
        )

    def open(self) -> None:
        """Start reading lines from the input stream.

        Must be called from within a running event loop.
        """
        if self._opened:
            return
        self._opened = True
        self._source.start(asyncio.get_running_loop())

    def close(self) -> None:
        """Release the input stream and fail any request still waiting.

        Requests made after closing fail with InputClosedError.
        """
        if self._closed:
            return
        self._closed = True
        self._eof = True
        self._source.stop()
        waiter, self._waiter = self._waiter, None
        if waiter is not None and not waiter.done():
            waiter.cancel()

    def request_line(self, prompt: str) -> "asyncio.Future[str]":
        """Request the next line of input.

        Args:
            prompt: Text shown to the user before the line is read. Only
                written when input is interactive, and written even when a
                line is already queued so pasted values still show their
                prompt.

        Returns:
            A future resolved with the oldest queued line, or with the next
            line to arrive if none is queued.

        Raises:
            LineRequestPendingError: If a previously requested line has not
                arrived yet. The earlier request is left untouched.

        """
        if self._waiter is not None and not self._waiter.done():
            raise LineRequestPendingError("request_line called before the previous request was resolved")

        self._show_prompt(prompt)
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        if self._lines:
            future.set_result(self._lines.popleft())
        elif self._eof:
            future.set_exception(InputClosedError("Input ended before all values were read"))
        else:
            self._waiter = future
        return future

    def on_line(self, line: str) -> None:
        """Accept one line from the line source.

        Args:
            line: The line read, without its terminator.

        """
        waiter, self._waiter = self._waiter, None
        if waiter is not None and not waiter.done():
            waiter.set_result(line)
        else:
            self._lines.append(line)

    def on_eof(self) -> None:
        """Accept the end of the input stream.

        A request still waiting at this point can never be satisfied, so it
        fails with InputClosedError instead of hanging.
        """
        self._eof = True
        waiter, self._waiter = self._waiter, None
        if waiter is not None and not waiter.done():
            waiter.set_exception(InputClosedError("Input ended before all values were read"))

    def _show_prompt(self, prompt: str) -> None:
        if self._outstream is None:
            return
        self._outstream.write(prompt)
        self._outstream.flush()

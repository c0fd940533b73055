"""Non-blocking drain loop over a child's stdout and stderr."""

from __future__ import annotations

import logging
import os
import selectors
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import IO

from technicolor.core.buffer import DEFAULT_ENCODING, StreamBuffer
from technicolor.core.matcher import LineColorizer
from technicolor.core.writer import SegmentWriter

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32768
POLL_TIMEOUT = 0.0005  # seconds
SLEEP_INTERVAL = 0.01  # seconds

# A raw file descriptor or anything with fileno()
Source = int | IO[bytes]


class StreamState(Enum):
    """State of one input stream."""

    OPEN = auto()
    CLOSED = auto()


class LoopState(Enum):
    """State of the drain loop as a whole."""

    IDLE = auto()
    RUNNING = auto()
    DONE = auto()


@dataclass
class StreamStats:
    """Counters for one stream."""

    bytes_read: int = 0
    lines: int = 0
    partial: bool = False


@dataclass
class DrainStats:
    """Counters for a finished drain."""

    stdout: StreamStats = field(default_factory=StreamStats)
    stderr: StreamStats = field(default_factory=StreamStats)


class StreamChannel:
    """One input stream with its buffer and output sink."""

    def __init__(
        self,
        name: str,
        source: Source,
        writer: SegmentWriter,
        is_stderr: bool,
        stats: StreamStats,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.name = name
        self.fd = source if isinstance(source, int) else source.fileno()
        self.writer = writer
        self.is_stderr = is_stderr
        self.stats = stats
        self.buffer = StreamBuffer(encoding)
        self.state = StreamState.OPEN

    @property
    def is_open(self) -> bool:
        return self.state is StreamState.OPEN

    def close(self) -> None:
        self.state = StreamState.CLOSED


class DrainLoop:
    """Drains two byte streams into colorized line output.

    A single thread polls both sources with a short readiness timeout, so
    neither stream can block the other. Completed lines are colorized and
    written to the matching sink as soon as they are seen; line order within
    a stream is preserved, while lines of different streams interleave in
    whatever order they become available. The loop ends once both sources
    report end of data, after writing any unterminated trailing text as is.
    """

    def __init__(
        self,
        colorizer: LineColorizer,
        stdout_source: Source,
        stderr_source: Source,
        stdout_writer: SegmentWriter,
        stderr_writer: SegmentWriter,
        chunk_size: int = CHUNK_SIZE,
        poll_timeout: float = POLL_TIMEOUT,
        sleep_interval: float = SLEEP_INTERVAL,
        encoding: str = DEFAULT_ENCODING,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the loop.

        Args:
            colorizer: Line colorizer (shared by both streams)
            stdout_source: Readable end of the child's stdout
            stderr_source: Readable end of the child's stderr
            stdout_writer: Sink for stdout lines
            stderr_writer: Sink for stderr lines
            chunk_size: Maximum bytes per read
            poll_timeout: Readiness wait per iteration, in seconds
            sleep_interval: Sleep when an iteration read nothing, in seconds
            encoding: Encoding of the child's output
            sleep: Sleep function (replaceable in tests)
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.colorizer = colorizer
        self.chunk_size = chunk_size
        self.poll_timeout = poll_timeout
        self.sleep_interval = sleep_interval
        self._sleep = sleep
        self.stats = DrainStats()
        self.state = LoopState.IDLE
        self.channels = (
            StreamChannel("stdout", stdout_source, stdout_writer, False, self.stats.stdout, encoding),
            StreamChannel("stderr", stderr_source, stderr_writer, True, self.stats.stderr, encoding),
        )

    def run(self) -> DrainStats:
        """Run until both streams are closed and fully written.

        Returns:
            Byte and line counters per stream
        """
        self.state = LoopState.RUNNING
        with selectors.DefaultSelector() as selector:
            for channel in self.channels:
                selector.register(channel.fd, selectors.EVENT_READ, channel)

            while self.state is LoopState.RUNNING:
                got_data = self._read_available(selector)

                for channel in self.channels:
                    self._flush_lines(channel)

                if not any(channel.is_open for channel in self.channels):
                    self._flush_remainders()
                    self.state = LoopState.DONE
                    logger.debug("stdout and stderr both closed")
                elif not got_data:
                    self._sleep(self.sleep_interval)

        return self.stats

    def _read_available(self, selector: selectors.BaseSelector) -> bool:
        """Do one read on every ready stream; return True if any bytes arrived."""
        got_data = False
        for key, _events in selector.select(timeout=self.poll_timeout):
            channel: StreamChannel = key.data
            try:
                data = os.read(channel.fd, self.chunk_size)
            except BlockingIOError:
                continue
            except OSError as e:
                logger.warning("error reading %s, treating it as closed: %s", channel.name, e)
                data = b""

            if not data:
                logger.debug("%s reached end of data", channel.name)
                selector.unregister(channel.fd)
                channel.close()
                continue

            logger.debug("read %d bytes from %s", len(data), channel.name)
            channel.buffer.append(data)
            channel.stats.bytes_read += len(data)
            got_data = True
        return got_data

    def _flush_lines(self, channel: StreamChannel) -> None:
        """Colorize and write every completed line in a channel's buffer."""
        while True:
            line = channel.buffer.pop_line()
            if line is None:
                break
            channel.writer.write_line(self.colorizer.colorize(line, channel.is_stderr))
            channel.stats.lines += 1

    def _flush_remainders(self) -> None:
        """Write unterminated trailing data without color."""
        for channel in self.channels:
            if channel.buffer:
                channel.writer.write_raw(channel.buffer.drain_remainder())
                channel.stats.partial = True

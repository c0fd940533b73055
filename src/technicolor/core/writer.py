"""Output sink writing colored segments as ANSI escape sequences."""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

from technicolor.core.buffer import DEFAULT_ENCODING
from technicolor.core.color import RESET_SEQUENCE
from technicolor.core.matcher import Segment


class SegmentWriter:
    """Writes colorized lines to a binary stream, flushing after each write."""

    def __init__(self, stream: BinaryIO, color: bool = True, encoding: str = DEFAULT_ENCODING) -> None:
        """Initialize the writer.

        Args:
            stream: Binary output (e.g. sys.stdout.buffer)
            color: Emit escape sequences; when False only the text is written
            encoding: Encoding used for the text
        """
        self.stream = stream
        self.color = color
        self.encoding = encoding

    def render(self, segments: Iterable[Segment]) -> str:
        """Render segments of one line, including the trailing newline."""
        if not self.color:
            return "".join(segment.text for segment in segments) + "\n"
        parts: list[str] = []
        for segment in segments:
            parts.append(segment.color.to_ansi())
            parts.append(segment.text)
            parts.append(RESET_SEQUENCE)
        parts.append("\n")
        return "".join(parts)

    def write_line(self, segments: Iterable[Segment]) -> None:
        """Write one colorized line."""
        self._write(self.render(segments))

    def write_raw(self, text: str) -> None:
        """Write text unchanged (no color, no newline)."""
        if text:
            self._write(text)

    def _write(self, text: str) -> None:
        self.stream.write(text.encode(self.encoding, errors="surrogateescape"))
        self.stream.flush()

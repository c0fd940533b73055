"""Per-stream accumulation of raw bytes into completed lines."""

from __future__ import annotations

DEFAULT_ENCODING = "utf-8"


class StreamBuffer:
    """Accumulates bytes read from one stream and hands out completed lines.

    Bytes are decoded only once a full line is available, so a multi-byte
    character split across two reads is reassembled before decoding.
    Undecodable bytes survive as surrogates (``surrogateescape``).
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        self.encoding = encoding
        self._data = bytearray()

    def append(self, data: bytes) -> None:
        """Add bytes read from the stream."""
        self._data.extend(data)

    def pop_line(self) -> str | None:
        """Remove and return the first completed line, without its newline.

        Returns:
            The line text, or None if no newline is buffered
        """
        index = self._data.find(b"\n")
        if index == -1:
            return None
        line = bytes(self._data[:index])
        del self._data[: index + 1]
        return self._decode(line)

    def drain_remainder(self) -> str:
        """Remove and return whatever is left (an unterminated line)."""
        rest = bytes(self._data)
        self._data.clear()
        return self._decode(rest)

    def _decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors="surrogateescape")

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

from collections import deque
from typing import BinaryIO

DEFAULT_CAPTURE_SIZE = 64


class ByteReader:
    """Reads a binary stream one byte at a time.

    Keeps a count of the bytes consumed and the last `capture_size` of them,
    so errors can show where in the input they happened.
    """

    def __init__(self, stream: BinaryIO, capture_size: int = DEFAULT_CAPTURE_SIZE):
        self.stream = stream
        self._position = 0
        self._captured = deque(maxlen=capture_size)
        self._peeked: bytes | None = None

    @property
    def position(self) -> int:
        return self._position

    def read_byte(self) -> bytes | None:
        """Consume the next byte, or return None at the end of the stream."""
        if self._peeked is not None:
            byte, self._peeked = self._peeked, None
        else:
            byte = self.stream.read(1)
            if not byte:
                return None

        self._position += 1
        self._captured.extend(byte)
        return byte

    def peek_byte(self) -> bytes | None:
        """Look at the next byte without consuming it."""
        if self._peeked is None:
            byte = self.stream.read(1)
            if not byte:
                return None
            self._peeked = byte
        return self._peeked

    def recent_bytes(self) -> bytes:
        return bytes(self._captured)


class ByteWriter:
    """Writes to a binary stream one byte at a time, tracking what went out."""

    def __init__(self, stream: BinaryIO, capture_size: int = DEFAULT_CAPTURE_SIZE):
        self.stream = stream
        self._position = 0
        self._captured = deque(maxlen=capture_size)

    @property
    def position(self) -> int:
        return self._position

    def write_byte(self, byte: bytes) -> None:
        self.stream.write(byte)
        self._position += 1
        self._captured.extend(byte)

    def recent_bytes(self) -> bytes:
        return bytes(self._captured)

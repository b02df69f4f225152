import codecs
import io
import logging
from dataclasses import dataclass
from enum import Enum, auto
from json.encoder import encode_basestring

from . import errors
from .errors import (
    BencodeError,
    Io,
    LeadingZerosInIntegersNotAllowed,
    MalformedLength,
    MaxNestingExceeded,
    TruncatedStringBody,
    UnexpectedByteParsingDictionary,
    UnexpectedByteParsingInteger,
    UnexpectedByteParsingList,
    UnexpectedByteParsingValue,
    UnexpectedEndOfInputParsingDictionary,
    UnexpectedEndOfInputParsingInteger,
    UnexpectedEndOfInputParsingList,
    UnexpectedEndOfInputParsingString,
    UnexpectedEndOfInputParsingValue,
    UnsortedDictionaryKeys,
)
from .streams import ByteReader, ByteWriter

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256


class IntegerState(Enum):
    START = auto()
    DIGIT_OR_SIGN = auto()
    DIGIT_AFTER_SIGN = auto()
    DIGIT_OR_END = auto()


def escape_json(text: str) -> bytes:
    """Escape text for the inside of a JSON string, encoded as UTF-8.

    Lone surrogates stand for input bytes that were not valid UTF-8. They have
    no UTF-8 encoding, so they are always written as \\u escapes.
    """
    out = []
    for char in text:
        if "\ud800" <= char <= "\udfff":
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(encode_basestring(char)[1:-1])
    return "".join(out).encode()


@dataclass
class Container:
    """A list or dictionary that has been opened but not closed yet"""

    kind: bytes
    first: bool = True
    previous_key: bytes | None = None


class Decoder:
    """Streams one bencoded value from `reader` to `writer` as JSON.

    Nothing is kept in memory apart from the current position in the grammar:
    bytes are written out as soon as they are known to be valid.
    """

    def __init__(
        self, reader: ByteReader, writer: ByteWriter, max_depth: int = DEFAULT_MAX_DEPTH
    ):
        self.reader = reader
        self.writer = writer
        self.max_depth = max_depth
        self.stack: list[Container] = []

    @property
    def depth(self) -> int:
        return len(self.stack)

    def decode(self) -> None:
        self.decode_one()
        logger.debug(
            f"Decoded value: read {self.reader.position} bytes, wrote {self.writer.position} bytes"
        )

    def decode_one(self) -> None:
        base = len(self.stack)
        self.start_value()
        self.close_containers(base)

    def start_value(self) -> None:
        """Decode a scalar, or open a container and leave it on the stack"""
        c = self.peek(UnexpectedEndOfInputParsingValue)
        match c:
            case _ if c.isdigit():
                self.read_string()

            case b"i":
                self.read_integer()

            case b"l":
                self.open_list()

            case b"d":
                self.open_dict()

            case _:
                self.advance(UnexpectedEndOfInputParsingValue)
                raise self.error(UnexpectedByteParsingValue, c)

    def read_integer(self) -> None:
        state = IntegerState.START
        first_digit_is_zero = False

        while True:
            c = self.advance(UnexpectedEndOfInputParsingInteger)

            match state:
                case IntegerState.START if c == b"i":
                    state = IntegerState.DIGIT_OR_SIGN

                case IntegerState.DIGIT_OR_SIGN if c == b"-":
                    self.emit(c)
                    state = IntegerState.DIGIT_AFTER_SIGN

                case IntegerState.DIGIT_OR_SIGN | IntegerState.DIGIT_AFTER_SIGN if c.isdigit():
                    self.emit(c)
                    first_digit_is_zero = c == b"0"
                    state = IntegerState.DIGIT_OR_END

                case IntegerState.DIGIT_OR_END if c.isdigit():
                    # Only the integer zero can start with zero
                    if first_digit_is_zero:
                        raise self.error(LeadingZerosInIntegersNotAllowed, c)
                    self.emit(c)

                case IntegerState.DIGIT_OR_END if c == b"e":
                    return

                case _:
                    raise self.error(UnexpectedByteParsingInteger, c)

    def read_string(self, keep: bool = False) -> bytes | None:
        """Write a byte string as a JSON string.

        Valid UTF-8 goes through as text, any other byte becomes the
        surrogateescape code point for it (U+DC80..U+DCFF), so the raw bytes
        can be recovered with `s.encode("utf-8", "surrogateescape")`.

        With `keep`, the raw bytes are also returned (dictionary keys need
        them for the ordering check).
        """
        length = None
        while True:
            c = self.advance(UnexpectedEndOfInputParsingString)
            if c == b":" and length is not None:
                break
            if not c.isdigit() or length == 0:
                raise self.error(MalformedLength, c)
            length = int(c) if length is None else length * 10 + int(c)

        self.emit(b'"')

        utf8 = codecs.getincrementaldecoder("utf-8")("surrogateescape")
        raw = bytearray() if keep else None
        for _ in range(length):
            c = self.advance(TruncatedStringBody)
            if raw is not None:
                raw += c
            self.emit(escape_json(utf8.decode(c)))
        self.emit(escape_json(utf8.decode(b"", final=True)))

        self.emit(b'"')

        return bytes(raw) if raw is not None else None

    def read_list(self) -> None:
        base = len(self.stack)
        self.open_list()
        self.close_containers(base)

    def read_dict(self) -> None:
        base = len(self.stack)
        self.open_dict()
        self.close_containers(base)

    def open_list(self) -> None:
        c = self.expect(b"l", UnexpectedByteParsingList, UnexpectedEndOfInputParsingList)
        self.push(Container(c))
        self.emit(b"[")

    def open_dict(self) -> None:
        c = self.expect(
            b"d", UnexpectedByteParsingDictionary, UnexpectedEndOfInputParsingDictionary
        )
        self.push(Container(c))
        self.emit(b"{")

    def push(self, container: Container) -> None:
        if len(self.stack) >= self.max_depth:
            raise self.error(MaxNestingExceeded, container.kind)
        self.stack.append(container)

    def close_containers(self, base: int) -> None:
        """Feed members to the open containers until the stack is back at `base`.

        Nested containers are pushed onto `self.stack` instead of recursing,
        so the nesting depth is bounded by `max_depth` alone.
        """
        while len(self.stack) > base:
            container = self.stack[-1]
            if container.kind == b"l":
                self.list_member(container)
            else:
                self.dict_member(container)

    def list_member(self, container: Container) -> None:
        if self.peek(UnexpectedEndOfInputParsingList) == b"e":
            self.advance(UnexpectedEndOfInputParsingList)
            self.emit(b"]")
            self.stack.pop()
            return

        if not container.first:
            self.emit(b",")
        container.first = False

        self.start_value()

    def dict_member(self, container: Container) -> None:
        c = self.peek(UnexpectedEndOfInputParsingDictionary)
        if c == b"e":
            self.advance(UnexpectedEndOfInputParsingDictionary)
            self.emit(b"}")
            self.stack.pop()
            return

        if not c.isdigit():
            self.advance(UnexpectedEndOfInputParsingDictionary)
            raise self.error(UnexpectedByteParsingDictionary, c)

        if not container.first:
            self.emit(b",")
        container.first = False

        key = self.read_string(keep=True)
        if container.previous_key is not None and key <= container.previous_key:
            raise self.error(UnsortedDictionaryKeys)
        container.previous_key = key

        self.emit(b":")

        self.peek(UnexpectedEndOfInputParsingDictionary)
        self.start_value()

    def peek(self, eof_error: type[BencodeError]) -> bytes:
        try:
            c = self.reader.peek_byte()
        except OSError as err:
            raise self.error(Io, error=err) from err

        if c is None:
            raise self.error(eof_error)
        return c

    def advance(self, eof_error: type[BencodeError]) -> bytes:
        try:
            c = self.reader.read_byte()
        except OSError as err:
            raise self.error(Io, error=err) from err

        if c is None:
            raise self.error(eof_error)
        return c

    def expect(
        self, char: bytes, error: type[BencodeError], eof_error: type[BencodeError]
    ) -> bytes:
        c = self.advance(eof_error)
        if c != char:
            raise self.error(error, c)
        return c

    def emit(self, data: bytes) -> None:
        for i in range(len(data)):
            byte = data[i : i + 1]
            try:
                self.writer.write_byte(byte)
            except OSError as err:
                raise self.error(Io, write_byte=byte, error=err) from err

    def error(
        self, error_cls: type[BencodeError], c: bytes | None = None, **kwargs
    ) -> BencodeError:
        return errors.capture(error_cls, self.reader, self.writer, c, **kwargs)


def parse_value(
    reader: ByteReader, writer: ByteWriter, max_depth: int = DEFAULT_MAX_DEPTH
) -> None:
    """Convert the next bencoded value of any kind to JSON."""
    Decoder(reader, writer, max_depth).decode()


def parse_integer(reader: ByteReader, writer: ByteWriter) -> None:
    Decoder(reader, writer).read_integer()


def parse_string(reader: ByteReader, writer: ByteWriter) -> None:
    Decoder(reader, writer).read_string()


def parse_list(
    reader: ByteReader, writer: ByteWriter, max_depth: int = DEFAULT_MAX_DEPTH
) -> None:
    Decoder(reader, writer, max_depth).read_list()


def parse_dictionary(
    reader: ByteReader, writer: ByteWriter, max_depth: int = DEFAULT_MAX_DEPTH
) -> None:
    Decoder(reader, writer, max_depth).read_dict()


def to_json(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Convert a complete bencoded value held in memory to a JSON string."""
    output = io.BytesIO()
    parse_value(ByteReader(io.BytesIO(data)), ByteWriter(output), max_depth)
    return output.getvalue().decode()

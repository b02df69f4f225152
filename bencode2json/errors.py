from dataclasses import dataclass

from .streams import ByteReader, ByteWriter


def _dump(data: bytes) -> str:
    return f"{list(data)} (UTF-8 string: `{data.decode('utf-8', 'replace')}`)"


@dataclass(frozen=True)
class ReadContext:
    byte: bytes | None
    pos: int
    latest_bytes: bytes

    def __str__(self):
        s = "read context:"
        if self.byte is not None:
            s += f" byte `{self.byte!r}`,"
        return f"{s} input pos {self.pos}, latest input bytes dump: {_dump(self.latest_bytes)}"


@dataclass(frozen=True)
class WriteContext:
    byte: bytes | None
    pos: int
    latest_bytes: bytes

    def __str__(self):
        s = "write context:"
        if self.byte is not None:
            s += f" byte `{self.byte!r}`,"
        return f"{s} output pos {self.pos}, latest output bytes dump: {_dump(self.latest_bytes)}"


class BencodeError(Exception):
    """Base class for everything the decoders raise.

    Carries a snapshot of both the input and the output stream at the moment
    of the failure.
    """

    message = "Bencode error"

    def __init__(self, read_context: ReadContext, write_context: WriteContext):
        super().__init__(read_context, write_context)
        self.read_context = read_context
        self.write_context = write_context

    def __str__(self):
        return f"{self.message}; {self.read_context}; {self.write_context}"


class UnexpectedEndOfInput(BencodeError):
    message = "Unexpected end of input"


class UnexpectedEndOfInputParsingInteger(UnexpectedEndOfInput):
    message = "Unexpected end of input parsing integer"


class UnexpectedEndOfInputParsingString(UnexpectedEndOfInput):
    message = "Unexpected end of input parsing string length"


class TruncatedStringBody(UnexpectedEndOfInput):
    message = "Unexpected end of input parsing string value"


class UnexpectedEndOfInputParsingList(UnexpectedEndOfInput):
    message = "Unexpected end of input parsing list. Expecting first list item or list end"


class UnexpectedEndOfInputParsingDictionary(UnexpectedEndOfInput):
    message = "Unexpected end of input parsing dictionary"


class UnexpectedEndOfInputParsingValue(UnexpectedEndOfInput):
    message = "Unexpected end of input expecting a value"


class UnexpectedByte(BencodeError):
    message = "Unexpected byte"


class UnexpectedByteParsingInteger(UnexpectedByte):
    message = "Unexpected byte parsing integer"


class UnexpectedByteParsingList(UnexpectedByte):
    message = "Unexpected byte parsing list"


class UnexpectedByteParsingDictionary(UnexpectedByte):
    message = "Unexpected byte parsing dictionary. Expecting a string key or dictionary end"


class UnexpectedByteParsingValue(UnexpectedByte):
    message = "Unrecognized first byte for new bencoded value"


class LeadingZerosInIntegersNotAllowed(BencodeError):
    message = "Leading zeros in integers are not allowed, for example 'i00e'"


class MalformedLength(BencodeError):
    message = "Invalid string length. Expecting decimal digits without leading zeros followed by ':'"


class UnsortedDictionaryKeys(BencodeError):
    message = "Dictionary keys must be unique and sorted by their raw bytes"


class MaxNestingExceeded(BencodeError):
    message = "Maximum nesting depth exceeded"


class Io(BencodeError):
    message = "I/O error"

    def __init__(self, read_context: ReadContext, write_context: WriteContext, error: OSError):
        super().__init__(read_context, write_context)
        self.error = error

    def __str__(self):
        return f"{self.message}: {self.error}; {self.read_context}; {self.write_context}"


def capture(
    error_cls: type[BencodeError],
    reader: ByteReader,
    writer: ByteWriter,
    read_byte: bytes | None = None,
    write_byte: bytes | None = None,
    **kwargs,
) -> BencodeError:
    """Build an error of the given kind with a snapshot of both streams."""
    return error_cls(
        ReadContext(read_byte, reader.position, reader.recent_bytes()),
        WriteContext(write_byte, writer.position, writer.recent_bytes()),
        **kwargs,
    )

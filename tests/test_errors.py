import io

import pytest
from bencode2json.errors import (
    BencodeError,
    Io,
    ReadContext,
    TruncatedStringBody,
    UnexpectedByte,
    UnexpectedByteParsingInteger,
    UnexpectedEndOfInput,
    WriteContext,
    capture,
)
from bencode2json.streams import ByteReader, ByteWriter


@pytest.fixture
def reader():
    r = ByteReader(io.BytesIO(b"i-1a"))
    while r.read_byte() is not None:
        pass
    return r


@pytest.fixture
def writer():
    w = ByteWriter(io.BytesIO())
    w.write_byte(b"-")
    w.write_byte(b"1")
    return w


def test_capture_snapshots_both_streams(reader, writer):
    """Test that the helper records position and latest bytes of each side."""
    err = capture(UnexpectedByteParsingInteger, reader, writer, b"a")

    assert isinstance(err, UnexpectedByteParsingInteger)
    assert err.read_context == ReadContext(b"a", 4, b"i-1a")
    assert err.write_context == WriteContext(None, 2, b"-1")


def test_snapshot_is_not_affected_by_later_reads(writer):
    """Test that contexts are copies, not views on the streams."""
    r = ByteReader(io.BytesIO(b"ab"))
    r.read_byte()
    err = capture(UnexpectedByteParsingInteger, r, writer)
    r.read_byte()

    assert err.read_context.pos == 1
    assert err.read_context.latest_bytes == b"a"


def test_str(reader, writer):
    """Test the one-line rendering of an error."""
    err = capture(UnexpectedByteParsingInteger, reader, writer, b"a")

    assert str(err) == (
        "Unexpected byte parsing integer; "
        "read context: byte `b'a'`, input pos 4, latest input bytes dump: "
        "[105, 45, 49, 97] (UTF-8 string: `i-1a`); "
        "write context: output pos 2, latest output bytes dump: [45, 49] (UTF-8 string: `-1`)"
    )


def test_io_error_keeps_the_original(reader, writer):
    """Test that the wrapped OSError is kept and shown."""
    cause = PermissionError("Permission denied")
    err = capture(Io, reader, writer, error=cause)

    assert err.error is cause
    assert str(err).startswith("I/O error: Permission denied; read context:")


def test_hierarchy():
    """Test the error families."""
    assert issubclass(TruncatedStringBody, UnexpectedEndOfInput)
    assert issubclass(UnexpectedByteParsingInteger, UnexpectedByte)
    assert issubclass(Io, BencodeError)
    assert not issubclass(Io, OSError)

from .bencode import (
    DEFAULT_MAX_DEPTH,
    Decoder,
    parse_dictionary,
    parse_integer,
    parse_list,
    parse_string,
    parse_value,
    to_json,
)
from .errors import BencodeError, ReadContext, WriteContext
from .streams import ByteReader, ByteWriter

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "BencodeError",
    "ByteReader",
    "ByteWriter",
    "Decoder",
    "ReadContext",
    "WriteContext",
    "parse_dictionary",
    "parse_integer",
    "parse_list",
    "parse_string",
    "parse_value",
    "to_json",
]

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import BinaryIO

import requests

from .bencode import DEFAULT_MAX_DEPTH, parse_value
from .errors import BencodeError
from .streams import ByteReader, ByteWriter

HTTP_TIMEOUT = 30

logger = logging.getLogger(__name__)


def open_input(location: str | None, stack: ExitStack) -> BinaryIO:
    """Open a local path, an http(s) URL, or stdin when no location is given"""
    if location is None:
        return sys.stdin.buffer

    if location.startswith(("http://", "https://")):
        r = requests.get(location, stream=True, timeout=HTTP_TIMEOUT)
        stack.callback(r.close)
        r.raise_for_status()
        r.raw.decode_content = True
        logger.debug(f"Streaming input from {location} ({r.status_code})")
        return r.raw

    return stack.enter_context(open(location, mode="rb"))


def open_output(location: str | None, stack: ExitStack) -> BinaryIO:
    if location is None:
        return sys.stdout.buffer
    return stack.enter_context(open(location, mode="wb"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bencode2json", description="Convert bencoded data to JSON."
    )
    parser.add_argument("-i", "--input", help="input file or http(s) URL (default: stdin)")
    parser.add_argument("-o", "--output", help="output file (default: stdout)")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"maximum nesting of lists and dictionaries (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        format="%(levelname)s:%(name)s:%(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    with ExitStack() as stack:
        try:
            source = open_input(args.input, stack)
            sink = open_output(args.output, stack)
        except (OSError, requests.RequestException) as err:
            logger.error(f"Cannot open stream: {err}")
            return 1

        status = 0
        try:
            parse_value(ByteReader(source), ByteWriter(sink), args.max_depth)
        except BencodeError as err:
            logger.error(f"{err}")
            status = 1

        try:
            sink.flush()
        except OSError as err:
            logger.error(f"Cannot flush output: {err}")
            status = 1

    return status

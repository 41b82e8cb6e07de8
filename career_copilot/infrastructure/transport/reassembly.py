"""
Reassembly of newline-delimited JSON streams into provider chunks.

The relay writes one JSON-encoded provider chunk per line. Network blocks do
not respect line boundaries, so bytes are buffered until a newline arrives.
"""
import json
import logging
from typing import Any, Iterable, Iterator, List

from ...exceptions import DecodeError
from .base import RawChunk

logger = logging.getLogger("reassembly")

NEWLINE = b"\n"


def _decode_line(line: bytes) -> RawChunk:
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Chunk is not valid UTF-8: {e}", snippet=repr(line))
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON chunk: {e}", snippet=text)
    return RawChunk.from_payload(obj)


class NdjsonReassembler:
    """Turns arbitrary byte blocks into parsed chunks, one per line."""

    def __init__(self):
        self._pending = b""

    @property
    def pending(self) -> bytes:
        """Bytes received after the last newline."""
        return self._pending

    def feed(self, block: bytes) -> Iterator[RawChunk]:
        """
        Add a block of bytes and return the chunks it completes.

        The block is buffered immediately; its lines are decoded one at a
        time as the returned iterator is consumed, so every chunk ahead of a
        malformed line is delivered before the error.

        Raises (while iterating):
            DecodeError: If a completed line is not valid JSON
        """
        self._pending += block
        *lines, self._pending = self._pending.split(NEWLINE)
        return self._decode_lines(lines)

    @staticmethod
    def _decode_lines(lines: List[bytes]) -> Iterator[RawChunk]:
        for line in lines:
            if line.strip():
                yield _decode_line(line)

    def flush(self) -> List[RawChunk]:
        """
        Parse whatever is left once the source is exhausted.

        Raises:
            DecodeError: If the remainder is not valid JSON
        """
        remainder, self._pending = self._pending, b""
        if not remainder.strip():
            return []
        logger.debug("Parsing unterminated final line (%d bytes)", len(remainder))
        return [_decode_line(remainder)]


def iter_ndjson(blocks: Iterable[bytes]) -> Iterator[RawChunk]:
    """Lazily reassemble a byte-block source into chunks, in arrival order."""
    reassembler = NdjsonReassembler()
    for block in blocks:
        yield from reassembler.feed(block)
    yield from reassembler.flush()


def single_chunk(payload: Any) -> Iterator[RawChunk]:
    """Present one full provider response as a one-element chunk sequence."""
    yield RawChunk.from_payload(payload)

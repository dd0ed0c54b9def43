"""
mimeburst/email_parser/tokenizer.py
-----------------------------------
Splits a multipart body into raw parts, one boundary level at a time.

    preamble
    --B
    header block
    <blank line>
    body
    --B
    ...
    --B--
    epilogue

Both CRLF and bare LF line endings are accepted. The line ending right
before a delimiter belongs to the delimiter, not to the body.
"""

import io
from dataclasses import dataclass
from typing import BinaryIO, Iterator, List, Tuple, Union

from mimeburst.errors import TruncatedStream


@dataclass(frozen=True)
class RawPart:
    header: bytes
    body: bytes

    def stream(self) -> BinaryIO:
        return io.BytesIO(self.body)


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(b"\n"):
        return line[:-1]
    return line


def _split_segment(lines: List[bytes]) -> RawPart:
    """
    Header block runs up to the first blank line; the rest is the body.
    No blank line at all means the whole segment is header.
    """
    if lines:
        lines = lines[:-1] + [_strip_eol(lines[-1])]

    for i, line in enumerate(lines):
        if _strip_eol(line) == b"":
            return RawPart(header=b"".join(lines[:i]), body=b"".join(lines[i + 1:]))
    return RawPart(header=b"".join(lines), body=b"")


def _delimiters(boundary: str) -> Tuple[bytes, bytes]:
    dash = b"--" + boundary.encode("utf-8")
    return dash, dash + b"--"


def iter_parts(stream: Union[BinaryIO, bytes], boundary: str) -> Iterator[RawPart]:
    """
    Lazily yield the RawParts of one multipart level.

    Raises TruncatedStream if the stream runs out before --boundary--;
    every complete part before that point has already been yielded.
    """
    if not boundary:
        raise ValueError("boundary must be a non-empty string")
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)

    separator, terminator = _delimiters(boundary)
    segment: List[bytes] = []
    in_part = False
    parts_seen = 0

    for line in iter(stream.readline, b""):
        # transport padding after a delimiter is allowed
        marker = _strip_eol(line).rstrip(b" \t")

        if marker == terminator:
            if in_part:
                yield _split_segment(segment)
            return

        if marker == separator:
            if in_part:
                yield _split_segment(segment)
                parts_seen += 1
            in_part = True
            segment = []
            continue

        if in_part:
            segment.append(line)

    raise TruncatedStream(boundary, parts_seen)

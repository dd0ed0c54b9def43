"""
mimeburst/explode/message.py
----------------------------
Front end for a whole RFC 5322 message: read the top-level header, check
that the body is multipart, then hand the body stream to the descender.
"""

import io
from dataclasses import dataclass
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from loguru import logger

from mimeburst.email_parser.content_type import parse_content_type
from mimeburst.email_parser.headers import PartHeader, parse_header_block
from mimeburst.errors import ContentTypeError, UnclassifiableMessage
from mimeburst.explode.descender import explode
from mimeburst.explode.events import RunSummary

DISPLAY_FIELDS = ("From", "To", "Date", "Subject", "Content-Type")
# RFC 2047 encoded words only make sense in these
_ENCODED_FIELDS = {"from", "to", "subject"}


@dataclass
class Message:
    header: PartHeader
    body: BinaryIO


def read_message(stream: Union[BinaryIO, bytes]) -> Message:
    """
    Consume the header block of a message; the returned body is the same
    stream, positioned at the first body byte.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)

    lines: List[bytes] = []
    for line in iter(stream.readline, b""):
        if line in (b"\r\n", b"\n"):
            break
        lines.append(line)

    return Message(header=parse_header_block(b"".join(lines)), body=stream)


def decode_display(value: str) -> str:
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError):
        return value


def display_headers(header: PartHeader) -> Dict[str, str]:
    """
    The handful of top-level fields worth showing, encoded words decoded.
    """
    shown = {}
    for name in DISPLAY_FIELDS:
        value = header.first_value(name)
        if name.lower() in _ENCODED_FIELDS:
            value = decode_display(value)
        shown[name] = value
    return shown


def top_level_boundary(header: PartHeader) -> str:
    """
    Boundary of the outermost level. Raises UnclassifiableMessage when the
    message cannot be walked at all.
    """
    value = header.first_value("Content-Type")
    if not value:
        raise UnclassifiableMessage("message has no Content-Type header")
    try:
        info = parse_content_type(value)
    except ContentTypeError as e:
        raise UnclassifiableMessage(f"cannot parse Content-Type {value!r}: {e}") from e

    if not info.is_multipart:
        raise UnclassifiableMessage(f"not a multipart MIME message ({info.media_type})")
    boundary = info.get("boundary")
    if not boundary:
        raise UnclassifiableMessage(f"{info.media_type} message without boundary parameter")
    return boundary


def explode_message(
    stream: Union[BinaryIO, bytes],
    out_dir: Union[str, Path, None] = None,
    *,
    max_depth: Optional[int] = None,
    downgrade_boundaryless: Optional[bool] = None,
    mode: Optional[int] = None,
) -> Tuple[Message, RunSummary]:
    """
    Read a whole message and write its leaf parts to out_dir.
    UnclassifiableMessage is raised before anything is written.
    """
    message = read_message(stream)
    try:
        boundary = top_level_boundary(message.header)
    except UnclassifiableMessage as e:
        logger.error("Refusing to explode message: {}", e)
        raise

    summary = explode(
        message.body,
        boundary,
        out_dir,
        max_depth=max_depth,
        downgrade_boundaryless=downgrade_boundaryless,
        mode=mode,
    )
    return message, summary

"""
mimeburst/email_parser/transfer.py
----------------------------------
Content-Transfer-Encoding reversal.

Every recognized encoding maps to a decode function; only base64 and
quoted-printable transform anything, the rest hand the bytes back as is.
"""

import base64
import binascii
import re
from enum import Enum
from typing import Callable, Dict

from mimeburst.errors import DecodeFailure

_QP_ESCAPE = re.compile(rb"=(.{0,2})", re.DOTALL)
_HEX = b"0123456789ABCDEFabcdef"


class TransferEncoding(Enum):
    BASE64 = "base64"
    QUOTED_PRINTABLE = "quoted-printable"
    SEVEN_BIT = "7bit"
    EIGHT_BIT = "8bit"
    BINARY = "binary"
    OTHER = "other"

    @classmethod
    def from_header(cls, value: str) -> "TransferEncoding":
        token = (value or "").strip().lower()
        for member in cls:
            if member is not cls.OTHER and member.value == token:
                return member
        return cls.OTHER


def _identity(data: bytes) -> bytes:
    return data


def decode_base64(data: bytes) -> bytes:
    # line breaks are part of the transport, anything else must be alphabet
    compact = data.replace(b"\r", b"").replace(b"\n", b"")
    return base64.b64decode(compact, validate=True)


def _qp_unescape(match) -> bytes:
    digits = match.group(1)
    if len(digits) != 2 or digits[0] not in _HEX or digits[1] not in _HEX:
        raise ValueError(f"invalid escape sequence {match.group(0)!r}")
    return bytes([int(digits, 16)])


def decode_quoted_printable(data: bytes) -> bytes:
    out = []
    for line in data.splitlines(keepends=True):
        if line.endswith(b"\r\n"):
            body, eol = line[:-2], b"\r\n"
        elif line.endswith(b"\n"):
            body, eol = line[:-1], b"\n"
        else:
            body, eol = line, b""

        # trailing whitespace is transport padding
        body = body.rstrip(b" \t")
        if body.endswith(b"="):
            body, eol = body[:-1], b""

        out.append(_QP_ESCAPE.sub(_qp_unescape, body))
        out.append(eol)
    return b"".join(out)


DECODERS: Dict[TransferEncoding, Callable[[bytes], bytes]] = {
    TransferEncoding.BASE64: decode_base64,
    TransferEncoding.QUOTED_PRINTABLE: decode_quoted_printable,
    TransferEncoding.SEVEN_BIT: _identity,
    TransferEncoding.EIGHT_BIT: _identity,
    TransferEncoding.BINARY: _identity,
    TransferEncoding.OTHER: _identity,
}


def decode_transfer(body: bytes, header_value: str = "") -> bytes:
    """
    Reverse the Content-Transfer-Encoding named by header_value.
    Raises DecodeFailure when the payload is not valid for its encoding.
    """
    encoding = TransferEncoding.from_header(header_value)
    try:
        return DECODERS[encoding](body)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure((header_value or "").strip(), e)

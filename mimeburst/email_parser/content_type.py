"""
mimeburst/email_parser/content_type.py
--------------------------------------
Parses Content-Type (and Content-Disposition) values into a lowercase media
type plus a parameter map.

    text/html; charset="utf-8"  ->  ("text/html", {"charset": "utf-8"})

Anything that does not parse raises ContentTypeError; callers treat that as
"not classifiable".
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple
from urllib.parse import unquote_to_bytes

from loguru import logger

from mimeburst.errors import ContentTypeError

# RFC 2045 tspecials, plus space and controls
_TSPECIALS = set('()<>@,;:\\"/[]?=')

# filename*=utf-8''na%C3%AFve.txt  /  filename*0*=...  /  filename*1=...
_EXTENDED_KEY = re.compile(r"^(?P<base>[^*]+)\*(?:(?P<index>\d+)(?P<encoded>\*)?)?$")


@dataclass(frozen=True)
class ContentTypeInfo:
    media_type: str
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def main_type(self) -> str:
        return self.media_type.partition("/")[0]

    @property
    def is_multipart(self) -> bool:
        return self.main_type == "multipart"

    def get(self, key: str, default: str = "") -> str:
        return self.parameters.get(key.lower(), default)


def is_token(value: str) -> bool:
    if not value:
        return False
    for ch in value:
        if ch in _TSPECIALS or ord(ch) <= 32 or ord(ch) >= 127:
            return False
    return True


def _split_top_level(value: str) -> List[str]:
    """
    Split on ';' that are not inside a quoted string.
    """
    segments: List[str] = []
    current: List[str] = []
    in_quotes = False
    escaped = False

    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
        elif in_quotes and ch == "\\":
            current.append(ch)
            escaped = True
        elif ch == '"':
            current.append(ch)
            in_quotes = not in_quotes
        elif ch == ";" and not in_quotes:
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)

    segments.append("".join(current))
    return segments


def _unquote(raw: str) -> str:
    """
    raw starts with '"'. Returns the unescaped content of the quoted string.
    """
    out: List[str] = []
    i = 1
    while i < len(raw):
        ch = raw[i]
        if ch == "\\":
            if i + 1 >= len(raw):
                break
            out.append(raw[i + 1])
            i += 2
            continue
        if ch == '"':
            if raw[i + 1:].strip():
                raise ContentTypeError(f"trailing characters after quoted string: {raw!r}")
            return "".join(out)
        out.append(ch)
        i += 1
    raise ContentTypeError(f"unterminated quoted string: {raw!r}")


def _parse_parameter(segment: str) -> Tuple[str, str]:
    key, sep, raw_value = segment.partition("=")
    key = key.strip().lower()
    raw_value = raw_value.strip()

    if not sep:
        raise ContentTypeError(f"parameter without '=': {segment.strip()!r}")
    if not is_token(key):
        raise ContentTypeError(f"invalid parameter name: {key!r}")

    if raw_value.startswith('"'):
        return key, _unquote(raw_value)
    if not is_token(raw_value):
        raise ContentTypeError(f"invalid value for parameter {key!r}: {raw_value!r}")
    return key, raw_value


def _decode_2231(value: str, with_charset: bool) -> str:
    charset = "us-ascii"
    if with_charset:
        parts = value.split("'", 2)
        if len(parts) != 3:
            raise ContentTypeError(f"malformed extended parameter value: {value!r}")
        charset, _lang, value = parts
    try:
        return unquote_to_bytes(value).decode(charset or "us-ascii")
    except (LookupError, UnicodeDecodeError) as e:
        raise ContentTypeError(f"cannot decode extended parameter value: {e}")


def _join_continued(base: str, sections: Dict[int, Tuple[str, bool]]) -> str:
    charset = ""
    chunks: List[bytes] = []
    index = 0
    while index in sections:
        value, encoded = sections[index]
        if encoded:
            if index == 0:
                parts = value.split("'", 2)
                if len(parts) != 3:
                    raise ContentTypeError(f"malformed extended parameter value: {value!r}")
                charset, _lang, value = parts
            chunks.append(unquote_to_bytes(value))
        else:
            chunks.append(value.encode("utf-8"))
        index += 1
    try:
        return b"".join(chunks).decode(charset or "utf-8")
    except (LookupError, UnicodeDecodeError) as e:
        raise ContentTypeError(f"cannot decode continued parameter {base!r}: {e}")


def _merge_extended(params: Dict[str, str]) -> Dict[str, str]:
    """
    Fold RFC 2231 extended / continued parameters into their base name.
    An extended value wins over a plain one with the same base name.
    """
    plain: Dict[str, str] = {}
    pieces: Dict[str, Dict[int, Tuple[str, bool]]] = {}
    single: Dict[str, str] = {}

    for key, value in params.items():
        m = _EXTENDED_KEY.match(key)
        if not m:
            plain[key] = value
            continue
        base = m.group("base")
        if m.group("index") is None:
            single[base] = value
        else:
            pieces.setdefault(base, {})[int(m.group("index"))] = (value, bool(m.group("encoded")))

    for base, value in single.items():
        try:
            plain[base] = _decode_2231(value, with_charset=True)
        except ContentTypeError as e:
            logger.debug("Dropping extended parameter {}*: {}", base, e)

    for base, sections in pieces.items():
        if base in single or 0 not in sections:
            continue
        try:
            plain[base] = _join_continued(base, sections)
        except ContentTypeError as e:
            logger.debug("Dropping continued parameter {}: {}", base, e)

    return plain


def _parse(value: str, require_subtype: bool) -> ContentTypeInfo:
    if not value or not value.strip():
        raise ContentTypeError("empty value")

    segments = _split_top_level(value)
    media_type = segments[0].strip().lower()

    if require_subtype:
        main, slash, sub = media_type.partition("/")
        if not slash or not is_token(main.strip()) or not is_token(sub.strip()):
            raise ContentTypeError(f"invalid media type: {media_type!r}")
        media_type = f"{main.strip()}/{sub.strip()}"
    elif not is_token(media_type):
        raise ContentTypeError(f"invalid disposition type: {media_type!r}")

    params: Dict[str, str] = {}
    for segment in segments[1:]:
        if not segment.strip():
            # tolerate ";;" and a trailing ";"
            continue
        key, val = _parse_parameter(segment)
        if key in params:
            raise ContentTypeError(f"duplicate parameter: {key!r}")
        params[key] = val

    return ContentTypeInfo(media_type=media_type, parameters=_merge_extended(params))


def parse_content_type(value: str) -> ContentTypeInfo:
    """
    Parse a Content-Type value. Raises ContentTypeError when it is empty,
    has no type/subtype, or carries an invalid parameter.
    """
    return _parse(value, require_subtype=True)


def parse_disposition(value: str) -> ContentTypeInfo:
    """
    Same grammar for Content-Disposition, where the leading token
    (inline, attachment, ...) has no subtype.
    """
    return _parse(value, require_subtype=False)

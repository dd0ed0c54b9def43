"""
mimeburst/email_parser/naming.py
--------------------------------
Output file names for leaf parts.

Order of preference:
  1. Content-Disposition filename (base name only)
  2. "{radix}-{index}{ext}" with ext looked up from the media type
  3. "{radix}-{index}"

index is a run-wide counter, so names never repeat within a run.
"""

import itertools
import mimetypes
import posixpath
from typing import Dict, Iterator, Set

from mimeburst.email_parser.content_type import parse_content_type, parse_disposition
from mimeburst.email_parser.headers import PartHeader
from mimeburst.errors import ContentTypeError

# Built-in table only, so names don't depend on the host's mime.types
_REGISTRY = mimetypes.MimeTypes(filenames=())

_PREFERRED_EXTENSIONS: Dict[str, str] = {
    "text/plain": ".txt",
    "text/html": ".html",
    "image/jpeg": ".jpg",
    "message/rfc822": ".eml",
    "application/octet-stream": ".bin",
}


def extension_for(media_type: str) -> str:
    """
    File extension (with the dot) for a media type, or "" if unknown.
    """
    media_type = media_type.lower()
    if media_type in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[media_type]
    return _REGISTRY.guess_extension(media_type, strict=False) or ""


def disposition_filename(header: PartHeader) -> str:
    value = header.first_value("Content-Disposition")
    if not value:
        return ""
    try:
        info = parse_disposition(value)
    except ContentTypeError:
        return ""

    filename = info.get("filename").replace("\\", "/")
    filename = posixpath.basename(filename.rstrip("/"))
    if filename in ("", ".", ".."):
        return ""
    return filename


def safe_radix(radix: str) -> str:
    """
    Boundary strings may carry '/', '\\' or be '.'/'..'; none of that may
    reach the file system as a path.
    """
    cleaned = radix.replace("/", "_").replace("\\", "_").replace("\x00", "_")
    if cleaned in ("", ".", ".."):
        return "part"
    return cleaned


class FileNamer:
    """
    Run-scoped namer. One instance per run; every call to name_for()
    consumes one index.
    """

    def __init__(self, start: int = 1):
        self._counter: Iterator[int] = itertools.count(start)
        self._issued: Set[str] = set()

    def name_for(self, header: PartHeader, radix: str) -> str:
        index = next(self._counter)

        name = disposition_filename(header)
        if not name:
            ext = ""
            try:
                ext = extension_for(parse_content_type(header.first_value("Content-Type")).media_type)
            except ContentTypeError:
                pass
            name = f"{safe_radix(radix)}-{index}{ext}"

        # a disposition filename may repeat, or match a generated name
        stem, ext = posixpath.splitext(name)
        renamed = False
        while name in self._issued:
            if renamed:
                index = next(self._counter)
            name = f"{stem}-{index}{ext}"
            renamed = True

        self._issued.add(name)
        return name

    @property
    def issued(self) -> Set[str]:
        return set(self._issued)

"""
mimeburst/errors.py
-------------------
Error taxonomy. Only UnclassifiableMessage stops a run; everything else is
scoped to one branch or one part and ends up as an event.
"""


class MimeBurstError(Exception):
    fatal = False


class UnclassifiableMessage(MimeBurstError):
    """Top-level Content-Type is missing, malformed or not multipart/*."""

    fatal = True


class ContentTypeError(MimeBurstError, ValueError):
    """A Content-Type style value could not be parsed."""


class TruncatedStream(MimeBurstError):
    """The terminal boundary marker never showed up before end of stream."""

    def __init__(self, boundary: str, parts_seen: int = 0):
        super().__init__(
            f"stream ended before terminal boundary --{boundary}-- "
            f"({parts_seen} complete part(s))"
        )
        self.boundary = boundary
        self.parts_seen = parts_seen


class DecodeFailure(MimeBurstError):
    """A body could not be reversed from its Content-Transfer-Encoding."""

    def __init__(self, encoding: str, cause):
        super().__init__(f"cannot decode {encoding or '<none>'} body: {cause}")
        self.encoding = encoding
        self.cause = cause


class PartWriteError(MimeBurstError):
    """A decoded part could not be written to the output directory."""

    def __init__(self, name: str, cause: OSError):
        super().__init__(f"cannot write {name}: {cause}")
        self.name = name
        self.cause = cause

"""
mimeburst/explode/descender.py
------------------------------
Recursive walk over a multipart body.

For every raw part at a given depth:
- parse its header block
- classify its Content-Type
- multipart/* with a boundary: walk its body one level deeper
- anything else: decode the transfer encoding, name it, write it

The walk is depth-first and keeps sibling order. A truncated level, a level
deeper than max_depth, a bad payload or a failed write only costs that branch
or that part; the caller gets an event for it and the walk goes on.
"""

from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from loguru import logger

from mimeburst.email_parser.content_type import ContentTypeInfo, parse_content_type
from mimeburst.email_parser.headers import PartHeader, parse_header_block
from mimeburst.email_parser.naming import FileNamer
from mimeburst.email_parser.tokenizer import RawPart, iter_parts
from mimeburst.email_parser.transfer import decode_transfer
from mimeburst.errors import ContentTypeError, DecodeFailure, PartWriteError, TruncatedStream
from mimeburst.explode.events import (
    BranchTruncated,
    DepthExceeded,
    Event,
    PartFailed,
    PartWritten,
    RunSummary,
)
from mimeburst.explode.writer import PartWriter
from mimeburst.utils.config import CONFIG, depth_ceiling


def _indent(depth: int) -> str:
    return "  " * 2 * (depth - 1)


def _classify(header: PartHeader) -> Optional[ContentTypeInfo]:
    value = header.first_value("Content-Type")
    if not value:
        return None
    try:
        return parse_content_type(value)
    except ContentTypeError as e:
        logger.debug("Unclassifiable Content-Type {!r}: {}", value, e)
        return None


def _trace_header(header: PartHeader, depth: int) -> None:
    indent = _indent(depth)
    for name, values in header.items():
        logger.debug("{} Key: ({}) - {} Value: ({!r})", indent, name, len(values), values)
    logger.debug("{} ------------", indent)


def _emit_leaf(
    raw: RawPart,
    header: PartHeader,
    radix: str,
    writer: PartWriter,
    namer: FileNamer,
    depth: int,
) -> Event:
    try:
        data = decode_transfer(raw.body, header.first_value("Content-Transfer-Encoding"))
    except DecodeFailure as e:
        logger.warning("Skipping part under --{} (depth {}): {}", radix, depth, e)
        return PartFailed(reason=str(e), depth=depth)

    name = namer.name_for(header, radix)
    try:
        writer.write(name, data)
    except PartWriteError as e:
        logger.warning("Write failed (depth {}): {}", depth, e)
        return PartFailed(reason=str(e), name=name, depth=depth)

    logger.info("Wrote {} ({} bytes)", name, len(data))
    return PartWritten(name=name, byte_length=len(data), depth=depth)


def decode(
    body_stream: BinaryIO,
    boundary: str,
    writer: PartWriter,
    *,
    namer: Optional[FileNamer] = None,
    max_depth: Optional[int] = None,
    downgrade_boundaryless: Optional[bool] = None,
    depth: int = 1,
) -> Iterator[Event]:
    """
    Walk one multipart level (and everything below it), yielding one event
    per leaf written or failed and one per aborted branch.

    namer must be shared by the whole run; a fresh one is made at the top.
    """
    if namer is None:
        namer = FileNamer()
    if max_depth is None:
        max_depth = CONFIG.MAX_DEPTH
    if downgrade_boundaryless is None:
        downgrade_boundaryless = CONFIG.DOWNGRADE_BOUNDARYLESS_MULTIPART

    ceiling = depth_ceiling()
    if max_depth > ceiling:
        if depth == 1:
            logger.warning("max_depth {} lowered to {} (recursion limit)", max_depth, ceiling)
        max_depth = ceiling

    if depth > max_depth:
        logger.warning("Not entering --{}: depth {} exceeds limit {}", boundary, depth, max_depth)
        yield DepthExceeded(boundary=boundary, depth=depth)
        return

    indent = _indent(depth)
    logger.debug("{} >>>>>>>>>>>>> {}", indent, boundary)

    try:
        for raw in iter_parts(body_stream, boundary):
            header = parse_header_block(raw.header)
            _trace_header(header, depth)

            info = _classify(header)
            if info is not None and info.is_multipart:
                child_boundary = info.get("boundary")
                if child_boundary:
                    yield from decode(
                        raw.stream(),
                        child_boundary,
                        writer,
                        namer=namer,
                        max_depth=max_depth,
                        downgrade_boundaryless=downgrade_boundaryless,
                        depth=depth + 1,
                    )
                    continue

                if not downgrade_boundaryless:
                    reason = f"{info.media_type} part without boundary"
                    logger.warning("Skipping part under --{} (depth {}): {}", boundary, depth, reason)
                    yield PartFailed(reason=reason, depth=depth)
                    continue
                logger.debug("{} {} without boundary, kept as a leaf", indent, info.media_type)

            yield _emit_leaf(raw, header, boundary, writer, namer, depth)

    except TruncatedStream as e:
        logger.warning("Branch --{} (depth {}) truncated: {}", boundary, depth, e)
        yield BranchTruncated(boundary=boundary, depth=depth)

    logger.debug("{} <<<<<<<<<<<<< {}", indent, boundary)


def explode(
    body_stream: BinaryIO,
    boundary: str,
    out_dir: Union[str, Path, None] = None,
    *,
    max_depth: Optional[int] = None,
    downgrade_boundaryless: Optional[bool] = None,
    mode: Optional[int] = None,
) -> RunSummary:
    """
    Run decode() to completion with a PartWriter on out_dir and fold the
    events into a RunSummary.
    """
    writer = PartWriter(out_dir, mode=mode)
    events = decode(
        body_stream,
        boundary,
        writer,
        namer=FileNamer(),
        max_depth=max_depth,
        downgrade_boundaryless=downgrade_boundaryless,
    )
    summary = RunSummary.from_events(events)
    logger.info(
        "Done: {} file(s) written, {} part(s) failed, {} branch(es) aborted",
        summary.files_written,
        summary.parts_failed,
        summary.branches_aborted,
    )
    return summary

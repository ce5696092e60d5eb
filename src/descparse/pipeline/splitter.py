# topmark:header:start
#
#   project      : DescParse
#   file         : splitter.py
#   file_relpath : src/descparse/pipeline/splitter.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document splitter.

Cuts a blob holding back-to-back documents of one kind into end-exclusive byte
ranges, one per document. Works on raw bytes so that offsets are exact.

A document *starts* at offset 0 or right after a newline, where the text is the
leading keyword followed by a space or a newline. A document *ends* (exclusive,
boundary newline included) at the first of, in this order:

1. the next line beginning with ``@``, if the blob has any annotation lines;
2. the next leading-keyword line;
3. the end of the blob.

The search for the next document resumes at the previous end, so consecutive
ranges are contiguous. The first range additionally extends backwards over the
contiguous block of annotation lines directly above the first document; bytes
before that block are not part of any range.

Notes:
    The annotation search runs before the keyword search. A literal line
    starting with ``@`` inside an embedded block therefore ends a document
    early. The rest of that document is taken as the annotation block of the
    next document's range, or left outside every range when no document
    follows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from descparse.config.logging import get_logger
from descparse.constants import ANNOTATION_PREFIX, NL, SP
from descparse.core.errors import SplitterError
from descparse.core.model import ByteRange

if TYPE_CHECKING:
    from descparse.config.logging import DescParseLogger
    from descparse.core.model import Blob

logger: DescParseLogger = get_logger(__name__)

_NL: bytes = NL.encode("ascii")
_AT: bytes = ANNOTATION_PREFIX.encode("ascii")


def _annotation_block_start(data: bytes, start: int) -> int:
    """Walk back from ``start`` over directly preceding ``@`` lines.

    Args:
        data (bytes): The blob bytes.
        start (int): Offset of a line start.

    Returns:
        int: Offset of the first line of the annotation block, or ``start`` if
            the previous line is not an annotation.
    """
    pos: int = start
    while pos > 0:
        # data[pos - 1] is the newline ending the previous line.
        line_start: int = data.rfind(_NL, 0, pos - 1) + 1
        if not data.startswith(_AT, line_start):
            break
        pos = line_start
    return pos


def split_descriptors(blob: Blob, leading_keyword: str) -> list[ByteRange]:
    """Split ``blob`` into per-document byte ranges.

    Args:
        blob (Blob): The blob to split.
        leading_keyword (str): Keyword that opens every document of the kind.

    Returns:
        list[ByteRange]: Contiguous, non-overlapping ranges in blob order; empty
            if the blob holds no document of the kind.

    Raises:
        SplitterError: If an iteration fails to advance (engine contract).
    """
    data: bytes = blob.data
    size: int = len(data)
    keyword: bytes = leading_keyword.encode("ascii")
    keyword_sp: bytes = keyword + SP.encode("ascii")
    keyword_nl: bytes = keyword + _NL
    line_keyword_sp: bytes = _NL + keyword_sp
    line_keyword_nl: bytes = _NL + keyword_nl

    contains_annotations: bool = data.startswith(_AT) or (_NL + _AT) in data
    ranges: list[ByteRange] = []
    start_annotations: int = 0

    while start_annotations < size:
        start_descriptor: int
        if data.startswith(keyword_sp, start_annotations) or data.startswith(
            keyword_nl, start_annotations
        ):
            start_descriptor = start_annotations
        else:
            search_from: int = max(start_annotations - 1, 0)
            found: int = data.find(line_keyword_sp, search_from)
            if found < 0:
                found = data.find(line_keyword_nl, search_from)
            if found < 0:
                break
            start_descriptor = found + 1

        if not ranges and start_annotations < start_descriptor:
            skipped_to: int = _annotation_block_start(data, start_descriptor)
            if skipped_to > start_annotations:
                logger.debug(
                    "splitter: ignoring %d leading byte(s) before the first document",
                    skipped_to - start_annotations,
                )
                start_annotations = skipped_to

        end: int = -1
        if contains_annotations:
            end = data.find(_NL + _AT, start_descriptor)
        if end < 0:
            end = data.find(line_keyword_sp, start_descriptor)
        if end < 0:
            end = data.find(line_keyword_nl, start_descriptor)
        if end < 0:
            end = size - 1
        end += 1

        if end <= start_annotations:
            raise SplitterError(
                f"Splitter made no progress at offset {start_annotations} "
                f"(keyword '{leading_keyword}', origin: {blob.origin})"
            )

        byte_range: ByteRange = ByteRange(start_annotations, end)
        logger.trace("splitter: document at %s", byte_range)
        ranges.append(byte_range)
        start_annotations = end

    logger.debug(
        "splitter: %d document(s) for keyword '%s' in %d byte(s)",
        len(ranges),
        leading_keyword,
        size,
    )
    return ranges

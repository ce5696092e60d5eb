# topmark:header:start
#
#   project      : DescParse
#   file         : parser.py
#   file_relpath : src/descparse/pipeline/parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document parser.

Parses the bytes of one byte range against one grammar:

1. decode the range as UTF-8 (undecodable bytes are replaced, never fatal);
2. peel off the leading ``@`` annotation lines;
3. tokenize the remaining lines, skipping embedded crypto blocks;
4. validate the token stream (leading keyword, unrecognized lines, occurrence
   constraints);
5. dispatch every recognized token to its `FieldRule` decoder;
6. build the kind's frozen record from the accumulated fields.

Validation happens before any value is decoded. Failures are raised as
`DescriptorParseError` subclasses; turning them into results is the runner's
job.
"""

from __future__ import annotations

import base64
import hashlib
from typing import TYPE_CHECKING, cast

from descparse.config.logging import get_logger
from descparse.constants import ANNOTATION_PREFIX
from descparse.core.model import ParsedDescriptor
from descparse.grammar.tokens import iter_tokens, split_lines
from descparse.grammar.validator import validate

if TYPE_CHECKING:
    from descparse.config.logging import DescParseLogger
    from descparse.core.model import Blob, ByteRange
    from descparse.grammar.validator import ValidationResult
    from descparse.kinds.base import DescriptorRecord, FieldRule, Grammar

logger: DescParseLogger = get_logger(__name__)


def split_annotations(lines: list[str]) -> tuple[tuple[str, ...], list[str]]:
    """Separate leading annotation lines from the document body.

    Returns:
        tuple[tuple[str, ...], list[str]]: The annotation lines (verbatim, in
            order) and the remaining lines.
    """
    count: int = 0
    for line in lines:
        if not line.startswith(ANNOTATION_PREFIX):
            break
        count += 1
    return tuple(lines[:count]), lines[count:]


def compute_digests(raw: bytes, grammar: Grammar) -> dict[str, str]:
    """Compute the signed-portion digests a grammar asks for.

    The signed portion runs from the first leading-keyword line through the end
    of the grammar's end marker. A digest is omitted when either end is missing.

    Returns:
        dict[str, str]: ``digest`` (upper-case hex SHA-1) and/or
            ``digest_sha256`` (unpadded base64 SHA-256).
    """
    digests: dict[str, str] = {}
    keyword: bytes = grammar.leading_keyword.encode("ascii")
    if raw.startswith(keyword):
        start: int = 0
    else:
        start = raw.find(b"\n" + keyword)
        if start < 0:
            return digests
        start += 1

    if grammar.digest_end_marker is not None:
        marker: bytes = grammar.digest_end_marker.encode("ascii")
        end: int = raw.find(marker, start)
        if end >= 0:
            signed: bytes = raw[start : end + len(marker)]
            digests["digest"] = hashlib.sha1(signed).hexdigest().upper()

    if grammar.sha256_end_marker is not None:
        marker = grammar.sha256_end_marker.encode("ascii")
        end = raw.find(marker, start)
        if end >= 0:
            signed = raw[start : end + len(marker)]
            digests["digest_sha256"] = (
                base64.b64encode(hashlib.sha256(signed).digest()).decode("ascii").rstrip("=")
            )
    return digests


def parse_descriptor(
    blob: Blob,
    byte_range: ByteRange,
    grammar: Grammar,
    *,
    fail_unrecognized_lines: bool = False,
    origin: str | None = None,
) -> ParsedDescriptor[DescriptorRecord]:
    """Parse the document at ``byte_range`` of ``blob``.

    Args:
        blob (Blob): The blob holding the document.
        byte_range (ByteRange): The document's range (annotations included).
        grammar (Grammar): The grammar of the document's kind.
        fail_unrecognized_lines (bool): Strict mode when True.
        origin (str | None): Origin handle; defaults to ``blob.origin``.

    Returns:
        ParsedDescriptor[DescriptorRecord]: The parsed document.

    Raises:
        MalformedDocumentError: On a grammar or constraint violation.
        MalformedValueError: When a decoder rejects a value.
    """
    raw: bytes = blob.slice(byte_range)
    text: str = raw.decode("utf-8", errors="replace")
    annotations, body = split_annotations(split_lines(text))

    result: ValidationResult = validate(
        iter_tokens(body),
        leading_keyword=grammar.leading_keyword,
        recognized=grammar.recognized,
        constraints=grammar.constraints,
        fail_unrecognized_lines=fail_unrecognized_lines,
        max_unrecognized_lines=grammar.max_unrecognized_lines,
    )

    rules: dict[str, FieldRule] = grammar.rules_by_keyword
    fields: dict[str, object] = {}
    for token in result.tokens:
        rule: FieldRule | None = rules.get(token.keyword)
        if rule is None:
            continue
        for name, value in rule.decode(token).items():
            if rule.repeated:
                cast("list[object]", fields.setdefault(name, [])).append(value)
            else:
                fields[name] = value

    fields.update(compute_digests(raw, grammar))
    record: DescriptorRecord = grammar.record_type.from_fields(fields)

    logger.trace(
        "parser: %s at %s: %d token(s), %d unrecognized",
        grammar.kind.type_name,
        byte_range,
        len(result.tokens),
        len(result.unrecognized_lines),
    )
    return ParsedDescriptor(
        kind=grammar.kind,
        raw=raw,
        byte_range=byte_range,
        record=record,
        annotations=annotations,
        unrecognized_lines=result.unrecognized_lines,
        origin=origin if origin is not None else blob.origin,
    )

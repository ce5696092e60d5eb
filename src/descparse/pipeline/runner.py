# topmark:header:start
#
#   project      : DescParse
#   file         : runner.py
#   file_relpath : src/descparse/pipeline/runner.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Blob-level orchestration: sniff, look up the grammar, split, parse.

Each document range yields exactly one result. Input errors
(`DescriptorParseError`) are caught per range and turned into
`UnparseableDescriptor` values, so one bad document never hides its
neighbours. Engine contract errors (`GrammarDefinitionError`) propagate.

A blob whose kind cannot be determined, or whose kind has no grammar, yields a
single failed result covering the whole blob.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from descparse.config.logging import get_logger
from descparse.constants import SNIFF_WINDOW
from descparse.core.errors import DescriptorParseError, UnknownKindError
from descparse.core.model import Blob, ByteRange, UnparseableDescriptor
from descparse.kinds.registry import get_grammar
from descparse.pipeline.parser import parse_descriptor
from descparse.pipeline.sniffer import sniff
from descparse.pipeline.splitter import split_descriptors

if TYPE_CHECKING:
    from collections.abc import Iterator

    from descparse.config import Config
    from descparse.config.logging import DescParseLogger
    from descparse.core.model import DescriptorResult
    from descparse.kinds.base import DocumentKind, Grammar

logger: DescParseLogger = get_logger(__name__)


def _as_blob(blob: bytes | Blob, origin: str | None) -> Blob:
    if isinstance(blob, Blob):
        if origin is not None and origin != blob.origin:
            return Blob(blob.data, origin)
        return blob
    return Blob(bytes(blob), origin)


def _whole_blob_failure(
    blob: Blob, kind: DocumentKind | None, error: DescriptorParseError
) -> UnparseableDescriptor:
    logger.warning("%s (origin: %s)", error, blob.origin)
    return UnparseableDescriptor(
        kind=kind,
        raw=blob.data,
        byte_range=ByteRange(0, len(blob)),
        error=error,
        origin=blob.origin,
    )


def iter_descriptors(
    blob: bytes | Blob,
    *,
    fail_unrecognized_lines: bool | None = None,
    type_hint: str | DocumentKind | None = None,
    origin: str | None = None,
    config: Config | None = None,
) -> Iterator[DescriptorResult]:
    """Lazily parse every document in ``blob``.

    Explicit keyword arguments win over ``config``; ``config`` wins over the
    built-in defaults (tolerant mode, no type hint, 100-byte sniff window).

    Args:
        blob (bytes | Blob): Raw input.
        fail_unrecognized_lines (bool | None): Strict mode when True.
        type_hint (str | DocumentKind | None): Explicit kind; skips sniffing.
        origin (str | None): Origin handle attached to every result.
        config (Config | None): Parser configuration supplying defaults.

    Yields:
        DescriptorResult: One result per document range, in blob order.

    Raises:
        GrammarDefinitionError: On an engine contract violation.
    """
    source: Blob = _as_blob(blob, origin)
    strict: bool = bool(config.fail_unrecognized_lines) if config is not None else False
    if fail_unrecognized_lines is not None:
        strict = fail_unrecognized_lines
    hint: str | DocumentKind | None = type_hint
    if hint is None and config is not None:
        hint = config.type_hint
    window: int = config.sniff_window if config is not None else SNIFF_WINDOW

    detected: DocumentKind | UnknownKindError = sniff(source, hint, window=window)
    if isinstance(detected, UnknownKindError):
        yield _whole_blob_failure(source, None, detected)
        return

    try:
        grammar: Grammar = get_grammar(detected)
    except DescriptorParseError as exc:
        yield _whole_blob_failure(source, detected, exc)
        return

    logger.debug(
        "runner: parsing %s (%d byte(s), strict=%s, origin: %s)",
        detected.type_name,
        len(source),
        strict,
        source.origin,
    )
    for byte_range in split_descriptors(source, grammar.leading_keyword):
        try:
            yield parse_descriptor(
                source,
                byte_range,
                grammar,
                fail_unrecognized_lines=strict,
            )
        except DescriptorParseError as exc:
            logger.warning(
                "Unparseable %s at %s (origin: %s): %s",
                detected.type_name,
                byte_range,
                source.origin,
                exc,
            )
            yield UnparseableDescriptor(
                kind=detected,
                raw=source.slice(byte_range),
                byte_range=byte_range,
                error=exc,
                origin=source.origin,
            )


def parse_descriptors(
    blob: bytes | Blob,
    *,
    fail_unrecognized_lines: bool | None = None,
    type_hint: str | DocumentKind | None = None,
    origin: str | None = None,
    config: Config | None = None,
) -> list[DescriptorResult]:
    """Parse every document in ``blob`` and return the results as a list.

    See `iter_descriptors` for the arguments.

    Returns:
        list[DescriptorResult]: One result per document range, in blob order.
    """
    return list(
        iter_descriptors(
            blob,
            fail_unrecognized_lines=fail_unrecognized_lines,
            type_hint=type_hint,
            origin=origin,
            config=config,
        )
    )

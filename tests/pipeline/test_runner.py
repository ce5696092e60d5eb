# topmark:header:start
#
#   project      : DescParse
#   file         : test_runner.py
#   file_relpath : tests/pipeline/test_runner.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for blob-level orchestration (`descparse.pipeline.runner`).

The runner must yield one result per document range and isolate failures: a
bad document never hides its neighbours, and blobs that cannot be sniffed or
have no grammar produce a single whole-blob failure.
"""

from __future__ import annotations

import logging

import pytest

from descparse.core.errors import (
    MalformedCause,
    MalformedDocumentError,
    UnknownKindError,
    UnsupportedKindError,
)
from descparse.core.model import Blob, ByteRange, ParsedDescriptor, UnparseableDescriptor
from descparse.kinds.base import DocumentKind
from descparse.pipeline.runner import iter_descriptors, parse_descriptors
from tests.conftest import (
    EXTRA_INFO,
    MICRODESCRIPTOR,
    make_config,
    mark_pipeline,
    only_failure,
)

BROKEN_EXTRA_INFO = EXTRA_INFO.replace("published 2012-02-11 09:08:36\n", "")
UNRECOGNIZED = EXTRA_INFO.replace("router-signature\n", "unrecognized-line 1\nrouter-signature\n")


def data(*texts: str) -> bytes:
    return "".join(texts).encode("ascii")


@mark_pipeline
def test_every_document_yields_a_result() -> None:
    """Valid documents parse; their ranges are contiguous."""
    results = parse_descriptors(data(EXTRA_INFO, EXTRA_INFO, EXTRA_INFO))
    assert [r.ok for r in results] == [True, True, True]
    assert [r.byte_range.start for r in results] == [0, len(EXTRA_INFO), 2 * len(EXTRA_INFO)]


@mark_pipeline
def test_failure_is_isolated_to_its_document() -> None:
    """A malformed document becomes a failed result between two good ones."""
    blob: bytes = data(EXTRA_INFO, BROKEN_EXTRA_INFO, EXTRA_INFO)
    results = parse_descriptors(blob)
    assert [r.ok for r in results] == [True, False, True]

    failed = results[1]
    assert isinstance(failed, UnparseableDescriptor)
    assert failed.kind is DocumentKind.EXTRA_INFO
    assert failed.byte_range == ByteRange(len(EXTRA_INFO), len(EXTRA_INFO) + len(BROKEN_EXTRA_INFO))
    assert failed.raw == BROKEN_EXTRA_INFO.encode("ascii")
    assert isinstance(failed.error, MalformedDocumentError)
    assert failed.error.cause is MalformedCause.MISSING_KEYWORD
    assert "published" in failed.message


@mark_pipeline
def test_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Each unparseable document is reported at WARNING level."""
    with caplog.at_level(logging.WARNING):
        parse_descriptors(data(BROKEN_EXTRA_INFO), origin="cached-extrainfo")
    assert any(
        "Unparseable extra-info" in rec.getMessage() and "cached-extrainfo" in rec.getMessage()
        for rec in caplog.records
    )


@mark_pipeline
@pytest.mark.parametrize("blob", [b"", b"hello world\n", b"\x00\x01\x02"])
def test_unknown_kind_is_a_whole_blob_failure(blob: bytes) -> None:
    """Unrecognizable input yields exactly one failure covering the blob."""
    failed = only_failure(parse_descriptors(blob))
    assert failed.kind is None
    assert isinstance(failed.error, UnknownKindError)
    assert failed.byte_range == ByteRange(0, len(blob))
    assert failed.raw == blob


@mark_pipeline
def test_kind_without_grammar_is_a_whole_blob_failure() -> None:
    """Sniff-only kinds are detected but reported as unsupported."""
    blob: bytes = b"ExitNode 0011BD2485AD45D984EC4159C88FC066E5E3300E\nPublished x\n"
    failed = only_failure(parse_descriptors(blob))
    assert failed.kind is DocumentKind.TORDNSEL
    assert isinstance(failed.error, UnsupportedKindError)
    assert failed.byte_range == ByteRange(0, len(blob))


@mark_pipeline
def test_detected_kind_without_documents_yields_nothing() -> None:
    """An annotated blob with no document of its kind has no ranges and no results."""
    assert parse_descriptors(b"@type extra-info 1.0\n") == []


@mark_pipeline
def test_tolerant_mode_is_the_default() -> None:
    """Unrecognized lines are collected unless strict mode is requested."""
    (result,) = parse_descriptors(data(UNRECOGNIZED))
    assert isinstance(result, ParsedDescriptor)
    assert result.unrecognized_lines == ("unrecognized-line 1",)


@mark_pipeline
def test_strict_mode_argument() -> None:
    """Strict mode turns an unrecognized line into a failure."""
    failed = only_failure(parse_descriptors(data(UNRECOGNIZED), fail_unrecognized_lines=True))
    assert isinstance(failed.error, MalformedDocumentError)
    assert failed.error.cause is MalformedCause.UNRECOGNIZED_LINE


@mark_pipeline
def test_strict_mode_from_config() -> None:
    """The config supplies the default mode."""
    config = make_config(fail_unrecognized_lines=True)
    only_failure(parse_descriptors(data(UNRECOGNIZED), config=config))


@mark_pipeline
def test_explicit_argument_overrides_config() -> None:
    """An explicit ``fail_unrecognized_lines`` wins over the config."""
    config = make_config(fail_unrecognized_lines=True)
    (result,) = parse_descriptors(data(UNRECOGNIZED), config=config, fail_unrecognized_lines=False)
    assert result.ok


@mark_pipeline
def test_type_hint_from_argument_and_config() -> None:
    """A type hint skips sniffing; the argument wins over the config."""
    blob: bytes = b"x" * 120 + b"\n" + data(MICRODESCRIPTOR)
    assert parse_descriptors(blob)[0].kind is None
    (by_config,) = parse_descriptors(blob, config=make_config(type_hint="microdescriptor"))
    assert by_config.kind is DocumentKind.MICRODESCRIPTOR
    assert by_config.ok
    (by_arg,) = parse_descriptors(
        data(EXTRA_INFO), type_hint="extra-info 1.0", config=make_config(type_hint="no-such")
    )
    assert by_arg.ok


@mark_pipeline
def test_sniff_window_from_config() -> None:
    """The config's sniff window limits how far detection looks."""
    blob: bytes = b"x" * 150 + b"\n" + data(EXTRA_INFO)
    assert parse_descriptors(blob)[0].kind is None
    (result,) = parse_descriptors(blob, config=make_config(sniff_window=400))
    assert result.ok


@mark_pipeline
def test_origin_is_attached_to_every_result() -> None:
    """Results carry the origin given as argument or on the blob."""
    results = parse_descriptors(data(EXTRA_INFO, BROKEN_EXTRA_INFO), origin="a")
    assert {r.origin for r in results} == {"a"}
    results = parse_descriptors(Blob(data(EXTRA_INFO), "b"))
    assert results[0].origin == "b"


@mark_pipeline
def test_iter_descriptors_is_lazy() -> None:
    """Results are produced on demand, in blob order."""
    it = iter_descriptors(data(EXTRA_INFO, BROKEN_EXTRA_INFO))
    first = next(it)
    assert first.ok
    second = next(it)
    assert not second.ok
    with pytest.raises(StopIteration):
        next(it)

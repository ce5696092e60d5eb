# topmark:header:start
#
#   project      : DescParse
#   file         : test_public_facade.py
#   file_relpath : tests/api/test_public_facade.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the public API facade (`descparse.api` and the package root).

The facade accepts either a frozen `Config` or a TOML-shaped mapping and must
behave exactly like the runner it delegates to.
"""

from __future__ import annotations

import pytest

import descparse
from descparse import api
from descparse.core.errors import MalformedCause, MalformedDocumentError, UnknownKindError
from descparse.core.model import Blob, ParsedDescriptor
from descparse.kinds.base import DocumentKind
from tests.conftest import EXTRA_INFO, MICRODESCRIPTOR, make_config, only_failure, parametrize

UNRECOGNIZED = EXTRA_INFO.replace("router-signature\n", "future-keyword 1\nrouter-signature\n")


def test_package_exports() -> None:
    """Everything in ``__all__`` is importable from the package root."""
    for name in descparse.__all__:
        assert hasattr(descparse, name), name
    assert descparse.parse_descriptors is api.parse_descriptors


def test_parse_descriptors_bytes() -> None:
    """Raw bytes are accepted and parsed."""
    (result,) = api.parse_descriptors(EXTRA_INFO.encode("ascii"), origin="memory")
    assert isinstance(result, ParsedDescriptor)
    assert result.origin == "memory"
    assert result.kind is DocumentKind.EXTRA_INFO


@parametrize(
    "config",
    [
        {"parser": {"fail_unrecognized_lines": True}},
        {"tool": {"descparse": {"parser": {"fail_unrecognized_lines": True}}}},
    ],
)
def test_mapping_config(config: dict[str, object]) -> None:
    """TOML-shaped mappings are normalized into a config."""
    failed = only_failure(api.parse_descriptors(UNRECOGNIZED.encode("ascii"), config=config))
    assert isinstance(failed.error, MalformedDocumentError)
    assert failed.error.cause is MalformedCause.UNRECOGNIZED_LINE


def test_frozen_config_and_override() -> None:
    """A frozen config is used as-is; explicit arguments still win."""
    config = make_config(fail_unrecognized_lines=True)
    only_failure(api.parse_descriptors(UNRECOGNIZED.encode("ascii"), config=config))
    (result,) = api.parse_descriptors(
        UNRECOGNIZED.encode("ascii"), config=config, fail_unrecognized_lines=False
    )
    assert result.ok


def test_mapping_type_hint() -> None:
    """A mapping can carry a type hint."""
    data: bytes = b"x" * 120 + b"\n" + MICRODESCRIPTOR.encode("ascii")
    (result,) = api.parse_descriptors(data, config={"parser": {"type_hint": "microdescriptor"}})
    assert result.ok
    assert result.kind is DocumentKind.MICRODESCRIPTOR


def test_iter_descriptors() -> None:
    """The lazy variant yields the same results."""
    data: bytes = (EXTRA_INFO + EXTRA_INFO).encode("ascii")
    assert list(api.iter_descriptors(data)) == api.parse_descriptors(data)


def test_detect_kind() -> None:
    """Detection works on bytes or blobs and honors hints and the window."""
    assert api.detect_kind(EXTRA_INFO.encode("ascii")) is DocumentKind.EXTRA_INFO
    assert api.detect_kind(Blob(MICRODESCRIPTOR.encode("ascii"))) is DocumentKind.MICRODESCRIPTOR
    assert api.detect_kind(b"", "server-descriptor") is DocumentKind.SERVER_DESCRIPTOR
    shifted: bytes = b"x" * 150 + b"\n" + EXTRA_INFO.encode("ascii")
    assert isinstance(api.detect_kind(shifted), UnknownKindError)
    assert api.detect_kind(shifted, window=300) is DocumentKind.EXTRA_INFO


def test_list_kinds() -> None:
    """Every kind is listed once, in declaration order."""
    infos = api.list_kinds()
    assert [info.kind for info in infos] == list(DocumentKind)
    extra = next(info for info in infos if info.kind is DocumentKind.EXTRA_INFO)
    assert extra.supported is True
    assert extra.leading_keyword == "extra-info"
    assert extra.type_name == "extra-info"
    torperf = next(info for info in infos if info.kind is DocumentKind.TORPERF)
    assert torperf.supported is False
    assert torperf.leading_keyword is None
    assert torperf.description == ""


def test_results_are_values() -> None:
    """Results compare by value, so repeated parses are equal."""
    data: bytes = EXTRA_INFO.encode("ascii")
    assert api.parse_descriptors(data) == api.parse_descriptors(data)
    with pytest.raises(AttributeError):
        api.parse_descriptors(data)[0].origin = "x"  # type: ignore[misc]

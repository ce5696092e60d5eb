# topmark:header:start
#
#   project      : DescParse
#   file         : test_registry.py
#   file_relpath : tests/kinds/test_registry.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for grammar declarations and the grammar registry.

Covers the consistency checks `Grammar` runs when it is declared, the lookup
functions in `descparse.kinds.registry`, and record construction through
`DescriptorRecord.from_fields`.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from descparse.core.errors import GrammarDefinitionError, UnsupportedKindError
from descparse.grammar.constraints import KeywordConstraintSet
from descparse.kinds.base import DescriptorRecord, DocumentKind, FieldRule, Grammar, keyword_only
from descparse.kinds.registry import get_grammar, get_grammar_registry
from tests.conftest import parametrize


@dataclass(frozen=True)
class _Record(DescriptorRecord):
    flag: bool = False
    names: tuple[str, ...] = ()


def _grammar(**overrides: object) -> Grammar:
    values: dict[str, object] = {
        "kind": DocumentKind.TORPERF,
        "leading_keyword": "start",
        "constraints": KeywordConstraintSet.build(exactly_once=("start",)),
        "rules": (FieldRule("start", keyword_only("flag")),),
        "record_type": _Record,
    }
    values.update(overrides)
    return Grammar(**values)  # type: ignore[arg-type]


def test_valid_grammar() -> None:
    """A consistent declaration builds and lists its recognized keywords."""
    grammar = _grammar(passthrough_keywords=frozenset({"ignored"}))
    assert grammar.recognized == frozenset({"start", "ignored"})
    assert set(grammar.rules_by_keyword) == {"start"}


@parametrize(
    "overrides, fragment",
    [
        (
            {
                "rules": (
                    FieldRule("start", keyword_only()),
                    FieldRule("start", keyword_only("flag")),
                )
            },
            "more than one rule",
        ),
        (
            {"constraints": KeywordConstraintSet.build(at_most_once=("start",))},
            "must be declared exactly-once",
        ),
        (
            {"constraints": KeywordConstraintSet.build(exactly_once=("start", "other"))},
            "unrecognized keyword",
        ),
        ({"max_unrecognized_lines": -1}, "max_unrecognized_lines"),
        ({"digest_end_marker": "\nend\n"}, "no 'digest' field"),
    ],
)
def test_inconsistent_grammar(overrides: dict[str, object], fragment: str) -> None:
    """Contradictory declarations fail immediately."""
    with pytest.raises(GrammarDefinitionError, match=fragment):
        _grammar(**overrides)


def test_from_fields_freezes_lists() -> None:
    """Repeated-rule lists become tuples."""
    record = _Record.from_fields({"flag": True, "names": ["a", "b"]})
    assert record == _Record(flag=True, names=("a", "b"))


def test_from_fields_rejects_unknown_field() -> None:
    """A decoder producing an undeclared field is a grammar bug."""
    with pytest.raises(GrammarDefinitionError, match="bogus"):
        _Record.from_fields({"bogus": 1})


def test_registry_covers_parseable_kinds() -> None:
    """Every built-in grammar is registered under its kind."""
    registry = get_grammar_registry()
    assert set(registry) == {
        DocumentKind.NETWORK_STATUS_CONSENSUS,
        DocumentKind.NETWORK_STATUS_MICRODESC_CONSENSUS,
        DocumentKind.NETWORK_STATUS_VOTE,
        DocumentKind.SERVER_DESCRIPTOR,
        DocumentKind.BRIDGE_SERVER_DESCRIPTOR,
        DocumentKind.EXTRA_INFO,
        DocumentKind.BRIDGE_EXTRA_INFO,
        DocumentKind.MICRODESCRIPTOR,
        DocumentKind.DIR_KEY_CERTIFICATE,
    }
    for kind, grammar in registry.items():
        assert grammar.kind is kind
        assert grammar.description


def test_registry_is_cached() -> None:
    """Repeated lookups return the same registry."""
    assert get_grammar_registry() is get_grammar_registry()


@parametrize(
    "kind, keyword",
    [
        (DocumentKind.EXTRA_INFO, "extra-info"),
        (DocumentKind.SERVER_DESCRIPTOR, "router"),
        (DocumentKind.MICRODESCRIPTOR, "onion-key"),
        (DocumentKind.DIR_KEY_CERTIFICATE, "dir-key-certificate-version"),
        (DocumentKind.NETWORK_STATUS_VOTE, "network-status-version"),
    ],
)
def test_leading_keywords(kind: DocumentKind, keyword: str) -> None:
    """Each grammar opens with its kind's leading keyword."""
    assert get_grammar(kind).leading_keyword == keyword


@parametrize("kind", [DocumentKind.TORDNSEL, DocumentKind.TORPERF, DocumentKind.DIRECTORY])
def test_sniff_only_kinds_are_unsupported(kind: DocumentKind) -> None:
    """Kinds without a grammar raise `UnsupportedKindError`."""
    with pytest.raises(UnsupportedKindError) as excinfo:
        get_grammar(kind)
    assert excinfo.value.kind == kind.type_name


@parametrize(
    "name, kind",
    [
        ("extra-info", DocumentKind.EXTRA_INFO),
        ("extra-info 1.0", DocumentKind.EXTRA_INFO),
        ("  network-status-vote-3 1.0", DocumentKind.NETWORK_STATUS_VOTE),
        ("nope", None),
    ],
)
def test_kind_from_type_name(name: str, kind: DocumentKind | None) -> None:
    """Type names resolve with or without a version suffix."""
    assert DocumentKind.from_type_name(name) is kind

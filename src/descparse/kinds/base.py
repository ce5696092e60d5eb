# topmark:header:start
#
#   project      : DescParse
#   file         : base.py
#   file_relpath : src/descparse/kinds/base.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document kinds and the grammar seam.

Defines the closed `DocumentKind` enumeration and the declarative pieces a
concrete kind registers with the engine:

* a leading keyword,
* a `KeywordConstraintSet`,
* a table of `FieldRule` objects mapping recognized keywords to decoders,
* a frozen record type (a `DescriptorRecord` dataclass) built once from the
  decoded fields.

The engine never inspects field semantics; it only calls the decoders and hands
the accumulated field dictionary to `DescriptorRecord.from_fields`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from descparse.config.logging import DescParseLogger, get_logger
from descparse.core.errors import GrammarDefinitionError, MalformedCause, MalformedDocumentError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.constraints import KeywordConstraintSet
    from descparse.grammar.tokens import Token

logger: DescParseLogger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound="DescriptorRecord")

# A decoder receives one recognized token and returns field updates.
FieldDecoder = Callable[["Token"], "Mapping[str, object]"]


class DocumentKind(Enum):
    """Closed set of descriptor kinds the sniffer can detect.

    Values are the type names used in ``@type <name> <major>.<minor>``
    annotations.
    """

    NETWORK_STATUS_CONSENSUS = "network-status-consensus-3"
    NETWORK_STATUS_MICRODESC_CONSENSUS = "network-status-microdesc-consensus-3"
    NETWORK_STATUS_VOTE = "network-status-vote-3"
    BRIDGE_NETWORK_STATUS = "bridge-network-status"
    BRIDGE_SERVER_DESCRIPTOR = "bridge-server-descriptor"
    SERVER_DESCRIPTOR = "server-descriptor"
    BRIDGE_EXTRA_INFO = "bridge-extra-info"
    EXTRA_INFO = "extra-info"
    MICRODESCRIPTOR = "microdescriptor"
    BRIDGE_POOL_ASSIGNMENT = "bridge-pool-assignment"
    DIR_KEY_CERTIFICATE = "dir-key-certificate-3"
    TORDNSEL = "tordnsel"
    NETWORK_STATUS_2 = "network-status-2"
    DIRECTORY = "directory"
    TORPERF = "torperf"

    @property
    def type_name(self) -> str:
        """Return the ``@type`` name of this kind."""
        return self.value

    @classmethod
    def from_type_name(cls, name: str) -> DocumentKind | None:
        """Look up a kind by type name.

        Accepts a bare name (``"extra-info"``) or a name with version
        (``"extra-info 1.0"``).

        Returns:
            DocumentKind | None: The kind, or None if the name is unknown.
        """
        bare: str = name.strip().split(" ", 1)[0]
        for kind in cls:
            if kind.value == bare:
                return kind
        return None


@dataclass(frozen=True)
class DescriptorRecord:
    """Base class of the per-kind record dataclasses.

    Subclasses are frozen dataclasses. Fields absent from a document keep their
    dataclass defaults.
    """

    @classmethod
    def from_fields(cls: type[RecordT], fields: Mapping[str, object]) -> RecordT:
        """Build a record from the field dictionary accumulated by the parser.

        Lists (produced by repeated rules) are frozen into tuples and dicts
        into read-only mappings.

        Raises:
            GrammarDefinitionError: If a decoder produced a field the record type
                does not declare.
        """
        names: set[str] = {f.name for f in dataclasses.fields(cls)}
        unknown: set[str] = set(fields) - names
        if unknown:
            raise GrammarDefinitionError(
                f"{cls.__name__} has no field(s) {sorted(unknown)} produced by its decoders"
            )
        values: dict[str, Any] = {key: freeze_value(value) for key, value in fields.items()}
        return cls(**values)


def freeze_value(value: object) -> object:
    """Return a read-only copy of a decoded value (lists and dicts, recursively)."""
    if isinstance(value, list):
        return tuple(freeze_value(item) for item in value)
    if isinstance(value, dict):
        return MappingProxyType({key: freeze_value(item) for key, item in value.items()})
    return value


@dataclass(frozen=True)
class FieldRule:
    """Maps one recognized keyword to a decoder.

    Attributes:
        keyword (str): The keyword this rule handles.
        decode (FieldDecoder): Turns the token into field updates.
        repeated (bool): When True, every update value is appended to a list
            under its field name instead of being written once.
    """

    keyword: str
    decode: FieldDecoder
    repeated: bool = False


def keyword_only(field_name: str | None = None) -> FieldDecoder:
    """Return a decoder for keyword lines that take no arguments.

    Args:
        field_name (str | None): If given, the field is set to True when the
            keyword appears.
    """

    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 0)
        return {field_name: True} if field_name else {}

    return decode


def expect_args(token: Token, count: int, *, at_least: bool = False) -> None:
    """Check a token's argument count.

    Raises:
        MalformedDocumentError: With cause ``ILLEGAL_LINE`` on a mismatch.
    """
    n: int = len(token.args)
    if (at_least and n < count) or (not at_least and n != count):
        raise MalformedDocumentError(
            MalformedCause.ILLEGAL_LINE,
            f"Illegal line '{token.line}': expected {'at least ' if at_least else ''}"
            f"{count} argument(s), found {n}.",
            keyword=token.keyword,
            line=token.line,
        )


@dataclass(frozen=True)
class Grammar:
    """Everything the engine needs to parse one document kind.

    Attributes:
        kind (DocumentKind): The kind this grammar parses.
        leading_keyword (str): Keyword that opens every document.
        constraints (KeywordConstraintSet): Occurrence rules.
        rules (tuple[FieldRule, ...]): One rule per decoded keyword.
        record_type (type[DescriptorRecord]): Frozen record built per document.
        passthrough_keywords (frozenset[str]): Keywords that are recognized but
            carry no decoded value.
        max_unrecognized_lines (int | None): Tolerant-mode cap on collected
            unrecognized lines; None means uncapped.
        digest_end_marker (str | None): When set, a SHA-1 digest is computed over
            the document from its leading keyword through this marker.
        sha256_end_marker (str | None): When set, a SHA-256 digest is computed
            over the document from its leading keyword through this marker.
        description (str): Human-readable description.

    Raises:
        GrammarDefinitionError: If the declaration is inconsistent.
    """

    kind: DocumentKind
    leading_keyword: str
    constraints: KeywordConstraintSet
    rules: tuple[FieldRule, ...]
    record_type: type[DescriptorRecord]
    passthrough_keywords: frozenset[str] = frozenset()
    max_unrecognized_lines: int | None = None
    digest_end_marker: str | None = None
    sha256_end_marker: str | None = None
    description: str = ""

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.keyword in seen:
                raise GrammarDefinitionError(
                    f"{self.kind.type_name}: keyword '{rule.keyword}' has more than one rule"
                )
            seen.add(rule.keyword)

        if self.leading_keyword not in self.constraints.exactly_once:
            raise GrammarDefinitionError(
                f"{self.kind.type_name}: leading keyword '{self.leading_keyword}' "
                "must be declared exactly-once"
            )
        unknown: frozenset[str] = self.constraints.keywords - self.recognized
        if unknown:
            raise GrammarDefinitionError(
                f"{self.kind.type_name}: constraints name unrecognized keyword(s) {sorted(unknown)}"
            )
        if self.max_unrecognized_lines is not None and self.max_unrecognized_lines < 0:
            raise GrammarDefinitionError(
                f"{self.kind.type_name}: max_unrecognized_lines must be >= 0"
            )
        record_fields: set[str] = {f.name for f in dataclasses.fields(self.record_type)}
        for marker, field_name in (
            (self.digest_end_marker, "digest"),
            (self.sha256_end_marker, "digest_sha256"),
        ):
            if marker is not None and field_name not in record_fields:
                raise GrammarDefinitionError(
                    f"{self.kind.type_name}: digest requested but "
                    f"{self.record_type.__name__} has no '{field_name}' field"
                )
        logger.trace(
            "grammar: %s with %d rule(s), leading keyword '%s'",
            self.kind.type_name,
            len(self.rules),
            self.leading_keyword,
        )

    @property
    def recognized(self) -> frozenset[str]:
        """Return every keyword the grammar recognizes."""
        return frozenset(rule.keyword for rule in self.rules) | self.passthrough_keywords

    @property
    def rules_by_keyword(self) -> dict[str, FieldRule]:
        """Return the rules indexed by keyword."""
        return {rule.keyword: rule for rule in self.rules}

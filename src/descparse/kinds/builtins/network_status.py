# topmark:header:start
#
#   project      : DescParse
#   file         : network_status.py
#   file_relpath : src/descparse/kinds/builtins/network_status.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Version 3 network statuses: consensuses, microdesc consensuses and votes.

The header and footer are decoded field by field. Router status entries are
decoded from their ``r`` lines only; the per-entry ``s``, ``v``, ``pr``, ``w``,
``p``, ``a`` and ``m`` lines are recognized but not decoded.

Exports:
    GRAMMARS: Grammars for ``network-status-consensus-3``,
        ``network-status-microdesc-consensus-3`` and ``network-status-vote-3``.

Notes:
    A vote embeds its authority's key certificate; the certificate keywords are
    recognized so that tolerant and strict parses of a vote agree.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Tuple, Union, cast

from descparse.core.errors import MalformedCause, MalformedDocumentError, MalformedValueError
from descparse.grammar.constraints import KeywordConstraintSet
from descparse.grammar.values import (
    parse_hex_digest,
    parse_int,
    parse_ipv4_address,
    parse_nickname,
    parse_port,
    parse_timestamp,
)
from descparse.kinds.base import (
    DescriptorRecord,
    DocumentKind,
    FieldRule,
    Grammar,
    expect_args,
    keyword_only,
)
from descparse.kinds.fields import space_key_value_field, timestamp_field

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from descparse.grammar.tokens import Token
    from descparse.kinds.base import FieldDecoder

LEADING_KEYWORD: Final[str] = "network-status-version"

# Field under which dir-source, contact and vote-digest lines are collected in order.
AUTHORITY_LINES: Final[str] = "authority_lines"
AUTHORITY_FIELDS: Final[dict[str, str]] = {"contact": "contact_line", "vote-digest": "vote_digest"}

ENTRY_KEYWORDS: Final[frozenset[str]] = frozenset({"a", "s", "v", "pr", "w", "p", "m", "id"})
EMBEDDED_CERTIFICATE_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "dir-key-certificate-version",
        "dir-address",
        "fingerprint",
        "dir-key-published",
        "dir-key-expires",
        "dir-identity-key",
        "dir-signing-key",
        "dir-key-crosscert",
        "dir-key-certification",
    }
)
OTHER_PASSTHROUGH_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "recommended-client-protocols",
        "recommended-relay-protocols",
        "required-client-protocols",
        "required-relay-protocols",
        "shared-rand-participate",
        "shared-rand-commit",
        "shared-rand-previous-value",
        "shared-rand-current-value",
        "flag-thresholds",
        "legacy-dir-key",
        "package",
    }
)


@dataclass(frozen=True)
class DirSource:
    """One authority section: a ``dir-source`` line and the lines that follow it.

    Attributes:
        nickname (str): Authority nickname.
        identity (str): Hex identity fingerprint.
        hostname (str): Hostname.
        address (str): IPv4 address.
        dir_port (int): Directory port.
        or_port (int): OR port.
        contact_line (str | None): The section's ``contact`` text.
        vote_digest (str | None): The section's ``vote-digest`` (consensuses only).
        raw (bytes): The section's lines, newline-terminated.
    """

    nickname: str
    identity: str
    hostname: str
    address: str
    dir_port: int
    or_port: int
    contact_line: str | None = None
    vote_digest: str | None = None
    raw: bytes = b""


# (keyword, decoded value, raw line) for one dir-source, contact or vote-digest line.
AuthorityLine = Tuple[str, Union[DirSource, str], str]


@dataclass(frozen=True)
class StatusEntry:
    """One router status entry, as given by its ``r`` line.

    Attributes:
        nickname (str): Relay nickname.
        identity (str): Base64 identity digest.
        descriptor (str | None): Base64 descriptor digest; None in microdesc
            consensuses, whose ``r`` lines omit it.
        published_millis (int): Publication time of the referenced descriptor.
        address (str): IPv4 address.
        or_port (int): OR port.
        dir_port (int): Directory port.
    """

    nickname: str
    identity: str
    descriptor: str | None
    published_millis: int
    address: str
    or_port: int
    dir_port: int


@dataclass(frozen=True)
class NetworkStatus(DescriptorRecord):
    """Decoded header, entries and footer of a v3 network status."""

    version: int = 3
    flavor: str | None = None
    vote_status: str = ""
    consensus_method: int | None = None
    consensus_methods: tuple[int, ...] | None = None
    published_millis: int | None = None
    valid_after_millis: int = 0
    fresh_until_millis: int = 0
    valid_until_millis: int = 0
    vote_seconds: int = 0
    dist_seconds: int = 0
    client_versions: tuple[str, ...] | None = None
    server_versions: tuple[str, ...] | None = None
    known_flags: tuple[str, ...] = ()
    params: Mapping[str, int] | None = None
    dir_sources: tuple[DirSource, ...] = ()
    entries: tuple[StatusEntry, ...] = ()
    has_footer: bool = False
    bandwidth_weights: Mapping[str, int] | None = None
    signatures: tuple[str, ...] = ()

    @classmethod
    def from_fields(cls, fields: Mapping[str, object]) -> NetworkStatus:
        """Group the authority lines into `DirSource` sections, then build the record."""
        remaining: dict[str, object] = dict(fields)
        lines = cast("list[AuthorityLine]", remaining.pop(AUTHORITY_LINES, []))
        if lines:
            remaining["dir_sources"] = group_dir_sources(lines)
        return super().from_fields(remaining)


def group_dir_sources(lines: Sequence[AuthorityLine]) -> list[DirSource]:
    """Attach each ``contact`` and ``vote-digest`` line to the preceding ``dir-source``.

    Raises:
        MalformedDocumentError: If such a line precedes every ``dir-source``
            line, or appears twice in one section.
    """
    sections: list[tuple[DirSource, dict[str, str], list[str]]] = []
    for keyword, value, line in lines:
        if isinstance(value, DirSource):
            sections.append((value, {}, [line]))
            continue
        if not sections:
            raise MalformedDocumentError(
                MalformedCause.ILLEGAL_LINE,
                f"Keyword '{keyword}' must follow a 'dir-source' line.",
                keyword=keyword,
                line=line,
            )
        _, updates, raw_lines = sections[-1]
        field_name: str = AUTHORITY_FIELDS[keyword]
        if field_name in updates:
            raise MalformedDocumentError(
                MalformedCause.DUPLICATE_KEYWORD,
                f"Keyword '{keyword}' must be contained at most once per 'dir-source'.",
                keyword=keyword,
                line=line,
            )
        updates[field_name] = value
        raw_lines.append(line)
    return [
        dataclasses.replace(source, raw="".join(f"{ln}\n" for ln in raw_lines).encode(), **updates)
        for source, updates, raw_lines in sections
    ]


def _decode_version(token: Token) -> Mapping[str, object]:
    expect_args(token, 1, at_least=True)
    if len(token.args) > 2:
        expect_args(token, 2)
    version: int = parse_int(token.line, token.args[0])
    if version != 3:
        raise MalformedValueError(token.line, token.args[0], "network status version 3")
    flavor: str | None = token.args[1] if len(token.args) == 2 else None
    return {"version": version, "flavor": flavor}


def _vote_status(expected: str) -> FieldDecoder:
    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 1)
        if token.args[0] != expected:
            raise MalformedValueError(token.line, token.args[0], f"vote-status '{expected}'")
        return {"vote_status": expected}

    return decode


def _decode_consensus_method(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"consensus_method": parse_int(token.line, token.args[0], minimum=1)}


def _decode_consensus_methods(token: Token) -> Mapping[str, object]:
    expect_args(token, 1, at_least=True)
    return {
        "consensus_methods": tuple(
            parse_int(token.line, method, minimum=1) for method in token.args
        )
    }


def _decode_voting_delay(token: Token) -> Mapping[str, object]:
    expect_args(token, 2)
    return {
        "vote_seconds": parse_int(token.line, token.args[0], minimum=0),
        "dist_seconds": parse_int(token.line, token.args[1], minimum=0),
    }


def _versions(name: str) -> FieldDecoder:
    def decode(token: Token) -> Mapping[str, object]:
        if len(token.args) > 1:
            expect_args(token, 1)
        return {name: tuple(token.args[0].split(",")) if token.args else ()}

    return decode


def _decode_known_flags(token: Token) -> Mapping[str, object]:
    return {"known_flags": tuple(token.args)}


def _decode_dir_source(token: Token) -> Mapping[str, object]:
    expect_args(token, 6)
    nickname, identity, hostname, address, dir_port, or_port = token.args
    source = DirSource(
        nickname=nickname,
        identity=parse_hex_digest(token.line, identity),
        hostname=hostname,
        address=parse_ipv4_address(token.line, address),
        dir_port=parse_port(token.line, dir_port),
        or_port=parse_port(token.line, or_port),
    )
    return {AUTHORITY_LINES: (token.keyword, source, token.line)}


def _decode_contact(token: Token) -> Mapping[str, object]:
    return {AUTHORITY_LINES: (token.keyword, " ".join(token.args), token.line)}


def _decode_vote_digest(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    digest: str = parse_hex_digest(token.line, token.args[0])
    return {AUTHORITY_LINES: (token.keyword, digest, token.line)}


def _decode_r(token: Token) -> Mapping[str, object]:
    # Full consensuses and votes carry a descriptor digest; microdesc consensuses do not.
    if len(token.args) == 8:
        nickname, identity, descriptor, date, time, address, or_port, dir_port = token.args
    else:
        expect_args(token, 7)
        nickname, identity, date, time, address, or_port, dir_port = token.args
        descriptor = None
    return {
        "entries": StatusEntry(
            nickname=parse_nickname(token.line, nickname),
            identity=identity,
            descriptor=descriptor,
            published_millis=parse_timestamp(token.line, (date, time)),
            address=parse_ipv4_address(token.line, address),
            or_port=parse_port(token.line, or_port),
            dir_port=parse_port(token.line, dir_port),
        )
    }


def _decode_directory_signature(token: Token) -> Mapping[str, object]:
    # An optional digest algorithm may precede the identity and signing-key digests.
    if len(token.args) == 3:
        identity = token.args[1]
    else:
        expect_args(token, 2)
        identity = token.args[0]
    return {"signatures": parse_hex_digest(token.line, identity)}


def _rules(vote: bool) -> tuple[FieldRule, ...]:
    rules: list[FieldRule] = [
        FieldRule("network-status-version", _decode_version),
        FieldRule("vote-status", _vote_status("vote" if vote else "consensus")),
        FieldRule("valid-after", timestamp_field("valid_after_millis")),
        FieldRule("fresh-until", timestamp_field("fresh_until_millis")),
        FieldRule("valid-until", timestamp_field("valid_until_millis")),
        FieldRule("voting-delay", _decode_voting_delay),
        FieldRule("client-versions", _versions("client_versions")),
        FieldRule("server-versions", _versions("server_versions")),
        FieldRule("known-flags", _decode_known_flags),
        FieldRule("params", space_key_value_field("params")),
        FieldRule("dir-source", _decode_dir_source, repeated=True),
        FieldRule("contact", _decode_contact, repeated=True),
        FieldRule("r", _decode_r, repeated=True),
        FieldRule("directory-footer", keyword_only("has_footer")),
        FieldRule("bandwidth-weights", space_key_value_field("bandwidth_weights")),
        FieldRule("directory-signature", _decode_directory_signature, repeated=True),
    ]
    if vote:
        rules.append(FieldRule("consensus-methods", _decode_consensus_methods))
        rules.append(FieldRule("published", timestamp_field("published_millis")))
    else:
        rules.append(FieldRule("consensus-method", _decode_consensus_method))
        rules.append(FieldRule("vote-digest", _decode_vote_digest, repeated=True))
    return tuple(rules)


def _constraints(vote: bool) -> KeywordConstraintSet:
    exactly_once: list[str] = [
        "network-status-version",
        "vote-status",
        "valid-after",
        "fresh-until",
        "valid-until",
        "voting-delay",
        "known-flags",
    ]
    exactly_once.extend(("consensus-methods", "published") if vote else ("consensus-method",))
    return KeywordConstraintSet.build(
        exactly_once=exactly_once,
        at_most_once=(
            "client-versions",
            "server-versions",
            "params",
            "directory-footer",
            "bandwidth-weights",
        ),
        dependency_groups={"directory-footer": ("bandwidth-weights",)},
    )


def _grammar(kind: DocumentKind, description: str) -> Grammar:
    vote: bool = kind is DocumentKind.NETWORK_STATUS_VOTE
    passthrough: frozenset[str] = ENTRY_KEYWORDS | OTHER_PASSTHROUGH_KEYWORDS
    if vote:
        passthrough |= EMBEDDED_CERTIFICATE_KEYWORDS
    return Grammar(
        kind=kind,
        leading_keyword=LEADING_KEYWORD,
        constraints=_constraints(vote),
        rules=_rules(vote),
        record_type=NetworkStatus,
        passthrough_keywords=passthrough,
        description=description,
    )


GRAMMARS: list[Grammar] = [
    _grammar(DocumentKind.NETWORK_STATUS_CONSENSUS, "Network status consensus (v3)"),
    _grammar(
        DocumentKind.NETWORK_STATUS_MICRODESC_CONSENSUS,
        "Microdescriptor-flavored network status consensus (v3)",
    ),
    _grammar(DocumentKind.NETWORK_STATUS_VOTE, "Network status vote (v3)"),
]

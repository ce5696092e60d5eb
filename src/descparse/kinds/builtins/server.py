# topmark:header:start
#
#   project      : DescParse
#   file         : server.py
#   file_relpath : src/descparse/kinds/builtins/server.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Server descriptors (relay and sanitized bridge).

Exports:
    GRAMMARS: Grammars for ``server-descriptor`` and ``bridge-server-descriptor``.

Notes:
    - ``accept`` / ``reject`` lines are collected into one ordered exit policy.
    - ``or-address`` may repeat.
    - Key material (``onion-key``, ``signing-key``, ``identity-ed25519``, ...)
      is recognized but not decoded; the embedded blocks are skipped by the
      tokenizer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from descparse.grammar.constraints import KeywordConstraintSet
from descparse.grammar.values import (
    BandwidthHistory,
    parse_hex_digest,
    parse_int,
    parse_ipv4_address,
    parse_nickname,
    parse_port,
)
from descparse.kinds.base import (
    DescriptorRecord,
    DocumentKind,
    FieldRule,
    Grammar,
    expect_args,
    keyword_only,
)
from descparse.kinds.fields import (
    history_field,
    int_field,
    single_arg_field,
    text_field,
    timestamp_field,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.tokens import Token

LEADING_KEYWORD: Final[str] = "router"


@dataclass(frozen=True)
class ServerDescriptor(DescriptorRecord):
    """Decoded fields of a server descriptor."""

    nickname: str = ""
    address: str = ""
    or_port: int = 0
    socks_port: int = 0
    dir_port: int = 0
    bandwidth_rate: int = 0
    bandwidth_burst: int = 0
    bandwidth_observed: int = 0
    platform: str | None = None
    published_millis: int = 0
    fingerprint: str | None = None
    hibernating: bool = False
    uptime: int | None = None
    contact: str | None = None
    family: tuple[str, ...] | None = None
    exit_policy: tuple[str, ...] = ()
    ipv6_policy: str | None = None
    or_addresses: tuple[str, ...] = ()
    read_history: BandwidthHistory | None = None
    write_history: BandwidthHistory | None = None
    extra_info_digest: str | None = None
    hidden_service_dir: bool = False
    caches_extra_info: bool = False
    allow_single_hop_exits: bool = False
    tunnelled_dir_server: bool = False
    uses_enhanced_dns_logic: bool = False
    protocols: str | None = None
    proto: str | None = None
    ntor_onion_key: str | None = None
    master_key_ed25519: str | None = None
    router_sig_ed25519: str | None = None
    bridge_distribution_request: str | None = None
    digest: str | None = None
    digest_sha256: str | None = None


def _decode_router(token: Token) -> Mapping[str, object]:
    expect_args(token, 5)
    nickname, address, or_port, socks_port, dir_port = token.args
    return {
        "nickname": parse_nickname(token.line, nickname),
        "address": parse_ipv4_address(token.line, address),
        "or_port": parse_port(token.line, or_port),
        "socks_port": parse_port(token.line, socks_port),
        "dir_port": parse_port(token.line, dir_port),
    }


def _decode_bandwidth(token: Token) -> Mapping[str, object]:
    expect_args(token, 3, at_least=True)
    rate, burst, observed = (parse_int(token.line, value, minimum=0) for value in token.args[:3])
    return {"bandwidth_rate": rate, "bandwidth_burst": burst, "bandwidth_observed": observed}


def _decode_fingerprint(token: Token) -> Mapping[str, object]:
    expect_args(token, 10)
    for group in token.args:
        parse_hex_digest(token.line, group, 4)
    return {"fingerprint": parse_hex_digest(token.line, "".join(token.args))}


def _decode_hibernating(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"hibernating": parse_int(token.line, token.args[0], minimum=0, maximum=1) == 1}


def _decode_eventdns(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    enabled: int = parse_int(token.line, token.args[0], minimum=0, maximum=1)
    return {"uses_enhanced_dns_logic": enabled == 1}


def _decode_family(token: Token) -> Mapping[str, object]:
    return {"family": tuple(token.args)}


def _decode_policy_line(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"exit_policy": f"{token.keyword} {token.args[0]}"}


def _decode_or_address(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"or_addresses": token.args[0]}


def _decode_extra_info_digest(token: Token) -> Mapping[str, object]:
    # A second, base64 SHA-256 digest may follow the hex SHA-1 digest.
    expect_args(token, 1, at_least=True)
    return {"extra_info_digest": parse_hex_digest(token.line, token.args[0])}


def _decode_hidden_service_dir(token: Token) -> Mapping[str, object]:
    return {"hidden_service_dir": True}


RULES: Final[tuple[FieldRule, ...]] = (
    FieldRule("router", _decode_router),
    FieldRule("bandwidth", _decode_bandwidth),
    FieldRule("platform", text_field("platform")),
    FieldRule("published", timestamp_field("published_millis")),
    FieldRule("fingerprint", _decode_fingerprint),
    FieldRule("hibernating", _decode_hibernating),
    FieldRule("uptime", int_field("uptime", minimum=0)),
    FieldRule("contact", text_field("contact")),
    FieldRule("family", _decode_family),
    FieldRule("accept", _decode_policy_line, repeated=True),
    FieldRule("reject", _decode_policy_line, repeated=True),
    FieldRule("ipv6-policy", text_field("ipv6_policy")),
    FieldRule("or-address", _decode_or_address, repeated=True),
    FieldRule("read-history", history_field("read_history")),
    FieldRule("write-history", history_field("write_history")),
    FieldRule("extra-info-digest", _decode_extra_info_digest),
    FieldRule("hidden-service-dir", _decode_hidden_service_dir),
    FieldRule("caches-extra-info", keyword_only("caches_extra_info")),
    FieldRule("allow-single-hop-exits", keyword_only("allow_single_hop_exits")),
    FieldRule("tunnelled-dir-server", keyword_only("tunnelled_dir_server")),
    FieldRule("eventdns", _decode_eventdns),
    FieldRule("protocols", text_field("protocols")),
    FieldRule("proto", text_field("proto")),
    FieldRule("ntor-onion-key", single_arg_field("ntor_onion_key")),
    FieldRule("master-key-ed25519", single_arg_field("master_key_ed25519")),
    FieldRule("router-sig-ed25519", single_arg_field("router_sig_ed25519")),
    FieldRule("bridge-distribution-request", text_field("bridge_distribution_request")),
    FieldRule("onion-key", keyword_only()),
    FieldRule("signing-key", keyword_only()),
    FieldRule("identity-ed25519", keyword_only()),
    FieldRule("router-signature", keyword_only()),
)

PASSTHROUGH_KEYWORDS: Final[frozenset[str]] = frozenset(
    {"onion-key-crosscert", "ntor-onion-key-crosscert"}
)

CONSTRAINTS: Final[KeywordConstraintSet] = KeywordConstraintSet.build(
    exactly_once=("router", "bandwidth", "published"),
    at_most_once=(
        "platform",
        "fingerprint",
        "hibernating",
        "uptime",
        "contact",
        "family",
        "ipv6-policy",
        "read-history",
        "write-history",
        "extra-info-digest",
        "hidden-service-dir",
        "caches-extra-info",
        "allow-single-hop-exits",
        "tunnelled-dir-server",
        "eventdns",
        "protocols",
        "proto",
        "ntor-onion-key",
        "master-key-ed25519",
        "router-sig-ed25519",
        "bridge-distribution-request",
        "onion-key",
        "signing-key",
        "identity-ed25519",
        "onion-key-crosscert",
        "ntor-onion-key-crosscert",
        "router-signature",
    ),
    dependency_groups={
        "identity-ed25519": ("router-sig-ed25519", "master-key-ed25519"),
    },
)


def _grammar(kind: DocumentKind, description: str) -> Grammar:
    return Grammar(
        kind=kind,
        leading_keyword=LEADING_KEYWORD,
        constraints=CONSTRAINTS,
        rules=RULES,
        record_type=ServerDescriptor,
        passthrough_keywords=PASSTHROUGH_KEYWORDS,
        digest_end_marker="\nrouter-signature\n",
        sha256_end_marker="\n-----END SIGNATURE-----\n",
        description=description,
    )


GRAMMARS: list[Grammar] = [
    _grammar(DocumentKind.SERVER_DESCRIPTOR, "Relay server descriptor"),
    _grammar(DocumentKind.BRIDGE_SERVER_DESCRIPTOR, "Sanitized bridge server descriptor"),
]

# topmark:header:start
#
#   project      : DescParse
#   file         : microdesc.py
#   file_relpath : src/descparse/kinds/builtins/microdesc.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Microdescriptors.

A microdescriptor opens with a bare ``onion-key`` line followed by the key
block, so its leading keyword is matched with a trailing newline instead of a
space.

Exports:
    GRAMMARS: Grammar for ``microdescriptor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from descparse.core.errors import MalformedValueError
from descparse.grammar.constraints import KeywordConstraintSet
from descparse.kinds.base import (
    DescriptorRecord,
    DocumentKind,
    FieldRule,
    Grammar,
    expect_args,
    keyword_only,
)
from descparse.kinds.fields import single_arg_field

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.tokens import Token
    from descparse.kinds.base import FieldDecoder

LEADING_KEYWORD: Final[str] = "onion-key"


@dataclass(frozen=True)
class Microdescriptor(DescriptorRecord):
    """Decoded fields of a microdescriptor.

    Attributes:
        ntor_onion_key (str | None): Base64 curve25519 key.
        or_addresses (tuple[str, ...]): Additional ``address:port`` entries.
        family (tuple[str, ...] | None): Declared family members.
        default_policy (str | None): ``accept`` or ``reject`` (IPv4 summary).
        port_list (str | None): Port ranges the IPv4 summary applies to.
        ipv6_default_policy (str | None): ``accept`` or ``reject`` (IPv6 summary).
        ipv6_port_list (str | None): Port ranges the IPv6 summary applies to.
        identities (tuple[tuple[str, str], ...]): ``(key type, digest)`` pairs.
    """

    ntor_onion_key: str | None = None
    or_addresses: tuple[str, ...] = ()
    family: tuple[str, ...] | None = None
    default_policy: str | None = None
    port_list: str | None = None
    ipv6_default_policy: str | None = None
    ipv6_port_list: str | None = None
    identities: tuple[tuple[str, str], ...] = ()


def _policy_summary(prefix: str) -> FieldDecoder:
    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 2)
        policy, ports = token.args
        if policy not in ("accept", "reject"):
            raise MalformedValueError(token.line, policy, "'accept' or 'reject'")
        return {f"{prefix}default_policy": policy, f"{prefix}port_list": ports}

    return decode


def _decode_address(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"or_addresses": token.args[0]}


def _decode_family(token: Token) -> Mapping[str, object]:
    return {"family": tuple(token.args)}


def _decode_id(token: Token) -> Mapping[str, object]:
    expect_args(token, 2)
    return {"identities": (token.args[0], token.args[1])}


RULES: Final[tuple[FieldRule, ...]] = (
    FieldRule("onion-key", keyword_only()),
    FieldRule("ntor-onion-key", single_arg_field("ntor_onion_key")),
    FieldRule("a", _decode_address, repeated=True),
    FieldRule("family", _decode_family),
    FieldRule("p", _policy_summary("")),
    FieldRule("p6", _policy_summary("ipv6_")),
    FieldRule("id", _decode_id, repeated=True),
)

CONSTRAINTS: Final[KeywordConstraintSet] = KeywordConstraintSet.build(
    exactly_once=("onion-key",),
    at_most_once=("ntor-onion-key", "family", "p", "p6"),
)

GRAMMARS: list[Grammar] = [
    Grammar(
        kind=DocumentKind.MICRODESCRIPTOR,
        leading_keyword=LEADING_KEYWORD,
        constraints=CONSTRAINTS,
        rules=RULES,
        record_type=Microdescriptor,
        description="Microdescriptor",
    ),
]

# topmark:header:start
#
#   project      : DescParse
#   file         : certificate.py
#   file_relpath : src/descparse/kinds/builtins/certificate.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Directory authority key certificates (version 3).

Exports:
    GRAMMARS: Grammar for ``dir-key-certificate-3``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from descparse.core.errors import MalformedValueError
from descparse.grammar.constraints import KeywordConstraintSet
from descparse.grammar.values import parse_hex_digest, parse_int, parse_ipv4_address, parse_port
from descparse.kinds.base import (
    DescriptorRecord,
    DocumentKind,
    FieldRule,
    Grammar,
    expect_args,
    keyword_only,
)
from descparse.kinds.fields import timestamp_field

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.tokens import Token

LEADING_KEYWORD: Final[str] = "dir-key-certificate-version"


@dataclass(frozen=True)
class DirKeyCertificate(DescriptorRecord):
    """Decoded fields of a directory key certificate."""

    version: int = 0
    address: str | None = None
    dir_port: int | None = None
    fingerprint: str = ""
    published_millis: int = 0
    expires_millis: int = 0
    digest: str | None = None


def _decode_version(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    version: int = parse_int(token.line, token.args[0], minimum=0)
    if version != 3:
        raise MalformedValueError(token.line, token.args[0], "certificate version 3")
    return {"version": version}


def _decode_dir_address(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    address, sep, port = token.args[0].rpartition(":")
    if not sep:
        raise MalformedValueError(token.line, token.args[0], "an 'address:port' pair")
    return {
        "address": parse_ipv4_address(token.line, address),
        "dir_port": parse_port(token.line, port),
    }


def _decode_fingerprint(token: Token) -> Mapping[str, object]:
    expect_args(token, 1)
    return {"fingerprint": parse_hex_digest(token.line, token.args[0])}


RULES: Final[tuple[FieldRule, ...]] = (
    FieldRule("dir-key-certificate-version", _decode_version),
    FieldRule("dir-address", _decode_dir_address),
    FieldRule("fingerprint", _decode_fingerprint),
    FieldRule("dir-key-published", timestamp_field("published_millis")),
    FieldRule("dir-key-expires", timestamp_field("expires_millis")),
    FieldRule("dir-identity-key", keyword_only()),
    FieldRule("dir-signing-key", keyword_only()),
    FieldRule("dir-key-crosscert", keyword_only()),
    FieldRule("dir-key-certification", keyword_only()),
)

CONSTRAINTS: Final[KeywordConstraintSet] = KeywordConstraintSet.build(
    exactly_once=(
        "dir-key-certificate-version",
        "fingerprint",
        "dir-key-published",
        "dir-key-expires",
        "dir-identity-key",
        "dir-signing-key",
        "dir-key-certification",
    ),
    at_most_once=("dir-address", "dir-key-crosscert"),
)

GRAMMARS: list[Grammar] = [
    Grammar(
        kind=DocumentKind.DIR_KEY_CERTIFICATE,
        leading_keyword=LEADING_KEYWORD,
        constraints=CONSTRAINTS,
        rules=RULES,
        record_type=DirKeyCertificate,
        digest_end_marker="\ndir-key-certification\n",
        description="Directory authority key certificate (v3)",
    ),
]

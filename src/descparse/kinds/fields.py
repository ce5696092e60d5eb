# topmark:header:start
#
#   project      : DescParse
#   file         : fields.py
#   file_relpath : src/descparse/kinds/fields.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Field decoder factories.

Small builders that bind a value decoder from `descparse.grammar.values` to a
record field name, so built-in grammars can declare their rules as data:

    FieldRule("published", timestamp_field("published_millis"))

Every factory returns a `FieldDecoder` (token -> field updates).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from descparse.grammar.values import (
    parse_bandwidth_history,
    parse_float_list,
    parse_hex_digest,
    parse_int,
    parse_int_list,
    parse_key_value_list,
    parse_share,
    parse_space_key_value,
    parse_stats_end,
    parse_timestamp,
)
from descparse.kinds.base import expect_args

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.tokens import Token
    from descparse.kinds.base import FieldDecoder


def timestamp_field(name: str) -> FieldDecoder:
    """``<keyword> YYYY-MM-DD HH:MM:SS`` -> epoch milliseconds."""

    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 2)
        return {name: parse_timestamp(token.line, token.args, 0, 1)}

    return decode


def hex_digest_field(name: str, length: int = 40) -> FieldDecoder:
    """``<keyword> <hex>`` -> upper-case hex string."""

    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 1)
        return {name: parse_hex_digest(token.line, token.args[0], length)}

    return decode


def int_field(name: str, *, minimum: int | None = None) -> FieldDecoder:
    """``<keyword> <n>`` -> int."""

    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 1)
        return {name: parse_int(token.line, token.args[0], minimum=minimum)}

    return decode


def single_arg_field(name: str) -> FieldDecoder:
    """``<keyword> <value>`` -> the value, verbatim."""

    def decode(token: Token) -> Mapping[str, object]:
        expect_args(token, 1)
        return {name: token.args[0]}

    return decode


def text_field(name: str) -> FieldDecoder:
    """``<keyword> <free text>`` -> the remainder of the line, verbatim."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: " ".join(token.args)}

    return decode


def share_field(name: str) -> FieldDecoder:
    """``<keyword> <float>%`` -> float."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_share(token.line, token.args)}

    return decode


def key_value_field(name: str, key_length: int = 0) -> FieldDecoder:
    """``<keyword> k=v,k=v,...`` -> ``dict[str, int]`` (possibly empty)."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_key_value_list(token.line, token.args, 0, key_length)}

    return decode


def space_key_value_field(name: str) -> FieldDecoder:
    """``<keyword> k=v k=v ...`` -> ``dict[str, int]``."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_space_key_value(token.line, token.args, 0)}

    return decode


def int_list_field(name: str) -> FieldDecoder:
    """``<keyword> n,n,...`` -> ``list[int]``."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_int_list(token.line, token.args, 0)}

    return decode


def float_list_field(name: str) -> FieldDecoder:
    """``<keyword> f,f,...`` -> ``list[float]``."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_float_list(token.line, token.args, 0)}

    return decode


def stats_end_field(name: str) -> FieldDecoder:
    """``<keyword> YYYY-MM-DD HH:MM:SS (<n> s)`` -> `StatsInterval`."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_stats_end(token.line, token.args)}

    return decode


def history_field(name: str) -> FieldDecoder:
    """``<keyword> YYYY-MM-DD HH:MM:SS (<n> s) v,v,...`` -> `BandwidthHistory`."""

    def decode(token: Token) -> Mapping[str, object]:
        return {name: parse_bandwidth_history(token.line, token.args)}

    return decode

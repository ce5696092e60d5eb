# topmark:header:start
#
#   project      : DescParse
#   file         : extra_info.py
#   file_relpath : src/descparse/kinds/builtins/extra_info.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Extra-info descriptors (relay and bridge).

Extra-info descriptors carry bandwidth histories and the aggregated usage
statistics a relay publishes alongside its server descriptor. Every statistics
line belongs to a group that is only meaningful together with the group's
``*-stats-end`` line; the constraint set encodes those dependencies.

Exports:
    GRAMMARS: Grammars for ``extra-info`` and ``bridge-extra-info``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from descparse.core.errors import MalformedValueError
from descparse.grammar.constraints import KeywordConstraintSet
from descparse.grammar.values import (
    BandwidthHistory,
    StatsInterval,
    parse_hex_digest,
    parse_int_list,
    parse_nickname,
    parse_stats_end,
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
    float_list_field,
    hex_digest_field,
    history_field,
    int_field,
    int_list_field,
    key_value_field,
    share_field,
    stats_end_field,
    timestamp_field,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from descparse.grammar.tokens import Token

LEADING_KEYWORD: Final[str] = "extra-info"

DIRREQ_STATS_KEYWORDS: Final[tuple[str, ...]] = (
    "dirreq-stats-end",
    "dirreq-v2-ips",
    "dirreq-v3-ips",
    "dirreq-v2-reqs",
    "dirreq-v3-reqs",
    "dirreq-v2-share",
    "dirreq-v3-share",
    "dirreq-v2-resp",
    "dirreq-v3-resp",
    "dirreq-v2-direct-dl",
    "dirreq-v3-direct-dl",
    "dirreq-v2-tunneled-dl",
    "dirreq-v3-tunneled-dl",
)
ENTRY_STATS_KEYWORDS: Final[tuple[str, ...]] = ("entry-stats-end", "entry-ips")
CELL_STATS_KEYWORDS: Final[tuple[str, ...]] = (
    "cell-stats-end",
    "cell-processed-cells",
    "cell-queued-cells",
    "cell-time-in-queue",
    "cell-circuits-per-decile",
)
EXIT_STATS_KEYWORDS: Final[tuple[str, ...]] = (
    "exit-stats-end",
    "exit-kibibytes-written",
    "exit-kibibytes-read",
    "exit-streams-opened",
)
BRIDGE_STATS_KEYWORDS: Final[tuple[str, ...]] = ("bridge-stats-end", "bridge-ips")


@dataclass(frozen=True)
class ExtraInfoDescriptor(DescriptorRecord):
    """Decoded fields of an extra-info descriptor.

    Timestamps are epoch milliseconds. Mapping fields are None when their line
    is absent and empty when the line is present without values.
    """

    nickname: str = ""
    fingerprint: str = ""
    published_millis: int = 0
    read_history: BandwidthHistory | None = None
    write_history: BandwidthHistory | None = None
    dirreq_read_history: BandwidthHistory | None = None
    dirreq_write_history: BandwidthHistory | None = None
    geoip_db_digest: str | None = None
    geoip_start_time_millis: int | None = None
    geoip_client_origins: Mapping[str, int] | None = None

    dirreq_stats_end: StatsInterval | None = None
    dirreq_v2_ips: Mapping[str, int] | None = None
    dirreq_v3_ips: Mapping[str, int] | None = None
    dirreq_v2_reqs: Mapping[str, int] | None = None
    dirreq_v3_reqs: Mapping[str, int] | None = None
    dirreq_v2_share: float | None = None
    dirreq_v3_share: float | None = None
    dirreq_v2_resp: Mapping[str, int] | None = None
    dirreq_v3_resp: Mapping[str, int] | None = None
    dirreq_v2_direct_dl: Mapping[str, int] | None = None
    dirreq_v3_direct_dl: Mapping[str, int] | None = None
    dirreq_v2_tunneled_dl: Mapping[str, int] | None = None
    dirreq_v3_tunneled_dl: Mapping[str, int] | None = None

    entry_stats_end: StatsInterval | None = None
    entry_ips: Mapping[str, int] | None = None

    cell_stats_end: StatsInterval | None = None
    cell_processed_cells: tuple[int, ...] | None = None
    cell_queued_cells: tuple[float, ...] | None = None
    cell_time_in_queue: tuple[int, ...] | None = None
    cell_circuits_per_decile: int | None = None

    conn_bi_direct_stats_end: StatsInterval | None = None
    conn_bi_direct_below: int | None = None
    conn_bi_direct_read: int | None = None
    conn_bi_direct_write: int | None = None
    conn_bi_direct_both: int | None = None

    exit_stats_end: StatsInterval | None = None
    exit_kibibytes_written: Mapping[str, int] | None = None
    exit_kibibytes_read: Mapping[str, int] | None = None
    exit_streams_opened: Mapping[str, int] | None = None

    bridge_stats_end: StatsInterval | None = None
    bridge_ips: Mapping[str, int] | None = None

    digest: str | None = None


def _decode_extra_info(token: Token) -> Mapping[str, object]:
    expect_args(token, 2)
    return {
        "nickname": parse_nickname(token.line, token.args[0]),
        "fingerprint": parse_hex_digest(token.line, token.args[1]),
    }


def _decode_conn_bi_direct(token: Token) -> Mapping[str, object]:
    expect_args(token, 5)
    stats_end: StatsInterval = parse_stats_end(token.line, token.args[:4])
    counts: list[int] = parse_int_list(token.line, token.args, 4)
    if len(counts) != 4:
        raise MalformedValueError(
            token.line, token.args[4], "four comma-separated connection counts"
        )
    below, read, write, both = counts
    return {
        "conn_bi_direct_stats_end": stats_end,
        "conn_bi_direct_below": below,
        "conn_bi_direct_read": read,
        "conn_bi_direct_write": write,
        "conn_bi_direct_both": both,
    }


RULES: Final[tuple[FieldRule, ...]] = (
    FieldRule("extra-info", _decode_extra_info),
    FieldRule("published", timestamp_field("published_millis")),
    FieldRule("read-history", history_field("read_history")),
    FieldRule("write-history", history_field("write_history")),
    FieldRule("dirreq-read-history", history_field("dirreq_read_history")),
    FieldRule("dirreq-write-history", history_field("dirreq_write_history")),
    FieldRule("geoip-db-digest", hex_digest_field("geoip_db_digest")),
    FieldRule("geoip-start-time", timestamp_field("geoip_start_time_millis")),
    FieldRule("geoip-client-origins", key_value_field("geoip_client_origins", 2)),
    FieldRule("dirreq-stats-end", stats_end_field("dirreq_stats_end")),
    FieldRule("dirreq-v2-ips", key_value_field("dirreq_v2_ips", 2)),
    FieldRule("dirreq-v3-ips", key_value_field("dirreq_v3_ips", 2)),
    FieldRule("dirreq-v2-reqs", key_value_field("dirreq_v2_reqs", 2)),
    FieldRule("dirreq-v3-reqs", key_value_field("dirreq_v3_reqs", 2)),
    FieldRule("dirreq-v2-share", share_field("dirreq_v2_share")),
    FieldRule("dirreq-v3-share", share_field("dirreq_v3_share")),
    FieldRule("dirreq-v2-resp", key_value_field("dirreq_v2_resp")),
    FieldRule("dirreq-v3-resp", key_value_field("dirreq_v3_resp")),
    FieldRule("dirreq-v2-direct-dl", key_value_field("dirreq_v2_direct_dl")),
    FieldRule("dirreq-v3-direct-dl", key_value_field("dirreq_v3_direct_dl")),
    FieldRule("dirreq-v2-tunneled-dl", key_value_field("dirreq_v2_tunneled_dl")),
    FieldRule("dirreq-v3-tunneled-dl", key_value_field("dirreq_v3_tunneled_dl")),
    FieldRule("entry-stats-end", stats_end_field("entry_stats_end")),
    FieldRule("entry-ips", key_value_field("entry_ips", 2)),
    FieldRule("cell-stats-end", stats_end_field("cell_stats_end")),
    FieldRule("cell-processed-cells", int_list_field("cell_processed_cells")),
    FieldRule("cell-queued-cells", float_list_field("cell_queued_cells")),
    FieldRule("cell-time-in-queue", int_list_field("cell_time_in_queue")),
    FieldRule("cell-circuits-per-decile", int_field("cell_circuits_per_decile", minimum=0)),
    FieldRule("conn-bi-direct", _decode_conn_bi_direct),
    FieldRule("exit-stats-end", stats_end_field("exit_stats_end")),
    FieldRule("exit-kibibytes-written", key_value_field("exit_kibibytes_written")),
    FieldRule("exit-kibibytes-read", key_value_field("exit_kibibytes_read")),
    FieldRule("exit-streams-opened", key_value_field("exit_streams_opened")),
    FieldRule("bridge-stats-end", stats_end_field("bridge_stats_end")),
    FieldRule("bridge-ips", key_value_field("bridge_ips", 2)),
    FieldRule("router-signature", keyword_only()),
)

CONSTRAINTS: Final[KeywordConstraintSet] = KeywordConstraintSet.build(
    exactly_once=("extra-info", "published"),
    at_most_once=(
        "read-history",
        "write-history",
        "dirreq-read-history",
        "dirreq-write-history",
        "geoip-db-digest",
        "router-signature",
        "conn-bi-direct",
        *DIRREQ_STATS_KEYWORDS,
        *ENTRY_STATS_KEYWORDS,
        *CELL_STATS_KEYWORDS,
        *EXIT_STATS_KEYWORDS,
        *BRIDGE_STATS_KEYWORDS,
    ),
    dependency_groups={
        "dirreq-stats-end": DIRREQ_STATS_KEYWORDS,
        "entry-stats-end": ENTRY_STATS_KEYWORDS,
        "cell-stats-end": CELL_STATS_KEYWORDS,
        "exit-stats-end": EXIT_STATS_KEYWORDS,
        "bridge-stats-end": BRIDGE_STATS_KEYWORDS,
    },
)


def _grammar(kind: DocumentKind, description: str) -> Grammar:
    return Grammar(
        kind=kind,
        leading_keyword=LEADING_KEYWORD,
        constraints=CONSTRAINTS,
        rules=RULES,
        record_type=ExtraInfoDescriptor,
        digest_end_marker="\nrouter-signature\n",
        description=description,
    )


GRAMMARS: list[Grammar] = [
    _grammar(DocumentKind.EXTRA_INFO, "Relay extra-info descriptor"),
    _grammar(DocumentKind.BRIDGE_EXTRA_INFO, "Sanitized bridge extra-info descriptor"),
]

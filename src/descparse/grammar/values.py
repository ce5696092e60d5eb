# topmark:header:start
#
#   project      : DescParse
#   file         : values.py
#   file_relpath : src/descparse/grammar/values.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Value decoders.

Pure functions that turn line arguments into typed values. Each decoder takes
the raw line (for error reporting) and the argument(s) it decodes, and raises
`MalformedValueError` naming the line, the rejected argument and the expected
shape.

Argument indices are relative to the token arguments, i.e. the keyword itself
is not counted.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from descparse.core.errors import MalformedValueError
from descparse.grammar.tokens import split_fields

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

HEX_DIGEST_LENGTH: Final[int] = 40
NICKNAME_MAX_LENGTH: Final[int] = 19

_HEX_RE: Final[re.Pattern[str]] = re.compile(r"[0-9a-fA-F]+")
_NICKNAME_RE: Final[re.Pattern[str]] = re.compile(r"[0-9a-zA-Z]{1,%d}" % NICKNAME_MAX_LENGTH)
_DATE_RE: Final[re.Pattern[str]] = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_TIME_RE: Final[re.Pattern[str]] = re.compile(r"\d{2}:\d{2}:\d{2}", re.ASCII)
_INT_RE: Final[re.Pattern[str]] = re.compile(r"-?\d+", re.ASCII)
_UINT_RE: Final[re.Pattern[str]] = re.compile(r"\d+", re.ASCII)
_FLOAT_RE: Final[re.Pattern[str]] = re.compile(
    r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?", re.ASCII
)

_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class BandwidthHistory:
    """A decoded ``*-history`` line.

    Attributes:
        line (str): The raw line.
        history_end_millis (int): End of the most recent interval, in epoch milliseconds.
        interval_length (int): Length of each interval, in seconds.
        bandwidth_values (Mapping[int, int]): Read-only map of interval end
            (epoch ms) to byte count, oldest first.
    """

    line: str
    history_end_millis: int
    interval_length: int
    bandwidth_values: Mapping[int, int]


@dataclass(frozen=True, slots=True)
class StatsInterval:
    """A decoded ``<timestamp> (<n> s)`` pair.

    Attributes:
        end_millis (int): Interval end, in epoch milliseconds.
        interval_length (int): Interval length, in seconds.
    """

    end_millis: int
    interval_length: int


def _arg(line: str, args: Sequence[str], index: int, expected: str) -> str:
    if index >= len(args):
        raise MalformedValueError(line, None, expected)
    return args[index]


def parse_hex_digest(line: str, value: str, length: int = HEX_DIGEST_LENGTH) -> str:
    """Decode a hex digest of exactly ``length`` characters.

    Returns:
        str: The digest in upper case.
    """
    if len(value) != length or not _HEX_RE.fullmatch(value):
        raise MalformedValueError(line, value, f"a {length}-character hex string")
    return value.upper()


def parse_nickname(line: str, value: str) -> str:
    """Decode a relay nickname (1 to 19 alphanumeric characters)."""
    if not _NICKNAME_RE.fullmatch(value):
        raise MalformedValueError(line, value, "a 1-19 character alphanumeric nickname")
    return value


def parse_int(
    line: str,
    value: str,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    """Decode a decimal integer, optionally bounded (inclusive)."""
    if not _INT_RE.fullmatch(value):
        raise MalformedValueError(line, value, "an integer")
    number: int = int(value)
    if minimum is not None and number < minimum:
        raise MalformedValueError(line, value, f"an integer >= {minimum}")
    if maximum is not None and number > maximum:
        raise MalformedValueError(line, value, f"an integer <= {maximum}")
    return number


def parse_port(line: str, value: str) -> int:
    """Decode a TCP port number (0 to 65535)."""
    return parse_int(line, value, minimum=0, maximum=65535)


def parse_ipv4_address(line: str, value: str) -> str:
    """Decode a dotted-quad IPv4 address."""
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        raise MalformedValueError(line, value, "an IPv4 address") from None
    return value


def parse_timestamp(
    line: str, args: Sequence[str], date_index: int = 0, time_index: int = 1
) -> int:
    """Decode ``YYYY-MM-DD HH:MM:SS`` (UTC) spread over two arguments.

    Returns:
        int: Milliseconds since the Unix epoch.
    """
    expected: str = "a 'YYYY-MM-DD HH:MM:SS' timestamp"
    date: str = _arg(line, args, date_index, expected)
    time: str = _arg(line, args, time_index, expected)
    if not _DATE_RE.fullmatch(date):
        raise MalformedValueError(line, date, expected)
    if not _TIME_RE.fullmatch(time):
        raise MalformedValueError(line, time, expected)
    try:
        parsed: datetime = datetime.strptime(f"{date} {time}", _TIMESTAMP_FORMAT)
    except ValueError:
        raise MalformedValueError(line, f"{date} {time}", expected) from None
    return int(parsed.replace(tzinfo=timezone.utc).timestamp()) * 1000


def parse_seconds(line: str, value: str) -> int:
    """Decode a non-negative number of seconds."""
    if not _UINT_RE.fullmatch(value):
        raise MalformedValueError(line, value, "a non-negative number of seconds")
    return int(value)


def parse_interval(line: str, args: Sequence[str], index: int) -> int:
    """Decode an ``(<n> s)`` interval spread over ``args[index]`` and ``args[index + 1]``."""
    expected: str = "an interval of the form '(<n> s)'"
    opening: str = _arg(line, args, index, expected)
    closing: str = _arg(line, args, index + 1, expected)
    if not opening.startswith("(") or len(opening) < 2 or closing != "s)":
        raise MalformedValueError(line, f"{opening} {closing}", expected)
    return parse_seconds(line, opening[1:])


def parse_stats_end(line: str, args: Sequence[str]) -> StatsInterval:
    """Decode ``<date> <time> (<n> s)``, with nothing after it."""
    if len(args) != 4:
        raise MalformedValueError(line, None, "'YYYY-MM-DD HH:MM:SS (<n> s)'")
    return StatsInterval(
        end_millis=parse_timestamp(line, args, 0, 1),
        interval_length=parse_interval(line, args, 2),
    )


def parse_share(line: str, args: Sequence[str]) -> float:
    """Decode a single ``<float>%`` argument as a fraction in percent units."""
    expected: str = "a non-negative percentage like '0.37%'"
    if len(args) != 1:
        raise MalformedValueError(line, None, expected)
    value: str = args[0]
    if len(value) < 2 or not value.endswith("%") or not _FLOAT_RE.fullmatch(value[:-1]):
        raise MalformedValueError(line, value, expected)
    share: float = float(value[:-1])
    if share < 0:
        raise MalformedValueError(line, value, expected)
    return share


def _single_list_argument(line: str, args: Sequence[str], index: int, expected: str) -> str | None:
    """Return the list argument at ``index``, or None if the list is absent.

    A list written as ``a=1, b=2`` arrives as two arguments; pieces are joined
    back together as long as every piece but the last ends with a comma.
    """
    if len(args) <= index:
        return None
    joined: str = args[index]
    for piece in args[index + 1 :]:
        if not joined.endswith(","):
            raise MalformedValueError(line, piece, expected)
        joined += piece
    return joined


def parse_key_value_list(
    line: str,
    args: Sequence[str],
    index: int = 0,
    key_length: int = 0,
) -> dict[str, int]:
    """Decode ``k1=v1,k2=v2,...`` with integer values.

    Args:
        line (str): The raw line.
        args (Sequence[str]): Token arguments.
        index (int): Position of the list among the arguments.
        key_length (int): Required key length; 0 accepts any non-empty key.

    Returns:
        dict[str, int]: The mapping in document order; empty if the list is absent.
    """
    expected: str = "a comma-separated list of key=value pairs with integer values"
    text: str | None = _single_list_argument(line, args, index, expected)
    result: dict[str, int] = {}
    if not text:
        return result
    for element in split_fields(text, ","):
        key, sep, value = element.partition("=")
        if (
            not sep
            or not key
            or (key_length > 0 and len(key) != key_length)
            or not _INT_RE.fullmatch(value)
        ):
            raise MalformedValueError(line, element, expected)
        result[key] = int(value)
    return result


def parse_int_list(line: str, args: Sequence[str], index: int = 0) -> list[int]:
    """Decode ``n1,n2,...`` as integers; empty if the list is absent."""
    expected: str = "a comma-separated list of integers"
    if len(args) > index + 1:
        raise MalformedValueError(line, args[index + 1], expected)
    if len(args) <= index:
        return []
    result: list[int] = []
    for element in split_fields(args[index], ","):
        if not _INT_RE.fullmatch(element):
            raise MalformedValueError(line, element, expected)
        result.append(int(element))
    return result


def parse_float_list(line: str, args: Sequence[str], index: int = 0) -> list[float]:
    """Decode ``f1,f2,...`` as floats; empty if the list is absent."""
    expected: str = "a comma-separated list of numbers"
    if len(args) > index + 1:
        raise MalformedValueError(line, args[index + 1], expected)
    if len(args) <= index:
        return []
    result: list[float] = []
    for element in split_fields(args[index], ","):
        if not _FLOAT_RE.fullmatch(element):
            raise MalformedValueError(line, element, expected)
        result.append(float(element))
    return result


def parse_space_key_value(line: str, args: Sequence[str], index: int = 0) -> dict[str, int]:
    """Decode space-separated ``k=v`` arguments with integer values."""
    expected: str = "space-separated key=value pairs with integer values"
    result: dict[str, int] = {}
    for element in args[index:]:
        key, sep, value = element.partition("=")
        if not sep or not key or not _INT_RE.fullmatch(value):
            raise MalformedValueError(line, element, expected)
        result[key] = int(value)
    return result


def parse_bandwidth_history(line: str, args: Sequence[str]) -> BandwidthHistory:
    """Decode ``<date> <time> (<n> s) [v1,v2,...]``.

    The last value belongs to the interval ending at the given timestamp; each
    earlier value ends one interval before the next.

    Raises:
        MalformedValueError: On a wrong argument count, a bad interval, a
            negative value, or an interval that would end before the epoch.
    """
    expected: str = "'YYYY-MM-DD HH:MM:SS (<n> s) [v1,v2,...]'"
    if len(args) not in (4, 5):
        raise MalformedValueError(line, None, expected)
    end_millis: int = parse_timestamp(line, args, 0, 1)
    interval: int = parse_interval(line, args, 2)

    raw_values: list[str] = split_fields(args[4], ",") if len(args) == 5 else []
    numbers: list[int] = []
    for raw in raw_values:
        if not _UINT_RE.fullmatch(raw):
            raise MalformedValueError(line, raw, "non-negative integer byte counts")
        numbers.append(int(raw))

    values: dict[int, int] = {}
    count: int = len(numbers)
    for i, number in enumerate(numbers):
        interval_end: int = end_millis - (count - 1 - i) * interval * 1000
        if interval_end < 0:
            raise MalformedValueError(line, None, "history intervals that end after the epoch")
        values[interval_end] = number
    return BandwidthHistory(
        line=line,
        history_end_millis=end_millis,
        interval_length=interval,
        bandwidth_values=MappingProxyType(values),
    )

# topmark:header:start
#
#   project      : DescParse
#   file         : tokens.py
#   file_relpath : src/descparse/grammar/tokens.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Line tokenizer.

Turns one physical line into a `Token` (keyword plus arguments), a
`CryptoBlockMarker`, or a `BlankLine`. Splitting is whitespace-literal: a line
is cut at every single ASCII space, so ``"extra-info  ABCD"`` yields the
arguments ``("", "ABCD")``. Trailing empty fields are dropped.

`iter_tokens` adds the skip-state: once a ``-----BEGIN`` marker is seen, every
line up to and including the matching ``-----END`` line is passed over without
being tokenized. Embedded keys and signatures are base64 text that may look
like keyword lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from descparse.config.logging import get_logger
from descparse.constants import CRYPTO_BEGIN_MARKER, CRYPTO_END_MARKER, OPT_PREFIX, SP

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from descparse.config.logging import DescParseLogger

logger: DescParseLogger = get_logger(__name__)

_LINE_BREAK_RE: re.Pattern[str] = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True)
class Token:
    """A keyword line.

    Attributes:
        keyword (str): The first field after stripping the ``opt `` prefix.
        args (tuple[str, ...]): The remaining fields.
        line (str): The physical line, verbatim (``opt `` prefix included).
        deprecated (bool): True if the line carried the ``opt `` prefix.
    """

    keyword: str
    args: tuple[str, ...]
    line: str
    deprecated: bool = False


@dataclass(frozen=True, slots=True)
class CryptoBlockMarker:
    """A ``-----BEGIN ...`` or ``-----END ...`` line."""

    begin: bool
    line: str


@dataclass(frozen=True, slots=True)
class BlankLine:
    """A line with no fields (empty or only spaces)."""

    line: str


LineItem = Union[Token, CryptoBlockMarker, BlankLine]


def split_fields(text: str, sep: str = SP) -> list[str]:
    """Split ``text`` at every ``sep``, dropping trailing empty fields.

    Interior empty fields are kept so that doubled separators stay visible to
    decoders (``"a,,b"`` gives ``["a", "", "b"]``).
    """
    fields: list[str] = text.split(sep)
    while fields and not fields[-1]:
        fields.pop()
    return fields


def split_lines(text: str) -> list[str]:
    r"""Split document text into physical lines.

    Lines end at ``\n``, ``\r\n`` or ``\r``. A final terminator does not produce
    an extra empty line.
    """
    if not text:
        return []
    lines: list[str] = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def tokenize(line: str) -> LineItem:
    """Classify and split a single line.

    Args:
        line (str): One physical line without its terminator.

    Returns:
        LineItem: A `CryptoBlockMarker` for block markers, a `BlankLine` when no
            fields remain, else a `Token`.
    """
    if line.startswith(CRYPTO_BEGIN_MARKER):
        return CryptoBlockMarker(begin=True, line=line)
    if line.startswith(CRYPTO_END_MARKER):
        return CryptoBlockMarker(begin=False, line=line)

    deprecated: bool = line.startswith(OPT_PREFIX)
    body: str = line[len(OPT_PREFIX) :] if deprecated else line
    fields: list[str] = split_fields(body)
    if not fields:
        return BlankLine(line=line)
    return Token(keyword=fields[0], args=tuple(fields[1:]), line=line, deprecated=deprecated)


def iter_tokens(lines: Iterable[str]) -> Iterator[Token | BlankLine]:
    """Tokenize ``lines``, skipping embedded crypto blocks.

    Block marker lines themselves are not yielded. A stray END marker outside a
    block is ignored.
    """
    in_block: bool = False
    skipped: int = 0
    for line in lines:
        if in_block:
            if line.startswith(CRYPTO_END_MARKER):
                logger.trace("tokens: left embedded block after %d line(s)", skipped)
                in_block = False
            else:
                skipped += 1
            continue

        item: LineItem = tokenize(line)
        if isinstance(item, CryptoBlockMarker):
            if item.begin:
                in_block = True
                skipped = 0
            continue
        yield item

    if in_block:
        logger.debug("tokens: embedded block not terminated; %d line(s) skipped", skipped)

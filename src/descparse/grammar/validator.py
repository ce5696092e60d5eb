# topmark:header:start
#
#   project      : DescParse
#   file         : validator.py
#   file_relpath : src/descparse/grammar/validator.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Grammar validator.

Checks a token stream against a document kind's leading keyword, recognized
keyword set and `KeywordConstraintSet`. Validation runs before any value is
decoded, so a document that violates its occurrence rules is rejected with a
`MalformedDocumentError` regardless of how well-formed its values are.

Checks, in order:

1. The first line carries the leading keyword (in every mode).
2. Lines whose keyword is not recognized fail in strict mode, and are collected
   verbatim in tolerant mode (subject to an optional cap).
3. Exactly-once keywords occur exactly once.
4. At-most-once keywords occur at most once.
5. Every present keyword's dependency is present too.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from descparse.config.logging import get_logger
from descparse.core.errors import MalformedCause, MalformedDocumentError
from descparse.grammar.tokens import BlankLine, Token

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from descparse.config.logging import DescParseLogger
    from descparse.grammar.constraints import KeywordConstraintSet

logger: DescParseLogger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a successful validation.

    Attributes:
        tokens (tuple[Token, ...]): Recognized tokens, in document order.
        counts (Mapping[str, int]): Occurrences per recognized keyword.
        unrecognized_lines (tuple[str, ...]): Collected unrecognized lines.
    """

    tokens: tuple[Token, ...]
    counts: Mapping[str, int]
    unrecognized_lines: tuple[str, ...]


def validate(
    items: Iterable[Token | BlankLine],
    *,
    leading_keyword: str,
    recognized: frozenset[str],
    constraints: KeywordConstraintSet,
    fail_unrecognized_lines: bool = False,
    max_unrecognized_lines: int | None = None,
) -> ValidationResult:
    """Validate a token stream.

    Args:
        items (Iterable[Token | BlankLine]): Output of `iter_tokens`.
        leading_keyword (str): Keyword the first line must carry.
        recognized (frozenset[str]): Keywords the grammar knows.
        constraints (KeywordConstraintSet): Occurrence rules.
        fail_unrecognized_lines (bool): Strict mode when True.
        max_unrecognized_lines (int | None): Tolerant-mode cap on collected
            unrecognized lines; lines past the cap are dropped.

    Returns:
        ValidationResult: Recognized tokens, counts and collected lines.

    Raises:
        MalformedDocumentError: On the first violated rule.
    """
    tokens: list[Token] = []
    unrecognized: list[str] = []
    counts: Counter[str] = Counter()
    first: bool = True

    for item in items:
        if first:
            first = False
            if not isinstance(item, Token) or item.keyword != leading_keyword:
                raise MalformedDocumentError(
                    MalformedCause.BAD_LEADING_KEYWORD,
                    f"Keyword '{leading_keyword}' must be contained in the first line.",
                    keyword=leading_keyword,
                    line=item.line,
                )

        if isinstance(item, Token) and item.keyword in recognized:
            tokens.append(item)
            counts[item.keyword] += 1
            continue

        if fail_unrecognized_lines:
            raise MalformedDocumentError(
                MalformedCause.UNRECOGNIZED_LINE,
                f"Unrecognized line '{item.line}'.",
                keyword=item.keyword if isinstance(item, Token) else None,
                line=item.line,
            )
        if max_unrecognized_lines is None or len(unrecognized) < max_unrecognized_lines:
            unrecognized.append(item.line)

    if first:
        raise MalformedDocumentError(
            MalformedCause.BAD_LEADING_KEYWORD,
            f"Empty document; keyword '{leading_keyword}' must be contained in the first line.",
            keyword=leading_keyword,
        )

    _check_counts(counts, constraints)

    if unrecognized:
        logger.debug("validator: collected %d unrecognized line(s)", len(unrecognized))
    return ValidationResult(
        tokens=tuple(tokens),
        counts=dict(counts),
        unrecognized_lines=tuple(unrecognized),
    )


def _check_counts(counts: Counter[str], constraints: KeywordConstraintSet) -> None:
    for keyword in sorted(constraints.exactly_once):
        n: int = counts[keyword]
        if n == 0:
            raise MalformedDocumentError(
                MalformedCause.MISSING_KEYWORD,
                f"Keyword '{keyword}' must be contained exactly once.",
                keyword=keyword,
            )
        if n > 1:
            raise MalformedDocumentError(
                MalformedCause.DUPLICATE_KEYWORD,
                f"Keyword '{keyword}' must be contained exactly once, found {n} times.",
                keyword=keyword,
            )

    for keyword in sorted(constraints.at_most_once):
        n = counts[keyword]
        if n > 1:
            raise MalformedDocumentError(
                MalformedCause.DUPLICATE_KEYWORD,
                f"Keyword '{keyword}' must be contained at most once, found {n} times.",
                keyword=keyword,
            )

    for keyword, required in sorted(constraints.depends_on.items()):
        if counts[keyword] > 0 and counts[required] == 0:
            raise MalformedDocumentError(
                MalformedCause.MISSING_DEPENDENCY,
                f"Keyword '{keyword}' is contained, but keyword '{required}' is not.",
                keyword=keyword,
            )

# topmark:header:start
#
#   project      : DescParse
#   file         : errors.py
#   file_relpath : src/descparse/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exception hierarchy for the parsing engine.

Two families:

* `DescriptorParseError` and its subclasses describe bad *input*. The runner
  catches them per document and turns them into
  [`UnparseableDescriptor`][descparse.core.model.UnparseableDescriptor] results.
* `GrammarDefinitionError` describes a broken *grammar or engine contract*
  (contradictory constraints, a splitter that cannot advance). It derives from
  `RuntimeError` and is never caught by the runner.
"""

from __future__ import annotations

from enum import Enum


class DescParseError(Exception):
    """Base class for all DescParse errors."""


class DescriptorParseError(DescParseError):
    """A document (or a whole blob) could not be parsed."""


class UnknownKindError(DescriptorParseError):
    """No document kind matched the blob prefix or the explicit type hint.

    Attributes:
        prefix (str): The inspected prefix (or the rejected type hint).
    """

    def __init__(self, prefix: str, message: str | None = None) -> None:
        self.prefix = prefix
        super().__init__(
            message or f"Could not detect descriptor type in descriptor starting with {prefix!r}."
        )


class UnsupportedKindError(DescriptorParseError):
    """The kind was detected but no grammar is registered for it.

    Attributes:
        kind (str): Type name of the detected kind.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No grammar registered for descriptor type '{kind}'.")


class MalformedCause(Enum):
    """Sub-cause of a `MalformedDocumentError`."""

    MISSING_KEYWORD = "missing-keyword"
    DUPLICATE_KEYWORD = "duplicate-keyword"
    MISSING_DEPENDENCY = "missing-dependency"
    BAD_LEADING_KEYWORD = "bad-leading-keyword"
    UNRECOGNIZED_LINE = "unrecognized-line"
    ILLEGAL_LINE = "illegal-line"


class MalformedDocumentError(DescriptorParseError):
    """A grammar or keyword-constraint violation.

    Attributes:
        cause (MalformedCause): Which rule was violated.
        keyword (str | None): The keyword the rule is about, if any.
        line (str | None): The offending raw line, if any.
    """

    def __init__(
        self,
        cause: MalformedCause,
        message: str,
        *,
        keyword: str | None = None,
        line: str | None = None,
    ) -> None:
        self.cause = cause
        self.keyword = keyword
        self.line = line
        super().__init__(message)


class MalformedValueError(DescriptorParseError):
    """A value decoder rejected an argument.

    Attributes:
        line (str): The raw line the argument came from.
        argument (str | None): The rejected argument text.
        expected (str): Human-readable description of the expected shape.
    """

    def __init__(self, line: str, argument: str | None, expected: str) -> None:
        self.line = line
        self.argument = argument
        self.expected = expected
        if argument is None:
            message = f"Illegal line '{line}': expected {expected}."
        else:
            message = f"Illegal value '{argument}' in line '{line}': expected {expected}."
        super().__init__(message)


class GrammarDefinitionError(DescParseError, RuntimeError):
    """A grammar was declared with contradictory or incomplete rules."""


class SplitterError(GrammarDefinitionError):
    """The document splitter failed to make forward progress."""

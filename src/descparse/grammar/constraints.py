# topmark:header:start
#
#   project      : DescParse
#   file         : constraints.py
#   file_relpath : src/descparse/grammar/constraints.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Keyword occurrence constraints.

A `KeywordConstraintSet` is fixed per document kind. It is checked for internal
consistency when it is built; an inconsistent set is a programming error and
raises `GrammarDefinitionError` immediately instead of at parse time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from descparse.core.errors import GrammarDefinitionError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True)
class KeywordConstraintSet:
    """Occurrence rules for the keywords of one document kind.

    Attributes:
        exactly_once (frozenset[str]): Keywords that must appear exactly once.
        at_most_once (frozenset[str]): Keywords that may appear at most once.
        depends_on (Mapping[str, str]): ``keyword -> required keyword``; if the
            keyword appears, the required keyword must appear too.
    """

    exactly_once: frozenset[str] = frozenset()
    at_most_once: frozenset[str] = frozenset()
    depends_on: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        both: frozenset[str] = self.exactly_once & self.at_most_once
        if both:
            raise GrammarDefinitionError(
                f"Keywords declared both exactly-once and at-most-once: {sorted(both)}"
            )
        for keyword, required in self.depends_on.items():
            if keyword == required:
                raise GrammarDefinitionError(f"Keyword '{keyword}' depends on itself")
        object.__setattr__(self, "depends_on", MappingProxyType(dict(self.depends_on)))

    @property
    def keywords(self) -> frozenset[str]:
        """Return every keyword mentioned by any constraint."""
        return (
            self.exactly_once
            | self.at_most_once
            | frozenset(self.depends_on.keys())
            | frozenset(self.depends_on.values())
        )

    @classmethod
    def build(
        cls,
        *,
        exactly_once: Iterable[str] = (),
        at_most_once: Iterable[str] = (),
        dependency_groups: Mapping[str, Iterable[str]] | None = None,
    ) -> KeywordConstraintSet:
        """Build a constraint set from plain iterables.

        Args:
            exactly_once (Iterable[str]): Keywords required exactly once.
            at_most_once (Iterable[str]): Keywords allowed at most once.
            dependency_groups (Mapping[str, Iterable[str]] | None): ``required ->
                dependents``; every dependent requires the key. The key itself is
                skipped if it is listed among its own dependents.

        Returns:
            KeywordConstraintSet: The constraint set.
        """
        depends_on: dict[str, str] = {}
        for required, dependents in (dependency_groups or {}).items():
            for keyword in dependents:
                if keyword != required:
                    depends_on[keyword] = required
        return cls(
            exactly_once=frozenset(exactly_once),
            at_most_once=frozenset(at_most_once),
            depends_on=depends_on,
        )

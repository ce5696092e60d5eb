# topmark:header:start
#
#   project      : DescParse
#   file         : registry.py
#   file_relpath : src/descparse/kinds/registry.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Static registry of document grammars.

Maps each `DocumentKind` to its `Grammar`. The registry is assembled from the
``GRAMMARS`` lists of the built-in modules on first access and cached
thereafter. Kinds the sniffer can detect but that have no grammar simply have
no entry; callers receive an `UnsupportedKindError` for them.

Notes:
    * Built-ins are imported lazily from topical modules.
    * The returned mapping is a plain ``dict`` but should be treated as
      immutable by callers.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import import_module
from typing import TYPE_CHECKING, Any, Final, cast

from descparse.config.logging import DescParseLogger, get_logger
from descparse.core.errors import GrammarDefinitionError, UnsupportedKindError

from .base import DocumentKind, Grammar

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import ModuleType

logger: DescParseLogger = get_logger(__name__)

_BUILTIN_MODULES: Final[tuple[str, ...]] = (
    "descparse.kinds.builtins.network_status",
    "descparse.kinds.builtins.server",
    "descparse.kinds.builtins.extra_info",
    "descparse.kinds.builtins.microdesc",
    "descparse.kinds.builtins.certificate",
)


def _iter_builtin_grammars() -> Iterable[Grammar]:
    """Yield built-in Grammar objects from topical modules (lazy import)."""
    for modname in _BUILTIN_MODULES:
        mod: ModuleType = import_module(modname)
        grammars: Any = getattr(mod, "GRAMMARS", None)
        if not isinstance(grammars, list):
            raise GrammarDefinitionError(f"Module {modname} has no GRAMMARS list")
        for obj in cast("Sequence[object]", grammars):
            if not isinstance(obj, Grammar):
                raise GrammarDefinitionError(f"Non-Grammar entry in {modname}.GRAMMARS: {obj!r}")
            yield obj


def _generate_registry(grammars: Iterable[Grammar]) -> dict[DocumentKind, Grammar]:
    """Generate a registry mapping kinds to their grammars."""
    registry: dict[DocumentKind, Grammar] = {}
    for grammar in grammars:
        if grammar.kind in registry:
            raise GrammarDefinitionError(f"Duplicate grammar for kind: {grammar.kind.type_name}")
        registry[grammar.kind] = grammar
    return registry


@lru_cache(maxsize=1)
def get_grammar_registry() -> dict[DocumentKind, Grammar]:
    """Return (and cache) the grammar registry (lazy; import-time light)."""
    registry: dict[DocumentKind, Grammar] = _generate_registry(_iter_builtin_grammars())
    logger.debug("Loaded %d grammars", len(registry))
    return registry


def get_grammar(kind: DocumentKind) -> Grammar:
    """Return the grammar registered for ``kind``.

    Raises:
        UnsupportedKindError: If no grammar is registered for ``kind``.
    """
    grammar: Grammar | None = get_grammar_registry().get(kind)
    if grammar is None:
        raise UnsupportedKindError(kind.type_name)
    return grammar

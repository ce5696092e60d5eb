# topmark:header:start
#
#   project      : DescParse
#   file         : api.py
#   file_relpath : src/descparse/api.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Public DescParse API (stable surface).

This module exposes a small, typed API for callers that want to parse
descriptor blobs programmatically. Internal modules remain private.

Configuration contract
----------------------
- Public functions accept either a frozen [`descparse.config.Config`][] or a
  plain mapping mirroring the TOML shape (``{"parser": {...}}``). Mappings are
  normalized into a `Config` before the engine runs.
- Explicit keyword arguments (``fail_unrecognized_lines``, ``type_hint``) win
  over the config.

```python
from descparse import api

results = api.parse_descriptors(
    data,
    config={"parser": {"fail_unrecognized_lines": True}},
)
for result in results:
    if result.ok:
        print(result.kind.type_name, result.record)
    else:
        print(result.byte_range, result.message)
```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from descparse.config import Config, MutableConfig
from descparse.constants import SNIFF_WINDOW
from descparse.core.model import Blob
from descparse.kinds.base import DocumentKind
from descparse.kinds.registry import get_grammar_registry
from descparse.pipeline import runner
from descparse.pipeline.sniffer import sniff

if TYPE_CHECKING:
    from collections.abc import Iterator

    from descparse.core.errors import UnknownKindError
    from descparse.core.model import DescriptorResult
    from descparse.kinds.base import Grammar

ConfigLike = Union[Config, Mapping[str, Any]]


@dataclass(frozen=True)
class KindInfo:
    """Description of one document kind.

    Attributes:
        kind (DocumentKind): The kind.
        type_name (str): Name used in ``@type`` annotations and type hints.
        leading_keyword (str | None): Keyword opening every document, when a
            grammar is registered.
        supported (bool): Whether a grammar is registered (documents can be
            parsed, not just detected).
        description (str): Human-readable description of the grammar.
    """

    kind: DocumentKind
    type_name: str
    leading_keyword: str | None
    supported: bool
    description: str


def _to_config(config: ConfigLike | None) -> Config | None:
    if config is None or isinstance(config, Config):
        return config
    draft: MutableConfig = MutableConfig.from_defaults().merge_with(
        MutableConfig.from_toml_dict(dict(config))
    )
    return draft.freeze()


def parse_descriptors(
    data: bytes | Blob,
    *,
    fail_unrecognized_lines: bool | None = None,
    type_hint: str | DocumentKind | None = None,
    origin: str | None = None,
    config: ConfigLike | None = None,
) -> list[DescriptorResult]:
    """Parse every document in ``data``.

    Args:
        data (bytes | Blob): Raw input.
        fail_unrecognized_lines (bool | None): Strict mode when True; None
            defers to ``config`` (tolerant by default).
        type_hint (str | DocumentKind | None): Explicit kind; skips sniffing.
        origin (str | None): Origin handle attached to every result.
        config (ConfigLike | None): A `Config` or a TOML-shaped mapping.

    Returns:
        list[DescriptorResult]: One result per document, in input order.
    """
    return runner.parse_descriptors(
        data,
        fail_unrecognized_lines=fail_unrecognized_lines,
        type_hint=type_hint,
        origin=origin,
        config=_to_config(config),
    )


def iter_descriptors(
    data: bytes | Blob,
    *,
    fail_unrecognized_lines: bool | None = None,
    type_hint: str | DocumentKind | None = None,
    origin: str | None = None,
    config: ConfigLike | None = None,
) -> Iterator[DescriptorResult]:
    """Lazy form of `parse_descriptors`."""
    return runner.iter_descriptors(
        data,
        fail_unrecognized_lines=fail_unrecognized_lines,
        type_hint=type_hint,
        origin=origin,
        config=_to_config(config),
    )


def detect_kind(
    data: bytes | Blob,
    type_hint: str | DocumentKind | None = None,
    *,
    window: int = SNIFF_WINDOW,
) -> DocumentKind | UnknownKindError:
    """Detect the document kind of ``data`` without parsing it.

    Returns:
        DocumentKind | UnknownKindError: The kind, or a failure value carrying
            the inspected prefix.
    """
    blob: Blob = data if isinstance(data, Blob) else Blob(bytes(data))
    return sniff(blob, type_hint, window=window)


def list_kinds() -> list[KindInfo]:
    """Return every known document kind, in declaration order."""
    registry: dict[DocumentKind, Grammar] = get_grammar_registry()
    infos: list[KindInfo] = []
    for kind in DocumentKind:
        grammar: Grammar | None = registry.get(kind)
        infos.append(
            KindInfo(
                kind=kind,
                type_name=kind.type_name,
                leading_keyword=grammar.leading_keyword if grammar is not None else None,
                supported=grammar is not None,
                description=grammar.description if grammar is not None else "",
            )
        )
    return infos

# topmark:header:start
#
#   project      : DescParse
#   file         : sniffer.py
#   file_relpath : src/descparse/pipeline/sniffer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Type sniffer.

Decides which document kind a blob holds by looking at its first bytes only.
The window is decoded as Latin-1, one character per byte, so a multi-byte
sequence cut at the window edge can never fail decoding.

Matching (first match wins):

1. an ``@type <name> 1.`` annotation at the very start of the blob is trusted
   outright;
2. otherwise the content patterns are tried in `SNIFF_RULES` order: one of the
   kind's line prefixes at offset 0 or right after a newline, plus any extra
   substrings the kind requires.

Failure is a *value*: `sniff` returns an `UnknownKindError` instance instead of
raising, so empty or truncated input never throws.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from descparse.config.logging import get_logger
from descparse.constants import NL, SNIFF_WINDOW, TYPE_ANNOTATION_KEYWORD
from descparse.core.errors import UnknownKindError
from descparse.kinds.base import DocumentKind

if TYPE_CHECKING:
    from descparse.config.logging import DescParseLogger
    from descparse.core.model import Blob

logger: DescParseLogger = get_logger(__name__)

# Only major version 1 of each annotated type is understood.
SUPPORTED_TYPE_VERSION: Final[str] = "1."


@dataclass(frozen=True)
class SniffRule:
    """Detection rule for one document kind.

    Attributes:
        kind (DocumentKind): The kind this rule detects.
        line_prefixes (tuple[str, ...]): Content prefixes accepted at offset 0
            or after a newline. Empty for kinds detected by annotation only.
        requires (tuple[str, ...]): Substrings that must also be present.
        start_only (bool): When True, prefixes only match at offset 0.
    """

    kind: DocumentKind
    line_prefixes: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    start_only: bool = False

    @property
    def type_tag(self) -> str:
        """Return the ``@type`` prefix that identifies this kind."""
        return f"{TYPE_ANNOTATION_KEYWORD} {self.kind.type_name} {SUPPORTED_TYPE_VERSION}"

    def matches_tag(self, window: str) -> bool:
        """Return True if ``window`` starts with this kind's type annotation."""
        return window.startswith(self.type_tag)

    def matches_content(self, window: str) -> bool:
        """Return True if ``window`` matches this kind's content pattern."""
        if not self.line_prefixes:
            return False
        found: bool = any(
            window.startswith(prefix) or (not self.start_only and NL + prefix in window)
            for prefix in self.line_prefixes
        )
        return found and all(required in window for required in self.requires)


SNIFF_RULES: Final[tuple[SniffRule, ...]] = (
    SniffRule(
        DocumentKind.NETWORK_STATUS_MICRODESC_CONSENSUS,
        line_prefixes=("network-status-version 3 microdesc",),
        requires=("\nvote-status consensus\n",),
    ),
    SniffRule(
        DocumentKind.NETWORK_STATUS_CONSENSUS,
        line_prefixes=("network-status-version 3",),
        requires=("\nvote-status consensus\n",),
    ),
    SniffRule(
        DocumentKind.NETWORK_STATUS_VOTE,
        line_prefixes=("network-status-version 3\n",),
        requires=("\nvote-status vote\n",),
    ),
    SniffRule(DocumentKind.BRIDGE_NETWORK_STATUS, line_prefixes=("r ",), start_only=True),
    SniffRule(DocumentKind.BRIDGE_SERVER_DESCRIPTOR),
    SniffRule(DocumentKind.SERVER_DESCRIPTOR, line_prefixes=("router ",)),
    SniffRule(DocumentKind.BRIDGE_EXTRA_INFO),
    SniffRule(DocumentKind.EXTRA_INFO, line_prefixes=("extra-info ",)),
    SniffRule(DocumentKind.MICRODESCRIPTOR, line_prefixes=("onion-key\n",)),
    SniffRule(DocumentKind.BRIDGE_POOL_ASSIGNMENT, line_prefixes=("bridge-pool-assignment ",)),
    SniffRule(DocumentKind.DIR_KEY_CERTIFICATE, line_prefixes=("dir-key-certificate-version ",)),
    SniffRule(DocumentKind.TORDNSEL, line_prefixes=("ExitNode ",)),
    SniffRule(DocumentKind.NETWORK_STATUS_2, line_prefixes=("network-status-version 2\n",)),
    SniffRule(DocumentKind.DIRECTORY, line_prefixes=("signed-directory\n",)),
    SniffRule(DocumentKind.TORPERF),
)


def resolve_type_hint(type_hint: str | DocumentKind) -> DocumentKind | UnknownKindError:
    """Resolve an explicit type hint to a kind.

    Args:
        type_hint (str | DocumentKind): A kind, or a type name with optional
            version (``"extra-info"``, ``"extra-info 1.0"``, ``"@type extra-info 1.0"``).

    Returns:
        DocumentKind | UnknownKindError: The kind, or a failure value for an
            unknown name.
    """
    if isinstance(type_hint, DocumentKind):
        return type_hint
    name: str = type_hint.strip()
    if name.startswith(TYPE_ANNOTATION_KEYWORD + " "):
        name = name[len(TYPE_ANNOTATION_KEYWORD) + 1 :]
    kind: DocumentKind | None = DocumentKind.from_type_name(name)
    if kind is None:
        return UnknownKindError(type_hint, f"Unknown descriptor type '{type_hint}'.")
    return kind


def sniff(
    blob: Blob,
    type_hint: str | DocumentKind | None = None,
    *,
    window: int = SNIFF_WINDOW,
) -> DocumentKind | UnknownKindError:
    """Detect the document kind of ``blob``.

    Args:
        blob (Blob): The blob to inspect.
        type_hint (str | DocumentKind | None): Explicit kind; skips detection.
        window (int): Number of leading bytes to inspect.

    Returns:
        DocumentKind | UnknownKindError: The detected kind, or a failure value
            carrying the inspected prefix.
    """
    if type_hint is not None:
        resolved: DocumentKind | UnknownKindError = resolve_type_hint(type_hint)
        logger.debug("sniffer: type hint %r -> %s", type_hint, resolved)
        return resolved

    prefix: str = blob.data[:window].decode("latin-1")

    for rule in SNIFF_RULES:
        if rule.matches_tag(prefix):
            logger.trace("sniffer: type annotation -> %s", rule.kind.type_name)
            return rule.kind
    for rule in SNIFF_RULES:
        if rule.matches_content(prefix):
            logger.trace("sniffer: content pattern -> %s", rule.kind.type_name)
            return rule.kind

    logger.debug("sniffer: no kind matched prefix %r (origin: %s)", prefix, blob.origin)
    return UnknownKindError(prefix)

# topmark:header:start
#
#   project      : DescParse
#   file         : model.py
#   file_relpath : src/descparse/core/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core data shapes shared by the sniffer, splitter, parser and runner.

Everything here is immutable. A `Blob` is ingested once; `ByteRange` values
index into it; `ParsedDescriptor` / `UnparseableDescriptor` are the per-range
results handed to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from descparse.core.errors import DescriptorParseError
    from descparse.kinds.base import DocumentKind

RecordT = TypeVar("RecordT")


@dataclass(frozen=True, slots=True)
class Blob:
    """Raw input bytes plus an optional origin handle.

    Attributes:
        data (bytes): The raw bytes; never mutated.
        origin (str | None): Where the bytes came from (file path, URL, ...).
    """

    data: bytes
    origin: str | None = None

    def __len__(self) -> int:
        return len(self.data)

    def slice(self, byte_range: ByteRange) -> bytes:
        """Return the bytes covered by ``byte_range``."""
        return self.data[byte_range.start : byte_range.end]


@dataclass(frozen=True, slots=True, order=True)
class ByteRange:
    """End-exclusive ``[start, end)`` offsets into a blob.

    Raises:
        ValueError: If ``start`` or ``end`` is negative or ``start > end``.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid byte range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


@dataclass(frozen=True, slots=True)
class ParsedDescriptor(Generic[RecordT]):
    """A successfully parsed document.

    Attributes:
        kind (DocumentKind): The document kind.
        raw (bytes): The bytes of ``byte_range``, annotations included.
        byte_range (ByteRange): Position of the document in its blob.
        record (RecordT): The kind-specific decoded fields.
        annotations (tuple[str, ...]): Leading ``@`` lines, in order.
        unrecognized_lines (tuple[str, ...]): Lines outside the grammar, verbatim
            and in document order (tolerant mode only).
        origin (str | None): Origin handle of the blob.
    """

    kind: DocumentKind
    raw: bytes
    byte_range: ByteRange
    record: RecordT
    annotations: tuple[str, ...] = ()
    unrecognized_lines: tuple[str, ...] = ()
    origin: str | None = None

    @property
    def ok(self) -> bool:
        """Always True; mirrors `UnparseableDescriptor.ok`."""
        return True


@dataclass(frozen=True, slots=True)
class UnparseableDescriptor:
    """A document (or whole blob) that failed to parse.

    The raw bytes and range are kept so callers can still locate and display
    the offending text.

    Attributes:
        kind (DocumentKind | None): The detected kind, or None if sniffing failed.
        raw (bytes): The bytes of ``byte_range``.
        byte_range (ByteRange): Position of the failed document in its blob.
        error (DescriptorParseError): The error that stopped the parse.
        origin (str | None): Origin handle of the blob.
    """

    kind: DocumentKind | None
    raw: bytes
    byte_range: ByteRange
    error: DescriptorParseError = field(compare=False)
    origin: str | None = None

    @property
    def ok(self) -> bool:
        """Always False; mirrors `ParsedDescriptor.ok`."""
        return False

    @property
    def message(self) -> str:
        """Return the human-readable failure cause."""
        return str(self.error)


DescriptorResult = Union[ParsedDescriptor[object], UnparseableDescriptor]

# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse package.

DescParse turns raw blobs of concatenated, line-oriented relay descriptor
documents into typed, validated records. It detects the document kind, splits
the blob into exact byte ranges, validates each document against its keyword
grammar and decodes the values. A small CLI is provided for inspection.
"""

from __future__ import annotations

from descparse.api import (
    KindInfo,
    detect_kind,
    iter_descriptors,
    list_kinds,
    parse_descriptors,
)
from descparse.core.errors import (
    DescParseError,
    DescriptorParseError,
    GrammarDefinitionError,
    MalformedCause,
    MalformedDocumentError,
    MalformedValueError,
    UnknownKindError,
    UnsupportedKindError,
)
from descparse.core.model import (
    Blob,
    ByteRange,
    DescriptorResult,
    ParsedDescriptor,
    UnparseableDescriptor,
)
from descparse.kinds.base import DocumentKind

__all__ = [
    "Blob",
    "ByteRange",
    "DescParseError",
    "DescriptorParseError",
    "DescriptorResult",
    "DocumentKind",
    "GrammarDefinitionError",
    "KindInfo",
    "MalformedCause",
    "MalformedDocumentError",
    "MalformedValueError",
    "ParsedDescriptor",
    "UnknownKindError",
    "UnparseableDescriptor",
    "UnsupportedKindError",
    "detect_kind",
    "iter_descriptors",
    "list_kinds",
    "parse_descriptors",
]

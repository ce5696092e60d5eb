# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/kinds/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document kinds.

Defines the closed set of descriptor kinds, the declarative grammar seam each
kind plugs into, and the registry resolving a kind to its grammar.
"""

from __future__ import annotations

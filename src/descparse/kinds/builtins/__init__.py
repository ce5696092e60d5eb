# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/kinds/builtins/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Built-in document grammars.

Each module exports a ``GRAMMARS`` list consumed by
[`descparse.kinds.registry`][descparse.kinds.registry].
"""

from __future__ import annotations

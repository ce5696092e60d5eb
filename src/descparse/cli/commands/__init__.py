# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse CLI subcommands."""

from __future__ import annotations

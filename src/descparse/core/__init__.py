# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core data model and error types for DescParse."""

from __future__ import annotations

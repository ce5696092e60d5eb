# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/grammar/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Keyword grammar engine.

Building blocks shared by every document kind:

- [`descparse.grammar.tokens`][descparse.grammar.tokens]: line tokenizer with
  crypto-block skip-state.
- [`descparse.grammar.constraints`][descparse.grammar.constraints]: per-kind
  keyword occurrence rules.
- [`descparse.grammar.validator`][descparse.grammar.validator]: checks a token
  stream against a kind's rules.
- [`descparse.grammar.values`][descparse.grammar.values]: value decoders.
"""

from __future__ import annotations

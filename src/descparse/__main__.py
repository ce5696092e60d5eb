# topmark:header:start
#
#   project      : DescParse
#   file         : __main__.py
#   file_relpath : src/descparse/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running DescParse via ``python -m descparse``.

Delegates to `descparse.cli.main.cli`, the single CLI entry point, so that
``python -m descparse parse cached-extrainfo`` behaves like the console script.
"""

from __future__ import annotations

from descparse.cli.main import cli

if __name__ == "__main__":
    cli()

# topmark:header:start
#
#   project      : DescParse
#   file         : version.py
#   file_relpath : src/descparse/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse `version` command.

Prints the current DescParse version as installed in the active Python environment.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

from descparse.cli.options import OutputFormat, output_format_option
from descparse.constants import DESCPARSE_VERSION

if TYPE_CHECKING:
    from descparse.cli.console import ClickConsole


@click.command(
    name="version",
    help="Show the current version of DescParse.",
)
@output_format_option
def version_command(*, output_format: OutputFormat) -> None:
    """Show the current version of DescParse.

    Args:
        output_format (OutputFormat): ``text`` or ``json``.
    """
    ctx: click.Context = click.get_current_context()
    ctx.ensure_object(dict)
    console: ClickConsole = ctx.obj["console"]
    verbosity: int = ctx.obj.get("verbosity_level", 0)

    if output_format is OutputFormat.JSON:
        console.print(json.dumps({"version": DESCPARSE_VERSION}))
    elif verbosity > 0:
        console.print(console.styled("DescParse version:\n", bold=True, underline=True))
        console.print(f"    {console.styled(DESCPARSE_VERSION, bold=True)}")
    else:
        console.print(console.styled(DESCPARSE_VERSION, bold=True))

# topmark:header:start
#
#   project      : DescParse
#   file         : kinds.py
#   file_relpath : src/descparse/cli/commands/kinds.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse `kinds` command.

Lists every document kind DescParse can detect, with its leading keyword and
whether a grammar is registered to parse it.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

from descparse.api import list_kinds
from descparse.cli.options import OutputFormat, output_format_option

if TYPE_CHECKING:
    from descparse.api import KindInfo
    from descparse.cli.console import ClickConsole


@click.command(
    name="kinds",
    help="List the known document kinds.",
)
@output_format_option
def kinds_command(*, output_format: OutputFormat) -> None:
    """List the known document kinds.

    Args:
        output_format (OutputFormat): ``text`` or ``json``.
    """
    ctx: click.Context = click.get_current_context()
    ctx.ensure_object(dict)
    console: ClickConsole = ctx.obj["console"]
    infos: list[KindInfo] = list_kinds()

    if output_format is OutputFormat.JSON:
        console.print(
            json.dumps(
                [
                    {
                        "type_name": info.type_name,
                        "leading_keyword": info.leading_keyword,
                        "supported": info.supported,
                        "description": info.description,
                    }
                    for info in infos
                ],
                indent=2,
            )
        )
        return

    width: int = max(len(info.type_name) for info in infos)
    for info in infos:
        if info.supported:
            status: str = console.styled("parse", fg="green")
            detail: str = f"{info.leading_keyword}  {info.description}"
        else:
            status = console.styled("detect", fg="yellow")
            detail = ""
        console.print(f"{info.type_name:<{width}}  {status}  {detail}".rstrip())

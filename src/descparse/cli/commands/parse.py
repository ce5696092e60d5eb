# topmark:header:start
#
#   project      : DescParse
#   file         : parse.py
#   file_relpath : src/descparse/cli/commands/parse.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse `parse` command.

Parses descriptor files (or STDIN) and reports one line per document:

    $ descparse parse extrainfo
    extrainfo: OK extra-info [0, 1873)
    extrainfo: ERR extra-info [1873, 2410): Keyword 'published' must be contained exactly once.

Input:
  * No PATH, or a single ``-``: the blob is read from STDIN.
  * Otherwise each PATH is read as one blob; every path must exist.

Configuration:
  ``pyproject.toml`` and ``descparse.toml`` in the working directory are merged
  unless ``--no-config`` is given; files passed with ``--config`` are merged
  last. ``--strict`` and ``--type`` override the config.

Exit codes:
  0 when every document parsed, 65 when at least one did not, 66 for a missing
  path, 78 for an invalid config file.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from descparse.cli.errors import (
    DescParseConfigError,
    DescParseEngineError,
    DescParseFileNotFoundError,
    DescParseIOError,
)
from descparse.cli.exit_codes import ExitCode
from descparse.cli.options import OutputFormat, output_format_option
from descparse.config import ConfigError, discover_config_files, load_merged
from descparse.config.logging import get_logger
from descparse.core.errors import GrammarDefinitionError, MalformedDocumentError
from descparse.core.model import Blob, ParsedDescriptor
from descparse.pipeline.runner import parse_descriptors

if TYPE_CHECKING:
    from descparse.cli.console import ClickConsole
    from descparse.config import Config
    from descparse.config.logging import DescParseLogger
    from descparse.core.model import DescriptorResult

logger: DescParseLogger = get_logger(__name__)

STDIN_ORIGIN = "<stdin>"


def read_stdin() -> bytes:
    """Read all of STDIN as bytes."""
    return sys.stdin.buffer.read()


def read_inputs(paths: tuple[str, ...]) -> list[Blob]:
    """Read every input into a `Blob`.

    Raises:
        DescParseFileNotFoundError: If a path does not exist.
        DescParseIOError: If a path cannot be read.
    """
    if not paths or paths == ("-",):
        data: bytes = read_stdin()
        return [Blob(data, STDIN_ORIGIN)]

    missing: list[str] = [p for p in paths if p != "-" and not Path(p).exists()]
    if missing:
        raise DescParseFileNotFoundError(f"No such file: {', '.join(missing)}")

    blobs: list[Blob] = []
    for p in paths:
        if p == "-":
            blobs.append(Blob(read_stdin(), STDIN_ORIGIN))
            continue
        try:
            blobs.append(Blob(Path(p).read_bytes(), p))
        except OSError as exc:
            raise DescParseIOError(f"Cannot read {p}: {exc}") from exc
    return blobs


def resolve_config(config_files: tuple[str, ...], no_config: bool) -> Config:
    """Merge discovered and explicit config files.

    Raises:
        DescParseConfigError: If a config file is unreadable or invalid.
    """
    layers: list[Path] = [] if no_config else discover_config_files(Path.cwd())
    layers.extend(Path(p) for p in config_files)
    try:
        return load_merged(layers)
    except ConfigError as exc:
        raise DescParseConfigError(str(exc)) from exc


def to_jsonable(value: Any) -> Any:
    """Convert records, read-only mappings and tuples into plain JSON values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def result_payload(result: DescriptorResult) -> dict[str, Any]:
    """Return a JSON-friendly view of one result."""
    payload: dict[str, Any] = {
        "origin": result.origin,
        "kind": result.kind.type_name if result.kind is not None else None,
        "start": result.byte_range.start,
        "end": result.byte_range.end,
        "ok": result.ok,
    }
    if isinstance(result, ParsedDescriptor):
        payload["annotations"] = list(result.annotations)
        payload["unrecognized_lines"] = list(result.unrecognized_lines)
        payload["record"] = to_jsonable(result.record)
    else:
        error: Exception = result.error
        payload["error"] = {
            "type": type(error).__name__,
            "message": result.message,
        }
        if isinstance(error, MalformedDocumentError):
            payload["error"]["cause"] = error.cause.value
            payload["error"]["line"] = error.line
    return payload


def _render_text(console: ClickConsole, results: list[DescriptorResult], verbosity: int) -> None:
    for result in results:
        kind: str = result.kind.type_name if result.kind is not None else "-"
        where: str = f"{result.origin}: " if result.origin is not None else ""
        if isinstance(result, ParsedDescriptor):
            if verbosity < 0:
                continue
            status: str = console.styled("OK", fg="green", bold=True)
            console.print(f"{where}{status} {kind} {result.byte_range}")
            if verbosity > 0:
                for annotation in result.annotations:
                    console.print(f"    annotation: {annotation}")
                for line in result.unrecognized_lines:
                    console.print(console.styled(f"    unrecognized: {line}", fg="yellow"))
        else:
            status = console.styled("ERR", fg="red", bold=True)
            console.print(f"{where}{status} {kind} {result.byte_range}: {result.message}")


@click.command(
    name="parse",
    help="Parse descriptor documents from files or STDIN.",
)
@click.argument("paths", nargs=-1, type=str)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail documents that contain unrecognized lines.",
)
@click.option(
    "--type",
    "type_hint",
    type=str,
    default=None,
    metavar="NAME",
    help="Document type (e.g. 'extra-info' or 'extra-info 1.0'); skips detection.",
)
@click.option(
    "--config",
    "config_files",
    multiple=True,
    type=click.Path(dir_okay=False),
    help="Merge this TOML config file (may be repeated; later files win).",
)
@click.option(
    "--no-config",
    is_flag=True,
    default=False,
    help="Ignore pyproject.toml and descparse.toml in the working directory.",
)
@output_format_option
def parse_command(
    *,
    paths: tuple[str, ...],
    strict: bool,
    type_hint: str | None,
    config_files: tuple[str, ...],
    no_config: bool,
    output_format: OutputFormat,
) -> None:
    """Parse every document in the given inputs and report the results.

    Args:
        paths (tuple[str, ...]): Input files; empty or ``-`` for STDIN.
        strict (bool): Strict mode (overrides the config when set).
        type_hint (str | None): Explicit document type.
        config_files (tuple[str, ...]): Extra TOML config files.
        no_config (bool): Skip config discovery in the working directory.
        output_format (OutputFormat): ``text`` or ``json``.
    """
    ctx: click.Context = click.get_current_context()
    ctx.ensure_object(dict)
    console: ClickConsole = ctx.obj["console"]
    verbosity: int = ctx.obj.get("verbosity_level", 0)

    config: Config = resolve_config(config_files, no_config)
    blobs: list[Blob] = read_inputs(paths)

    results: list[DescriptorResult] = []
    for blob in blobs:
        try:
            results.extend(
                parse_descriptors(
                    blob,
                    fail_unrecognized_lines=True if strict else None,
                    type_hint=type_hint,
                    config=config,
                )
            )
        except GrammarDefinitionError as exc:
            raise DescParseEngineError(
                f"Internal error while parsing {blob.origin}: {exc}"
            ) from exc

    if output_format is OutputFormat.JSON:
        console.print(json.dumps([result_payload(r) for r in results], indent=2, default=str))
    else:
        _render_text(console, results, verbosity)

    failed: int = sum(1 for r in results if not r.ok)
    logger.info("Parsed %d document(s), %d unparseable", len(results), failed)
    if verbosity > 0 and output_format is OutputFormat.TEXT:
        console.print(f"{len(results)} document(s), {failed} unparseable")
    if failed:
        ctx.exit(ExitCode.DATA_ERROR)

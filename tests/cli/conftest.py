# topmark:header:start
#
#   project      : DescParse
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test helpers for running DescParse in a controlled working directory.

`run_cli` invokes the Click group through `CliRunner`. Tests that create input
files or config files use the ``isolation`` fixture so that relative paths and
config discovery resolve against a fresh temporary directory.

The CLI reconfigures the root logger on every invocation; the
``restore_root_logging`` fixture puts the level and the DescParse handler back
afterwards so that later tests still see their log records.
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any, Sequence

import pytest
from click.testing import CliRunner, Result

from descparse.cli.exit_codes import ExitCode
from descparse.cli.main import cli
from descparse.config.logging import ChalkFormatter

if TYPE_CHECKING:
    from collections.abc import Iterator


def _is_ours(handler: logging.Handler) -> bool:
    return isinstance(handler.formatter, ChalkFormatter)


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Restore the root logger's level and handlers after each CLI test."""
    root: logging.Logger = logging.getLogger()
    level: int = root.level
    ours: list[logging.Handler] = [h for h in root.handlers if _is_ours(h)]
    yield
    for handler in root.handlers[:]:
        if _is_ours(handler) and handler not in ours:
            root.removeHandler(handler)
    for handler in ours:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def run_cli(
    argv: str | Sequence[str] | None,
    *,
    input_data: str | bytes | IO[Any] | None = None,
) -> Result:
    """Invoke the CLI in the current working directory.

    Args:
        argv (str | Sequence[str] | None): CLI argument vector, e.g.
            ``["--no-color", "parse", "cached-extrainfo"]``.
        input_data (str | bytes | IO[Any] | None): Optional standard input.

    Returns:
        Result: The `click.testing.Result` produced by
            `click.testing.CliRunner.invoke`.

    Example:
        ```python
        result = run_cli(["--no-color", "version"])
        assert_SUCCESS(result)
        ```
    """
    runner = CliRunner()
    return runner.invoke(cli, argv, input=input_data)


def assert_SUCCESS(result: Result) -> None:
    """Assert that the command exited successfully (code 0)."""
    assert result.exit_code == ExitCode.SUCCESS, result.output


def assert_DATA_ERROR(result: Result) -> None:
    """Assert that the command exited with DATA_ERROR (code 65)."""
    assert result.exit_code == ExitCode.DATA_ERROR, result.output

# topmark:header:start
#
#   project      : DescParse
#   file         : test_cli_parse.py
#   file_relpath : tests/cli/test_cli_parse.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests: the `parse` command.

Covers text and JSON reporting, STDIN input, strict mode, explicit type hints,
config discovery and the sysexits-aligned exit codes.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from descparse.cli.exit_codes import ExitCode
from tests.cli.conftest import assert_DATA_ERROR, assert_SUCCESS, run_cli
from tests.conftest import EXTRA_INFO, MICRODESCRIPTOR, mark_cli

if TYPE_CHECKING:
    from pathlib import Path

BROKEN_EXTRA_INFO = EXTRA_INFO.replace("published 2012-02-11 09:08:36\n", "")
UNRECOGNIZED = EXTRA_INFO.replace("router-signature\n", "future-keyword 1\nrouter-signature\n")


def write(path: Path, text: str) -> str:
    path.write_text(text, encoding="utf-8", newline="\n")
    return path.name


@mark_cli
def test_parse_file_ok(isolation: Path) -> None:
    """A valid file prints one OK line per document and exits 0."""
    name: str = write(isolation / "cached-extrainfo", EXTRA_INFO + EXTRA_INFO)
    result = run_cli(["--no-color", "parse", name])
    assert_SUCCESS(result)
    size: int = len(EXTRA_INFO)
    assert result.output.splitlines() == [
        f"cached-extrainfo: OK extra-info [0, {size})",
        f"cached-extrainfo: OK extra-info [{size}, {2 * size})",
    ]


@mark_cli
def test_parse_file_with_failure(isolation: Path) -> None:
    """A broken document prints an ERR line with its cause and exits 65."""
    name: str = write(isolation / "cached-extrainfo", EXTRA_INFO + BROKEN_EXTRA_INFO)
    result = run_cli(["--no-color", "parse", name])
    assert_DATA_ERROR(result)
    lines: list[str] = result.output.splitlines()
    assert lines[0].startswith("cached-extrainfo: OK extra-info")
    assert lines[1].startswith(f"cached-extrainfo: ERR extra-info [{len(EXTRA_INFO)}, ")
    assert lines[1].endswith("Keyword 'published' must be contained exactly once.")


@mark_cli
def test_quiet_only_reports_failures(isolation: Path) -> None:
    """``-q`` hides OK lines."""
    name: str = write(isolation / "cached-extrainfo", EXTRA_INFO + BROKEN_EXTRA_INFO)
    result = run_cli(["--no-color", "-q", "parse", name])
    assert_DATA_ERROR(result)
    assert [line.split(" ")[1] for line in result.output.splitlines()] == ["ERR"]


@mark_cli
def test_verbose_shows_details_and_summary(isolation: Path) -> None:
    """``-v`` lists annotations and unrecognized lines and prints a summary."""
    name: str = write(isolation / "doc", "@type extra-info 1.0\n" + UNRECOGNIZED)
    result = run_cli(["--no-color", "-v", "parse", name])
    assert_SUCCESS(result)
    assert "    annotation: @type extra-info 1.0" in result.output
    assert "    unrecognized: future-keyword 1" in result.output
    assert result.output.rstrip().endswith("1 document(s), 0 unparseable")


@mark_cli
def test_verbose_and_quiet_conflict(isolation: Path) -> None:
    """``-v`` and ``-q`` together are a usage error."""
    result = run_cli(["--no-color", "-v", "-q", "parse"], input_data=b"")
    assert result.exit_code == ExitCode.USAGE_ERROR


@mark_cli
def test_parse_stdin(isolation: Path) -> None:
    """Without paths the blob is read from STDIN."""
    result = run_cli(["--no-color", "parse"], input_data=MICRODESCRIPTOR.encode("ascii"))
    assert_SUCCESS(result)
    assert result.output.startswith("<stdin>: OK microdescriptor [0, ")

    result = run_cli(["--no-color", "parse", "-"], input_data=MICRODESCRIPTOR.encode("ascii"))
    assert_SUCCESS(result)


@mark_cli
def test_unknown_input_is_a_data_error(isolation: Path) -> None:
    """Undetectable input yields one ERR line without a kind."""
    result = run_cli(["--no-color", "parse"], input_data=b"hello world\n")
    assert_DATA_ERROR(result)
    assert result.output.startswith("<stdin>: ERR - [0, 12): Could not detect descriptor type")


@mark_cli
def test_missing_file(isolation: Path) -> None:
    """A missing path exits 66."""
    result = run_cli(["--no-color", "parse", "nope"])
    assert result.exit_code == ExitCode.FILE_NOT_FOUND
    assert "No such file: nope" in result.output


@mark_cli
def test_strict_flag(isolation: Path) -> None:
    """``--strict`` turns unrecognized lines into failures."""
    name: str = write(isolation / "doc", UNRECOGNIZED)
    assert_SUCCESS(run_cli(["--no-color", "parse", name]))
    result = run_cli(["--no-color", "parse", "--strict", name])
    assert_DATA_ERROR(result)
    assert "Unrecognized line 'future-keyword 1'." in result.output


@mark_cli
def test_type_option(isolation: Path) -> None:
    """``--type`` skips detection."""
    name: str = write(isolation / "doc", "x" * 120 + "\n" + MICRODESCRIPTOR)
    assert_DATA_ERROR(run_cli(["--no-color", "parse", name]))
    result = run_cli(["--no-color", "parse", "--type", "microdescriptor", name])
    assert_SUCCESS(result)
    assert "OK microdescriptor" in result.output


@mark_cli
def test_discovered_config(isolation: Path) -> None:
    """``descparse.toml`` in the working directory is honored unless ``--no-config``."""
    name: str = write(isolation / "doc", UNRECOGNIZED)
    write(isolation / "descparse.toml", "[parser]\nfail_unrecognized_lines = true\n")
    assert_DATA_ERROR(run_cli(["--no-color", "parse", name]))
    assert_SUCCESS(run_cli(["--no-color", "parse", "--no-config", name]))


@mark_cli
def test_pyproject_config(isolation: Path) -> None:
    """``[tool.descparse.parser]`` in ``pyproject.toml`` is honored too."""
    name: str = write(isolation / "doc", "x" * 120 + "\n" + MICRODESCRIPTOR)
    write(isolation / "pyproject.toml", '[tool.descparse.parser]\ntype_hint = "microdescriptor"\n')
    assert_SUCCESS(run_cli(["--no-color", "parse", name]))


@mark_cli
def test_explicit_config_file(isolation: Path) -> None:
    """``--config`` files are merged after the discovered ones."""
    name: str = write(isolation / "doc", UNRECOGNIZED)
    write(isolation / "descparse.toml", "[parser]\nfail_unrecognized_lines = true\n")
    write(isolation / "lenient.toml", "[parser]\nfail_unrecognized_lines = false\n")
    assert_SUCCESS(run_cli(["--no-color", "parse", "--config", "lenient.toml", name]))


@mark_cli
def test_invalid_config_file(isolation: Path) -> None:
    """An invalid TOML config exits 78."""
    name: str = write(isolation / "doc", EXTRA_INFO)
    write(isolation / "descparse.toml", "[parser\n")
    result = run_cli(["--no-color", "parse", name])
    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert "Invalid TOML" in result.output


@mark_cli
def test_json_output(isolation: Path) -> None:
    """JSON output carries records for successes and causes for failures."""
    name: str = write(isolation / "cached-extrainfo", EXTRA_INFO + BROKEN_EXTRA_INFO)
    result = run_cli(["parse", "--format", "json", name])
    assert_DATA_ERROR(result)
    payload: list[dict[str, Any]] = json.loads(result.output)
    ok, err = payload

    assert ok["ok"] is True
    assert ok["kind"] == "extra-info"
    assert ok["origin"] == "cached-extrainfo"
    assert (ok["start"], ok["end"]) == (0, len(EXTRA_INFO))
    assert ok["record"]["nickname"] == "chaoscomputerclub5"
    assert ok["record"]["published_millis"] == 1328951316000
    assert ok["record"]["write_history"]["interval_length"] == 900

    assert err["ok"] is False
    assert err["error"]["type"] == "MalformedDocumentError"
    assert err["error"]["cause"] == "missing-keyword"
    assert "published" in err["error"]["message"]

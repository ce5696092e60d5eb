# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Parser configuration model and TOML loading.

This module defines:
    - `Config`: an immutable snapshot handed to the runner.
    - `MutableConfig`: a mutable builder used while merging layers; it can be
      frozen into `Config` and thawed back for edits.

Sources:
    - ``descparse.toml``: options live in a top-level ``[parser]`` table.
    - ``pyproject.toml``: options live in ``[tool.descparse.parser]``.

Unknown keys and values of the wrong type are logged and ignored, so a stray
option never stops a parse. A file that cannot be read or is not valid TOML
raises `ConfigError`.

Immutability:
    `Config` is ``frozen=True`` and holds only immutable values. Use
    `Config.thaw` → edit → `MutableConfig.freeze` for safe updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from descparse.config.logging import get_logger
from descparse.constants import (
    DEFAULT_TOML_CONFIG_NAME,
    PYPROJECT_TOML_NAME,
    PYPROJECT_TOOL_SECTION,
    SNIFF_WINDOW,
)
from descparse.core.errors import DescParseError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from descparse.config.logging import DescParseLogger

logger: DescParseLogger = get_logger(__name__)

TomlTable = dict[str, Any]

PARSER_SECTION: Final[str] = "parser"

KEY_FAIL_UNRECOGNIZED_LINES: Final[str] = "fail_unrecognized_lines"
KEY_SNIFF_WINDOW: Final[str] = "sniff_window"
KEY_TYPE_HINT: Final[str] = "type_hint"

_KNOWN_KEYS: Final[frozenset[str]] = frozenset(
    {KEY_FAIL_UNRECOGNIZED_LINES, KEY_SNIFF_WINDOW, KEY_TYPE_HINT}
)


class ConfigError(DescParseError):
    """A configuration file could not be read or parsed."""


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable parser configuration.

    Attributes:
        fail_unrecognized_lines (bool): Strict mode: unrecognized lines fail the
            document instead of being collected.
        sniff_window (int): Number of leading bytes inspected by the sniffer.
        type_hint (str | None): Explicit document type; skips sniffing.
        config_files (tuple[str, ...]): Sources merged into this config, in
            merge order.
    """

    fail_unrecognized_lines: bool = False
    sniff_window: int = SNIFF_WINDOW
    type_hint: str | None = None
    config_files: tuple[str, ...] = ()

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this config."""
        return MutableConfig(
            fail_unrecognized_lines=self.fail_unrecognized_lines,
            sniff_window=self.sniff_window,
            type_hint=self.type_hint,
            config_files=list(self.config_files),
        )

    def to_toml_dict(self) -> TomlTable:
        """Return the options as a ``{"parser": {...}}`` TOML table."""
        table: TomlTable = {
            KEY_FAIL_UNRECOGNIZED_LINES: self.fail_unrecognized_lines,
            KEY_SNIFF_WINDOW: self.sniff_window,
        }
        if self.type_hint is not None:
            table[KEY_TYPE_HINT] = self.type_hint
        return {PARSER_SECTION: table}


@dataclass
class MutableConfig:
    """Mutable configuration builder.

    Fields left as None were not set by the layer that produced this builder;
    `merge_with` lets set fields of the overriding layer win.
    """

    fail_unrecognized_lines: bool | None = None
    sniff_window: int | None = None
    type_hint: str | None = None
    config_files: list[str] = field(default_factory=list)

    @classmethod
    def from_defaults(cls) -> MutableConfig:
        """Return a builder holding the built-in defaults."""
        return cls(fail_unrecognized_lines=False, sniff_window=SNIFF_WINDOW)

    @classmethod
    def from_toml_dict(cls, data: TomlTable, *, source: str | None = None) -> MutableConfig:
        """Build a layer from a parsed TOML document.

        Accepts either a ``descparse.toml`` document (``[parser]`` at the top
        level) or a ``pyproject.toml`` document (``[tool.descparse.parser]``).

        Args:
            data (TomlTable): The parsed document.
            source (str | None): Where the document came from, for logs.

        Returns:
            MutableConfig: The layer; unset options stay None.
        """
        draft = cls()
        if source is not None:
            draft.config_files.append(source)

        table: Any = data.get(PARSER_SECTION)
        if table is None:
            tool: Any = data.get("tool", {})
            if isinstance(tool, dict):
                section: Any = cast("TomlTable", tool).get(PYPROJECT_TOOL_SECTION, {})
                if isinstance(section, dict):
                    table = cast("TomlTable", section).get(PARSER_SECTION)
        if table is None:
            logger.debug("No [%s] table in %s", PARSER_SECTION, source or "<dict>")
            return draft
        if not isinstance(table, dict):
            logger.warning(
                "Ignoring [%s] in %s: expected a table, got %s",
                PARSER_SECTION,
                source or "<dict>",
                type(table).__name__,
            )
            return draft

        parser_table: TomlTable = cast("TomlTable", table)
        for key in sorted(set(parser_table) - _KNOWN_KEYS):
            logger.warning("Ignoring unknown key '%s' in %s", key, source or "<dict>")

        strict: Any = parser_table.get(KEY_FAIL_UNRECOGNIZED_LINES)
        if isinstance(strict, bool):
            draft.fail_unrecognized_lines = strict
        elif strict is not None:
            logger.warning(
                "Ignoring %s=%r: expected a boolean", KEY_FAIL_UNRECOGNIZED_LINES, strict
            )

        window: Any = parser_table.get(KEY_SNIFF_WINDOW)
        if isinstance(window, int) and not isinstance(window, bool) and window > 0:
            draft.sniff_window = window
        elif window is not None:
            logger.warning("Ignoring %s=%r: expected a positive integer", KEY_SNIFF_WINDOW, window)

        hint: Any = parser_table.get(KEY_TYPE_HINT)
        if isinstance(hint, str) and hint.strip():
            draft.type_hint = hint.strip()
        elif hint is not None:
            logger.warning("Ignoring %s=%r: expected a type name", KEY_TYPE_HINT, hint)

        return draft

    @classmethod
    def from_toml_file(cls, path: Path) -> MutableConfig:
        """Load a layer from a TOML file.

        Raises:
            ConfigError: If the file cannot be read or is not valid TOML.
        """
        return cls.from_toml_dict(load_toml_dict(path), source=str(path))

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new builder where set values of ``other`` override this one."""
        return MutableConfig(
            fail_unrecognized_lines=other.fail_unrecognized_lines
            if other.fail_unrecognized_lines is not None
            else self.fail_unrecognized_lines,
            sniff_window=other.sniff_window
            if other.sniff_window is not None
            else self.sniff_window,
            type_hint=other.type_hint if other.type_hint is not None else self.type_hint,
            config_files=self.config_files + other.config_files,
        )

    def freeze(self) -> Config:
        """Return an immutable `Config`; unset options take their defaults."""
        return Config(
            fail_unrecognized_lines=bool(self.fail_unrecognized_lines),
            sniff_window=self.sniff_window if self.sniff_window is not None else SNIFF_WINDOW,
            type_hint=self.type_hint,
            config_files=tuple(self.config_files),
        )


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path (Path): Path to a TOML document (``descparse.toml`` or ``pyproject.toml``).

    Returns:
        TomlTable: The parsed content as plain Python values.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
    except TomlkitParseError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    data_any: Any = doc.unwrap()
    return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}


def discover_config_files(start: Path) -> list[Path]:
    """Return the config files present in ``start``, lowest precedence first.

    Within a directory ``pyproject.toml`` is merged first, then
    ``descparse.toml`` (the tool file overrides).
    """
    found: list[Path] = []
    for name in (PYPROJECT_TOML_NAME, DEFAULT_TOML_CONFIG_NAME):
        candidate: Path = start / name
        if candidate.is_file():
            found.append(candidate)
    logger.debug("Discovered %d config file(s) in %s", len(found), start)
    return found


def load_merged(paths: Iterable[Path | str] = ()) -> Config:
    """Merge the defaults with the given config files, in order.

    A file without a parser table contributes nothing but its name in
    ``config_files``.

    Args:
        paths (Iterable[Path | str]): Config files; later files win.

    Returns:
        Config: The frozen result.

    Raises:
        ConfigError: If a file cannot be read or is not valid TOML.
    """
    draft: MutableConfig = MutableConfig.from_defaults()
    for raw_path in paths:
        path = Path(raw_path)
        layer: MutableConfig = MutableConfig.from_toml_file(path)
        draft = draft.merge_with(layer)
        logger.debug("Merged config layer %s", path)
    return draft.freeze()


__all__ = [
    "Config",
    "ConfigError",
    "MutableConfig",
    "discover_config_files",
    "load_merged",
    "load_toml_dict",
]

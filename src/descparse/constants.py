# topmark:header:start
#
#   project      : DescParse
#   file         : constants.py
#   file_relpath : src/descparse/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse Constants."""

from __future__ import annotations

from importlib.metadata import version as get_version
from typing import Final

DESCPARSE_VERSION: str = get_version("descparse")

# Bundled config file names, searched in this order by `descparse.config`.
DEFAULT_TOML_CONFIG_NAME: Final[str] = "descparse.toml"
PYPROJECT_TOML_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_SECTION: Final[str] = "descparse"

# Environment variable consulted by `descparse.config.logging.resolve_env_log_level`.
LOG_LEVEL_ENV_VAR: Final[str] = "DESCPARSE_LOG_LEVEL"

# Number of leading bytes the sniffer inspects.
SNIFF_WINDOW: Final[int] = 100

# Deprecated keyword prefix (`opt <keyword> ...`).
OPT_PREFIX: Final[str] = "opt "

# Embedded block markers (PEM-style armour around keys and signatures).
CRYPTO_BEGIN_MARKER: Final[str] = "-----BEGIN"
CRYPTO_END_MARKER: Final[str] = "-----END"

# Annotation lines start with this character.
ANNOTATION_PREFIX: Final[str] = "@"

# Explicit type annotation keyword, e.g. ``@type extra-info 1.0``.
TYPE_ANNOTATION_KEYWORD: Final[str] = "@type"

SP: Final[str] = " "
NL: Final[str] = "\n"

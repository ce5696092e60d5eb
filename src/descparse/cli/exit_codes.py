# topmark:header:start
#
#   project      : DescParse
#   file         : exit_codes.py
#   file_relpath : src/descparse/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the DescParse CLI.

DescParse aligns with the BSD `sysexits` convention so that other tooling can
interpret failures consistently.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the DescParse CLI.

    Attributes:
        SUCCESS: Every input was read and every document parsed.
        FAILURE: Generic failure (non-specific error).
        USAGE_ERROR: Command-line invocation error. Mirrors BSD ``EX_USAGE (64)``.
        DATA_ERROR: At least one document (or whole input) could not be
            parsed. Mirrors BSD ``EX_DATAERR (65)``.
        FILE_NOT_FOUND: Input path does not exist. Mirrors BSD ``EX_NOINPUT (66)``.
        SOFTWARE_ERROR: Engine contract violation (broken grammar, splitter
            that cannot advance). Mirrors BSD ``EX_SOFTWARE (70)``.
        IO_ERROR: I/O error reading an input. Mirrors BSD ``EX_IOERR (74)``.
        CONFIG_ERROR: Configuration error (unreadable or invalid TOML).
            Mirrors BSD ``EX_CONFIG (78)``.
    """

    SUCCESS = 0
    FAILURE = 1

    # sysexits-aligned values
    USAGE_ERROR = 64  # EX_USAGE
    DATA_ERROR = 65  # EX_DATAERR
    FILE_NOT_FOUND = 66  # EX_NOINPUT
    SOFTWARE_ERROR = 70  # EX_SOFTWARE
    IO_ERROR = 74  # EX_IOERR
    CONFIG_ERROR = 78  # EX_CONFIG

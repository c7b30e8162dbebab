"""
CLI Error Handling
==================

Turns an exception from an m6502asm run into one line on stderr and an
exit status. Assembly errors arrive already formatted as
"file:row:col: message"; the handler only adds a prefix.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from m6502_asm.errors import M6502Error


class ExitCode(IntEnum):
    """Process exit status of m6502asm."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Source did not assemble
    INVALID_ARGS = 2     # Bad option or unreadable file
    INTERNAL_ERROR = 3   # Bug in the assembler


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None,
    source_line: str | None = None,
) -> NoReturn:
    """
    Report `error` and exit.

    `source_line` is echoed under an assembly error when given; with
    `verbose`, an unexpected exception also prints its traceback.
    """
    if isinstance(error, M6502Error):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        if source_line is not None:
            click.echo(f"    {source_line}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)

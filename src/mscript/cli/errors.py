"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    COMPILE_ERROR = 1    # Script failed to compile
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Compiler bug or unexpected exception


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from mscript.compiler.errors import CompileError
    from mscript.errors import EngineInvariantError, MScriptError

    if isinstance(error, CompileError):
        # Compile errors already carry "file:line:col: error:" formatting
        click.echo(str(error), err=True)
        sys.exit(ExitCode.COMPILE_ERROR)

    elif isinstance(error, EngineInvariantError):
        click.echo(str(error), err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)

    elif isinstance(error, MScriptError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.COMPILE_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, UnicodeDecodeError):
        # Source files must be UTF-8
        click.echo(f"Error: input is not valid UTF-8 ({error.reason} at byte {error.start})", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)

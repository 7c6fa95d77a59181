"""
msc - MScript Compiler Command-Line Interface
=============================================

This module implements the command-line interface for the MScript
compiler front end. It prints the reduced tree of every line of a script,
which makes it the quickest way to see how an expression is grouped.

Usage Examples
--------------
Compile a script:
    $ msc greet.ms

Reduce a single expression:
    $ msc -e "@x = 1 + 2 * 3"
    assign(@x, add(1, multiply(2, 3)))

Show the tokens or the unreduced grouping tree:
    $ msc --tokens -e "@x += 1"
    $ msc --raw -e "(1 + 2) * 3"

Indented tree output:
    $ msc --tree -e "msg 'Hello ' @name"

Verbose mode:
    $ msc -v greet.ms
"""

import logging
from pathlib import Path
from typing import Optional

import click

from mscript import __version__
from mscript.cli.errors import handle_cli_exception
from mscript.compiler import CompilerOptions, ScriptCompiler, ScriptLexer
from mscript.compiler.ast import TreePrinter, render


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e", "--expression",
    help="Compile EXPRESSION instead of a file",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--raw",
    is_flag=True,
    help="Print the grouping trees without reducing them",
)
@click.option(
    "--list-concat",
    is_flag=True,
    help="Join leftover operands with concat instead of sconcat",
)
@click.option(
    "--tree",
    is_flag=True,
    help="Print indented trees instead of one line per region",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="msc")
def main(
    input_file: Optional[Path],
    expression: Optional[str],
    tokens: bool,
    raw: bool,
    list_concat: bool,
    tree: bool,
    verbose: bool,
) -> None:
    """
    Compile MScript source and print the reduced trees.

    INPUT_FILE is the script (.ms) to compile. Use -e to compile an
    expression given on the command line instead.

    \b
    Examples:
        msc greet.ms                    # One tree per line
        msc -e "@x += 5"                # assign(@x, add(@x, 5))
        msc --tokens -e "@x += 5"       # Token stream
        msc --raw -e "(1 + 2) * 3"      # Unreduced grouping tree
        msc --list-concat -e "1 2"      # concat(1, 2)

    \b
    Environment:
        MSCRIPT_CONCAT_MODE   string (default) or list
        MSCRIPT_OPTIMIZE      0 to print unreduced trees
        MSCRIPT_MAX_ERRORS    errors reported per file
    """
    if (input_file is None) == (expression is None):
        raise click.UsageError("provide either INPUT_FILE or -e EXPRESSION")

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    options = CompilerOptions.from_env()
    if list_concat:
        options.string_concat = False
    if raw:
        options.optimize = False

    try:
        if input_file is not None:
            filename = str(input_file)
            source = input_file.read_text(encoding="utf-8")
        else:
            filename = "<expr>"
            source = expression

        if verbose:
            click.echo(f"Compiling {filename}...", err=True)

        # Token dump mode
        if tokens:
            for token in ScriptLexer(source, filename).tokenize():
                click.echo(repr(token))
            return

        compiler = ScriptCompiler(options)
        result = compiler.compile_source(source, filename)

        printer = TreePrinter()
        for region in result.trees:
            click.echo(printer.print(region) if tree else render(region))

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens", err=True)
            click.echo(f"Parsed: {result.region_count} regions", err=True)
            if options.optimize and result.stats is not None:
                click.echo(str(result.stats), err=True)

        for warning in result.warnings:
            click.echo(warning, err=True)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()

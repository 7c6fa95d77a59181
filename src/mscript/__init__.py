"""
MScript - Expression Compiler Front End
=======================================

This package compiles MScript, a small line-oriented scripting language
for game server automation, into reduced expression trees.

Main Components
---------------
- **compiler**: Lexer, grouping parser, expression reducer, optimizer
    Converts script source (.ms) into one tree per line

- **cli**: Command-line tools (msc)
    Prints the reduced tree of each line, or its tokens

Quick Start
-----------
Reduce an expression:
    >>> from mscript import reduce_expression, render
    >>> render(reduce_expression("@total .= ' items'"))
    "assign(@total, concat(@total, ' items'))"

Compile a script:
    >>> from mscript import ScriptCompiler
    >>> result = ScriptCompiler().compile_file("greet.ms")
    >>> len(result.trees)
    3

Or use the command-line tool:
    $ msc greet.ms
    $ msc -e "@x = 1 + 2 * 3"

Version History
---------------
1.0.0 - Initial release with reducer, parser and msc
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from mscript.errors import (
    MScriptError,
    SourceLocation,
    EngineInvariantError,
    UnresolvedCallIdentifierError,
    RegistryError,
)
from mscript.compiler import (
    CompilerOptions,
    ScriptCompiler,
    CompileError,
    CompilationFailedError,
    ExpressionReducer,
    FunctionRegistry,
    CallableDescriptor,
    compile_script,
    reduce_expression,
    render,
)

__all__ = [
    "__version__",
    # Errors
    "MScriptError",
    "SourceLocation",
    "EngineInvariantError",
    "UnresolvedCallIdentifierError",
    "RegistryError",
    "CompileError",
    "CompilationFailedError",
    # Compiler
    "CompilerOptions",
    "ScriptCompiler",
    "ExpressionReducer",
    "FunctionRegistry",
    "CallableDescriptor",
    "compile_script",
    "reduce_expression",
    "render",
]

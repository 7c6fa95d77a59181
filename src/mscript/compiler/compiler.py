"""
MScript Compiler Main Module
============================

This module provides the main compiler interface for MScript. It
orchestrates the front end of the compilation process:

    Source → Lex → Parse (grouping) → Optimize (reduction) → Trees

Usage
-----
Command line:
    $ msc script.ms
    $ msc -e "@x += 5"

Programmatic:
    >>> from mscript.compiler import reduce_expression, render
    >>> render(reduce_expression("@x += 5"))
    'assign(@x, add(@x, 5))'

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to tokens
2. **Parsing**: Group tokens into one unreduced tree per region (line)
3. **Optimization**: Reduce every expression list and unwrap grouping
   functions, producing the final tree of each region

Error Handling
--------------
Every region is optimized independently. When one region fails, its error
is collected and the compiler moves on to the next region, so a single
run reports every bad line of a script. Lexer and parser errors stop the
file immediately, since no region boundaries are reliable past them.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from mscript.compiler.ast import Node, Void
from mscript.compiler.errors import (
    CompileError,
    CompileErrorCollector,
    ScriptSyntaxError,
)
from mscript.compiler.lexer import ScriptLexer, ScriptToken
from mscript.compiler.optimizer import OptimizationStats, TreeOptimizer
from mscript.compiler.parser import ScriptParser
from mscript.compiler.reducer import ExpressionReducer
from mscript.compiler.registry import FunctionRegistry, default_registry

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        string_concat: Fallback for operands left next to each other.
                       True wraps them in sconcat (string semantics),
                       False in concat (list semantics).
        optimize: Run the optimizer. False keeps the raw grouping trees,
                  which is mainly useful for debugging the parser.
        max_errors: Stop compiling a file after this many errors
        registry: Function registry; None means the built-in registry
    """
    string_concat: bool = True
    optimize: bool = True
    max_errors: int = 100
    registry: Optional[FunctionRegistry] = None

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            MSCRIPT_CONCAT_MODE: "string" (sconcat) or "list" (concat)
            MSCRIPT_OPTIMIZE: "0" disables the optimizer
            MSCRIPT_MAX_ERRORS: Maximum errors per file (integer)
        """
        options = cls()

        if mode := os.environ.get("MSCRIPT_CONCAT_MODE"):
            mode = mode.strip().lower()
            if mode == "list":
                options.string_concat = False
            elif mode != "string":
                logger.warning(f"Ignoring unknown MSCRIPT_CONCAT_MODE '{mode}'")

        if optimize := os.environ.get("MSCRIPT_OPTIMIZE"):
            options.optimize = optimize.strip().lower() not in ("0", "false", "no", "off")

        if max_errors := os.environ.get("MSCRIPT_MAX_ERRORS"):
            try:
                options.max_errors = max(1, int(max_errors))
            except ValueError:
                logger.warning(f"Ignoring non-numeric MSCRIPT_MAX_ERRORS '{max_errors}'")

        return options


class ScriptCompiler:
    """
    MScript front-end compiler.

    Example:
        compiler = ScriptCompiler()
        result = compiler.compile_file("script.ms")
        for tree in result.trees:
            print(render(tree))

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()
        self.registry = self.options.registry
        if self.registry is None:
            self.registry = default_registry()
        self._errors = CompileErrorCollector(self.options.max_errors)

    def compile_source(self, source: str, filename: str = "<input>") -> "CompilerResult":
        """
        Compile MScript source code to reduced trees.

        Args:
            source: MScript source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with one tree per region

        Raises:
            CompilationFailedError: If any region failed to compile
            EngineInvariantError: If an internal invariant was violated
        """
        result = CompilerResult(filename=filename)
        source_lines = source.splitlines()
        self._errors.start(source_lines)

        try:
            tokens = self._lex(source, filename)
            result.token_count = len(tokens)

            regions = self._parse(tokens, filename, source_lines)
            result.region_count = len(regions)
        except CompileError as e:
            self._errors.add(e)
            regions = []

        optimizer = self._make_optimizer()
        for region in regions:
            if not self.options.optimize:
                result.trees.append(region)
                continue
            try:
                result.trees.append(optimizer.optimize(region))
            except CompileError as e:
                if not self._errors.add(e):
                    break

        result.stats = optimizer.stats
        result.errors = list(self._errors.errors)
        result.warnings = list(self._errors.warnings)

        logger.debug(
            f"Compiled {filename}: {result.region_count} regions, "
            f"{len(result.errors)} errors"
        )
        self._errors.raise_if_errors()

        result.success = True
        return result

    def compile_file(self, filepath: str) -> "CompilerResult":
        """
        Compile an MScript source file.

        Args:
            filepath: Path to the source file

        Returns:
            CompilerResult with one tree per region

        Raises:
            CompilationFailedError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def reduce_expression(self, text: str, filename: str = "<expr>") -> Node:
        """
        Compile a single expression and return its tree.

        Empty text yields Void.

        Raises:
            CompilationFailedError: If the expression does not compile or
                                    spans more than one region
        """
        result = self.compile_source(text, filename)
        if not result.trees:
            return Void()
        if len(result.trees) > 1:
            self._errors.add(ScriptSyntaxError(
                f"expected a single expression, found {len(result.trees)} regions",
                result.trees[1].location,
                hint="pass one line at a time",
            ))
            self._errors.raise_if_errors()
        return result.trees[0]

    def _lex(self, source: str, filename: str) -> list[ScriptToken]:
        """Tokenize source."""
        lexer = ScriptLexer(source, filename)
        return list(lexer.tokenize())

    def _parse(self, tokens: list[ScriptToken], filename: str, source_lines: list[str]) -> list:
        """Group tokens into one unreduced tree per region."""
        parser = ScriptParser(tokens, filename, source_lines, self.registry)
        return parser.parse()

    def _make_optimizer(self) -> TreeOptimizer:
        reducer = ExpressionReducer(self.registry, self.options.string_concat)
        return TreeOptimizer(reducer)


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        trees: One tree per region, in source order
        token_count: Number of tokens lexed
        region_count: Number of non-empty regions parsed
        stats: What the optimizer rewrote
        errors: List of collected compile errors
        warnings: List of warning messages
    """
    filename: str = ""
    success: bool = False
    trees: list[Node] = field(default_factory=list)
    token_count: int = 0
    region_count: int = 0
    stats: Optional[OptimizationStats] = None
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_script(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> list[Node]:
    """
    Compile MScript source and return its trees.

    Args:
        source: MScript source code
        filename: Source filename for error messages
        options: Compiler configuration (uses defaults if None)

    Returns:
        One tree per region
    """
    return ScriptCompiler(options).compile_source(source, filename).trees


def reduce_expression(text: str, string_concat: bool = True) -> Node:
    """
    Compile a single expression and return its tree.

    >>> render(reduce_expression("1 + 2 * 3"))
    'add(1, multiply(2, 3))'
    """
    options = CompilerOptions(string_concat=string_concat)
    return ScriptCompiler(options).reduce_expression(text)

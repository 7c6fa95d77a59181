"""
MScript Compiler Error Hierarchy
================================

This module defines the exceptions raised while compiling MScript. All
compile-time diagnostics inherit from CompileError, which itself inherits
from the base MScriptError.

Exception Hierarchy
-------------------
CompileError (base for all compile-time diagnostics)
├── ScriptSyntaxError - lexer and parser syntax errors
├── UnknownSymbolError - operator spelling with no known operation
├── MalformedOperatorSequenceError - dangling or stacked operator
├── InvalidCompoundAssignmentError - compound assignment with no value
├── MisplacedIdentifierError - bare identifier in a non-leading position
├── UnexpectedChildrenError - bracket/brace group with several values
└── CompilationFailedError - aggregate report for a whole file

Error Message Format
--------------------
    script.ms:3:9: error: Unexpected symbol (+). Did you forget to quote your symbols?
        @x = 1 +
                ^
    hint: quote the symbol if it is meant as text

Compile errors abort the region being compiled. The compiler driver
collects them per file with CompileErrorCollector and reports them
together.
"""

from typing import List, Optional

from mscript.errors import MScriptError, SourceLocation


# =============================================================================
# Base Compile Error
# =============================================================================

class CompileError(MScriptError):
    """
    Base exception for all compile-time diagnostics.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            script.ms:1:4: error: Unexpected identifier
                'a' msg 'b'
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_source_line(self, source_line: str) -> "CompileError":
        """Attach the offending source text and refresh the formatted message."""
        self.source_line = source_line
        self.args = (self._format_message(),)
        return self


class CompilationFailedError(CompileError):
    """
    Aggregate error raised when a file produced one or more diagnostics.

    The message is a pre-formatted report from CompileErrorCollector and
    is passed through unchanged.
    """

    def __init__(self, report: str, errors: Optional[List[CompileError]] = None):
        self.errors = errors or []
        super().__init__(report)

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class ScriptSyntaxError(CompileError):
    """
    Syntax error in MScript source.

    Examples:
        - Unterminated string literal
        - Invalid character in source
        - Unbalanced parentheses, brackets or braces
    """
    pass


# =============================================================================
# Reduction Errors
# =============================================================================

class UnknownSymbolError(CompileError):
    """An operator symbol whose spelling maps to no operation."""

    def __init__(self, spelling: str, location: Optional[SourceLocation] = None):
        self.spelling = spelling
        super().__init__(f"Unknown symbol ({spelling})", location=location)


class MalformedOperatorSequenceError(CompileError):
    """
    An operator has no operand to work on.

    Raised when a tier finds a dangling operator at the end of a list,
    when an operand slot holds another operator, or when an operator
    survives every tier without being consumed.

    Example:
        @x = 1 +      // '+' has no right operand
    """

    def __init__(self, spelling: str, location: Optional[SourceLocation] = None):
        self.spelling = spelling
        super().__init__(
            f"Unexpected symbol ({spelling}). Did you forget to quote your symbols?",
            location=location,
            hint="quote the symbol if it is meant as text",
        )


class InvalidCompoundAssignmentError(CompileError):
    """
    A compound assignment symbol has no right-hand side.

    Example:
        @x +=
    """

    def __init__(self, spelling: str, location: Optional[SourceLocation] = None):
        self.spelling = spelling
        super().__init__(
            "Invalid symbol listed",
            location=location,
            hint=f"'{spelling}' needs a value on its right",
        )


class MisplacedIdentifierError(CompileError):
    """
    A bare identifier appears somewhere other than the head of a list.

    Function names used without parentheses must come first:
        msg 'hello'     // ok
        'hello' msg     // error
    """

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        self.name = name
        super().__init__(
            "Unexpected identifier",
            location=location,
            hint=f"'{name}' can only be called when it leads the expression",
        )


class UnexpectedChildrenError(CompileError):
    """A bracket or brace group that holds more than one value after reduction."""

    def __init__(self, group: str, count: int, location: Optional[SourceLocation] = None):
        self.group = group
        self.count = count
        super().__init__(
            f"Unexpected children: {group} group holds {count} values",
            location=location,
            hint="a bracket or brace group must reduce to a single value",
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class CompileErrorCollector:
    """
    Collects the errors of one file, region by region.

    A failing region does not stop the file: the driver records the error
    and moves on to the next line. The collector owns the source text so
    every recorded error shows the line it points at, and it decides when
    enough errors have piled up:

        collector.start(source.splitlines())
        for region in regions:
            try:
                compile_region(region)
            except CompileError as e:
                if not collector.add(e):
                    break
        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        self.errors: List[CompileError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors
        self._source_lines: List[str] = []

    def start(self, source_lines: List[str]) -> None:
        """Forget earlier errors and keep the lines of the next source."""
        self.errors.clear()
        self.warnings.clear()
        self._source_lines = source_lines

    def add(self, error: CompileError) -> bool:
        """
        Record an error, attaching its source line when it has none.

        Returns False once max_errors is reached, after noting that
        compilation stopped early.
        """
        if error.source_line is None and error.location is not None:
            line = error.location.line
            if 0 < line <= len(self._source_lines):
                error.with_source_line(self._source_lines[line - 1])

        self.errors.append(error)
        if len(self.errors) < self.max_errors:
            return True

        self.warnings.append(f"warning: stopped after {len(self.errors)} errors")
        return False

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")
        lines.extend(self.warnings)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}")
        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise a CompilationFailedError if any errors were collected."""
        if self.errors:
            raise CompilationFailedError(self.report(), list(self.errors))

"""
MScript Error Hierarchy
=======================

This module defines the root of the exception hierarchy for the MScript
toolchain. All exceptions inherit from MScriptError, allowing callers to
catch every toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
MScriptError (base)
├── CompileError (compiler diagnostics, see mscript.compiler.errors)
├── EngineInvariantError - internal invariant violated, never a user error
│   └── UnresolvedCallIdentifierError
└── RegistryError - function registry misuse

Design Philosophy
-----------------
Each compile-time exception captures source location information
(filename, line, column) so the compiler can report exactly where a
problem was found:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class MScriptError(Exception):
    """
    Base exception for all MScript toolchain errors.

        try:
            compiler.compile_file("script.ms")
        except MScriptError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Every node of a parsed tree carries one of these. The reduction engine
    never interprets a location; it only copies it from input nodes to the
    nodes it constructs and into the errors it raises.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed, 0 when unknown)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# Location used when there is no input node to take provenance from
UNKNOWN_LOCATION = SourceLocation("<unknown>", 0, 0)


# =============================================================================
# Internal Errors
# =============================================================================

class EngineInvariantError(MScriptError):
    """
    An internal invariant of the compiler was violated.

    These are not user errors: the grammar is supposed to make them
    impossible. They are kept distinct from CompileError so that callers
    (and tests) can tell a bad script apart from a compiler bug, and they
    are never collected into a diagnostics report.

    Attributes:
        message: The error description
        location: Where the offending node came from (optional)
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.location = location
        if location:
            super().__init__(f"{location}: internal error: {message}")
        else:
            super().__init__(f"internal error: {message}")


class UnresolvedCallIdentifierError(EngineInvariantError):
    """
    A leading bare identifier does not name a registered function.

    The parser only produces Identifier nodes for registered names, so
    reaching this error means a node list was built by hand or the
    registry changed between parsing and reduction.
    """

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        self.name = name
        super().__init__(f"Unknown function {name}", location)


class RegistryError(MScriptError):
    """
    Misuse of the function registry.

    Raised when:
    - A function is registered twice under the same name
    - A function is registered after the registry was frozen
    """
    pass

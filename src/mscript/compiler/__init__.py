"""
MScript Compiler Front End
==========================

This package turns MScript source into reduced expression trees. Its core
is the expression list reducer: the parser leaves operator precedence
undecided and emits flat lists of operands and raw operator symbols, and
the reducer folds each list into one tree, tier by tier.

- A lexer (tokenizer) for MScript source
- A grouping parser producing unreduced __autoconcat__ trees
- The expression reducer (precedence tiers, assignment, special forms)
- A tree optimizer applying the reducer bottom-up
- A registry of callable functions for the implicit call form

Pipeline
--------
    Source → Lexer → Parser → Optimizer (+ Reducer) → Trees

Usage
-----
>>> from mscript.compiler import reduce_expression, render
>>> render(reduce_expression("@x = 1 + 2 * 3"))
'assign(@x, add(1, multiply(2, 3)))'
>>> render(reduce_expression("msg 'Hello ' @name"))
"msg(sconcat('Hello ', @name))"
"""

# =============================================================================
# Public API Imports
# =============================================================================

from mscript.compiler.compiler import (
    CompilerOptions,
    CompilerResult,
    ScriptCompiler,
    compile_script,
    reduce_expression,
)
from mscript.compiler.errors import (
    CompileError,
    CompilationFailedError,
    CompileErrorCollector,
    ScriptSyntaxError,
    UnknownSymbolError,
    MalformedOperatorSequenceError,
    InvalidCompoundAssignmentError,
    MisplacedIdentifierError,
    UnexpectedChildrenError,
)
from mscript.compiler.lexer import ScriptLexer, ScriptToken, TokenType
from mscript.compiler.parser import ScriptParser
from mscript.compiler.optimizer import OptimizationStats, TreeOptimizer
from mscript.compiler.reducer import ExpressionReducer, reduce_nodes
from mscript.compiler.registry import (
    CallableDescriptor,
    FunctionRegistry,
    default_registry,
)
from mscript.compiler.ast import (
    Node,
    NodeKind,
    Fixity,
    OperatorSymbol,
    Label,
    Identifier,
    Literal,
    Variable,
    Void,
    Call,
    Entry,
    Concat,
    SequentialConcat,
    Bracket,
    Brace,
    NodeVisitor,
    TreePrinter,
    render,
)

__all__ = [
    # Compiler
    "CompilerOptions",
    "CompilerResult",
    "ScriptCompiler",
    "compile_script",
    "reduce_expression",
    # Errors
    "CompileError",
    "CompilationFailedError",
    "CompileErrorCollector",
    "ScriptSyntaxError",
    "UnknownSymbolError",
    "MalformedOperatorSequenceError",
    "InvalidCompoundAssignmentError",
    "MisplacedIdentifierError",
    "UnexpectedChildrenError",
    # Passes
    "ScriptLexer",
    "ScriptToken",
    "TokenType",
    "ScriptParser",
    "OptimizationStats",
    "TreeOptimizer",
    "ExpressionReducer",
    "reduce_nodes",
    # Registry
    "CallableDescriptor",
    "FunctionRegistry",
    "default_registry",
    # Tree
    "Node",
    "NodeKind",
    "Fixity",
    "OperatorSymbol",
    "Label",
    "Identifier",
    "Literal",
    "Variable",
    "Void",
    "Call",
    "Entry",
    "Concat",
    "SequentialConcat",
    "Bracket",
    "Brace",
    "NodeVisitor",
    "TreePrinter",
    "render",
]

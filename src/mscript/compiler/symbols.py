"""
Operator Symbol Classification
==============================

Pure functions that answer two questions about an OperatorSymbol: which
precedence tier it belongs to, and which operation it stands for once
the reducer turns it into a Call.

Precedence Tiers (highest first)
--------------------------------
1.  postfix        x++ x--
2.  unary          -x +x !x ++x --x
3.  exponential    **
4.  multiplicative * / %
5.  additive       + - .
6.  relational     < > <= >=
7.  equality       == != === !==
8.  logical_and    &&
9.  logical_or     ||
10. assignment     = += -= *= /= .=

A spelling may belong to several tiers ("-" is both unary and additive,
"++" is postfix or prefix depending on fixity); the reducer decides which
reading applies from the surrounding nodes.
"""

from typing import Callable, Optional

from mscript.compiler.ast import Fixity, OperatorSymbol
from mscript.compiler.errors import UnknownSymbolError


# =============================================================================
# Operation Names
# =============================================================================

NEGATE = "neg"
IDENTITY = "identity"
ASSIGN = "assign"

# Binary and prefix operators
OPERATIONS: dict[str, str] = {
    # Exponential
    "**": "pow",

    # Multiplicative
    "*": "multiply",
    "/": "divide",
    "%": "mod",

    # Additive
    "+": "add",
    "-": "subtract",
    ".": "concat",

    # Relational
    "<": "lt",
    ">": "gt",
    "<=": "lte",
    ">=": "gte",

    # Equality
    "==": "equals",
    "!=": "nequals",
    "===": "sequals",
    "!==": "snequals",

    # Logical
    "&&": "and",
    "||": "or",
    "!": "not",

    # Prefix increment/decrement
    "++": "inc",
    "--": "dec",
}

POSTFIX_OPERATIONS: dict[str, str] = {
    "++": "postinc",
    "--": "postdec",
}

# Assignment spelling -> underlying binary operation (None for plain '=')
ASSIGNMENTS: dict[str, Optional[str]] = {
    "=": None,
    "+=": "add",
    "-=": "subtract",
    "*=": "multiply",
    "/=": "divide",
    ".=": "concat",
}

# Every spelling the lexer should recognize, longest first for maximal munch
ALL_SPELLINGS: tuple[str, ...] = tuple(
    sorted(set(OPERATIONS) | set(ASSIGNMENTS), key=len, reverse=True)
)

_MULTIPLICATIVE = frozenset({"*", "/", "%"})
_ADDITIVE = frozenset({"+", "-", "."})
_RELATIONAL = frozenset({"<", ">", "<=", ">="})
_EQUALITY = frozenset({"==", "!=", "===", "!=="})
_CONTEXTUAL_UNARY = frozenset({"+", "-"})
_PREFIX_ONLY = frozenset({"!"})
_STEP = frozenset({"++", "--"})


# =============================================================================
# Tier Predicates
# =============================================================================

def is_postfix(symbol: OperatorSymbol) -> bool:
    """x++ / x--: the parser marked the symbol as following its operand."""
    return symbol.spelling in _STEP and symbol.fixity is Fixity.POSTFIX


def is_contextual_unary(symbol: OperatorSymbol) -> bool:
    """+ and - are unary only where no left operand precedes them."""
    return symbol.spelling in _CONTEXTUAL_UNARY


def is_unary(symbol: OperatorSymbol) -> bool:
    if symbol.spelling in _CONTEXTUAL_UNARY or symbol.spelling in _PREFIX_ONLY:
        return True
    return symbol.spelling in _STEP and symbol.fixity is not Fixity.POSTFIX


def is_exponential(symbol: OperatorSymbol) -> bool:
    return symbol.spelling == "**"


def is_multiplicative(symbol: OperatorSymbol) -> bool:
    return symbol.spelling in _MULTIPLICATIVE


def is_additive(symbol: OperatorSymbol) -> bool:
    return symbol.spelling in _ADDITIVE


def is_relational(symbol: OperatorSymbol) -> bool:
    return symbol.spelling in _RELATIONAL


def is_equality(symbol: OperatorSymbol) -> bool:
    return symbol.spelling in _EQUALITY


def is_logical_and(symbol: OperatorSymbol) -> bool:
    return symbol.spelling == "&&"


def is_logical_or(symbol: OperatorSymbol) -> bool:
    return symbol.spelling == "||"


def is_assignment(symbol: OperatorSymbol) -> bool:
    return symbol.spelling in ASSIGNMENTS


def is_known(spelling: str) -> bool:
    """True if the spelling names any operator."""
    return spelling in OPERATIONS or spelling in ASSIGNMENTS


# Binary tiers in the order the reducer applies them
BINARY_TIERS: tuple[tuple[str, Callable[[OperatorSymbol], bool]], ...] = (
    ("exponential", is_exponential),
    ("multiplicative", is_multiplicative),
    ("additive", is_additive),
    ("relational", is_relational),
    ("equality", is_equality),
    ("logical_and", is_logical_and),
    ("logical_or", is_logical_or),
)


# =============================================================================
# Operation Mapping
# =============================================================================

def canonical_op(symbol: OperatorSymbol) -> str:
    """
    Return the operation name a symbol stands for.

    Postfix "++"/"--" map to postinc/postdec, every assignment spelling
    maps to assign, and everything else is looked up in OPERATIONS.

    Raises:
        UnknownSymbolError: If the spelling is not an operator
    """
    if is_postfix(symbol):
        return POSTFIX_OPERATIONS[symbol.spelling]
    if is_assignment(symbol):
        return ASSIGN
    try:
        return OPERATIONS[symbol.spelling]
    except KeyError:
        raise UnknownSymbolError(symbol.spelling, symbol.location) from None


def compound_operation(symbol: OperatorSymbol) -> Optional[str]:
    """
    Return the binary operation implied by a compound assignment.

        '='  -> None
        '+=' -> 'add'
        '.=' -> 'concat'

    Raises:
        UnknownSymbolError: If the symbol is not an assignment
    """
    try:
        return ASSIGNMENTS[symbol.spelling]
    except KeyError:
        raise UnknownSymbolError(symbol.spelling, symbol.location) from None

"""
Expression List Reducer
=======================

The parser does not decide operator precedence. Every expression reaches
this module as a flat list of sibling nodes in which operands and raw
operator symbols alternate:

    [@x, '=', 1, '+', 2, '*', 3]

The reducer collapses such a list, one precedence tier at a time, into a
single nested tree:

    assign(@x, add(1, multiply(2, 3)))

Reduction Pipeline
------------------
1. Postfix      x++ -> postinc(x)
2. Unary        -x -> neg(x), +x -> identity(x), !x -> not(x), ++x -> inc(x)
3. Binary tiers exponential, multiplicative, additive, relational,
                equality, logical and, logical or; each one left to right
                and left-associative
4. Assignment   right-associative; compound forms are desugared:
                x += 5 -> assign(x, add(x, 5))
5. Special forms on whatever is left:
                label first       -> centry(label, <rest reduced>)
                one node          -> that node
                identifier first  -> implicit call through the registry
                otherwise         -> sconcat(...) or concat(...)

Each tier is one sweep over the list, so a reduction costs a fixed number
of passes. The caller's list is never modified; the reducer rewrites its
own copy.

Usage
-----
>>> reducer = ExpressionReducer()
>>> tree = reducer.reduce([Literal(value=3), OperatorSymbol(spelling="+"), Literal(value=4)])
>>> render(tree)
'add(3, 4)'
"""

import copy
import logging
from typing import Callable, Optional, Sequence

from mscript.errors import SourceLocation, UNKNOWN_LOCATION, UnresolvedCallIdentifierError
from mscript.compiler.ast import (
    Call,
    Concat,
    Entry,
    Identifier,
    Label,
    Node,
    NodeKind,
    OperatorSymbol,
    SequentialConcat,
)
from mscript.compiler.errors import (
    InvalidCompoundAssignmentError,
    MalformedOperatorSequenceError,
    MisplacedIdentifierError,
    UnknownSymbolError,
)
from mscript.compiler.registry import FunctionRegistry, default_registry
from mscript.compiler import symbols

logger = logging.getLogger(__name__)


class ExpressionReducer:
    """
    Collapses flat node lists into single trees.

    The reducer keeps no state between calls; one instance can serve any
    number of compilations, including concurrent ones, as long as the
    registry it reads is not modified meanwhile.

    Attributes:
        registry: Resolves identifiers in the implicit call form
        string_concat: Default fallback flavor. True wraps leftover
                       operands in SequentialConcat (string semantics),
                       False in Concat (list semantics).
    """

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        string_concat: bool = True,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.string_concat = string_concat

    def reduce(
        self,
        nodes: Sequence[Node],
        location: Optional[SourceLocation] = None,
        string_concat: Optional[bool] = None,
    ) -> Node:
        """
        Reduce a list of sibling nodes to a single node.

        Args:
            nodes: Operands interleaved with operator symbols, labels and
                   identifiers, in source order
            location: Provenance used when the list is empty
            string_concat: Overrides the reducer's fallback flavor

        Returns:
            The single resulting node

        Raises:
            CompileError: If the list cannot be reduced
            UnresolvedCallIdentifierError: If a leading identifier is not
                                           a registered function
        """
        if string_concat is None:
            string_concat = self.string_concat
        location = location or UNKNOWN_LOCATION

        work = list(nodes)
        self._check_symbols(work)

        self._reduce_postfix(work)
        if any(node.kind is NodeKind.SYMBOL for node in work):
            self._reduce_unary(work)
            for tier_name, matches in symbols.BINARY_TIERS:
                self._reduce_binary(work, tier_name, matches)
            self._reduce_assignment(work)
            self._check_consumed(work)

        return self._resolve_special_forms(work, location, string_concat)

    # =========================================================================
    # Tiers
    # =========================================================================

    def _check_symbols(self, work: list[Node]) -> None:
        for node in work:
            if node.kind is NodeKind.SYMBOL and not symbols.is_known(node.spelling):
                raise UnknownSymbolError(node.spelling, node.location)

    def _reduce_postfix(self, work: list[Node]) -> None:
        i = 1
        while i < len(work):
            node = work[i]
            operand = work[i - 1]
            if (
                node.kind is NodeKind.SYMBOL
                and symbols.is_postfix(node)
                and operand.is_operand
            ):
                work[i - 1:i + 1] = [
                    Call(
                        location=operand.location,
                        name=symbols.canonical_op(node),
                        children=[operand],
                    )
                ]
                # The next candidate has slid into position i
                continue
            i += 1

    def _reduce_unary(self, work: list[Node]) -> None:
        i = 0
        while i < len(work) - 1:
            node = work[i]
            if node.kind is not NodeKind.SYMBOL or not symbols.is_unary(node):
                i += 1
                continue

            operand = work[i + 1]
            if operand.kind is NodeKind.SYMBOL:
                i += 1
                continue

            if symbols.is_contextual_unary(node):
                if i > 0 and work[i - 1].is_operand:
                    # Binary + or -, left for the additive tier
                    i += 1
                    continue
                name = symbols.NEGATE if node.spelling == "-" else symbols.IDENTITY
            else:
                name = symbols.canonical_op(node)

            self._check_operand(operand)
            work[i:i + 2] = [Call(location=node.location, name=name, children=[operand])]
            logger.debug(f"Unary {node.spelling} reduced at {node.location}")

            # A prefix operator to the left may now have its operand
            i = max(i - 1, 0)

    def _reduce_binary(
        self,
        work: list[Node],
        tier_name: str,
        matches: Callable[[OperatorSymbol], bool],
    ) -> None:
        i = 0
        while i < len(work) - 1:
            symbol = work[i + 1]
            if (
                symbol.kind is NodeKind.SYMBOL
                and matches(symbol)
                and not symbols.is_assignment(symbol)
            ):
                if i + 2 >= len(work):
                    raise self._dangling(work)
                left, right = work[i], work[i + 2]
                self._check_operand(left)
                self._check_operand(right)
                work[i:i + 3] = [
                    Call(
                        location=left.location,
                        name=symbols.canonical_op(symbol),
                        children=[left, right],
                    )
                ]
                logger.debug(f"{tier_name} {symbol.spelling} reduced at {symbol.location}")
                # Re-examine the same index for left-associative chains
                continue
            i += 1

    def _reduce_assignment(self, work: list[Node]) -> None:
        # Swept right to left so that a = b = c groups as a = (b = c)
        i = len(work) - 2
        while i >= 0:
            symbol = work[i + 1]
            if symbol.kind is NodeKind.SYMBOL and symbols.is_assignment(symbol):
                compound = symbols.compound_operation(symbol)
                if i + 2 >= len(work):
                    if compound is not None:
                        raise InvalidCompoundAssignmentError(symbol.spelling, symbol.location)
                    raise self._dangling(work)

                lhs, rhs = work[i], work[i + 2]
                self._check_operand(lhs)
                self._check_operand(rhs)
                if compound is not None:
                    rhs = Call(
                        location=lhs.location,
                        name=compound,
                        children=[copy.deepcopy(lhs), rhs],
                    )
                work[i:i + 3] = [
                    Call(location=lhs.location, name=symbols.ASSIGN, children=[lhs, rhs])
                ]
                logger.debug(f"Assignment {symbol.spelling} reduced at {symbol.location}")
            i -= 1

    def _check_consumed(self, work: list[Node]) -> None:
        for node in work:
            if node.kind is NodeKind.SYMBOL:
                raise MalformedOperatorSequenceError(node.spelling, node.location)

    def _check_operand(self, node: Node) -> None:
        """Raise if node cannot fill an operand slot."""
        if node.kind is NodeKind.SYMBOL:
            raise MalformedOperatorSequenceError(node.spelling, node.location)
        if node.kind is NodeKind.LABEL:
            raise MalformedOperatorSequenceError(f"{node.name}:", node.location)
        if node.kind is NodeKind.IDENTIFIER:
            raise MisplacedIdentifierError(node.name, node.location)

    def _dangling(self, work: list[Node]) -> MalformedOperatorSequenceError:
        """Error for an operator with nothing on its right."""
        last = work[-1]
        return MalformedOperatorSequenceError(last.spelling, last.location)

    # =========================================================================
    # Special Forms
    # =========================================================================

    def _resolve_special_forms(
        self,
        work: list[Node],
        location: SourceLocation,
        string_concat: bool,
    ) -> Node:
        if work and work[0].kind is NodeKind.LABEL:
            return self._make_entry(work, string_concat)

        if len(work) == 1:
            return work[0]

        for index, node in enumerate(work):
            if node.kind is NodeKind.IDENTIFIER:
                if index != 0:
                    raise MisplacedIdentifierError(node.name, node.location)
                return self._make_implicit_call(node, work[1:])

        return self._make_concat(work, location, string_concat)

    def _make_entry(self, work: list[Node], string_concat: bool) -> Entry:
        label: Label = work[0]
        value = self.reduce(work[1:], label.location, string_concat)
        return Entry(location=label.location, label=label, value=value)

    def _make_implicit_call(self, identifier: Identifier, arguments: list[Node]) -> Call:
        argument = arguments[0]
        if len(arguments) > 1:
            argument = SequentialConcat(location=argument.location, children=arguments)

        descriptor = self.registry.lookup(identifier.name)
        if descriptor is None:
            raise UnresolvedCallIdentifierError(identifier.name, identifier.location)

        logger.debug(f"Implicit call of '{descriptor.name}' at {identifier.location}")
        return Call(location=identifier.location, name=descriptor.name, children=[argument])

    def _make_concat(
        self,
        work: list[Node],
        location: SourceLocation,
        string_concat: bool,
    ) -> Node:
        if work:
            location = work[0].location
        node_class = SequentialConcat if string_concat else Concat
        return node_class(location=location, children=work)


def reduce_nodes(
    nodes: Sequence[Node],
    location: Optional[SourceLocation] = None,
    string_concat: bool = True,
    registry: Optional[FunctionRegistry] = None,
) -> Node:
    """
    Convenience function to reduce a node list with a fresh reducer.

    Args:
        nodes: The flat node list
        location: Provenance used when the list is empty
        string_concat: SequentialConcat (True) or Concat (False) fallback
        registry: Function registry (defaults to the built-in registry)

    Returns:
        The single resulting node
    """
    reducer = ExpressionReducer(registry, string_concat)
    return reducer.reduce(nodes, location)

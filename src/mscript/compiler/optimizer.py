"""
MScript Tree Optimizer
======================

This module rewrites the parser's grouping tree into its final shape. It
operates on the Call nodes produced by the parser for compiler-internal
functions and replaces each one with the node it stands for.

Design Philosophy
-----------------
1. **Bottom-Up**: Children are optimized before their parent, so every
   list handed to the reducer already consists of finished operands.

2. **Shape Only**: The optimizer never evaluates anything. It removes the
   grouping functions that only exist to carry structure from the parser
   to this pass.

3. **Non-Destructive**: A new tree is returned; the input tree is left as
   the parser built it.

Supported Rewrites
------------------
1. **Expression lists**: __autoconcat__(...) -> reducer result
2. **Parentheses**: p(x) -> x, p() -> void, p(a, b) -> reduced like a list
3. **Bracket groups**: __cbracket__(x) -> [x], __cbracket__() -> [void]
4. **Brace groups**: __cbrace__(x) -> {x}, __cbrace__() -> {void}

Every other Call keeps its name and gets optimized children. That includes
dyn, which exists precisely to survive this pass.
"""

import logging
from dataclasses import dataclass

from mscript.compiler.ast import (
    AUTOCONCAT,
    CBRACE,
    CBRACKET,
    PAREN,
    Brace,
    Bracket,
    Call,
    Entry,
    Node,
    NodeKind,
    Void,
)
from mscript.compiler.errors import UnexpectedChildrenError
from mscript.compiler.reducer import ExpressionReducer

logger = logging.getLogger(__name__)


@dataclass
class OptimizationStats:
    """
    Statistics about rewrites performed.

    Attributes:
        lists_reduced: Count of __autoconcat__ lists handed to the reducer
        parens_removed: Count of p(...) groups replaced by their content
        groups_wrapped: Count of bracket/brace groups turned into nodes
    """
    lists_reduced: int = 0
    parens_removed: int = 0
    groups_wrapped: int = 0

    @property
    def total_rewrites(self) -> int:
        return self.lists_reduced + self.parens_removed + self.groups_wrapped

    def __str__(self) -> str:
        lines = ["Optimization Statistics:"]
        if self.lists_reduced:
            lines.append(f"  Expression lists reduced: {self.lists_reduced}")
        if self.parens_removed:
            lines.append(f"  Parentheses removed: {self.parens_removed}")
        if self.groups_wrapped:
            lines.append(f"  Bracket/brace groups: {self.groups_wrapped}")
        lines.append(f"  Total: {self.total_rewrites} rewrites")
        return "\n".join(lines)


class TreeOptimizer:
    """
    Replaces compiler-internal grouping calls with their final nodes.

    Usage:
        optimizer = TreeOptimizer(ExpressionReducer())
        tree = optimizer.optimize(parsed_region)

    Attributes:
        reducer: Reduces the element list of every __autoconcat__ call
    """

    def __init__(self, reducer: ExpressionReducer):
        self.reducer = reducer
        self.stats = OptimizationStats()

    def optimize(self, node: Node) -> Node:
        """
        Optimize a tree and return the new root.

        Raises:
            CompileError: If a list cannot be reduced or a group holds
                          more than one value
        """
        if node.kind is NodeKind.CALL:
            return self._optimize_call(node)

        if node.kind is NodeKind.ENTRY:
            return Entry(
                location=node.location,
                label=node.label,
                value=self.optimize(node.value),
            )
        if node.kind in (NodeKind.CONCAT, NodeKind.SEQUENTIAL_CONCAT):
            return type(node)(
                location=node.location,
                children=[self.optimize(child) for child in node.children],
            )
        if node.kind is NodeKind.BRACKET:
            return Bracket(location=node.location, value=self.optimize(node.value))
        if node.kind is NodeKind.BRACE:
            return Brace(location=node.location, value=self.optimize(node.value))

        return node

    def _optimize_call(self, node: Call) -> Node:
        children = [self.optimize(child) for child in node.children]

        if node.name == AUTOCONCAT:
            self.stats.lists_reduced += 1
            return self.reducer.reduce(children, node.location)

        if node.name == PAREN:
            self.stats.parens_removed += 1
            if not children:
                return Void(location=node.location)
            if len(children) == 1:
                return children[0]
            logger.debug(f"p() with {len(children)} values reduced as a list at {node.location}")
            return self.reducer.reduce(children, node.location)

        if node.name == CBRACKET:
            self.stats.groups_wrapped += 1
            return Bracket(location=node.location, value=self._single_child(node, children, "[]"))

        if node.name == CBRACE:
            self.stats.groups_wrapped += 1
            return Brace(location=node.location, value=self._single_child(node, children, "{}"))

        return Call(location=node.location, name=node.name, children=children)

    def _single_child(self, node: Call, children: list[Node], group: str) -> Node:
        if len(children) > 1:
            raise UnexpectedChildrenError(group, len(children), node.location)
        if not children:
            return Void(location=node.location)
        return children[0]


def optimize_tree(node: Node, string_concat: bool = True) -> Node:
    """
    Convenience function to optimize a tree with a default reducer.

    Args:
        node: Root of a parsed tree
        string_concat: Fallback concat flavor for leftover operands

    Returns:
        The optimized tree
    """
    optimizer = TreeOptimizer(ExpressionReducer(string_concat=string_concat))
    return optimizer.optimize(node)

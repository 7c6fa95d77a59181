"""
MScript Abstract Syntax Tree (AST) Definitions
==============================================

This module defines the node types that flow through the MScript compiler.
The parser produces flat lists of these nodes (operands interleaved with
raw operator symbols); the reduction engine rewrites such lists into a
single nested tree.

Node Hierarchy
--------------
Node (base, tagged by NodeKind)
├── Tokens that only exist before reduction
│   ├── OperatorSymbol - raw operator ("+", "+=", "++", "&&", ...)
│   ├── Label - "name:" prefix of an entry
│   └── Identifier - bare function name used without parentheses
└── Operands
    ├── Literal - number, string, boolean or null constant
    ├── Variable - @name reference
    ├── Void - the empty value
    ├── Call - operation name plus ordered children
    ├── Entry - label/value pair
    ├── Concat - generic list concatenation
    ├── SequentialConcat - string concatenation with coercion
    ├── Bracket - [value]
    └── Brace - {value}

Design Notes
------------
- Every node carries a NodeKind tag so passes can dispatch on the tag
  instead of probing the class hierarchy.
- Every node stores its source location for error reporting. Locations
  are excluded from equality: two trees are equal when their shapes are.
- Nodes are owned by the tree they sit in. The reducer copies a node
  rather than linking it twice.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Optional, Union

from mscript.errors import SourceLocation, UNKNOWN_LOCATION


# =============================================================================
# Node Tags
# =============================================================================

class NodeKind(Enum):
    """Tag identifying the variant of a node."""
    # Pre-reduction tokens
    SYMBOL = auto()
    LABEL = auto()
    IDENTIFIER = auto()

    # Operands
    LITERAL = auto()
    VARIABLE = auto()
    VOID = auto()
    CALL = auto()
    ENTRY = auto()
    CONCAT = auto()
    SEQUENTIAL_CONCAT = auto()
    BRACKET = auto()
    BRACE = auto()


# Kinds that can never sit in an operand slot
NON_OPERAND_KINDS = frozenset({NodeKind.SYMBOL, NodeKind.LABEL, NodeKind.IDENTIFIER})


class Fixity(Enum):
    """Where an operator symbol sits relative to its operand(s)."""
    PREFIX = auto()     # !x, ++x
    POSTFIX = auto()    # x++
    INFIX = auto()      # a + b (also covers contextual unary + and -)


# =============================================================================
# Base Node
# =============================================================================

@dataclass
class Node:
    """
    Base class for all tree nodes.

    Attributes:
        location: Source location where this node appears
    """
    kind: ClassVar[NodeKind]
    location: SourceLocation = field(default=UNKNOWN_LOCATION, compare=False)

    @property
    def is_operand(self) -> bool:
        """True for nodes that can fill an operand slot of an operator."""
        return self.kind not in NON_OPERAND_KINDS


# =============================================================================
# Pre-reduction Tokens
# =============================================================================

@dataclass
class OperatorSymbol(Node):
    """
    A raw operator token awaiting reduction.

    Attributes:
        spelling: The literal text of the operator ("+", "+=", "++", ...)
        fixity: Position classification assigned by the parser
    """
    kind: ClassVar[NodeKind] = NodeKind.SYMBOL
    spelling: str = ""
    fixity: Fixity = Fixity.INFIX


@dataclass
class Label(Node):
    """
    The "name:" part of an entry.

    Attributes:
        name: The label text (without the colon)
    """
    kind: ClassVar[NodeKind] = NodeKind.LABEL
    name: str = ""


@dataclass
class Identifier(Node):
    """
    A bare name that may turn out to be a function call head.

    Attributes:
        name: The identifier text
    """
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER
    name: str = ""


# =============================================================================
# Operands
# =============================================================================

@dataclass
class Literal(Node):
    """
    A constant value.

    Attributes:
        value: int, float, str, bool, or None for null
    """
    kind: ClassVar[NodeKind] = NodeKind.LITERAL
    value: Union[int, float, str, bool, None] = None


@dataclass
class Variable(Node):
    """
    A variable reference (@name).

    Attributes:
        name: Variable name without the sigil
    """
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE
    name: str = ""


@dataclass
class Void(Node):
    """The empty value, produced for empty groups."""
    kind: ClassVar[NodeKind] = NodeKind.VOID


@dataclass
class Call(Node):
    """
    A call of a named operation; the canonical output shape.

    Attributes:
        name: Operation or function name ("add", "assign", "msg", ...)
        children: Ordered arguments
    """
    kind: ClassVar[NodeKind] = NodeKind.CALL
    name: str = ""
    children: list["Node"] = field(default_factory=list)


@dataclass
class Entry(Node):
    """
    A label/value pair (the centry special form).

    Attributes:
        label: The label token
        value: The reduced value that follows the label
    """
    kind: ClassVar[NodeKind] = NodeKind.ENTRY
    label: Optional[Label] = None
    value: Optional["Node"] = None


@dataclass
class Concat(Node):
    """Generic list concatenation of leftover operands."""
    kind: ClassVar[NodeKind] = NodeKind.CONCAT
    children: list["Node"] = field(default_factory=list)


@dataclass
class SequentialConcat(Node):
    """String concatenation (with coercion) of leftover operands."""
    kind: ClassVar[NodeKind] = NodeKind.SEQUENTIAL_CONCAT
    children: list["Node"] = field(default_factory=list)


@dataclass
class Bracket(Node):
    """A [value] group."""
    kind: ClassVar[NodeKind] = NodeKind.BRACKET
    value: Optional["Node"] = None


@dataclass
class Brace(Node):
    """A {value} group."""
    kind: ClassVar[NodeKind] = NodeKind.BRACE
    value: Optional["Node"] = None


# =============================================================================
# Compiler-internal Function Names
# =============================================================================

AUTOCONCAT = "__autoconcat__"
PAREN = "p"
CBRACKET = "__cbracket__"
CBRACE = "__cbrace__"


# =============================================================================
# Visitor Pattern
# =============================================================================

class NodeVisitor:
    """
    Base class for tree visitors.

    Subclasses override visit_<ClassName> methods for the node types they
    care about; everything else falls through to generic_visit.

        class VariableCollector(NodeVisitor):
            def __init__(self):
                self.names = []

            def visit_Variable(self, node):
                self.names.append(node.name)
    """

    def visit(self, node: Node):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node) -> None:
        """Visit every child node reachable from the node's fields."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, Node):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, Node):
                        self.visit(item)


# =============================================================================
# Rendering
# =============================================================================

def render(node: Optional[Node]) -> str:
    """
    Render a node as a compact one-line expression.

        >>> render(Call(name="add", children=[Literal(value=3), Literal(value=4)]))
        'add(3, 4)'
    """
    if node is None:
        return ""

    kind = node.kind
    if kind is NodeKind.LITERAL:
        return _render_literal(node.value)
    if kind is NodeKind.VARIABLE:
        return f"@{node.name}"
    if kind is NodeKind.VOID:
        return "void"
    if kind is NodeKind.SYMBOL:
        return node.spelling
    if kind is NodeKind.LABEL:
        return f"{node.name}:"
    if kind is NodeKind.IDENTIFIER:
        return node.name
    if kind is NodeKind.CALL:
        return f"{node.name}({_render_list(node.children)})"
    if kind is NodeKind.ENTRY:
        return f"centry({node.label.name}, {render(node.value)})"
    if kind is NodeKind.CONCAT:
        return f"concat({_render_list(node.children)})"
    if kind is NodeKind.SEQUENTIAL_CONCAT:
        return f"sconcat({_render_list(node.children)})"
    if kind is NodeKind.BRACKET:
        return f"[{render(node.value)}]"
    if kind is NodeKind.BRACE:
        return f"{{{render(node.value)}}}"
    raise ValueError(f"unhandled node kind {kind}")


def _render_list(nodes: list[Node]) -> str:
    return ", ".join(render(child) for child in nodes)


def _render_literal(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return repr(value)
    return str(value)


class TreePrinter(NodeVisitor):
    """
    Pretty printer for tree debugging.

    Produces one line per node, children indented under their parent:

        assign
          @x
          add
            @x
            5
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Node) -> str:
        """Print the tree and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _emit_children(self, header: str, children: list[Node]) -> None:
        self._emit(header)
        self.indent_level += 1
        for child in children:
            self.visit(child)
        self.indent_level -= 1

    def generic_visit(self, node: Node) -> None:
        self._emit(render(node))

    def visit_Call(self, node: Call):
        self._emit_children(node.name, node.children)

    def visit_Concat(self, node: Concat):
        self._emit_children("concat", node.children)

    def visit_SequentialConcat(self, node: SequentialConcat):
        self._emit_children("sconcat", node.children)

    def visit_Entry(self, node: Entry):
        self._emit_children(f"centry {node.label.name}:", [node.value])

    def visit_Bracket(self, node: Bracket):
        self._emit_children("[]", [node.value])

    def visit_Brace(self, node: Brace):
        self._emit_children("{}", [node.value])

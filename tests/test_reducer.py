# =============================================================================
# test_reducer.py - Expression List Reducer Tests
# =============================================================================
# Tests for the reduction of flat operand/operator lists into trees.
#
# Test coverage includes:
#   - Every precedence tier and the order between tiers
#   - Left associativity of binary tiers, right associativity of assignment
#   - Compound assignment desugaring
#   - Contextual unary + and -
#   - Special forms: entries, implicit calls, concat fallback
#   - Error conditions and provenance
# =============================================================================

import pytest

from mscript.errors import (
    EngineInvariantError,
    SourceLocation,
    UnresolvedCallIdentifierError,
)
from mscript.compiler.ast import (
    Call,
    Concat,
    Entry,
    Fixity,
    Identifier,
    Label,
    Literal,
    NodeKind,
    OperatorSymbol,
    SequentialConcat,
    Variable,
    render,
)
from mscript.compiler.errors import (
    CompileError,
    InvalidCompoundAssignmentError,
    MalformedOperatorSequenceError,
    MisplacedIdentifierError,
    UnknownSymbolError,
)
from mscript.compiler.reducer import ExpressionReducer, reduce_nodes
from mscript.compiler.registry import CallableDescriptor, FunctionRegistry


# =============================================================================
# Helper Functions
# =============================================================================

def lit(value, line: int = 1, column: int = 1) -> Literal:
    return Literal(location=SourceLocation("<test>", line, column), value=value)


def var(name: str) -> Variable:
    return Variable(name=name)


def sym(spelling: str, fixity: Fixity = Fixity.INFIX) -> OperatorSymbol:
    return OperatorSymbol(spelling=spelling, fixity=fixity)


def reduced(*nodes, string_concat: bool = True) -> str:
    """Reduce the given nodes and render the result."""
    reducer = ExpressionReducer(string_concat=string_concat)
    return render(reducer.reduce(list(nodes)))


# =============================================================================
# Binary Tier Tests
# =============================================================================

class TestBinaryTiers:
    """Test binary operators and the order between their tiers."""

    def test_simple_addition(self):
        assert reduced(lit(3), sym("+"), lit(4)) == "add(3, 4)"

    def test_simple_subtraction(self):
        assert reduced(lit(5), sym("-"), lit(3)) == "subtract(5, 3)"

    def test_left_associative_within_tier(self):
        """a + b - c groups as (a + b) - c."""
        result = reduced(var("a"), sym("+"), var("b"), sym("-"), var("c"))
        assert result == "subtract(add(@a, @b), @c)"

    def test_left_associative_long_chain(self):
        result = reduced(lit(1), sym("*"), lit(2), sym("/"), lit(3), sym("%"), lit(4))
        assert result == "mod(divide(multiply(1, 2), 3), 4)"

    def test_multiplicative_before_additive(self):
        result = reduced(lit(1), sym("+"), lit(2), sym("*"), lit(3))
        assert result == "add(1, multiply(2, 3))"

    def test_exponential_before_multiplicative(self):
        result = reduced(lit(2), sym("*"), lit(3), sym("**"), lit(2))
        assert result == "multiply(2, pow(3, 2))"

    def test_exponential_is_left_associative(self):
        result = reduced(lit(2), sym("**"), lit(3), sym("**"), lit(2))
        assert result == "pow(pow(2, 3), 2)"

    def test_concat_operator_is_additive(self):
        node = ExpressionReducer().reduce([lit("a"), sym("."), var("x")])
        assert node.kind is NodeKind.CALL
        assert render(node) == "concat('a', @x)"

    def test_relational_before_equality(self):
        result = reduced(var("a"), sym("<"), lit(1), sym("=="), lit(True))
        assert result == "equals(lt(@a, 1), true)"

    def test_strict_equality(self):
        assert reduced(var("a"), sym("==="), lit(1)) == "sequals(@a, 1)"
        assert reduced(var("a"), sym("!=="), lit(1)) == "snequals(@a, 1)"

    def test_logical_tiers(self):
        result = reduced(
            var("a"), sym("<"), lit(1),
            sym("&&"),
            var("b"), sym("=="), lit(2),
            sym("||"),
            var("c"),
        )
        assert result == "or(and(lt(@a, 1), equals(@b, 2)), @c)"

    def test_and_before_or(self):
        result = reduced(var("a"), sym("||"), var("b"), sym("&&"), var("c"))
        assert result == "or(@a, and(@b, @c))"


# =============================================================================
# Unary and Postfix Tests
# =============================================================================

class TestUnaryAndPostfix:
    """Test prefix operators, postfix operators and contextual + and -."""

    def test_negation(self):
        assert reduced(sym("-"), lit(5)) == "neg(5)"

    def test_unary_plus_is_identity(self):
        assert reduced(sym("+"), lit(5)) == "identity(5)"

    def test_logical_not(self):
        assert reduced(sym("!", Fixity.PREFIX), var("ok")) == "not(@ok)"

    def test_prefix_increment(self):
        assert reduced(sym("++", Fixity.PREFIX), var("x")) == "inc(@x)"
        assert reduced(sym("--", Fixity.PREFIX), var("x")) == "dec(@x)"

    def test_postfix_increment(self):
        assert reduced(var("x"), sym("++", Fixity.POSTFIX)) == "postinc(@x)"
        assert reduced(var("x"), sym("--", Fixity.POSTFIX)) == "postdec(@x)"

    def test_postfix_before_every_other_tier(self):
        result = reduced(var("x"), sym("++", Fixity.POSTFIX), sym("+"), lit(1))
        assert result == "add(postinc(@x), 1)"

    def test_minus_after_operator_is_unary(self):
        result = reduced(lit(1), sym("+"), sym("-"), lit(2))
        assert result == "add(1, neg(2))"

    def test_minus_after_operand_is_binary(self):
        result = reduced(lit(1), sym("*"), lit(2), sym("-"), lit(3))
        assert result == "subtract(multiply(1, 2), 3)"

    def test_stacked_prefix_operators(self):
        """! - x reduces inside out."""
        result = reduced(sym("!", Fixity.PREFIX), sym("-"), var("x"))
        assert result == "not(neg(@x))"

    def test_unary_binds_tighter_than_binary(self):
        result = reduced(sym("-"), lit(2), sym("**"), lit(2))
        assert result == "pow(neg(2), 2)"

    def test_minus_after_label_is_unary(self):
        node = ExpressionReducer().reduce([Label(name="n"), sym("-"), lit(1)])
        assert render(node) == "centry(n, neg(1))"


# =============================================================================
# Assignment Tests
# =============================================================================

class TestAssignment:
    """Test plain and compound assignment."""

    def test_plain_assignment(self):
        assert reduced(var("x"), sym("="), lit(5)) == "assign(@x, 5)"

    def test_assignment_is_lowest_tier(self):
        result = reduced(var("x"), sym("="), lit(1), sym("+"), lit(2), sym("*"), lit(3))
        assert result == "assign(@x, add(1, multiply(2, 3)))"

    def test_assignment_is_right_associative(self):
        result = reduced(var("a"), sym("="), var("b"), sym("="), lit(1))
        assert result == "assign(@a, assign(@b, 1))"

    @pytest.mark.parametrize("spelling,operation", [
        ("+=", "add"),
        ("-=", "subtract"),
        ("*=", "multiply"),
        ("/=", "divide"),
        (".=", "concat"),
    ])
    def test_compound_assignment(self, spelling, operation):
        result = reduced(var("x"), sym(spelling), lit(5))
        assert result == f"assign(@x, {operation}(@x, 5))"

    def test_compound_assignment_copies_target(self):
        """The target appears twice but the two nodes are independent."""
        target = var("x")
        node = ExpressionReducer().reduce([target, sym("+="), lit(5)])
        lhs = node.children[0]
        inner = node.children[1].children[0]
        assert lhs == inner
        assert lhs is not inner

    def test_compound_assignment_with_expression(self):
        result = reduced(var("x"), sym("*="), lit(2), sym("+"), lit(1))
        assert result == "assign(@x, multiply(@x, add(2, 1)))"

    def test_chained_compound_assignment(self):
        result = reduced(var("a"), sym("="), var("b"), sym("+="), lit(1))
        assert result == "assign(@a, assign(@b, add(@b, 1)))"


# =============================================================================
# Special Form Tests
# =============================================================================

class TestSpecialForms:
    """Test entries, implicit calls and the concat fallback."""

    def test_entry_with_several_values(self):
        node = ExpressionReducer().reduce([Label(name="foo"), lit(1), lit(2)])
        assert isinstance(node, Entry)
        assert node.label.name == "foo"
        assert render(node) == "centry(foo, sconcat(1, 2))"

    def test_entry_with_single_value(self):
        node = ExpressionReducer().reduce([Label(name="foo"), lit(1)])
        assert render(node) == "centry(foo, 1)"

    def test_entry_value_is_reduced(self):
        node = ExpressionReducer().reduce([Label(name="sum"), var("a"), sym("+"), lit(1)])
        assert render(node) == "centry(sum, add(@a, 1))"

    def test_entry_respects_concat_flavor(self):
        node = ExpressionReducer(string_concat=False).reduce([Label(name="foo"), lit(1), lit(2)])
        assert render(node) == "centry(foo, concat(1, 2))"

    def test_implicit_call_single_argument(self):
        result = reduced(Identifier(name="msg"), lit("hi"))
        assert result == "msg('hi')"

    def test_implicit_call_joins_arguments(self):
        result = reduced(Identifier(name="msg"), lit("Hello "), var("name"))
        assert result == "msg(sconcat('Hello ', @name))"

    def test_implicit_call_always_uses_sconcat(self):
        result = reduced(Identifier(name="msg"), lit("a"), lit("b"), string_concat=False)
        assert result == "msg(sconcat('a', 'b'))"

    def test_implicit_call_after_operators(self):
        result = reduced(Identifier(name="msg"), lit(1), sym("+"), lit(2))
        assert result == "msg(add(1, 2))"

    def test_leftover_operands_string_concat(self):
        node = ExpressionReducer().reduce([lit(1), lit(2)])
        assert isinstance(node, SequentialConcat)
        assert render(node) == "sconcat(1, 2)"

    def test_leftover_operands_list_concat(self):
        node = ExpressionReducer(string_concat=False).reduce([lit(1), lit(2)])
        assert isinstance(node, Concat)
        assert render(node) == "concat(1, 2)"

    def test_string_concat_override_per_call(self):
        reducer = ExpressionReducer(string_concat=True)
        node = reducer.reduce([lit(1), lit(2)], string_concat=False)
        assert isinstance(node, Concat)

    def test_leftover_after_reduction(self):
        result = reduced(lit(1), sym("+"), lit(2), lit(3))
        assert result == "sconcat(add(1, 2), 3)"

    def test_single_node_returned_unchanged(self):
        node = lit(42)
        assert ExpressionReducer().reduce([node]) is node

    def test_reduction_is_idempotent(self):
        reducer = ExpressionReducer()
        first = reducer.reduce([var("x"), sym("+="), lit(1), sym("*"), lit(2)])
        again = reducer.reduce([first])
        assert again == first

    def test_empty_list_string_concat(self):
        node = ExpressionReducer().reduce([])
        assert isinstance(node, SequentialConcat)
        assert node.children == []

    def test_empty_list_list_concat(self):
        node = ExpressionReducer(string_concat=False).reduce([])
        assert isinstance(node, Concat)
        assert node.children == []

    def test_empty_list_takes_given_location(self):
        location = SourceLocation("script.ms", 7, 3)
        node = ExpressionReducer().reduce([], location)
        assert node.location == location


# =============================================================================
# Error Condition Tests
# =============================================================================

class TestReducerErrors:
    """Test reduction failures."""

    def test_dangling_operator(self):
        with pytest.raises(MalformedOperatorSequenceError) as exc_info:
            ExpressionReducer().reduce([var("a"), sym("+")])
        assert exc_info.value.spelling == "+"
        assert "Did you forget to quote your symbols?" in str(exc_info.value)

    def test_lone_operator(self):
        with pytest.raises(MalformedOperatorSequenceError):
            ExpressionReducer().reduce([sym("*")])

    def test_two_binary_operators_in_a_row(self):
        with pytest.raises(MalformedOperatorSequenceError):
            ExpressionReducer().reduce([lit(1), sym("+"), sym("*"), lit(2)])

    def test_unknown_symbol(self):
        with pytest.raises(UnknownSymbolError) as exc_info:
            ExpressionReducer().reduce([lit(1), sym("^"), lit(2)])
        assert "Unknown symbol (^)" in str(exc_info.value)

    def test_compound_assignment_without_value(self):
        with pytest.raises(InvalidCompoundAssignmentError) as exc_info:
            ExpressionReducer().reduce([var("x"), sym("+=")])
        assert "Invalid symbol listed" in str(exc_info.value)

    def test_plain_assignment_without_value(self):
        with pytest.raises(MalformedOperatorSequenceError):
            ExpressionReducer().reduce([var("x"), sym("=")])

    def test_identifier_not_leading(self):
        with pytest.raises(MisplacedIdentifierError):
            ExpressionReducer().reduce([lit("a"), Identifier(name="msg"), lit("b")])

    def test_identifier_as_operand(self):
        with pytest.raises(MisplacedIdentifierError):
            ExpressionReducer().reduce([lit(1), sym("+"), Identifier(name="msg")])

    def test_label_as_operand(self):
        with pytest.raises(MalformedOperatorSequenceError):
            ExpressionReducer().reduce([lit(1), sym("+"), Label(name="foo")])

    def test_unresolved_identifier_is_internal_error(self):
        registry = FunctionRegistry([CallableDescriptor("greet")]).freeze()
        reducer = ExpressionReducer(registry)
        with pytest.raises(UnresolvedCallIdentifierError) as exc_info:
            reducer.reduce([Identifier(name="msg"), lit("hi")])
        assert isinstance(exc_info.value, EngineInvariantError)
        assert not isinstance(exc_info.value, CompileError)
        assert "Unknown function msg" in str(exc_info.value)

    def test_error_carries_symbol_location(self):
        location = SourceLocation("script.ms", 2, 9)
        plus = OperatorSymbol(location=location, spelling="+")
        with pytest.raises(MalformedOperatorSequenceError) as exc_info:
            ExpressionReducer().reduce([lit(1), plus])
        assert exc_info.value.location == location
        assert str(exc_info.value).startswith("script.ms:2:9: error:")


# =============================================================================
# Provenance and Ownership Tests
# =============================================================================

class TestProvenance:
    """Test location propagation and that input lists are left alone."""

    def test_binary_call_takes_left_operand_location(self):
        left = lit(1, line=3, column=5)
        node = ExpressionReducer().reduce([left, sym("+"), lit(2, line=3, column=9)])
        assert node.location == left.location

    def test_concat_takes_first_child_location(self):
        first = lit("a", line=4, column=2)
        node = ExpressionReducer().reduce([first, lit("b", line=4, column=6)])
        assert node.location == first.location

    def test_empty_concat_takes_caller_location(self):
        location = SourceLocation("script.ms", 6, 1)
        node = ExpressionReducer().reduce([], location)
        assert node.location == location

    def test_unary_call_takes_operator_location(self):
        minus = OperatorSymbol(location=SourceLocation("script.ms", 1, 1), spelling="-")
        node = ExpressionReducer().reduce([minus, lit(5, line=1, column=2)])
        assert render(node) == "neg(5)"
        assert node.location == minus.location

    def test_postfix_call_takes_operand_location(self):
        operand = Variable(location=SourceLocation("script.ms", 2, 3), name="i")
        step = OperatorSymbol(
            location=SourceLocation("script.ms", 2, 5),
            spelling="++",
            fixity=Fixity.POSTFIX,
        )
        node = ExpressionReducer().reduce([operand, step])
        assert render(node) == "postinc(@i)"
        assert node.location == operand.location

    def test_assignment_takes_target_location(self):
        target = Variable(location=SourceLocation("script.ms", 3, 1), name="x")
        equals = OperatorSymbol(location=SourceLocation("script.ms", 3, 4), spelling="=")
        node = ExpressionReducer().reduce([target, equals, lit(1, line=3, column=6)])
        assert node.location == target.location

    def test_compound_assignment_locations(self):
        target = Variable(location=SourceLocation("script.ms", 4, 1), name="x")
        plus_eq = OperatorSymbol(location=SourceLocation("script.ms", 4, 4), spelling="+=")
        node = ExpressionReducer().reduce([target, plus_eq, lit(5, line=4, column=7)])
        assert render(node) == "assign(@x, add(@x, 5))"
        assert node.location == target.location
        assert node.children[1].location == target.location

    def test_entry_takes_label_location(self):
        label = Label(location=SourceLocation("script.ms", 5, 1), name="key")
        node = ExpressionReducer().reduce([label, lit(1, line=5, column=6)])
        assert isinstance(node, Entry)
        assert node.location == label.location

    def test_implicit_call_takes_identifier_location(self):
        head = Identifier(location=SourceLocation("script.ms", 7, 1), name="msg")
        first = lit("Hello ", line=7, column=5)
        node = ExpressionReducer().reduce([head, first, var("name")])
        assert node.location == head.location
        argument = node.children[0]
        assert isinstance(argument, SequentialConcat)
        assert argument.location == first.location

    def test_equality_ignores_location(self):
        assert lit(1, line=1) == lit(1, line=99)

    def test_input_list_not_modified(self):
        nodes = [var("x"), sym("="), lit(1), sym("+"), lit(2)]
        before = list(nodes)
        ExpressionReducer().reduce(nodes)
        assert len(nodes) == 5
        assert all(a is b for a, b in zip(nodes, before))

    def test_reduce_nodes_function(self):
        node = reduce_nodes([lit(3), sym("+"), lit(4)])
        assert node == Call(name="add", children=[Literal(value=3), Literal(value=4)])

    def test_reduce_nodes_list_concat(self):
        node = reduce_nodes([lit(1), lit(2)], string_concat=False)
        assert isinstance(node, Concat)

"""
MScript Grouping Parser
=======================

This parser deliberately knows nothing about operator precedence. It only
recognizes grouping (parentheses, brackets, braces, argument commas) and
emits, for every list of siblings, an unreduced __autoconcat__ call whose
children are the operands and raw operator symbols in source order. The
tree optimizer later hands each of those lists to the ExpressionReducer.

Grammar (Simplified EBNF)
-------------------------
script      ::= region (NEWLINE region)*
region      ::= element*
element     ::= call | group | label | value | SYMBOL
call        ::= WORD '(' arguments? ')'
group       ::= '(' arguments? ')' | '[' arguments? ']' | '{' arguments? '}'
arguments   ::= element* (',' element*)*
label       ::= (WORD | STRING | NUMBER) ':'
value       ::= NUMBER | STRING | VARIABLE | WORD | 'true' | 'false' | 'null'

Output Shapes
-------------
    msg('hi')        ->  msg(__autoconcat__('hi'))
    (1 + 2) * 3      ->  __autoconcat__(p(__autoconcat__(1, +, 2)), *, 3)
    [@x]             ->  __cbracket__(__autoconcat__(@x))
    name: 'value'    ->  __autoconcat__(name:, 'value')

A bare word that leads its list (or directly follows a leading label)
and names a script function becomes an Identifier (the implicit call
form, e.g. msg 'hi'); any other bare word is plain text.

Example Usage
-------------
>>> tokens = list(ScriptLexer("@x = 1 + 2", "test.ms").tokenize())
>>> regions = ScriptParser(tokens, "test.ms").parse()
>>> render(regions[0])
"__autoconcat__(@x, =, 1, +, 2)"
"""

import logging
from typing import Iterable, Optional

from mscript.errors import SourceLocation
from mscript.compiler.ast import (
    AUTOCONCAT,
    CBRACE,
    CBRACKET,
    PAREN,
    Call,
    Fixity,
    Identifier,
    Label,
    Literal,
    Node,
    NodeKind,
    OperatorSymbol,
    Variable,
)
from mscript.compiler.errors import ScriptSyntaxError
from mscript.compiler.lexer import ScriptToken, TokenType
from mscript.compiler.registry import FunctionRegistry, default_registry

logger = logging.getLogger(__name__)


# Closing token for each opening delimiter, with the function it produces
GROUPS: dict[TokenType, tuple[TokenType, str, str]] = {
    TokenType.LPAREN: (TokenType.RPAREN, PAREN, ")"),
    TokenType.LBRACKET: (TokenType.RBRACKET, CBRACKET, "]"),
    TokenType.LBRACE: (TokenType.RBRACE, CBRACE, "}"),
}

# Tokens that end an element list
_LIST_TERMINATORS = (
    TokenType.RPAREN,
    TokenType.RBRACKET,
    TokenType.RBRACE,
    TokenType.COMMA,
    TokenType.EOF,
)

_LABEL_TOKENS = (TokenType.WORD, TokenType.STRING, TokenType.NUMBER)


class ScriptParser:
    """
    Builds unreduced __autoconcat__ trees from a token stream.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
        registry: Decides which leading bare words are function names
    """

    def __init__(
        self,
        tokens: Iterable[ScriptToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        registry: Optional[FunctionRegistry] = None,
    ):
        self.tokens = list(tokens)
        self.filename = filename
        self.source_lines = source_lines or []
        self.registry = registry if registry is not None else default_registry()

        self._pos = 0

    def parse(self) -> list[Call]:
        """
        Parse the token stream into one tree per region.

        Regions are separated by newlines outside of any group; blank
        regions are skipped.

        Returns:
            List of __autoconcat__ calls, one per non-empty region

        Raises:
            ScriptSyntaxError: If the token stream is malformed
        """
        regions = []

        while not self._check(TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue

            start = self._peek()
            elements = self._parse_elements(in_group=False)

            if not self._check(TokenType.NEWLINE, TokenType.EOF):
                raise self._unexpected(self._peek())

            regions.append(Call(location=start.location, name=AUTOCONCAT, children=elements))

        logger.debug(f"Parsed {len(regions)} regions from {self.filename}")
        return regions

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _peek(self, offset: int = 0) -> ScriptToken:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> ScriptToken:
        token = self._peek()
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[ScriptToken]:
        if self._check(*types):
            return self._advance()
        return None

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _error(self, message: str, location: SourceLocation, hint: Optional[str] = None) -> ScriptSyntaxError:
        return ScriptSyntaxError(
            message,
            location,
            hint=hint,
            source_line=self._get_source_line(location.line),
        )

    def _unexpected(self, token: ScriptToken) -> ScriptSyntaxError:
        if token.type is TokenType.EOF:
            return self._error("unexpected end of input", token.location)
        return self._error(f"unexpected '{token.value}'", token.location)

    # =========================================================================
    # Element Lists
    # =========================================================================

    def _parse_elements(self, in_group: bool) -> list[Node]:
        """Parse siblings up to the next list terminator."""
        elements: list[Node] = []

        while True:
            if self._check(TokenType.NEWLINE):
                if not in_group:
                    break
                self._advance()
                continue
            if self._check(*_LIST_TERMINATORS):
                break
            elements.append(self._parse_element(elements))

        return elements

    def _parse_element(self, preceding: list[Node]) -> Node:
        token = self._peek()

        if token.type in _LABEL_TOKENS and self._peek(1).type is TokenType.COLON:
            self._advance()
            self._advance()
            return Label(location=token.location, name=str(token.value))

        if token.type is TokenType.WORD:
            self._advance()
            if self._check(TokenType.LPAREN):
                self._advance()
                arguments = self._parse_arguments(TokenType.RPAREN, ")", token)
                return Call(location=token.location, name=token.value, children=arguments)
            if self._leads_list(preceding) and self.registry.is_callable_by_name(token.value):
                return Identifier(location=token.location, name=token.value)
            return Literal(location=token.location, value=token.value)

        if token.type in GROUPS:
            self._advance()
            close_type, function_name, close_text = GROUPS[token.type]
            arguments = self._parse_arguments(close_type, close_text, token)
            return Call(location=token.location, name=function_name, children=arguments)

        if token.type is TokenType.SYMBOL:
            self._advance()
            return OperatorSymbol(
                location=token.location,
                spelling=token.value,
                fixity=self._fixity(token.value, preceding),
            )

        self._advance()
        if token.type is TokenType.VARIABLE:
            return Variable(location=token.location, name=token.value)
        if token.type in (TokenType.NUMBER, TokenType.STRING):
            return Literal(location=token.location, value=token.value)
        if token.type is TokenType.TRUE:
            return Literal(location=token.location, value=True)
        if token.type is TokenType.FALSE:
            return Literal(location=token.location, value=False)
        if token.type is TokenType.NULL:
            return Literal(location=token.location, value=None)

        raise self._unexpected(token)

    @staticmethod
    def _leads_list(preceding: list[Node]) -> bool:
        """True when nothing but an entry label comes before this element."""
        if not preceding:
            return True
        return len(preceding) == 1 and preceding[0].kind is NodeKind.LABEL

    def _parse_arguments(
        self,
        close_type: TokenType,
        close_text: str,
        opener: ScriptToken,
    ) -> list[Node]:
        """Parse comma-separated element lists up to the closing delimiter."""
        if self._match(close_type):
            return []

        arguments: list[Node] = []
        while True:
            start = self._peek()
            elements = self._parse_elements(in_group=True)
            location = elements[0].location if elements else start.location
            arguments.append(Call(location=location, name=AUTOCONCAT, children=elements))

            if self._match(TokenType.COMMA):
                continue
            if self._match(close_type):
                return arguments
            if self._check(TokenType.EOF):
                raise self._error(
                    f"unterminated group, expected '{close_text}'",
                    opener.location,
                    hint=f"add '{close_text}' to close the group opened here",
                )
            raise self._unexpected(self._peek())

    @staticmethod
    def _fixity(spelling: str, preceding: list[Node]) -> Fixity:
        if spelling in ("++", "--"):
            if preceding and preceding[-1].is_operand:
                return Fixity.POSTFIX
            return Fixity.PREFIX
        if spelling == "!":
            return Fixity.PREFIX
        return Fixity.INFIX

"""
MScript Lexer (Tokenizer)
=========================

This module converts MScript source text into a stream of tokens for the
grouping parser.

Token Categories
----------------
- Numbers: decimal (42), hexadecimal (0x2A), floating point (4.2)
- Strings: 'single quoted' or "double quoted"
- Variables: @name
- Words: bare names (function names, labels, unquoted text)
- Keywords: true, false, null
- Symbols: every operator the reducer knows (+, +=, ++, &&, ===, ...)
- Delimiters: ( ) [ ] { } , :
- Newlines: separate top-level regions

Comments
--------
- Single-line: # comment  or  // comment
- Multi-line: /* comment */

Example Usage
-------------
>>> lexer = ScriptLexer("@x += 1", "test.ms")
>>> for token in lexer.tokenize():
...     print(token)
Token(VARIABLE, 'x', 1:1)
Token(SYMBOL, '+=', 1:4)
Token(NUMBER, 1, 1:7)
Token(EOF, 1:8)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from mscript.errors import SourceLocation
from mscript.compiler.errors import ScriptSyntaxError
from mscript.compiler.symbols import ALL_SPELLINGS


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for MScript expressions."""

    # === Structural Tokens ===
    EOF = auto()
    NEWLINE = auto()

    # === Values ===
    NUMBER = auto()         # 42, 0x2A, 4.2
    STRING = auto()         # 'text' or "text"
    VARIABLE = auto()       # @name
    WORD = auto()           # bare name
    TRUE = auto()           # true
    FALSE = auto()          # false
    NULL = auto()           # null

    # === Operators ===
    SYMBOL = auto()

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    COMMA = auto()          # ,
    COLON = auto()          # :


KEYWORDS: dict[str, TokenType] = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}

DELIMITERS: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class ScriptToken:
    """
    A single token from MScript source.

    Attributes:
        type: The TokenType classification
        value: Token value (str for text, int/float for numbers)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | float | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, (int, float)):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class ScriptLexer:
    """
    Tokenizes MScript source code.

    Usage:
        lexer = ScriptLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    ESCAPE_SEQUENCES = {
        "n": "\n",
        "r": "\r",
        "t": "\t",
        "\\": "\\",
        "'": "'",
        '"': '"',
        "0": "\0",
    }

    def __init__(self, source: str, filename: str = "<input>", line_number: int = 1):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[ScriptToken]:
        """
        Generate tokens from the source code.

        Yields:
            ScriptToken objects, ending with an EOF token

        Raises:
            ScriptSyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            self._skip_whitespace_and_comments()
            if self._at_end():
                break
            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | float | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> ScriptToken:
        return ScriptToken(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(
        self,
        message: str,
        line: int,
        column: int,
        hint: Optional[str] = None,
    ) -> ScriptSyntaxError:
        """Create a syntax error pointing at line:column."""
        return ScriptSyntaxError(
            message,
            SourceLocation(self.filename, line, column),
            hint=hint,
            source_line=self._get_current_line(),
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip blanks and comments, but not newlines (they are tokens)."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\r":
                self._advance()
                continue

            if char == "#" or (char == "/" and self._peek(1) == "/"):
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_multi_line_comment()
                continue

            break

    def _skip_multi_line_comment(self) -> None:
        start_line = self._line
        start_col = self._column

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise ScriptSyntaxError(
            "unterminated multi-line comment",
            SourceLocation(self.filename, start_line, start_col),
            hint="add closing */ to terminate the comment",
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> ScriptToken:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_word(start_line, start_column)

        if char.isdigit():
            return self._scan_number(start_line, start_column)

        if char in "'\"":
            return self._scan_string(start_line, start_column)

        if char == "@":
            return self._scan_variable(start_line, start_column)

        if char in DELIMITERS:
            self._advance()
            return self._make_token(DELIMITERS[char], char, start_line, start_column)

        return self._scan_symbol(start_line, start_column)

    def _scan_name(self) -> str:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())
        return "".join(chars)

    def _scan_word(self, start_line: int, start_column: int) -> ScriptToken:
        name = self._scan_name()
        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name], name, start_line, start_column)
        return self._make_token(TokenType.WORD, name, start_line, start_column)

    def _scan_variable(self, start_line: int, start_column: int) -> ScriptToken:
        self._advance()  # consume @
        if not self._peek() or self._peek() not in self.IDENT_START:
            raise self._error("expected variable name after '@'", start_line, start_column)
        name = self._scan_name()
        return self._make_token(TokenType.VARIABLE, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> ScriptToken:
        """
        Scan a numeric literal.

        A '.' only continues a number when a digit follows it, so that
        "1.2" is a float while "1 . 2" and "1.@x" use the concat operator.
        """
        if self._peek() == "0" and self._peek(1).lower() == "x":
            self._advance()
            self._advance()
            digits = []
            while self._peek() and self._peek() in string.hexdigits:
                digits.append(self._advance())
            if not digits:
                raise self._error("expected hexadecimal digits after '0x'", start_line, start_column)
            return self._make_token(TokenType.NUMBER, int("".join(digits), 16), start_line, start_column)

        digits = []
        while self._peek().isdigit():
            digits.append(self._advance())

        if self._peek() == "." and self._peek(1).isdigit():
            digits.append(self._advance())
            while self._peek().isdigit():
                digits.append(self._advance())
            return self._make_token(TokenType.NUMBER, float("".join(digits)), start_line, start_column)

        return self._make_token(TokenType.NUMBER, int("".join(digits)), start_line, start_column)

    def _scan_string(self, start_line: int, start_column: int) -> ScriptToken:
        quote = self._advance()

        chars = []
        while not self._at_end():
            char = self._peek()

            if char == quote:
                self._advance()
                return self._make_token(TokenType.STRING, "".join(chars), start_line, start_column)

            if char == "\n":
                break

            if char == "\\":
                self._advance()
                escaped = self._advance()
                chars.append(self.ESCAPE_SEQUENCES.get(escaped, escaped))
            else:
                chars.append(self._advance())

        raise self._error(
            "unterminated string literal",
            start_line,
            start_column,
            hint=f"add closing {quote} to complete the string",
        )

    def _scan_symbol(self, start_line: int, start_column: int) -> ScriptToken:
        """Scan the longest operator spelling at the current position."""
        for spelling in ALL_SPELLINGS:
            if self.source.startswith(spelling, self._pos):
                for _ in spelling:
                    self._advance()
                return self._make_token(TokenType.SYMBOL, spelling, start_line, start_column)

        char = self._peek()
        raise self._error(
            f"invalid character '{char}' (0x{ord(char):02X})",
            start_line,
            start_column,
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

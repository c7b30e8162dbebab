"""
6502 Assembly Language Lexer
============================

This module implements a lexer (tokenizer) for 6502 assembly language.
It converts source text into a stream of tokens that the parser can
process. Every token records the source unit it came from and its
character offset, so that later stages can report errors with a
SourceTag.

Token Types
-----------
- IDENTIFIER: Labels, mnemonics, register names (X, Y, A)
- DIRECTIVE: Dot-prefixed directive names (.org, .byte, ...)
- NUMBER: Hex ($FF), binary (%1010) or decimal literals
- STRING: Double-quoted strings ("file.s")
- Delimiters: # < > , : ( )
- COMMENT: Semicolon comment to end of line
- NEWLINE / EOF

Number Formats
--------------
| Format      | Prefix | Example | Width                         |
|-------------|--------|---------|-------------------------------|
| Hexadecimal | $      | $7F     | byte if 1-2 digits, else word |
| Binary      | %      | %1010   | byte if 1-8 digits, else word |
| Decimal     | (none) | 200     | byte if <= 255, else word     |

A literal too large for 16 bits is still tokenized; it is tagged INVALID
and rejected by the IR generator, which knows the context it appears in.

Example
-------
>>> from m6502_asm.assembler.lexer import Lexer
>>> for token in Lexer("start: lda #$41").tokenize():
...     print(token)
Token(IDENTIFIER, 'start', 1:1)
Token(COLON, 1:6)
Token(IDENTIFIER, 'lda', 1:8)
Token(HASH, 1:12)
Token(NUMBER, $41, 1:13)
Token(EOF, 1:16)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from m6502_asm.assembler.ast import Number, NumberWidth
from m6502_asm.errors import AssemblySyntaxError, SourceTag


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for 6502 assembly language."""

    # Structural tokens
    NEWLINE = auto()     # End of line (significant for statement boundaries)
    EOF = auto()         # End of file
    COMMENT = auto()     # ; comment text

    # Values
    IDENTIFIER = auto()  # Labels, mnemonics, register names
    DIRECTIVE = auto()   # .org, .byte, ...
    NUMBER = auto()      # Numeric literals (value is an ast.Number)
    STRING = auto()      # Double-quoted string "..."

    # Delimiters
    HASH = auto()        # # (immediate mode indicator)
    LT = auto()          # < (low byte)
    GT = auto()          # > (high byte)
    COMMA = auto()       # ,
    COLON = auto()       # :
    LPAREN = auto()      # (
    RPAREN = auto()      # )


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Attributes:
        type: The TokenType classification
        value: str for identifiers/directives/strings/comments,
               ast.Number for numbers, None otherwise
        unit: Source unit id
        offset: Character offset of the token's first character
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
    """
    type: TokenType
    value: str | Number | None
    unit: int
    offset: int
    line: int
    column: int

    def __repr__(self) -> str:
        if isinstance(self.value, Number):
            return f"Token({self.type.name}, ${self.value.value:X}, {self.line}:{self.column})"
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def tag(self) -> SourceTag:
        """Return a SourceTag for this token."""
        return SourceTag(self.unit, self.offset)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes 6502 assembly source code.

    Usage:
        lexer = Lexer(source_text, unit=0)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        unit: Id of the source unit (for SourceTags)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    SINGLE_CHAR_TOKENS = {
        "#": TokenType.HASH,
        "<": TokenType.LT,
        ">": TokenType.GT,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
    }

    def __init__(self, source: str, unit: int = 0):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            unit: Source unit id recorded in every token
        """
        self.source = source
        self.unit = unit

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects, always ending with an EOF token

        Raises:
            AssemblySyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            if self._skip_whitespace():
                continue
            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None, self._pos, self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, updating line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | Number | None,
        start_pos: int,
        start_line: int,
        start_column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            unit=self.unit,
            offset=start_pos,
            line=start_line,
            column=start_column,
        )

    def _error(self, message: str, pos: Optional[int] = None) -> AssemblySyntaxError:
        """Create a syntax error at the given (default: current) offset."""
        return AssemblySyntaxError(message, SourceTag(self.unit, self._pos if pos is None else pos))

    # =========================================================================
    # Whitespace Handling
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """
        Skip whitespace characters (space, tab, carriage return) but not newlines.

        Returns:
            True if any whitespace was skipped
        """
        skipped = False
        # Note: Must check for non-empty string first because '' in ' \t' is True in Python
        while self._peek() and self._peek() in " \t\r":
            self._advance()
            skipped = True
        return skipped

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        start = (self._pos, self._line, self._column)
        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, *start)

        if char == ";":
            chars = []
            self._advance()
            while not self._at_end() and self._peek() != "\n":
                chars.append(self._advance())
            return self._make_token(TokenType.COMMENT, "".join(chars).strip(), *start)

        if char in self.IDENT_START:
            return self._make_token(TokenType.IDENTIFIER, self._scan_name(), *start)

        if char == ".":
            self._advance()
            # Note: Must check _peek() is non-empty because '' in string is True
            if not (self._peek() and self._peek() in self.IDENT_START):
                raise self._error("expected directive name after '.'", start[0])
            return self._make_token(TokenType.DIRECTIVE, self._scan_name().lower(), *start)

        if char == "$":
            self._advance()
            return self._make_token(TokenType.NUMBER, self._scan_digits(string.hexdigits, 16, 2), *start)

        if char == "%":
            self._advance()
            return self._make_token(TokenType.NUMBER, self._scan_digits("01", 2, 8), *start)

        if char.isdigit():
            return self._make_token(TokenType.NUMBER, self._scan_decimal(), *start)

        if char == '"':
            return self._make_token(TokenType.STRING, self._scan_string(), *start)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(self.SINGLE_CHAR_TOKENS[char], None, *start)

        raise self._error(f"unexpected character '{char}'")

    def _scan_name(self) -> str:
        """Scan an identifier body (letters, digits, underscores)."""
        chars = []
        # Note: Must check for non-empty string first because '' in 'string' is True in Python
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())
        return "".join(chars)

    def _scan_digits(self, alphabet: str, base: int, byte_digits: int) -> Number:
        """
        Scan prefixed digits and classify the literal's width.

        Up to `byte_digits` digits make a byte literal; longer literals are
        words as long as the value fits in 16 bits.
        """
        chars = []
        while self._peek() and self._peek() in alphabet:
            chars.append(self._advance())

        if not chars:
            raise self._error("expected digits after number prefix")

        value = int("".join(chars), base)
        if len(chars) <= byte_digits and value <= 0xFF:
            return Number(NumberWidth.BYTE, value)
        if value <= 0xFFFF:
            return Number(NumberWidth.WORD, value)
        return Number(NumberWidth.INVALID, value)

    def _scan_decimal(self) -> Number:
        """Scan a decimal literal; its width follows from its value."""
        chars = []
        while self._peek().isdigit():
            chars.append(self._advance())

        if self._peek() and self._peek() in self.IDENT_START:
            raise self._error(f"invalid digit '{self._peek()}' in decimal number")

        return Number.from_value(int("".join(chars)))

    def _scan_string(self) -> str:
        """Scan a double-quoted string (no escape sequences)."""
        start = self._pos
        self._advance()  # consume opening "

        chars = []
        while not self._at_end() and self._peek() not in '"\n':
            chars.append(self._advance())

        if self._peek() != '"':
            raise self._error("unterminated string", start)

        self._advance()  # consume closing "
        return "".join(chars)

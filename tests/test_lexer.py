# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the 6502 assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Number formats and their width class: hex ($), binary (%), decimal
#   - Identifiers, directives, strings and delimiters
#   - Comments and newlines
#   - Source offsets recorded for error reporting
#   - Error conditions
# =============================================================================

import pytest

from m6502_asm.assembler.ast import Number, NumberWidth
from m6502_asm.assembler.lexer import Lexer, TokenType
from m6502_asm.errors import AssemblySyntaxError, SourceTag


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str, unit: int = 0) -> list:
    """Tokenize and drop the trailing EOF token."""
    return [t for t in Lexer(source, unit).tokenize() if t.type != TokenType.EOF]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Numbers
# =============================================================================

class TestNumbers:
    """Numeric literals carry their width class."""

    @pytest.mark.parametrize("source,expected", [
        ("$0", Number.byte(0x00)),
        ("$7F", Number.byte(0x7F)),
        ("$ff", Number.byte(0xFF)),
        ("$0010", Number.word(0x10)),
        ("$100", Number.word(0x100)),
        ("$FFFF", Number.word(0xFFFF)),
        ("$10000", Number.invalid(0x10000)),
    ])
    def test_hex(self, source, expected):
        tokens = tokenize(source)
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == expected

    @pytest.mark.parametrize("source,expected", [
        ("%1", Number.byte(1)),
        ("%10101010", Number.byte(0xAA)),
        ("%000000001", Number.word(1)),
        ("%1111111111111111", Number.word(0xFFFF)),
        ("%10000000000000000", Number.invalid(0x10000)),
    ])
    def test_binary(self, source, expected):
        assert tokenize(source)[0].value == expected

    @pytest.mark.parametrize("source,expected", [
        ("0", Number.byte(0)),
        ("255", Number.byte(255)),
        ("256", Number.word(256)),
        ("65535", Number.word(65535)),
        ("65536", Number.invalid(65536)),
    ])
    def test_decimal(self, source, expected):
        assert tokenize(source)[0].value == expected

    def test_word_literal_below_256_stays_word(self):
        number = tokenize("$00FF")[0].value
        assert number.width is NumberWidth.WORD
        assert number.value == 0xFF

    def test_missing_hex_digits(self):
        with pytest.raises(AssemblySyntaxError, match="expected digits"):
            tokenize("lda $")

    def test_letter_after_decimal(self):
        with pytest.raises(AssemblySyntaxError, match="invalid digit"):
            tokenize("12ab")


# =============================================================================
# Identifiers, Directives and Strings
# =============================================================================

class TestWords:
    """Identifiers, directives and strings."""

    def test_identifier_keeps_case(self):
        tokens = tokenize("MyLabel")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "MyLabel"

    def test_identifier_with_digits_and_underscore(self):
        assert tokenize("loop_2")[0].value == "loop_2"

    def test_directive_is_lowercased(self):
        tokens = tokenize(".ORG")
        assert tokens[0].type == TokenType.DIRECTIVE
        assert tokens[0].value == "org"

    def test_bare_dot(self):
        with pytest.raises(AssemblySyntaxError, match="directive name"):
            tokenize(". org")

    def test_string(self):
        tokens = tokenize('.include "lib/util.s"')
        assert tokens[1].type == TokenType.STRING
        assert tokens[1].value == "lib/util.s"

    def test_unterminated_string(self):
        with pytest.raises(AssemblySyntaxError, match="unterminated string"):
            tokenize('.include "oops\n')


# =============================================================================
# Delimiters, Comments and Lines
# =============================================================================

class TestStructure:
    """Delimiters, comments and line structure."""

    def test_operand_delimiters(self):
        assert types("lda ($40),y") == [
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.NUMBER,
            TokenType.RPAREN, TokenType.COMMA, TokenType.IDENTIFIER,
        ]

    def test_immediate_modifiers(self):
        assert types("#<#>") == [TokenType.HASH, TokenType.LT, TokenType.HASH, TokenType.GT]

    def test_label_colon(self):
        assert types("start:") == [TokenType.IDENTIFIER, TokenType.COLON]

    def test_comment_text(self):
        tokens = tokenize("nop ; do nothing  ")
        assert tokens[1].type == TokenType.COMMENT
        assert tokens[1].value == "do nothing"

    def test_newlines(self):
        assert types("nop\nrts\n") == [
            TokenType.IDENTIFIER, TokenType.NEWLINE,
            TokenType.IDENTIFIER, TokenType.NEWLINE,
        ]

    def test_tabs_and_carriage_returns_are_whitespace(self):
        assert types("\tnop\r\n") == [TokenType.IDENTIFIER, TokenType.NEWLINE]

    def test_always_ends_with_eof(self):
        tokens = list(Lexer("").tokenize())
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_unexpected_character(self):
        with pytest.raises(AssemblySyntaxError, match="unexpected character '@'") as info:
            tokenize("lda @")
        assert info.value.tag == SourceTag(0, 4)


# =============================================================================
# Source Positions
# =============================================================================

class TestPositions:
    """Tokens record unit, offset, line and column."""

    def test_offsets(self):
        tokens = tokenize("  lda #$41\nrts", unit=3)
        lda, _, number, newline, rts = tokens
        assert lda.tag == SourceTag(3, 2)
        assert number.offset == 7
        assert newline.offset == 10
        assert rts.tag == SourceTag(3, 11)

    def test_line_and_column(self):
        rts = tokenize("nop\n  rts")[2]
        assert (rts.line, rts.column) == (2, 3)

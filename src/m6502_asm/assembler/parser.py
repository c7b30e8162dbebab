"""
6502 Assembly Language Parser
=============================

This module converts the token stream from the lexer into the statement
tree defined in `m6502_asm.assembler.ast`. The parser only checks
syntax: whether a mnemonic exists, whether a literal fits, or whether a
label is defined are questions for the IR generator and resolver.

Line Grammar
------------
```
line        := [label ':'] [instruction | directive] [comment] NEWLINE
instruction := IDENT [operand]
directive   := '.org' NUMBER | '.pad' NUMBER
             | '.byte' NUMBER {',' NUMBER} | '.word' NUMBER {',' NUMBER}
             | '.vector' IDENT | '.include' STRING
```

Operand Syntax
--------------
| Syntax      | Kind        | Example       |
|-------------|-------------|---------------|
| (none), A   | NONE        | RTS, ASL A    |
| #term       | IMMEDIATE   | LDA #$41      |
| #<term      | IMMEDIATE   | LDA #<table   |
| #>term      | IMMEDIATE   | LDA #>table   |
| term        | ADDRESS     | STA $0200     |
| term,X      | ABSOLUTE_X  | LDA table,X   |
| term,Y      | ABSOLUTE_Y  | LDA table,Y   |
| (term)      | INDIRECT    | JMP ($FFFC)   |
| (term,X)    | INDIRECT_X  | LDA ($40,X)   |
| (term),Y    | INDIRECT_Y  | LDA ($40),Y   |

A bare `A` is the accumulator only for ASL, LSR, ROL and ROR.
"""

from typing import Optional

from m6502_asm.assembler.ast import (
    ByteList,
    Comment,
    Include,
    Instruction,
    LabelDef,
    NameTerm,
    Number,
    NumberTerm,
    Operand,
    OperandKind,
    OperandModifier,
    Org,
    Pad,
    Statement,
    Term,
    Vector,
    WordList,
)
from m6502_asm.assembler.lexer import Lexer, Token, TokenType
from m6502_asm.cpu import classify, has_accumulator_form
from m6502_asm.errors import AssemblySyntaxError


# =============================================================================
# Directive Names
# =============================================================================

DIRECTIVES = frozenset({"org", "pad", "byte", "word", "vector", "include"})

# Tokens that terminate the operand field of a line
END_OF_FIELD = (TokenType.NEWLINE, TokenType.COMMENT, TokenType.EOF)


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses 6502 assembly tokens into statements.

    Usage:
        tokens = list(Lexer(source, unit).tokenize())
        statements = Parser(tokens).parse()
    """

    def __init__(self, tokens: list[Token]):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer, ending with EOF
        """
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into statements.

        Returns:
            Statements in source order

        Raises:
            AssemblySyntaxError: If a syntax error is encountered
        """
        statements: list[Statement] = []

        while not self._check(TokenType.EOF):
            # Skip blank lines
            if self._match(TokenType.NEWLINE):
                continue
            statements.extend(self._parse_line())

        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        return self._tokens[min(self._pos, len(self._tokens) - 1)]

    def _peek(self, offset: int = 0) -> Token:
        return self._tokens[min(self._pos + offset, len(self._tokens) - 1)]

    def _advance(self) -> Token:
        token = self._current()
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        """Check if current token is one of the given types."""
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Match and consume if current token is one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Expect specific token type, raise error if not found."""
        if not self._check(token_type):
            raise AssemblySyntaxError(message, self._current().tag)
        return self._advance()

    def _expect_register(self, register: str) -> None:
        token = self._current()
        if token.type != TokenType.IDENTIFIER or token.value.upper() != register:
            raise AssemblySyntaxError(f"expected register {register}", token.tag)
        self._advance()

    # =========================================================================
    # Line Parsing
    # =========================================================================

    def _parse_line(self) -> list[Statement]:
        """Parse a single line into zero or more statements."""
        statements: list[Statement] = []

        # Label at start of line
        if self._check(TokenType.IDENTIFIER) and self._peek(1).type == TokenType.COLON:
            name_token = self._advance()
            self._advance()  # consume colon
            statements.append(LabelDef(name_token.tag, name_token.value))

        if self._check(TokenType.IDENTIFIER):
            statements.append(self._parse_instruction())
        elif self._check(TokenType.DIRECTIVE):
            statements.append(self._parse_directive())

        comment = self._match(TokenType.COMMENT)
        if comment is not None and not statements:
            statements.append(Comment(comment.tag))

        if not self._check(TokenType.EOF):
            self._expect(TokenType.NEWLINE, "expected end of line")

        return statements

    # =========================================================================
    # Instructions
    # =========================================================================

    def _parse_instruction(self) -> Instruction:
        mnemonic = self._advance()
        op_class = classify(mnemonic.value)
        accumulator = op_class is not None and has_accumulator_form(op_class)
        operand = self._parse_operand(accumulator)
        return Instruction(mnemonic.tag, mnemonic.value, operand)

    def _parse_operand(self, accumulator: bool = False) -> Operand:
        """
        Parse the operand field of an instruction.

        A bare A is the accumulator only when `accumulator` is set; for
        any other mnemonic it is an ordinary label reference.
        """
        if self._check(*END_OF_FIELD):
            return Operand.none()

        # Accumulator form: ASL A
        token = self._current()
        if (accumulator and token.type == TokenType.IDENTIFIER and token.value.upper() == "A"
                and self._peek(1).type in END_OF_FIELD):
            self._advance()
            return Operand.none()

        if self._match(TokenType.HASH):
            modifier = self._parse_modifier()
            return Operand(OperandKind.IMMEDIATE, modifier, self._parse_term())

        if self._match(TokenType.LPAREN):
            return self._parse_indirect()

        modifier = self._parse_modifier()
        term = self._parse_term()

        if self._match(TokenType.COMMA):
            if modifier is not OperandModifier.NONE:
                raise AssemblySyntaxError(
                    "byte modifiers can't be used with indexed addressing", term.tag
                )
            index = self._expect(TokenType.IDENTIFIER, "expected index register X or Y")
            if index.value.upper() == "X":
                return Operand(OperandKind.ABSOLUTE_X, term=term)
            if index.value.upper() == "Y":
                return Operand(OperandKind.ABSOLUTE_Y, term=term)
            raise AssemblySyntaxError("expected index register X or Y", index.tag)

        return Operand(OperandKind.ADDRESS, modifier, term)

    def _parse_indirect(self) -> Operand:
        """Parse the rest of an operand after its opening parenthesis."""
        term = self._parse_term()

        if self._match(TokenType.COMMA):
            self._expect_register("X")
            self._expect(TokenType.RPAREN, "expected ')'")
            return Operand(OperandKind.INDIRECT_X, term=term)

        self._expect(TokenType.RPAREN, "expected ')'")

        if self._match(TokenType.COMMA):
            self._expect_register("Y")
            return Operand(OperandKind.INDIRECT_Y, term=term)

        return Operand(OperandKind.INDIRECT, term=term)

    def _parse_modifier(self) -> OperandModifier:
        if self._match(TokenType.LT):
            return OperandModifier.LOW_BYTE
        if self._match(TokenType.GT):
            return OperandModifier.HIGH_BYTE
        return OperandModifier.NONE

    def _parse_term(self) -> Term:
        token = self._current()
        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberTerm(token.tag, token.value)
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return NameTerm(token.tag, token.value)
        raise AssemblySyntaxError("expected number or label", token.tag)

    # =========================================================================
    # Directives
    # =========================================================================

    def _parse_directive(self) -> Statement:
        token = self._advance()
        name = token.value

        if name not in DIRECTIVES:
            raise AssemblySyntaxError(f"unknown directive '.{name}'", token.tag)

        if name == "org":
            return Org(token.tag, self._parse_number())
        if name == "pad":
            return Pad(token.tag, self._parse_number())
        if name == "byte":
            return ByteList(token.tag, self._parse_number_list())
        if name == "word":
            return WordList(token.tag, self._parse_number_list())
        if name == "vector":
            label = self._expect(TokenType.IDENTIFIER, "expected label name")
            return Vector(token.tag, label.value)
        path = self._expect(TokenType.STRING, "expected quoted file name")
        return Include(token.tag, path.value)

    def _parse_number(self) -> Number:
        return self._expect(TokenType.NUMBER, "expected number").value

    def _parse_number_list(self) -> tuple[Number, ...]:
        numbers = [self._parse_number()]
        while self._match(TokenType.COMMA):
            numbers.append(self._parse_number())
        return tuple(numbers)


# =============================================================================
# Convenience Function
# =============================================================================

def parse_source(source: str, unit: int = 0) -> list[Statement]:
    """
    Tokenize and parse a source text.

    Args:
        source: Assembly source code
        unit: Source unit id recorded in every tag

    Returns:
        Statements in source order
    """
    tokens = list(Lexer(source, unit).tokenize())
    return Parser(tokens).parse()

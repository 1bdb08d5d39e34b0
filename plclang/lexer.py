"""Tokenizer for plclang.

Tokens are produced by Lark's basic (regex) lexer. Only the lexer half of
Lark is used: the grammar below lists the terminals, and `Lark.lex` turns
the source text into a flat token stream that the hand-written
recursive-descent parser consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import PlcSyntaxError


class TokenKind(Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    DECIMAL = 'DECIMAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'
    OPERATOR = 'OPERATOR'


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


PLC_TOKENS = r"""
    start: (IDENTIFIER | DECIMAL | INTEGER | CHARACTER | STRING | OPERATOR)*

    IDENTIFIER.1: /[A-Za-z_][A-Za-z0-9_-]*/
    DECIMAL.4: /[+-]?[0-9]+\.[0-9]+/
    INTEGER.3: /[+-]?[0-9]+/
    CHARACTER.2: /'([^'\n\r\\]|\\[bnrt'"\\])'/
    STRING.2: /"([^"\n\r\\]|\\[bnrt'"\\])*"/
    OPERATOR: /[<>!=]=|[^\s'"]/

    WS: /[ \t\r\n]+/
    %ignore WS
"""


PLC_LEXER = Lark(
    PLC_TOKENS,
    parser='lalr',
    lexer='basic',
)


# Identifiers after which a sign belongs to the following number rather
# than acting as a binary operator.
EXPRESSION_KEYWORDS = {'IF', 'WHILE', 'RETURN', 'AND', 'OR', 'IN', 'DO', 'ELSE', 'END'}


def ends_value(token: Token) -> bool:
    if token.kind == TokenKind.IDENTIFIER:
        return token.text not in EXPRESSION_KEYWORDS
    if token.kind == TokenKind.OPERATOR:
        return token.text == ')'
    return True


def lex(source: str) -> List[Token]:
    """Convert source text into a list of tokens.

    Raises PlcSyntaxError at the offset of the first character that does
    not start any token.
    """
    tokens: List[Token] = []
    try:
        for raw in PLC_LEXER.lex(source):
            token = Token(TokenKind(raw.type), str(raw), raw.start_pos)
            # `x -1` is a subtraction, not `x` followed by the literal `-1`
            if (token.kind in (TokenKind.INTEGER, TokenKind.DECIMAL)
                    and token.text[0] in '+-'
                    and tokens and ends_value(tokens[-1])):
                tokens.append(Token(TokenKind.OPERATOR, token.text[0], token.offset))
                token = Token(token.kind, token.text[1:], token.offset + 1)
            tokens.append(token)
    except UnexpectedCharacters as e:
        raise PlcSyntaxError(f"invalid character {source[e.pos_in_stream]!r}", e.pos_in_stream) from e
    return tokens

"""Recursive-descent parser for plclang.

Each grammar rule has its own `parse_*` method. Two primitives drive the
whole parser: `peek` checks whether the upcoming tokens match a sequence of
patterns without consuming them, and `match` consumes them when they do. A
pattern is either a `TokenKind`, matching the token's kind, or a string,
matching the token's text exactly.

Note that `AND` and `OR` share a single precedence tier, so
`a OR b AND c` groups as `(a OR b) AND c`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Union

from .ast import (
    Source, Field, Method, Stmt, ExpressionStmt, Declaration, Assignment,
    If, For, While, Return, Expr, Literal, Group, Binary, Access, Call,
)
from .errors import PlcSyntaxError
from .lexer import Token, TokenKind, lex
from .types import NIL, CharVal, decode_escapes

Pattern = Union[TokenKind, str]


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # Token stream primitives

    def peek(self, *patterns: Pattern) -> bool:
        for i, pattern in enumerate(patterns):
            if self.pos + i >= len(self.tokens):
                return False
            token = self.tokens[self.pos + i]
            if isinstance(pattern, TokenKind):
                if token.kind != pattern:
                    return False
            elif token.text != pattern:
                return False
        return True

    def match(self, *patterns: Pattern) -> bool:
        if self.peek(*patterns):
            self.pos += len(patterns)
            return True
        return False

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def offset(self) -> int:
        """Offset of the next unconsumed token, or the end of input."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos].offset
        if self.tokens:
            return self.tokens[-1].end
        return 0

    def error(self, message: str) -> PlcSyntaxError:
        return PlcSyntaxError(message, self.offset())

    def consume(self, pattern: Pattern, message: str) -> Token:
        if not self.match(pattern):
            raise self.error(message)
        return self.previous()

    # Declarations

    def parse_source(self) -> Source:
        fields: List[Field] = []
        methods: List[Method] = []
        while self.peek('LET'):
            fields.append(self.parse_field())
        while self.peek('DEF'):
            methods.append(self.parse_method())
        if self.pos < len(self.tokens):
            raise self.error("Expected 'LET' or 'DEF'.")
        return Source(fields, methods)

    def parse_optional_type(self) -> Optional[str]:
        if self.match(':'):
            return self.consume(TokenKind.IDENTIFIER, "Expected type name after ':'.").text
        return None

    def parse_field(self) -> Field:
        self.consume('LET', "Expected 'LET'.")
        name = self.consume(TokenKind.IDENTIFIER, "Expected identifier after 'LET'.").text
        type_name = self.parse_optional_type()
        value = self.parse_expression() if self.match('=') else None
        self.consume(';', "Expected ';' at the end of a field declaration.")
        return Field(name, type_name, value)

    def parse_method(self) -> Method:
        self.consume('DEF', "Expected 'DEF'.")
        name = self.consume(TokenKind.IDENTIFIER, "Expected method name after 'DEF'.").text
        self.consume('(', "Expected '(' after method name.")
        parameters: List[str] = []
        parameter_type_names: List[str] = []
        if not self.match(')'):
            while True:
                parameters.append(self.consume(TokenKind.IDENTIFIER, "Expected parameter name.").text)
                parameter_type_names.append(self.parse_optional_type() or 'Any')
                if not self.match(','):
                    break
            self.consume(')', "Expected ')' after parameters.")
        return_type_name = self.parse_optional_type()
        self.consume('DO', "Expected 'DO' after method signature.")
        statements = self.parse_block('END')
        self.consume('END', "Expected 'END' to terminate the method.")
        return Method(name, parameters, parameter_type_names, return_type_name, statements)

    def parse_block(self, *terminators: str) -> List[Stmt]:
        """Parse statements up to, but not including, one of the terminators."""
        statements: List[Stmt] = []
        while not any(self.peek(t) for t in terminators):
            if self.pos >= len(self.tokens):
                raise self.error(f"Expected {' or '.join(repr(t) for t in terminators)}.")
            statements.append(self.parse_statement())
        return statements

    # Statements

    def parse_statement(self) -> Stmt:
        if self.peek('LET'):
            return self.parse_declaration_statement()
        if self.peek('IF'):
            return self.parse_if_statement()
        if self.peek('FOR'):
            return self.parse_for_statement()
        if self.peek('WHILE'):
            return self.parse_while_statement()
        if self.peek('RETURN'):
            return self.parse_return_statement()
        expr = self.parse_expression()
        if self.match('='):
            value = self.parse_expression()
            self.consume(';', "Expected ';' after assignment.")
            return Assignment(expr, value)
        self.consume(';', "Expected ';' after expression.")
        return ExpressionStmt(expr)

    def parse_declaration_statement(self) -> Declaration:
        self.consume('LET', "Expected 'LET'.")
        name = self.consume(TokenKind.IDENTIFIER, "Expected identifier after 'LET'.").text
        type_name = self.parse_optional_type()
        value = self.parse_expression() if self.match('=') else None
        self.consume(';', "Expected ';' after declaration.")
        return Declaration(name, type_name, value)

    def parse_if_statement(self) -> If:
        self.consume('IF', "Expected 'IF'.")
        condition = self.parse_expression()
        self.consume('DO', "Expected 'DO' after condition in if statement.")
        then_statements = self.parse_block('ELSE', 'END')
        else_statements: List[Stmt] = []
        if self.match('ELSE'):
            else_statements = self.parse_block('END')
        self.consume('END', "Expected 'END' to terminate the if statement.")
        return If(condition, then_statements, else_statements)

    def parse_for_statement(self) -> For:
        self.consume('FOR', "Expected 'FOR'.")
        name = self.consume(TokenKind.IDENTIFIER, "Expected identifier after 'FOR'.").text
        self.consume('IN', "Expected 'IN' after loop variable.")
        value = self.parse_expression()
        self.consume('DO', "Expected 'DO' after iterable in for loop.")
        statements = self.parse_block('END')
        self.consume('END', "Expected 'END' to terminate the for loop.")
        return For(name, value, statements)

    def parse_while_statement(self) -> While:
        self.consume('WHILE', "Expected 'WHILE'.")
        condition = self.parse_expression()
        self.consume('DO', "Expected 'DO' after condition in while loop.")
        statements = self.parse_block('END')
        self.consume('END', "Expected 'END' to terminate the while loop.")
        return While(condition, statements)

    def parse_return_statement(self) -> Return:
        self.consume('RETURN', "Expected 'RETURN'.")
        value = self.parse_expression()
        self.consume(';', "Expected ';' after return statement.")
        return Return(value)

    # Expressions, lowest precedence first

    def parse_expression(self) -> Expr:
        return self.parse_logical_expression()

    def parse_binary(self, operators: List[str], operand) -> Expr:
        expr = operand()
        while any(self.peek(op) for op in operators):
            self.pos += 1
            operator = self.previous().text
            expr = Binary(operator, expr, operand())
        return expr

    def parse_logical_expression(self) -> Expr:
        return self.parse_binary(['AND', 'OR'], self.parse_equality_expression)

    def parse_equality_expression(self) -> Expr:
        return self.parse_binary(['==', '!=', '<', '<=', '>', '>='], self.parse_additive_expression)

    def parse_additive_expression(self) -> Expr:
        return self.parse_binary(['+', '-'], self.parse_multiplicative_expression)

    def parse_multiplicative_expression(self) -> Expr:
        return self.parse_binary(['*', '/'], self.parse_secondary_expression)

    def parse_secondary_expression(self) -> Expr:
        expr = self.parse_primary_expression()
        while self.match('.'):
            name = self.consume(TokenKind.IDENTIFIER, "Expected identifier after '.'.").text
            if self.match('('):
                expr = Call(expr, name, self.parse_arguments())
            else:
                expr = Access(expr, name)
        return expr

    def parse_arguments(self) -> List[Expr]:
        """Parse a comma separated argument list; the '(' is already consumed."""
        arguments: List[Expr] = []
        if self.match(')'):
            return arguments
        arguments.append(self.parse_expression())
        while self.match(','):
            arguments.append(self.parse_expression())
        self.consume(')', "Expected ')' after arguments.")
        return arguments

    def parse_primary_expression(self) -> Expr:
        if self.match('NIL'):
            return Literal(NIL)
        if self.match('TRUE'):
            return Literal(True)
        if self.match('FALSE'):
            return Literal(False)
        if self.match(TokenKind.INTEGER):
            return Literal(int(self.previous().text))
        if self.match(TokenKind.DECIMAL):
            return Literal(Decimal(self.previous().text))
        if self.match(TokenKind.CHARACTER):
            return Literal(CharVal(decode_escapes(self.previous().text[1:-1])))
        if self.match(TokenKind.STRING):
            return Literal(decode_escapes(self.previous().text[1:-1]))
        if self.match(TokenKind.IDENTIFIER):
            name = self.previous().text
            if self.match('('):
                return Call(None, name, self.parse_arguments())
            return Access(None, name)
        if self.match('('):
            expr = self.parse_expression()
            self.consume(')', "Expected ')' after expression.")
            return Group(expr)
        raise self.error("Expected a primary expression.")


def parse_source(tokens: List[Token]) -> Source:
    return Parser(tokens).parse_source()


def parse_program(source: str) -> Source:
    """Lex and parse source text into a Source AST."""
    return parse_source(lex(source))

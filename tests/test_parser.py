from decimal import Decimal

import pytest

from plclang.ast import (
    Access, Assignment, Binary, Call, Declaration, ExpressionStmt, For, Group,
    If, Literal, Method, Return, While,
)
from plclang.errors import PlcSyntaxError
from plclang.lexer import lex
from plclang.parser import Parser, parse_program
from plclang.types import NIL, CharVal, format_literal


def parse_expr(text):
    return Parser(lex(text)).parse_expression()


def body(source):
    return parse_program(source).methods[0].statements


def test_parse_fields_and_methods():
    source = parse_program('LET x = 1; LET y: Decimal; DEF f(a, b: Integer): String DO END')
    assert [f.name for f in source.fields] == ['x', 'y']
    assert source.fields[0].value == Literal(1)
    assert source.fields[1].type_name == 'Decimal'
    assert source.fields[1].value is None
    method = source.methods[0]
    assert method == Method('f', ['a', 'b'], ['Any', 'Integer'], 'String', [])


def test_multiplicative_binds_tighter_than_additive():
    assert parse_expr('1 + 2 * 3') == Binary('+', Literal(1), Binary('*', Literal(2), Literal(3)))


def test_binary_operators_are_left_associative():
    assert parse_expr('a - b - c') == Binary('-', Binary('-', Access(None, 'a'), Access(None, 'b')), Access(None, 'c'))


def test_and_or_share_one_tier():
    expr = parse_expr('a OR b AND c')
    assert expr == Binary('AND', Binary('OR', Access(None, 'a'), Access(None, 'b')), Access(None, 'c'))


def test_comparison_binds_tighter_than_logical():
    expr = parse_expr('x < 1 AND y')
    assert expr == Binary('AND', Binary('<', Access(None, 'x'), Literal(1)), Access(None, 'y'))


def test_group_and_receivers():
    assert parse_expr('(1)') == Group(Literal(1))
    assert parse_expr('obj.field') == Access(Access(None, 'obj'), 'field')
    assert parse_expr('obj.m(1, 2)') == Call(Access(None, 'obj'), 'm', [Literal(1), Literal(2)])
    assert parse_expr('f()') == Call(None, 'f', [])


def test_literals():
    assert parse_expr('NIL') == Literal(NIL)
    assert parse_expr('TRUE').value is True
    assert parse_expr('FALSE').value is False
    assert parse_expr('2.50').value == Decimal('2.50')
    assert parse_expr("'\\t'") == Literal(CharVal('\t'))
    assert parse_expr(r'"say \"hi\"\\"') == Literal('say "hi"\\')


@pytest.mark.parametrize('text', ['NIL', 'TRUE', '42', '-7', '3.25', "'q'", r"'\''", r'"a\tb\n"'])
def test_literal_text_round_trip(text):
    literal = parse_expr(text)
    assert parse_expr(format_literal(literal.value)) == literal


def test_statements():
    statements = body(
        'DEF main() DO LET a = 1; a = 2; print(a); '
        'IF a == 2 DO RETURN 1; ELSE RETURN 2; END '
        'FOR i IN range(0, 3) DO print(i); END '
        'WHILE FALSE DO END RETURN 0; END'
    )
    assert isinstance(statements[0], Declaration)
    assert statements[1] == Assignment(Access(None, 'a'), Literal(2))
    assert statements[2] == ExpressionStmt(Call(None, 'print', [Access(None, 'a')]))
    assert isinstance(statements[3], If)
    assert statements[3].else_statements == [Return(Literal(2))]
    assert isinstance(statements[4], For)
    assert statements[4].name == 'i'
    assert statements[5] == While(Literal(False), [])
    assert statements[6] == Return(Literal(0))


def test_missing_semicolon_reports_offset():
    with pytest.raises(PlcSyntaxError) as exc:
        parse_program('DEF main() DO RETURN 1 END')
    assert exc.value.offset == 23
    assert "';'" in exc.value.message


def test_unterminated_method_reports_end_of_input():
    source = 'DEF main() DO RETURN 1;'
    with pytest.raises(PlcSyntaxError) as exc:
        parse_program(source)
    assert exc.value.offset == len(source)


def test_trailing_tokens_are_rejected():
    with pytest.raises(PlcSyntaxError):
        parse_program('DEF main() DO RETURN 1; END LET x = 1;')


def test_missing_primary_expression():
    with pytest.raises(PlcSyntaxError) as exc:
        parse_program('LET x = ;')
    assert exc.value.offset == 8

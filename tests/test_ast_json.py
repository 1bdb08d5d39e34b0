import json
from decimal import Decimal

import pytest

from plclang.analyzer import Analyzer
from plclang.ast_json import ast_from_obj, ast_to_obj
from plclang.interpreter import Interpreter, parse_program
from plclang.types import CharVal

PROGRAM = '''
LET greeting: String = "hi\\n";
DEF scale(x: Decimal): Decimal DO RETURN x * 2.0; END
DEF main() DO
    LET c = 'q';
    FOR i IN range(0, 2) DO
        IF i == 1 AND TRUE DO print(greeting + c); ELSE print(scale(-1.5)); END
    END
    WHILE FALSE DO END
    RETURN (40 + 2);
END
'''


def test_unanalyzed_tree_survives_json():
    source = parse_program(PROGRAM)
    loaded = ast_from_obj(json.loads(json.dumps(ast_to_obj(source))))
    assert loaded == source


def test_analyzed_dump_carries_resolutions():
    source = parse_program(PROGRAM)
    Analyzer().analyze(source)
    obj = ast_to_obj(source)
    assert obj['fields'][0]['variable'] == {'name': 'greeting', 'type': 'String'}
    scale = obj['methods'][0]
    assert scale['function'] == {'name': 'scale', 'parameter_types': ['Decimal'], 'return_type': 'Decimal'}
    ret = obj['methods'][1]['statements'][-1]
    assert ret['value']['type'] == 'Group'
    assert ret['value']['resolved_type'] == 'Integer'
    # resolutions are dropped on load
    loaded = ast_from_obj(json.loads(json.dumps(obj)))
    assert loaded.methods[0].function is None
    assert loaded == source


def test_literals_are_stored_as_source_text():
    source = parse_program(PROGRAM)
    obj = ast_to_obj(source)
    assert obj['fields'][0]['value'] == {'type': 'Literal', 'literal': '"hi\\n"', 'resolved_type': None}
    loaded = ast_from_obj(obj)
    assert loaded.fields[0].value.value == 'hi\n'
    declaration = loaded.methods[1].statements[0]
    assert declaration.value.value == CharVal('q')
    body = loaded.methods[0].statements[0]
    assert body.value.right.value == Decimal('2.0')


def test_loaded_tree_runs(capsys):
    source = parse_program(PROGRAM)
    loaded = ast_from_obj(json.loads(json.dumps(ast_to_obj(source))))
    Analyzer().analyze(loaded)
    assert Interpreter().run(loaded) == 42
    assert capsys.readouterr().out == '-3.00\nhi\nq\n'


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Lambda'})
    with pytest.raises(TypeError):
        ast_to_obj(object())

from pathlib import Path

from plclang.interpreter import parse_program, Interpreter
from plclang.analyzer import Analyzer

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_hello(capsys):
    with open(EXAMPLES / 'hello.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    Analyzer().analyze(ast)
    result = Interpreter().run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello, World!'
    assert result == 0

from pathlib import Path

from plclang.interpreter import parse_program, Interpreter
from plclang.analyzer import Analyzer

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_fibonacci_recursion(capsys):
    with open(EXAMPLES / 'fibonacci.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    Analyzer().analyze(ast)
    Interpreter().run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['0', '1', '1', '2', '3', '5', '8', '13', '21', '34']

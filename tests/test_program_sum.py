from pathlib import Path

from plclang.interpreter import parse_program, run_program, Interpreter
from plclang.analyzer import Analyzer

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_sum_for_range(capsys):
    with open(EXAMPLES / 'sum.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    Analyzer().analyze(ast)
    result = Interpreter().run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'sum: 55'
    assert result == 55


def test_program_sum_without_analysis(capsys):
    with open(EXAMPLES / 'sum.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    assert run_program(source, analyze=False) == 55
    assert capsys.readouterr().out.strip() == 'sum: 55'

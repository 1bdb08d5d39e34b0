from pathlib import Path

from plclang.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_strings_concatenation(capsys):
    with open(EXAMPLES / 'strings.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['Hello, plclang!', 'char x', 'tab\there', '33', 'atrue']

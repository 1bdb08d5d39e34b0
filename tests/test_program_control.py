from pathlib import Path

from plclang.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_control_flow(capsys):
    with open(EXAMPLES / 'control.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    result = run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == [
        '-2 negative',
        '-1 negative',
        '0 zero',
        '1 positive',
        '2 positive',
        'left to right',
    ]
    assert result == 0

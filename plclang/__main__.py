"""CLI entry point for the plclang interpreter.

Usage:
    python -m plclang [-v|-vv|-vvv] [--no-analyze] <program_file>
    python -m plclang [-v...] --emit-ast <program_file>
    python -m plclang [-v...] [--no-analyze] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --no-analyze  Run the program without static analysis
  --emit-ast    Parse and analyze the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The exit status is the integer returned by
the program's main() method, or 1 when the program fails.
"""

import argparse
import json
import sys
from pathlib import Path

from .analyzer import Analyzer
from .ast_json import ast_from_obj, ast_to_obj
from .debug import DebugLog
from .errors import PlcError
from .interpreter import Interpreter
from .parser import parse_program
from .types import is_integer


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(ast_program, analyze: bool, debug_level: int) -> int:
    debug = DebugLog(debug_level)
    try:
        if analyze:
            Analyzer(debug=debug).analyze(ast_program)
        result = Interpreter(debug=debug).run(ast_program)
    finally:
        debug.close()
    return result if is_integer(result) else 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="plclang language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--no-analyze', action='store_true', help='skip static analysis before running')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit AST JSON for the given .plc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='plclang program file (.plc) to execute')
    args = parser.parse_args(argv)

    try:
        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            ast_program = parse_program(read_file(program_file))
            if not args.no_analyze:
                Analyzer(debug_level=args.v).analyze(ast_program)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            data = json.loads(read_file(Path(args.ast)))
            sys.exit(execute(ast_from_obj(data), not args.no_analyze, args.v))

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --emit-ast/--ast')
        ast_program = parse_program(read_file(Path(args.program)))
        sys.exit(execute(ast_program, not args.no_analyze, args.v))
    except PlcError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

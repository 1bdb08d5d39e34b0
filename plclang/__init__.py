# plclang language package
# This package provides a lexer, parser, static analyzer and interpreter for plclang.
from .analyzer import Analyzer
from .environment import Scope
from .errors import PlcError, PlcRuntimeError, PlcSemanticError, PlcSyntaxError
from .interpreter import Interpreter, run_program
from .lexer import lex
from .parser import Parser, parse_program
from .prelude import standard_prelude

__all__ = [
    'Analyzer',
    'Interpreter',
    'Parser',
    'PlcError',
    'PlcRuntimeError',
    'PlcSemanticError',
    'PlcSyntaxError',
    'Scope',
    'lex',
    'parse_program',
    'run_program',
    'standard_prelude',
]

"""Abstract Syntax Tree (AST) definitions for plclang.

The parser builds these nodes once; afterwards their structure never
changes. Some nodes carry resolution slots (`variable`, `function` and the
`type` of every expression) that start out empty and are filled in by the
analyzer. The interpreter does not need them, so an unanalyzed tree can be
executed directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .environment import Function, Variable
    from .types import Type


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Source(Node):
    fields: List['Field']
    methods: List['Method']


@dataclass
class Field(Node):
    name: str
    type_name: Optional[str]
    value: Optional['Expr']
    variable: Optional['Variable'] = field(default=None, compare=False, repr=False)


@dataclass
class Method(Node):
    name: str
    parameters: List[str]
    parameter_type_names: List[str]
    return_type_name: Optional[str]
    statements: List['Stmt']
    function: Optional['Function'] = field(default=None, compare=False, repr=False)


# Statements

@dataclass
class Stmt(Node):
    pass


@dataclass
class ExpressionStmt(Stmt):
    expression: 'Expr'


@dataclass
class Declaration(Stmt):
    name: str
    type_name: Optional[str]
    value: Optional['Expr']
    variable: Optional['Variable'] = field(default=None, compare=False, repr=False)


@dataclass
class Assignment(Stmt):
    receiver: 'Expr'
    value: 'Expr'


@dataclass
class If(Stmt):
    condition: 'Expr'
    then_statements: List[Stmt]
    else_statements: List[Stmt]


@dataclass
class For(Stmt):
    name: str
    value: 'Expr'
    statements: List[Stmt]


@dataclass
class While(Stmt):
    condition: 'Expr'
    statements: List[Stmt]


@dataclass
class Return(Stmt):
    value: 'Expr'


# Expressions

@dataclass
class Expr(Node):
    pass


@dataclass
class Literal(Expr):
    value: Any
    type: Optional['Type'] = field(default=None, compare=False, repr=False)


@dataclass
class Group(Expr):
    expression: Expr
    type: Optional['Type'] = field(default=None, compare=False, repr=False)


@dataclass
class Binary(Expr):
    operator: str
    left: Expr
    right: Expr
    type: Optional['Type'] = field(default=None, compare=False, repr=False)


@dataclass
class Access(Expr):
    receiver: Optional[Expr]
    name: str
    variable: Optional['Variable'] = field(default=None, compare=False, repr=False)
    type: Optional['Type'] = field(default=None, compare=False, repr=False)


@dataclass
class Call(Expr):
    receiver: Optional[Expr]
    name: str
    arguments: List[Expr]
    function: Optional['Function'] = field(default=None, compare=False, repr=False)
    type: Optional['Type'] = field(default=None, compare=False, repr=False)

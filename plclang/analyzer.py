"""Static analysis for plclang.

The analyzer walks a parsed `Source` once, top down. It resolves every name
against a scope chain whose bindings hold types rather than values, checks
each construct with `is_assignable`, and records what it finds in the
nodes' resolution slots. The first violation raises `PlcSemanticError`;
there is no recovery.

Slots that are already filled are never overwritten, so analyzing a tree a
second time leaves it exactly as the first analysis did.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from .ast import (
    Source, Field, Method, Stmt, ExpressionStmt, Declaration, Assignment,
    If, For, While, Return, Expr, Literal, Group, Binary, Access, Call, Node,
)
from .debug import DebugLog
from .environment import Function, Scope
from .errors import PlcSemanticError
from .prelude import standard_prelude
from .types import (
    Type, BUILTIN_TYPES, NIL_TYPE, BOOLEAN, INTEGER, DECIMAL, CHARACTER,
    STRING, COMPARABLE, INTEGER_ITERABLE, NilVal, CharVal,
    is_assignable, integer_in_range, decimal_in_range,
)

COMPARISON_OPERATORS = ('<', '<=', '>', '>=', '==', '!=')


def require_assignable(target: Type, source: Type):
    if not is_assignable(target, source):
        raise PlcSemanticError(f"type {source} is not assignable to {target}")


def resolve(node: Node, slot: str, value):
    """Fill a resolution slot unless an earlier analysis already did."""
    if getattr(node, slot) is None:
        setattr(node, slot, value)
    return getattr(node, slot)


class Analyzer:
    def __init__(self, parent: Optional[Scope] = None, types: Optional[Dict[str, Type]] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 debug: Optional[DebugLog] = None):
        self.scope = Scope(parent if parent is not None else standard_prelude())
        self.types: Dict[str, Type] = dict(BUILTIN_TYPES)
        if types:
            self.types.update(types)
        # binding of the method whose body is being analyzed
        self.method: Optional[Function] = None
        self.owns_debug = debug is None
        self.debug = debug if debug is not None else DebugLog(debug_level, debug_file)

    def analyze(self, source: Source):
        try:
            self.debug.write(1, 'analysis started')
            self.analyze_source(source, self.scope)
            self.debug.write(1, 'analysis finished')
        finally:
            if self.owns_debug:
                self.debug.close()

    def get_type(self, name: str) -> Type:
        if name not in self.types:
            raise PlcSemanticError(f"unknown type {name}")
        return self.types[name]

    # Declarations

    def analyze_source(self, source: Source, scope: Scope):
        for field in source.fields:
            self.analyze_field(field, scope)
        for method in source.methods:
            self.analyze_method(method, scope)
        main = scope.lookup_function('main', 0)
        if main is None or main.return_type != INTEGER:
            raise PlcSemanticError('a main/0 method returning Integer is required')

    def declared_type(self, name: str, type_name: Optional[str], value: Optional[Expr],
                      scope: Scope) -> Type:
        """Type of a field or local: the named type, the initializer's, or both agreeing."""
        declared = self.get_type(type_name) if type_name is not None else None
        if value is not None:
            value_type = self.analyze_expression(value, scope)
            if declared is None:
                declared = value_type
            else:
                require_assignable(declared, value_type)
        if declared is None:
            raise PlcSemanticError(f"declaration of {name} needs a type or an initial value")
        return declared

    def analyze_field(self, field: Field, scope: Scope):
        type_ = self.declared_type(field.name, field.type_name, field.value, scope)
        resolve(field, 'variable', scope.define_variable(field.name, type_))
        self.debug.write(2, f"field {field.name}: {type_}")

    def analyze_method(self, method: Method, scope: Scope):
        parameter_types = [self.get_type(n) for n in method.parameter_type_names]
        return_type = None
        if method.return_type_name is not None:
            return_type = self.get_type(method.return_type_name)
        # bound before the body so the method can call itself
        function = scope.define_function(method.name, parameter_types, return_type)
        resolve(method, 'function', function)

        body = Scope(scope)
        for name, type_ in zip(method.parameters, parameter_types):
            body.define_variable(name, type_)
        enclosing, self.method = self.method, function
        try:
            for stmt in method.statements:
                self.analyze_statement(stmt, body)
        finally:
            self.method = enclosing
        if function.return_type is None:
            function.return_type = NIL_TYPE
        self.debug.write(2, f"method {method.name}{tuple(parameter_types)}: {function.return_type}")

    # Statements

    def analyze_block(self, statements: List[Stmt], scope: Scope):
        block = Scope(scope)
        for stmt in statements:
            self.analyze_statement(stmt, block)

    def analyze_statement(self, stmt: Stmt, scope: Scope):
        self.debug.write(3, f"analyze {type(stmt).__name__}")
        if isinstance(stmt, ExpressionStmt):
            self.analyze_expression(stmt.expression, scope)
            if not isinstance(stmt.expression, Call):
                raise PlcSemanticError('expression statement must be a function call')
            return
        if isinstance(stmt, Declaration):
            type_ = self.declared_type(stmt.name, stmt.type_name, stmt.value, scope)
            resolve(stmt, 'variable', scope.define_variable(stmt.name, type_))
            self.debug.write(2, f"declare {stmt.name}: {type_}")
            return
        if isinstance(stmt, Assignment):
            if not isinstance(stmt.receiver, Access):
                raise PlcSemanticError('assignment receiver must be an access expression')
            receiver_type = self.analyze_expression(stmt.receiver, scope)
            value_type = self.analyze_expression(stmt.value, scope)
            require_assignable(receiver_type, value_type)
            return
        if isinstance(stmt, If):
            require_assignable(BOOLEAN, self.analyze_expression(stmt.condition, scope))
            if not stmt.then_statements:
                raise PlcSemanticError('if statement must have a non-empty then block')
            self.analyze_block(stmt.then_statements, scope)
            if stmt.else_statements:
                self.analyze_block(stmt.else_statements, scope)
            return
        if isinstance(stmt, For):
            require_assignable(INTEGER_ITERABLE, self.analyze_expression(stmt.value, scope))
            if not stmt.statements:
                raise PlcSemanticError('for statement must have a non-empty body')
            loop = Scope(scope)
            loop.define_variable(stmt.name, INTEGER)
            self.analyze_block(stmt.statements, loop)
            return
        if isinstance(stmt, While):
            require_assignable(BOOLEAN, self.analyze_expression(stmt.condition, scope))
            self.analyze_block(stmt.statements, scope)
            return
        if isinstance(stmt, Return):
            value_type = self.analyze_expression(stmt.value, scope)
            if self.method is None:
                raise PlcSemanticError('return outside of a method')
            if self.method.return_type is None:
                # first RETURN of a method without a declared return type
                self.method.return_type = value_type
            else:
                require_assignable(self.method.return_type, value_type)
            return
        raise PlcSemanticError(f"unexpected statement {type(stmt).__name__}")

    # Expressions

    def analyze_expression(self, expr: Expr, scope: Scope) -> Type:
        if isinstance(expr, Literal):
            return resolve(expr, 'type', self.literal_type(expr.value))
        if isinstance(expr, Group):
            return resolve(expr, 'type', self.analyze_expression(expr.expression, scope))
        if isinstance(expr, Binary):
            return resolve(expr, 'type', self.binary_type(expr, scope))
        if isinstance(expr, Access):
            if expr.receiver is not None:
                receiver_type = self.analyze_expression(expr.receiver, scope)
                variable = receiver_type.get_field(expr.name)
                if variable is None:
                    raise PlcSemanticError(f"type {receiver_type} has no field {expr.name}")
            else:
                variable = scope.lookup_variable(expr.name)
                if variable is None:
                    raise PlcSemanticError(f"undefined variable {expr.name}")
            variable = resolve(expr, 'variable', variable)
            return resolve(expr, 'type', variable.type)
        if isinstance(expr, Call):
            arity = len(expr.arguments)
            if expr.receiver is not None:
                receiver_type = self.analyze_expression(expr.receiver, scope)
                function = receiver_type.get_method(expr.name, arity)
                if function is None:
                    raise PlcSemanticError(f"type {receiver_type} has no method {expr.name}/{arity}")
            else:
                function = scope.lookup_function(expr.name, arity)
                if function is None:
                    raise PlcSemanticError(f"undefined function {expr.name}/{arity}")
            if function.return_type is None:
                raise PlcSemanticError(
                    f"return type of {expr.name} is not known yet; declare it explicitly")
            for argument, parameter_type in zip(expr.arguments, function.parameter_types):
                require_assignable(parameter_type, self.analyze_expression(argument, scope))
            function = resolve(expr, 'function', function)
            return resolve(expr, 'type', function.return_type)
        raise PlcSemanticError(f"unexpected expression {type(expr).__name__}")

    def literal_type(self, value) -> Type:
        if isinstance(value, NilVal):
            return NIL_TYPE
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, CharVal):
            return CHARACTER
        if isinstance(value, str):
            return STRING
        if isinstance(value, int):
            if not integer_in_range(value):
                raise PlcSemanticError(f"integer literal {value} is out of range")
            return INTEGER
        if isinstance(value, Decimal):
            if not decimal_in_range(value):
                raise PlcSemanticError(f"decimal literal {value} is out of range")
            return DECIMAL
        raise PlcSemanticError(f"unknown literal {value!r}")

    def binary_type(self, expr: Binary, scope: Scope) -> Type:
        left = self.analyze_expression(expr.left, scope)
        right = self.analyze_expression(expr.right, scope)
        op = expr.operator
        if op in ('AND', 'OR'):
            require_assignable(BOOLEAN, left)
            require_assignable(BOOLEAN, right)
            return BOOLEAN
        if op in COMPARISON_OPERATORS:
            require_assignable(left, right)
            require_assignable(COMPARABLE, left)
            return BOOLEAN
        if op == '+':
            if left == STRING or right == STRING:
                return STRING
            require_assignable(left, right)
            return left
        if op in ('-', '*', '/'):
            require_assignable(left, right)
            return left
        raise PlcSemanticError(f"unknown binary operator {op}")

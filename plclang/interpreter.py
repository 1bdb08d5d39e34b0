"""Tree-walking interpreter for plclang.

The interpreter evaluates a parsed `Source` directly. It does not depend on
the analyzer: resolution slots are ignored, names are looked up at run time
and every type mismatch surfaces as a `PlcRuntimeError`.

Statements return either None or a `Returning` carrying the value of a
RETURN. Blocks stop at the first `Returning` and hand it outwards until the
method invocation that owns it turns it into the call's result, so a
return can never travel past its own call frame.

Bodies of IF, WHILE and FOR run against the enclosing scope, which means a
LET inside a loop body stays visible after the loop.
"""

from __future__ import annotations

from decimal import Decimal
import sys
from typing import Any, List, Optional

from .analyzer import Analyzer
from .ast import (
    Source, Field, Method, Stmt, ExpressionStmt, Declaration, Assignment,
    If, For, While, Return, Expr, Literal, Group, Binary, Access, Call,
)
from .debug import DebugLog
from .environment import Function, Scope
from .errors import PlcRuntimeError, Returning
from .parser import parse_program
from .prelude import standard_prelude
from .types import (
    ANY, BUILTIN_TYPES, COMPARABLE_TYPES, EXACT, INTEGER, NIL, RecordVal,
    divide_half_even, format_literal, is_integer, to_string,
    truncating_divide, type_of,
)

# each language-level call takes about six Python frames
MAX_RECURSION_DEPTH = 50000


class Interpreter:
    """Core interpreter that executes a plclang AST."""
    def __init__(self, parent: Optional[Scope] = None, debug_level: int = 0,
                 debug_file: Optional[str] = 'debug.txt', debug: Optional[DebugLog] = None):
        self.scope = Scope(parent if parent is not None else standard_prelude())
        self.owns_debug = debug is None
        self.debug = debug if debug is not None else DebugLog(debug_level, debug_file)

    # Public API
    def run(self, source: Source) -> Any:
        """Define the program's fields and methods, then return main()'s result."""
        try:
            for field in source.fields:
                self.define_field(field, self.scope)
            for method in source.methods:
                self.define_method(method, self.scope)
            main = self.scope.lookup_function('main', 0)
            if main is None:
                raise PlcRuntimeError('undefined function main/0')
            self.debug.write(1, 'invoke main()')
            result = self.invoke_main(main)
            self.debug.write(1, f"main() returned {to_string(result)}")
            return result
        finally:
            if self.owns_debug:
                self.debug.close()

    def invoke_main(self, main: Function) -> Any:
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, MAX_RECURSION_DEPTH))
        try:
            return main.invoke([])
        except RecursionError as e:
            raise PlcRuntimeError('maximum call depth exceeded') from e
        finally:
            sys.setrecursionlimit(limit)

    def define_field(self, field: Field, scope: Scope):
        value = self.evaluate(field.value, scope) if field.value is not None else NIL
        scope.define_variable(field.name, type_of(value), value)
        self.debug.write(2, f"field {field.name} = {to_string(value)}")

    def define_method(self, method: Method, scope: Scope) -> Function:
        def invoke(args: List[Any]) -> Any:
            call_scope = Scope(parent=scope)
            for name, arg in zip(method.parameters, args):
                call_scope.define_variable(name, type_of(arg), arg)
            result = self.execute_block(method.statements, call_scope)
            if isinstance(result, Returning):
                return result.value
            return NIL

        parameter_types = [BUILTIN_TYPES.get(n, ANY) for n in method.parameter_type_names]
        return_type = ANY
        if method.return_type_name is not None:
            return_type = BUILTIN_TYPES.get(method.return_type_name, ANY)
        self.debug.write(2, f"define method {method.name}/{len(method.parameters)}")
        return scope.define_function(method.name, parameter_types, return_type, invoke)

    # Statements

    def execute_block(self, statements: List[Stmt], scope: Scope) -> Optional[Returning]:
        for stmt in statements:
            result = self.execute(stmt, scope)
            if result is not None:
                return result
        return None

    def execute(self, stmt: Stmt, scope: Scope) -> Optional[Returning]:
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression, scope)
            return None
        if isinstance(stmt, Declaration):
            value = self.evaluate(stmt.value, scope) if stmt.value is not None else NIL
            scope.define_variable(stmt.name, type_of(value), value)
            self.debug.write(2, f"declare {stmt.name} = {to_string(value)}")
            return None
        if isinstance(stmt, Assignment):
            self.assign(stmt, scope)
            return None
        if isinstance(stmt, If):
            condition = self.require_boolean(self.evaluate(stmt.condition, scope), 'IF condition')
            self.debug.write(3, f"if condition -> {to_string(condition)}")
            branch = stmt.then_statements if condition else stmt.else_statements
            return self.execute_block(branch, scope)
        if isinstance(stmt, For):
            iterable = self.evaluate(stmt.value, scope)
            if not isinstance(iterable, range):
                raise PlcRuntimeError(f"FOR expects an IntegerIterable, got {type_of(iterable)}")
            for element in iterable:
                self.debug.write(3, f"for {stmt.name} = {element}")
                scope.define_variable(stmt.name, INTEGER, element)
                result = self.execute_block(stmt.statements, scope)
                if result is not None:
                    return result
            return None
        if isinstance(stmt, While):
            while self.require_boolean(self.evaluate(stmt.condition, scope), 'WHILE condition'):
                self.debug.write(3, 'while iteration')
                result = self.execute_block(stmt.statements, scope)
                if result is not None:
                    return result
            return None
        if isinstance(stmt, Return):
            return Returning(self.evaluate(stmt.value, scope))
        raise PlcRuntimeError(f"unexpected statement {type(stmt).__name__}")

    def assign(self, stmt: Assignment, scope: Scope):
        receiver = stmt.receiver
        if not isinstance(receiver, Access):
            raise PlcRuntimeError('assignment receiver must be an access expression')
        if receiver.receiver is not None:
            target = self.require_record(self.evaluate(receiver.receiver, scope)).scope
        else:
            target = scope
        value = self.evaluate(stmt.value, scope)
        target.define_variable(receiver.name, type_of(value), value)
        self.debug.write(2, f"assign {receiver.name} = {to_string(value)}")

    # Expressions

    def evaluate(self, expr: Expr, scope: Scope) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Group):
            return self.evaluate(expr.expression, scope)
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, scope)
            right = self.evaluate(expr.right, scope)
            return self.apply_binary_op(expr.operator, left, right)
        if isinstance(expr, Access):
            if expr.receiver is not None:
                owner = self.require_record(self.evaluate(expr.receiver, scope)).scope
            else:
                owner = scope
            variable = owner.lookup_variable(expr.name)
            if variable is None:
                raise PlcRuntimeError(f"undefined variable {expr.name}")
            return variable.value
        if isinstance(expr, Call):
            if expr.receiver is not None:
                owner = self.require_record(self.evaluate(expr.receiver, scope)).scope
            else:
                owner = scope
            args = [self.evaluate(arg, scope) for arg in expr.arguments]
            function = owner.lookup_function(expr.name, len(args))
            if function is None:
                raise PlcRuntimeError(f"undefined function {expr.name}/{len(args)}")
            self.debug.write(3, f"call {expr.name}({', '.join(format_literal(a) for a in args)})")
            return function.invoke(args)
        raise PlcRuntimeError(f"unexpected expression {type(expr).__name__}")

    def require_boolean(self, value: Any, what: str) -> bool:
        if not isinstance(value, bool):
            raise PlcRuntimeError(f"{what} must be Boolean, got {type_of(value)}")
        return value

    def require_record(self, value: Any) -> RecordVal:
        if not isinstance(value, RecordVal):
            raise PlcRuntimeError(f"receiver must be a record, got {type_of(value)}")
        return value

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        # AND and OR receive both operands already evaluated
        if op in ('AND', 'OR'):
            left = self.require_boolean(a, f"{op} operand")
            right = self.require_boolean(b, f"{op} operand")
            return left and right if op == 'AND' else left or right
        if op == '==':
            return self.equal_values(a, b)
        if op == '!=':
            return not self.equal_values(a, b)
        if op in ('<', '<=', '>', '>='):
            if type_of(a) != type_of(b) or type_of(a) not in COMPARABLE_TYPES:
                raise PlcRuntimeError(f"cannot compare {type_of(a)} and {type_of(b)}")
            if op == '<':
                return a < b
            if op == '<=':
                return a <= b
            if op == '>':
                return a > b
            return a >= b
        if op == '+':
            # String concatenation
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            if is_integer(a) and is_integer(b):
                return a + b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.add(a, b)
            raise PlcRuntimeError(f"unsupported + for {type_of(a)} and {type_of(b)}")
        if op == '-':
            if is_integer(a) and is_integer(b):
                return a - b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.subtract(a, b)
            raise PlcRuntimeError(f"unsupported - for {type_of(a)} and {type_of(b)}")
        if op == '*':
            if is_integer(a) and is_integer(b):
                return a * b
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                return EXACT.multiply(a, b)
            raise PlcRuntimeError(f"unsupported * for {type_of(a)} and {type_of(b)}")
        if op == '/':
            if is_integer(a) and is_integer(b):
                if b == 0:
                    raise PlcRuntimeError('division by zero')
                return truncating_divide(a, b)
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                if b == 0:
                    raise PlcRuntimeError('division by zero')
                return divide_half_even(a, b)
            raise PlcRuntimeError(f"unsupported / for {type_of(a)} and {type_of(b)}")
        raise PlcRuntimeError(f"unknown operator {op}")

    def equal_values(self, a: Any, b: Any) -> bool:
        # values of different types are never equal, so 1 != TRUE and 1 != 1.0
        if type_of(a) != type_of(b):
            return False
        if isinstance(a, RecordVal):
            return a is b
        return a == b


def run_program(source: str, analyze: bool = True, debug_level: int = 0) -> Any:
    """Convenience function to parse, optionally analyze, and run a program."""
    ast_program = parse_program(source)
    debug = DebugLog(debug_level)
    try:
        if analyze:
            Analyzer(debug=debug).analyze(ast_program)
        return Interpreter(debug=debug).run(ast_program)
    finally:
        debug.close()

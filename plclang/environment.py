from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from plclang.types import NIL, Type


@dataclass(eq=False)
class Variable:
    name: str
    type: Type
    value: Any = NIL


@dataclass(eq=False)
class Function:
    """A function binding: a signature plus the callable that implements it.

    `return_type` is None only while the analyzer is still inferring it.
    """
    name: str
    parameter_types: List[Type]
    return_type: Optional[Type]
    fn: Optional[Callable[[List[Any]], Any]] = None

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def invoke(self, args: List[Any]) -> Any:
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<function {self.name}/{self.arity}>"


class Scope:
    """A parent-linked binding table shared by the analyzer and interpreter."""
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[Tuple[str, int], Function] = {}

    def define_variable(self, name: str, type: Type, value: Any = NIL) -> Variable:
        variable = Variable(name, type, value)
        self.variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Optional[Variable]:
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def define_function(self, name: str, parameter_types: List[Type],
                        return_type: Optional[Type],
                        fn: Optional[Callable[[List[Any]], Any]] = None) -> Function:
        function = Function(name, list(parameter_types), return_type, fn)
        self.functions[(name, function.arity)] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Optional[Function]:
        scope = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            scope = scope.parent
        return None

    def __repr__(self) -> str:
        names = ', '.join(self.variables)
        funcs = ', '.join(f"{n}/{a}" for n, a in self.functions)
        return f"Scope(variables=[{names}], functions=[{funcs}])"

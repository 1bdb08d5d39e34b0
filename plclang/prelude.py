from typing import Any, List

from plclang.environment import Scope
from plclang.errors import PlcRuntimeError
from plclang.types import (
    ANY, INTEGER, INTEGER_ITERABLE, NIL, NIL_TYPE, is_integer, to_string,
)


def standard_prelude() -> Scope:
    """Build the scope holding the built-in functions.

    The returned scope is meant to be the parent of an analyzer's or an
    interpreter's root scope; both read the same signatures from it.
    """
    prelude = Scope()

    def std_print(args: List[Any]) -> Any:
        print(to_string(args[0]))
        return NIL

    def std_range(args: List[Any]) -> Any:
        start, end = args
        if not (is_integer(start) and is_integer(end)):
            raise PlcRuntimeError('range arguments must be Integer')
        return range(start, end)

    prelude.define_function('print', [ANY], NIL_TYPE, std_print)
    prelude.define_function('range', [INTEGER, INTEGER], INTEGER_ITERABLE, std_range)
    return prelude

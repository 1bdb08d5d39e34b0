"""Type descriptors and runtime values for plclang.

This module defines both halves of the type system. The static half is the
`Type` descriptor used by the analyzer together with `is_assignable`, the one
compatibility rule applied to assignments, parameters, returns and operands.
The dynamic half covers the runtime representation of values: plain Python
`bool`, `int`, `Decimal` and `str`, plus the `NIL` marker, `CharVal` for
characters and `RecordVal` for values that are themselves scopes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN
from typing import TYPE_CHECKING, Any, Dict, Optional
import math

if TYPE_CHECKING:
    from .environment import Function, Scope, Variable


class Type:
    """A nominal type tag.

    Built-in types have no members. User-defined types carry a `Scope`
    whose variables are the type's fields and whose functions are its
    methods.
    """
    def __init__(self, name: str, scope: Optional['Scope'] = None):
        self.name = name
        self.scope = scope

    def __repr__(self) -> str:
        return self.name

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Type) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    def get_field(self, name: str) -> Optional['Variable']:
        if self.scope is None:
            return None
        return self.scope.lookup_variable(name)

    def get_method(self, name: str, arity: int) -> Optional['Function']:
        if self.scope is None:
            return None
        return self.scope.lookup_function(name, arity)


NIL_TYPE = Type('Nil')
BOOLEAN = Type('Boolean')
INTEGER = Type('Integer')
DECIMAL = Type('Decimal')
CHARACTER = Type('Character')
STRING = Type('String')
ANY = Type('Any')
COMPARABLE = Type('Comparable')
INTEGER_ITERABLE = Type('IntegerIterable')

BUILTIN_TYPES: Dict[str, Type] = {
    t.name: t for t in (
        NIL_TYPE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING,
        ANY, COMPARABLE, INTEGER_ITERABLE,
    )
}

COMPARABLE_TYPES = (INTEGER, DECIMAL, CHARACTER, STRING)


def is_assignable(target: Type, source: Type) -> bool:
    """Return True if a value of type `source` may be stored in `target`."""
    if target == ANY or target == source:
        return True
    if target == COMPARABLE:
        return source in COMPARABLE_TYPES
    return False


class NilVal:
    """Marker object for the Nil value."""
    def __repr__(self) -> str:
        return 'NIL'

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NilVal)

    def __hash__(self) -> int:
        return 0


NIL = NilVal()


@dataclass(frozen=True, order=True)
class CharVal:
    """A single character; kept apart from one-character strings."""
    value: str


@dataclass(eq=False)
class RecordVal:
    """A runtime value that is itself a binding environment."""
    scope: 'Scope'

    def __repr__(self) -> str:
        return f"<record {id(self.scope):#x}>"


def is_integer(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool)


def type_of(value: Any) -> Type:
    """Return the type tag of a runtime value."""
    if isinstance(value, NilVal):
        return NIL_TYPE
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, Decimal):
        return DECIMAL
    if isinstance(value, CharVal):
        return CHARACTER
    if isinstance(value, str):
        return STRING
    if isinstance(value, range):
        return INTEGER_ITERABLE
    return ANY


INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


def integer_in_range(value: int) -> bool:
    return INT_MIN <= value <= INT_MAX


def decimal_in_range(value: Decimal) -> bool:
    return not math.isinf(float(value))


# add, subtract and multiply under this context are exact
EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


def truncating_divide(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def divide_half_even(a: Decimal, b: Decimal) -> Decimal:
    """Divide keeping the dividend's scale, rounding half to even.

    The quotient is computed exactly on the integer significands so no
    intermediate context precision can cause double rounding.
    """
    sign_a, digits_a, exp_a = a.as_tuple()
    sign_b, digits_b, exp_b = b.as_tuple()
    num = int(''.join(map(str, digits_a)) or '0')
    den = int(''.join(map(str, digits_b)) or '0')
    if exp_b < 0:
        num *= 10 ** -exp_b
    else:
        den *= 10 ** exp_b
    quotient, remainder = divmod(num, den)
    if 2 * remainder > den or (2 * remainder == den and quotient % 2 == 1):
        quotient += 1
    negative = (sign_a != sign_b) and quotient != 0
    return Decimal((1 if negative else 0, tuple(int(d) for d in str(quotient)), exp_a))


def to_string(value: Any) -> str:
    """Convert a runtime value to its display text, as used by print and +."""
    if isinstance(value, NilVal):
        return 'NIL'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, CharVal):
        return value.value
    if isinstance(value, range):
        return f"range({value.start}, {value.stop})"
    if isinstance(value, Decimal) and value.is_zero():
        # zero has no sign when displayed
        return str(value.copy_abs())
    return str(value)


ESCAPES = {
    'b': '\b', 'n': '\n', 'r': '\r', 't': '\t',
    "'": "'", '"': '"', '\\': '\\',
}
REVERSE_ESCAPES = {v: k for k, v in ESCAPES.items()}


def decode_escapes(text: str) -> str:
    result = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == '\\' and i + 1 < len(text) and text[i + 1] in ESCAPES:
            result.append(ESCAPES[text[i + 1]])
            i += 2
            continue
        result.append(c)
        i += 1
    return ''.join(result)


def encode_escapes(text: str, quote: str) -> str:
    out = []
    for c in text:
        if c in REVERSE_ESCAPES and (c not in '\'"' or c == quote):
            out.append('\\' + REVERSE_ESCAPES[c])
        else:
            out.append(c)
    return ''.join(out)


def format_literal(value: Any) -> str:
    """Render a literal value as source text that lexes back to it."""
    if isinstance(value, NilVal):
        return 'NIL'
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, CharVal):
        return "'" + encode_escapes(value.value, "'") + "'"
    if isinstance(value, str):
        return '"' + encode_escapes(value, '"') + '"'
    if isinstance(value, Decimal):
        text = format(value, 'f')
        return text if '.' in text else text + '.0'
    return str(value)

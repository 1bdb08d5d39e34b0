from typing import Any, Optional


class PlcError(Exception):
    """Base class for the three fatal error kinds of the toolchain."""
    kind = 'Error'

    def __init__(self, message: str, offset: Optional[int] = None):
        text = f"{self.kind}: {message}"
        if offset is not None:
            text += f" at offset {offset}"
        super().__init__(text)
        self.message = message
        self.offset = offset


class PlcSyntaxError(PlcError):
    """Raised by the lexer and parser on a malformed token sequence."""
    kind = 'SyntaxError'


class PlcSemanticError(PlcError):
    """Raised by the analyzer on a name-resolution or typing violation."""
    kind = 'SemanticError'


class PlcRuntimeError(PlcError):
    """Raised by the interpreter on type mismatches and arithmetic faults."""
    kind = 'RuntimeError'


class Returning:
    """Result of executing a RETURN; consumed by the invocation frame."""
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"Returning({self.value!r})"

"""JSON serialization/deserialization for the plclang AST.

`ast_to_obj` converts a tree into plain dict/list structures suitable for
JSON encoding. When the tree has been analyzed, the resolution slots are
included (`resolved_type`, `variable`, `function`) so that a generator can
consume the dump without re-deriving types. `ast_from_obj` rebuilds the
structure only; a loaded tree is unannotated and can be analyzed again or
executed directly.

Literal values are stored as their source text and re-parsed on load.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .ast import (
    Source, Field, Method, ExpressionStmt, Declaration, Assignment, If,
    For, While, Return, Literal, Group, Binary, Access, Call,
)
from .environment import Function, Variable
from .lexer import lex
from .parser import Parser
from .types import format_literal


def variable_to_obj(variable: Optional[Variable]) -> Optional[Dict[str, Any]]:
    if variable is None:
        return None
    return {"name": variable.name, "type": repr(variable.type)}


def function_to_obj(function: Optional[Function]) -> Optional[Dict[str, Any]]:
    if function is None:
        return None
    return {
        "name": function.name,
        "parameter_types": [repr(t) for t in function.parameter_types],
        "return_type": repr(function.return_type) if function.return_type is not None else None,
    }


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Source):
        return {"type": "Source", "fields": ast_to_obj(node.fields), "methods": ast_to_obj(node.methods)}
    if isinstance(node, Field):
        return {
            "type": "Field",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
            "variable": variable_to_obj(node.variable),
        }
    if isinstance(node, Method):
        return {
            "type": "Method",
            "name": node.name,
            "parameters": list(node.parameters),
            "parameter_type_names": list(node.parameter_type_names),
            "return_type_name": node.return_type_name,
            "statements": ast_to_obj(node.statements),
            "function": function_to_obj(node.function),
        }
    if isinstance(node, ExpressionStmt):
        return {"type": "ExpressionStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Declaration):
        return {
            "type": "Declaration",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
            "variable": variable_to_obj(node.variable),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "receiver": ast_to_obj(node.receiver), "value": ast_to_obj(node.value)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_statements": ast_to_obj(node.then_statements),
            "else_statements": ast_to_obj(node.else_statements),
        }
    if isinstance(node, For):
        return {"type": "For", "name": node.name, "value": ast_to_obj(node.value),
                "statements": ast_to_obj(node.statements)}
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition),
                "statements": ast_to_obj(node.statements)}
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}

    # Expressions carry their resolved type when analyzed
    if isinstance(node, Literal):
        obj = {"type": "Literal", "literal": format_literal(node.value)}
    elif isinstance(node, Group):
        obj = {"type": "Group", "expression": ast_to_obj(node.expression)}
    elif isinstance(node, Binary):
        obj = {"type": "Binary", "operator": node.operator,
               "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    elif isinstance(node, Access):
        obj = {"type": "Access", "receiver": ast_to_obj(node.receiver), "name": node.name,
               "variable": variable_to_obj(node.variable)}
    elif isinstance(node, Call):
        obj = {"type": "Call", "receiver": ast_to_obj(node.receiver), "name": node.name,
               "arguments": ast_to_obj(node.arguments), "function": function_to_obj(node.function)}
    else:
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")
    obj["resolved_type"] = repr(node.type) if node.type is not None else None
    return obj


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Source":
        return Source(fields=ast_from_obj(obj["fields"]), methods=ast_from_obj(obj["methods"]))
    if t == "Field":
        return Field(name=obj["name"], type_name=obj.get("type_name"), value=ast_from_obj(obj.get("value")))
    if t == "Method":
        return Method(
            name=obj["name"],
            parameters=list(obj["parameters"]),
            parameter_type_names=list(obj["parameter_type_names"]),
            return_type_name=obj.get("return_type_name"),
            statements=ast_from_obj(obj["statements"]),
        )
    if t == "ExpressionStmt":
        return ExpressionStmt(expression=ast_from_obj(obj["expression"]))
    if t == "Declaration":
        return Declaration(name=obj["name"], type_name=obj.get("type_name"),
                           value=ast_from_obj(obj.get("value")))
    if t == "Assignment":
        return Assignment(receiver=ast_from_obj(obj["receiver"]), value=ast_from_obj(obj["value"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_statements=ast_from_obj(obj["then_statements"]),
            else_statements=ast_from_obj(obj.get("else_statements") or []),
        )
    if t == "For":
        return For(name=obj["name"], value=ast_from_obj(obj["value"]), statements=ast_from_obj(obj["statements"]))
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), statements=ast_from_obj(obj["statements"]))
    if t == "Return":
        return Return(value=ast_from_obj(obj["value"]))
    if t == "Literal":
        return Parser(lex(obj["literal"])).parse_primary_expression()
    if t == "Group":
        return Group(expression=ast_from_obj(obj["expression"]))
    if t == "Binary":
        return Binary(operator=obj["operator"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Access":
        return Access(receiver=ast_from_obj(obj.get("receiver")), name=obj["name"])
    if t == "Call":
        return Call(receiver=ast_from_obj(obj.get("receiver")), name=obj["name"],
                    arguments=ast_from_obj(obj["arguments"]))

    raise ValueError(f"Unknown AST node type: {t}")

"""
Identifier resolution for declaration nodes.
"""

from __future__ import annotations

import re

from ..source_ast.nodes import MemberDeclaration, TypeDeclaration

_IDENTIFIER = re.compile(r"^@?[A-Za-z_][A-Za-z0-9_]*$")

# Dotted names with optional generic arguments, arrays and nullable markers:
# "List<TagDto>", "System.Collections.Generic.Dictionary<string, int>", "int[]?"
_TYPE_NAME = re.compile(r"^(global::)?[A-Za-z_@][\w.@]*(\s*<[\w\s.,<>\[\]?@()]+>)?(\[[,\s]*\])*\??$")


def identifier_of(declaration: TypeDeclaration | MemberDeclaration) -> str:
    """Canonical name of a class/struct/record, property or field declaration."""
    return declaration.identifier


def is_identifier(text: str) -> bool:
    """Whether ``text`` is a simple C# identifier."""
    return bool(_IDENTIFIER.match(text))


def is_type_name(text: str) -> bool:
    """Whether ``text`` looks like a C# type name (qualified, generic, array or nullable)."""
    if not text or text.count("<") != text.count(">"):
        return False
    return bool(_TYPE_NAME.match(text.strip()))

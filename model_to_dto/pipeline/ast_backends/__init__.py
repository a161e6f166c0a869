"""
C# AST backend.

Node definitions for synthesized declarations and the serializer that
renders them to C# source.
"""

from __future__ import annotations

from .csharp_ast_nodes import (
    CSharpClass,
    CSharpConversionOperator,
    CSharpField,
    CSharpFile,
    CSharpMethod,
    CSharpNamespace,
    CSharpProperty,
    MemberRole,
    OperatorKind,
    UsingDirective,
)
from .csharp_serializer import CSharpSerializer, render_generation_comment

__all__ = [
    "CSharpClass",
    "CSharpConversionOperator",
    "CSharpField",
    "CSharpFile",
    "CSharpMethod",
    "CSharpNamespace",
    "CSharpProperty",
    "CSharpSerializer",
    "MemberRole",
    "OperatorKind",
    "UsingDirective",
    "render_generation_comment",
]

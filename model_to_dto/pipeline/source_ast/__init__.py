"""
Source AST module.

Declaration nodes describing model types, and the tree-sitter based
C# reader that produces them.
"""

from __future__ import annotations

from .csharp_reader import CSharpDeclarationReader, SourceParseError, find_tagged_declarations
from .nodes import (
    AttributeArgument,
    AttributeNode,
    BinaryExpr,
    CastExpr,
    Expression,
    ImportDirective,
    LiteralExpr,
    MemberAccessExpr,
    MemberDeclaration,
    MemberKind,
    NameOfExpr,
    OpaqueExpr,
    SourceFile,
    SourceLocation,
    TypeDeclaration,
    TypeKind,
    TypeOfExpr,
    UnaryExpr,
)

__all__ = [
    "AttributeArgument",
    "AttributeNode",
    "BinaryExpr",
    "CastExpr",
    "CSharpDeclarationReader",
    "Expression",
    "ImportDirective",
    "LiteralExpr",
    "MemberAccessExpr",
    "MemberDeclaration",
    "MemberKind",
    "NameOfExpr",
    "OpaqueExpr",
    "SourceFile",
    "SourceLocation",
    "SourceParseError",
    "TypeDeclaration",
    "TypeKind",
    "TypeOfExpr",
    "UnaryExpr",
    "find_tagged_declarations",
]

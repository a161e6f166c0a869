"""
Declaration node definitions.

These nodes represent the model type declarations handed over by the host
(or by the C# reader) before any annotation is interpreted. They carry
exactly what the pipeline needs: identifiers, declared types, modifiers,
attached markers with their raw argument expressions, enclosing namespace
and the import directives visible to the declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class SourceLocation:
    """Position of a node in its source file (1-based line and column)."""

    path: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.path or '<input>'}:{self.line}:{self.column}"


# ---------------------------------------------------------------------------
# Attribute argument expressions
# ---------------------------------------------------------------------------


@dataclass
class Expression:
    """Base class for attribute argument expressions."""

    text: str = ""  # Source text, used in error messages


@dataclass
class LiteralExpr(Expression):
    """A literal: string, integer, real, boolean, character or null."""

    value: Any = None


@dataclass
class MemberAccessExpr(Expression):
    """A (possibly qualified) name such as ``ConversionForm.Explicit``."""

    path: str = ""


@dataclass
class TypeOfExpr(Expression):
    """A ``typeof(T)`` expression."""

    type_name: str = ""


@dataclass
class NameOfExpr(Expression):
    """A ``nameof(x)`` expression."""

    target: str = ""


@dataclass
class BinaryExpr(Expression):
    """A binary expression between two sub-expressions."""

    operator: str = ""
    left: Expression | None = None
    right: Expression | None = None


@dataclass
class UnaryExpr(Expression):
    """A prefix unary expression (``-1``, ``~x``)."""

    operator: str = ""
    operand: Expression | None = None


@dataclass
class CastExpr(Expression):
    """A cast such as ``(ConversionForm)5``."""

    type_name: str = ""
    operand: Expression | None = None


@dataclass
class OpaqueExpr(Expression):
    """Any expression the reader does not model (invocations, interpolation...)."""

    kind: str = ""


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


@dataclass
class AttributeArgument:
    """One argument of an attribute.

    ``name`` is None for positional arguments. ``is_property_assignment``
    distinguishes ``Name = value`` from ``name: value``.
    """

    expression: Expression = field(default_factory=Expression)
    name: str | None = None
    is_property_assignment: bool = False


@dataclass
class AttributeNode:
    """An attribute attached to a declaration, as written in source."""

    name: str = ""
    arguments: list[AttributeArgument] = field(default_factory=list)
    location: SourceLocation = field(default_factory=SourceLocation)
    text: str = ""  # Full source text without the enclosing brackets

    @property
    def short_name(self) -> str:
        """Name without namespace qualifier or alias prefix."""
        name = self.name.split("::")[-1]
        return name.rsplit(".", 1)[-1]

    def to_source(self) -> str:
        """Source form used when the attribute is copied to a derived member."""
        return self.text or self.name


# ---------------------------------------------------------------------------
# Members and types
# ---------------------------------------------------------------------------


class MemberKind(str, Enum):
    """Kind of a model member."""

    FIELD = "field"
    PROPERTY = "property"


@dataclass
class MemberDeclaration:
    """A field or property declared directly on a model type.

    Fields declaring several variables are split into one node per variable.
    """

    kind: MemberKind = MemberKind.PROPERTY
    identifier: str = ""
    type_name: str = ""
    modifiers: list[str] = field(default_factory=list)
    attributes: list[AttributeNode] = field(default_factory=list)

    # Property accessors as written, e.g. ["get", "private set"]
    accessors: list[str] = field(default_factory=list)

    # Expression body of "=> expr" properties
    expression_body: str | None = None

    # Initializer expression text ("= value")
    initializer: str | None = None

    location: SourceLocation = field(default_factory=SourceLocation)

    @property
    def is_required(self) -> bool:
        return "required" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers or "const" in self.modifiers

    @property
    def has_mutator(self) -> bool:
        """Whether the member can be assigned from an object initializer."""
        if self.is_static:
            return False
        # Helpers on the derived type only reach public and internal members
        if not any(m in self.modifiers for m in ("public", "internal")):
            return False
        if self.kind == MemberKind.FIELD:
            return "readonly" not in self.modifiers
        if self.expression_body is not None:
            return False
        for accessor in self.accessors:
            keyword = accessor.split()[-1] if accessor.split() else ""
            if keyword not in ("set", "init"):
                continue
            if any(m in accessor.split() for m in ("private", "protected")):
                continue
            return True
        return False


class TypeKind(str, Enum):
    """Kind of a model type declaration; value is the C# keyword."""

    CLASS = "class"
    STRUCT = "struct"
    RECORD = "record"
    RECORD_STRUCT = "record struct"


@dataclass
class ImportDirective:
    """A using directive visible to a declaration."""

    target: str = ""
    alias: str | None = None
    is_static: bool = False
    is_global: bool = False

    def to_source(self) -> str:
        """Render the directive; also its identity for deduplication."""
        parts = []
        if self.is_global:
            parts.append("global")
        parts.append("using")
        if self.is_static:
            parts.append("static")
        if self.alias:
            parts.append(f"{self.alias} =")
        parts.append(self.target)
        return " ".join(parts) + ";"


@dataclass
class TypeDeclaration:
    """A class, struct or record declaration.

    ``namespace`` is None when the type sits in the global namespace.
    ``imports`` holds every using directive of the declaring source tree.
    """

    kind: TypeKind = TypeKind.CLASS
    identifier: str = ""
    modifiers: list[str] = field(default_factory=list)
    attributes: list[AttributeNode] = field(default_factory=list)
    members: list[MemberDeclaration] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
    namespace: str | None = None
    imports: list[ImportDirective] = field(default_factory=list)
    location: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class SourceFile:
    """A parsed source file."""

    path: str = ""
    imports: list[ImportDirective] = field(default_factory=list)
    types: list[TypeDeclaration] = field(default_factory=list)

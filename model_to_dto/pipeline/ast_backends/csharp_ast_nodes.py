"""
C# AST node definitions.

These nodes represent the synthesized declarations: derived types, their
copied members and their conversion members. They are built by the
synthesizer and serialized to source code by CSharpSerializer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AccessModifier(str, Enum):
    """C# access modifiers."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    INTERNAL = "internal"


class MemberModifier(str, Enum):
    """C# member modifiers."""

    STATIC = "static"
    SEALED = "sealed"


class OperatorKind(str, Enum):
    """User-defined conversion operator kinds."""

    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class MemberRole(str, Enum):
    """What a synthesized member is for."""

    COPIED = "copied"
    HELPER = "helper"
    OPERATOR = "operator"
    STATIC_METHOD = "static_method"
    REFERENCE_METHOD = "reference_method"


@dataclass
class CSharpNode:
    """Base class for all C# AST nodes."""

    pass


@dataclass
class CSharpParameter(CSharpNode):
    """Represents a method/operator parameter."""

    name: str = ""
    type_name: str = ""


@dataclass
class CSharpMember(CSharpNode):
    """Base class for class members."""

    role: MemberRole = MemberRole.COPIED


@dataclass
class CSharpField(CSharpMember):
    """A field copied from the model type.

    ``modifiers`` keeps the source spelling (e.g. ``["public", "readonly"]``).
    """

    name: str = ""
    type_name: str = ""
    modifiers: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    initializer: str | None = None


@dataclass
class CSharpProperty(CSharpMember):
    """A property copied from the model type."""

    name: str = ""
    type_name: str = ""
    modifiers: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    accessors: list[str] = field(default_factory=list)
    expression_body: str | None = None
    initializer: str | None = None


@dataclass
class ObjectInitializer(CSharpNode):
    """``new T { A = x.A, B = ... }``"""

    type_name: str = ""
    assignments: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class CSharpMethod(CSharpMember):
    """A method.

    The body is either an object initializer returned from a block, or a
    single expression rendered with ``=>``.
    """

    name: str = ""
    return_type: str = "void"
    access: AccessModifier = AccessModifier.PUBLIC
    modifiers: list[MemberModifier] = field(default_factory=list)
    parameters: list[CSharpParameter] = field(default_factory=list)
    returns: ObjectInitializer | None = None
    expression_body: str | None = None


@dataclass
class CSharpConversionOperator(CSharpMember):
    """``public static explicit operator Target(Source source) => expr;``"""

    kind: OperatorKind = OperatorKind.EXPLICIT
    target_type: str = ""
    parameter: CSharpParameter = field(default_factory=CSharpParameter)
    expression_body: str = ""
    role: MemberRole = MemberRole.OPERATOR


@dataclass
class CSharpClass(CSharpNode):
    """A derived type declaration.

    ``keyword`` is ``class``, ``struct``, ``record`` or ``record struct``.
    Members keep synthesis order.
    """

    name: str = ""
    keyword: str = "class"
    access: AccessModifier = AccessModifier.PUBLIC
    modifiers: list[MemberModifier] = field(default_factory=list)
    members: list[CSharpMember] = field(default_factory=list)
    source_model: str = ""

    def members_with_role(self, role: MemberRole) -> list[CSharpMember]:
        return [m for m in self.members if m.role == role]


@dataclass
class UsingDirective(CSharpNode):
    """Represents a using directive, kept as written."""

    text: str = ""


@dataclass
class CSharpNamespace(CSharpNode):
    """Types sharing a namespace; ``name`` is empty for the global namespace."""

    name: str = ""
    using_directives: list[UsingDirective] = field(default_factory=list)
    classes: list[CSharpClass] = field(default_factory=list)


@dataclass
class CSharpFile(CSharpNode):
    """Represents a complete C# source file."""

    generation_comment: str = ""
    namespaces: list[CSharpNamespace] = field(default_factory=list)

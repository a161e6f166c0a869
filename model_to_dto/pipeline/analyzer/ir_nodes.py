"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed model types, ready for synthesis.
Every annotation is interpreted and every member classified; descriptors
are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag

from ..source_ast.nodes import ImportDirective, MemberDeclaration, SourceLocation, TypeKind


class ConversionKind(IntFlag):
    """Type-level conversion flags (``ConversionForm`` in C#)."""

    NONE = 0
    EXPLICIT = 1
    IMPLICIT = 2
    STATIC_METHODS = 4
    REFERENCE_METHODS = 8

    @staticmethod
    def parse(text: str) -> ConversionKind:
        """Parse ``"Explicit|StaticMethods"`` style flag lists.

        Names are matched case-insensitively, with or without underscores.
        """
        kind = ConversionKind.NONE
        for part in text.split("|"):
            name = part.strip().replace("_", "").lower()
            if not name:
                continue
            matches = [member for key, member in ConversionKind.__members__.items() if key.replace("_", "").lower() == name]
            if not matches:
                raise ValueError(f"Unknown conversion kind: {part.strip()!r}")
            kind |= matches[0]
        return kind


class ConversionStrategy(IntEnum):
    """Member-level conversion strategy (``HasConversionForm`` in C#)."""

    EXPLICIT = 0
    IMPLICIT = 1
    STATIC_METHODS = 2


@dataclass(frozen=True)
class Plain:
    """Member copied as-is."""


@dataclass(frozen=True)
class DirectConversion:
    """Member whose type is swapped and converted by cast or static methods."""

    converted_type: str
    strategy: ConversionStrategy


@dataclass(frozen=True)
class IndirectConversion:
    """Member converted through ``converter_type.method_name`` in both directions.

    ``explicit_converter`` is False when the converter defaults to the
    member's own declared type.
    """

    converter_type: str
    method_name: str
    converted_type: str
    explicit_converter: bool = True


MemberClassification = Plain | DirectConversion | IndirectConversion


@dataclass(frozen=True)
class ModelMember:
    """A classified member of a model type.

    ``declaration`` is the member as it appears on the derived type: generator
    annotations and ``virtual`` stripped, type replaced when converted.
    """

    identifier: str
    declared_type: str
    is_required: bool
    has_mutator: bool
    declaration: MemberDeclaration
    classification: MemberClassification = field(default_factory=Plain)

    @property
    def takes_part_in_conversion(self) -> bool:
        """Whether conversion helpers assign this member."""
        return self.has_mutator


@dataclass(frozen=True)
class ModelDescriptor:
    """Normalized description of one tagged model type."""

    model_name: str
    derived_name: str
    namespace: str | None
    type_kind: TypeKind
    conversion_kind: ConversionKind
    members: tuple[ModelMember, ...] = ()
    ignored_required_names: tuple[str, ...] = ()
    imports: tuple[ImportDirective, ...] = ()
    location: SourceLocation = field(default_factory=SourceLocation)

    @property
    def member_names(self) -> list[str]:
        """Names of the members assigned by the conversion helpers."""
        return [m.identifier for m in self.members if m.takes_part_in_conversion]

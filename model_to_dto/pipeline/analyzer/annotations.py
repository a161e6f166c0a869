"""
Annotation reading.

Finds the generator's markers among a declaration's attributes and reduces
their argument expressions to compile-time constants.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import InvalidAnnotationArgumentError, UnresolvedConstantError
from ..source_ast.nodes import (
    AttributeNode,
    BinaryExpr,
    CastExpr,
    Expression,
    LiteralExpr,
    MemberAccessExpr,
    MemberDeclaration,
    NameOfExpr,
    SourceLocation,
    TypeDeclaration,
    TypeOfExpr,
    UnaryExpr,
)
from .identifiers import identifier_of
from .ir_nodes import ConversionKind, ConversionStrategy

ATTRIBUTE_SUFFIX = "Attribute"


class AnnotationKind(str, Enum):
    """Logical markers understood by the generator."""

    HAS_DTO = "has_dto"
    IGNORE = "ignore"
    HAS_CONVERSION = "has_conversion"
    HAS_INDIRECT_CONVERSION = "has_indirect_conversion"


DEFAULT_SPELLINGS: dict[AnnotationKind, tuple[str, ...]] = {
    AnnotationKind.HAS_DTO: ("HasDTO",),
    AnnotationKind.IGNORE: ("DTOIgnore",),
    AnnotationKind.HAS_CONVERSION: ("HasConversion",),
    AnnotationKind.HAS_INDIRECT_CONVERSION: ("HasIndirectConversion",),
}

MEMBER_ANNOTATIONS = frozenset(
    {
        AnnotationKind.IGNORE,
        AnnotationKind.HAS_CONVERSION,
        AnnotationKind.HAS_INDIRECT_CONVERSION,
    }
)

# Enums declared next to the C# attributes; member access on them is constant
ENUM_CONSTANTS: dict[str, dict[str, int]] = {
    "ConversionForm": {name.replace("_", "").lower(): member.value for name, member in ConversionKind.__members__.items()},
    "HasConversionForm": {name.replace("_", "").lower(): member.value for name, member in ConversionStrategy.__members__.items()},
}


def strip_attribute_suffix(name: str) -> str:
    """``HasDTOAttribute`` -> ``HasDTO``; names that are only the suffix are kept."""
    if name.endswith(ATTRIBUTE_SUFFIX) and len(name) > len(ATTRIBUTE_SUFFIX):
        return name[: -len(ATTRIBUTE_SUFFIX)]
    return name


class AnnotationRegistry:
    """Maps every accepted spelling to its logical annotation kind.

    Built once per generator from the defaults plus configured extras.
    """

    def __init__(self, extra_spellings: dict[str, list[str]] | None = None):
        self._kinds: dict[str, AnnotationKind] = {}
        self._spellings: dict[AnnotationKind, list[str]] = {}
        for kind, spellings in DEFAULT_SPELLINGS.items():
            for spelling in spellings:
                self._register(kind, spelling)
        for kind_name, spellings in (extra_spellings or {}).items():
            kind = AnnotationKind(kind_name)
            for spelling in spellings:
                self._register(kind, spelling)

    def _register(self, kind: AnnotationKind, spelling: str) -> None:
        bare = strip_attribute_suffix(spelling)
        existing = self._kinds.get(bare)
        if existing is not None and existing != kind:
            raise ValueError(f"Spelling {spelling!r} is already registered for {existing.value}")
        self._kinds[bare] = kind
        self._spellings.setdefault(kind, [])
        if bare not in self._spellings[kind]:
            self._spellings[kind].append(bare)

    def kind_of(self, attribute_name: str) -> AnnotationKind | None:
        """Return the kind an attribute name denotes, ignoring qualifier and suffix."""
        short = attribute_name.split("::")[-1].rsplit(".", 1)[-1]
        return self._kinds.get(strip_attribute_suffix(short))

    def spellings(self, kind: AnnotationKind) -> list[str]:
        return list(self._spellings.get(kind, []))

    def is_generator_attribute(self, attribute: AttributeNode) -> bool:
        return self.kind_of(attribute.name) is not None


@dataclass
class AnnotationPayload:
    """A marker with its arguments reduced to constants."""

    name: str
    kind: AnnotationKind
    positional_args: list[tuple[int, Any]] = field(default_factory=list)
    named_args: dict[str, Any] = field(default_factory=dict)
    location: SourceLocation = field(default_factory=SourceLocation)

    @property
    def argument_count(self) -> int:
        return len(self.positional_args) + len(self.named_args)


class AnnotationReader:
    """Reads generator markers from declarations."""

    def __init__(self, registry: AnnotationRegistry):
        self.registry = registry

    def read(
        self,
        declaration: TypeDeclaration | MemberDeclaration,
        recognized: Iterable[AnnotationKind],
    ) -> list[AnnotationPayload]:
        """
        Read the markers of ``declaration`` whose kind is in ``recognized``.

        Args:
            declaration: Type or member declaration
            recognized: Annotation kinds the caller cares about

        Returns:
            One payload per matching attribute, in source order

        Raises:
            UnresolvedConstantError: If an argument is not a compile-time constant
            InvalidAnnotationArgumentError: If a positional argument is null
        """
        wanted = set(recognized)
        owner = identifier_of(declaration)
        payloads = []
        for attribute in declaration.attributes:
            kind = self.registry.kind_of(attribute.name)
            if kind is None or kind not in wanted:
                continue
            try:
                payloads.append(self._read_attribute(attribute, kind, owner))
            except UnresolvedConstantError as e:
                e.location = attribute.location
                if isinstance(declaration, MemberDeclaration):
                    e.member = owner
                else:
                    e.declaration = owner
                raise
        return payloads

    def _read_attribute(self, attribute: AttributeNode, kind: AnnotationKind, owner: str) -> AnnotationPayload:
        payload = AnnotationPayload(
            name=strip_attribute_suffix(attribute.short_name),
            kind=kind,
            location=attribute.location,
        )
        for index, argument in enumerate(attribute.arguments):
            value = evaluate_constant(argument.expression)
            if argument.name is None:
                if value is None:
                    raise InvalidAnnotationArgumentError(f"[{payload.name}] positional argument {index} on '{owner}' is null")
                payload.positional_args.append((index, value))
            else:
                if argument.name in payload.named_args:
                    raise InvalidAnnotationArgumentError(f"[{payload.name}] argument '{argument.name}' on '{owner}' is given twice")
                payload.named_args[argument.name] = value
        return payload


def evaluate_constant(expression: Expression) -> Any:
    """
    Reduce an argument expression to a constant value.

    Args:
        expression: Expression node from the declaration

    Returns:
        str, int, float, bool or None

    Raises:
        UnresolvedConstantError: If the expression is not a compile-time constant
    """
    if isinstance(expression, LiteralExpr):
        return expression.value

    if isinstance(expression, TypeOfExpr):
        if not expression.type_name:
            raise UnresolvedConstantError(f"typeof expression without a type: {expression.text!r}")
        return expression.type_name

    if isinstance(expression, NameOfExpr):
        target = expression.target.rsplit(".", 1)[-1]
        if not target:
            raise UnresolvedConstantError(f"nameof expression without a target: {expression.text!r}")
        return target

    if isinstance(expression, MemberAccessExpr):
        return _resolve_enum_member(expression)

    if isinstance(expression, CastExpr):
        value = evaluate_constant(expression.operand) if expression.operand else None
        enum_name = expression.type_name.rsplit(".", 1)[-1]
        if enum_name in ENUM_CONSTANTS and isinstance(value, int):
            return value
        if expression.type_name in ("int", "long", "short", "byte") and isinstance(value, (int, float)):
            return int(value)
        if expression.type_name == "string" and (value is None or isinstance(value, str)):
            return value
        raise UnresolvedConstantError(f"Cast is not a compile-time constant: {expression.text!r}")

    if isinstance(expression, UnaryExpr):
        value = evaluate_constant(expression.operand) if expression.operand else None
        if expression.operator == "-" and isinstance(value, (int, float)) and not isinstance(value, bool):
            return -value
        if expression.operator == "~" and isinstance(value, int) and not isinstance(value, bool):
            return ~value
        if expression.operator == "!" and isinstance(value, bool):
            return not value
        raise UnresolvedConstantError(f"Unary expression is not a compile-time constant: {expression.text!r}")

    if isinstance(expression, BinaryExpr):
        left = evaluate_constant(expression.left) if expression.left else None
        right = evaluate_constant(expression.right) if expression.right else None
        return _apply_binary(expression, left, right)

    raise UnresolvedConstantError(f"Argument is not a compile-time constant: {expression.text!r}")


def _resolve_enum_member(expression: MemberAccessExpr) -> int:
    parts = expression.path.split(".")
    if len(parts) >= 2:
        members = ENUM_CONSTANTS.get(parts[-2])
        if members is not None:
            value = members.get(parts[-1].lower())
            if value is not None:
                return value
    raise UnresolvedConstantError(f"Cannot resolve '{expression.path}' to a constant")


def _apply_binary(expression: BinaryExpr, left: Any, right: Any) -> Any:
    both_int = isinstance(left, int) and isinstance(right, int) and not isinstance(left, bool) and not isinstance(right, bool)
    if expression.operator == "|" and both_int:
        return left | right
    if expression.operator == "&" and both_int:
        return left & right
    if expression.operator == "+":
        if isinstance(left, str) or isinstance(right, str):
            return f"{'' if left is None else left}{'' if right is None else right}"
        if both_int:
            return left + right
    raise UnresolvedConstantError(f"Expression is not a compile-time constant: {expression.text!r}")

"""
Typed views of the generator's marker payloads.

Payloads are first mapped into named parameter slots (positional arguments
by index, named arguments by alias), unset slots take their defaults, and
only then are required slots and value types validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import InvalidAnnotationArgumentError
from .annotations import AnnotationPayload
from .ir_nodes import ConversionKind, ConversionStrategy

_MISSING = object()


def _normalize(name: str) -> str:
    return name.replace("_", "").lower()


@dataclass(frozen=True)
class ParameterSpec:
    """One parameter slot of a marker."""

    name: str
    value_type: type
    aliases: tuple[str, ...] = ()
    required: bool = True
    default: Any = None

    def accepts(self, argument_name: str) -> bool:
        normalized = _normalize(argument_name)
        return normalized == _normalize(self.name) or normalized in (_normalize(a) for a in self.aliases)


def bind_arguments(payload: AnnotationPayload, parameters: list[ParameterSpec]) -> dict[str, Any]:
    """
    Bind a payload's arguments to parameter slots.

    Args:
        payload: The payload read from the attribute
        parameters: Parameter slots in positional order

    Returns:
        Mapping from parameter name to value, defaults filled in

    Raises:
        InvalidAnnotationArgumentError: On surplus, unknown, duplicated, missing or mistyped arguments
    """
    slots: dict[str, Any] = {spec.name: _MISSING for spec in parameters}

    for index, value in payload.positional_args:
        if index >= len(parameters):
            raise InvalidAnnotationArgumentError(f"[{payload.name}] takes at most {len(parameters)} arguments, got one at position {index}")
        slots[parameters[index].name] = value

    for argument_name, value in payload.named_args.items():
        spec = next((p for p in parameters if p.accepts(argument_name)), None)
        if spec is None:
            raise InvalidAnnotationArgumentError(f"[{payload.name}] has no parameter named '{argument_name}'")
        if slots[spec.name] is not _MISSING:
            raise InvalidAnnotationArgumentError(f"[{payload.name}] parameter '{spec.name}' is given more than once")
        slots[spec.name] = value

    bound: dict[str, Any] = {}
    for spec in parameters:
        value = slots[spec.name]
        if value is _MISSING:
            if spec.required:
                raise InvalidAnnotationArgumentError(f"[{payload.name}] is missing required argument '{spec.name}'")
            value = spec.default
        elif not _has_type(value, spec.value_type):
            raise InvalidAnnotationArgumentError(f"[{payload.name}] argument '{spec.name}' must be {spec.value_type.__name__}, got {value!r}")
        bound[spec.name] = value
    return bound


def _has_type(value: Any, value_type: type) -> bool:
    if value_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, value_type)


@dataclass(frozen=True)
class HasDtoMarker:
    """``[HasDTO(DTOClassName = "...", ConversionForm = ...)]``"""

    dto_class_name: str
    conversion_kind: ConversionKind

    @staticmethod
    def from_payload(payload: AnnotationPayload, default_name: str, default_kind: ConversionKind) -> HasDtoMarker:
        bound = bind_arguments(
            payload,
            [
                ParameterSpec("dto_class_name", str, ("DTOClassName", "derivedName", "name"), required=False, default=default_name),
                ParameterSpec("conversion_form", int, ("ConversionForm", "kind"), required=False, default=int(default_kind)),
            ],
        )
        value = bound["conversion_form"]
        all_flags = ConversionKind.EXPLICIT | ConversionKind.IMPLICIT | ConversionKind.STATIC_METHODS | ConversionKind.REFERENCE_METHODS
        if value < 0 or value & ~int(all_flags):
            raise InvalidAnnotationArgumentError(f"[{payload.name}] conversion form {value} is not a valid flag combination")
        return HasDtoMarker(dto_class_name=bound["dto_class_name"], conversion_kind=ConversionKind(value))


@dataclass(frozen=True)
class HasConversionMarker:
    """``[HasConversion(HasConversionForm.Explicit, "AddressDto")]``"""

    strategy: ConversionStrategy
    converted_type: str

    @staticmethod
    def from_payload(payload: AnnotationPayload) -> HasConversionMarker:
        bound = bind_arguments(
            payload,
            [
                ParameterSpec("has_conversion_form", int, ("conversionForm", "form", "strategy")),
                ParameterSpec("converted_type", str, ("dtoType", "type")),
            ],
        )
        try:
            strategy = ConversionStrategy(bound["has_conversion_form"])
        except ValueError as e:
            raise InvalidAnnotationArgumentError(f"[{payload.name}] unknown conversion form {bound['has_conversion_form']}") from e
        return HasConversionMarker(strategy=strategy, converted_type=bound["converted_type"])


@dataclass(frozen=True)
class HasIndirectConversionMarker:
    """``[HasIndirectConversion([converterType,] methodName, convertedType)]``

    ``converter_type`` is None for the two-argument shape.
    """

    method_name: str
    converted_type: str
    converter_type: str | None = None

    @staticmethod
    def from_payload(payload: AnnotationPayload) -> HasIndirectConversionMarker:
        has_converter = payload.argument_count == 3 or any(_normalize(name) == "convertertype" for name in payload.named_args)
        parameters = [
            ParameterSpec("method_name", str, ("methodsName",)),
            ParameterSpec("converted_type", str),
        ]
        if has_converter:
            parameters.insert(0, ParameterSpec("converter_type", str))
        bound = bind_arguments(payload, parameters)
        return HasIndirectConversionMarker(
            method_name=bound["method_name"],
            converted_type=bound["converted_type"],
            converter_type=bound.get("converter_type"),
        )

"""
Conversion synthesis.

Turns a ModelDescriptor into a derived-type declaration: the copied members
first, then the conversion helpers and the members implementing each
requested conversion flag.
"""

from __future__ import annotations

from ...logging import get_logger
from ...utils import short_type_name, static_method_names
from ..analyzer.identifiers import is_identifier, is_type_name
from ..analyzer.ir_nodes import (
    ConversionKind,
    ConversionStrategy,
    DirectConversion,
    IndirectConversion,
    ModelDescriptor,
    ModelMember,
)
from ..ast_backends.csharp_ast_nodes import (
    AccessModifier,
    CSharpClass,
    CSharpConversionOperator,
    CSharpField,
    CSharpMember,
    CSharpMethod,
    CSharpParameter,
    CSharpProperty,
    MemberModifier,
    MemberRole,
    ObjectInitializer,
    OperatorKind,
)
from ..config import GeneratorConfig
from ..errors import UnresolvedConverterError
from ..source_ast.nodes import MemberKind, TypeKind

TO_DERIVED_HELPER = "_toDerived"
TO_MODEL_HELPER = "_toModel"
REFERENCE_METHOD = "ToModel"
MODEL_PARAMETER = "model"
DERIVED_PARAMETER = "dto"

logger = get_logger("synthesizer")


class ConversionSynthesizer:
    """Synthesizes derived-type declarations from model descriptors.

    Holds configuration only; every call builds fresh nodes.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def synthesize(self, descriptor: ModelDescriptor) -> CSharpClass:
        """
        Build the derived type for a descriptor.

        Args:
            descriptor: The analyzed model type

        Returns:
            The derived class with copied and conversion members

        Raises:
            UnresolvedConverterError: If a converted member's converter does not resolve to a name
        """
        for member in descriptor.members:
            self._check_converter(descriptor, member)

        cls = CSharpClass(
            name=descriptor.derived_name,
            keyword=descriptor.type_kind.value,
            source_model=descriptor.model_name,
        )
        if self.config.seal_derived_types and descriptor.type_kind in (TypeKind.CLASS, TypeKind.RECORD):
            cls.modifiers.append(MemberModifier.SEALED)

        cls.members.extend(self._copy_member(member) for member in descriptor.members)

        kind = descriptor.conversion_kind
        if kind == ConversionKind.NONE:
            return cls

        cls.members.append(self._to_derived_helper(descriptor))
        cls.members.append(self._to_model_helper(descriptor))

        if kind & ConversionKind.EXPLICIT:
            cls.members.extend(self._operators(descriptor, OperatorKind.EXPLICIT))
        if kind & ConversionKind.IMPLICIT:
            cls.members.extend(self._operators(descriptor, OperatorKind.IMPLICIT))
        if kind & ConversionKind.STATIC_METHODS:
            cls.members.extend(self._static_methods(descriptor))
        if kind & ConversionKind.REFERENCE_METHODS:
            cls.members.append(self._reference_method(descriptor))

        return cls

    # ------------------------------------------------------------------
    # Copied members
    # ------------------------------------------------------------------

    def _copy_member(self, member: ModelMember) -> CSharpMember:
        declaration = member.declaration
        attributes = [a.to_source() for a in declaration.attributes]
        if declaration.kind == MemberKind.FIELD:
            return CSharpField(
                name=declaration.identifier,
                type_name=declaration.type_name,
                modifiers=list(declaration.modifiers),
                attributes=attributes,
                initializer=declaration.initializer,
            )
        return CSharpProperty(
            name=declaration.identifier,
            type_name=declaration.type_name,
            modifiers=list(declaration.modifiers),
            attributes=attributes,
            accessors=list(declaration.accessors),
            expression_body=declaration.expression_body,
            initializer=declaration.initializer,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _to_derived_helper(self, descriptor: ModelDescriptor) -> CSharpMethod:
        assignments = [(m.identifier, self._to_derived_expression(m)) for m in descriptor.members if m.takes_part_in_conversion]
        return CSharpMethod(
            name=TO_DERIVED_HELPER,
            return_type=descriptor.derived_name,
            access=AccessModifier.PRIVATE,
            modifiers=[MemberModifier.STATIC],
            parameters=[CSharpParameter(name=MODEL_PARAMETER, type_name=descriptor.model_name)],
            returns=ObjectInitializer(type_name=descriptor.derived_name, assignments=assignments),
            role=MemberRole.HELPER,
        )

    def _to_model_helper(self, descriptor: ModelDescriptor) -> CSharpMethod:
        assignments = [(m.identifier, self._to_model_expression(m)) for m in descriptor.members if m.takes_part_in_conversion]
        for name in descriptor.ignored_required_names:
            logger.debug("%s.%s is required but ignored; reconstructed models get %s", descriptor.model_name, name, self.config.sentinel_value)
            assignments.append((name, self.config.sentinel_value))
        return CSharpMethod(
            name=TO_MODEL_HELPER,
            return_type=descriptor.model_name,
            access=AccessModifier.PRIVATE,
            modifiers=[MemberModifier.STATIC],
            parameters=[CSharpParameter(name=DERIVED_PARAMETER, type_name=descriptor.derived_name)],
            returns=ObjectInitializer(type_name=descriptor.model_name, assignments=assignments),
            role=MemberRole.HELPER,
        )

    def _to_derived_expression(self, member: ModelMember) -> str:
        source = f"{MODEL_PARAMETER}.{member.identifier}"
        classification = member.classification
        if isinstance(classification, DirectConversion):
            if classification.strategy == ConversionStrategy.EXPLICIT:
                return f"({classification.converted_type}){source}"
            if classification.strategy == ConversionStrategy.STATIC_METHODS:
                to_derived, _ = self._member_static_names(member.declared_type, classification.converted_type)
                return f"{classification.converted_type}.{to_derived}({source})"
            return source
        if isinstance(classification, IndirectConversion):
            return f"{classification.converter_type}.{classification.method_name}({source})"
        return source

    def _to_model_expression(self, member: ModelMember) -> str:
        source = f"{DERIVED_PARAMETER}.{member.identifier}"
        classification = member.classification
        if isinstance(classification, DirectConversion):
            if classification.strategy == ConversionStrategy.EXPLICIT:
                return f"({member.declared_type}){source}"
            if classification.strategy == ConversionStrategy.STATIC_METHODS:
                _, to_model = self._member_static_names(member.declared_type, classification.converted_type)
                return f"{classification.converted_type}.{to_model}({source})"
            return source
        if isinstance(classification, IndirectConversion):
            return f"{classification.converter_type}.{classification.method_name}({source})"
        return source

    def _member_static_names(self, declared_type: str, converted_type: str) -> tuple[str, str]:
        return static_method_names(short_type_name(declared_type), short_type_name(converted_type))

    # ------------------------------------------------------------------
    # Conversion members
    # ------------------------------------------------------------------

    def _operators(self, descriptor: ModelDescriptor, kind: OperatorKind) -> list[CSharpConversionOperator]:
        return [
            CSharpConversionOperator(
                kind=kind,
                target_type=descriptor.derived_name,
                parameter=CSharpParameter(name=MODEL_PARAMETER, type_name=descriptor.model_name),
                expression_body=f"{TO_DERIVED_HELPER}({MODEL_PARAMETER})",
            ),
            CSharpConversionOperator(
                kind=kind,
                target_type=descriptor.model_name,
                parameter=CSharpParameter(name=DERIVED_PARAMETER, type_name=descriptor.derived_name),
                expression_body=f"{TO_MODEL_HELPER}({DERIVED_PARAMETER})",
            ),
        ]

    def _static_methods(self, descriptor: ModelDescriptor) -> list[CSharpMethod]:
        to_derived, to_model = static_method_names(descriptor.model_name, descriptor.derived_name)
        return [
            CSharpMethod(
                name=to_derived,
                return_type=descriptor.derived_name,
                modifiers=[MemberModifier.STATIC],
                parameters=[CSharpParameter(name=MODEL_PARAMETER, type_name=descriptor.model_name)],
                expression_body=f"{TO_DERIVED_HELPER}({MODEL_PARAMETER})",
                role=MemberRole.STATIC_METHOD,
            ),
            CSharpMethod(
                name=to_model,
                return_type=descriptor.model_name,
                modifiers=[MemberModifier.STATIC],
                parameters=[CSharpParameter(name=DERIVED_PARAMETER, type_name=descriptor.derived_name)],
                expression_body=f"{TO_MODEL_HELPER}({DERIVED_PARAMETER})",
                role=MemberRole.STATIC_METHOD,
            ),
        ]

    def _reference_method(self, descriptor: ModelDescriptor) -> CSharpMethod:
        # Derived-to-model only: no reference method goes the other way
        return CSharpMethod(
            name=REFERENCE_METHOD,
            return_type=descriptor.model_name,
            expression_body=f"{TO_MODEL_HELPER}(this)",
            role=MemberRole.REFERENCE_METHOD,
        )

    # ------------------------------------------------------------------
    # Converter resolution
    # ------------------------------------------------------------------

    def _check_converter(self, descriptor: ModelDescriptor, member: ModelMember) -> None:
        classification = member.classification
        problem = None
        if isinstance(classification, DirectConversion):
            if not is_type_name(classification.converted_type):
                problem = f"converted type '{classification.converted_type}' is not a type name"
            elif classification.strategy == ConversionStrategy.STATIC_METHODS:
                names = self._member_static_names(member.declared_type, classification.converted_type)
                if "<" in classification.converted_type or not all(is_identifier(n) for n in names):
                    problem = f"no static conversion methods can be named for '{member.declared_type}' -> '{classification.converted_type}'"
        elif isinstance(classification, IndirectConversion):
            if not is_type_name(classification.converter_type):
                problem = f"converter type '{classification.converter_type}' is not a type name"
            elif not is_identifier(classification.method_name):
                problem = f"converter method '{classification.method_name}' is not an identifier"
            elif not is_type_name(classification.converted_type):
                problem = f"converted type '{classification.converted_type}' is not a type name"
        if problem:
            raise UnresolvedConverterError(
                f"Cannot resolve converter for '{descriptor.model_name}.{member.identifier}': {problem}",
                location=member.declaration.location,
                declaration=descriptor.model_name,
                member=member.identifier,
            )

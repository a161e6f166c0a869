"""
Model descriptor building.

Aggregates the type-level HasDTO marker and the classified members into a
single immutable description per tagged model type.
"""

from __future__ import annotations

from ..config import GeneratorConfig
from ..errors import DtoGenerationError, InvalidModelDeclarationError
from ..source_ast.nodes import SourceLocation, TypeDeclaration
from .annotations import AnnotationKind, AnnotationReader
from .classifier import MemberClassifier
from .identifiers import identifier_of, is_identifier
from .ir_nodes import ConversionKind, ModelDescriptor
from .markers import HasDtoMarker

CLASS_PLACEHOLDER = "[class]"


def derive_name(template: str, model_name: str) -> str:
    """Substitute the ``[class]`` placeholder of a derived-name template."""
    return template.replace(CLASS_PLACEHOLDER, model_name)


class ModelDescriptorBuilder:
    """Builds a ModelDescriptor from a tagged type declaration."""

    def __init__(self, reader: AnnotationReader, config: GeneratorConfig):
        self.reader = reader
        self.config = config
        self.classifier = MemberClassifier(reader)
        self.default_kind = ConversionKind.parse(config.default_conversion_kind)

    def build(self, model: TypeDeclaration) -> ModelDescriptor:
        """
        Describe a tagged model type.

        Args:
            model: Type declaration carrying a HasDTO marker

        Returns:
            The model descriptor

        Raises:
            InvalidModelDeclarationError: If the type has zero or several HasDTO markers
            DtoGenerationError: Any member-level error, attributed to the declaration
        """
        model_name = identifier_of(model)
        try:
            markers = self.reader.read(model, {AnnotationKind.HAS_DTO})
            if len(markers) != 1:
                raise InvalidModelDeclarationError(f"'{model_name}' must carry exactly one [HasDTO] marker, found {len(markers)}")
            marker = HasDtoMarker.from_payload(markers[0], self.config.default_dto_class_name, self.default_kind)
        except DtoGenerationError as e:
            e.declaration = model_name
            if e.location == SourceLocation():
                e.location = model.location
            raise

        if model.type_parameters:
            parameters = ", ".join(model.type_parameters)
            raise InvalidModelDeclarationError(
                f"Generic model '{model_name}<{parameters}>' cannot carry [HasDTO]",
                location=model.location,
                declaration=model_name,
            )

        derived_name = derive_name(marker.dto_class_name, model_name)
        if not is_identifier(derived_name) or derived_name == model_name:
            raise InvalidModelDeclarationError(
                f"Template '{marker.dto_class_name}' gives '{derived_name}' for '{model_name}', which is not a valid type name",
                location=model.location,
                declaration=model_name,
            )

        classification = self.classifier.classify(model)

        return ModelDescriptor(
            model_name=model_name,
            derived_name=derived_name,
            namespace=model.namespace,
            type_kind=model.kind,
            conversion_kind=marker.conversion_kind,
            members=classification.members,
            ignored_required_names=classification.ignored_required_names,
            imports=tuple(model.imports),
            location=model.location,
        )

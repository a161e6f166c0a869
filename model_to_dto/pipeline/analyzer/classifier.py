"""
Member classification.

Walks the members declared directly on a model type and decides, for each
one, whether it is copied as-is, dropped, or converted (directly or through
a named converter).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ...logging import get_logger
from ..errors import ConflictingConversionAnnotationsError, DtoGenerationError
from ..source_ast.nodes import MemberDeclaration, SourceLocation, TypeDeclaration
from .annotations import MEMBER_ANNOTATIONS, AnnotationKind, AnnotationReader
from .identifiers import identifier_of
from .ir_nodes import DirectConversion, IndirectConversion, MemberClassification, ModelMember, Plain
from .markers import HasConversionMarker, HasIndirectConversionMarker

# Modifiers dropped from copied members: derived types are final
STRIPPED_MODIFIERS = frozenset({"virtual", "override", "abstract", "sealed", "new"})

logger = get_logger("classifier")


@dataclass(frozen=True)
class Classification:
    """Classifier output for one model type."""

    members: tuple[ModelMember, ...]
    ignored_required_names: tuple[str, ...]


class MemberClassifier:
    """Buckets model members into plain, ignored and converted."""

    def __init__(self, reader: AnnotationReader):
        self.reader = reader

    def classify(self, model: TypeDeclaration) -> Classification:
        """
        Classify the members of a model type.

        Args:
            model: The tagged type declaration

        Returns:
            Members in source order and the names of ignored required members

        Raises:
            ConflictingConversionAnnotationsError: If a member has both conversion markers
            UnresolvedConstantError: If a marker argument is not constant
        """
        model_name = identifier_of(model)
        members: list[ModelMember] = []
        ignored_required: list[str] = []
        seen: set[str] = set()

        for member in model.members:
            name = identifier_of(member)
            if name in seen:
                logger.warning("%s: '%s.%s' is declared more than once, keeping the first declaration", member.location, model_name, name)
                continue
            seen.add(name)

            try:
                classified = self._classify_member(model_name, member)
            except DtoGenerationError as e:
                e.declaration = model_name
                e.member = e.member or name
                if e.location == SourceLocation():
                    e.location = member.location
                raise

            if classified is None:
                if member.is_required:
                    ignored_required.append(name)
                continue
            members.append(classified)

        return Classification(members=tuple(members), ignored_required_names=tuple(ignored_required))

    def _classify_member(self, model_name: str, member: MemberDeclaration) -> ModelMember | None:
        payloads = self.reader.read(member, MEMBER_ANNOTATIONS)
        by_kind: dict[AnnotationKind, list] = {}
        for payload in payloads:
            by_kind.setdefault(payload.kind, []).append(payload)

        if AnnotationKind.IGNORE in by_kind:
            return None

        conversions = by_kind.get(AnnotationKind.HAS_CONVERSION, []) + by_kind.get(AnnotationKind.HAS_INDIRECT_CONVERSION, [])
        if len(conversions) > 1:
            names = ", ".join(p.name for p in conversions)
            raise ConflictingConversionAnnotationsError(
                f"'{model_name}.{member.identifier}' carries conflicting conversion markers ({names})",
                location=member.location,
            )

        classification: MemberClassification = Plain()
        if AnnotationKind.HAS_CONVERSION in by_kind:
            marker = HasConversionMarker.from_payload(by_kind[AnnotationKind.HAS_CONVERSION][0])
            classification = DirectConversion(converted_type=marker.converted_type, strategy=marker.strategy)
        elif AnnotationKind.HAS_INDIRECT_CONVERSION in by_kind:
            marker = HasIndirectConversionMarker.from_payload(by_kind[AnnotationKind.HAS_INDIRECT_CONVERSION][0])
            classification = IndirectConversion(
                converter_type=marker.converter_type if marker.converter_type is not None else member.type_name.rstrip("?"),
                method_name=marker.method_name,
                converted_type=marker.converted_type,
                explicit_converter=marker.converter_type is not None,
            )

        return ModelMember(
            identifier=member.identifier,
            declared_type=member.type_name,
            is_required=member.is_required,
            has_mutator=member.has_mutator,
            declaration=self._copy_for_derived(member, classification),
            classification=classification,
        )

    def _copy_for_derived(self, member: MemberDeclaration, classification: MemberClassification) -> MemberDeclaration:
        """Member as declared on the derived type."""
        type_name = member.type_name
        if isinstance(classification, (DirectConversion, IndirectConversion)):
            type_name = classification.converted_type
        return replace(
            member,
            type_name=type_name,
            modifiers=[m for m in member.modifiers if m not in STRIPPED_MODIFIERS],
            attributes=[a for a in member.attributes if not self.reader.registry.is_generator_attribute(a)],
            accessors=list(member.accessors),
        )

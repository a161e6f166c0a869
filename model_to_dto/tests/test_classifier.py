"""
Tests for member classification and model descriptors.
"""

from __future__ import annotations

import pytest
from builders import attr, enum, field, lit, model, prop, typeof

from model_to_dto.pipeline.analyzer import (
    AnnotationReader,
    AnnotationRegistry,
    ConversionKind,
    ConversionStrategy,
    DirectConversion,
    IndirectConversion,
    MemberClassifier,
    ModelDescriptorBuilder,
    Plain,
    derive_name,
)
from model_to_dto.pipeline.config import GeneratorConfig
from model_to_dto.pipeline.errors import (
    ConflictingConversionAnnotationsError,
    InvalidAnnotationArgumentError,
    InvalidModelDeclarationError,
    UnresolvedConstantError,
)
from model_to_dto.pipeline.source_ast.nodes import OpaqueExpr, TypeKind


@pytest.fixture
def reader():
    return AnnotationReader(AnnotationRegistry())


@pytest.fixture
def builder(reader):
    return ModelDescriptorBuilder(reader, GeneratorConfig())


class TestMemberClassifier:
    """Bucketing members into plain, ignored and converted."""

    def test_plain_members_keep_order(self, reader):
        user = model("User", prop("Id"), prop("Name", "string"), field("Score", "double"))
        classification = MemberClassifier(reader).classify(user)
        assert [m.identifier for m in classification.members] == ["Id", "Name", "Score"]
        assert all(isinstance(m.classification, Plain) for m in classification.members)

    def test_ignored_members(self, reader):
        user = model(
            "User",
            prop("Id"),
            prop("PasswordHash", "string", attr("DTOIgnore"), required=True),
            prop("Cache", "object", attr("DTOIgnoreAttribute")),
        )
        classification = MemberClassifier(reader).classify(user)
        assert [m.identifier for m in classification.members] == ["Id"]
        assert classification.ignored_required_names == ("PasswordHash",)

    def test_ignore_wins_over_conversion_markers(self, reader):
        member = prop(
            "Home",
            "Address",
            attr("DTOIgnore"),
            attr("HasConversion", enum("HasConversionForm.Explicit"), typeof("AddressDto")),
            attr("HasIndirectConversion", lit("Convert"), typeof("AddressDto")),
        )
        classification = MemberClassifier(reader).classify(model("User", member))
        assert classification.members == ()

    def test_direct_conversion(self, reader):
        member = prop("Home", "Address", attr("HasConversion", enum("HasConversionForm.StaticMethods"), typeof("AddressDto")))
        converted = MemberClassifier(reader).classify(model("User", member)).members[0]
        assert converted.classification == DirectConversion(converted_type="AddressDto", strategy=ConversionStrategy.STATIC_METHODS)
        assert converted.declared_type == "Address"
        assert converted.declaration.type_name == "AddressDto"
        assert converted.declaration.attributes == []

    def test_indirect_conversion_defaults_converter_to_member_type(self, reader):
        member = prop("Home", "Address?", attr("HasIndirectConversion", lit("ToDto"), typeof("AddressDto")))
        converted = MemberClassifier(reader).classify(model("User", member)).members[0]
        assert converted.classification == IndirectConversion(
            converter_type="Address",
            method_name="ToDto",
            converted_type="AddressDto",
            explicit_converter=False,
        )

    def test_indirect_conversion_with_converter(self, reader):
        member = prop("Tags", "List<Tag>", attr("HasIndirectConversion", typeof("TagConverter"), lit("Convert"), typeof("List<TagDto>")))
        converted = MemberClassifier(reader).classify(model("Post", member)).members[0]
        assert converted.classification.converter_type == "TagConverter"
        assert converted.classification.explicit_converter is True

    def test_conflicting_markers(self, reader):
        member = prop(
            "Home",
            "Address",
            attr("HasConversion", enum("HasConversionForm.Explicit"), typeof("AddressDto")),
            attr("HasIndirectConversion", lit("Convert"), typeof("AddressDto")),
            line=4,
        )
        with pytest.raises(ConflictingConversionAnnotationsError) as exc_info:
            MemberClassifier(reader).classify(model("User", member))
        assert exc_info.value.declaration == "User"
        assert exc_info.value.member == "Home"
        assert exc_info.value.location.line == 4

    def test_marker_error_gets_member_location(self, reader):
        member = prop("Home", "Address", attr("HasConversion", enum("HasConversionForm.Explicit")), line=9)
        with pytest.raises(InvalidAnnotationArgumentError) as exc_info:
            MemberClassifier(reader).classify(model("User", member))
        assert exc_info.value.member == "Home"
        assert exc_info.value.location.line == 9

    def test_duplicate_member_keeps_first(self, reader):
        user = model("User", prop("Id"), prop("Id", "long"))
        members = MemberClassifier(reader).classify(user).members
        assert len(members) == 1
        assert members[0].declared_type == "int"

    def test_stripped_modifiers_and_foreign_attributes(self, reader):
        member = prop("Name", "string", attr("JsonPropertyName", lit("name")), attr("HasConversion", enum("HasConversionForm.Implicit"), typeof("string")))
        member.modifiers = ["public", "virtual", "required"]
        copied = MemberClassifier(reader).classify(model("User", member)).members[0].declaration
        assert copied.modifiers == ["public", "required"]
        assert [a.name for a in copied.attributes] == ["JsonPropertyName"]

    def test_mutator_detection(self, reader):
        user = model(
            "User",
            prop("Id", accessors=["get", "init"]),
            prop("Version", accessors=["get", "private set"]),
            prop("Computed", accessors=["get"]),
            field("Limit", modifiers=["public", "readonly"]),
            field("Count", modifiers=["public", "static"]),
        )
        members = {m.identifier: m for m in MemberClassifier(reader).classify(user).members}
        assert members["Id"].takes_part_in_conversion
        assert not members["Version"].takes_part_in_conversion
        assert not members["Computed"].takes_part_in_conversion
        assert not members["Limit"].takes_part_in_conversion
        assert not members["Count"].takes_part_in_conversion


class TestModelDescriptorBuilder:
    """Type-level descriptor building."""

    def test_defaults(self, builder):
        descriptor = builder.build(model("User", prop("Id"), imports=["System"]))
        assert descriptor.model_name == "User"
        assert descriptor.derived_name == "UserDTO"
        assert descriptor.namespace == "Shop.Models"
        assert descriptor.conversion_kind == ConversionKind.EXPLICIT
        assert descriptor.member_names == ["Id"]
        assert [i.target for i in descriptor.imports] == ["System"]

    def test_template_and_flags(self, builder):
        marker = attr("HasDTO", lit("Wire[class]"), enum("ConversionForm.Implicit"))
        descriptor = builder.build(model("Order", marker=marker, kind=TypeKind.STRUCT))
        assert descriptor.derived_name == "WireOrder"
        assert descriptor.conversion_kind == ConversionKind.IMPLICIT
        assert descriptor.type_kind == TypeKind.STRUCT

    def test_configured_defaults(self, reader):
        config = GeneratorConfig(default_dto_class_name="[class]Dto", default_conversion_kind="Implicit|StaticMethods")
        descriptor = ModelDescriptorBuilder(reader, config).build(model("Tag"))
        assert descriptor.derived_name == "TagDto"
        assert descriptor.conversion_kind == ConversionKind.IMPLICIT | ConversionKind.STATIC_METHODS

    def test_missing_marker(self, builder):
        declaration = model("User")
        declaration.attributes = []
        with pytest.raises(InvalidModelDeclarationError):
            builder.build(declaration)

    def test_several_markers(self, builder):
        declaration = model("User")
        declaration.attributes.append(attr("HasDTOAttribute", lit("[class]Other")))
        with pytest.raises(InvalidModelDeclarationError) as exc_info:
            builder.build(declaration)
        assert exc_info.value.declaration == "User"
        assert exc_info.value.location.line == 1

    def test_non_constant_marker_argument(self, builder):
        marker = attr("HasDTO", OpaqueExpr(text="Names.Get()", kind="invocation_expression"), line=3)
        with pytest.raises(UnresolvedConstantError) as exc_info:
            builder.build(model("User", marker=marker))
        assert exc_info.value.declaration == "User"
        assert exc_info.value.location.line == 3

    def test_generic_model(self, builder):
        declaration = model("Box")
        declaration.type_parameters = ["T"]
        with pytest.raises(InvalidModelDeclarationError) as exc_info:
            builder.build(declaration)
        assert "Box<T>" in exc_info.value.message

    @pytest.mark.parametrize("template", ["[class]", "", "[class] Dto", "9[class]"])
    def test_invalid_derived_name(self, builder, template):
        with pytest.raises(InvalidModelDeclarationError):
            builder.build(model("User", marker=attr("HasDTO", lit(template))))

    def test_derive_name(self):
        assert derive_name("[class]Dto", "User") == "UserDto"
        assert derive_name("Dto", "User") == "Dto"
        assert derive_name("[class]To[class]", "A") == "AToA"

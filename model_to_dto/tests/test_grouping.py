"""
Tests for namespace grouping and import aggregation.
"""

from __future__ import annotations

from builders import model, prop

from model_to_dto.pipeline.analyzer import AnnotationReader, AnnotationRegistry, ModelDescriptorBuilder
from model_to_dto.pipeline.config import GeneratorConfig
from model_to_dto.pipeline.source_ast.nodes import ImportDirective
from model_to_dto.pipeline.synthesis import ConversionSynthesizer, ImportAggregator, NamespaceGrouper, is_reserved_import


def entries(*declarations):
    config = GeneratorConfig()
    builder = ModelDescriptorBuilder(AnnotationReader(AnnotationRegistry()), config)
    synthesizer = ConversionSynthesizer(config)
    result = []
    for declaration in declarations:
        descriptor = builder.build(declaration)
        result.append((descriptor, synthesizer.synthesize(descriptor)))
    return result


class TestReservedImports:
    """Exclusion of the tool's own namespace."""

    def test_segment_aware_prefix(self):
        assert is_reserved_import(ImportDirective(target="ModelToDto"), "ModelToDto")
        assert is_reserved_import(ImportDirective(target="ModelToDto.Attributes"), "ModelToDto")
        assert is_reserved_import(ImportDirective(target="global::ModelToDto"), "ModelToDto")
        assert not is_reserved_import(ImportDirective(target="ModelToDtoExtras"), "ModelToDto")
        assert not is_reserved_import(ImportDirective(target="System"), "ModelToDto")

    def test_empty_prefix_reserves_nothing(self):
        assert not is_reserved_import(ImportDirective(target="ModelToDto"), "")


class TestImportAggregator:
    """First-seen ordered set of directives."""

    def test_dedup_keeps_first_seen_order(self):
        aggregator = ImportAggregator("ModelToDto")
        aggregator.add_all([ImportDirective(target="System"), ImportDirective(target="ModelToDto")])
        aggregator.add_all([ImportDirective(target="System.Linq"), ImportDirective(target="System")])
        assert aggregator.imports == ["using System;", "using System.Linq;"]

    def test_directive_forms_are_distinct(self):
        aggregator = ImportAggregator("ModelToDto")
        aggregator.add(ImportDirective(target="System.Math", is_static=True))
        aggregator.add(ImportDirective(target="System.Math"))
        aggregator.add(ImportDirective(target="System.Text.Json", alias="Json"))
        assert aggregator.imports == [
            "using static System.Math;",
            "using System.Math;",
            "using Json = System.Text.Json;",
        ]

    def test_global_usings_are_dropped(self):
        aggregator = ImportAggregator("ModelToDto")
        aggregator.add(ImportDirective(target="System.Text", is_global=True))
        aggregator.add(ImportDirective(target="System"))
        aggregator.add(ImportDirective(target="System.Text", alias="Text", is_global=True))
        assert aggregator.imports == ["using System;"]


class TestNamespaceGrouper:
    """One unit per namespace."""

    def test_units_in_first_seen_order(self):
        grouped, diagnostics = NamespaceGrouper("ModelToDto").group(
            entries(
                model("User", prop("Id"), namespace="Shop.Models"),
                model("Invoice", prop("Id"), namespace="Billing"),
                model("Order", prop("Id"), namespace="Shop.Models"),
            )
        )
        assert diagnostics == []
        assert [u.namespace for u in grouped] == ["Shop.Models", "Billing"]
        assert [c.name for c in grouped[0].declarations] == ["UserDTO", "OrderDTO"]

    def test_imports_are_per_unit(self):
        grouped, _ = NamespaceGrouper("ModelToDto").group(
            entries(
                model("User", namespace="A", imports=["System", "ModelToDto"]),
                model("Order", namespace="A", imports=["System.Linq", "System"]),
                model("Invoice", namespace="B", imports=["System.Text"]),
            )
        )
        assert grouped[0].imports == ["using System;", "using System.Linq;"]
        assert grouped[1].imports == ["using System.Text;"]

    def test_global_namespace_bucket(self):
        grouped, _ = NamespaceGrouper("ModelToDto", global_namespace="Generated").group(entries(model("User", namespace=None)))
        assert grouped[0].namespace == "Generated"

    def test_duplicate_derived_name(self):
        first = model("User", prop("Id"), namespace="Shop", line=3)
        second = model("User", prop("Name", "string"), namespace="Shop", line=20)
        elsewhere = model("User", prop("Id"), namespace="Admin")
        grouped, diagnostics = NamespaceGrouper("ModelToDto").group(entries(first, second, elsewhere))

        assert [u.namespace for u in grouped] == ["Shop", "Admin"]
        assert len(grouped[0].declarations) == 1
        assert grouped[0].declarations[0].members[0].name == "Id"
        assert len(diagnostics) == 1
        assert diagnostics[0].code == "DTO006"
        assert diagnostics[0].location.line == 20
        assert diagnostics[0].declaration == "User"

    def test_derived_name_clashing_with_model_type(self):
        user = model("User", prop("Id"), namespace="Shop", line=3)
        user_dto = model("UserDTO", prop("Id"), namespace="Shop", line=12)
        grouped, diagnostics = NamespaceGrouper("ModelToDto").group(entries(user, user_dto))

        assert [c.name for c in grouped[0].declarations] == ["UserDTODTO"]
        assert len(diagnostics) == 1
        assert diagnostics[0].code == "DTO006"
        assert diagnostics[0].declaration == "User"
        assert diagnostics[0].location.line == 3

    def test_model_type_in_other_namespace_does_not_clash(self):
        grouped, diagnostics = NamespaceGrouper("ModelToDto").group(
            entries(model("User", namespace="Shop"), model("UserDTO", namespace="Admin"))
        )
        assert diagnostics == []
        assert [c.name for u in grouped for c in u.declarations] == ["UserDTO", "UserDTODTO"]

"""
Namespace grouping and import aggregation.

Collects synthesized declarations into one unit per namespace, rejecting
derived-name collisions and merging the contributing declarations' using
directives.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..analyzer.ir_nodes import ModelDescriptor
from ..ast_backends.csharp_ast_nodes import CSharpClass
from ..errors import Diagnostic, DuplicateDerivedNameError
from ..source_ast.nodes import ImportDirective


@dataclass
class SynthesizedUnit:
    """All derived types sharing a namespace, with their aggregated imports."""

    namespace: str
    imports: list[str] = field(default_factory=list)
    declarations: list[CSharpClass] = field(default_factory=list)


def is_reserved_import(directive: ImportDirective, reserved_prefix: str) -> bool:
    """Whether a directive imports from the tool's own namespace.

    Matching is segment-aware: prefix ``gen`` matches ``gen`` and ``gen.X``
    but not ``genX``. A leading ``global::`` is ignored.
    """
    if not reserved_prefix:
        return False
    target = directive.target.strip()
    if target.startswith("global::"):
        target = target[len("global::") :]
    return target == reserved_prefix or target.startswith(reserved_prefix + ".")


class ImportAggregator:
    """Append-only, first-seen ordered set of using directives.

    ``global using`` directives already cover every file of the compilation
    and cannot appear inside a namespace, so they are not carried over.
    """

    def __init__(self, reserved_prefix: str):
        self.reserved_prefix = reserved_prefix
        self._seen: set[str] = set()
        self._ordered: list[str] = []

    def add_all(self, directives: tuple[ImportDirective, ...] | list[ImportDirective]) -> None:
        for directive in directives:
            self.add(directive)

    def add(self, directive: ImportDirective) -> None:
        if directive.is_global or is_reserved_import(directive, self.reserved_prefix):
            return
        text = directive.to_source()
        if text in self._seen:
            return
        self._seen.add(text)
        self._ordered.append(text)

    @property
    def imports(self) -> list[str]:
        return list(self._ordered)


class NamespaceGrouper:
    """Groups derived types by the namespace of their model type."""

    def __init__(self, reserved_prefix: str, global_namespace: str = ""):
        self.reserved_prefix = reserved_prefix
        self.global_namespace = global_namespace

    def group(self, entries: list[tuple[ModelDescriptor, CSharpClass]]) -> tuple[list[SynthesizedUnit], list[Diagnostic]]:
        """
        Group synthesized declarations into units.

        Args:
            entries: (descriptor, derived class) pairs in input order

        Returns:
            Units in first-seen namespace order, and diagnostics for derived names
            that repeat another derived name or a model type of the same namespace
        """
        units: dict[str, SynthesizedUnit] = {}
        aggregators: dict[str, ImportAggregator] = {}
        names: dict[str, dict[str, ModelDescriptor]] = {}
        diagnostics: list[Diagnostic] = []

        models: dict[str, dict[str, ModelDescriptor]] = {}
        for descriptor, _ in entries:
            models.setdefault(self._namespace_of(descriptor), {}).setdefault(descriptor.model_name, descriptor)

        for descriptor, cls in entries:
            namespace = self._namespace_of(descriptor)
            model = models[namespace].get(cls.name)
            if model is not None:
                error = DuplicateDerivedNameError(
                    f"'{descriptor.model_name}' derives '{cls.name}', which is the model type declared at {model.location} in namespace '{namespace or '<global>'}'",
                    location=descriptor.location,
                    declaration=descriptor.model_name,
                )
                diagnostics.append(Diagnostic.from_error(error))
                continue

            taken = names.setdefault(namespace, {})
            if cls.name in taken:
                first = taken[cls.name]
                error = DuplicateDerivedNameError(
                    f"'{descriptor.model_name}' derives '{cls.name}', already derived from '{first.model_name}' ({first.location}) in namespace '{namespace or '<global>'}'",
                    location=descriptor.location,
                    declaration=descriptor.model_name,
                )
                diagnostics.append(Diagnostic.from_error(error))
                continue
            taken[cls.name] = descriptor

            if namespace not in units:
                units[namespace] = SynthesizedUnit(namespace=namespace)
                aggregators[namespace] = ImportAggregator(self.reserved_prefix)
            units[namespace].declarations.append(cls)
            aggregators[namespace].add_all(descriptor.imports)

        for namespace, unit in units.items():
            unit.imports = aggregators[namespace].imports
        return list(units.values()), diagnostics

    def _namespace_of(self, descriptor: ModelDescriptor) -> str:
        return descriptor.namespace if descriptor.namespace else self.global_namespace

"""
Pipeline generator - main entry point for DTO generation.

Orchestrates the generation phases over one batch of tagged declarations:
1. Describe: read markers and classify members into a ModelDescriptor
2. Synthesize: build the derived type and its conversion members
3. Group: one unit per namespace, with aggregated using directives
4. Serialize: render the units to C# source
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from ..logging import get_logger
from .analyzer.annotations import AnnotationReader, AnnotationRegistry
from .analyzer.descriptor import ModelDescriptorBuilder
from .analyzer.identifiers import identifier_of
from .analyzer.ir_nodes import ModelDescriptor
from .ast_backends.csharp_ast_nodes import CSharpClass, CSharpFile, CSharpNamespace, UsingDirective
from .ast_backends.csharp_serializer import CSharpSerializer, render_generation_comment
from .config import GeneratorConfig
from .errors import Diagnostic, DtoGenerationError, GenerationCancelledError
from .source_ast.csharp_reader import CSharpDeclarationReader, SourceParseError, find_tagged_declarations
from .source_ast.nodes import TypeDeclaration
from .synthesis.grouping import NamespaceGrouper, SynthesizedUnit
from .synthesis.synthesizer import ConversionSynthesizer

TOOL_NAME = "model_to_dto"

logger = get_logger("generator")

# Outcome of one declaration: its synthesized type, or the diagnostic that excluded it
Outcome = tuple[ModelDescriptor, CSharpClass] | Diagnostic


@dataclass
class GenerationResult:
    """Everything a generation pass produces."""

    units: list[SynthesizedUnit] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source: str = ""
    file_name: str = ""

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)


class DtoGenerator:
    """Drives descriptor building, synthesis, grouping and rendering.

    Example:
        >>> generator = DtoGenerator(GeneratorConfig())
        >>> result = generator.run(declarations)
        >>> print(result.source)
    """

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.registry = AnnotationRegistry(self.config.extra_annotation_spellings)
        self.reader = AnnotationReader(self.registry)
        self.builder = ModelDescriptorBuilder(self.reader, self.config)
        self.synthesizer = ConversionSynthesizer(self.config)
        self.grouper = NamespaceGrouper(self.config.reserved_namespace_prefix, self.config.global_namespace)
        self.serializer = CSharpSerializer()

    def read_sources(self, paths: Iterable[Path]) -> tuple[list[TypeDeclaration], list[Diagnostic]]:
        """
        Parse C# files and keep the declarations tagged with HasDTO.

        Files that do not parse are reported as diagnostics and skipped.

        Args:
            paths: C# source files, in processing order

        Returns:
            Tagged declarations and parse diagnostics
        """
        source_reader = CSharpDeclarationReader()
        files = []
        diagnostics = []
        for path in paths:
            try:
                files.append(source_reader.read_file(path))
            except SourceParseError as e:
                logger.warning("%s: skipping unparsable file: %s", e.location, e.message)
                diagnostics.append(Diagnostic(code=e.code, message=e.message, location=e.location))
        return find_tagged_declarations(files, self.registry), diagnostics

    def run(
        self,
        declarations: Sequence[TypeDeclaration],
        cancel_event: threading.Event | None = None,
        sources: list[str] | None = None,
        command_line: str = "",
    ) -> GenerationResult:
        """
        Run one generation pass.

        Args:
            declarations: Tagged model declarations, in input order
            cancel_event: Set by the host to abandon the pass
            sources: Source names listed in the generation header
            command_line: Command line shown in the generation header

        Returns:
            Units, diagnostics and the rendered source

        Raises:
            GenerationCancelledError: If ``cancel_event`` is set during the pass
        """
        logger.info("Generating DTOs for %d tagged declaration(s)", len(declarations))

        outcomes = self._process_all(declarations, cancel_event)

        entries: list[tuple[ModelDescriptor, CSharpClass]] = []
        diagnostics: list[Diagnostic] = []
        for outcome in outcomes:
            if isinstance(outcome, Diagnostic):
                diagnostics.append(outcome)
            else:
                entries.append(outcome)

        units, duplicates = self.grouper.group(entries)
        for diagnostic in duplicates:
            logger.warning("%s: %s", diagnostic.location, diagnostic.message)
        diagnostics.extend(duplicates)

        self._check_cancelled(cancel_event)
        source = self.render(units, sources or [], command_line)

        logger.info(
            "Generated %d derived type(s) in %d namespace(s), %d diagnostic(s)",
            sum(len(unit.declarations) for unit in units),
            len(units),
            len(diagnostics),
        )
        return GenerationResult(units=units, diagnostics=diagnostics, source=source, file_name=self.config.output_file_name)

    def render(self, units: list[SynthesizedUnit], sources: list[str] | None = None, command_line: str = "") -> str:
        """Serialize units to C# source."""
        header = ""
        if self.config.add_generation_comment:
            header = render_generation_comment(TOOL_NAME, sources or [], command_line)
        file = CSharpFile(
            generation_comment=header,
            namespaces=[
                CSharpNamespace(
                    name=unit.namespace,
                    using_directives=[UsingDirective(text=text) for text in unit.imports],
                    classes=list(unit.declarations),
                )
                for unit in units
            ],
        )
        return self.serializer.serialize(file)

    def _process_all(self, declarations: Sequence[TypeDeclaration], cancel_event: threading.Event | None) -> list[Outcome]:
        def process(declaration: TypeDeclaration) -> Outcome:
            self._check_cancelled(cancel_event)
            return self._process(declaration)

        if self.config.max_workers > 1 and len(declarations) > 1:
            # map() yields in input order whatever the completion order
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                return list(executor.map(process, declarations))
        return [process(declaration) for declaration in declarations]

    def _process(self, declaration: TypeDeclaration) -> Outcome:
        name = identifier_of(declaration)
        try:
            descriptor = self.builder.build(declaration)
            cls = self.synthesizer.synthesize(descriptor)
        except DtoGenerationError as e:
            e.declaration = e.declaration or name
            logger.warning("%s: skipping '%s': %s", e.location, name, e.message)
            return Diagnostic.from_error(e)
        logger.debug("%s -> %s (%d member(s))", name, cls.name, len(cls.members))
        return descriptor, cls

    def _check_cancelled(self, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError("Generation pass cancelled")

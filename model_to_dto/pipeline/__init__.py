"""
Pipeline - declarative DTO generator for C# model types.

This module provides a multi-phase architecture for deriving DTO types and
their conversion members from annotated model declarations:

1. Phase 1 (Reader): Parse C# sources into declaration nodes
2. Phase 2 (Analyzer): Read markers and build ModelDescriptor IR
3. Phase 3 (Synthesis): Build derived types and conversion members
4. Phase 4 (Grouping): One unit per namespace with aggregated imports
5. Phase 5 (Serializer): Convert the C# AST to source code
6. Phase 6 (Output): Atomic write of the generated file
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, OutputMode
from .errors import (
    ConflictingConversionAnnotationsError,
    Diagnostic,
    DtoGenerationError,
    DuplicateDerivedNameError,
    GenerationCancelledError,
    InvalidAnnotationArgumentError,
    InvalidModelDeclarationError,
    UnresolvedConstantError,
    UnresolvedConverterError,
)
from .generator import DtoGenerator, GenerationResult
from .output import AtomicWriter, OutputWriteError

__all__ = [
    "AtomicWriter",
    "ConflictingConversionAnnotationsError",
    "Diagnostic",
    "DtoGenerationError",
    "DtoGenerator",
    "DuplicateDerivedNameError",
    "GenerationCancelledError",
    "GenerationResult",
    "GeneratorConfig",
    "InvalidAnnotationArgumentError",
    "InvalidModelDeclarationError",
    "OutputConfig",
    "OutputMode",
    "OutputWriteError",
    "UnresolvedConstantError",
    "UnresolvedConverterError",
]

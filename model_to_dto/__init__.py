"""Model to DTO Generator

A Python package for deriving DTO types and their conversion members from
annotated C# model declarations.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    Diagnostic,
    DtoGenerationError,
    DtoGenerator,
    GenerationResult,
    GeneratorConfig,
    OutputConfig,
    OutputMode,
)

__all__ = [
    "DtoGenerator",
    "GenerationResult",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "Diagnostic",
    "DtoGenerationError",
    "AtomicWriter",
]

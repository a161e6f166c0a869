"""
Synthesis module.

Builds derived-type declarations from model descriptors and groups them
into per-namespace units.
"""

from __future__ import annotations

from .grouping import ImportAggregator, NamespaceGrouper, SynthesizedUnit, is_reserved_import
from .synthesizer import ConversionSynthesizer

__all__ = [
    "ConversionSynthesizer",
    "ImportAggregator",
    "NamespaceGrouper",
    "SynthesizedUnit",
    "is_reserved_import",
]

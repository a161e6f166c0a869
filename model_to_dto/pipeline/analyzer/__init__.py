"""
Analyzer module.

Reads the generator's markers, classifies members and builds the
ModelDescriptor IR consumed by the synthesizer.
"""

from __future__ import annotations

from .annotations import AnnotationKind, AnnotationPayload, AnnotationReader, AnnotationRegistry, evaluate_constant
from .classifier import Classification, MemberClassifier
from .descriptor import ModelDescriptorBuilder, derive_name
from .identifiers import identifier_of
from .ir_nodes import (
    ConversionKind,
    ConversionStrategy,
    DirectConversion,
    IndirectConversion,
    ModelDescriptor,
    ModelMember,
    Plain,
)

__all__ = [
    "AnnotationKind",
    "AnnotationPayload",
    "AnnotationReader",
    "AnnotationRegistry",
    "Classification",
    "ConversionKind",
    "ConversionStrategy",
    "DirectConversion",
    "IndirectConversion",
    "MemberClassifier",
    "ModelDescriptor",
    "ModelDescriptorBuilder",
    "ModelMember",
    "Plain",
    "derive_name",
    "evaluate_constant",
    "identifier_of",
]

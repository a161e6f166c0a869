"""
Configuration for the DTO generator pipeline.

Every option can be given in a JSON configuration file passed to the CLI
with ``--config``; unknown keys are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to sanity-check the C# text before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for DTO generation."""

    # Derived name template used when a HasDTO marker gives none
    default_dto_class_name: str = "[class]DTO"

    # Conversion flags used when a HasDTO marker gives none ("Explicit|StaticMethods")
    default_conversion_kind: str = "Explicit"

    # Namespace prefix owned by the tool; imports into it are never emitted
    reserved_namespace_prefix: str = "ModelToDto"

    # Namespace bucket for model types declared outside any namespace
    global_namespace: str = ""

    # Fixed identifier the generated source is registered under
    output_file_name: str = "ModelToDto.g.cs"

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Value assigned to required members ignored on the DTO side
    sentinel_value: str = "default!"

    # Emit derived classes as sealed
    seal_derived_types: bool = True

    # Worker threads for descriptor building and synthesis (1 = sequential)
    max_workers: int = 1

    # Extra accepted spellings per annotation kind, e.g. {"ignore": ["NoDto"]}
    extra_annotation_spellings: dict[str, list[str]] = field(default_factory=dict)

    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "default_dto_class_name": self.default_dto_class_name,
            "default_conversion_kind": self.default_conversion_kind,
            "reserved_namespace_prefix": self.reserved_namespace_prefix,
            "global_namespace": self.global_namespace,
            "output_file_name": self.output_file_name,
            "add_generation_comment": self.add_generation_comment,
            "sentinel_value": self.sentinel_value,
            "seal_derived_types": self.seal_derived_types,
            "max_workers": self.max_workers,
            "extra_annotation_spellings": self.extra_annotation_spellings,
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }

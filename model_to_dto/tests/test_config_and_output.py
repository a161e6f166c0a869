"""
Tests for configuration loading and atomic output writing.
"""

from __future__ import annotations

import logging

import pytest

from model_to_dto.logging import configure_logging, get_logger
from model_to_dto.pipeline.analyzer.ir_nodes import ConversionKind
from model_to_dto.pipeline.config import GeneratorConfig, OutputMode
from model_to_dto.pipeline.output import AtomicWriter, OutputWriteError, strip_literals_and_comments


class TestGeneratorConfig:
    """Dictionary round trip and defaults."""

    def test_defaults(self):
        config = GeneratorConfig()
        assert config.default_dto_class_name == "[class]DTO"
        assert ConversionKind.parse(config.default_conversion_kind) == ConversionKind.EXPLICIT
        assert config.output_file_name == "ModelToDto.g.cs"
        assert config.output.mode == OutputMode.ERROR_IF_EXISTS

    def test_from_dict(self):
        config = GeneratorConfig.from_dict(
            {
                "default_dto_class_name": "[class]Dto",
                "max_workers": 4,
                "extra_annotation_spellings": {"ignore": ["NoDto"]},
                "output": {"mode": "force", "atomic_write": False},
                "unknown_key": True,
            }
        )
        assert config.default_dto_class_name == "[class]Dto"
        assert config.max_workers == 4
        assert config.extra_annotation_spellings == {"ignore": ["NoDto"]}
        assert config.output.mode == OutputMode.FORCE
        assert config.output.atomic_write is False
        assert config.output.validate_before_write is True

    def test_round_trip(self):
        config = GeneratorConfig(sentinel_value="null!", seal_derived_types=False)
        assert GeneratorConfig.from_dict(config.to_dict()) == config

    def test_conversion_kind_parsing(self):
        assert ConversionKind.parse("Explicit | static_methods") == ConversionKind.EXPLICIT | ConversionKind.STATIC_METHODS
        assert ConversionKind.parse("None") == ConversionKind.NONE
        with pytest.raises(ValueError):
            ConversionKind.parse("Sometimes")


class TestAtomicWriter:
    """Validated, atomic writes."""

    def test_write_creates_parents(self, tmp_path):
        target = tmp_path / "nested" / "ModelToDto.g.cs"
        AtomicWriter().write(target, "public class A\n{\n}\n")
        assert target.read_text() == "public class A\n{\n}\n"
        assert [p.name for p in target.parent.iterdir()] == ["ModelToDto.g.cs"]

    def test_invalid_content_is_not_written(self, tmp_path):
        target = tmp_path / "ModelToDto.g.cs"
        target.write_text("old\n")
        with pytest.raises(OutputWriteError):
            AtomicWriter().write(target, "public class A\n{\n")
        assert target.read_text() == "old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["ModelToDto.g.cs"]

    def test_validation_can_be_skipped(self, tmp_path):
        target = tmp_path / "ModelToDto.g.cs"
        AtomicWriter().write(target, "{", validate=False)
        assert target.read_text() == "{"

    def test_write_if_not_exists(self, tmp_path):
        target = tmp_path / "ModelToDto.g.cs"
        assert AtomicWriter().write_if_not_exists(target, "// empty\n")
        with pytest.raises(FileExistsError):
            AtomicWriter().write_if_not_exists(target, "// again\n")

    def test_braces_in_literals_and_comments_are_ignored(self, tmp_path):
        content = 'public class A\n{\n    public string S { get; set; } = "{";\n    // }\n    public char C = \'}\';\n}\n'
        AtomicWriter().write(tmp_path / "A.cs", content)
        assert strip_literals_and_comments('x = "{"; // }').count("{") == 0

    def test_custom_validator(self, tmp_path):
        def reject(content: str) -> None:
            raise OutputWriteError("rejected")

        with pytest.raises(OutputWriteError, match="rejected"):
            AtomicWriter(validate_csharp=reject).write(tmp_path / "A.cs", "")


class TestLogging:
    """Logger hierarchy."""

    def test_get_logger_names(self):
        assert get_logger().name == "model_to_dto"
        assert get_logger("generator").name == "model_to_dto.generator"

    def test_configure_logging_levels(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = configure_logging(verbose=True, log_file=log_file)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logger = configure_logging()
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        for handler in logger.handlers:
            handler.close()

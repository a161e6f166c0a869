#!/usr/bin/env python3

import json
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from model_to_dto.cli_utils import collect_source_files, reconstruct_command_line
from model_to_dto.model_to_dto import model_to_dto

MODELS_DIR = Path(__file__).parent / "test_data" / "models"


@pytest.fixture
def sources(tmp_path):
    """Copy of the parsable fixtures."""
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    for name in ("Users.cs", "Billing.cs"):
        shutil.copy(MODELS_DIR / name, source_dir / name)
    return source_dir


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Without an active Click context the bare command name is returned"""
        assert reconstruct_command_line(model_to_dto) == "model_to_dto"

    def test_collect_source_files(self, sources, tmp_path):
        output = sources / "ModelToDto.g.cs"
        output.write_text("// previous run\n")
        files = collect_source_files([sources, sources / "Users.cs"], output)
        assert [f.name for f in files] == ["Billing.cs", "Users.cs"]


class TestCli:
    """End-to-end runs of the model_to_dto command"""

    def test_generates_output(self, sources, tmp_path):
        output = tmp_path / "out" / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, [str(sources), str(output)])
        assert result.exit_code == 0, result.output

        generated = output.read_text()
        assert generated.startswith("// <auto-generated>")
        assert "//     Source: Billing.cs" in generated
        assert "public sealed class UserDto" in generated
        assert "public sealed record WirePost" in generated
        assert "public struct MoneyDTO" in generated
        assert "public record struct RateDto" in generated
        assert "namespace Shop.Models.Content" in generated
        assert "using ModelToDto;" not in generated
        assert "global using" not in generated
        assert "class InvoiceDTO" not in generated

    def test_reports_diagnostics(self, sources, tmp_path):
        output = tmp_path / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, [str(sources), str(output)])
        assert "error DTO001" in result.output
        assert "Billing.cs:18:" in result.output

    def test_fail_on_error(self, sources, tmp_path):
        output = tmp_path / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, ["--fail-on-error", str(sources), str(output)])
        assert result.exit_code == 1
        assert output.exists()

    def test_unparsable_file_is_reported(self, sources, tmp_path):
        shutil.copy(MODELS_DIR / "Broken.cs", sources / "Broken.cs")
        output = tmp_path / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, [str(sources), str(output)])
        assert result.exit_code == 0
        assert "error DTO100" in result.output
        assert "class UserDto" in output.read_text()

    def test_existing_output_requires_force(self, sources, tmp_path):
        output = tmp_path / "ModelToDto.g.cs"
        output.write_text("// keep me\n")
        result = CliRunner().invoke(model_to_dto, [str(sources), str(output)])
        assert result.exit_code != 0
        assert "already exists" in result.output
        assert output.read_text() == "// keep me\n"

        result = CliRunner().invoke(model_to_dto, ["--force", str(sources), str(output)])
        assert result.exit_code == 0
        assert "class UserDto" in output.read_text()

    def test_output_directory(self, sources, tmp_path):
        out_dir = tmp_path / "generated"
        out_dir.mkdir()
        result = CliRunner().invoke(model_to_dto, [str(sources), str(out_dir)])
        assert result.exit_code == 0
        assert (out_dir / "ModelToDto.g.cs").exists()

    def test_config_file(self, sources, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"default_dto_class_name": "[class]Transfer", "add_generation_comment": False}))
        output = tmp_path / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, ["--config", str(config), str(sources), str(output)])
        assert result.exit_code == 0
        generated = output.read_text()
        assert "public struct MoneyTransfer" in generated
        assert not generated.startswith("//")

    @pytest.mark.parametrize(
        "settings",
        [
            {"default_conversion_kind": "Explict"},
            {"extra_annotation_spellings": {"skip": ["NoDto"]}},
        ],
    )
    def test_invalid_config_file(self, sources, tmp_path, settings):
        config = tmp_path / "config.json"
        config.write_text(json.dumps(settings))
        output = tmp_path / "ModelToDto.g.cs"
        result = CliRunner().invoke(model_to_dto, ["--config", str(config), str(sources), str(output)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, ValueError)
        assert not output.exists()

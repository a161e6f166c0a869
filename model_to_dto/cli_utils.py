"""
CLI utilities for command line reconstruction and source discovery.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import click

COMMAND_NAME = "model_to_dto"
SOURCE_SUFFIX = ".cs"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        return COMMAND_NAME

    if not cli_args:
        return COMMAND_NAME

    arguments = []
    options = []

    for param in click_command.params:
        value = cli_args.get(param.name)
        if not value:
            continue

        values = value if isinstance(value, (tuple, list)) else [value]
        # File paths are shown by name only
        formatted = [Path(str(v)).name if isinstance(v, (str, Path)) and Path(str(v)).exists() else str(v) for v in values]

        if isinstance(param, click.Argument):
            arguments.extend(formatted)
        elif isinstance(param, click.Option):
            if value == param.default:
                continue
            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, *formatted])

    return " ".join([COMMAND_NAME, *arguments, *options])


def collect_source_files(paths: Iterable[str | Path], output: Path | None = None) -> list[Path]:
    """
    Expand the SOURCES arguments into C# files.

    Directories are walked recursively and their files sorted so runs are
    reproducible; the output file itself is never read back as a source.

    Args:
        paths: Files and directories given on the command line
        output: Output file to exclude

    Returns:
        Source files, first-seen order, without duplicates
    """
    excluded = output.resolve() if output is not None else None
    files: list[Path] = []
    seen: set[Path] = set()
    for path in map(Path, paths):
        candidates = sorted(path.rglob(f"*{SOURCE_SUFFIX}")) if path.is_dir() else [path]
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in seen or resolved == excluded:
                continue
            seen.add(resolved)
            files.append(candidate)
    return files

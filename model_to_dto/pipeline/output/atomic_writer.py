"""
Atomic file writer for generated sources.

Ensures that file writes are atomic so an interrupted generation never
leaves a half-written output file behind.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path


class OutputWriteError(Exception):
    """Generated content failed validation and was not written."""


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate_csharp: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_csharp: Optional validation function for C# code
        """
        self._validate_csharp = validate_csharp or self._default_validate_csharp

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            OutputWriteError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory keeps the final rename on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate_csharp(content)

            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def write_if_not_exists(self, path: Path, content: str, validate: bool = True) -> bool:
        """Write content only if the file doesn't exist.

        Raises:
            FileExistsError: If the file already exists
            OutputWriteError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use --force to overwrite.")

        self.write(path, content, validate)
        return True

    def _default_validate_csharp(self, content: str) -> None:
        """Structural check: braces balance outside string, char literals and comments.

        Raises:
            OutputWriteError: If validation fails
        """
        depth = 0
        for line_number, line in enumerate(strip_literals_and_comments(content).splitlines(), start=1):
            for char in line:
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth < 0:
                        raise OutputWriteError(f"Generated C# code closes an unopened brace at line {line_number}")
        if depth != 0:
            raise OutputWriteError(f"Generated C# code has unbalanced braces: {depth} left open")


def strip_literals_and_comments(content: str) -> str:
    """Blank out comments and the bodies of string and char literals, keeping line breaks."""
    out = []
    i = 0
    n = len(content)
    while i < n:
        char = content[i]
        if content.startswith("//", i):
            end = content.find("\n", i)
            i = n if end == -1 else end
            continue
        if content.startswith("/*", i):
            end = content.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append("\n" * content.count("\n", i, end))
            i = end
            continue
        if content.startswith('@"', i) or content.startswith('$@"', i) or content.startswith('@$"', i):
            start = content.index('"', i) + 1
            j = start
            while j < n:
                if content[j] == '"':
                    if content.startswith('""', j):
                        j += 2
                        continue
                    break
                j += 1
            out.append('""' + "\n" * content.count("\n", start, j))
            i = j + 1
            continue
        if char in "\"'":
            j = i + 1
            while j < n and content[j] != char and content[j] != "\n":
                j += 2 if content[j] == "\\" else 1
            out.append(char * 2)
            i = j + 1 if j < n and content[j] == char else j
            continue
        out.append(char)
        i += 1
    return "".join(out)

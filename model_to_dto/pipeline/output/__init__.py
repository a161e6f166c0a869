"""
Output module.

Atomic writing of the generated source file.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, OutputWriteError, strip_literals_and_comments

__all__ = ["AtomicWriter", "OutputWriteError", "strip_literals_and_comments"]

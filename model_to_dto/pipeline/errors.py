"""
Errors and diagnostics for DTO generation.

Every error raised by the analyzer and the synthesizer is scoped to one
model declaration (and possibly one member of it). The generator turns
them into :class:`Diagnostic` records and carries on with the rest of the
batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .source_ast.nodes import SourceLocation


class DtoGenerationError(Exception):
    """Base class for declaration-scoped generation errors.

    Attributes:
        location: Source position of the offending node
        declaration: Name of the model type being processed
        member: Name of the offending member, if the error is member-scoped
    """

    code = "DTO000"

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
        declaration: str | None = None,
        member: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.location = location or SourceLocation()
        self.declaration = declaration
        self.member = member


class UnresolvedConstantError(DtoGenerationError):
    """An annotation argument cannot be reduced to a compile-time constant."""

    code = "DTO001"


class InvalidAnnotationArgumentError(UnresolvedConstantError):
    """An annotation payload is malformed.

    Raised for null positional values, unknown or duplicated argument names,
    surplus positional arguments, missing required arguments and values of
    the wrong type.
    """

    code = "DTO002"


class InvalidModelDeclarationError(DtoGenerationError):
    """A tagged type carries zero or several HasDTO markers, or a bad name template."""

    code = "DTO003"


class ConflictingConversionAnnotationsError(DtoGenerationError):
    """A member carries both HasConversion and HasIndirectConversion."""

    code = "DTO004"


class UnresolvedConverterError(DtoGenerationError):
    """A converted member's converter reference does not resolve to a name."""

    code = "DTO005"


class DuplicateDerivedNameError(DtoGenerationError):
    """Two model types produce the same derived name in one namespace."""

    code = "DTO006"


class GenerationCancelledError(Exception):
    """The host signalled cancellation during a generation pass."""


class Severity(str, Enum):
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A user-visible report attributable to a declaration's location."""

    code: str
    message: str
    location: SourceLocation
    severity: Severity = Severity.ERROR
    declaration: str | None = None
    member: str | None = None

    @staticmethod
    def from_error(error: DtoGenerationError) -> Diagnostic:
        return Diagnostic(
            code=error.code,
            message=error.message,
            location=error.location,
            declaration=error.declaration,
            member=error.member,
        )

    def format(self) -> str:
        """Format in the usual ``path:line:col: error CODE: message`` shape."""
        return f"{self.location}: {self.severity.value} {self.code}: {self.message}"

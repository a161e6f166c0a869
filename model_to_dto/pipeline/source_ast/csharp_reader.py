"""
C# declaration reader.

Uses tree-sitter and tree-sitter-c-sharp to turn C# source files into the
declaration nodes consumed by the analyzer. Only what the generator needs is
read: using directives, namespaces, classes, structs and records with their
attributes, modifiers, fields and properties. Method bodies and other
members are skipped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tree_sitter_c_sharp as ts_csharp
from tree_sitter import Language, Parser

from .nodes import (
    AttributeArgument,
    AttributeNode,
    BinaryExpr,
    CastExpr,
    Expression,
    ImportDirective,
    LiteralExpr,
    MemberAccessExpr,
    MemberDeclaration,
    MemberKind,
    NameOfExpr,
    OpaqueExpr,
    SourceFile,
    SourceLocation,
    TypeDeclaration,
    TypeKind,
    TypeOfExpr,
    UnaryExpr,
)

if TYPE_CHECKING:
    from ..analyzer.annotations import AnnotationRegistry


TYPE_DECLARATIONS = {
    "class_declaration": TypeKind.CLASS,
    "struct_declaration": TypeKind.STRUCT,
    "record_declaration": TypeKind.RECORD,
    "record_struct_declaration": TypeKind.RECORD_STRUCT,
}

MODIFIER_KEYWORDS = frozenset(
    {
        "abstract",
        "const",
        "extern",
        "file",
        "internal",
        "new",
        "override",
        "partial",
        "private",
        "protected",
        "public",
        "readonly",
        "required",
        "sealed",
        "static",
        "unsafe",
        "virtual",
        "volatile",
    }
)

NAME_EXPRESSIONS = frozenset({"identifier", "member_access_expression", "qualified_name", "alias_qualified_name"})

USING_PATTERN = re.compile(r"^(?P<global>global\s+)?using\s+(?P<static>static\s+)?(?:(?P<alias>@?\w+)\s*=\s*)?(?P<target>[^;]+?)\s*;$", re.DOTALL)

ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{1,4}|.)", re.DOTALL)

SIMPLE_ESCAPES = {
    "'": "'",
    '"': '"',
    "\\": "\\",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


class SourceParseError(Exception):
    """A C# source file could not be parsed.

    Attributes:
        location: Position of the first syntax error
    """

    code = "DTO100"

    def __init__(self, message: str, location: SourceLocation | None = None):
        super().__init__(message)
        self.message = message
        self.location = location or SourceLocation()


def unescape_csharp(text: str) -> str:
    """Resolve the escape sequences of a regular C# string or char literal body."""

    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape[0] in "uUx" and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return SIMPLE_ESCAPES.get(escape, escape)

    return ESCAPE_PATTERN.sub(replace, text)


def parse_string_literal(text: str) -> str:
    """Value of a string literal in any of its regular, verbatim or raw forms."""
    if text.startswith('"""'):
        quotes = len(text) - len(text.lstrip('"'))
        body = text[quotes:-quotes]
        if "\n" in body:
            lines = body.split("\n")[1:-1]
            indent = min((len(line) - len(line.lstrip()) for line in lines if line.strip()), default=0)
            return "\n".join(line[indent:] for line in lines)
        return body
    if text.startswith('@"'):
        return text[2:-1].replace('""', '"')
    return unescape_csharp(text[1:-1])


def parse_integer_literal(text: str) -> int:
    """Value of an integer literal (decimal, hex or binary, any suffix)."""
    digits = text.lower().replace("_", "").rstrip("ul")
    if digits.startswith(("0x", "0b")):
        return int(digits, 0)
    return int(digits, 10)


def parse_real_literal(text: str) -> float:
    return float(text.lower().replace("_", "").rstrip("fdm"))


class CSharpDeclarationReader:
    """Reads model declarations from C# source using tree-sitter."""

    def __init__(self):
        self._parser = Parser(Language(ts_csharp.language()))

    def read_file(self, path: Path | str) -> SourceFile:
        """Parse a C# file from disk."""
        path = Path(path)
        return self.read(path.read_text(encoding="utf-8"), str(path))

    def read(self, code: str, path: str = "") -> SourceFile:
        """
        Parse C# source code into declaration nodes.

        Args:
            code: C# source code
            path: Path reported in source locations

        Returns:
            The parsed source file

        Raises:
            SourceParseError: If the code contains syntax errors
        """
        source = bytes(code, "utf8")
        tree = self._parser.parse(source)
        root = tree.root_node

        if root.has_error:
            errors = self._find_errors(root)
            if errors:
                first = errors[0]
                snippet = self._text(first, source)[:50]
                raise SourceParseError(
                    f"Failed to parse C# code: syntax error near '{snippet}'",
                    self._location(first, path),
                )

        imports = [directive for directive in (self._read_using(node, source) for node in self._find_nodes(root, "using_directive")) if directive]
        result = SourceFile(path=path, imports=imports)
        self._collect_types(root, None, source, path, result)
        return result

    # ------------------------------------------------------------------
    # Tree helpers
    # ------------------------------------------------------------------

    def _find_errors(self, node: Any) -> list[Any]:
        """Find all ERROR and missing nodes in the tree."""
        errors = []
        if node.type == "ERROR" or node.is_missing:
            errors.append(node)
        for child in node.children:
            errors.extend(self._find_errors(child))
        return errors

    def _find_nodes(self, node: Any, node_type: str) -> list[Any]:
        """Find all nodes of a given type in the tree."""
        results = []
        if node.type == node_type:
            results.append(node)
        for child in node.children:
            results.extend(self._find_nodes(child, node_type))
        return results

    def _text(self, node: Any, source: bytes) -> str:
        """Get the source text for a node."""
        return source[node.start_byte : node.end_byte].decode("utf8")

    def _location(self, node: Any, path: str) -> SourceLocation:
        row, column = node.start_point
        return SourceLocation(path=path, line=row + 1, column=column + 1)

    def _named_children(self, node: Any) -> list[Any]:
        return [child for child in node.children if child.is_named]

    def _modifiers(self, node: Any, source: bytes) -> list[str]:
        modifiers = []
        for child in node.children:
            text = self._text(child, source)
            if child.type == "modifier" or (not child.is_named and text in MODIFIER_KEYWORDS):
                modifiers.append(text)
        return modifiers

    # ------------------------------------------------------------------
    # Namespaces and types
    # ------------------------------------------------------------------

    def _read_using(self, node: Any, source: bytes) -> ImportDirective | None:
        match = USING_PATTERN.match(" ".join(self._text(node, source).split()))
        if match is None:
            return None
        return ImportDirective(
            target=match.group("target"),
            alias=match.group("alias"),
            is_static=bool(match.group("static")),
            is_global=bool(match.group("global")),
        )

    def _collect_types(self, node: Any, namespace: str | None, source: bytes, path: str, result: SourceFile) -> None:
        for child in node.children:
            if child.type == "namespace_declaration":
                body = child.child_by_field_name("body")
                if body is not None:
                    self._collect_types(body, self._join_namespace(namespace, child, source), source, path, result)
            elif child.type == "file_scoped_namespace_declaration":
                # Applies to every following declaration of the file
                namespace = self._join_namespace(namespace, child, source)
                self._collect_types(child, namespace, source, path, result)
            elif child.type in TYPE_DECLARATIONS:
                result.types.append(self._read_type(child, namespace, source, path, result.imports))

    def _type_parameters(self, node: Any, source: bytes) -> list[str]:
        parameter_list = node.child_by_field_name("type_parameters")
        if parameter_list is None:
            parameter_list = next((c for c in node.children if c.type == "type_parameter_list"), None)
        if parameter_list is None:
            return []
        names = []
        for parameter in parameter_list.named_children:
            if parameter.type != "type_parameter":
                continue
            name_node = parameter.child_by_field_name("name")
            if name_node is None:
                name_node = next(c for c in reversed(parameter.named_children) if c.type == "identifier")
            names.append(self._text(name_node, source))
        return names

    def _join_namespace(self, outer: str | None, node: Any, source: bytes) -> str:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            name_node = next(c for c in node.children if c.type in ("identifier", "qualified_name"))
        name = "".join(self._text(name_node, source).split())
        return f"{outer}.{name}" if outer else name

    def _read_type(self, node: Any, namespace: str | None, source: bytes, path: str, imports: list[ImportDirective]) -> TypeDeclaration:
        kind = TYPE_DECLARATIONS[node.type]
        if kind == TypeKind.RECORD and any(not c.is_named and self._text(c, source) == "struct" for c in node.children):
            kind = TypeKind.RECORD_STRUCT

        name_node = node.child_by_field_name("name")
        declaration = TypeDeclaration(
            kind=kind,
            identifier=self._text(name_node, source) if name_node is not None else "",
            modifiers=self._modifiers(node, source),
            attributes=self._read_attributes(node, source, path),
            type_parameters=self._type_parameters(node, source),
            namespace=namespace,
            imports=list(imports),
            location=self._location(name_node if name_node is not None else node, path),
        )

        body = node.child_by_field_name("body")
        if body is None:
            body = next((c for c in node.children if c.type == "declaration_list"), None)
        if body is None:
            return declaration

        for member in body.children:
            if member.type == "field_declaration":
                declaration.members.extend(self._read_fields(member, source, path))
            elif member.type == "property_declaration":
                declaration.members.append(self._read_property(member, source, path))
        return declaration

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def _read_fields(self, node: Any, source: bytes, path: str) -> list[MemberDeclaration]:
        """Read a field declaration, one node per declared variable."""
        variables = next((c for c in node.children if c.type == "variable_declaration"), None)
        if variables is None:
            return []
        type_node = variables.child_by_field_name("type")
        type_name = self._text(type_node, source) if type_node is not None else ""
        modifiers = self._modifiers(node, source)
        attributes = self._read_attributes(node, source, path)

        members = []
        for declarator in variables.children:
            if declarator.type != "variable_declarator":
                continue
            text = self._text(declarator, source)
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                name_node = next((c for c in declarator.children if c.type == "identifier"), None)
            name = self._text(name_node, source) if name_node is not None else text.split("=", 1)[0].strip()
            initializer = text.split("=", 1)[1].strip() if "=" in text else None
            members.append(
                MemberDeclaration(
                    kind=MemberKind.FIELD,
                    identifier=name,
                    type_name=type_name,
                    modifiers=list(modifiers),
                    attributes=list(attributes),
                    initializer=initializer,
                    location=self._location(declarator, path),
                )
            )
        return members

    def _read_property(self, node: Any, source: bytes, path: str) -> MemberDeclaration:
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        member = MemberDeclaration(
            kind=MemberKind.PROPERTY,
            identifier=self._text(name_node, source) if name_node is not None else "",
            type_name=self._text(type_node, source) if type_node is not None else "",
            modifiers=self._modifiers(node, source),
            attributes=self._read_attributes(node, source, path),
            location=self._location(name_node if name_node is not None else node, path),
        )

        children = node.children
        for index, child in enumerate(children):
            if child.type == "accessor_list":
                member.accessors = [self._read_accessor(a, source) for a in child.children if a.type == "accessor_declaration"]
            elif child.type == "arrow_expression_clause":
                member.expression_body = self._text(child, source).split("=>", 1)[1].strip()
            elif child.type == "equals_value_clause":
                member.initializer = self._text(child, source).split("=", 1)[1].strip()
            elif not child.is_named and self._text(child, source) == "=" and index + 1 < len(children):
                member.initializer = self._text(children[index + 1], source)
        return member

    def _read_accessor(self, node: Any, source: bytes) -> str:
        """``private set { ... }`` -> ``private set``."""
        tokens = []
        for child in node.children:
            if child.type == "attribute_list":
                continue
            if child.type in ("block", "arrow_expression_clause", ";"):
                break
            tokens.append(self._text(child, source))
        return " ".join(tokens)

    # ------------------------------------------------------------------
    # Attributes and argument expressions
    # ------------------------------------------------------------------

    def _read_attributes(self, node: Any, source: bytes, path: str) -> list[AttributeNode]:
        attributes = []
        for attribute_list in node.children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.children:
                if attribute.type == "attribute":
                    attributes.append(self._read_attribute(attribute, source, path))
        return attributes

    def _read_attribute(self, node: Any, source: bytes, path: str) -> AttributeNode:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            name_node = self._named_children(node)[0]
        attribute = AttributeNode(
            name="".join(self._text(name_node, source).split()),
            location=self._location(node, path),
            text=self._text(node, source),
        )
        argument_list = next((c for c in node.children if c.type == "attribute_argument_list"), None)
        if argument_list is not None:
            for argument in argument_list.children:
                if argument.type == "attribute_argument":
                    attribute.arguments.append(self._read_argument(argument, source))
        return attribute

    def _read_argument(self, node: Any, source: bytes) -> AttributeArgument:
        named = self._named_children(node)
        expression_node = named[-1]
        argument = AttributeArgument(expression=self._read_expression(expression_node, source))

        for child in named[:-1]:
            if child.type in ("name_equals", "name_colon"):
                identifier = next(c for c in child.children if c.is_named)
                argument.name = self._text(identifier, source)
                argument.is_property_assignment = child.type == "name_equals"
                return argument

        name_node = node.child_by_field_name("name")
        if name_node is None and len(named) == 2 and named[0].type == "identifier":
            name_node = named[0]
        if name_node is not None and name_node != expression_node:
            argument.name = self._text(name_node, source)
            separator = next((c for c in node.children if not c.is_named and self._text(c, source) in ("=", ":")), None)
            argument.is_property_assignment = separator is not None and self._text(separator, source) == "="
        return argument

    def _read_expression(self, node: Any, source: bytes) -> Expression:
        """Convert an argument expression; unknown shapes become OpaqueExpr."""
        text = self._text(node, source)
        kind = node.type

        if kind in ("string_literal", "verbatim_string_literal", "raw_string_literal"):
            return LiteralExpr(text=text, value=parse_string_literal(text))
        if kind == "integer_literal":
            return LiteralExpr(text=text, value=parse_integer_literal(text))
        if kind == "real_literal":
            return LiteralExpr(text=text, value=parse_real_literal(text))
        if kind == "boolean_literal":
            return LiteralExpr(text=text, value=text == "true")
        if kind == "null_literal":
            return LiteralExpr(text=text, value=None)
        if kind == "character_literal":
            return LiteralExpr(text=text, value=unescape_csharp(text[1:-1]))

        if kind in NAME_EXPRESSIONS:
            return MemberAccessExpr(text=text, path="".join(text.split()))

        if kind == "typeof_expression":
            type_node = node.child_by_field_name("type")
            if type_node is None:
                type_node = self._named_children(node)[0]
            return TypeOfExpr(text=text, type_name=" ".join(self._text(type_node, source).split()))

        if kind == "invocation_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is not None and self._text(function, source) == "nameof" and arguments is not None:
                targets = [c for c in arguments.children if c.type == "argument"]
                if len(targets) == 1:
                    return NameOfExpr(text=text, target="".join(self._text(targets[0], source).split()))
            return OpaqueExpr(text=text, kind=kind)

        if kind == "parenthesized_expression":
            inner = self._named_children(node)
            if len(inner) == 1:
                return self._read_expression(inner[0], source)
            return OpaqueExpr(text=text, kind=kind)

        if kind == "binary_expression":
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            operator = node.child_by_field_name("operator")
            if operator is None:
                operator = next((c for c in node.children if not c.is_named), None)
            if left is None or right is None or operator is None:
                return OpaqueExpr(text=text, kind=kind)
            return BinaryExpr(
                text=text,
                operator=self._text(operator, source),
                left=self._read_expression(left, source),
                right=self._read_expression(right, source),
            )

        if kind == "prefix_unary_expression":
            operands = self._named_children(node)
            operator = next((c for c in node.children if not c.is_named), None)
            if len(operands) != 1 or operator is None:
                return OpaqueExpr(text=text, kind=kind)
            return UnaryExpr(text=text, operator=self._text(operator, source), operand=self._read_expression(operands[0], source))

        if kind == "cast_expression":
            type_node = node.child_by_field_name("type")
            value_node = node.child_by_field_name("value")
            if type_node is None or value_node is None:
                return OpaqueExpr(text=text, kind=kind)
            return CastExpr(
                text=text,
                type_name="".join(self._text(type_node, source).split()),
                operand=self._read_expression(value_node, source),
            )

        return OpaqueExpr(text=text, kind=kind)


def find_tagged_declarations(files: Iterable[SourceFile], registry: AnnotationRegistry) -> list[TypeDeclaration]:
    """
    Discovery step: keep the types carrying a HasDTO marker spelling.

    Args:
        files: Parsed source files, in the order they should be processed
        registry: Accepted marker spellings

    Returns:
        Tagged type declarations in file order, then source order
    """
    from ..analyzer.annotations import AnnotationKind

    tagged = []
    for source_file in files:
        for declaration in source_file.types:
            if any(registry.kind_of(attribute.name) == AnnotationKind.HAS_DTO for attribute in declaration.attributes):
                tagged.append(declaration)
    return tagged

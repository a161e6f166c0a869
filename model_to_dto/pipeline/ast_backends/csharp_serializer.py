"""
C# AST Serializer.

Converts synthesized C# AST nodes to properly-formatted C# source code.
Follows C# style guidelines:
- Braces on new lines (Allman style)
- 4-space indentation
- Blank line between members
- Attributes on separate lines above declarations

The global namespace is written first (its using directives open the file),
then one block-scoped namespace per unit with its using directives inside.
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from .csharp_ast_nodes import (
    CSharpClass,
    CSharpConversionOperator,
    CSharpField,
    CSharpFile,
    CSharpMember,
    CSharpMethod,
    CSharpNamespace,
    CSharpProperty,
    ObjectInitializer,
)

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates"


def render_generation_comment(tool: str, sources: list[str], command_line: str = "") -> str:
    """Render the auto-generated header from the prefix template."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
    )
    template = env.get_template("prefix.cs.jinja2")
    return template.render(tool=tool, sources=sources, command_line=command_line)


class CSharpSerializer:
    """Serializes C# AST nodes to source code."""

    INDENT = "    "  # 4 spaces

    def serialize(self, file: CSharpFile) -> str:
        """Serialize a complete C# file to source code."""
        lines: list[str] = []

        # Generation comment
        if file.generation_comment:
            lines.append(file.generation_comment)
            lines.append("")

        global_namespaces = [ns for ns in file.namespaces if not ns.name]
        named_namespaces = [ns for ns in file.namespaces if ns.name]

        for namespace in global_namespaces:
            lines.extend(self._serialize_usings(namespace))
            for cls in namespace.classes:
                lines.extend(self._serialize_class(cls))

        for namespace in named_namespaces:
            lines.extend(self._serialize_namespace(namespace))

        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"

    def _indent_lines(self, lines: list[str], level: int) -> list[str]:
        """Add indentation to a list of lines."""
        if level == 0:
            return lines
        prefix = self.INDENT * level
        return [prefix + line if line.strip() else line for line in lines]

    def _serialize_usings(self, namespace: CSharpNamespace) -> list[str]:
        lines = [using.text for using in namespace.using_directives]
        if lines:
            lines.append("")
        return lines

    def _serialize_namespace(self, namespace: CSharpNamespace) -> list[str]:
        body: list[str] = self._serialize_usings(namespace)
        for cls in namespace.classes:
            body.extend(self._serialize_class(cls))
        while body and not body[-1]:
            body.pop()

        lines = [f"namespace {namespace.name}", "{"]
        lines.extend(self._indent_lines(body, 1))
        lines.append("}")
        lines.append("")
        return lines

    def _serialize_class(self, cls: CSharpClass) -> list[str]:
        """Serialize a derived type declaration."""
        lines: list[str] = []

        modifiers = " ".join(m.value for m in cls.modifiers)
        if modifiers:
            modifiers = f" {modifiers}"
        lines.append(f"{cls.access.value}{modifiers} {cls.keyword} {cls.name}")
        lines.append("{")

        body: list[str] = []
        for member in cls.members:
            if body:
                body.append("")
            body.extend(self._serialize_member(member))
        lines.extend(self._indent_lines(body, 1))

        lines.append("}")
        lines.append("")
        return lines

    def _serialize_member(self, member: CSharpMember) -> list[str]:
        if isinstance(member, CSharpField):
            return self._serialize_field(member)
        if isinstance(member, CSharpProperty):
            return self._serialize_property(member)
        if isinstance(member, CSharpMethod):
            return self._serialize_method(member)
        if isinstance(member, CSharpConversionOperator):
            return self._serialize_operator(member)
        raise TypeError(f"Cannot serialize member of type {type(member).__name__}")

    def _serialize_field(self, field: CSharpField) -> list[str]:
        """Serialize a field declaration."""
        lines = [f"[{attr}]" for attr in field.attributes]
        declaration = self._join(field.modifiers, field.type_name, field.name)
        if field.initializer is not None:
            declaration += f" = {field.initializer}"
        lines.append(declaration + ";")
        return lines

    def _serialize_property(self, prop: CSharpProperty) -> list[str]:
        """Serialize a property declaration."""
        lines = [f"[{attr}]" for attr in prop.attributes]
        declaration = self._join(prop.modifiers, prop.type_name, prop.name)
        if prop.expression_body is not None:
            lines.append(f"{declaration} => {prop.expression_body};")
            return lines

        accessor_str = " ".join(f"{accessor};" for accessor in prop.accessors)
        declaration += f" {{ {accessor_str} }}"
        if prop.initializer is not None:
            declaration += f" = {prop.initializer};"
        lines.append(declaration)
        return lines

    def _serialize_method(self, method: CSharpMethod) -> list[str]:
        """Serialize a method declaration."""
        modifiers = " ".join(m.value for m in method.modifiers)
        if modifiers:
            modifiers = f" {modifiers}"
        params = ", ".join(f"{p.type_name} {p.name}" for p in method.parameters)
        signature = f"{method.access.value}{modifiers} {method.return_type} {method.name}({params})"

        if method.expression_body is not None:
            return [f"{signature} => {method.expression_body};"]

        lines = [signature, "{"]
        if method.returns is not None:
            lines.extend(self._indent_lines(self._serialize_initializer(method.returns), 1))
        lines.append("}")
        return lines

    def _serialize_initializer(self, initializer: ObjectInitializer) -> list[str]:
        if not initializer.assignments:
            return [f"return new {initializer.type_name}();"]
        lines = [f"return new {initializer.type_name}", "{"]
        for name, expression in initializer.assignments:
            lines.append(f"{self.INDENT}{name} = {expression},")
        lines.append("};")
        return lines

    def _serialize_operator(self, operator: CSharpConversionOperator) -> list[str]:
        parameter = f"{operator.parameter.type_name} {operator.parameter.name}"
        return [f"public static {operator.kind.value} operator {operator.target_type}({parameter}) => {operator.expression_body};"]

    def _join(self, modifiers: list[str], type_name: str, name: str) -> str:
        return " ".join([*modifiers, type_name, name])

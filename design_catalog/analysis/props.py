"""Prop extraction from parameter destructuring and local type declarations.

Types are recorded as the verbatim annotation text. Only declarations in the
same file are consulted; anything else yields the type "unknown".
"""

from dataclasses import dataclass

from tree_sitter import Node

from ..models import PropInfo
from .parsing import ParsedSource, property_key, string_value, unwrap

# Generic annotations whose first type argument is the props type.
COMPONENT_TYPE_NAMES = frozenset(
    {"FC", "FunctionComponent", "VFC", "VoidFunctionComponent", "ComponentType", "PropsWithChildren"}
)
# Utility types whose first argument carries the members unchanged.
PASSTHROUGH_TYPES = frozenset({"Readonly", "PropsWithChildren"})


@dataclass(frozen=True)
class TypeMember:
    name: str
    type: str
    optional: bool


class PropExtractor:
    """Extracts the prop list of one component function."""

    def __init__(self, parsed: ParsedSource):
        self.parsed = parsed
        self.declarations = self._collect_declarations()

    def extract(
        self,
        function: Node,
        declarator: Node | None = None,
        wrapper_call: Node | None = None,
    ) -> list[PropInfo]:
        """Build the prop list.

        Args:
            function: The component's function node.
            declarator: ``variable_declarator`` binding the component, if any.
            wrapper_call: Call wrapping the function, e.g. ``forwardRef<R, P>(...)``.
        """
        pattern, type_node = self._first_parameter(function)
        if type_node is None:
            type_node = self._type_from_declarator(declarator)
        if type_node is None and wrapper_call is not None:
            type_node = self._type_from_wrapper(wrapper_call)

        members = self.members(type_node) if type_node is not None else {}

        destructured: list[tuple[str, str | None]] = []
        if pattern is not None and pattern.type == "object_pattern":
            destructured = self._destructured(pattern)
        elif pattern is not None and pattern.type == "identifier":
            destructured = self._destructured_in_body(function, self.parsed.text(pattern))

        props: list[PropInfo] = []
        seen: set[str] = set()
        for name, default in destructured:
            if name in seen:
                continue
            seen.add(name)
            member = members.get(name)
            optional = member.optional if member else False
            props.append(
                PropInfo(
                    name=name,
                    type=member.type if member else "unknown",
                    required=default is None and not optional,
                    default=default,
                )
            )
        for name, member in members.items():
            if name not in seen:
                props.append(PropInfo(name=name, type=member.type, required=not member.optional))
        return props

    def _collect_declarations(self) -> dict[str, Node]:
        declarations: dict[str, Node] = {}
        for node in self.parsed.root.named_children:
            if node.type == "export_statement":
                inner = node.child_by_field_name("declaration")
                if inner is None:
                    continue
                node = inner
            if node.type in ("interface_declaration", "type_alias_declaration"):
                name = node.child_by_field_name("name")
                if name is not None:
                    declarations.setdefault(self.parsed.text(name), node)
        return declarations

    def _first_parameter(self, function: Node) -> tuple[Node | None, Node | None]:
        """Return (binding pattern, props type node) of the first parameter."""
        single = function.child_by_field_name("parameter")
        if single is not None:
            return single, None

        parameters = function.child_by_field_name("parameters")
        if parameters is None:
            return None, None
        candidates = [child for child in parameters.named_children if child.type != "comment"]
        if not candidates:
            return None, None
        param = candidates[0]

        type_node = None
        if param.type in ("required_parameter", "optional_parameter"):
            annotation = param.child_by_field_name("type")
            if annotation is not None and annotation.named_children:
                type_node = annotation.named_children[0]
            param = param.child_by_field_name("pattern") or param

        if param.type == "assignment_pattern":
            param = param.child_by_field_name("left") or param
        return param, type_node

    def _type_from_declarator(self, declarator: Node | None) -> Node | None:
        if declarator is None:
            return None
        annotation = declarator.child_by_field_name("type")
        if annotation is None or not annotation.named_children:
            return None
        annotated = annotation.named_children[0]
        if annotated.type != "generic_type":
            return None
        name = self.parsed.text(annotated.named_children[0]).split(".")[-1]
        arguments = self._type_arguments(annotated)
        if name in COMPONENT_TYPE_NAMES and arguments:
            return arguments[0]
        return None

    def _type_from_wrapper(self, call: Node) -> Node | None:
        """``forwardRef<Ref, Props>(...)`` carries props second, ``memo<Props>`` first."""
        arguments = self._type_arguments(call)
        if not arguments:
            return None
        callee = call.child_by_field_name("function")
        name = self.parsed.text(callee).split(".")[-1] if callee is not None else ""
        if name == "forwardRef":
            return arguments[1] if len(arguments) > 1 else None
        return arguments[0]

    @staticmethod
    def _type_arguments(node: Node) -> list[Node]:
        for child in node.children:
            if child.type == "type_arguments":
                return [arg for arg in child.named_children if arg.type != "comment"]
        return []

    def members(self, type_node: Node, visiting: frozenset[str] = frozenset()) -> dict[str, TypeMember]:
        """Resolve the members of a props type declared in this file."""
        kind = type_node.type
        if kind == "parenthesized_type" and type_node.named_children:
            return self.members(type_node.named_children[0], visiting)
        if kind in ("object_type", "interface_body"):
            return self._signature_members(type_node)
        if kind == "intersection_type":
            merged: dict[str, TypeMember] = {}
            for part in type_node.named_children:
                merged.update(self.members(part, visiting))
            return merged
        if kind == "type_identifier":
            return self._declared_members(self.parsed.text(type_node), visiting)
        if kind == "generic_type":
            name = self.parsed.text(type_node.named_children[0])
            arguments = self._type_arguments(type_node)
            if name.split(".")[-1] in PASSTHROUGH_TYPES and arguments:
                return self.members(arguments[0], visiting)
            return self._declared_members(name, visiting)
        return {}

    def _declared_members(self, name: str, visiting: frozenset[str]) -> dict[str, TypeMember]:
        declaration = self.declarations.get(name)
        if declaration is None or name in visiting:
            return {}
        visiting = visiting | {name}

        if declaration.type == "type_alias_declaration":
            value = declaration.child_by_field_name("value")
            return self.members(value, visiting) if value is not None else {}

        merged: dict[str, TypeMember] = {}
        for child in declaration.children:
            if child.type in ("extends_type_clause", "extends_clause"):
                for base in child.named_children:
                    merged.update(self.members(base, visiting))
        body = declaration.child_by_field_name("body")
        if body is not None:
            merged.update(self._signature_members(body))
        return merged

    def _signature_members(self, body: Node) -> dict[str, TypeMember]:
        members: dict[str, TypeMember] = {}
        for signature in body.named_children:
            if signature.type not in ("property_signature", "method_signature"):
                continue
            name = property_key(self.parsed, signature.child_by_field_name("name"))
            if name is None:
                continue
            optional = any(child.type == "?" for child in signature.children)
            if signature.type == "property_signature":
                annotation = signature.child_by_field_name("type")
                if annotation is not None and annotation.named_children:
                    type_text = self.parsed.text(annotation.named_children[0])
                else:
                    type_text = "unknown"
            else:
                text = self.parsed.text(signature)
                type_text = text[len(name) :].lstrip("?").strip().rstrip(";,")
            members[name] = TypeMember(name=name, type=type_text, optional=optional)
        return members

    def _destructured(self, pattern: Node) -> list[tuple[str, str | None]]:
        """(name, default) pairs of an object destructuring pattern."""
        entries: list[tuple[str, str | None]] = []
        for child in pattern.named_children:
            if child.type == "shorthand_property_identifier_pattern":
                entries.append((self.parsed.text(child), None))
            elif child.type == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                right = child.child_by_field_name("right")
                if left is not None:
                    entries.append((self.parsed.text(left), self._default_text(right)))
            elif child.type == "pair_pattern":
                key = property_key(self.parsed, child.child_by_field_name("key"))
                value = child.child_by_field_name("value")
                if key is None:
                    continue
                default = None
                if value is not None and value.type == "assignment_pattern":
                    default = self._default_text(value.child_by_field_name("right"))
                entries.append((key, default))
        return entries

    def _destructured_in_body(self, function: Node, param_name: str) -> list[tuple[str, str | None]]:
        """Handle ``const { a, b = 1 } = props;`` at the top of the body."""
        body = function.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return []
        entries: list[tuple[str, str | None]] = []
        for statement in body.named_children:
            if statement.type not in ("lexical_declaration", "variable_declaration"):
                continue
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = unwrap(declarator.child_by_field_name("value"))
                if (
                    name is not None
                    and name.type == "object_pattern"
                    and value is not None
                    and self.parsed.text(value) == param_name
                ):
                    entries.extend(self._destructured(name))
        return entries

    def _default_text(self, node: Node | None) -> str | None:
        if node is None:
            return None
        if node.type == "string":
            return string_value(self.parsed, node)
        return self.parsed.text(node)
